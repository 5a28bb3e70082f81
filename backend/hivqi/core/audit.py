"""Audit logging for clinical data access.

Indicator evaluation reads patient-level encounter and observation data,
so every evaluation and every patient-level read is recorded. This audit
log should be persisted to a secure, append-only store in production.
"""

import logging
from collections.abc import Iterable
from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, Field

# Separate audit logger for security-critical events
audit_logger = logging.getLogger("audit")


class AuditAction(str, Enum):
    """Types of auditable actions."""

    READ = "read"
    EVALUATE = "evaluate"
    ERROR = "error"


class AuditEvent(BaseModel):
    """Audit event record for a read or an indicator evaluation."""

    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
    action: AuditAction = Field(..., description="Type of action performed")
    resource_type: str = Field(..., description="Table or indicator accessed, e.g. 'obs'")
    resource_id: str | None = Field(None, description="Concept UUID or indicator name")
    person_ids: list[int] = Field(default_factory=list, description="Patients whose data was read")
    details: dict | None = Field(None, description="Additional context")
    success: bool = Field(True, description="Whether action succeeded")


def log_audit(
    action: AuditAction,
    resource_type: str,
    resource_id: str | None = None,
    person_ids: Iterable[int] = (),
    details: dict | None = None,
    success: bool = True,
) -> AuditEvent:
    """Log an audit event.

    Args:
        action: Type of action being audited
        resource_type: Table or indicator being accessed
        resource_id: Concept UUID, indicator name or other identifier
        person_ids: Patients whose records were read
        details: Additional context
        success: Whether the action succeeded

    Returns:
        The created AuditEvent
    """
    event = AuditEvent(
        action=action,
        resource_type=resource_type,
        resource_id=resource_id,
        person_ids=sorted(set(person_ids)),
        details=details,
        success=success,
    )

    log_level = logging.INFO if success else logging.WARNING
    audit_logger.log(
        log_level,
        f"AUDIT: {action.value} {resource_type}"
        f"{f'/{resource_id}' if resource_id else ''}"
        f"{f' persons={len(event.person_ids)}' if event.person_ids else ''}"
        f" success={success}",
        extra={"audit_event": event.model_dump()},
    )

    return event


def log_data_access(
    resource_type: str,
    resource_id: str | None = None,
    person_ids: Iterable[int] = (),
    details: dict | None = None,
) -> AuditEvent:
    """Log a read of patient data."""
    return log_audit(
        action=AuditAction.READ,
        resource_type=resource_type,
        resource_id=resource_id,
        person_ids=person_ids,
        details=details,
    )


def log_indicator_evaluation(
    indicator_name: str,
    details: dict,
    success: bool = True,
) -> AuditEvent:
    """Log the evaluation of an indicator over patient data.

    Args:
        indicator_name: Name of the evaluated indicator
        details: Filter, reporting period and result (or error)
        success: Whether the evaluation completed

    Returns:
        The created AuditEvent
    """
    return log_audit(
        action=AuditAction.EVALUATE if success else AuditAction.ERROR,
        resource_type="indicator",
        resource_id=indicator_name,
        details=details,
        success=success,
    )
