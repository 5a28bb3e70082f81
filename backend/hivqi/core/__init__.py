"""Core configuration and utilities."""

from hivqi.core.audit import AuditAction, AuditEvent, log_audit, log_data_access, log_indicator_evaluation
from hivqi.core.config import settings
from hivqi.core.database import Base, session_scope
from hivqi.core.exceptions import CompositionError, EvaluationError, MetadataNotFoundError

__all__ = [
    # Config
    "settings",
    # Database
    "Base",
    "session_scope",
    # Errors
    "EvaluationError",
    "MetadataNotFoundError",
    "CompositionError",
    # Audit
    "AuditAction",
    "AuditEvent",
    "log_audit",
    "log_data_access",
    "log_indicator_evaluation",
]
