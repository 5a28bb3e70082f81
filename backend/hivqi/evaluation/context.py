"""Evaluation context and parameters."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class Parameter:
    """A named input that a definition expects from the evaluation context."""

    name: str
    label: str
    type: type = object


@dataclass
class EvaluationContext:
    """Cohort and parameter values under which something is evaluated.

    Attributes:
        base_cohort: Optional set of person ids restricting the population.
            None means the full population.
        parameter_values: Named parameter values (e.g. ``startDate``).
        evaluation_date: When the evaluation was requested.
    """

    base_cohort: frozenset[int] | None = None
    parameter_values: dict[str, Any] = field(default_factory=dict)
    evaluation_date: datetime = field(default_factory=datetime.now)

    def add_parameter_value(self, name: str, value: Any) -> None:
        self.parameter_values[name] = value

    def get_parameter_value(self, name: str, default: Any = None) -> Any:
        return self.parameter_values.get(name, default)

    def contains_parameter(self, name: str) -> bool:
        return name in self.parameter_values

    def restrict(self, person_ids: set[int] | frozenset[int]) -> frozenset[int]:
        """Intersect ``person_ids`` with the base cohort, if one is set."""
        if self.base_cohort is None:
            return frozenset(person_ids)
        return frozenset(person_ids) & self.base_cohort


def reporting_context(
    cohort: list[int] | None,
    start_date: Any,
    end_date: Any,
) -> EvaluationContext:
    """Build a context for a reporting period with ``startDate``/``endDate`` set."""
    context = EvaluationContext(base_cohort=frozenset(cohort) if cohort is not None else None)
    context.add_parameter_value("startDate", start_date)
    context.add_parameter_value("endDate", end_date)
    return context
