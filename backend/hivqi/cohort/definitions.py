"""Cohort definitions.

Definitions are plain values describing *who* belongs to a cohort; the
``CohortDefinitionService`` turns them into an ``EvaluatedCohort``. A
composition definition combines named sub-searches with a boolean
composition string such as ``"females AND aged18AndOver"``.
"""

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field, fields, replace
from datetime import date, datetime
from typing import Any, Generic, TypeVar

from hivqi.core.exceptions import EvaluationError
from hivqi.evaluation.context import EvaluationContext, Parameter

_PARAMETER_REF = re.compile(r"^\$\{(?P<name>[A-Za-z_][A-Za-z0-9_]*)\}$")


@dataclass
class CohortDefinition(ABC):
    """Base class for all cohort definitions."""

    name: str = ""
    description: str = ""
    parameters: list[Parameter] = field(default_factory=list)

    def add_parameter(self, parameter: Parameter) -> None:
        self.parameters.append(parameter)

    @abstractmethod
    def cache_key(self, context: EvaluationContext) -> str:
        """Stable key describing what this definition selects."""


@dataclass
class GenderCohortDefinition(CohortDefinition):
    """Patients whose recorded gender is one of the included genders."""

    male_included: bool = False
    female_included: bool = False
    unknown_gender_included: bool = False

    def cache_key(self, context: EvaluationContext) -> str:
        return (
            f"gender:m={int(self.male_included)}"
            f",f={int(self.female_included)}"
            f",u={int(self.unknown_gender_included)}"
        )


@dataclass
class AgeCohortDefinition(CohortDefinition):
    """Patients whose age on ``effective_date`` lies in [min_age, max_age].

    A missing ``effective_date`` means the context's evaluation date.
    """

    min_age: int | None = None
    max_age: int | None = None
    effective_date: date | datetime | None = None
    unknown_age_included: bool = False

    def cache_key(self, context: EvaluationContext) -> str:
        effective = self.effective_date or context.evaluation_date
        as_date = effective.date() if isinstance(effective, datetime) else effective
        return (
            f"age:min={self.min_age},max={self.max_age}"
            f",on={as_date.isoformat()},u={int(self.unknown_age_included)}"
        )


D = TypeVar("D", bound=CohortDefinition)


@dataclass
class Mapped(Generic[D]):
    """A definition plus how its fields are filled from the context.

    Mapping values written as ``"${name}"`` are looked up in the context's
    parameter values; anything else is used literally.
    """

    parameterizable: D
    parameter_mappings: dict[str, Any] | None = None

    def resolve(self, context: EvaluationContext) -> D:
        """Return a copy of the definition with mapped fields substituted."""
        if not self.parameter_mappings:
            return self.parameterizable

        known = {f.name for f in fields(self.parameterizable)}
        values: dict[str, Any] = {}
        for field_name, mapping in self.parameter_mappings.items():
            if field_name not in known:
                raise EvaluationError(
                    f"{type(self.parameterizable).__name__} has no parameter '{field_name}'"
                )
            ref = _PARAMETER_REF.match(mapping) if isinstance(mapping, str) else None
            if ref is None:
                values[field_name] = mapping
                continue
            parameter = ref.group("name")
            if not context.contains_parameter(parameter):
                raise EvaluationError(f"No value for parameter '{parameter}' in evaluation context")
            values[field_name] = context.get_parameter_value(parameter)

        return replace(self.parameterizable, **values)


@dataclass
class CompositionCohortDefinition(CohortDefinition):
    """Boolean combination of named sub-searches."""

    searches: dict[str, Mapped[CohortDefinition]] = field(default_factory=dict)
    composition_string: str = ""

    def add_search(self, key: str, mapped: Mapped[CohortDefinition]) -> None:
        self.searches[key] = mapped

    def cache_key(self, context: EvaluationContext) -> str:
        parts = [
            f"{key}=[{mapped.resolve(context).cache_key(context)}]"
            for key, mapped in sorted(self.searches.items())
        ]
        return f"composition:{self.composition_string}:" + ";".join(parts)
