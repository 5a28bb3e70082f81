"""Cohort definitions, composition algebra and evaluation."""

from hivqi.cohort.composition import parse_composition
from hivqi.cohort.definitions import (
    AgeCohortDefinition,
    CohortDefinition,
    CompositionCohortDefinition,
    GenderCohortDefinition,
    Mapped,
)
from hivqi.cohort.library import females_aged_over, females_aged_over_definition
from hivqi.cohort.service import CohortCache, CohortDefinitionService, EvaluatedCohort

__all__ = [
    # Definitions
    "CohortDefinition",
    "GenderCohortDefinition",
    "AgeCohortDefinition",
    "CompositionCohortDefinition",
    "Mapped",
    "parse_composition",
    # Evaluation
    "CohortDefinitionService",
    "CohortCache",
    "EvaluatedCohort",
    # Library
    "females_aged_over",
    "females_aged_over_definition",
]
