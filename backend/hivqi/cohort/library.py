"""Reusable cohort definitions for HIV care indicators."""

from datetime import date, datetime

from hivqi.cohort.definitions import (
    AgeCohortDefinition,
    CompositionCohortDefinition,
    GenderCohortDefinition,
    Mapped,
)
from hivqi.cohort.service import CohortDefinitionService, EvaluatedCohort
from hivqi.evaluation.context import EvaluationContext, Parameter


def females_aged_over_definition(
    threshold_date: date | datetime,
    min_age: int = 18,
) -> CompositionCohortDefinition:
    """Females aged ``min_age`` or over on ``threshold_date``.

    Built fresh on every call; nothing is shared between calls.
    """
    females = GenderCohortDefinition(name="Gender = Female", female_included=True)

    aged_key = f"aged{min_age}AndOver"
    aged_over = AgeCohortDefinition(
        name=f"Age >= {min_age}",
        min_age=min_age,
        effective_date=threshold_date,
    )

    composition = CompositionCohortDefinition(name=f"Females aged {min_age} and over")
    composition.add_parameter(Parameter("fromDate", "From Date", date))
    composition.add_parameter(Parameter("toDate", "To Date", date))
    composition.add_search("females", Mapped(females, None))
    composition.add_search(aged_key, Mapped(aged_over, None))
    composition.composition_string = f"females AND {aged_key}"
    return composition


def females_aged_over(
    cohort_service: CohortDefinitionService,
    threshold_date: date | datetime,
    context: EvaluationContext,
    min_age: int = 18,
) -> EvaluatedCohort:
    """Evaluate the cohort of females aged ``min_age`` and over on ``threshold_date``.

    Raises:
        EvaluationError: If the cohort service cannot resolve a sub-search.
    """
    return cohort_service.evaluate(females_aged_over_definition(threshold_date, min_age), context)
