"""Evaluation context, parameters and reporting date rules."""

from hivqi.evaluation.context import EvaluationContext, Parameter, reporting_context
from hivqi.evaluation.dates import (
    age_on,
    end_of_day,
    end_of_day_if_time_excluded,
    is_same_day,
    start_of_day,
    to_datetime,
)

__all__ = [
    "EvaluationContext",
    "Parameter",
    "reporting_context",
    "age_on",
    "end_of_day",
    "end_of_day_if_time_excluded",
    "is_same_day",
    "start_of_day",
    "to_datetime",
]
