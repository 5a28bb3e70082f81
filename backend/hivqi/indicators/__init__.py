"""Indicator definitions and evaluators."""

from hivqi.indicators.base import (
    Indicator,
    IndicatorEvaluator,
    IndicatorService,
    SimpleIndicatorResult,
    handler,
)
from hivqi.indicators.factory import get_indicator_service
from hivqi.indicators.hiv_care_visit import (
    HivCareVisitFilter,
    HivCareVisitIndicator,
    HivCareVisitIndicatorEvaluator,
)
from hivqi.indicators.library import QiIndicatorLibrary

__all__ = [
    # Framework
    "Indicator",
    "IndicatorEvaluator",
    "IndicatorService",
    "SimpleIndicatorResult",
    "handler",
    # HIV care visits
    "HivCareVisitFilter",
    "HivCareVisitIndicator",
    "HivCareVisitIndicatorEvaluator",
    # Library
    "QiIndicatorLibrary",
    "get_indicator_service",
]
