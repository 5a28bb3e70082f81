"""Indicator framework.

Indicators describe a single numeric measurement; evaluators compute it.
The ``IndicatorService`` routes each indicator to the evaluator registered
for its type.

Usage:
    service = IndicatorService()
    service.register(HivCareVisitIndicatorEvaluator(data_service, cohort_service))
    result = service.evaluate(indicator, context)
    print(result.numerator_result)
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TypeVar

from hivqi.core.exceptions import EvaluationError
from hivqi.evaluation.context import EvaluationContext, Parameter

logger = logging.getLogger(__name__)


@dataclass
class Indicator:
    """Base class for all indicators."""

    name: str = ""
    description: str = ""
    parameters: list[Parameter] = field(default_factory=list)

    def add_parameter(self, parameter: Parameter) -> None:
        self.parameters.append(parameter)


@dataclass
class SimpleIndicatorResult:
    """Numerator (and optional denominator) computed for an indicator.

    Numerator-only indicators leave ``denominator_result`` as None.
    """

    indicator: Indicator
    context: EvaluationContext
    numerator_result: int = 0
    denominator_result: int | None = None

    @property
    def value(self) -> float | int:
        """Numerator, or numerator/denominator when a denominator is set."""
        if self.denominator_result is None:
            return self.numerator_result
        if self.denominator_result == 0:
            return 0.0
        return self.numerator_result / self.denominator_result


class IndicatorEvaluator(ABC):
    """Abstract base for indicator evaluators.

    Subclasses declare the indicator types they handle with ``@handler``.
    """

    supports: tuple[type[Indicator], ...] = ()

    @abstractmethod
    def evaluate(self, indicator: Indicator, context: EvaluationContext) -> SimpleIndicatorResult:
        """Evaluate ``indicator`` under ``context``.

        Raises:
            EvaluationError: If the indicator cannot be evaluated.
        """


E = TypeVar("E", bound=type[IndicatorEvaluator])


def handler(*supports: type[Indicator]) -> Callable[[E], E]:
    """Class decorator declaring which indicator types an evaluator handles."""

    def decorate(cls: E) -> E:
        cls.supports = supports
        return cls

    return decorate


class IndicatorService:
    """Registry and dispatcher of indicator evaluators."""

    def __init__(self) -> None:
        self._evaluators: dict[type[Indicator], IndicatorEvaluator] = {}

    def register(
        self,
        evaluator: IndicatorEvaluator,
        indicator_type: type[Indicator] | None = None,
    ) -> None:
        """Register ``evaluator`` for ``indicator_type`` or its declared types."""
        types = (indicator_type,) if indicator_type is not None else evaluator.supports
        if not types:
            raise ValueError(f"{type(evaluator).__name__} does not declare supported indicators")
        for supported in types:
            self._evaluators[supported] = evaluator
            logger.debug(f"Registered {type(evaluator).__name__} for {supported.__name__}")

    def get_evaluator(self, indicator: Indicator) -> IndicatorEvaluator | None:
        """Find the evaluator registered for the most specific type of ``indicator``."""
        for indicator_type in type(indicator).__mro__:
            evaluator = self._evaluators.get(indicator_type)
            if evaluator is not None:
                return evaluator
        return None

    def evaluate(self, indicator: Indicator, context: EvaluationContext) -> SimpleIndicatorResult:
        evaluator = self.get_evaluator(indicator)
        if evaluator is None:
            raise EvaluationError(f"No evaluator registered for {type(indicator).__name__}")
        return evaluator.evaluate(indicator, context)

    def evaluate_all(
        self,
        indicators: dict[str, Indicator],
        context: EvaluationContext,
    ) -> dict[str, SimpleIndicatorResult]:
        """Evaluate several indicators under the same context, keyed like the input."""
        return {name: self.evaluate(indicator, context) for name, indicator in indicators.items()}
