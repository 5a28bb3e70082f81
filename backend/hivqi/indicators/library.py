"""Library of quality improvement (QI) indicators for HIV care.

Indicators built here leave their reporting period unset and declare
``startDate``/``endDate`` parameters; the period is taken from the
evaluation context when they are evaluated.

Usage:
    library = QiIndicatorLibrary()
    context = reporting_context(None, date(2012, 6, 1), date(2012, 6, 30))
    results = indicator_service.evaluate_all(library.all_indicators(), context)
"""

from datetime import date

from hivqi.evaluation.context import Parameter
from hivqi.indicators.hiv_care_visit import HivCareVisitFilter, HivCareVisitIndicator


class QiIndicatorLibrary:
    """Factory of named HIV care visit indicators."""

    def _hiv_care_visits(self, name: str, description: str, visit_filter: HivCareVisitFilter) -> HivCareVisitIndicator:
        indicator = HivCareVisitIndicator(name=name, description=description, filter=visit_filter)
        indicator.add_parameter(Parameter("startDate", "Start Date", date))
        indicator.add_parameter(Parameter("endDate", "End Date", date))
        return indicator

    def hiv_care_visits_total(self) -> HivCareVisitIndicator:
        return self._hiv_care_visits(
            "hiv_care_visits_total",
            "Total HIV care visits",
            HivCareVisitFilter.NONE,
        )

    def hiv_care_visits_females_18_and_over(self) -> HivCareVisitIndicator:
        return self._hiv_care_visits(
            "hiv_care_visits_females_18_and_over",
            "HIV care visits by females aged 18 and over",
            HivCareVisitFilter.FEMALES_18_AND_OVER,
        )

    def hiv_care_visits_scheduled(self) -> HivCareVisitIndicator:
        return self._hiv_care_visits(
            "hiv_care_visits_scheduled",
            "Scheduled HIV care visits",
            HivCareVisitFilter.SCHEDULED,
        )

    def hiv_care_visits_unscheduled(self) -> HivCareVisitIndicator:
        return self._hiv_care_visits(
            "hiv_care_visits_unscheduled",
            "Unscheduled HIV care visits",
            HivCareVisitFilter.UNSCHEDULED,
        )

    def all_indicators(self) -> dict[str, HivCareVisitIndicator]:
        """Every indicator in the library, keyed by name."""
        indicators = [
            self.hiv_care_visits_total(),
            self.hiv_care_visits_females_18_and_over(),
            self.hiv_care_visits_scheduled(),
            self.hiv_care_visits_unscheduled(),
        ]
        return {indicator.name: indicator for indicator in indicators}
