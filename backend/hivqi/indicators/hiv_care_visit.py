"""HIV care visit indicators.

Counts encounters recorded on the HIV care forms (clinical encounter HIV
addendum and MOH 257 visit summary) within a reporting period, optionally
restricted to one of:

    - females aged 18 and over on the period end date
    - scheduled visits: the patient had a return visit date recorded for
      the day of the visit
    - unscheduled visits: every other visit

Only a numerator is produced.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, replace
from datetime import date, datetime
from enum import Enum
from typing import assert_never

from hivqi.cohort.library import females_aged_over
from hivqi.cohort.service import CohortDefinitionService, EvaluatedCohort
from hivqi.core.audit import log_indicator_evaluation
from hivqi.core.config import settings
from hivqi.core.exceptions import EvaluationError, MetadataNotFoundError
from hivqi.evaluation.context import EvaluationContext
from hivqi.evaluation.dates import end_of_day_if_time_excluded, is_same_day, to_datetime
from hivqi.indicators.base import Indicator, IndicatorEvaluator, SimpleIndicatorResult, handler
from hivqi.metadata import MetadataConstants
from hivqi.models import Encounter, Form
from hivqi.services.clinical_data import ClinicalDataService

logger = logging.getLogger(__name__)


class HivCareVisitFilter(str, Enum):
    """Which HIV care visits an indicator counts."""

    NONE = "none"
    FEMALES_18_AND_OVER = "females_18_and_over"
    SCHEDULED = "scheduled"
    UNSCHEDULED = "unscheduled"


@dataclass
class HivCareVisitIndicator(Indicator):
    """Number of HIV care visits in a period.

    Attributes:
        start_date: Start of the reporting period (a plain date means midnight).
        end_date: End of the reporting period.
        filter: Which visits to count.
        end_date_time_included: Whether ``end_date`` carries a meaningful time
            of day. None decides by type: plain dates cover the whole day.
    """

    start_date: date | datetime | None = None
    end_date: date | datetime | None = None
    filter: HivCareVisitFilter = HivCareVisitFilter.NONE
    end_date_time_included: bool | None = None


@handler(HivCareVisitIndicator)
class HivCareVisitIndicatorEvaluator(IndicatorEvaluator):
    """Evaluator for HIV care visit indicators.

    Example:
        evaluator = HivCareVisitIndicatorEvaluator(data_service, cohort_service)
        result = evaluator.evaluate(indicator, context)
    """

    def __init__(
        self,
        data_service: ClinicalDataService,
        cohort_service: CohortDefinitionService,
        metadata: MetadataConstants | None = None,
        adult_min_age: int | None = None,
    ) -> None:
        self.data_service = data_service
        self.cohort_service = cohort_service
        self.metadata = metadata or MetadataConstants.from_settings()
        self.adult_min_age = adult_min_age if adult_min_age is not None else settings.adult_min_age

    def evaluate(self, indicator: Indicator, context: EvaluationContext) -> SimpleIndicatorResult:
        if not isinstance(indicator, HivCareVisitIndicator):
            raise EvaluationError(f"{type(self).__name__} cannot evaluate {type(indicator).__name__}")

        period = self._with_reporting_period(indicator, context)
        audit_details = {
            "filter": period.filter.value,
            "start_date": str(period.start_date),
            "end_date": str(period.end_date),
        }

        try:
            encounters = self._hiv_care_encounters(period)
            filtered = self._apply_filter(period, encounters, context)
        except Exception as e:
            log_indicator_evaluation(indicator.name, {**audit_details, "error": str(e)}, success=False)
            if isinstance(e, EvaluationError):
                raise
            raise EvaluationError(f"Unable to evaluate indicator '{indicator.name}': {e}") from e

        logger.debug(
            f"{indicator.name}: {len(filtered)}/{len(encounters)} encounters kept by filter "
            f"{indicator.filter.value}"
        )
        logger.info(f"Evaluated {indicator.name or 'HIV care visits'}: numerator={len(filtered)}")
        log_indicator_evaluation(indicator.name, {**audit_details, "numerator": len(filtered)})

        return SimpleIndicatorResult(
            indicator=indicator,
            context=context,
            numerator_result=len(filtered),
        )

    @staticmethod
    def _with_reporting_period(
        indicator: HivCareVisitIndicator,
        context: EvaluationContext,
    ) -> HivCareVisitIndicator:
        """Copy of ``indicator`` with unset period dates taken from the context.

        Only used to compute the numerator; results reference the caller's indicator.
        """
        if indicator.start_date is not None and indicator.end_date is not None:
            return indicator
        return replace(
            indicator,
            start_date=indicator.start_date or context.get_parameter_value("startDate"),
            end_date=indicator.end_date or context.get_parameter_value("endDate"),
        )

    def _hiv_care_forms(self) -> list[Form]:
        forms = []
        for uuid in self.metadata.hiv_care_form_uuids():
            form = self.data_service.get_form_by_uuid(uuid)
            if form is None:
                raise MetadataNotFoundError("form", uuid)
            forms.append(form)
        return forms

    def _hiv_care_encounters(self, indicator: HivCareVisitIndicator) -> list[Encounter]:
        from_date = to_datetime(indicator.start_date)
        to_date = end_of_day_if_time_excluded(indicator.end_date, indicator.end_date_time_included)

        return self.data_service.get_encounters(from_date, to_date, self._hiv_care_forms())

    def _apply_filter(
        self,
        indicator: HivCareVisitIndicator,
        encounters: Sequence[Encounter],
        context: EvaluationContext,
    ) -> list[Encounter]:
        match indicator.filter:
            case HivCareVisitFilter.NONE:
                return list(encounters)
            case HivCareVisitFilter.FEMALES_18_AND_OVER:
                cohort = self._females_18_and_over(indicator.end_date, context)
                return [enc for enc in encounters if cohort.contains(enc.patient_id)]
            case HivCareVisitFilter.SCHEDULED:
                return_visit_dates = self._return_visit_dates(encounters)
                return [enc for enc in encounters if self._was_scheduled_visit(enc, return_visit_dates)]
            case HivCareVisitFilter.UNSCHEDULED:
                return_visit_dates = self._return_visit_dates(encounters)
                return [enc for enc in encounters if not self._was_scheduled_visit(enc, return_visit_dates)]
            case _:
                assert_never(indicator.filter)

    def _females_18_and_over(
        self,
        end_date: date | datetime | None,
        context: EvaluationContext,
    ) -> EvaluatedCohort:
        """Females of adult age, with age taken on the period end date."""
        if end_date is None:
            raise EvaluationError("Age-based filters require an end date")
        return females_aged_over(self.cohort_service, end_date, context, self.adult_min_age)

    def _return_visit_dates(self, encounters: Sequence[Encounter]) -> dict[int, list[datetime]]:
        """Recorded return visit dates of every patient in ``encounters``.

        Patient-wide, not restricted to the reporting period.
        """
        if not encounters:
            return {}

        uuid = self.metadata.return_visit_date_concept_uuid
        concept = self.data_service.get_concept_by_uuid(uuid)
        if concept is None:
            raise MetadataNotFoundError("concept", uuid)

        observations = self.data_service.get_observations_for_persons(
            {enc.patient_id for enc in encounters},
            concept,
        )
        return {
            person_id: [obs.value_datetime for obs in obss if obs.value_datetime is not None]
            for person_id, obss in observations.items()
        }

    def _was_scheduled_visit(
        self,
        encounter: Encounter,
        return_visit_dates: dict[int, list[datetime]],
    ) -> bool:
        """Whether the patient was due back on the day of this encounter's visit."""
        visit_date = encounter.effective_datetime
        return any(
            is_same_day(return_date, visit_date)
            for return_date in return_visit_dates.get(encounter.patient_id, ())
        )
