"""Wiring of indicator evaluators to their data and cohort services."""

import logging

from sqlalchemy.orm import Session

from hivqi.cohort.service import CohortCache, CohortDefinitionService
from hivqi.core.config import settings
from hivqi.core.redis import get_redis
from hivqi.indicators.base import IndicatorService
from hivqi.indicators.hiv_care_visit import HivCareVisitIndicatorEvaluator
from hivqi.services.clinical_data import SqlClinicalDataService

logger = logging.getLogger(__name__)


def get_indicator_service(
    session: Session,
    cache_enabled: bool | None = None,
    snapshot_version: str = "0",
) -> IndicatorService:
    """Build an ``IndicatorService`` backed by ``session``.

    Args:
        session: Database session used for all reads.
        cache_enabled: Memoize evaluated cohorts in Redis. Defaults to
            ``settings.cohort_cache_enabled``.
        snapshot_version: Version of the data snapshot, part of every cache key.
    """
    if cache_enabled is None:
        cache_enabled = settings.cohort_cache_enabled

    cache = None
    if cache_enabled:
        logger.info(f"Cohort cache enabled (snapshot {snapshot_version})")
        cache = CohortCache(get_redis(), snapshot_version, settings.cohort_cache_ttl_seconds)

    data_service = SqlClinicalDataService(session)
    cohort_service = CohortDefinitionService(data_service, cache=cache)

    service = IndicatorService()
    service.register(HivCareVisitIndicatorEvaluator(data_service, cohort_service))
    return service
