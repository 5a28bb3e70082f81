"""Cohort definition evaluation service.

Resolves cohort definitions against the patient population supplied by a
``ClinicalDataService`` and returns the matching person ids.
"""

import hashlib
import json
import logging
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from datetime import date

from redis import Redis
from redis.exceptions import RedisError

from hivqi.cohort.composition import parse_composition
from hivqi.cohort.definitions import (
    AgeCohortDefinition,
    CohortDefinition,
    CompositionCohortDefinition,
    GenderCohortDefinition,
)
from hivqi.core.exceptions import CompositionError, EvaluationError
from hivqi.evaluation.context import EvaluationContext
from hivqi.evaluation.dates import age_on
from hivqi.models import Person
from hivqi.services.clinical_data import ClinicalDataService

logger = logging.getLogger(__name__)

FEMALE_CODES = {"F", "FEMALE"}
MALE_CODES = {"M", "MALE"}


@dataclass(frozen=True)
class EvaluatedCohort:
    """A resolved set of person ids plus what produced it."""

    member_ids: frozenset[int]
    definition: CohortDefinition | None = field(default=None, compare=False)
    context: EvaluationContext | None = field(default=None, compare=False)

    def contains(self, person_id: int) -> bool:
        return person_id in self.member_ids

    def __contains__(self, person_id: object) -> bool:
        return person_id in self.member_ids

    def __iter__(self) -> Iterator[int]:
        return iter(self.member_ids)

    def __len__(self) -> int:
        return len(self.member_ids)

    @property
    def size(self) -> int:
        return len(self.member_ids)


class CohortCache:
    """Redis-backed memo of evaluated cohorts.

    Entries are keyed by definition, threshold dates and a data snapshot
    version; bump the version whenever the underlying data changes.
    Redis failures are logged and treated as cache misses.
    """

    PREFIX = "hivqi:cohort"

    def __init__(self, redis: Redis, snapshot_version: str = "0", ttl_seconds: int = 3600) -> None:
        self.redis = redis
        self.snapshot_version = snapshot_version
        self.ttl_seconds = ttl_seconds

    def _key(self, definition_key: str) -> str:
        digest = hashlib.sha256(definition_key.encode("utf-8")).hexdigest()
        return f"{self.PREFIX}:{self.snapshot_version}:{digest}"

    def get(self, definition_key: str) -> frozenset[int] | None:
        try:
            raw = self.redis.get(self._key(definition_key))
        except RedisError as e:
            logger.warning(f"Cohort cache read failed: {e}")
            return None
        if raw is None:
            return None
        return frozenset(json.loads(raw))

    def set(self, definition_key: str, member_ids: frozenset[int]) -> None:
        try:
            self.redis.set(
                self._key(definition_key),
                json.dumps(sorted(member_ids)),
                ex=self.ttl_seconds,
            )
        except RedisError as e:
            logger.warning(f"Cohort cache write failed: {e}")


class CohortDefinitionService:
    """Evaluates cohort definitions into ``EvaluatedCohort`` values.

    Primitive definitions are resolved against the full non-voided
    population; the context's base cohort (if any) is applied to the final
    result.

    Usage:
        service = CohortDefinitionService(SqlClinicalDataService(session))
        cohort = service.evaluate(definition, context)
        if cohort.contains(person_id):
            ...
    """

    def __init__(self, data_service: ClinicalDataService, cache: CohortCache | None = None) -> None:
        self.data_service = data_service
        self.cache = cache

    def evaluate(self, definition: CohortDefinition, context: EvaluationContext) -> EvaluatedCohort:
        """Evaluate ``definition`` under ``context``.

        Raises:
            EvaluationError: If any sub-search cannot be resolved.
        """
        try:
            cache_key = definition.cache_key(context) if self.cache else None
            member_ids = self.cache.get(cache_key) if self.cache else None

            if member_ids is None:
                population = {person.person_id: person for person in self.data_service.get_persons()}
                member_ids = frozenset(self._evaluate(definition, context, population))
                if self.cache:
                    self.cache.set(cache_key, member_ids)
            else:
                logger.debug(f"Cohort cache hit for '{definition.name}'")
        except EvaluationError:
            raise
        except Exception as e:
            raise EvaluationError(f"Unable to evaluate cohort '{definition.name}': {e}") from e

        cohort = EvaluatedCohort(
            member_ids=context.restrict(member_ids),
            definition=definition,
            context=context,
        )
        logger.debug(f"Cohort '{definition.name}' has {cohort.size} members")
        return cohort

    def _evaluate(
        self,
        definition: CohortDefinition,
        context: EvaluationContext,
        population: Mapping[int, Person],
    ) -> set[int]:
        match definition:
            case GenderCohortDefinition():
                return self._evaluate_gender(definition, population)
            case AgeCohortDefinition():
                return self._evaluate_age(definition, context, population)
            case CompositionCohortDefinition():
                return self._evaluate_composition(definition, context, population)
            case _:
                raise EvaluationError(
                    f"No evaluator for cohort definition type {type(definition).__name__}"
                )

    def _evaluate_gender(
        self,
        definition: GenderCohortDefinition,
        population: Mapping[int, Person],
    ) -> set[int]:
        members = set()
        for person_id, person in population.items():
            gender = (person.gender or "").strip().upper()
            if gender in FEMALE_CODES:
                included = definition.female_included
            elif gender in MALE_CODES:
                included = definition.male_included
            else:
                included = definition.unknown_gender_included
            if included:
                members.add(person_id)
        return members

    def _evaluate_age(
        self,
        definition: AgeCohortDefinition,
        context: EvaluationContext,
        population: Mapping[int, Person],
    ) -> set[int]:
        effective: date = definition.effective_date or context.evaluation_date
        members = set()
        for person_id, person in population.items():
            if person.birthdate is None:
                if definition.unknown_age_included:
                    members.add(person_id)
                continue
            age = age_on(person.birthdate, effective)
            if definition.min_age is not None and age < definition.min_age:
                continue
            if definition.max_age is not None and age > definition.max_age:
                continue
            members.add(person_id)
        return members

    def _evaluate_composition(
        self,
        definition: CompositionCohortDefinition,
        context: EvaluationContext,
        population: Mapping[int, Person],
    ) -> set[int]:
        expression = parse_composition(definition.composition_string)

        unknown = expression.keys() - definition.searches.keys()
        if unknown:
            raise CompositionError(
                f"Composition '{definition.composition_string}' references unknown "
                f"searches: {', '.join(sorted(unknown))}"
            )

        results = {
            key: self._evaluate(definition.searches[key].resolve(context), context, population)
            for key in expression.keys()
        }
        return expression.evaluate(results, set(population))
