"""Clinical data service.

Read-only access to forms, concepts, encounters, observations and patients.
Indicator and cohort evaluators depend on the ``ClinicalDataService``
protocol rather than on a database session, so tests and alternative
backends can supply their own implementation.
"""

import logging
from collections import defaultdict
from collections.abc import Iterable, Sequence
from datetime import datetime
from typing import Protocol

from sqlalchemy import select
from sqlalchemy.orm import Session, joinedload

from hivqi.core.audit import log_data_access
from hivqi.models import Concept, Encounter, Form, Obs, Person

logger = logging.getLogger(__name__)

# Keep IN (...) lists well under SQLite's bound-parameter limit
DEFAULT_BATCH_SIZE = 500


class ClinicalDataService(Protocol):
    """Protocol for clinical data access (database-backed or in-memory)."""

    def get_form_by_uuid(self, uuid: str) -> Form | None: ...

    def get_encounters(
        self,
        from_date: datetime | None,
        to_date: datetime | None,
        forms: Sequence[Form],
        include_voided: bool = False,
    ) -> list[Encounter]: ...

    def get_concept_by_uuid(self, uuid: str) -> Concept | None: ...

    def get_observations(self, person_id: int, concept: Concept) -> list[Obs]: ...

    def get_observations_for_persons(
        self,
        person_ids: Iterable[int],
        concept: Concept,
    ) -> dict[int, list[Obs]]: ...

    def get_persons(self) -> list[Person]: ...


class SqlClinicalDataService:
    """SQLAlchemy implementation of ``ClinicalDataService``.

    Usage:
        with session_scope() as session:
            data = SqlClinicalDataService(session)
            form = data.get_form_by_uuid(MetadataConstants.from_settings().moh_257_visit_summary_form_uuid)
    """

    def __init__(self, session: Session, batch_size: int = DEFAULT_BATCH_SIZE) -> None:
        self.session = session
        self.batch_size = batch_size

    def get_form_by_uuid(self, uuid: str) -> Form | None:
        return self.session.execute(select(Form).where(Form.uuid == uuid)).scalar_one_or_none()

    def get_concept_by_uuid(self, uuid: str) -> Concept | None:
        return self.session.execute(select(Concept).where(Concept.uuid == uuid)).scalar_one_or_none()

    def get_encounters(
        self,
        from_date: datetime | None,
        to_date: datetime | None,
        forms: Sequence[Form],
        include_voided: bool = False,
    ) -> list[Encounter]:
        """Get encounters recorded on any of ``forms`` within a date range.

        Not restricted by patient, location or provider. Either bound may be
        None for an open range; both bounds are inclusive.
        """
        if not forms:
            return []

        stmt = (
            select(Encounter)
            .options(joinedload(Encounter.visit), joinedload(Encounter.patient))
            .where(Encounter.form_id.in_([form.form_id for form in forms]))
        )
        if from_date is not None:
            stmt = stmt.where(Encounter.encounter_datetime >= from_date)
        if to_date is not None:
            stmt = stmt.where(Encounter.encounter_datetime <= to_date)
        if not include_voided:
            stmt = stmt.where(Encounter.voided.is_(False))

        encounters = list(self.session.execute(stmt).scalars().unique().all())
        logger.debug(f"Found {len(encounters)} encounters on {len(forms)} forms")
        log_data_access("encounter", person_ids=[enc.patient_id for enc in encounters])
        return encounters

    def get_observations(self, person_id: int, concept: Concept) -> list[Obs]:
        stmt = select(Obs).where(
            Obs.person_id == person_id,
            Obs.concept_id == concept.concept_id,
            Obs.voided.is_(False),
        )
        observations = list(self.session.execute(stmt).scalars().all())
        log_data_access("obs", resource_id=concept.uuid, person_ids=[person_id])
        return observations

    def get_observations_for_persons(
        self,
        person_ids: Iterable[int],
        concept: Concept,
    ) -> dict[int, list[Obs]]:
        """Get observations of ``concept`` for many patients, indexed by person."""
        ids = sorted(set(person_ids))
        by_person: dict[int, list[Obs]] = defaultdict(list)

        for start in range(0, len(ids), self.batch_size):
            batch = ids[start : start + self.batch_size]
            stmt = select(Obs).where(
                Obs.person_id.in_(batch),
                Obs.concept_id == concept.concept_id,
                Obs.voided.is_(False),
            )
            for obs in self.session.execute(stmt).scalars():
                by_person[obs.person_id].append(obs)

        logger.debug(f"Loaded {concept.name} observations for {len(by_person)}/{len(ids)} patients")
        log_data_access("obs", resource_id=concept.uuid, person_ids=ids)
        return dict(by_person)

    def get_persons(self) -> list[Person]:
        stmt = select(Person).where(Person.voided.is_(False))
        persons = list(self.session.execute(stmt).scalars().all())
        log_data_access("person", person_ids=[person.person_id for person in persons])
        return persons
