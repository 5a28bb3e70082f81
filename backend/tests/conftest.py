"""Pytest configuration and fixtures for backend tests.

The reporting period used throughout is June 2012. The seeded population:

    person 1: female, born 1980-01-01 (adult)
    person 2: female, born 1994-07-15 (17 on 2012-06-30)
    person 3: male, born 1970-03-03
    person 4: female, born 1990-05-05 (adult)
    person 5: female, born 1994-06-15 (turns 18 mid-period)

HIV care encounters in the period (6):

    1: person 1, 2012-06-05 10:00, addendum form            scheduled
    2: person 2, 2012-06-06 09:00, MOH 257                  unscheduled
    3: person 3, 2012-06-08 10:00, MOH 257, visit 06-07     scheduled
    4: person 4, 2012-06-30 15:00, addendum form            unscheduled
    5: person 5, 2012-06-10 11:00, MOH 257                  unscheduled
    6: person 5, 2012-06-20 11:00, MOH 257                  scheduled

Excluded: 7 (other form), 8 (after period), 9 (voided), 10 (before period).
"""

from collections.abc import Generator, Iterable, Sequence
from datetime import date, datetime

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from hivqi.core.config import settings
from hivqi.core.database import Base
from hivqi.models import Concept, Encounter, Form, Obs, Person, Visit

ADDENDUM_FORM_UUID = settings.hiv_addendum_form_uuid
MOH_257_FORM_UUID = settings.moh_257_visit_summary_form_uuid
OTHER_FORM_UUID = "c4d2b0c4-0000-4000-8000-000000000001"
RETURN_VISIT_DATE_UUID = settings.return_visit_date_concept_uuid

_test_engine = create_engine(
    "sqlite:///:memory:",
    echo=False,
    future=True,
)
_TestSession = sessionmaker(
    bind=_test_engine,
    autocommit=False,
    autoflush=False,
)


# ============================================================================
# Data builders
# ============================================================================


def build_forms() -> list[Form]:
    return [
        Form(form_id=1, name="Clinical Encounter - HIV addendum", uuid=ADDENDUM_FORM_UUID, retired=False),
        Form(form_id=2, name="MOH 257 Visit Summary", uuid=MOH_257_FORM_UUID, retired=False),
        Form(form_id=3, name="Triage", uuid=OTHER_FORM_UUID, retired=False),
    ]


def build_return_visit_date_concept() -> Concept:
    return Concept(concept_id=5096, name="RETURN VISIT DATE", uuid=RETURN_VISIT_DATE_UUID)


def build_persons() -> list[Person]:
    return [
        Person(person_id=1, gender="F", birthdate=date(1980, 1, 1), voided=False),
        Person(person_id=2, gender="F", birthdate=date(1994, 7, 15), voided=False),
        Person(person_id=3, gender="M", birthdate=date(1970, 3, 3), voided=False),
        Person(person_id=4, gender="F", birthdate=date(1990, 5, 5), voided=False),
        Person(person_id=5, gender="F", birthdate=date(1994, 6, 15), voided=False),
    ]


def build_visits() -> list[Visit]:
    return [
        Visit(visit_id=1, patient_id=3, start_datetime=datetime(2012, 6, 7, 8, 0), voided=False),
    ]


def build_encounters(visits: Sequence[Visit]) -> list[Encounter]:
    visit = visits[0]
    return [
        Encounter(encounter_id=1, patient_id=1, form_id=1, encounter_datetime=datetime(2012, 6, 5, 10, 0), voided=False),
        Encounter(encounter_id=2, patient_id=2, form_id=2, encounter_datetime=datetime(2012, 6, 6, 9, 0), voided=False),
        Encounter(
            encounter_id=3,
            patient_id=3,
            form_id=2,
            visit_id=visit.visit_id,
            visit=visit,
            encounter_datetime=datetime(2012, 6, 8, 10, 0),
            voided=False,
        ),
        Encounter(encounter_id=4, patient_id=4, form_id=1, encounter_datetime=datetime(2012, 6, 30, 15, 0), voided=False),
        Encounter(encounter_id=5, patient_id=5, form_id=2, encounter_datetime=datetime(2012, 6, 10, 11, 0), voided=False),
        Encounter(encounter_id=6, patient_id=5, form_id=2, encounter_datetime=datetime(2012, 6, 20, 11, 0), voided=False),
        Encounter(encounter_id=7, patient_id=1, form_id=3, encounter_datetime=datetime(2012, 6, 12, 10, 0), voided=False),
        Encounter(encounter_id=8, patient_id=3, form_id=2, encounter_datetime=datetime(2012, 7, 1, 0, 30), voided=False),
        Encounter(encounter_id=9, patient_id=4, form_id=1, encounter_datetime=datetime(2012, 6, 15, 10, 0), voided=True),
        Encounter(encounter_id=10, patient_id=1, form_id=1, encounter_datetime=datetime(2012, 5, 31, 23, 0), voided=False),
    ]


def build_observations(concept: Concept) -> list[Obs]:
    def obs(obs_id: int, person_id: int, value: datetime, voided: bool = False) -> Obs:
        return Obs(
            obs_id=obs_id,
            person_id=person_id,
            concept_id=concept.concept_id,
            obs_datetime=datetime(2012, 5, 1, 9, 0),
            value_datetime=value,
            voided=voided,
        )

    return [
        obs(1, 1, datetime(2012, 6, 5)),
        obs(2, 3, datetime(2012, 6, 7)),
        obs(3, 4, datetime(2012, 6, 29)),
        obs(4, 4, datetime(2012, 6, 30), voided=True),
        obs(5, 5, datetime(2012, 6, 20)),
        obs(6, 5, datetime(2012, 6, 20)),
    ]


# ============================================================================
# In-memory clinical data service
# ============================================================================


class InMemoryClinicalDataService:
    """``ClinicalDataService`` over plain lists, recording observation queries."""

    def __init__(
        self,
        forms: Iterable[Form] = (),
        concepts: Iterable[Concept] = (),
        persons: Iterable[Person] = (),
        encounters: Iterable[Encounter] = (),
        observations: Iterable[Obs] = (),
    ) -> None:
        self.forms = list(forms)
        self.concepts = list(concepts)
        self.persons = list(persons)
        self.encounters = list(encounters)
        self.observations = list(observations)
        self.observation_queries = 0

    def get_form_by_uuid(self, uuid: str) -> Form | None:
        return next((form for form in self.forms if form.uuid == uuid), None)

    def get_encounters(self, from_date, to_date, forms, include_voided=False) -> list[Encounter]:
        form_ids = {form.form_id for form in forms}
        return [
            enc
            for enc in self.encounters
            if enc.form_id in form_ids
            and (from_date is None or enc.encounter_datetime >= from_date)
            and (to_date is None or enc.encounter_datetime <= to_date)
            and (include_voided or not enc.voided)
        ]

    def get_concept_by_uuid(self, uuid: str) -> Concept | None:
        return next((concept for concept in self.concepts if concept.uuid == uuid), None)

    def get_observations(self, person_id: int, concept: Concept) -> list[Obs]:
        self.observation_queries += 1
        return [
            obs
            for obs in self.observations
            if obs.person_id == person_id and obs.concept_id == concept.concept_id and not obs.voided
        ]

    def get_observations_for_persons(self, person_ids, concept) -> dict[int, list[Obs]]:
        self.observation_queries += 1
        ids = set(person_ids)
        by_person: dict[int, list[Obs]] = {}
        for obs in self.observations:
            if obs.person_id in ids and obs.concept_id == concept.concept_id and not obs.voided:
                by_person.setdefault(obs.person_id, []).append(obs)
        return by_person

    def get_persons(self) -> list[Person]:
        return [person for person in self.persons if not person.voided]


@pytest.fixture
def data_service() -> InMemoryClinicalDataService:
    """In-memory data service holding the standard June 2012 scenario."""
    concept = build_return_visit_date_concept()
    visits = build_visits()
    return InMemoryClinicalDataService(
        forms=build_forms(),
        concepts=[concept],
        persons=build_persons(),
        encounters=build_encounters(visits),
        observations=build_observations(concept),
    )


# ============================================================================
# Database fixtures
# ============================================================================


@pytest.fixture(scope="function")
def db_session() -> Generator[Session, None, None]:
    """Create a database session with all tables on in-memory SQLite."""
    Base.metadata.create_all(bind=_test_engine)

    session = _TestSession()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=_test_engine)


@pytest.fixture
def seeded_session(db_session: Session) -> Session:
    """Database session loaded with the standard June 2012 scenario."""
    concept = build_return_visit_date_concept()
    visits = build_visits()

    db_session.add_all(build_forms())
    db_session.add(concept)
    db_session.add_all(build_persons())
    db_session.flush()
    db_session.add_all(visits)
    db_session.flush()
    db_session.add_all(build_encounters(visits))
    db_session.flush()
    db_session.add_all(build_observations(concept))
    db_session.commit()
    return db_session
