"""Clinical data SQLAlchemy models.

Minimal patient/encounter/observation schema needed to evaluate HIV care
visit indicators. Indicator evaluation never writes to these tables.

Tables Implemented:
    Metadata:
        - form: Data-entry forms that encounters are recorded on
        - concept: Coded clinical terms used to tag observations

    Clinical Data:
        - person: Patient demographics
        - visit: Facility visits grouping one or more encounters
        - encounter: Individual clinical encounters
        - obs: Single recorded clinical facts

Usage:
    from hivqi.models import Encounter, Person

    person = Person(person_id=1, gender="F", birthdate=date(1980, 5, 1))
"""

from datetime import date, datetime

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hivqi.core.database import Base


# =============================================================================
# Metadata Tables
# =============================================================================


class Form(Base):
    """Data-entry form.

    Encounters are tagged with the form used to capture them, which is how
    HIV care encounters are told apart from other encounters.
    """

    __tablename__ = "form"

    form_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    retired: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    def __repr__(self) -> str:
        return f"<Form(form_id={self.form_id}, name='{self.name}')>"


class Concept(Base):
    """Coded clinical term (e.g. "return visit date")."""

    __tablename__ = "concept"

    concept_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)

    def __repr__(self) -> str:
        return f"<Concept(concept_id={self.concept_id}, name='{self.name}')>"


# =============================================================================
# Clinical Data Tables
# =============================================================================


class Person(Base):
    """Patient demographic information."""

    __tablename__ = "person"

    person_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    gender: Mapped[str | None] = mapped_column(String(50))
    birthdate: Mapped[date | None] = mapped_column(Date)
    voided: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    __table_args__ = (
        Index("idx_person_gender", "gender"),
    )

    def __repr__(self) -> str:
        return f"<Person(person_id={self.person_id}, gender='{self.gender}')>"


class Visit(Base):
    """Facility visit.

    A visit groups the encounters recorded while the patient was at the
    facility; its start time is the visit's canonical date.
    """

    __tablename__ = "visit"

    visit_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    patient_id: Mapped[int] = mapped_column(Integer, ForeignKey("person.person_id"), nullable=False)
    start_datetime: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    stop_datetime: Mapped[datetime | None] = mapped_column(DateTime)
    voided: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # Relationships
    patient: Mapped["Person"] = relationship("Person")

    __table_args__ = (
        Index("idx_visit_patient", "patient_id"),
    )


class Encounter(Base):
    """Clinical encounter recorded on a form."""

    __tablename__ = "encounter"

    encounter_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    patient_id: Mapped[int] = mapped_column(Integer, ForeignKey("person.person_id"), nullable=False)
    form_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("form.form_id"))
    visit_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("visit.visit_id"))
    encounter_datetime: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    voided: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # Relationships
    patient: Mapped["Person"] = relationship("Person")
    form: Mapped["Form | None"] = relationship("Form")
    visit: Mapped["Visit | None"] = relationship("Visit")

    __table_args__ = (
        Index("idx_encounter_patient", "patient_id"),
        Index("idx_encounter_form_datetime", "form_id", "encounter_datetime"),
    )

    @property
    def effective_datetime(self) -> datetime:
        """Visit start time if the encounter belongs to a visit, else its own time."""
        if self.visit is not None:
            return self.visit.start_datetime
        return self.encounter_datetime

    def __repr__(self) -> str:
        return (
            f"<Encounter(encounter_id={self.encounter_id}, patient_id={self.patient_id}, "
            f"datetime={self.encounter_datetime})>"
        )


class Obs(Base):
    """Single recorded clinical fact tied to a patient and a concept."""

    __tablename__ = "obs"

    obs_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    person_id: Mapped[int] = mapped_column(Integer, ForeignKey("person.person_id"), nullable=False)
    concept_id: Mapped[int] = mapped_column(Integer, ForeignKey("concept.concept_id"), nullable=False)
    encounter_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("encounter.encounter_id"))
    obs_datetime: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    value_datetime: Mapped[datetime | None] = mapped_column(DateTime)
    voided: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # Relationships
    person: Mapped["Person"] = relationship("Person")
    concept: Mapped["Concept"] = relationship("Concept")
    encounter: Mapped["Encounter | None"] = relationship("Encounter")

    __table_args__ = (
        Index("idx_obs_person_concept", "person_id", "concept_id"),
    )
