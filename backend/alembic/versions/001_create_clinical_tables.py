"""Create form, concept, person, visit, encounter and obs tables.

Revision ID: 001
Revises:
Create Date: 2026-10-19

"""

from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _common_columns() -> list[sa.Column]:
    return [
        sa.Column("uuid", sa.String(38), nullable=False, unique=True),
        sa.Column("date_created", sa.DateTime(), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "form",
        sa.Column("form_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("retired", sa.Boolean(), nullable=False, server_default=sa.false()),
        *_common_columns(),
    )

    op.create_table(
        "concept",
        sa.Column("concept_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(255), nullable=False),
        *_common_columns(),
    )

    op.create_table(
        "person",
        sa.Column("person_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("gender", sa.String(50), nullable=True),
        sa.Column("birthdate", sa.Date(), nullable=True),
        sa.Column("voided", sa.Boolean(), nullable=False, server_default=sa.false()),
        *_common_columns(),
    )
    op.create_index("idx_person_gender", "person", ["gender"])

    op.create_table(
        "visit",
        sa.Column("visit_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("patient_id", sa.Integer(), sa.ForeignKey("person.person_id"), nullable=False),
        sa.Column("start_datetime", sa.DateTime(), nullable=False),
        sa.Column("stop_datetime", sa.DateTime(), nullable=True),
        sa.Column("voided", sa.Boolean(), nullable=False, server_default=sa.false()),
        *_common_columns(),
    )
    op.create_index("idx_visit_patient", "visit", ["patient_id"])

    op.create_table(
        "encounter",
        sa.Column("encounter_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("patient_id", sa.Integer(), sa.ForeignKey("person.person_id"), nullable=False),
        sa.Column("form_id", sa.Integer(), sa.ForeignKey("form.form_id"), nullable=True),
        sa.Column("visit_id", sa.Integer(), sa.ForeignKey("visit.visit_id"), nullable=True),
        sa.Column("encounter_datetime", sa.DateTime(), nullable=False),
        sa.Column("voided", sa.Boolean(), nullable=False, server_default=sa.false()),
        *_common_columns(),
    )
    op.create_index("idx_encounter_patient", "encounter", ["patient_id"])
    op.create_index("idx_encounter_form_datetime", "encounter", ["form_id", "encounter_datetime"])

    op.create_table(
        "obs",
        sa.Column("obs_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("person_id", sa.Integer(), sa.ForeignKey("person.person_id"), nullable=False),
        sa.Column("concept_id", sa.Integer(), sa.ForeignKey("concept.concept_id"), nullable=False),
        sa.Column("encounter_id", sa.Integer(), sa.ForeignKey("encounter.encounter_id"), nullable=True),
        sa.Column("obs_datetime", sa.DateTime(), nullable=False),
        sa.Column("value_datetime", sa.DateTime(), nullable=True),
        sa.Column("voided", sa.Boolean(), nullable=False, server_default=sa.false()),
        *_common_columns(),
    )
    op.create_index("idx_obs_person_concept", "obs", ["person_id", "concept_id"])


def downgrade() -> None:
    op.drop_table("obs")
    op.drop_table("encounter")
    op.drop_table("visit")
    op.drop_table("person")
    op.drop_table("concept")
    op.drop_table("form")
