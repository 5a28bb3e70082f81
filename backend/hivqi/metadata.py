"""Well-known metadata identifiers.

Forms and concepts are referenced by UUID so indicators stay portable
between installations where primary keys differ.
"""

from dataclasses import dataclass

from hivqi.core.config import Settings, settings


@dataclass(frozen=True)
class MetadataConstants:
    """UUIDs of the forms and concepts used by HIV care indicators."""

    clinical_encounter_hiv_addendum_form_uuid: str
    moh_257_visit_summary_form_uuid: str
    return_visit_date_concept_uuid: str

    @classmethod
    def from_settings(cls, config: Settings | None = None) -> "MetadataConstants":
        config = config or settings
        return cls(
            clinical_encounter_hiv_addendum_form_uuid=config.hiv_addendum_form_uuid,
            moh_257_visit_summary_form_uuid=config.moh_257_visit_summary_form_uuid,
            return_visit_date_concept_uuid=config.return_visit_date_concept_uuid,
        )

    def hiv_care_form_uuids(self) -> tuple[str, str]:
        """UUIDs of the forms on which HIV care encounters are recorded."""
        return (
            self.clinical_encounter_hiv_addendum_form_uuid,
            self.moh_257_visit_summary_form_uuid,
        )
