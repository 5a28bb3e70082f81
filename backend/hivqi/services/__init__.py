"""Data access services."""

from hivqi.services.clinical_data import ClinicalDataService, SqlClinicalDataService

__all__ = [
    "ClinicalDataService",
    "SqlClinicalDataService",
]
