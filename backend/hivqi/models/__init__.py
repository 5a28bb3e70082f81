"""SQLAlchemy ORM models for HIV care quality indicators.

All models inherit from Base which provides:
- uuid: Stable external identifier
- date_created: Timestamp
"""

from hivqi.core.database import Base
from hivqi.models.clinical import Concept, Encounter, Form, Obs, Person, Visit

__all__ = [
    "Base",
    "Concept",
    "Encounter",
    "Form",
    "Obs",
    "Person",
    "Visit",
]
