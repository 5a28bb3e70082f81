"""Exceptions raised while evaluating indicators and cohorts."""


class EvaluationError(Exception):
    """Raised when an indicator or cohort cannot be evaluated.

    Any failure of a collaborating service aborts the whole evaluation;
    the underlying error is chained as ``__cause__``.
    """


class MetadataNotFoundError(EvaluationError):
    """Raised when a form or concept UUID does not resolve."""

    def __init__(self, kind: str, uuid: str) -> None:
        super().__init__(f"No {kind} found with uuid {uuid}")
        self.kind = kind
        self.uuid = uuid


class CompositionError(EvaluationError):
    """Raised for malformed composition strings or unknown search keys."""
