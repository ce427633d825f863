"""
Labels for the ``labels`` map of a Cloud Logging entry.

A ``Label`` is passed as a positional argument to a logging call::

    logger.info(
        "Request rejected: unauthorized.",
        jsonlogging.labels.Label.of("requestId", "123"),
    )

The formatter removes it from the interpolation arguments and renders it
into the entry's ``labels`` object.  Labels are indexed by Cloud Logging
and suit low-cardinality filtering fields.
"""

import dataclasses

import jsonlogging.exceptions


@dataclasses.dataclass(frozen=True, slots=True)
class Label:
    """An immutable key/value pair destined for the ``labels`` map."""

    key: str
    value: str

    def __post_init__(self) -> None:
        if not isinstance(self.key, str) or not self.key:
            raise jsonlogging.exceptions.InvalidLabelError(
                f"Label keys must be non-empty strings, got {self.key!r}."
            )
        if not isinstance(self.value, str):
            raise jsonlogging.exceptions.InvalidLabelError(
                f"Label values must be strings, got {type(self.value).__name__} for key {self.key!r}."
            )

    @classmethod
    def of(cls, key: str, value: object) -> "Label":
        """Create a label, converting ``value`` to its string form."""
        return cls(key, value if isinstance(value, str) else str(value))
