"""
Custom exception classes for the Google Cloud JSON logging formatter.

Exception hierarchy
-------------------
::

    Exception (Python built-in)
    └── JsonLoggingError (base class for all formatter exceptions)
        ├── InvalidLabelError        → raised to the caller building a Label
        ├── InvalidParameterError    → raised to the caller building a parameter
        ├── ProviderContractError    → caught by the formatter, reported
        │                              through the side channel
        └── SinkWriteError           → propagated out of the logging call

Only ``InvalidLabelError``, ``InvalidParameterError`` and
``SinkWriteError`` ever reach application code.  A misbehaving provider
must never prevent an event from being emitted, so
``ProviderContractError`` is raised and caught inside the formatter.
Losing log output silently is worse than a visible failure, so a failed
write to the output stream is surfaced as ``SinkWriteError``.
"""


class JsonLoggingError(Exception):
    """
    Base exception for all formatter errors.

    Attributes:
        detail: A human-readable description of the error.
    """

    default_detail: str = "A JSON logging error occurred."

    def __init__(self, detail: str | None = None) -> None:
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class InvalidLabelError(JsonLoggingError):
    """
    Raised when a ``Label`` is constructed with a key that is not a
    non-empty string.  Label keys become JSON object keys in the
    ``labels`` map and must be usable as Cloud Logging label names.
    """

    default_detail = "Label keys must be non-empty strings."


class InvalidParameterError(JsonLoggingError):
    """
    Raised when a ``KeyValueParameter`` or ``MappingParameter`` is
    constructed with a key that is not a string.
    """

    default_detail = "Structured parameter keys must be strings."


class ProviderContractError(JsonLoggingError):
    """
    Raised inside the formatter when a provider returns something other
    than what its protocol promises, for example a plain string in place
    of a ``Label`` or a list in place of a mapping.

    The formatter treats this exactly like a provider that raised: the
    contribution is dropped and the failure is reported through the
    side channel.
    """

    default_detail = "A provider returned a value that violates its contract."


class SinkWriteError(JsonLoggingError):
    """
    Raised when a fully rendered log line cannot be written to the
    output stream, typically because the stream has been closed.

    The original ``OSError`` or ``ValueError`` is chained as
    ``__cause__``.  No retry is attempted.
    """

    default_detail = "The log line could not be written to the output stream."
