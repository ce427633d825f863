"""
Mapping from Python ``logging`` levels to Google Cloud Logging severities.

Cloud Logging uses its own enumerated vocabulary for the ``severity``
field.  The mapping is a threshold table over the numeric level, which
makes it total (every integer maps to exactly one severity) and
monotonic (a higher Python level never maps to a lower severity).
Custom levels fall into the band of the nearest standard level below
them; anything below ``DEBUG`` (including ``NOTSET`` and custom trace
levels) maps to ``DEFAULT``.
"""

import enum
import logging


class Severity(str, enum.Enum):
    """The Google Cloud Logging ``LogSeverity`` vocabulary."""

    DEFAULT = "DEFAULT"
    DEBUG = "DEBUG"
    INFO = "INFO"
    NOTICE = "NOTICE"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"
    ALERT = "ALERT"
    EMERGENCY = "EMERGENCY"


# Ordered from the highest threshold to the lowest.  The first entry whose
# threshold is less than or equal to the level wins.
_SEVERITY_THRESHOLDS: tuple[tuple[int, Severity], ...] = (
    (logging.CRITICAL, Severity.CRITICAL),
    (logging.ERROR, Severity.ERROR),
    (logging.WARNING, Severity.WARNING),
    (logging.INFO, Severity.INFO),
    (logging.DEBUG, Severity.DEBUG),
)


def map_severity(level: int | str) -> Severity:
    """
    Map a Python logging level to a Cloud Logging severity.

    Args:
        level: A numeric logging level (``record.levelno``) or a level
            name such as ``"WARNING"`` or ``"warn"``.

    Returns:
        The matching ``Severity``.  Unknown level names and values that
        are neither integers nor strings map to ``Severity.DEFAULT``.
    """
    numeric_level = _resolve_numeric_level(level)
    if numeric_level is None:
        return Severity.DEFAULT

    for threshold, severity in _SEVERITY_THRESHOLDS:
        if numeric_level >= threshold:
            return severity
    return Severity.DEFAULT


def _resolve_numeric_level(level: object) -> int | None:
    # bool is an int subclass but never a meaningful level.
    if isinstance(level, bool):
        return None
    if isinstance(level, int):
        return level
    if isinstance(level, str):
        resolved = logging.getLevelName(level.strip().upper())
        if isinstance(resolved, int):
            return resolved
    return None
