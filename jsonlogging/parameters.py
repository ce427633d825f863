"""
Structured parameters for the ``jsonPayload`` object of a Cloud Logging
entry.

A structured parameter contributes a fragment (a mapping of string keys
to JSON values) to the event's payload.  Like a ``Label``, it is passed
as a positional argument to a logging call::

    logger.info(
        "Request rejected: unauthorized.",
        jsonlogging.parameters.KeyValueParameter.of("resource", "/users/mulk"),
        jsonlogging.parameters.KeyValueParameter.of("method", "PATCH"),
    )

Anything that implements ``json_fields()`` satisfies the
``StructuredParameter`` protocol.  The formatter calls ``json_fields()``
exactly once per log event, at format time.
"""

import collections.abc
import dataclasses
import types
import typing

import jsonlogging.exceptions


@typing.runtime_checkable
class StructuredParameter(typing.Protocol):
    """A producer of a JSON object fragment for the event payload."""

    def json_fields(self) -> collections.abc.Mapping[str, typing.Any]:
        """Return the fields to merge into ``jsonPayload``."""
        ...


@dataclasses.dataclass(frozen=True, slots=True)
class KeyValueParameter:
    """A structured parameter holding a single key and a JSON value."""

    key: str
    value: typing.Any

    def __post_init__(self) -> None:
        if not isinstance(self.key, str):
            raise jsonlogging.exceptions.InvalidParameterError(
                f"Structured parameter keys must be strings, got {self.key!r}."
            )

    @classmethod
    def of(cls, key: str, value: typing.Any) -> "KeyValueParameter":
        """Create a parameter for one payload field."""
        return cls(key, value)

    def json_fields(self) -> collections.abc.Mapping[str, typing.Any]:
        return {self.key: self.value}


class MappingParameter:
    """
    A structured parameter holding several payload fields at once.

    The fields are copied at construction time, so later mutation of the
    source mapping does not change what is logged.
    """

    __slots__ = ("_fields",)

    def __init__(self, fields: collections.abc.Mapping[str, typing.Any]) -> None:
        for key in fields:
            if not isinstance(key, str):
                raise jsonlogging.exceptions.InvalidParameterError(
                    f"Structured parameter keys must be strings, got {key!r}."
                )
        self._fields = types.MappingProxyType(dict(fields))

    @classmethod
    def of(
        cls,
        fields: collections.abc.Mapping[str, typing.Any] | None = None,
        /,
        **keyword_fields: typing.Any,
    ) -> "MappingParameter":
        """Create a parameter from a mapping, keyword arguments, or both."""
        merged: dict[str, typing.Any] = dict(fields or {})
        merged.update(keyword_fields)
        return cls(merged)

    def json_fields(self) -> collections.abc.Mapping[str, typing.Any]:
        return self._fields

    def __repr__(self) -> str:
        return f"MappingParameter({dict(self._fields)!r})"
