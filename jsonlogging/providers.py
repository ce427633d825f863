"""
Provider protocols for ambient labels and structured parameters.

Providers are registered once, when the formatter is constructed, and are
consulted on every log event.  They are the place to contribute context
that call sites should not have to pass explicitly, such as the current
trace and span identifiers::

    class TraceLogParameterProvider:
        def get_parameter(self):
            span_context = opentelemetry.trace.get_current_span().get_span_context()
            return jsonlogging.parameters.MappingParameter.of(
                traceId=format(span_context.trace_id, "032x"),
                spanId=format(span_context.span_id, "016x"),
            )

        def get_labels(self):
            return [jsonlogging.labels.Label.of("requestId", current_request_id())]

One object may implement both protocols.  Providers are called from
whichever thread is logging and may be called concurrently; they must be
safe for that.  The formatter does not synchronize access to them.
"""

import collections.abc
import typing

import jsonlogging.labels
import jsonlogging.parameters


@typing.runtime_checkable
class LabelProvider(typing.Protocol):
    """Contributes labels to every log event."""

    def get_labels(self) -> collections.abc.Iterable[jsonlogging.labels.Label]:
        """Return the labels to add to the current event."""
        ...


@typing.runtime_checkable
class StructuredParameterProvider(typing.Protocol):
    """Contributes a payload fragment to every log event."""

    def get_parameter(
        self,
    ) -> jsonlogging.parameters.StructuredParameter | collections.abc.Mapping[str, typing.Any] | None:
        """
        Return the parameter to merge into the current event's payload.

        ``None`` means no contribution.  A plain mapping is accepted in
        place of a ``StructuredParameter``.
        """
        ...
