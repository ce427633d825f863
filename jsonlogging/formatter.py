"""
Google Cloud Logging JSON formatter.

Turns one ``logging.LogRecord`` into one line of JSON in the Cloud
Logging structured-logging format and writes it to an ``OutputSink``::

    {"severity":"INFO","timestamp":"2026-02-23T14:32:10.123456Z",
     "jsonPayload":{"message":"Request rejected: unauthorized.","resource":"/users/mulk"},
     "labels":{"requestId":"123"},
     "sourceLocation":{"file":"/app/routes.py","line":"17","function":"patch_user"}}

(shown wrapped; the real output is a single line).

Field sources
-------------
Fields come from four places and are merged with a fixed precedence,
lowest first:

``labels``
    1. every ``LabelProvider``, in registration order
    2. ``Label`` arguments of the logging call, in argument order

``jsonPayload``
    1. the calling thread's diagnostic context
    2. every ``StructuredParameterProvider``, in registration order
    3. ``message`` and the exception fields generated by the formatter;
       ``stack_trace`` also carries ``stack_info`` when the call asked for it
    4. ``extra`` fields of the logging call, then the ``json_fields``
       mapping if one was passed through ``extra``
    5. ``StructuredParameter`` arguments of the logging call, in argument order

A later source overwrites an earlier one on a key collision, so whatever
the call site passes always wins.  ``message`` is always the first key
of ``jsonPayload``.

Failure handling
----------------
A provider or parameter that raises, or that returns something its
protocol does not allow, contributes nothing.  The failure is reported
through ``jsonlogging.side_channel`` and the event is emitted anyway.
Payload values that JSON cannot represent are converted by
``jsonlogging.json_values``.  ``format`` never raises for a well-formed
record; only ``write`` can raise, with ``SinkWriteError``.

The formatter holds no per-event state and is safe to share between
threads.
"""

import collections.abc
import datetime
import json
import logging
import types
import typing

import jsonlogging.diagnostic_context
import jsonlogging.exception_serialization
import jsonlogging.exceptions
import jsonlogging.json_values
import jsonlogging.labels
import jsonlogging.output_sink
import jsonlogging.parameters
import jsonlogging.providers
import jsonlogging.records
import jsonlogging.severity
import jsonlogging.side_channel

REPORTED_ERROR_EVENT_TYPE = "type.googleapis.com/google.devtools.clouderrorreporting.v1beta1.ReportedErrorEvent"

# Record attribute holding payload fields whose keys may clash with
# LogRecord attributes (`extra={"json_fields": {...}}`).
JSON_FIELDS_ATTRIBUTE = "json_fields"

# Record attribute carrying the caller's source location when the record
# was created on the caller's behalf (structlog routed through the stdlib).
SOURCE_LOCATION_ATTRIBUTE = "jsonlogging_source_location"

_UNKNOWN_SOURCE_FILE = "(unknown file)"
_UNKNOWN_SOURCE_FUNCTION = "(unknown function)"

# Everything a bare LogRecord carries, plus what Formatter.format adds.
# Any other attribute was supplied through ``extra``.
_STANDARD_RECORD_ATTRIBUTES: frozenset[str] = frozenset(
    vars(logging.LogRecord("", logging.NOTSET, "", 0, "", (), None))
) | {
    "message",
    "asctime",
    JSON_FIELDS_ATTRIBUTE,
    SOURCE_LOCATION_ATTRIBUTE,
    jsonlogging.records.LABELS_ATTRIBUTE,
    jsonlogging.records.PARAMETERS_ATTRIBUTE,
}


class CloudLoggingFormatter(logging.Formatter):
    """
    Formats log records as Google Cloud Logging JSON entries.

    Constructed once at start-up with a fixed set of providers and shared
    by every logging call for the lifetime of the process.
    """

    def __init__(
        self,
        label_providers: collections.abc.Iterable[jsonlogging.providers.LabelProvider] = (),
        parameter_providers: collections.abc.Iterable[jsonlogging.providers.StructuredParameterProvider] = (),
        output_sink: jsonlogging.output_sink.OutputSink | None = None,
        service_name: str | None = None,
        service_version: str | None = None,
        include_source_location: bool = True,
        exception_cause_depth_limit: int = jsonlogging.exception_serialization.DEFAULT_CAUSE_DEPTH_LIMIT,
        maximum_json_nesting_depth: int = jsonlogging.json_values.DEFAULT_MAXIMUM_NESTING_DEPTH,
    ) -> None:
        """
        Initialise the formatter.

        Args:
            label_providers: Consulted for labels on every event, in
                this order.  When two providers emit the same key, the
                one registered last wins.
            parameter_providers: Consulted for payload fields on every
                event, in this order, with the same collision rule.
            output_sink: Where ``write`` sends rendered lines.  Defaults
                to a sink on the current ``sys.stdout``.
            service_name: When set, every entry carries a
                ``serviceContext`` object for Cloud Error Reporting.
            service_version: The ``serviceContext.version`` value.
            include_source_location: Whether to emit ``sourceLocation``.
            exception_cause_depth_limit: The maximum number of
                exceptions rendered from one cause chain.
            maximum_json_nesting_depth: Payload containers nested deeper
                than this are rendered as strings.
        """
        super().__init__()
        self._label_providers: tuple[jsonlogging.providers.LabelProvider, ...] = tuple(label_providers)
        self._parameter_providers: tuple[jsonlogging.providers.StructuredParameterProvider, ...] = tuple(
            parameter_providers
        )
        self._output_sink = output_sink if output_sink is not None else jsonlogging.output_sink.OutputSink()
        self._include_source_location = include_source_location
        self._exception_cause_depth_limit = exception_cause_depth_limit
        self._maximum_json_nesting_depth = maximum_json_nesting_depth

        self._service_context: types.MappingProxyType[str, str] | None = None
        if service_name:
            service_context = {"service": service_name}
            if service_version:
                service_context["version"] = service_version
            self._service_context = types.MappingProxyType(service_context)

    @property
    def label_providers(self) -> tuple[jsonlogging.providers.LabelProvider, ...]:
        return self._label_providers

    @property
    def parameter_providers(self) -> tuple[jsonlogging.providers.StructuredParameterProvider, ...]:
        return self._parameter_providers

    @property
    def output_sink(self) -> jsonlogging.output_sink.OutputSink:
        return self._output_sink

    def format(self, record: logging.LogRecord) -> str:
        """Render ``record`` as a single line of JSON without a trailing newline."""
        return json.dumps(
            self.build_entry(record),
            ensure_ascii=True,
            separators=(",", ":"),
            default=jsonlogging.json_values.safe_str,
        )

    def write(self, record: logging.LogRecord) -> None:
        """
        Render ``record`` and write it to the output sink.

        Raises:
            jsonlogging.exceptions.SinkWriteError: When the line cannot
                be written.
        """
        line = self.format(record)
        self._output_sink.write_line(line)

    def build_entry(self, record: logging.LogRecord) -> dict[str, typing.Any]:
        """
        Build the Cloud Logging entry for ``record`` as a dictionary.

        The record is not modified.
        """
        plain_arguments, argument_labels, argument_parameters = jsonlogging.records.partition_arguments(record.args)
        call_site_labels = [*jsonlogging.records.record_labels(record), *argument_labels]
        call_site_parameters = [*jsonlogging.records.record_parameters(record), *argument_parameters]
        message = _interpolate_message(record.msg, plain_arguments)

        entry: dict[str, typing.Any] = {
            "severity": jsonlogging.severity.map_severity(record.levelno).value,
            "timestamp": format_timestamp(record.created),
        }

        exception = _exception_from(record.exc_info)

        labels = self._merge_labels(call_site_labels)
        entry["jsonPayload"] = jsonlogging.json_values.to_json_safe(
            self._merge_payload(record, message, exception, call_site_parameters),
            self._maximum_json_nesting_depth,
        )
        entry["labels"] = labels

        source_location = self._source_location(record)
        if source_location is not None:
            entry["sourceLocation"] = source_location

        if exception is not None:
            entry["exception"] = jsonlogging.exception_serialization.serialize_exception(
                exception,
                self._exception_cause_depth_limit,
            )

        if self._service_context is not None:
            entry["serviceContext"] = dict(self._service_context)

        return entry

    # ── Merging ─────────────────────────────────────────────────────────

    def _merge_labels(self, call_site_labels: list[jsonlogging.labels.Label]) -> dict[str, str]:
        labels: dict[str, str] = {}
        for provider in self._label_providers:
            for label in _labels_from_provider(provider):
                labels[label.key] = label.value
        for label in call_site_labels:
            labels[label.key] = label.value
        return labels

    def _merge_payload(
        self,
        record: logging.LogRecord,
        message: str,
        exception: BaseException | None,
        call_site_parameters: list[jsonlogging.parameters.StructuredParameter],
    ) -> dict[str, typing.Any]:
        ambient_fields: dict[str, typing.Any] = dict(jsonlogging.diagnostic_context.snapshot())
        for provider in self._parameter_providers:
            ambient_fields.update(_fields_from_provider(provider))

        payload: dict[str, typing.Any] = {"message": message}
        stack_trace_parts: list[str] = []
        if exception is not None:
            payload["@type"] = REPORTED_ERROR_EVENT_TYPE
            stack_trace_parts.append(
                jsonlogging.exception_serialization.format_stack_trace(exception, self._exception_cause_depth_limit)
            )
        if record.stack_info:
            stack_trace_parts.append(record.stack_info)
        if stack_trace_parts:
            payload["stack_trace"] = "\n".join(part.rstrip("\n") for part in stack_trace_parts)

        for key, value in ambient_fields.items():
            payload.setdefault(key, value)

        payload.update(_extra_fields(record))
        for parameter in call_site_parameters:
            payload.update(_fields_from_parameter(parameter))
        return payload

    # ── Rendering ───────────────────────────────────────────────────────

    def _source_location(self, record: logging.LogRecord) -> dict[str, str] | None:
        if not self._include_source_location:
            return None

        override = getattr(record, SOURCE_LOCATION_ATTRIBUTE, None)
        if isinstance(override, collections.abc.Mapping):
            file_name = override.get("file")
            line_number = override.get("line")
            function_name = override.get("function")
        else:
            file_name, line_number, function_name = record.pathname, record.lineno, record.funcName

        if not file_name or file_name == _UNKNOWN_SOURCE_FILE:
            return None

        source_location = {"file": str(file_name), "line": str(line_number or 0)}
        if function_name and function_name != _UNKNOWN_SOURCE_FUNCTION:
            source_location["function"] = str(function_name)
        return source_location


def format_timestamp(created: float) -> str:
    """
    Render a ``time.time()`` value as an RFC 3339 UTC timestamp with
    microsecond precision, e.g. ``"2026-02-23T14:32:10.123456Z"``.
    """
    return datetime.datetime.fromtimestamp(created, tz=datetime.UTC).strftime("%Y-%m-%dT%H:%M:%S.%fZ")


def _interpolate_message(
    template: object,
    plain_arguments: tuple[typing.Any, ...] | collections.abc.Mapping[str, typing.Any],
) -> str:
    text = template if isinstance(template, str) else jsonlogging.json_values.safe_str(template)
    if not plain_arguments:
        return text
    try:
        return text % plain_arguments
    except Exception:
        # Mismatched placeholders: keep the template and the values.
        if isinstance(plain_arguments, collections.abc.Mapping):
            rendered_arguments = jsonlogging.json_values.safe_str(dict(plain_arguments))
        else:
            rendered_arguments = " ".join(jsonlogging.json_values.safe_str(argument) for argument in plain_arguments)
        return f"{text} {rendered_arguments}"


def _exception_from(exc_info: typing.Any) -> BaseException | None:
    if isinstance(exc_info, BaseException):
        return exc_info
    if isinstance(exc_info, tuple) and len(exc_info) == 3 and isinstance(exc_info[1], BaseException):
        return exc_info[1]
    return None


def _extra_fields(record: logging.LogRecord) -> dict[str, typing.Any]:
    fields = {key: value for key, value in vars(record).items() if key not in _STANDARD_RECORD_ATTRIBUTES}
    json_fields = getattr(record, JSON_FIELDS_ATTRIBUTE, None)
    if isinstance(json_fields, collections.abc.Mapping):
        fields.update(json_fields)
    return fields


def _labels_from_provider(provider: jsonlogging.providers.LabelProvider) -> list[jsonlogging.labels.Label]:
    try:
        provided = provider.get_labels()
        if provided is None:
            return []
        labels = list(provided)
        for label in labels:
            if not isinstance(label, jsonlogging.labels.Label):
                raise jsonlogging.exceptions.ProviderContractError(
                    f"get_labels() returned a {type(label).__name__}, expected Label."
                )
        return labels
    except Exception as error:
        jsonlogging.side_channel.report_failure("label_provider_failed", provider, error)
        return []


def _fields_from_provider(
    provider: jsonlogging.providers.StructuredParameterProvider,
) -> dict[str, typing.Any]:
    try:
        parameter = provider.get_parameter()
        if parameter is None:
            return {}
        return _evaluate_parameter(parameter)
    except Exception as error:
        jsonlogging.side_channel.report_failure("parameter_provider_failed", provider, error)
        return {}


def _fields_from_parameter(parameter: jsonlogging.parameters.StructuredParameter) -> dict[str, typing.Any]:
    try:
        return _evaluate_parameter(parameter)
    except Exception as error:
        jsonlogging.side_channel.report_failure("structured_parameter_failed", parameter, error)
        return {}


def _evaluate_parameter(parameter: typing.Any) -> dict[str, typing.Any]:
    if isinstance(parameter, collections.abc.Mapping):
        fields = parameter
    elif isinstance(parameter, jsonlogging.parameters.StructuredParameter):
        fields = parameter.json_fields()
    else:
        raise jsonlogging.exceptions.ProviderContractError(
            f"Expected a StructuredParameter or a mapping, got {type(parameter).__name__}."
        )
    if not isinstance(fields, collections.abc.Mapping):
        raise jsonlogging.exceptions.ProviderContractError(
            f"json_fields() returned a {type(fields).__name__}, expected a mapping."
        )
    return dict(fields)
