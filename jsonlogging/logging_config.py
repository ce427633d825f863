"""
Single initialization point for Cloud Logging JSON output.

Installs one ``CloudLoggingHandler`` on the root logger and the
LogRecord factory from ``jsonlogging.records`` so that every
stdlib logger (including those of third-party packages) emits Cloud
Logging JSON lines to standard output.  structlog is configured to route
its events through the same stdlib loggers, so structlog-native loggers
produce identical entries: the event becomes ``jsonPayload.message`` and
key-value pairs become payload fields.

Call ``configure_logging`` once during start-up, before any log messages
are emitted.  The formatter it builds is immutable; calling it again
replaces the handler with a new one.
"""

import collections.abc
import logging
import sys
import typing

import structlog

import configuration
import jsonlogging.formatter
import jsonlogging.handler
import jsonlogging.output_sink
import jsonlogging.providers
import jsonlogging.records

_CALLSITE_PARAMETERS = (
    structlog.processors.CallsiteParameter.PATHNAME,
    structlog.processors.CallsiteParameter.LINENO,
    structlog.processors.CallsiteParameter.FUNC_NAME,
)


def render_to_stdlib_call(
    logger: structlog.types.WrappedLogger,
    method_name: str,
    event_dict: structlog.types.EventDict,
) -> tuple[tuple[typing.Any, ...], dict[str, typing.Any]]:
    """
    Turn a structlog event into positional and keyword arguments for a
    stdlib logging method.

    The event becomes the message template, positional arguments (such as
    ``Label`` and ``StructuredParameter`` instances) are passed through,
    the caller's location found by ``CallsiteParameterAdder`` becomes the
    record's source location, and the remaining key-value pairs become
    payload fields.  They travel in the ``json_fields`` record attribute,
    so keys such as ``name`` or ``module`` do not clash with LogRecord
    attributes.
    """
    positional_arguments = tuple(event_dict.pop("positional_args", ()))
    event = event_dict.pop("event", "")

    keyword_arguments: dict[str, typing.Any] = {
        keyword: event_dict.pop(keyword)
        for keyword in ("exc_info", "stack_info", "stacklevel")
        if keyword in event_dict
    }

    source_location = {
        "file": event_dict.pop("pathname", None),
        "line": event_dict.pop("lineno", None),
        "function": event_dict.pop("func_name", None),
    }
    extra: dict[str, typing.Any] = {jsonlogging.formatter.JSON_FIELDS_ATTRIBUTE: event_dict}
    if source_location["file"]:
        extra[jsonlogging.formatter.SOURCE_LOCATION_ATTRIBUTE] = source_location

    keyword_arguments["extra"] = extra
    return (event, *positional_arguments), keyword_arguments


def configure_logging(
    logging_configuration: configuration.LoggingConfiguration | None = None,
    label_providers: collections.abc.Iterable[jsonlogging.providers.LabelProvider] = (),
    parameter_providers: collections.abc.Iterable[jsonlogging.providers.StructuredParameterProvider] = (),
) -> jsonlogging.formatter.CloudLoggingFormatter:
    """
    Configure the root logger and structlog for Cloud Logging JSON output.

    Args:
        logging_configuration: The settings to apply.  Read from the
            environment when omitted.
        label_providers: Label providers, in precedence order (the last
            one wins on a key collision).
        parameter_providers: Structured parameter providers, in the same
            precedence order.

    Returns:
        The formatter installed on the root logger.
    """
    if logging_configuration is None:
        logging_configuration = configuration.LoggingConfiguration()

    stream = sys.stderr if logging_configuration.output_stream == "stderr" else None
    formatter = jsonlogging.formatter.CloudLoggingFormatter(
        label_providers=label_providers,
        parameter_providers=parameter_providers,
        output_sink=jsonlogging.output_sink.OutputSink(stream),
        service_name=logging_configuration.service_name,
        service_version=logging_configuration.service_version,
        include_source_location=logging_configuration.include_source_location,
        exception_cause_depth_limit=logging_configuration.exception_cause_depth_limit,
        maximum_json_nesting_depth=logging_configuration.maximum_json_nesting_depth,
    )

    structlog_processors: list[structlog.types.Processor] = [
        structlog.stdlib.filter_by_level,
    ]
    if logging_configuration.include_source_location:
        structlog_processors.append(structlog.processors.CallsiteParameterAdder(parameters=_CALLSITE_PARAMETERS))
    structlog_processors.append(render_to_stdlib_call)

    structlog.configure(
        processors=structlog_processors,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    jsonlogging.records.install_record_factory()
    handler = jsonlogging.handler.CloudLoggingHandler(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(logging_configuration.numeric_log_level)

    return formatter
