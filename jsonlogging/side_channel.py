"""
Independent reporting channel for failures inside the formatter.

When a provider raises while the formatter is building an event, the
event is still emitted and the failure is reported here instead.  The
report must never go back through the ``logging`` module: the root
logger's handler is the very formatter that is failing, and routing the
report there could recurse without end.

The channel is a structlog logger wrapped directly around an
``OutputSink`` on ``sys.stderr`` with its own processor chain.  It
ignores both the global structlog configuration and the stdlib logging
tree.  Each report is one JSON line written under the same lock as event
lines, so a report never splits an event line on a shared stream.
"""

import sys

import structlog

import jsonlogging.output_sink

_SIDE_CHANNEL_PROCESSORS: list[structlog.types.Processor] = [
    structlog.processors.add_log_level,
    structlog.processors.TimeStamper(fmt="iso", utc=True),
    structlog.processors.format_exc_info,
    structlog.processors.JSONRenderer(),
]

LOGGER_NAME = "jsonlogging.side_channel"


class SinkLogger:
    """A structlog logger that writes each rendered event as one sink line."""

    def __init__(self, output_sink: jsonlogging.output_sink.OutputSink) -> None:
        self._output_sink = output_sink

    def msg(self, message: str) -> None:
        self._output_sink.write_line(message)

    log = debug = info = warning = error = critical = exception = msg


def _side_channel_logger() -> structlog.typing.FilteringBoundLogger:
    # Resolved per report so a replaced sys.stderr is honoured.
    return structlog.wrap_logger(
        SinkLogger(jsonlogging.output_sink.OutputSink(sys.stderr)),
        processors=_SIDE_CHANNEL_PROCESSORS,
        wrapper_class=structlog.make_filtering_bound_logger(0),
        context_class=dict,
        logger_name=LOGGER_NAME,
    )


def report_failure(event: str, source: object, error: BaseException) -> None:
    """
    Report that ``source`` raised ``error`` while an event was formatted.

    Never raises: a report that cannot be written is dropped so that the
    event being formatted is still emitted.

    Args:
        event: The machine-readable event name, for example
            ``"label_provider_failed"``.
        source: The provider or parameter that failed.
        error: The exception it raised.
    """
    try:
        source_description = repr(source)
    except Exception:
        source_description = f"<{type(source).__name__}>"

    try:
        _side_channel_logger().error(
            event,
            source=source_description,
            error_type=type(error).__name__,
            exc_info=error,
        )
    except Exception:
        # stderr is closed or unusable; there is nowhere left to report to.
        return
