"""
``logging.Handler`` that hands records to a ``CloudLoggingFormatter``.

The standard ``Handler.handle`` holds the handler lock around ``emit``,
which would serialize the whole formatting step across threads.  This
handler skips that lock: formatting runs concurrently on each caller's
thread and only the final line write is serialized, inside the
formatter's ``OutputSink``.

Write failures are not passed to ``Handler.handleError`` (which prints
and carries on).  They propagate out of the logging call as
``SinkWriteError``.
"""

import logging

import jsonlogging.formatter


class CloudLoggingHandler(logging.Handler):
    """Emits every accepted record as one Cloud Logging JSON line."""

    def __init__(
        self,
        formatter: jsonlogging.formatter.CloudLoggingFormatter,
        level: int | str = logging.NOTSET,
    ) -> None:
        super().__init__(level)
        self._cloud_logging_formatter = formatter
        self.setFormatter(formatter)

    @property
    def cloud_logging_formatter(self) -> jsonlogging.formatter.CloudLoggingFormatter:
        return self._cloud_logging_formatter

    def handle(self, record: logging.LogRecord) -> logging.LogRecord | bool:
        filtered = self.filter(record)
        # Since Python 3.12 a filter may return a replacement record.
        if isinstance(filtered, logging.LogRecord):
            record = filtered
        if filtered:
            self.emit(record)
        return filtered

    def emit(self, record: logging.LogRecord) -> None:
        self._cloud_logging_formatter.write(record)
