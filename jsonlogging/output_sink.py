"""
Line-oriented output sink shared by every logging thread.

Formatting happens on the caller's thread without any lock.  Only the
write of one fully rendered line (and the flush that follows it) is
serialized, so lines from concurrent events never interleave and a slow
formatter never holds up other threads.

Every sink in the process takes the same write lock.  Event lines and
side-channel reports can share one stream (``output_stream="stderr"``),
and stdout and stderr often end up on the same terminal or pipe.

A sink created without a stream writes to whatever ``sys.stdout`` is at
the moment of the write, which keeps it working when ``sys.stdout`` is
replaced after start-up (for example by test capture).
"""

import sys
import threading
import typing

import jsonlogging.exceptions

LINE_TERMINATOR = "\n"

_WRITE_LOCK = threading.Lock()


class OutputSink:
    """
    Thread-safe writer of newline-terminated lines to a text stream.

    A failing write is not retried.  It raises ``SinkWriteError`` to the
    calling thread, since dropping log output silently is worse than a
    visible failure.
    """

    def __init__(self, stream: typing.TextIO | None = None) -> None:
        """
        Initialise the sink.

        Args:
            stream: The text stream to write to.  ``None`` selects the
                current ``sys.stdout`` on every write.
        """
        self._stream = stream

    @property
    def stream(self) -> typing.TextIO:
        """The stream the next line will be written to."""
        return self._stream if self._stream is not None else sys.stdout

    def write_line(self, line: str) -> None:
        """
        Write ``line`` followed by a newline and flush the stream.

        Raises:
            jsonlogging.exceptions.SinkWriteError: When the stream is
                closed or the write fails.
        """
        with _WRITE_LOCK:
            stream = self.stream
            try:
                stream.write(line + LINE_TERMINATOR)
                stream.flush()
            except (OSError, ValueError) as error:
                raise jsonlogging.exceptions.SinkWriteError(
                    f"Writing a log line to {getattr(stream, 'name', stream)!r} failed: {error}"
                ) from error
