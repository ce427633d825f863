"""
Thread-scoped diagnostic context (the Python counterpart of an MDC).

Application code puts string key/value pairs into the context; the
formatter copies them into the ``jsonPayload`` of every event logged from
the same thread::

    jsonlogging.diagnostic_context.put("resource", "/users/mulk")
    jsonlogging.diagnostic_context.put("method", "PATCH")
    logger.info("Request rejected: unauthorized.")

The context is stored in ``structlog.contextvars``, which keeps one
mapping per ``contextvars`` context.  Every new thread starts with an
empty mapping and so does every asyncio task created from an empty
context; a task created from a populated context starts with a copy.
Entries bound by other code through ``structlog.contextvars`` (for
example a request correlation ID) are therefore part of the diagnostic
context as well.

Nothing here clears the context implicitly.  Callers remove entries when
they stop being relevant, or use ``bound()`` to scope them to a block.
"""

import collections.abc
import contextlib

import structlog.contextvars


def put(key: str, value: object) -> None:
    """Set ``key`` to the string form of ``value`` for the calling thread."""
    structlog.contextvars.bind_contextvars(**{key: value if isinstance(value, str) else str(value)})


def remove(key: str) -> None:
    """Remove ``key`` from the calling thread's context if present."""
    structlog.contextvars.unbind_contextvars(key)


def clear() -> None:
    """Remove every entry from the calling thread's context."""
    structlog.contextvars.clear_contextvars()


def snapshot() -> dict[str, str]:
    """
    Return a copy of the calling thread's context.

    The copy is taken from a single ``contextvars.copy_context()`` call,
    so it never reflects a partially applied update.  Values bound by
    other code as non-strings are converted to their string form.
    """
    return {
        key: value if isinstance(value, str) else str(value)
        for key, value in structlog.contextvars.get_contextvars().items()
    }


@contextlib.contextmanager
def bound(**entries: object) -> collections.abc.Iterator[None]:
    """
    Put ``entries`` into the context for the duration of a ``with`` block.

    Previous values of the same keys are restored on exit.
    """
    with structlog.contextvars.bound_contextvars(
        **{key: value if isinstance(value, str) else str(value) for key, value in entries.items()}
    ):
        yield
