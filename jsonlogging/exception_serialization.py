"""
Serialization of exceptions and their cause chains.

An exception is rendered as a nested object::

    {
        "type": "ValueError",
        "message": "invalid token",
        "frames": [
            {"file": "/app/auth.py", "line": 42, "method": "check_token"},
            {"file": "/app/routes.py", "line": 17, "method": "patch_user"}
        ],
        "cause": {"type": "KeyError", ...}
    }

Frames are listed innermost first, the frame that raised leading.  The
cause chain follows ``__cause__`` and, unless suppressed with
``raise ... from None``, ``__context__``, exactly as the interpreter
does when printing a traceback.

Cause chains can be arbitrarily long and can cycle back on themselves,
so the traversal is bounded.  When the depth limit stops it, the last
rendered node carries ``"truncated": true``; when a cycle stops it, the
last rendered node carries ``"circularCause": true``.
"""

import traceback
import types
import typing

import jsonlogging.json_values

DEFAULT_CAUSE_DEPTH_LIMIT = 10

TRUNCATED_CHAIN_MARKER = "(earlier exceptions in the cause chain were omitted)\n\n"

_CAUSE_SEPARATOR = "\nThe above exception was the direct cause of the following exception:\n\n"
_CONTEXT_SEPARATOR = "\nDuring handling of the above exception, another exception occurred:\n\n"


def serialize_exception(
    exception: BaseException,
    depth_limit: int = DEFAULT_CAUSE_DEPTH_LIMIT,
) -> dict[str, typing.Any]:
    """
    Render ``exception`` and its causes as nested JSON-safe objects.

    Args:
        exception: The exception to render.
        depth_limit: The maximum number of exceptions rendered, the
            outermost one included.  Values below 1 are treated as 1.

    Returns:
        The object describing ``exception``.
    """
    links, stop_reason = _chain_links(exception, depth_limit)

    root_node: dict[str, typing.Any] = {}
    current_node = root_node
    for index, link in enumerate(links):
        if index > 0:
            cause_node: dict[str, typing.Any] = {}
            current_node["cause"] = cause_node
            current_node = cause_node
        current_node.update(_describe(link))

    if stop_reason is not None:
        current_node[stop_reason] = True
    return root_node


def format_stack_trace(
    exception: BaseException,
    depth_limit: int = DEFAULT_CAUSE_DEPTH_LIMIT,
) -> str:
    """
    Return the interpreter's own text rendering of ``exception``.

    This is the form Google Cloud Error Reporting parses from the
    ``stack_trace`` payload field.  Only the first ``depth_limit``
    exceptions of the cause chain are rendered, root cause first as the
    interpreter prints them; a cut chain starts with
    ``TRUNCATED_CHAIN_MARKER``.
    """
    links, stop_reason = _chain_links(exception, depth_limit)

    parts: list[str] = []
    if stop_reason == "truncated":
        parts.append(TRUNCATED_CHAIN_MARKER)
    for index in range(len(links) - 1, -1, -1):
        parts.append(_format_single(links[index]))
        if index > 0:
            effect = links[index - 1]
            parts.append(_CAUSE_SEPARATOR if effect.__cause__ is links[index] else _CONTEXT_SEPARATOR)
    return "".join(parts)


def exception_type_name(exception: BaseException) -> str:
    """The qualified type name, without a module prefix for built-ins."""
    exception_type = type(exception)
    if exception_type.__module__ == "builtins":
        return exception_type.__qualname__
    return f"{exception_type.__module__}.{exception_type.__qualname__}"


def _chain_links(
    exception: BaseException,
    depth_limit: int,
) -> tuple[list[BaseException], str | None]:
    """
    Walk the cause chain, outermost first.

    Returns the exceptions to render and ``"truncated"``,
    ``"circularCause"`` or ``None`` for why the walk stopped.
    """
    depth_limit = max(depth_limit, 1)
    links = [exception]
    visited_exception_ids = {id(exception)}

    while True:
        next_exception = _next_in_chain(links[-1])
        if next_exception is None:
            return links, None
        if id(next_exception) in visited_exception_ids:
            return links, "circularCause"
        if len(links) >= depth_limit:
            return links, "truncated"
        links.append(next_exception)
        visited_exception_ids.add(id(next_exception))


def _format_single(exception: BaseException) -> str:
    try:
        return "".join(
            traceback.format_exception(type(exception), exception, exception.__traceback__, chain=False)
        )
    except Exception:
        return f"{exception_type_name(exception)}: {jsonlogging.json_values.safe_str(exception)}\n"


def _describe(exception: BaseException) -> dict[str, typing.Any]:
    return {
        "type": exception_type_name(exception),
        "message": jsonlogging.json_values.safe_str(exception),
        "frames": _frames_innermost_first(exception.__traceback__),
    }


def _frames_innermost_first(traceback_object: types.TracebackType | None) -> list[dict[str, typing.Any]]:
    if traceback_object is None:
        return []
    frames = [
        {"file": frame.filename, "line": frame.lineno, "method": frame.name}
        for frame in traceback.extract_tb(traceback_object)
    ]
    frames.reverse()
    return frames


def _next_in_chain(exception: BaseException) -> BaseException | None:
    if exception.__cause__ is not None:
        return exception.__cause__
    if exception.__suppress_context__:
        return None
    return exception.__context__
