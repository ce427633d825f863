"""
Conversion of arbitrary Python values into JSON-safe values.

Payload fields come from application code and may hold anything.  The
formatter must never fail while serializing an event, so every value is
converted before it reaches ``json.dumps``:

- ``str``, ``int``, ``bool`` and ``None`` pass through unchanged.
- Finite ``float`` values pass through; ``NaN`` and the infinities, which
  have no JSON representation, become their string form.
- Mappings become objects with string keys.
- Lists, tuples and sets become arrays (sets are sorted by string form
  to stay deterministic).
- A container that contains itself becomes ``"<circular reference>"``.
- Containers nested deeper than the configured limit become their
  string form.
- Anything else becomes ``str(value)``, or a placeholder naming the type
  when ``str()`` itself raises.
"""

import collections.abc
import math
import typing

CIRCULAR_REFERENCE_PLACEHOLDER = "<circular reference>"

DEFAULT_MAXIMUM_NESTING_DEPTH = 32


def to_json_safe(value: typing.Any, maximum_depth: int = DEFAULT_MAXIMUM_NESTING_DEPTH) -> typing.Any:
    """Return a JSON-serializable rendition of ``value``."""
    return _convert(value, maximum_depth, set())


def safe_str(value: object) -> str:
    """``str(value)``, never raising."""
    try:
        return str(value)
    except Exception:
        return f"<unprintable {type(value).__name__}>"


def _convert(value: typing.Any, remaining_depth: int, active_container_ids: set[int]) -> typing.Any:
    if value is None or isinstance(value, (str, bool, int)):
        return value
    if isinstance(value, float):
        return value if math.isfinite(value) else safe_str(value)

    is_mapping = isinstance(value, collections.abc.Mapping)
    is_sequence = isinstance(value, (list, tuple, set, frozenset))
    if not is_mapping and not is_sequence:
        return safe_str(value)

    if remaining_depth <= 0:
        return safe_str(value)

    container_id = id(value)
    if container_id in active_container_ids:
        return CIRCULAR_REFERENCE_PLACEHOLDER

    active_container_ids.add(container_id)
    try:
        if is_mapping:
            return {
                key if isinstance(key, str) else safe_str(key): _convert(item, remaining_depth - 1, active_container_ids)
                for key, item in value.items()
            }
        items = sorted(value, key=safe_str) if isinstance(value, (set, frozenset)) else value
        return [_convert(item, remaining_depth - 1, active_container_ids) for item in items]
    finally:
        active_container_ids.discard(container_id)
