"""
ordmap.json - JSON serialization support for OrderedMap.

This module provides a custom JSON encoder that can serialize OrderedMap
(including OrderedMaps nested inside lists, dicts or other OrderedMaps) and
the ``encode`` function behind ``OrderedMap.to_json``.

Positional maps (keys 0..n-1 in order) become JSON arrays; any other map
becomes a JSON object with its keys rendered as strings.

Usage:
    import json
    from ordmap.json import OrderedMapJSONEncoder, dumps

    # Using the encoder class directly
    data = collect({"name": "ordmap", "tags": collect(["a", "b"])})
    json.dumps(data, cls=OrderedMapJSONEncoder)

    # Using the convenience function
    dumps(data)  # Equivalent to above

    # Flags and depth limit, as used by to_json
    encode(data, flags=JsonFlag.PRETTY_PRINT | JsonFlag.SORT_KEYS, depth=16)
"""

import enum
import json
import logging
import math
from typing import Any, Optional, TextIO

from ordmap.collection import OrderedMap
from ordmap.config import get_settings
from ordmap.types import EncodingError

logger = logging.getLogger(__name__)


class JsonFlag(enum.IntFlag):
    """Formatting flags accepted by encode() and OrderedMap.to_json()."""

    NONE = 0
    # Indent with four spaces and put a space after ':'
    PRETTY_PRINT = 1
    # Emit non-ASCII characters as-is instead of \uXXXX escapes
    UNESCAPED_UNICODE = 2
    # Encode every list and positional map as an object keyed "0", "1", ...
    FORCE_OBJECT = 4
    SORT_KEYS = 8
    # Replace non-finite floats with 0 and unencodable values with null
    PARTIAL_OUTPUT_ON_ERROR = 16


class OrderedMapJSONEncoder(json.JSONEncoder):
    """
    JSON encoder that handles OrderedMap.

    Supported types:
    - OrderedMap -> list when positional, dict otherwise

    When constructed with ``partial_output=True`` any other unencodable value
    is written as null instead of raising.

    Example:
        >>> from ordmap import collect
        >>> from ordmap.json import OrderedMapJSONEncoder
        >>> import json
        >>> json.dumps(collect({"items": collect([1, 2, 3])}), cls=OrderedMapJSONEncoder)
        '{"items": [1, 2, 3]}'
    """

    def __init__(self, *args: Any, partial_output: bool = False, **kwargs: Any):
        super().__init__(*args, **kwargs)
        self.partial_output = partial_output

    def default(self, o: Any) -> Any:
        """
        Convert OrderedMap to a JSON-serializable Python type.

        Raises:
            TypeError: If the object is not JSON serializable.
        """
        if isinstance(o, OrderedMap):
            return o.json_serialize()

        if self.partial_output:
            return None

        # Fall back to default behavior (will raise TypeError)
        return super().default(o)


def _convert_key(key: Any) -> Any:
    """Render scalar keys as the strings json writes for object keys."""
    if key is True:
        return "true"
    if key is False:
        return "false"
    if key is None:
        return "null"
    if isinstance(key, int):
        return str(key)
    if isinstance(key, float) and math.isfinite(key):
        return float.__repr__(key)
    return key


def _prepare(
    obj: Any,
    level: int,
    depth: int,
    active: set,
    force_object: bool,
    partial: bool,
) -> Any:
    """
    Turn ``obj`` into plain lists/dicts ready for json.dumps.

    Enforces the depth limit, detects reference cycles by object identity and
    handles non-finite floats, so that json.dumps itself only ever fails on
    genuinely unencodable values.
    """
    if isinstance(obj, float) and not math.isfinite(obj):
        if partial:
            return 0
        raise EncodingError(f"Inf and NaN cannot be JSON encoded: {obj!r}")

    if isinstance(obj, OrderedMap):
        container = obj.all()
    elif isinstance(obj, (list, tuple, dict)):
        container = obj
    else:
        return obj

    if level >= depth:
        raise EncodingError(f"Maximum nesting depth of {depth} exceeded")

    marker = id(obj)
    if marker in active:
        raise EncodingError("Circular reference detected")
    active.add(marker)
    try:
        # Plain loops: one stack frame per nesting level
        if isinstance(container, dict):
            mapping = {}
            for key, value in container.items():
                name = _convert_key(key)
                if name in mapping:
                    raise EncodingError(
                        f"Key {key!r} collides with another key encoded as {name!r}"
                    )
                mapping[name] = _prepare(
                    value, level + 1, depth, active, force_object, partial
                )
            return mapping
        items = []
        for value in container:
            items.append(
                _prepare(value, level + 1, depth, active, force_object, partial)
            )
        if force_object:
            return {str(position): value for position, value in enumerate(items)}
        return items
    finally:
        active.discard(marker)


def encode(obj: Any, flags: Optional[int] = None, depth: Optional[int] = None) -> str:
    """
    Encode ``obj`` (usually an OrderedMap) as JSON text.

    Args:
        obj: The value to encode.
        flags: JsonFlag combination. Defaults to the configured json_flags.
        depth: Maximum nesting depth. Defaults to the configured json_depth.

    Returns:
        Compact JSON text (no spaces) unless PRETTY_PRINT is set.

    Raises:
        EncodingError: If the value contains something JSON cannot represent,
            a reference cycle, a non-finite float, or nests deeper than ``depth``.

    Example:
        >>> from ordmap import collect
        >>> encode(collect([1, 2, 3]))
        '[1,2,3]'
        >>> encode(collect({"a": 1}), flags=JsonFlag.PRETTY_PRINT)
        '{\\n    "a": 1\\n}'
    """
    settings = get_settings()
    flags = JsonFlag(settings.json_flags if flags is None else flags)
    depth = settings.json_depth if depth is None else depth
    pretty = bool(flags & JsonFlag.PRETTY_PRINT)
    partial = bool(flags & JsonFlag.PARTIAL_OUTPUT_ON_ERROR)

    try:
        prepared = _prepare(
            obj,
            level=0,
            depth=depth,
            active=set(),
            force_object=bool(flags & JsonFlag.FORCE_OBJECT),
            partial=partial,
        )
        return json.dumps(
            prepared,
            cls=OrderedMapJSONEncoder,
            partial_output=partial,
            ensure_ascii=not flags & JsonFlag.UNESCAPED_UNICODE,
            allow_nan=False,
            indent=4 if pretty else None,
            separators=(",", ": ") if pretty else (",", ":"),
            sort_keys=bool(flags & JsonFlag.SORT_KEYS),
        )
    except EncodingError as e:
        logger.debug("JSON encoding failed: %s", e)
        raise
    except (TypeError, ValueError, RecursionError) as e:
        logger.debug("JSON encoding failed: %s", e)
        raise EncodingError(str(e)) from e


def dumps(
    obj: Any,
    *,
    skipkeys: bool = False,
    ensure_ascii: bool = True,
    check_circular: bool = True,
    allow_nan: bool = True,
    indent: int | str | None = None,
    separators: tuple[str, str] | None = None,
    default: Any = None,
    sort_keys: bool = False,
    **kwargs: Any,
) -> str:
    """
    Serialize an object containing OrderedMaps to a JSON formatted string.

    This is a convenience wrapper around json.dumps that uses
    OrderedMapJSONEncoder by default. Unlike encode() it keeps json.dumps'
    own formatting defaults and raises json's own exceptions.

    Example:
        >>> from ordmap import collect
        >>> dumps(collect({"name": "ordmap"}))
        '{"name": "ordmap"}'
    """
    return json.dumps(
        obj,
        cls=OrderedMapJSONEncoder,
        skipkeys=skipkeys,
        ensure_ascii=ensure_ascii,
        check_circular=check_circular,
        allow_nan=allow_nan,
        indent=indent,
        separators=separators,
        default=default,
        sort_keys=sort_keys,
        **kwargs,
    )


def dump(
    obj: Any,
    fp: Any,
    *,
    skipkeys: bool = False,
    ensure_ascii: bool = True,
    check_circular: bool = True,
    allow_nan: bool = True,
    indent: int | str | None = None,
    separators: tuple[str, str] | None = None,
    default: Any = None,
    sort_keys: bool = False,
    **kwargs: Any,
) -> None:
    """
    Serialize an object containing OrderedMaps to a JSON formatted stream.

    Example:
        >>> from ordmap import collect
        >>> with open("data.json", "w") as f:
        ...     dump(collect({"name": "ordmap"}), f)
    """
    json.dump(
        obj,
        fp,
        cls=OrderedMapJSONEncoder,
        skipkeys=skipkeys,
        ensure_ascii=ensure_ascii,
        check_circular=check_circular,
        allow_nan=allow_nan,
        indent=indent,
        separators=separators,
        default=default,
        sort_keys=sort_keys,
        **kwargs,
    )


# These produce plain Python types and need no special handling
loads = json.loads
load = json.load


def _to_ordered(obj: Any) -> Any:
    """Recursively convert parsed dicts and lists into OrderedMaps."""
    if isinstance(obj, dict):
        return OrderedMap({key: _to_ordered(value) for key, value in obj.items()})

    if isinstance(obj, list):
        return OrderedMap([_to_ordered(item) for item in obj])

    # Primitives (str, int, float, bool, None) pass through unchanged
    return obj


def loads_ordered(s: str | bytes | bytearray, **kwargs: Any) -> Any:
    """
    Parse a JSON string, turning every array and object into an OrderedMap.

    Object keys stay strings: '{"0": "a"}' gives a map keyed "0", which is
    not positional.

    Example:
        >>> loads_ordered('{"name": "Alice", "items": [1, 2, 3]}')
        OrderedMap({'name': 'Alice', 'items': OrderedMap({0: 1, 1: 2, 2: 3})})
    """
    return _to_ordered(json.loads(s, **kwargs))


def load_ordered(fp: TextIO, **kwargs: Any) -> Any:
    """Parse JSON from a file, turning every array and object into an OrderedMap."""
    return _to_ordered(json.load(fp, **kwargs))


__all__ = [
    "JsonFlag",
    "OrderedMapJSONEncoder",
    "encode",
    "dumps",
    "dump",
    "loads",
    "load",
    "loads_ordered",
    "load_ordered",
]
