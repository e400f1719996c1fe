"""
ordmap.types - Core type definitions for ordmap

This module contains the small pieces shared by the collection, JSON and
configuration modules:
- is_valid_key / check_key: the scalar key rule for entries
- CollectionError and its subclasses: the exception taxonomy

Every exception also derives from the closest built-in exception, so callers
can catch either ``RangeError`` or plain ``ValueError``.
"""

from typing import Any


class CollectionError(Exception):
    """Base class for every error raised by ordmap."""

    pass


class TypeConversionError(CollectionError, TypeError):
    """Raised when a value lacks the numeric or string shape an aggregate needs."""

    pass


class RangeError(CollectionError, ValueError):
    """Raised when a requested amount falls outside the collection's size."""

    pass


class EncodingError(CollectionError, ValueError):
    """Raised when a collection cannot be rendered as JSON."""

    pass


class InvalidKeyError(CollectionError, TypeError):
    """Raised when something other than a str or int is used as a key."""

    pass


class ConfigError(CollectionError, ValueError):
    """Raised for invalid settings or environment overrides."""

    pass


def is_valid_key(key: Any) -> bool:
    """
    Check whether ``key`` can be stored as an entry key.

    Keys are scalars: ``str`` or ``int``. ``bool`` is refused even though it
    subclasses ``int``, since ``True`` and ``1`` would silently share a slot.
    """
    if isinstance(key, bool):
        return False
    return isinstance(key, (str, int))


def check_key(key: Any) -> Any:
    """Return ``key`` unchanged, or raise InvalidKeyError if it is not a scalar."""
    if not is_valid_key(key):
        raise InvalidKeyError(
            f"Keys must be str or int, got {type(key).__name__}: {key!r}"
        )
    return key


__all__ = [
    "CollectionError",
    "TypeConversionError",
    "RangeError",
    "EncodingError",
    "InvalidKeyError",
    "ConfigError",
    "is_valid_key",
    "check_key",
]
