"""
ordmap.collection - The OrderedMap collection

OrderedMap wraps an insertion-ordered sequence of (key, value) entries and
exposes a fluent API over it. Keys are scalars (str or int); values are
arbitrary.

Methods fall into two families and never switch between them:
- Mutating operations change the receiver in place: put, push, remove, pull,
  pop, shift, values, transform. values() and transform() return the
  receiver so they can be chained; the others return None or the removed value.
- Derivation operations return a new, independent OrderedMap and leave the
  receiver untouched: keys, map, filter, unique, duplicates, reverse,
  shuffle, flip, copy, and random() when it returns more than one entry.

A map whose keys are exactly 0..n-1 in order is "positional". all(),
to_array() and to_json() render positional maps as lists and every other
map as a dict/object.
"""

import logging
import numbers
from collections.abc import Mapping
from typing import Any, Callable, Iterator, Optional, Union

from ordmap.config import get_random
from ordmap.types import (
    InvalidKeyError,
    RangeError,
    TypeConversionError,
    check_key,
    is_valid_key,
)

logger = logging.getLogger(__name__)


def _entries_from(items: Any) -> dict:
    """Build the backing dict for a new OrderedMap from user-supplied items."""
    if items is None:
        return {}
    if isinstance(items, OrderedMap):
        return dict(items._items)
    if isinstance(items, Mapping):
        return {check_key(key): value for key, value in items.items()}
    if isinstance(items, (str, bytes, bytearray)):
        raise TypeError(
            f"Cannot build an OrderedMap from {type(items).__name__}; "
            "wrap it in a list to store it as a single value"
        )
    try:
        iterator = iter(items)
    except TypeError:
        raise TypeError(
            f"Cannot build an OrderedMap from {type(items).__name__}"
        ) from None
    return dict(enumerate(iterator))


def _renumber(items: dict) -> dict:
    """Renumber integer keys to 0..n-1 in order, keeping string keys as they are."""
    renumbered = {}
    position = 0
    for key, value in items.items():
        if isinstance(key, int):
            renumbered[position] = value
            position += 1
        else:
            renumbered[key] = value
    return renumbered


def _first_sighting(value: Any, seen: set, seen_unhashable: list) -> bool:
    """
    Record ``value`` and report whether it had not been seen before.

    Hashable values are tracked in a set; unhashable ones (lists, dicts,
    OrderedMaps) fall back to a linear scan with ==.
    """
    try:
        if value in seen:
            return False
        seen.add(value)
        return True
    except TypeError:
        for other in seen_unhashable:
            if other == value:
                return False
        seen_unhashable.append(value)
        return True


def _stringify(value: Any) -> str:
    """Return the natural string form of a value for implode()."""
    if value is None:
        return ""
    if isinstance(value, (str, numbers.Number)):
        return str(value)
    # Containers and plain objects only have object.__str__, which is just repr
    if type(value).__str__ is not object.__str__:
        return str(value)
    raise TypeConversionError(
        f"Cannot convert {type(value).__name__} value to a string: {value!r}"
    )


def _pluck(value: Any, key: Any) -> Any:
    """Read value[key] for sum(key=...)."""
    try:
        return value[key]
    except (KeyError, IndexError, TypeError) as e:
        raise TypeConversionError(
            f"Cannot read {key!r} from {type(value).__name__} value: {value!r}"
        ) from e


class OrderedMap:
    """
    An ordered collection of (key, value) entries with unique scalar keys.

    Build one from a list (positional keys), a mapping (its own keys), another
    OrderedMap (shallow copy) or any other finite iterable:

        >>> coll = OrderedMap(["red", "green"])
        >>> coll.map(lambda color: color + " apple").all()
        ['red apple', 'green apple']
        >>> OrderedMap({"a": 1, "b": 2}).flip().all()
        {1: 'a', 2: 'b'}

    Iterating yields the values, like a list; items() yields (key, value)
    entries. Both work from a snapshot, so a loop may safely mutate the map
    it is iterating over. Together with keys() and item access this makes
    dict(coll) and {**coll} return the entries as a plain dict.
    """

    def __init__(self, items: Any = None):
        self._items: dict = _entries_from(items)

    @classmethod
    def create(cls, items: Any = None) -> "OrderedMap":
        """Create a collection from the given items."""
        return cls(items)

    def _derive(self, items: dict) -> "OrderedMap":
        """Wrap an already-validated dict in a new instance of the same class."""
        derived = type(self).__new__(type(self))
        derived._items = items
        return derived

    def _is_positional(self) -> bool:
        for position, key in enumerate(self._items):
            if key != position:
                return False
        return True

    # -------------------------------------------------------------------------
    # Read operations
    # -------------------------------------------------------------------------

    def all(self) -> Union[list, dict]:
        """
        Return the entries as plain Python data.

        Positional maps come back as a list of values, everything else as a
        dict. Values are returned as-is (nested OrderedMaps are not converted;
        see to_array for that).
        """
        if self._is_positional():
            return list(self._items.values())
        return dict(self._items)

    def get(self, key: Any, default: Any = None) -> Any:
        """Get a value by its key, or ``default`` when the key is absent."""
        if self.has(key):
            return self._items[key]
        return default

    def has(self, key: Any) -> bool:
        """Check whether an entry with ``key`` exists, even if its value is None."""
        return is_valid_key(key) and key in self._items

    def first(self) -> Any:
        """Return the first value, or None when empty."""
        return next(iter(self._items.values()), None)

    def last(self) -> Any:
        """Return the last value, or None when empty."""
        return next(reversed(self._items.values()), None)

    def count(self) -> int:
        return len(self._items)

    def is_empty(self) -> bool:
        return not self._items

    def is_not_empty(self) -> bool:
        return bool(self._items)

    def to_array(self) -> Union[list, dict]:
        """Return the entries as plain data, converting nested OrderedMaps too."""
        converted = {
            key: value.to_array() if isinstance(value, OrderedMap) else value
            for key, value in self._items.items()
        }
        if self._is_positional():
            return list(converted.values())
        return converted

    def json_serialize(self) -> Union[list, dict]:
        """Return the JSON-compatible representation used by the JSON encoder."""
        return self.to_array()

    def to_json(self, flags: Optional[int] = None, depth: Optional[int] = None) -> str:
        """
        Render the collection as JSON text.

        Args:
            flags: JsonFlag combination. Defaults to the configured json_flags.
            depth: Maximum nesting depth. Defaults to the configured json_depth (512).

        Raises:
            EncodingError: For unencodable values, cycles, non-finite floats,
                or nesting deeper than ``depth``.
        """
        from ordmap.json import encode

        return encode(self, flags=flags, depth=depth)

    def implode(self, glue: str = "") -> str:
        """Join the string form of every value with ``glue``."""
        return glue.join(_stringify(value) for value in self._items.values())

    def sum(self, key: Any = None) -> Any:
        """
        Sum the values in the collection.

        Args:
            key: None to sum the values themselves, a key to sum ``value[key]``
                 across entries, or a callable to sum ``key(value)``.

        Raises:
            TypeConversionError: If an operand is not a number, or a value
                cannot be indexed by ``key``.
        """
        values = self._items.values()
        if key is None:
            operands = iter(values)
        elif callable(key):
            operands = (key(value) for value in values)
        else:
            operands = (_pluck(value, key) for value in values)

        total = 0
        for operand in operands:
            if not isinstance(operand, numbers.Number):
                raise TypeConversionError(
                    f"Cannot sum non-numeric {type(operand).__name__} value: {operand!r}"
                )
            total = total + operand
        return total

    def random(self, amount: int = 1) -> Any:
        """
        Pick one or more entries at random.

        Returns None for an empty collection, a bare value when ``amount`` is 1,
        and otherwise a new OrderedMap holding ``amount`` distinct entries in
        their original order with their original keys.

        Raises:
            RangeError: If ``amount`` is below 1 or larger than count().
        """
        if self.is_empty():
            return None

        if isinstance(amount, bool) or not isinstance(amount, int):
            raise TypeError(f"amount must be an int, got {type(amount).__name__}")
        available = len(self._items)
        if amount < 1 or amount > available:
            raise RangeError(
                f"amount must be between 1 and the number of items ({available}), "
                f"got {amount}"
            )

        rng = get_random()
        keys = list(self._items)
        if amount == 1:
            return self._items[rng.choice(keys)]

        chosen = set(rng.sample(keys, amount))
        return self._derive(
            {key: value for key, value in self._items.items() if key in chosen}
        )

    def reduce(self, fn: Callable[[Any, Any], Any], initial: Any = None) -> Any:
        """Fold the values left to right: fn(accumulator, value)."""
        acc = initial
        for value in self._items.values():
            acc = fn(acc, value)
        return acc

    # -------------------------------------------------------------------------
    # Mutating operations
    # -------------------------------------------------------------------------

    def put(self, key: Any, value: Any) -> None:
        """Set ``key`` to ``value``, overwriting any existing entry."""
        self._items[check_key(key)] = value

    def push(self, value: Any) -> None:
        """
        Append ``value`` under the integer key count().

        The key is the current size, not the largest integer key plus one, so
        on a sparse map this can land on (and overwrite) an existing entry.
        """
        key = len(self._items)
        if key in self._items:
            logger.debug("push() overwrote existing key %r", key)
        self._items[key] = value

    def remove(self, key: Any) -> None:
        """Remove the entry at ``key``; does nothing when the key is absent."""
        if self.has(key):
            del self._items[key]

    def pull(self, key: Any, default: Any = None) -> Any:
        """Remove the entry at ``key`` and return its value (or ``default``)."""
        value = self.get(key, default)
        self.remove(key)
        return value

    def pop(self) -> Any:
        """Remove and return the last value, or None when empty."""
        if not self._items:
            return None
        return self._items.popitem()[1]

    def shift(self) -> Any:
        """
        Remove and return the first value, or None when empty.

        Integer keys of the remaining entries are renumbered from 0; string
        keys are kept.
        """
        if not self._items:
            return None
        value = self._items.pop(next(iter(self._items)))
        self._items = _renumber(self._items)
        return value

    def values(self) -> "OrderedMap":
        """Re-key every entry to its position, in place. Returns self."""
        self._items = dict(enumerate(self._items.values()))
        return self

    def transform(self, fn: Callable[[Any], Any]) -> "OrderedMap":
        """Replace every value with fn(value), in place. Returns self."""
        self._items = {key: fn(value) for key, value in self._items.items()}
        return self

    # -------------------------------------------------------------------------
    # Derivation operations
    # -------------------------------------------------------------------------

    def copy(self) -> "OrderedMap":
        return self._derive(dict(self._items))

    def keys(self) -> "OrderedMap":
        """Return the keys as a new positional collection."""
        return self._derive(dict(enumerate(self._items)))

    def map(self, fn: Callable[[Any], Any]) -> "OrderedMap":
        """Return a new collection with fn applied to every value, same keys."""
        return self._derive({key: fn(value) for key, value in self._items.items()})

    def filter(self, predicate: Optional[Callable[[Any], Any]] = None) -> "OrderedMap":
        """
        Return a new collection of the entries whose value passes ``predicate``.

        Without a predicate, entries with falsy values are dropped. Keys are
        preserved; call values() on the result for contiguous positions.
        """
        if predicate is None:
            predicate = bool
        return self._derive(
            {key: value for key, value in self._items.items() if predicate(value)}
        )

    def unique(self) -> "OrderedMap":
        """Return a new collection keeping the first occurrence of each value."""
        seen: set = set()
        seen_unhashable: list = []
        return self._derive(
            {
                key: value
                for key, value in self._items.items()
                if _first_sighting(value, seen, seen_unhashable)
            }
        )

    def duplicates(self) -> "OrderedMap":
        """
        Return a new collection of the values that occur more than once.

        Each repeated value appears once, under the key of its second
        occurrence. First occurrences are never included.
        """
        seen: set = set()
        seen_unhashable: list = []
        reported: set = set()
        reported_unhashable: list = []
        result = {}
        for key, value in self._items.items():
            if _first_sighting(value, seen, seen_unhashable):
                continue
            if _first_sighting(value, reported, reported_unhashable):
                result[key] = value
        return self._derive(result)

    def reverse(self) -> "OrderedMap":
        """Return a new collection in reverse order; keys travel with their values."""
        return self._derive(dict(reversed(self._items.items())))

    def shuffle(self) -> "OrderedMap":
        """Return a new collection of the values in random order, re-keyed by position."""
        values = list(self._items.values())
        get_random().shuffle(values)
        return self._derive(dict(enumerate(values)))

    def flip(self) -> "OrderedMap":
        """
        Return a new collection mapping each value to its key.

        When several entries share a value the last one wins.

        Raises:
            InvalidKeyError: If a value is not a str or int.
        """
        flipped = {}
        for key, value in self._items.items():
            if not is_valid_key(value):
                raise InvalidKeyError(
                    f"Can only flip str and int values, got {type(value).__name__}: "
                    f"{value!r}"
                )
            if value in flipped:
                logger.debug(
                    "flip() collision on %r: key %r replaces %r",
                    value,
                    key,
                    flipped[value],
                )
            flipped[value] = key
        return self._derive(flipped)

    # -------------------------------------------------------------------------
    # Python protocols
    # -------------------------------------------------------------------------

    def items(self) -> Iterator[tuple[Any, Any]]:
        """Iterate over (key, value) entries in insertion order."""
        return iter(list(self._items.items()))

    def __iter__(self) -> Iterator[Any]:
        return iter(list(self._items.values()))

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, key: Any) -> bool:
        return self.has(key)

    def __getitem__(self, key: Any) -> Any:
        if not self.has(key):
            raise KeyError(key)
        return self._items[key]

    def __setitem__(self, key: Any, value: Any) -> None:
        self.put(key, value)

    def __delitem__(self, key: Any) -> None:
        if not self.has(key):
            raise KeyError(key)
        del self._items[key]

    def __eq__(self, other):
        if isinstance(other, OrderedMap):
            return list(self._items.items()) == list(other._items.items())
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self):
        return f"{type(self).__name__}({self._items!r})"

    def __str__(self):
        return self.to_json()


def collect(items: Any = None) -> OrderedMap:
    """Create an OrderedMap from the given items."""
    return OrderedMap(items)


__all__ = ["OrderedMap", "collect"]
