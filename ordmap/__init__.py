"""
ordmap - Fluent ordered key/value collections

ordmap provides OrderedMap, a mutable container of (key, value) entries with
unique str/int keys and a chainable API for querying, mutating and deriving
collections:

    >>> from ordmap import collect
    >>> people = collect([{"name": "Alex", "age": 31}, {"name": "Beth", "age": 27}])
    >>> people.filter(lambda p: p["age"] > 30).map(lambda p: p["name"]).values().all()
    ['Alex']
    >>> people.sum("age")
    58
    >>> collect([1, 2, 3]).to_json()
    '[1,2,3]'

Submodules:
- ordmap.collection: OrderedMap and collect()
- ordmap.json: JSON encoder, flags, and OrderedMap-aware loaders
- ordmap.config: settings, environment overrides and the shared RNG
- ordmap.types: the exception taxonomy
"""

import logging

from ordmap.collection import OrderedMap, collect
from ordmap.config import Settings, configure, get_settings
from ordmap.json import JsonFlag, OrderedMapJSONEncoder
from ordmap.types import (
    CollectionError,
    ConfigError,
    EncodingError,
    InvalidKeyError,
    RangeError,
    TypeConversionError,
)

__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "OrderedMap",
    "collect",
    "JsonFlag",
    "OrderedMapJSONEncoder",
    "Settings",
    "configure",
    "get_settings",
    "CollectionError",
    "ConfigError",
    "EncodingError",
    "InvalidKeyError",
    "RangeError",
    "TypeConversionError",
    "__version__",
]
