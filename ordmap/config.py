"""
ordmap.config - Runtime settings

This module holds the few knobs ordmap exposes: JSON encoding defaults,
the seed of the random generator used by ``random()`` and ``shuffle()``,
and a debug switch that routes the package's log records to stderr.

Settings are read lazily from the environment on first use:
    ORDMAP_JSON_DEPTH    maximum nesting depth for to_json (default 512)
    ORDMAP_JSON_FLAGS    integer JsonFlag combination (default 0)
    ORDMAP_RANDOM_SEED   seed for the shared random generator
    ORDMAP_DEBUG         "1"/"true"/"yes"/"on" enables debug logging

and can be replaced at runtime with ``configure()``.
"""

import dataclasses
import logging
import os
import random
import sys
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from ordmap.types import ConfigError

logger = logging.getLogger(__name__)

# Default configuration values
DEFAULT_JSON_DEPTH = 512
DEFAULT_JSON_FLAGS = 0
ENV_PREFIX = "ORDMAP_"

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off", ""}


@dataclass(frozen=True)
class Settings:
    """
    Package-wide settings.

    Fields:
        json_depth: Maximum nesting depth accepted by to_json
        json_flags: Default JsonFlag combination for to_json
        random_seed: Seed for the shared random generator (None for system entropy)
        debug: Route ordmap log records to stderr at DEBUG level
    """

    json_depth: int = DEFAULT_JSON_DEPTH
    json_flags: int = DEFAULT_JSON_FLAGS
    random_seed: Optional[int] = None
    debug: bool = False

    def __post_init__(self):
        if isinstance(self.json_depth, bool) or not isinstance(self.json_depth, int):
            raise ConfigError(
                f"json_depth must be an int, got {type(self.json_depth).__name__}"
            )
        if self.json_depth < 1:
            raise ConfigError(f"json_depth must be positive, got {self.json_depth}")
        if isinstance(self.json_flags, bool) or not isinstance(self.json_flags, int):
            raise ConfigError(
                f"json_flags must be an int, got {type(self.json_flags).__name__}"
            )
        if self.json_flags < 0:
            raise ConfigError(f"json_flags must not be negative, got {self.json_flags}")
        if self.random_seed is not None and (
            isinstance(self.random_seed, bool) or not isinstance(self.random_seed, int)
        ):
            raise ConfigError(
                f"random_seed must be an int or None, got {type(self.random_seed).__name__}"
            )

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """
        Build Settings from ORDMAP_* environment variables.

        Args:
            environ: Mapping to read from. If None, uses os.environ.

        Returns:
            A Settings instance with defaults for any unset variable.

        Raises:
            ConfigError: If a variable is set but cannot be parsed.
        """
        if environ is None:
            environ = os.environ

        kwargs: dict[str, Any] = {}

        depth = environ.get(ENV_PREFIX + "JSON_DEPTH")
        if depth is not None:
            kwargs["json_depth"] = _parse_int("JSON_DEPTH", depth)

        flags = environ.get(ENV_PREFIX + "JSON_FLAGS")
        if flags is not None:
            kwargs["json_flags"] = _parse_int("JSON_FLAGS", flags)

        seed = environ.get(ENV_PREFIX + "RANDOM_SEED")
        if seed is not None and seed.strip():
            kwargs["random_seed"] = _parse_int("RANDOM_SEED", seed)

        debug = environ.get(ENV_PREFIX + "DEBUG")
        if debug is not None:
            kwargs["debug"] = _parse_bool("DEBUG", debug)

        return cls(**kwargs)


def _parse_int(name: str, raw: str) -> int:
    try:
        return int(raw.strip())
    except ValueError as e:
        raise ConfigError(f"{ENV_PREFIX}{name} must be an integer, got {raw!r}") from e


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUTHY:
        return True
    if value in _FALSY:
        return False
    raise ConfigError(f"{ENV_PREFIX}{name} must be a boolean flag, got {raw!r}")


_settings: Optional[Settings] = None
_random = random.Random()
_debug_handler: Optional[logging.Handler] = None
# Level the package logger had before debug output was switched on
_previous_level = logging.NOTSET


def _apply(settings: Settings) -> None:
    """Install settings: reseed the generator and toggle the debug handler."""
    global _settings, _debug_handler, _previous_level

    _settings = settings
    _random.seed(settings.random_seed)

    package_logger = logging.getLogger("ordmap")
    if settings.debug and _debug_handler is None:
        _debug_handler = logging.StreamHandler(sys.stderr)
        _debug_handler.setFormatter(
            logging.Formatter("[ordmap] %(levelname)s %(name)s: %(message)s")
        )
        package_logger.addHandler(_debug_handler)
        _previous_level = package_logger.level
        package_logger.setLevel(logging.DEBUG)
    elif not settings.debug and _debug_handler is not None:
        package_logger.removeHandler(_debug_handler)
        package_logger.setLevel(_previous_level)
        _debug_handler = None


def get_settings() -> Settings:
    """Return the active settings, loading them from the environment on first use."""
    if _settings is None:
        _apply(Settings.from_env())
    assert _settings is not None
    return _settings


def configure(**overrides: Any) -> Settings:
    """
    Replace individual settings.

    Unknown names raise ConfigError. The shared random generator is reseeded
    from the resulting ``random_seed`` every time this is called.

    Example:
        >>> configure(random_seed=42, json_depth=64)
        Settings(json_depth=64, json_flags=0, random_seed=42, debug=False)
    """
    known = {f.name for f in dataclasses.fields(Settings)}
    unknown = sorted(set(overrides) - known)
    if unknown:
        raise ConfigError(f"Unknown setting(s): {', '.join(unknown)}")

    settings = dataclasses.replace(get_settings(), **overrides)
    _apply(settings)
    logger.debug("Settings updated: %r", settings)
    return settings


def reset_settings() -> None:
    """Forget the active settings so the next access re-reads the environment."""
    global _settings
    _apply(Settings())
    _settings = None


def get_random() -> random.Random:
    """Return the random generator shared by random() and shuffle()."""
    get_settings()
    return _random


__all__ = [
    "Settings",
    "get_settings",
    "configure",
    "reset_settings",
    "get_random",
    "DEFAULT_JSON_DEPTH",
    "DEFAULT_JSON_FLAGS",
]
