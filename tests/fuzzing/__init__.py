"""Fuzz testing suite for ordmap."""

from .fuzz import (
    Fuzzer,
    FuzzFailure,
    FuzzRunner,
    random_key,
    random_value,
    run_suite,
)

__all__ = [
    "Fuzzer",
    "FuzzFailure",
    "FuzzRunner",
    "random_key",
    "random_value",
    "run_suite",
]
