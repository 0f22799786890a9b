"""Permutation-driven bench runner.

Exports the define engine and the data structures suites are built from.
"""

from benchrun.defines import DefineCache, DefineRegistry  # noqa: F401
from benchrun.errors import ConfigurationError, MalformedOverride, MalformedStep  # noqa: F401
from benchrun.leb16 import decode, encode, format_identity, parse_identity  # noqa: F401
from benchrun.models import (  # noqa: F401
    BenchCase,
    BenchConfig,
    BenchFlags,
    BenchId,
    BenchSuite,
    Define,
    define_row,
)
from benchrun.permutations import Permutation, case_permutations  # noqa: F401
from benchrun.runner import BenchRunner, RunRecord  # noqa: F401

__all__ = [
    "BenchCase",
    "BenchConfig",
    "BenchFlags",
    "BenchId",
    "BenchRunner",
    "BenchSuite",
    "ConfigurationError",
    "Define",
    "DefineCache",
    "DefineRegistry",
    "MalformedOverride",
    "MalformedStep",
    "Permutation",
    "RunRecord",
    "case_permutations",
    "decode",
    "define_row",
    "encode",
    "format_identity",
    "parse_identity",
]
