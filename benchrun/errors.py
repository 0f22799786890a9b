"""Exception types raised by the define engine and its front end."""

from __future__ import annotations


class ConfigurationError(RuntimeError):
    """A define was read while no layer provides it, or a bench misused the recorder."""


class MalformedOverride(ValueError):
    """A ``NAME=value-set`` override could not be parsed."""


class MalformedStep(ValueError):
    """A ``start,stop,step`` range could not be parsed."""
