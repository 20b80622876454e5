"""Errors raised by the adapter itself."""
from __future__ import annotations


class AdapterError(RuntimeError):
    """Base class for adapter failures."""


class BuildError(AdapterError):
    """The framework build command exited with a non-zero status."""


class OutputStructureError(AdapterError):
    """The output bundle is missing an expected path."""


__all__ = ["AdapterError", "BuildError", "OutputStructureError"]
