"""Builders for native bridge platforms."""

from .android import AndroidBuilder, BuildOptions
from .base import BuildError, BuildResult, Builder

__all__ = [
    "AndroidBuilder",
    "BuildError",
    "BuildOptions",
    "BuildResult",
    "Builder",
]
