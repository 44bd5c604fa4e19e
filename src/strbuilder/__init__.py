"""Render arbitrary python values as text"""
from __future__ import annotations

from importlib import metadata

from .categories import (
    Category,
    Pair,
    UnrenderableError,
    check_renderable,
    classify,
    register,
)
from .renderer import Renderer, Sink, render, to_string
from .template import FormatError, format_string, render_format

# https://packaging.python.org/en/latest/guides/single-sourcing-package-version/
__version__ = metadata.version(__name__)

__all__ = (
    "Category",
    "FormatError",
    "Pair",
    "Renderer",
    "Sink",
    "UnrenderableError",
    "check_renderable",
    "classify",
    "format_string",
    "register",
    "render",
    "render_format",
    "to_string",
)
