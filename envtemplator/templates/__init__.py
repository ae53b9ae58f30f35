"""
Template System Module
======================

- Jinja2 rendering with configurable delimiters and an ``Env`` snapshot
- The template function library (filtering, grouping, sorting, YAML, ...)
- Blank-line normalization of rendered output
"""

from .functions import FUNCTIONS
from .normalizer import collapse_blank_lines, normalize_output
from .renderer import RenderSession, TemplateRenderer, render_template

__all__ = [
    "FUNCTIONS",
    "RenderSession",
    "TemplateRenderer",
    "render_template",
    "collapse_blank_lines",
    "normalize_output",
]
