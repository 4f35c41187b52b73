"""File skeleton loading and rendering utilities."""

from .loader import load_template, render_template, TEMPLATES_DIR

__all__ = ["load_template", "render_template", "TEMPLATES_DIR"]
