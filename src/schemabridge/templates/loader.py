"""Utilities for loading and rendering file skeletons."""

from pathlib import Path
from typing import Any
from schemabridge.config.logging import get_logger

logger = get_logger(__name__)

# Base directory for templates
TEMPLATES_DIR = Path(__file__).resolve().parent


def load_template(path: str) -> str:
    """
    Load a skeleton file from the templates directory.

    Args:
        path: Relative path from templates/ directory, e.g., 'migration.stub'

    Returns:
        Template file contents as string

    Raises:
        FileNotFoundError: If template file doesn't exist
    """
    full_path = TEMPLATES_DIR / path
    if not full_path.exists():
        logger.error(f"Template file not found: {full_path}")
        raise FileNotFoundError(f"Template file not found: {full_path}")

    content = full_path.read_text(encoding="utf-8")
    logger.debug(f"Loaded template from {path}")
    return content


def render_template(template: str, **sections: Any) -> str:
    """
    Fill the named insertion points of a skeleton.

    Uses str.format(); literal braces in skeleton files are written as
    ``{{`` and ``}}``.

    Args:
        template: Skeleton text with ``{section}`` placeholders
        **sections: Rendered text for each insertion point

    Returns:
        Rendered document
    """
    try:
        return template.format(**sections)
    except KeyError as e:
        logger.error(f"Missing section in template: {e}")
        raise
