"""Utilities for loading and saving a SchemaModel from/to JSON files."""

from pathlib import Path
from pydantic import TypeAdapter, ValidationError
from schemabridge.schema.model import SchemaModel


def load_schema_from_json(schema_path: Path) -> SchemaModel:
    """
    Load a SchemaModel from a JSON file.

    Args:
        schema_path: Path to the JSON file

    Returns:
        Loaded SchemaModel instance

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the file is empty or not a valid schema
    """
    if not schema_path.exists():
        raise FileNotFoundError(f"Schema file not found: {schema_path}")

    file_content = schema_path.read_text(encoding="utf-8").strip()
    if not file_content:
        raise ValueError(
            f"Schema file is empty: {schema_path}. "
            f"Re-export the schema or delete the file."
        )

    try:
        return TypeAdapter(SchemaModel).validate_json(file_content)
    except ValidationError as e:
        raise ValueError(f"Failed to load schema from {schema_path}: {e}") from e


def save_schema_to_json(model: SchemaModel, schema_path: Path) -> None:
    """
    Save a SchemaModel to a JSON file.

    Note:
        Creates parent directories if they don't exist.
    """
    schema_path = Path(schema_path)
    schema_path.parent.mkdir(parents=True, exist_ok=True)
    schema_path.write_text(model.model_dump_json(indent=2), encoding="utf-8")
