"""Tests for schema models."""

import pytest
from pydantic import TypeAdapter, ValidationError

from schemabridge.schema.model import (
    Column,
    ManyToMany,
    OneToMany,
    Relationship,
    SchemaModel,
    Table,
    normalize_type,
)
from schemabridge.utils.schema_io import load_schema_from_json, save_schema_to_json


def test_table_names():
    """Domain tables map to plural storage names; pivots keep their name."""
    assert Table(name="OrderItem").table_name == "order_items"
    assert Table(name="category_product", is_pivot=True).table_name == "category_product"


def test_column_defaults():
    """Columns are nullable varchars unless stated otherwise."""
    column = Column(name="title")
    assert column.type == "varchar"
    assert column.nullable
    assert not column.primary
    assert column.enum_values == []


def test_invalid_column_type_is_rejected():
    with pytest.raises(ValidationError):
        Column(name="x", type="geometry")


def test_normalize_type():
    assert normalize_type("BIGINT") == "bigint"
    assert normalize_type("string") == "varchar"
    assert normalize_type("bool") == "boolean"
    assert normalize_type("point") == "varchar"


def test_relationship_discriminator():
    """The kind field selects the relationship model."""
    adapter = TypeAdapter(Relationship)
    relationship = adapter.validate_python({"kind": "many_to_many", "table1": "Post", "table2": "Tag"})
    assert isinstance(relationship, ManyToMany)
    assert relationship.key() == "Post-Tag"


def test_schema_lookup():
    """Tables are found by entity name or storage name."""
    model = SchemaModel(tables=[Table(name="OrderItem"), Table(name="post_tag", is_pivot=True)])
    assert model.get_table("OrderItem").name == "OrderItem"
    assert model.get_table("order_items").name == "OrderItem"
    assert model.get_table("post_tag").is_pivot
    assert model.get_table("Invoice") is None
    assert model.table_names() == ["order_items", "post_tag"]


def test_schema_json_roundtrip(tmp_path):
    """Saved schemas load back unchanged, relationships included."""
    model = SchemaModel(
        tables=[Table(name="User", columns=[Column(name="id", type="bigint", primary=True, nullable=False)])],
        relationships=[OneToMany(parent="User", child="Post")],
    )
    path = tmp_path / "out" / "schema.json"
    save_schema_to_json(model, path)
    assert load_schema_from_json(path) == model


def test_load_schema_errors(tmp_path):
    """Missing and empty files raise."""
    with pytest.raises(FileNotFoundError):
        load_schema_from_json(tmp_path / "missing.json")
    empty = tmp_path / "empty.json"
    empty.write_text("")
    with pytest.raises(ValueError):
        load_schema_from_json(empty)
