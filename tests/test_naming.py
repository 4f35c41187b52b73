"""Tests for naming conventions."""

import pytest

from schemabridge import naming


@pytest.mark.parametrize(
    "singular, plural",
    [
        ("user", "users"),
        ("category", "categories"),
        ("person", "people"),
        ("status", "statuses"),
        ("address", "addresses"),
        ("box", "boxes"),
        ("key", "keys"),
        ("movie", "movies"),
        ("analysis", "analyses"),
        ("OrderItem", "OrderItems"),
        ("order_item", "order_items"),
    ],
)
def test_inflection(singular, plural):
    """Pluralize and singularize are inverses on common table names."""
    assert naming.pluralize(singular) == plural
    assert naming.singularize(plural) == singular


def test_uncountable_words_are_unchanged():
    assert naming.pluralize("data") == "data"
    assert naming.singularize("news") == "news"


def test_is_singular():
    assert naming.is_singular("role")
    assert naming.is_singular("status")
    assert not naming.is_singular("posts")


def test_case_conversion():
    assert naming.studly("order_items") == "OrderItems"
    assert naming.snake("OrderItem") == "order_item"
    assert naming.snake("order_item") == "order_item"


def test_table_and_entity_names():
    """Entity and storage names convert both ways."""
    assert naming.table_name_for("OrderItem") == "order_items"
    assert naming.table_name_for("Category") == "categories"
    assert naming.entity_name("order_items") == "OrderItem"
    assert naming.entity_name("people") == "Person"
    assert naming.foreign_key_for("OrderItem") == "order_item_id"
    assert naming.table_from_foreign_key("category_id") == "categories"
