"""Tests for migration file rendering."""

from datetime import datetime

import pytest

from schemabridge.config.settings import TranslationConfig
from schemabridge.emitters.migration import (
    build_column_definition,
    build_primary_key,
    build_schema_lines,
    emit_migration,
    migration_filename,
)
from schemabridge.errors import PivotTableShapeError, SchemaBridgeError
from schemabridge.inference import synthesize_pivot
from schemabridge.parsing.migration import parse_migration
from schemabridge.schema.model import Column, ForeignKeyRef, Table

STAMP = datetime(2024, 3, 5, 14, 7, 9)


def _id():
    return Column(name="id", type="bigint", primary=True, nullable=False)


def test_migration_filename():
    """File names sort by timestamp."""
    assert migration_filename("users", STAMP) == "2024_03_05_140709_create_users_table.php"


@pytest.mark.parametrize(
    "column, expected",
    [
        (
            Column(name="price", type="decimal", precision=8, scale=2, nullable=True),
            "$table->decimal('price', 8, 2)->nullable();",
        ),
        (
            Column(name="amount", type="decimal", precision=10, nullable=False),
            "$table->decimal('amount', 10);",
        ),
        (
            Column(name="title", type="varchar", size=200, nullable=False),
            "$table->string('title', 200);",
        ),
        (
            Column(name="status", type="enum", enum_values=["draft", "published"], nullable=False),
            "$table->enum('status', ['draft', 'published']);",
        ),
        (
            Column(name="starts_at", type="datetime", nullable=False),
            "$table->dateTime('starts_at');",
        ),
        (
            Column(name="shape", type="varchar", nullable=False),
            "$table->string('shape');",
        ),
        (
            Column(name="seats", type="int", unsigned=True, nullable=False),
            "$table->unsignedInteger('seats');",
        ),
    ],
)
def test_build_column_definition(column, expected):
    """Each column type maps onto its builder call."""
    assert build_column_definition(column) == expected


def test_comment_is_escaped():
    """Single quotes in comments are escaped for PHP."""
    column = Column(name="note", type="text", nullable=True, comment="It's here")
    assert build_column_definition(column) == "$table->text('note')->nullable()->comment('It\\'s here');"


def test_domain_table_document():
    """Skeleton columns are not repeated and foreign keys get constraints."""
    post = Table(
        name="Post",
        columns=[
            _id(),
            Column(name="title", type="varchar", size=200, nullable=False),
            Column(name="user_id", type="bigint", nullable=False, foreign_key=ForeignKeyRef(table="users")),
            Column(name="created_at", type="timestamp"),
            Column(name="updated_at", type="timestamp"),
        ],
    )
    doc = emit_migration(post, TranslationConfig(), known_tables={"users", "posts"}, timestamp=STAMP)
    assert doc.table_name == "posts"
    assert doc.filename == "2024_03_05_140709_create_posts_table.php"
    indent = " " * 12
    expected = (
        f"{indent}$table->id();\n"
        f"{indent}$table->string('title', 200);\n"
        f"{indent}$table->unsignedBigInteger('user_id');\n"
        "\n"
        f"{indent}$table->foreign('user_id')->references('id')->on('users')->onDelete('cascade');\n"
        f"{indent}$table->timestamps();\n"
    )
    assert expected in doc.content
    assert "Schema::create('posts', function (Blueprint $table) {" in doc.content
    assert "Schema::dropIfExists('posts');" in doc.content
    assert "softDeletes" not in doc.content


def test_pivot_document():
    """A pivot gets both constraints and a composite unique key."""
    pivot = synthesize_pivot("Product", "Category")
    lines = build_schema_lines(pivot, TranslationConfig())
    assert lines == [
        "$table->unsignedBigInteger('category_id');",
        "$table->unsignedBigInteger('product_id');",
        "",
        "$table->foreign('category_id')->references('id')->on('categories')->onDelete('cascade');",
        "$table->foreign('product_id')->references('id')->on('products')->onDelete('cascade');",
        "$table->unique(['category_id', 'product_id']);",
    ]
    doc = emit_migration(pivot, TranslationConfig(soft_deletes=True), timestamp=STAMP)
    assert doc.filename.endswith("_create_category_product_table.php")
    # Pivots never get soft deletes
    assert "softDeletes" not in doc.content


def test_on_delete_policy_is_configurable():
    """The referential action comes from the configuration."""
    pivot = synthesize_pivot("Post", "Tag")
    lines = build_schema_lines(pivot, TranslationConfig(on_delete="restrict"))
    assert all("->onDelete('restrict');" in line for line in lines if line.startswith("$table->foreign"))


def test_malformed_pivot_is_rejected():
    """A pivot with one foreign key cannot be emitted."""
    pivot = Table(
        name="post_tag",
        is_pivot=True,
        columns=[_id(), Column(name="post_id", type="bigint", foreign_key=ForeignKeyRef(table="posts"))],
    )
    with pytest.raises(PivotTableShapeError) as exc_info:
        emit_migration(pivot, timestamp=STAMP)
    assert isinstance(exc_info.value, SchemaBridgeError)
    assert exc_info.value.table_name == "post_tag"
    assert exc_info.value.foreign_keys == ["post_id"]


def test_unknown_reference_is_omitted():
    """Constraints to tables outside the schema are left out."""
    book = Table(
        name="Book",
        columns=[
            _id(),
            Column(name="author_id", type="bigint", nullable=False, foreign_key=ForeignKeyRef(table="authors")),
        ],
    )
    lines = build_schema_lines(book, TranslationConfig(), known_tables={"books"})
    assert lines == ["$table->unsignedBigInteger('author_id');"]


def test_soft_deletes():
    """deleted_at, or the soft_deletes option, emits softDeletes()."""
    note = Table(name="Note", columns=[_id(), Column(name="deleted_at", type="timestamp")])
    content = emit_migration(note, timestamp=STAMP).content
    assert content.count("$table->softDeletes();") == 1
    assert "'deleted_at'" not in content

    plain = Table(name="Tag", columns=[_id()])
    assert "softDeletes" not in emit_migration(plain, timestamp=STAMP).content
    assert "softDeletes" in emit_migration(plain, TranslationConfig(soft_deletes=True), timestamp=STAMP).content


def test_emitted_migration_parses_back():
    """Rendered files are readable by the migration parser."""
    table = Table(
        name="Product",
        columns=[
            _id(),
            Column(name="name", type="varchar", size=120, nullable=False, comment="Display name"),
            Column(name="price", type="decimal", precision=10, scale=2, nullable=True),
            Column(name="kind", type="enum", enum_values=["physical", "digital"], nullable=False),
        ],
    )
    (parsed,) = parse_migration(emit_migration(table, timestamp=STAMP).content)
    assert parsed.table_name == "products"
    assert [c.name for c in parsed.columns] == ["id", "name", "price", "kind", "created_at", "updated_at"]
    assert parsed.get_column("name").comment == "Display name"
    assert parsed.get_column("name").size == 120
    assert (parsed.get_column("price").precision, parsed.get_column("price").scale) == (10, 2)
    assert parsed.get_column("kind").enum_values == ["physical", "digital"]


@pytest.mark.parametrize(
    "primary, expected",
    [
        (None, "$table->id();"),
        (Column(name="id", type="bigint", primary=True, nullable=False), "$table->id();"),
        (Column(name="uid", type="bigint", primary=True, nullable=False), "$table->id('uid');"),
        (Column(name="id", type="int", primary=True, nullable=False), "$table->increments('id');"),
        (
            Column(name="id", type="varchar", primary=True, nullable=False),
            "$table->string('id')->primary();",
        ),
        (
            Column(name="code", type="char", size=3, primary=True, nullable=False),
            "$table->char('code', 3)->primary();",
        ),
    ],
)
def test_build_primary_key(primary, expected):
    """Only a bigint id maps onto the plain id() helper."""
    columns = [primary] if primary is not None else []
    assert build_primary_key(Table(name="Thing", columns=columns)) == expected


def test_string_primary_key_document():
    """A varchar id is declared once, as a primary string column."""
    table = Table(
        name="Session",
        columns=[
            Column(name="id", type="varchar", primary=True, nullable=False),
            Column(name="payload", type="text", nullable=False),
        ],
    )
    content = emit_migration(table, timestamp=STAMP).content
    indent = TranslationConfig().indent
    assert f"{indent}$table->string('id')->primary();\n{indent}$table->text('payload');\n" in content
    assert "$table->id();" not in content
    assert content.count("'id'") == 1

    (parsed,) = parse_migration(content)
    assert parsed.get_column("id").type == "varchar"
    assert parsed.get_column("id").primary
