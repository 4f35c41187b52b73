"""Tests for PlantUML rendering."""

from datetime import datetime

from schemabridge.emitters.diagram import (
    dedupe_relationships,
    emit_diagram,
    format_column,
    format_relationship,
    format_type,
)
from schemabridge.inference import synthesize_pivot
from schemabridge.schema.model import Column, ManyToMany, OneToMany, OneToOne, SchemaModel, Table

STAMP = datetime(2024, 3, 5, 14, 7, 9)


def test_format_type():
    """Parameters are rendered without spaces."""
    assert format_type(Column(name="price", type="decimal", precision=8, scale=2)) == "decimal(8,2)"
    assert format_type(Column(name="amount", type="decimal", precision=10)) == "decimal(10)"
    assert format_type(Column(name="name", type="varchar", size=100)) == "varchar(100)"
    assert format_type(Column(name="kind", type="enum", enum_values=["a", "b"])) == "enum(a,b)"
    assert format_type(Column(name="body", type="text")) == "text"


def test_format_column():
    """Primary keys get a star; NOT NULL and comments follow the type."""
    assert format_column(Column(name="id", type="bigint", primary=True, nullable=False)) == "* id : bigint"
    assert (
        format_column(Column(name="email", type="varchar", size=150, nullable=False, comment="Login"))
        == '  email : varchar(150) NOT NULL "Login"'
    )
    assert format_column(Column(name="bio", type="text")) == "  bio : text"


def test_format_relationship():
    """Cardinality markers match the relationship kind."""
    assert format_relationship(OneToOne(parent="User", child="Profile")) == "User ||--|| Profile"
    assert format_relationship(OneToMany(parent="User", child="Post")) == "User ||--o{ Post"
    assert format_relationship(ManyToMany(table1="Post", table2="Tag")) == "Post }o--o{ Tag"
    assert (
        format_relationship(ManyToMany(table1="Role", table2="User", pivot_table="role_user"))
        == "Role }o--o{ User : role_user"
    )


def test_dedupe_relationships():
    """Many-to-many pairs are unordered; the first occurrence wins."""
    groups = dedupe_relationships(
        [
            OneToMany(parent="User", child="Post"),
            OneToMany(parent="User", child="Post"),
            ManyToMany(table1="Post", table2="Tag", pivot_table="post_tag"),
            ManyToMany(table1="Tag", table2="Post"),
        ]
    )
    assert list(groups["one_to_many"]) == ["User-Post"]
    assert list(groups["many_to_many"].values()) == [
        ManyToMany(table1="Post", table2="Tag", pivot_table="post_tag")
    ]


def test_emit_diagram_document():
    """Header, domain entities, grouped relationships and footer."""
    user = Table(name="User", columns=[Column(name="id", type="bigint", primary=True, nullable=False)])
    post = Table(
        name="Post",
        columns=[
            Column(name="id", type="bigint", primary=True, nullable=False),
            Column(name="price", type="decimal", precision=8, scale=2),
        ],
    )
    tag = Table(name="Tag", columns=[Column(name="id", type="bigint", primary=True, nullable=False)])
    model = SchemaModel(
        tables=[user, post, tag, synthesize_pivot("Post", "Tag")],
        relationships=[
            ManyToMany(table1="Post", table2="Tag", pivot_table="post_tag"),
            OneToMany(parent="User", child="Post"),
            OneToMany(parent="User", child="Post"),
        ],
    )
    text = emit_diagram(model, STAMP)
    assert text == "\n".join(
        [
            "@startuml",
            "' Generated on 2024-03-05 14:07:09",
            "",
            "entity User {",
            "* id : bigint",
            "}",
            "",
            "entity Post {",
            "* id : bigint",
            "  price : decimal(8,2)",
            "}",
            "",
            "entity Tag {",
            "* id : bigint",
            "}",
            "",
            "' Relationships",
            "User ||--o{ Post",
            "Post }o--o{ Tag : post_tag",
            "",
            "@enduml",
        ]
    )


def test_emit_diagram_without_relationships():
    """No relationship section when there is nothing to draw."""
    model = SchemaModel(tables=[Table(name="Note")])
    text = emit_diagram(model, STAMP)
    assert "' Relationships" not in text
    assert text.startswith("@startuml\n")
    assert text.endswith("@enduml")
