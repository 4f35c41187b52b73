"""Schema model shared by the parsers, the inferencer and the emitters."""

from typing import Annotated, List, Literal, Optional, Union
from pydantic import BaseModel, Field

from schemabridge import naming

ColumnType = Literal[
    "int",
    "bigint",
    "smallint",
    "tinyint",
    "mediumint",
    "varchar",
    "char",
    "text",
    "tinytext",
    "mediumtext",
    "longtext",
    "boolean",
    "date",
    "datetime",
    "timestamp",
    "time",
    "year",
    "decimal",
    "float",
    "double",
    "json",
    "enum",
    "uuid",
    "ipaddress",
    "macaddress",
    "binary",
]

COLUMN_TYPES = frozenset(ColumnType.__args__)

# Spellings accepted in diagrams that are not canonical type names
TYPE_ALIASES = {
    "integer": "int",
    "biginteger": "bigint",
    "smallinteger": "smallint",
    "tinyinteger": "tinyint",
    "mediuminteger": "mediumint",
    "string": "varchar",
    "bool": "boolean",
    "blob": "binary",
    "jsonb": "json",
    "real": "double",
    "numeric": "decimal",
    "timestamptz": "timestamp",
    "datetimetz": "datetime",
    "timetz": "time",
    "ip": "ipaddress",
    "mac": "macaddress",
}

SYSTEM_COLUMNS = ("id", "created_at", "updated_at", "deleted_at")


def normalize_type(raw: str) -> str:
    """Map a free-form type name onto a ColumnType, defaulting to varchar."""
    key = raw.strip().lower()
    if key in COLUMN_TYPES:
        return key
    return TYPE_ALIASES.get(key, "varchar")


class ForeignKeyRef(BaseModel):
    """Target of a foreign key: table storage name and column."""

    table: str
    column: str = "id"


class Column(BaseModel):
    """A single table column."""

    name: str
    type: ColumnType = "varchar"
    size: Optional[int] = None
    precision: Optional[int] = None
    scale: Optional[int] = None
    nullable: bool = True
    primary: bool = False
    comment: Optional[str] = None
    enum_values: List[str] = Field(default_factory=list)
    foreign_key: Optional[ForeignKeyRef] = None

    # Modifier metadata recognised in migration files
    default: Optional[str] = None
    unique: bool = False
    index: bool = False
    unsigned: bool = False
    minimum: Optional[int] = None
    maximum: Optional[int] = None
    before: Optional[str] = None  # "now" or a date string
    after: Optional[str] = None
    pattern: Optional[str] = None

    @property
    def is_system(self) -> bool:
        return self.name in SYSTEM_COLUMNS

    @property
    def is_foreign_key_name(self) -> bool:
        return self.name.endswith("_id")


class Table(BaseModel):
    """A domain entity or a pivot (join) table."""

    name: str  # entity name (PascalCase singular) or pivot storage name
    columns: List[Column] = Field(default_factory=list)
    is_pivot: bool = False

    @property
    def table_name(self) -> str:
        """Storage name: pivots verbatim, domain tables snake_case plural."""
        if self.is_pivot:
            return self.name
        return naming.table_name_for(self.name)

    def get_column(self, name: str) -> Optional[Column]:
        return next((c for c in self.columns if c.name == name), None)

    def foreign_key_columns(self) -> List[Column]:
        return [c for c in self.columns if c.foreign_key is not None]

    def non_system_columns(self) -> List[Column]:
        return [c for c in self.columns if not c.is_system]


class OneToOne(BaseModel):
    """Parent has exactly one child; the child holds a unique foreign key."""

    kind: Literal["one_to_one"] = "one_to_one"
    parent: str
    child: str

    def key(self) -> str:
        return f"{self.parent}-{self.child}"


class OneToMany(BaseModel):
    """Parent has many children; each child holds the foreign key."""

    kind: Literal["one_to_many"] = "one_to_many"
    parent: str
    child: str

    def key(self) -> str:
        return f"{self.parent}-{self.child}"


class ManyToMany(BaseModel):
    """Two domain tables joined through a pivot table."""

    kind: Literal["many_to_many"] = "many_to_many"
    table1: str
    table2: str
    pivot_table: Optional[str] = None

    def key(self) -> str:
        return "-".join(sorted([self.table1, self.table2]))


Relationship = Annotated[
    Union[OneToOne, OneToMany, ManyToMany], Field(discriminator="kind")
]


class UnresolvedReference(BaseModel):
    """A foreign key whose target table is not part of the model."""

    table: str
    column: str
    references: str


class SchemaModel(BaseModel):
    """Ordered tables plus the relationships inferred between them."""

    tables: List[Table] = Field(default_factory=list)
    relationships: List[Relationship] = Field(default_factory=list)
    unresolved: List[UnresolvedReference] = Field(default_factory=list)

    def get_table(self, name: str) -> Optional[Table]:
        """Find a table by entity name or storage name, ignoring case and number."""
        wanted = {name.lower(), naming.snake(naming.singularize(name)), naming.table_name_for(name)}
        for table in self.tables:
            if table.name.lower() in wanted or table.table_name in wanted:
                return table
        return None

    def get_pivot(self, name: str) -> Optional[Table]:
        """Pivot table stored under exactly ``name``."""
        return next((t for t in self.tables if t.is_pivot and t.table_name == name), None)

    def domain_tables(self) -> List[Table]:
        return [t for t in self.tables if not t.is_pivot]

    def pivot_tables(self) -> List[Table]:
        return [t for t in self.tables if t.is_pivot]

    def table_names(self) -> List[str]:
        """Storage names of every table, in order."""
        return [t.table_name for t in self.tables]
