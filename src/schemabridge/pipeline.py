"""End-to-end translations between migrations, the schema model and diagrams."""

from datetime import datetime, timedelta
from typing import Iterable, List, Optional

from schemabridge.config.logging import get_logger, log_translation_config
from schemabridge.config.settings import TranslationConfig
from schemabridge.emitters.diagram import emit_diagram
from schemabridge.emitters.migration import MigrationDocument, emit_migration
from schemabridge.inference import infer_from_diagram, infer_from_migrations
from schemabridge.parsing.diagram import parse_diagram
from schemabridge.parsing.migration import parse_migrations
from schemabridge.errors import MissingPivotTableError
from schemabridge.schema.model import ManyToMany, SchemaModel
from schemabridge.schema.validators import validate_schema

logger = get_logger(__name__)


def _report_issues(model: SchemaModel) -> None:
    for issue in validate_schema(model):
        logger.warning(f"[{issue.code}] {issue.message}")


def migrations_to_schema(
    contents: Iterable[str],
    config: Optional[TranslationConfig] = None,
    sources: Optional[Iterable[str]] = None,
) -> SchemaModel:
    """
    Parse migration file contents and infer relationships.

    Args:
        contents: Migration sources, already in execution order
        config: Translation configuration
        sources: Optional labels (file names) matching ``contents``

    Returns:
        SchemaModel built from every ``Schema::create`` block found
    """
    config = config or TranslationConfig()
    log_translation_config(logger, config)
    parsed = parse_migrations(contents, sources)
    model = infer_from_migrations(parsed, config)
    logger.info(
        f"Schema from migrations: {len(model.domain_tables())} tables, "
        f"{len(model.pivot_tables())} pivot tables, {len(model.relationships)} relationships"
    )
    _report_issues(model)
    return model


def diagram_to_schema(content: str, config: Optional[TranslationConfig] = None) -> SchemaModel:
    """Parse a PlantUML document and add foreign keys and pivot tables."""
    config = config or TranslationConfig()
    log_translation_config(logger, config)
    model = infer_from_diagram(parse_diagram(content), config)
    logger.info(
        f"Schema from diagram: {len(model.domain_tables())} tables, "
        f"{len(model.pivot_tables())} pivot tables, {len(model.relationships)} relationships"
    )
    _report_issues(model)
    return model


def render_migrations(
    model: SchemaModel,
    config: Optional[TranslationConfig] = None,
    started_at: Optional[datetime] = None,
) -> List[MigrationDocument]:
    """
    Render every table of the model as a migration file.

    File name timestamps advance one second per table so the files sort in
    creation order (domain tables before pivot tables).

    Raises:
        MissingPivotTableError: If a many-to-many relationship lacks its pivot
        PivotTableShapeError: If a pivot table is malformed
    """
    config = config or TranslationConfig()
    started_at = started_at or datetime.now()
    for relationship in model.relationships:
        if isinstance(relationship, ManyToMany) and (
            not relationship.pivot_table or model.get_pivot(relationship.pivot_table) is None
        ):
            raise MissingPivotTableError(relationship.table1, relationship.table2, relationship.pivot_table)

    known_tables = set(model.table_names())
    documents = []
    for index, table in enumerate(model.tables):
        documents.append(
            emit_migration(
                table,
                config,
                known_tables=known_tables,
                timestamp=started_at + timedelta(seconds=index),
            )
        )
    return documents


def migrations_to_diagram(
    contents: Iterable[str],
    config: Optional[TranslationConfig] = None,
    generated_at: Optional[datetime] = None,
) -> str:
    """Migration sources -> PlantUML document."""
    return emit_diagram(migrations_to_schema(contents, config), generated_at)


def diagram_to_migrations(
    content: str,
    config: Optional[TranslationConfig] = None,
    started_at: Optional[datetime] = None,
) -> List[MigrationDocument]:
    """PlantUML document -> one migration document per table."""
    config = config or TranslationConfig()
    return render_migrations(diagram_to_schema(content, config), config, started_at)
