"""Typer CLI application."""

from datetime import datetime
from pathlib import Path
from typing import List, Optional

import typer

from schemabridge.config.settings import get_settings
from schemabridge.config.logging import setup_logging
from schemabridge.errors import SchemaBridgeError
from schemabridge.pipeline import diagram_to_schema, migrations_to_schema, render_migrations
from schemabridge.emitters.diagram import emit_diagram
from schemabridge.schema.model import SchemaModel
from schemabridge.utils.schema_io import save_schema_to_json

app = typer.Typer(help="schemabridge: translate between Laravel migrations and PlantUML diagrams")

DEFAULT_DIAGRAM_FILES = ["schema.puml", "er.puml", "diagram.puml"]


def _read_migrations(migrations_dir: Path) -> SchemaModel:
    files = sorted(migrations_dir.glob("*.php"))
    contents = [f.read_text(encoding="utf-8") for f in files]
    return migrations_to_schema(
        contents,
        get_settings().translation_config(),
        sources=[f.name for f in files],
    )


def resolve_diagram_file(file: Optional[str], diagrams_dir: Path) -> Path:
    """
    Locate the PlantUML file to read.

    Bare names are looked up in the diagrams directory and get a ``.puml``
    extension when missing; without a name the default files are tried.

    Raises:
        FileNotFoundError: If no matching file exists
    """
    if not file:
        for default in DEFAULT_DIAGRAM_FILES:
            candidate = diagrams_dir / default
            if candidate.exists():
                return candidate
        raise FileNotFoundError(
            f"No PlantUML file specified and none of {', '.join(DEFAULT_DIAGRAM_FILES)} "
            f"found in {diagrams_dir}"
        )

    path = Path(file)
    if len(path.parts) == 1:
        path = diagrams_dir / path
    if path.suffix != ".puml":
        path = path.with_name(path.name + ".puml")
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")
    return path


def find_existing_migrations(migrations_dir: Path, table_name: str) -> List[Path]:
    return sorted(migrations_dir.glob(f"*_create_{table_name}_table.php"))


@app.command("gen-diagram")
def gen_diagram(
    migrations_dir: Optional[Path] = typer.Option(None, help="Directory holding migration files"),
    diagrams_dir: Optional[Path] = typer.Option(None, help="Directory for PlantUML files"),
):
    """
    Generate a PlantUML diagram from migration files.

    The diagram is written to <diagrams_dir>/generated/<timestamp>_schema.puml.
    """
    setup_logging()
    settings = get_settings()
    migrations_dir = migrations_dir or settings.migrations_dir
    generated_dir = (diagrams_dir or settings.diagrams_dir) / "generated"

    typer.echo(f"Reading migrations from {migrations_dir}")
    model = _read_migrations(migrations_dir)

    if not model.tables:
        typer.echo("Error: No tables found in migration files", err=True)
        raise typer.Exit(1)

    typer.echo(f"Found {len(model.tables)} tables:")
    for table in model.tables:
        kind = "pivot" if table.is_pivot else "table"
        typer.echo(f" - {table.name} ({table.table_name}, {kind})")

    now = datetime.now()
    generated_dir.mkdir(parents=True, exist_ok=True)
    path = generated_dir / f"{now.strftime('%Y_%m_%d_%H%M%S')}_schema.puml"
    path.write_text(emit_diagram(model, now), encoding="utf-8")

    typer.echo(f"✓ PlantUML diagram generated: {path}")


@app.command("gen-migration")
def gen_migration(
    file: Optional[str] = typer.Argument(None, help="PlantUML file name (optional)"),
    force: bool = typer.Option(False, "--force", help="Replace existing migration files"),
    migrations_dir: Optional[Path] = typer.Option(None, help="Directory holding migration files"),
    diagrams_dir: Optional[Path] = typer.Option(None, help="Directory for PlantUML files"),
):
    """
    Generate migration files from a PlantUML diagram.
    """
    setup_logging()
    settings = get_settings()
    migrations_dir = migrations_dir or settings.migrations_dir
    diagrams_dir = diagrams_dir or settings.diagrams_dir
    config = settings.translation_config()

    try:
        diagram_path = resolve_diagram_file(file, diagrams_dir)
    except FileNotFoundError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    typer.echo(f"Using diagram {diagram_path}")
    model = diagram_to_schema(diagram_path.read_text(encoding="utf-8"), config)
    if not model.tables:
        typer.echo("Error: No tables found in PlantUML file", err=True)
        raise typer.Exit(1)

    typer.echo("Regular tables:")
    for table in model.domain_tables():
        typer.echo(f" - {table.table_name}")
    if model.pivot_tables():
        typer.echo("Pivot tables:")
        for table in model.pivot_tables():
            typer.echo(f" - {table.table_name}")

    try:
        documents = render_migrations(model, config)
    except SchemaBridgeError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    migrations_dir.mkdir(parents=True, exist_ok=True)
    existing = {
        doc.table_name: find_existing_migrations(migrations_dir, doc.table_name) for doc in documents
    }
    existing = {name: paths for name, paths in existing.items() if paths}
    if existing:
        typer.echo("The following migration files already exist:")
        for name in existing:
            typer.echo(f" - {name}")
        if not (force or typer.confirm("Do you want to drop and recreate these migration files?")):
            typer.echo("Operation cancelled.")
            raise typer.Exit(1)
        for paths in existing.values():
            for path in paths:
                path.unlink()
                typer.echo(f"Deleted migration: {path.name}")

    for doc in documents:
        (migrations_dir / doc.filename).write_text(doc.content, encoding="utf-8")
        typer.echo(f"Created migration: {doc.filename}")

    typer.echo(f"✓ Generated {len(documents)} migration files")


@app.command("export-schema")
def export_schema(source: Path, out: Path):
    """
    Export the schema model as JSON.

    Args:
        source: Migrations directory or a .puml diagram file
        out: Output path for the schema JSON
    """
    setup_logging()

    if source.is_dir():
        model = _read_migrations(source)
    elif source.exists():
        model = diagram_to_schema(
            source.read_text(encoding="utf-8"), get_settings().translation_config()
        )
    else:
        typer.echo(f"Error: {source} does not exist", err=True)
        raise typer.Exit(1)

    save_schema_to_json(model, out)
    typer.echo(f"✓ Schema written to {out} ({len(model.tables)} tables)")


def main():
    """Entry point for CLI."""
    app()


if __name__ == "__main__":
    main()
