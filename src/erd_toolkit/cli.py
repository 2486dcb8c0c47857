"""Command line interface for ERD Toolkit."""

import sys
from datetime import datetime
from json import dumps
from pathlib import Path
from sys import stdout
from typing import Any, Literal

from cyclopts import App
from ddl import (
    ParseResult,
    Severity,
    determine_cardinality,
    parse_mysql,
    result_to_payload,
    type_family,
)
from diagram import (
    DiagramError,
    DiagramNotFoundError,
    DiagramStore,
    connect,
    import_schema,
)
from diagram.schema_types import DiagramSummary
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table
from sqlalchemy.exc import SQLAlchemyError

app = App(help="ERD Toolkit CLI tool")


type Format = Literal["table", "json"]


def serializer(obj: Any) -> str | None:  # noqa: ANN401
    """Convert datetimes to ISO format."""
    if isinstance(obj, datetime):
        return obj.isoformat()
    return None


console = Console()
err_console = Console(stderr=True)

# Constants
CWD = Path.cwd()
DEFAULT_DATABASE = CWD / "erd.sqlite"
SQL_EXTENSIONS = {".sql", ".ddl", ".txt"}


def print_error(message: str) -> None:
    """Print error message to stderr."""
    err_console.print(f"[bold red]Error:[/] {message}")


def print_success(message: str) -> None:
    """Print success message to stderr."""
    err_console.print(f"[bold green]✓[/] {message}")


def print_info(message: str) -> None:
    """Print info message to stderr."""
    err_console.print(f"[bold blue]i[/] {message}")


def print_warning(message: str) -> None:
    """Print warning message to stderr."""
    err_console.print(f"[bold yellow]![/] {message}")


def read_sql(sql_location: Path) -> str:
    """Read a DDL file, exiting when it cannot be read."""
    if not sql_location.is_file():
        print_error(f"SQL file does not exist: {sql_location}")
        sys.exit(1)
    if sql_location.suffix.lower() not in SQL_EXTENSIONS:
        print_info(f"Unusual extension for a SQL file: {sql_location.suffix}")
    try:
        return sql_location.read_text(encoding="utf-8")
    except (UnicodeDecodeError, OSError) as e:
        print_error(f"Cannot read SQL file: {sql_location} ({e})")
        sys.exit(1)


def open_store(database: Path) -> DiagramStore:
    """Open the diagram database, creating its tables on first use."""
    store = DiagramStore(connect(database))
    try:
        store.create_schema()
    except SQLAlchemyError as e:
        print_error(f"Failed to open diagram database {database}: {e}")
        sys.exit(1)
    return store


def parse_with_progress(sql: str) -> ParseResult:
    """Parse DDL behind a spinner."""
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=err_console,
    ) as progress:
        progress.add_task("Parsing SQL...", total=None)
        return parse_mysql(sql)


def report_problems(result: ParseResult) -> None:
    """Print parse errors and warnings to stderr."""
    for problem in result.errors:
        message = f"Statement {problem.line}: {problem.message}"
        if problem.severity == Severity.WARNING:
            print_warning(message)
        else:
            print_error(message)


def format_parse_tables(result: ParseResult) -> None:
    """Format parsed tables and relationships as rich tables."""
    for parsed in result.tables:
        table = Table(title=parsed.name)
        table.add_column("Column", style="bold cyan")
        table.add_column("Type")
        table.add_column("Family", style="dim")
        table.add_column("Nullable")
        table.add_column("Key", style="bold yellow")
        table.add_column("Default")
        for column in parsed.columns:
            table.add_row(
                column.name,
                column.data_type,
                type_family(column.data_type) or "",
                "yes" if column.nullable else "no",
                parsed.index_type(column.name),
                column.default_value or "",
            )
        console.print(table)

    if not result.relationships:
        console.print("No relationships found.")
        return

    by_name = {parsed.name.lower(): parsed for parsed in result.tables}
    table = Table(title="Relationships")
    table.add_column("Source", style="bold cyan")
    table.add_column("Target", style="bold cyan")
    table.add_column("Type")
    table.add_column("Origin", style="dim")
    for relationship in result.relationships:
        source = by_name.get(relationship.source_table.lower())
        target = by_name.get(relationship.target_table.lower())
        cardinality = (
            determine_cardinality(
                source,
                target,
                relationship.source_column,
                relationship.target_column,
            )
            if source and target
            else "?"
        )
        table.add_row(
            f"{relationship.source_table}.{relationship.source_column}",
            f"{relationship.target_table}.{relationship.target_column}",
            cardinality,
            relationship.origin,
        )
    console.print(table)


def format_diagram_table(summaries: list[DiagramSummary]) -> None:
    """Format diagram summaries as a rich table."""
    if not summaries:
        console.print("No diagrams found.")
        return

    table = Table(title="Diagrams")
    table.add_column("ID", style="bold blue")
    table.add_column("Name", style="bold cyan")
    table.add_column("Tables", style="bold yellow")
    table.add_column("Relationships", style="bold yellow")
    table.add_column("Updated")
    for summary in summaries:
        table.add_row(
            summary["id"],
            summary["name"],
            str(summary["table_count"]),
            str(summary["relationship_count"]),
            summary["updated_at"].isoformat(timespec="seconds"),
        )
    console.print(table)


@app.command
def parse(sql_location: Path, fmt: Format = "table") -> None:
    """Parse a MySQL DDL file and show what it defines."""
    sql = read_sql(sql_location)
    print_info(f"SQL file: {sql_location}")

    result = parse_with_progress(sql)
    report_problems(result)

    if fmt == "json":
        stdout.write(dumps(result_to_payload(result)))
    elif fmt == "table":
        format_parse_tables(result)

    if result.has_errors:
        sys.exit(1)
    print_success(
        f"Parsed {len(result.tables)} tables "
        f"and {len(result.relationships)} relationships",
    )


@app.command
def create(name: str, *, database: Path = DEFAULT_DATABASE) -> None:
    """Create an empty diagram."""
    store = open_store(database)
    try:
        summary = store.create_diagram(name)
    except DiagramError as e:
        print_error(str(e))
        sys.exit(1)
    stdout.write(f"{summary['id']}\n")
    print_success(f"Created diagram '{summary['name']}'")


@app.command
def diagrams(fmt: Format = "table", *, database: Path = DEFAULT_DATABASE) -> None:
    """List diagrams, most recently updated first."""
    summaries = open_store(database).list_diagrams()
    if fmt == "json":
        stdout.write(dumps(summaries, default=serializer))
    elif fmt == "table":
        format_diagram_table(summaries)


@app.command
def show(diagram_id: str, *, database: Path = DEFAULT_DATABASE) -> None:
    """Print a complete diagram as JSON."""
    diagram = open_store(database).get_diagram(diagram_id)
    if diagram is None:
        print_error(f"Diagram not found: {diagram_id}")
        sys.exit(1)
    console.print_json(dumps(diagram, default=serializer))


@app.command
def rename(diagram_id: str, name: str, *, database: Path = DEFAULT_DATABASE) -> None:
    """Rename a diagram."""
    try:
        summary = open_store(database).rename_diagram(diagram_id, name)
    except DiagramError as e:
        print_error(str(e))
        sys.exit(1)
    print_success(f"Renamed diagram {diagram_id} to '{summary['name']}'")


@app.command
def delete(diagram_id: str, *, database: Path = DEFAULT_DATABASE) -> None:
    """Delete a diagram with all of its tables and relationships."""
    try:
        open_store(database).delete_diagram(diagram_id)
    except DiagramNotFoundError as e:
        print_error(str(e))
        sys.exit(1)
    print_success(f"Deleted diagram {diagram_id}")


@app.command(name="import")
def import_sql(
    diagram_id: str,
    sql_location: Path,
    *,
    database: Path = DEFAULT_DATABASE,
    strict: bool = False,
) -> None:
    """Parse a MySQL DDL file and add its tables to a diagram.

    Nothing is imported when parsing reports errors, or warnings with --strict.
    """
    sql = read_sql(sql_location)
    store = open_store(database)
    print_info(f"SQL file: {sql_location}")
    print_info(f"Diagram: {diagram_id}")

    result = parse_with_progress(sql)
    report_problems(result)
    if result.has_errors:
        print_error("Parsing reported errors, nothing was imported")
        sys.exit(1)
    if strict and result.warnings:
        print_error("Parsing reported warnings and --strict is set")
        sys.exit(1)
    if not result.tables:
        print_error("No tables provided for import")
        sys.exit(1)

    try:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=err_console,
        ) as progress:
            progress.add_task("Importing tables...", total=None)
            summary = import_schema(
                store,
                diagram_id,
                result.tables,
                result.relationships,
            )
    except (DiagramError, SQLAlchemyError) as e:
        print_error(f"Failed to import SQL: {e}")
        sys.exit(1)

    print_success(
        f"Imported {summary.tables_created} tables "
        f"and {summary.relationships_created} relationships",
    )


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
