"""Merge parsed DDL into an existing diagram."""

from __future__ import annotations

from dataclasses import dataclass, replace
from logging import getLogger
from typing import TYPE_CHECKING, NamedTuple

from ddl import (
    IndexType,
    ParsedColumn,
    ParsedRelationship,
    ParsedTable,
    determine_cardinality,
)
from sqlalchemy import insert

from diagram.layout import calculate_auto_layout
from diagram.palette import generate_muted_color
from diagram.store import COLUMNS, RELATIONSHIPS, TABLES, DiagramStore, new_id

if TYPE_CHECKING:
    from collections.abc import Iterable
    from random import Random

    from diagram.schema_types import ColumnRecord, RelationshipRecord

logger = getLogger(__name__)

# Index types a foreign key tag must not overwrite
KEY_INDEX_TYPES = frozenset({IndexType.PK, IndexType.UK})


class ImportSummary(NamedTuple):
    """Counts of the entities an import created."""

    tables_created: int
    relationships_created: int


@dataclass
class _ImportedTable:
    """A parsed table under its final name with the ids assigned to it."""

    table_id: str
    table: ParsedTable
    column_ids: list[str]  # Parallel to table.columns

    def resolve(self, column_name: str) -> tuple[ParsedColumn, str] | None:
        lowered = column_name.lower()
        for column, column_id in zip(self.table.columns, self.column_ids, strict=True):
            if column.name.lower() == lowered:
                return column, column_id
        return None


def unique_names(names: Iterable[str], taken: Iterable[str]) -> list[str]:
    """Rename names that collide, ignoring case, to ``name_1``, ``name_2``, ...

    Each chosen name is reserved before the next one is picked, so duplicates
    inside ``names`` are renamed as well.
    """
    reserved = {name.lower() for name in taken}
    chosen: list[str] = []
    for name in names:
        candidate, counter = name, 1
        while candidate.lower() in reserved:
            candidate = f"{name}_{counter}"
            counter += 1
        reserved.add(candidate.lower())
        chosen.append(candidate)
    return chosen


def _column_rows(imported: _ImportedTable) -> list[ColumnRecord]:
    table = imported.table
    return [
        {
            "id": column_id,
            "table_id": imported.table_id,
            "name": column.name,
            "data_type": column.data_type,
            "nullable": column.nullable,
            "index_type": table.index_type(column.name),
            "auto_increment": column.auto_increment,
            "unsigned": column.unsigned,
            "default_value": column.default_value,
            "comment": column.comment,
            "order": order,
        }
        for order, (column, column_id) in enumerate(
            zip(table.columns, imported.column_ids, strict=True),
        )
    ]


def _index(
    imported: list[_ImportedTable],
    original_names: list[str],
) -> dict[str, _ImportedTable]:
    """Look up imported tables by final name, then by their parsed name."""
    by_name = {entry.table.name.lower(): entry for entry in imported}
    for entry, original in zip(imported, original_names, strict=True):
        by_name.setdefault(original.lower(), entry)
    return by_name


def _resolve(
    relationship: ParsedRelationship,
    by_name: dict[str, _ImportedTable],
    diagram_id: str,
    columns: dict[str, ColumnRecord],
) -> RelationshipRecord | None:
    """Turn a parsed relationship into a row, tagging its source column."""
    source = by_name.get(relationship.source_table.lower())
    target = by_name.get(relationship.target_table.lower())
    if source is None or target is None:
        logger.warning(
            "Skipping relationship: table not found (%s or %s)",
            relationship.source_table,
            relationship.target_table,
        )
        return None

    source_column = source.resolve(relationship.source_column)
    target_column = target.resolve(relationship.target_column)
    if source_column is None or target_column is None:
        logger.warning(
            "Skipping relationship: column not found (%s.%s or %s.%s)",
            relationship.source_table,
            relationship.source_column,
            relationship.target_table,
            relationship.target_column,
        )
        return None

    source_parsed, source_column_id = source_column
    target_parsed, target_column_id = target_column
    cardinality = determine_cardinality(
        source.table,
        target.table,
        source_parsed.name,
        target_parsed.name,
    )

    row = columns[source_column_id]
    if row["index_type"] not in KEY_INDEX_TYPES:
        row["index_type"] = IndexType.FK

    return {
        "id": new_id(),
        "diagram_id": diagram_id,
        "source_table_id": source.table_id,
        "source_column_id": source_column_id,
        "target_table_id": target.table_id,
        "target_column_id": target_column_id,
        "type": cardinality,
    }


def import_schema(
    store: DiagramStore,
    diagram_id: str,
    tables: list[ParsedTable],
    relationships: list[ParsedRelationship],
    *,
    rng: Random | None = None,
) -> ImportSummary:
    """Add parsed tables and relationships to a diagram in one transaction.

    Imported tables that collide with existing names are renamed and placed
    to the right of the current canvas content. Relationships whose endpoints
    cannot be found among the imported tables are skipped. Nothing is written
    when any step fails.
    """
    with store.lock(diagram_id):
        snapshot = store.snapshot(diagram_id)
        existing = snapshot["tables"]

        original_names = [table.name for table in tables]
        final_names = unique_names(
            original_names,
            (table["name"] for table in existing),
        )
        imported = [
            _ImportedTable(
                table_id=new_id(),
                table=replace(table, name=name),
                column_ids=[new_id() for _ in table.columns],
            )
            for table, name in zip(tables, final_names, strict=True)
        ]
        positions = calculate_auto_layout(
            existing,
            [entry.table_id for entry in imported],
        )

        table_rows = [
            {
                "id": entry.table_id,
                "diagram_id": diagram_id,
                "name": entry.table.name,
                "position_x": position.x,
                "position_y": position.y,
                "color": generate_muted_color(rng),
            }
            for entry, position in zip(imported, positions, strict=True)
        ]
        column_rows = {
            row["id"]: row for entry in imported for row in _column_rows(entry)
        }

        by_name = _index(imported, original_names)
        relationship_rows = [
            row
            for relationship in relationships
            if (row := _resolve(relationship, by_name, diagram_id, column_rows))
        ]

        with store.transaction(diagram_id, snapshot["version"]) as connection:
            for table, rows in (
                (TABLES, table_rows),
                (COLUMNS, list(column_rows.values())),
                (RELATIONSHIPS, relationship_rows),
            ):
                if rows:
                    connection.execute(insert(table), rows)

    logger.info(
        "Imported %d tables and %d relationships into diagram %s",
        len(table_rows),
        len(relationship_rows),
        diagram_id,
    )
    return ImportSummary(len(table_rows), len(relationship_rows))
