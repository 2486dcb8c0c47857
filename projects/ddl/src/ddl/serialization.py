"""Conversion between parsed DDL and its camelCase JSON payload."""

from collections.abc import Mapping
from typing import Any, NotRequired, TypedDict

from ddl.types import (
    Origin,
    ParsedColumn,
    ParsedRelationship,
    ParsedTable,
    ParseError,
    ParseResult,
    Severity,
)


class ColumnPayload(TypedDict):
    """JSON shape of a parsed column."""

    name: str
    dataType: str
    nullable: bool
    autoIncrement: bool
    unsigned: bool
    defaultValue: str | None
    comment: str | None


class TablePayload(TypedDict):
    """JSON shape of a parsed table."""

    name: str
    columns: list[ColumnPayload]
    primaryKeys: list[str]
    uniqueKeys: list[list[str]]
    indexes: list[list[str]]


class RelationshipPayload(TypedDict):
    """JSON shape of a parsed relationship."""

    sourceTable: str
    sourceColumn: str
    targetTable: str
    targetColumn: str
    type: NotRequired[str]  # explicit or implicit


class ErrorPayload(TypedDict):
    """JSON shape of a parse problem."""

    line: int
    message: str
    severity: str


class ResultPayload(TypedDict):
    """JSON shape of a complete parse."""

    tables: list[TablePayload]
    relationships: list[RelationshipPayload]
    errors: list[ErrorPayload]


def column_to_payload(column: ParsedColumn) -> ColumnPayload:
    """Serialize a column."""
    return {
        "name": column.name,
        "dataType": column.data_type,
        "nullable": column.nullable,
        "autoIncrement": column.auto_increment,
        "unsigned": column.unsigned,
        "defaultValue": column.default_value,
        "comment": column.comment,
    }


def table_to_payload(table: ParsedTable) -> TablePayload:
    """Serialize a table with its columns and key lists."""
    return {
        "name": table.name,
        "columns": [column_to_payload(column) for column in table.columns],
        "primaryKeys": list(table.primary_keys),
        "uniqueKeys": [list(group) for group in table.unique_keys],
        "indexes": [list(group) for group in table.indexes],
    }


def relationship_to_payload(relationship: ParsedRelationship) -> RelationshipPayload:
    """Serialize a relationship."""
    return {
        "sourceTable": relationship.source_table,
        "sourceColumn": relationship.source_column,
        "targetTable": relationship.target_table,
        "targetColumn": relationship.target_column,
        "type": relationship.origin,
    }


def result_to_payload(result: ParseResult) -> ResultPayload:
    """Serialize everything a parse produced."""
    return {
        "tables": [table_to_payload(table) for table in result.tables],
        "relationships": [
            relationship_to_payload(relationship)
            for relationship in result.relationships
        ],
        "errors": [
            {"line": error.line, "message": error.message, "severity": error.severity}
            for error in result.errors
        ],
    }


def column_from_payload(payload: Mapping[str, Any]) -> ParsedColumn:
    """Read a column; optional attributes fall back to their defaults."""
    return ParsedColumn(
        name=payload["name"],
        data_type=payload["dataType"],
        nullable=payload.get("nullable", True),
        auto_increment=payload.get("autoIncrement", False),
        unsigned=payload.get("unsigned", False),
        default_value=payload.get("defaultValue"),
        comment=payload.get("comment"),
    )


def table_from_payload(payload: Mapping[str, Any]) -> ParsedTable:
    """Read a table."""
    return ParsedTable(
        name=payload["name"],
        columns=[column_from_payload(column) for column in payload["columns"]],
        primary_keys=list(payload.get("primaryKeys", [])),
        unique_keys=[list(group) for group in payload.get("uniqueKeys", [])],
        indexes=[list(group) for group in payload.get("indexes", [])],
    )


def relationship_from_payload(payload: Mapping[str, Any]) -> ParsedRelationship:
    """Read a relationship."""
    return ParsedRelationship(
        source_table=payload["sourceTable"],
        source_column=payload["sourceColumn"],
        target_table=payload["targetTable"],
        target_column=payload["targetColumn"],
        origin=Origin(payload.get("type", Origin.EXPLICIT)),
    )


def result_from_payload(payload: Mapping[str, Any]) -> ParseResult:
    """Read a complete parse."""
    return ParseResult(
        tables=[table_from_payload(table) for table in payload.get("tables", [])],
        relationships=[
            relationship_from_payload(relationship)
            for relationship in payload.get("relationships", [])
        ],
        errors=[
            ParseError(
                line=error["line"],
                message=error["message"],
                severity=Severity(error.get("severity", Severity.ERROR)),
            )
            for error in payload.get("errors", [])
        ],
    )
