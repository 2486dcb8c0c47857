"""Main module for parsing MySQL DDL into tables and relationships."""

import asyncio
import re
from logging import getLogger
from typing import NamedTuple

from ddl.columns import parse_column_definition
from ddl.constraints import (
    FOREIGN_KEY_CLAUSE,
    INDEX,
    PRIMARY_KEY,
    UNIQUE_KEY,
    extract_column_list,
    parse_alter_table,
    parse_foreign_key,
)
from ddl.lexing import enclosed, preprocess, split_definitions, split_statements
from ddl.relationships import (
    CandidateStrategy,
    detect_implicit_relationships,
    plural_candidates,
)
from ddl.statements import StatementKind, classify, preview, should_warn
from ddl.types import (
    ParsedRelationship,
    ParsedTable,
    ParseError,
    ParseResult,
    Severity,
)

logger = getLogger(__name__)

TABLE_NAME = re.compile(
    r"CREATE\s+TABLE\s+(?:IF\s+NOT\s+EXISTS\s+)?[`\"]?(\w+)[`\"]?\s*\(",
    re.IGNORECASE,
)

# Named table constraints are classified by what follows the name
CONSTRAINT_NAME = re.compile(
    r"^CONSTRAINT\s+\S+\s+(?=PRIMARY|UNIQUE|CHECK)",
    re.IGNORECASE,
)
CHECK = re.compile(r"^CHECK\b", re.IGNORECASE)
FULLTEXT_INDEX = re.compile(r"^(?:FULLTEXT|SPATIAL)\s+(?:KEY|INDEX)?", re.IGNORECASE)


class CreateTableResult(NamedTuple):
    """Output of parsing a single CREATE TABLE statement."""

    table: ParsedTable | None
    relationships: list[ParsedRelationship]
    errors: list[ParseError]


def _failed(line: int, message: str) -> CreateTableResult:
    return CreateTableResult(None, [], [ParseError(line, message, Severity.ERROR)])


def parse_create_table(statement: str, line: int) -> CreateTableResult:
    """Parse a CREATE TABLE statement into a table and its explicit references."""
    if not (name_match := TABLE_NAME.search(statement)):
        return _failed(line, "Could not extract table name from CREATE TABLE statement")
    table = ParsedTable(name=name_match[1])

    # Table options such as ENGINE or DEFAULT CHARSET may follow the body
    body = enclosed(statement, name_match.end() - 1)
    if body is None or not body.strip():
        return _failed(line, f'Could not extract table body for table "{table.name}"')

    relationships: list[ParsedRelationship] = []
    errors: list[ParseError] = []

    for raw_definition in split_definitions(body):
        definition = CONSTRAINT_NAME.sub("", raw_definition)
        if PRIMARY_KEY.match(definition):
            table.primary_keys.extend(extract_column_list(definition))
        elif UNIQUE_KEY.match(definition):
            table.unique_keys.append(extract_column_list(definition))
        elif INDEX.match(definition) or FULLTEXT_INDEX.match(definition):
            table.indexes.append(extract_column_list(definition))
        elif FOREIGN_KEY_CLAUSE.match(definition):
            if relationship := parse_foreign_key(definition, table.name):
                relationships.append(relationship)
        elif CHECK.match(definition):
            continue
        else:
            parsed, column_errors = parse_column_definition(definition, line)
            errors.extend(column_errors)
            if parsed is None:
                continue
            table.columns.append(parsed.column)
            if parsed.primary_key and parsed.column.name not in table.primary_keys:
                table.primary_keys.append(parsed.column.name)
            if parsed.unique:
                table.unique_keys.append([parsed.column.name])

    return CreateTableResult(table, relationships, errors)


def _parse_statements(
    result: ParseResult,
    statements: list[str],
    candidates: CandidateStrategy,
) -> None:
    for line, statement in enumerate(statements, start=1):
        kind = classify(statement)
        if kind == StatementKind.CREATE_TABLE:
            table, relationships, errors = parse_create_table(statement, line)
            if table is not None:
                result.tables.append(table)
            result.relationships.extend(relationships)
            result.errors.extend(errors)
        elif kind == StatementKind.ALTER_TABLE:
            result.relationships.extend(parse_alter_table(statement))
        elif kind == StatementKind.UNSUPPORTED and should_warn(statement):
            result.errors.append(
                ParseError(
                    line=line,
                    message=f"Skipped unsupported statement: {preview(statement)}",
                    severity=Severity.WARNING,
                ),
            )

    implicit = detect_implicit_relationships(
        result.tables,
        candidates,
        explicit=result.relationships,
    )
    result.relationships.extend(implicit)


def parse_mysql(
    sql: str,
    candidates: CandidateStrategy = plural_candidates,
) -> ParseResult:
    """Parse MySQL DDL text.

    Malformed SQL never raises: problems are reported in ``errors``. Faults
    inside the parser itself surface as a single error at line 0.
    """
    result = ParseResult()
    try:
        _parse_statements(result, split_statements(preprocess(sql)), candidates)
    except Exception as e:
        logger.exception("Unexpected failure while parsing DDL")
        result.errors.append(
            ParseError(0, f"Unexpected parsing error: {e}", Severity.ERROR),
        )

    logger.info(
        "Parsed %d tables, %d relationships, %d problems",
        len(result.tables),
        len(result.relationships),
        len(result.errors),
    )
    return result


async def parse_mysql_async(
    sql: str,
    candidates: CandidateStrategy = plural_candidates,
) -> ParseResult:
    """Parse DDL in a worker thread so an event loop stays responsive.

    Parsing cannot be interrupted; cancelling only discards the result.
    """
    return await asyncio.to_thread(parse_mysql, sql, candidates)
