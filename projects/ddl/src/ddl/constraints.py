"""Key, index and foreign key constraint parsing."""

import re

from ddl.lexing import strip_quotes
from ddl.types import Origin, ParsedRelationship

IDENTIFIER = r"[`\"]?(\w+)[`\"]?"
COLUMN_LIST = r"\(([^)]+)\)"

PRIMARY_KEY = re.compile(r"^PRIMARY\s+KEY", re.IGNORECASE)
UNIQUE_KEY = re.compile(r"^UNIQUE(?:\s+(?:KEY|INDEX))?\b", re.IGNORECASE)
INDEX = re.compile(r"^(?:KEY|INDEX)\b", re.IGNORECASE)
FOREIGN_KEY_CLAUSE = re.compile(
    r"^(?:CONSTRAINT\s+\S+\s+)?FOREIGN\s+KEY",
    re.IGNORECASE,
)

FOREIGN_KEY = re.compile(
    rf"FOREIGN\s+KEY\s*{COLUMN_LIST}\s*REFERENCES\s+{IDENTIFIER}\s*{COLUMN_LIST}",
    re.IGNORECASE,
)
ALTER_TABLE_NAME = re.compile(rf"ALTER\s+TABLE\s+{IDENTIFIER}", re.IGNORECASE)
ALTER_ADD_FOREIGN_KEY = re.compile(
    rf"ADD\s+(?:CONSTRAINT\s+\S+\s+)?{FOREIGN_KEY.pattern}",
    re.IGNORECASE,
)


def extract_column_list(constraint: str) -> list[str]:
    """Read the first parenthesized column list of a constraint."""
    if not (match := re.search(COLUMN_LIST, constraint)):
        return []
    return [name for name in map(strip_quotes, match[1].split(",")) if name]


def _relationship(
    source_table: str,
    match: re.Match[str],
) -> ParsedRelationship:
    return ParsedRelationship(
        source_table=source_table,
        source_column=strip_quotes(match[1]),
        target_table=match[2],
        target_column=strip_quotes(match[3]),
        origin=Origin.EXPLICIT,
    )


def parse_foreign_key(constraint: str, source_table: str) -> ParsedRelationship | None:
    """Parse an inline FOREIGN KEY clause.

    Malformed clauses are common in hand-edited dumps and yield ``None``.
    """
    if not (match := FOREIGN_KEY.search(constraint)):
        return None
    return _relationship(source_table, match)


def parse_alter_table(statement: str) -> list[ParsedRelationship]:
    """Collect every foreign key added by an ALTER TABLE statement."""
    if not (table_match := ALTER_TABLE_NAME.search(statement)):
        return []
    return [
        _relationship(table_match[1], fk_match)
        for fk_match in ALTER_ADD_FOREIGN_KEY.finditer(statement)
    ]
