"""Classification of DDL statements by their leading keywords."""

import re
from enum import StrEnum, auto


class StatementKind(StrEnum):
    """What the parser should do with a statement."""

    CREATE_TABLE = auto()
    ALTER_TABLE = auto()
    IGNORABLE = auto()
    UNSUPPORTED = auto()


CREATE_TABLE = re.compile(r"^CREATE\s+TABLE", re.IGNORECASE)
ALTER_TABLE = re.compile(r"^ALTER\s+TABLE", re.IGNORECASE)

# Statements common in dumps that carry no schema worth importing
SILENT_PATTERNS = tuple(
    re.compile(pattern, re.IGNORECASE)
    for pattern in (
        r"^SET\s+",
        r"^START\s+TRANSACTION",
        r"^COMMIT",
        r"^ROLLBACK",
        r"^INSERT\s+INTO",
        r"^UPDATE\s+",
        r"^DELETE\s+FROM",
        r"^DROP\s+",
        r"^LOCK\s+TABLES",
        r"^UNLOCK\s+TABLES",
        r"^USE\s+",
        r"^GRANT\s+",
        r"^REVOKE\s+",
        r"^CREATE\s+(?:INDEX|VIEW|PROCEDURE|FUNCTION|TRIGGER|DATABASE|SCHEMA)",
        r"^DELIMITER",
        r"^/\*",
    )
)

# Unsupported statements this short are stray punctuation, not worth a warning
WARN_MIN_LENGTH = 10
PREVIEW_LENGTH = 50


def classify(statement: str) -> StatementKind:
    """Pick the handler for a statement."""
    if CREATE_TABLE.match(statement):
        return StatementKind.CREATE_TABLE
    if ALTER_TABLE.match(statement):
        return StatementKind.ALTER_TABLE
    if any(pattern.match(statement) for pattern in SILENT_PATTERNS):
        return StatementKind.IGNORABLE
    return StatementKind.UNSUPPORTED


def should_warn(statement: str) -> bool:
    """Whether an unsupported statement deserves a warning."""
    return len(statement) > WARN_MIN_LENGTH


def preview(statement: str) -> str:
    """Shorten a statement for use in messages."""
    return f"{statement[:PREVIEW_LENGTH]}..."
