"""Column definition parsing."""

import re
from typing import NamedTuple

from ddl.lexing import mask_literals
from ddl.mysql_types import map_data_type
from ddl.types import ParsedColumn, ParseError, Severity

# Reusable regex components
IDENTIFIER = r"[`\"]?(\w+)[`\"]?"
SINGLE_QUOTED = r"'([^']*)'"
DOUBLE_QUOTED = r"\"([^\"]*)\""

COLUMN_NAME = re.compile(rf"^{IDENTIFIER}\s+")
DATA_TYPE = re.compile(r"^(\w+)(?:\(([^)]+)\))?")
NOT_NULL = re.compile(r"\bNOT\s+NULL\b", re.IGNORECASE)
AUTO_INCREMENT = re.compile(r"\bAUTO_INCREMENT\b", re.IGNORECASE)
UNSIGNED = re.compile(r"\bUNSIGNED\b", re.IGNORECASE)
INLINE_PRIMARY_KEY = re.compile(r"\bPRIMARY\s+KEY\b", re.IGNORECASE)
INLINE_UNIQUE = re.compile(r"\bUNIQUE\b", re.IGNORECASE)
DEFAULT_KEYWORD = re.compile(r"\bDEFAULT\s+", re.IGNORECASE)
DEFAULT_VALUE = re.compile(
    rf"DEFAULT\s+(?:{SINGLE_QUOTED}|{DOUBLE_QUOTED}|(\S+))",
    re.IGNORECASE,
)
COMMENT_KEYWORD = re.compile(r"\bCOMMENT\s+", re.IGNORECASE)
COMMENT_VALUE = re.compile(
    rf"COMMENT\s+(?:{SINGLE_QUOTED}|{DOUBLE_QUOTED})",
    re.IGNORECASE,
)

PREVIEW_LENGTH = 50


class ColumnDefinition(NamedTuple):
    """A parsed column plus the key attributes declared inline on it."""

    column: ParsedColumn
    primary_key: bool
    unique: bool


def _keyword_value(
    rest: str,
    masked: str,
    keyword: re.Pattern[str],
    value: re.Pattern[str],
) -> str | None:
    """Read the value after a keyword that appears outside any literal."""
    if not (found := keyword.search(masked)):
        return None
    if not (match := value.match(rest, found.start())):
        return None
    return next((group for group in match.groups() if group is not None), None)


def parse_default(rest: str, masked: str) -> str | None:
    """Extract a column default, treating NULL as no default."""
    default = _keyword_value(rest, masked, DEFAULT_KEYWORD, DEFAULT_VALUE)
    if default is None or default.upper() == "NULL":
        return None
    return default


def parse_column_definition(
    definition: str,
    line: int,
) -> tuple[ColumnDefinition | None, list[ParseError]]:
    """Parse one column definition from a table body.

    Returns ``None`` for the column when its name or type cannot be read; the
    reason is reported in the error list either way.
    """
    errors: list[ParseError] = []

    name_match = COLUMN_NAME.match(definition)
    if not name_match:
        errors.append(
            ParseError(
                line=line,
                message=(
                    "Could not extract column name from: "
                    f"{definition[:PREVIEW_LENGTH]}"
                ),
                severity=Severity.ERROR,
            ),
        )
        return None, errors

    name = name_match[1]
    rest = definition[name_match.end() :]

    type_match = DATA_TYPE.match(rest)
    if not type_match:
        errors.append(
            ParseError(
                line=line,
                message=f'Could not extract data type for column "{name}"',
                severity=Severity.ERROR,
            ),
        )
        return None, errors

    data_type = map_data_type(type_match[1], errors, line)
    # Keywords only count outside quoted defaults and comments
    masked = mask_literals(rest)

    column = ParsedColumn(
        name=name,
        data_type=data_type,
        nullable=not NOT_NULL.search(masked),
        auto_increment=bool(AUTO_INCREMENT.search(masked)),
        unsigned=bool(UNSIGNED.search(masked)),
        default_value=parse_default(rest, masked),
        comment=_keyword_value(rest, masked, COMMENT_KEYWORD, COMMENT_VALUE) or None,
    )
    definition_info = ColumnDefinition(
        column=column,
        primary_key=bool(INLINE_PRIMARY_KEY.search(masked)),
        unique=bool(INLINE_UNIQUE.search(masked)),
    )
    return definition_info, errors
