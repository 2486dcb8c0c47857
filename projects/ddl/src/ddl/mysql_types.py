"""Closed MySQL data type vocabulary and mapping of declared types onto it."""

from ddl.types import ParseError, Severity

NUMERIC_TYPES = (
    "TINYINT",
    "SMALLINT",
    "MEDIUMINT",
    "INT",
    "BIGINT",
    "DECIMAL",
    "FLOAT",
    "DOUBLE",
)
STRING_TYPES = ("CHAR", "VARCHAR", "TINYTEXT", "TEXT", "MEDIUMTEXT", "LONGTEXT")
DATE_TIME_TYPES = ("DATE", "TIME", "DATETIME", "TIMESTAMP", "YEAR")
BINARY_TYPES = ("BINARY", "VARBINARY", "TINYBLOB", "BLOB", "MEDIUMBLOB", "LONGBLOB")
OTHER_TYPES = ("BOOLEAN", "ENUM", "SET", "JSON", "UUID")

DATA_TYPE_GROUPS: dict[str, tuple[str, ...]] = {
    "Numeric": NUMERIC_TYPES,
    "String": STRING_TYPES,
    "DateTime": DATE_TIME_TYPES,
    "Binary": BINARY_TYPES,
    "Other": OTHER_TYPES,
}

MYSQL_DATA_TYPES = frozenset(
    name for group in DATA_TYPE_GROUPS.values() for name in group
)

# Common spellings that are not part of the vocabulary themselves
TYPE_ALIASES = {
    "INTEGER": "INT",
    "BOOL": "BOOLEAN",
    "LONG": "LONGTEXT",
}

FALLBACK_TYPE = "VARCHAR"


def type_family(data_type: str) -> str | None:
    """Return the family a vocabulary type belongs to."""
    return next(
        (family for family, names in DATA_TYPE_GROUPS.items() if data_type in names),
        None,
    )


def map_data_type(
    raw_type: str,
    errors: list[ParseError],
    line: int,
) -> str:
    """Map a declared type name onto the closed vocabulary.

    Unknown names fall back to VARCHAR and leave a warning in ``errors``.
    """
    upper = raw_type.upper()
    if upper in MYSQL_DATA_TYPES:
        return upper
    if alias := TYPE_ALIASES.get(upper):
        return alias

    errors.append(
        ParseError(
            line=line,
            message=f'Unknown data type "{upper}", defaulting to {FALLBACK_TYPE}',
            severity=Severity.WARNING,
        ),
    )
    return FALLBACK_TYPE
