"""Tests for column definition parsing."""

import pytest

from ddl.columns import parse_column_definition
from ddl.types import ParsedColumn, Severity


def test_full_column_definition() -> None:
    """Test that every column attribute is read."""
    parsed, errors = parse_column_definition(
        "`price` INT UNSIGNED NOT NULL AUTO_INCREMENT DEFAULT 0 COMMENT 'in cents'",
        3,
    )
    assert errors == []
    assert parsed is not None
    assert parsed.column == ParsedColumn(
        name="price",
        data_type="INT",
        nullable=False,
        auto_increment=True,
        unsigned=True,
        default_value="0",
        comment="in cents",
    )
    assert not parsed.primary_key
    assert not parsed.unique


def test_nullable_without_not_null() -> None:
    """Test that columns are nullable unless NOT NULL is present."""
    parsed, _ = parse_column_definition("name VARCHAR(50)", 1)
    assert parsed is not None
    assert parsed.column.nullable
    assert parsed.column.data_type == "VARCHAR"


def test_inline_primary_key_does_not_imply_not_null() -> None:
    """Test that PRIMARY KEY is reported without touching nullability."""
    parsed, _ = parse_column_definition("id INT PRIMARY KEY", 1)
    assert parsed is not None
    assert parsed.primary_key
    assert parsed.column.nullable


def test_inline_unique() -> None:
    """Test that an inline UNIQUE attribute is reported."""
    parsed, _ = parse_column_definition("email VARCHAR(255) NOT NULL UNIQUE", 1)
    assert parsed is not None
    assert parsed.unique
    assert not parsed.column.nullable


@pytest.mark.parametrize(
    ("definition", "expected"),
    [
        ("status VARCHAR(10) DEFAULT 'active'", "active"),
        ('status VARCHAR(10) DEFAULT "active"', "active"),
        ("created TIMESTAMP DEFAULT CURRENT_TIMESTAMP", "CURRENT_TIMESTAMP"),
        ("note TEXT DEFAULT NULL", None),
        ("note TEXT default null", None),
        ("note VARCHAR(10) DEFAULT ''", ""),
        ("note TEXT", None),
    ],
)
def test_default_values(definition: str, expected: str | None) -> None:
    """Test default extraction with quoting and NULL normalization."""
    parsed, _ = parse_column_definition(definition, 1)
    assert parsed is not None
    assert parsed.column.default_value == expected


def test_keywords_inside_literals_are_ignored() -> None:
    """Test that keywords quoted in a comment do not set attributes."""
    parsed, _ = parse_column_definition(
        "code VARCHAR(5) COMMENT 'NOT NULL UNIQUE AUTO_INCREMENT'",
        1,
    )
    assert parsed is not None
    assert parsed.column.nullable
    assert not parsed.column.auto_increment
    assert not parsed.unique
    assert parsed.column.comment == "NOT NULL UNIQUE AUTO_INCREMENT"


@pytest.mark.parametrize(
    ("declared", "mapped"),
    [
        ("integer", "INT"),
        ("BOOL", "BOOLEAN"),
        ("long", "LONGTEXT"),
        ("bigint", "BIGINT"),
        ("ENUM('a','b')", "ENUM"),
    ],
)
def test_type_mapping(declared: str, mapped: str) -> None:
    """Test that aliases and vocabulary members map without warnings."""
    parsed, errors = parse_column_definition(f"c {declared}", 1)
    assert errors == []
    assert parsed is not None
    assert parsed.column.data_type == mapped


def test_unknown_type_falls_back_to_varchar() -> None:
    """Test that an unknown type warns and still creates the column."""
    parsed, errors = parse_column_definition("payload MYTYPE NOT NULL", 7)
    assert parsed is not None
    assert parsed.column.data_type == "VARCHAR"
    assert len(errors) == 1
    assert errors[0].severity == Severity.WARNING
    assert errors[0].line == 7
    assert errors[0].message == 'Unknown data type "MYTYPE", defaulting to VARCHAR'


def test_missing_type_is_an_error() -> None:
    """Test that a lone name cannot be parsed."""
    parsed, errors = parse_column_definition("orphan", 2)
    assert parsed is None
    assert [error.severity for error in errors] == [Severity.ERROR]
    assert errors[0].line == 2


def test_unreadable_type_is_an_error() -> None:
    """Test that a type that is not a word is an error."""
    parsed, errors = parse_column_definition("weird (1)", 2)
    assert parsed is None
    assert errors[0].message == 'Could not extract data type for column "weird"'
