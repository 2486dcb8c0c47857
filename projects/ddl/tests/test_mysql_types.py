"""Tests for the closed data type vocabulary."""

from ddl import DATA_TYPE_GROUPS, MYSQL_DATA_TYPES, type_family
from ddl.mysql_types import map_data_type
from ddl.types import ParseError


def test_vocabulary_is_the_union_of_groups() -> None:
    """Test that every type belongs to exactly one family."""
    members = [name for group in DATA_TYPE_GROUPS.values() for name in group]
    assert len(members) == len(set(members)) == len(MYSQL_DATA_TYPES)
    assert "UUID" in MYSQL_DATA_TYPES


def test_type_family() -> None:
    """Test looking up the family of a type."""
    assert type_family("BIGINT") == "Numeric"
    assert type_family("TIMESTAMP") == "DateTime"
    assert type_family("GEOMETRY") is None


def test_map_data_type_is_case_insensitive() -> None:
    """Test that lower case names map onto the vocabulary silently."""
    errors: list[ParseError] = []
    assert map_data_type("mediumblob", errors, 1) == "MEDIUMBLOB"
    assert errors == []


def test_map_data_type_fallback() -> None:
    """Test that unknown names become VARCHAR with one warning."""
    errors: list[ParseError] = []
    assert map_data_type("geometry", errors, 5) == "VARCHAR"
    assert [error.line for error in errors] == [5]
