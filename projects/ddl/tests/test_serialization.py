"""Tests for the camelCase JSON payload of parsed DDL."""

from ddl import (
    Origin,
    ParsedRelationship,
    parse_mysql,
    relationship_from_payload,
    result_from_payload,
    result_to_payload,
    table_from_payload,
)


def test_result_to_payload_shape() -> None:
    """Test the key names of a serialized parse."""
    payload = result_to_payload(
        parse_mysql(
            "CREATE TABLE users (id INT NOT NULL, nick MYTYPE, PRIMARY KEY (id));"
            "CREATE TABLE posts (id INT, user_id INT)",
        ),
    )
    users = payload["tables"][0]
    assert users["name"] == "users"
    assert users["primaryKeys"] == ["id"]
    assert users["columns"][0] == {
        "name": "id",
        "dataType": "INT",
        "nullable": False,
        "autoIncrement": False,
        "unsigned": False,
        "defaultValue": None,
        "comment": None,
    }
    assert payload["relationships"] == [
        {
            "sourceTable": "posts",
            "sourceColumn": "user_id",
            "targetTable": "users",
            "targetColumn": "id",
            "type": "implicit",
        },
    ]
    assert payload["errors"][0]["severity"] == "warning"


def test_payload_round_trip_preserves_result() -> None:
    """Test that decoding an encoded parse gives the same result."""
    result = parse_mysql(
        "CREATE TABLE a (id INT PRIMARY KEY, code CHAR(2) UNIQUE, b_id INT,"
        " KEY (b_id), FOREIGN KEY (b_id) REFERENCES b (id));"
        "CREATE TABLE b (id INT) ; SELECT everything FROM nowhere",
    )
    assert result_from_payload(result_to_payload(result)) == result


def test_table_from_payload_defaults() -> None:
    """Test that optional fields of a request payload may be omitted."""
    table = table_from_payload(
        {"name": "t", "columns": [{"name": "id", "dataType": "INT"}]},
    )
    assert table.primary_keys == []
    assert table.unique_keys == []
    assert table.columns[0].nullable
    assert table.columns[0].default_value is None


def test_relationship_from_payload_defaults_to_explicit() -> None:
    """Test that a relationship without a type is explicit."""
    relationship = relationship_from_payload(
        {
            "sourceTable": "posts",
            "sourceColumn": "user_id",
            "targetTable": "users",
            "targetColumn": "id",
        },
    )
    assert relationship == ParsedRelationship("posts", "user_id", "users", "id")
    assert relationship.origin == Origin.EXPLICIT
