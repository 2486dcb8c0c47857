"""Tests for comment stripping and quote-aware splitting."""

import pytest

from ddl.lexing import (
    enclosed,
    mask_literals,
    preprocess,
    split_definitions,
    split_statements,
    strip_quotes,
)


def test_preprocess_removes_comments_and_collapses_whitespace() -> None:
    """Test that both comment styles disappear and whitespace runs collapse."""
    sql = """
        -- users of the system
        CREATE TABLE users (   /* the key */
            id INT
        );
    """
    assert preprocess(sql) == "CREATE TABLE users ( id INT );"


def test_preprocess_block_comment_across_lines() -> None:
    """Test that a block comment spanning several lines is removed."""
    assert preprocess("/* one\ntwo\nthree */ SELECT 1") == "SELECT 1"


def test_preprocess_empty_input() -> None:
    """Test that blank input stays blank instead of failing."""
    assert preprocess("   \n\t ") == ""


def test_split_statements_ignores_terminator_in_literal() -> None:
    """Test that a semicolon inside a string does not end the statement."""
    sql = "CREATE TABLE a (x VARCHAR(5) DEFAULT ';'); CREATE TABLE b (y INT);"
    assert split_statements(sql) == [
        "CREATE TABLE a (x VARCHAR(5) DEFAULT ';')",
        "CREATE TABLE b (y INT)",
    ]


def test_split_statements_drops_empty_parts() -> None:
    """Test that repeated terminators produce no empty statements."""
    assert split_statements(";; SET x = 1 ;  ;") == ["SET x = 1"]


def test_split_statements_escaped_quote_stays_in_literal() -> None:
    """Test that a backslash-escaped quote does not close the literal."""
    sql = r"INSERT INTO t VALUES ('it\'s; fine'); DROP TABLE t"
    assert split_statements(sql) == [
        r"INSERT INTO t VALUES ('it\'s; fine')",
        "DROP TABLE t",
    ]


def test_split_statements_other_quote_inside_literal() -> None:
    """Test that a different quote character inside a literal is plain text."""
    sql = """SET @a = "it's; here"; SET @b = 1"""
    assert split_statements(sql) == ['SET @a = "it\'s; here"', "SET @b = 1"]


def test_split_definitions_respects_parentheses() -> None:
    """Test that commas inside type parameters and key lists do not split."""
    body = "id INT, price DECIMAL(10,2), PRIMARY KEY (id, price)"
    assert split_definitions(body) == [
        "id INT",
        "price DECIMAL(10,2)",
        "PRIMARY KEY (id, price)",
    ]


def test_split_definitions_ignores_parentheses_in_literals() -> None:
    """Test that a parenthesis inside a default does not change the depth."""
    body = "a VARCHAR(5) DEFAULT '(', b INT"
    assert split_definitions(body) == ["a VARCHAR(5) DEFAULT '('", "b INT"]


def test_split_definitions_enum_values() -> None:
    """Test that commas in quoted ENUM values stay inside the definition."""
    body = "status ENUM('a,b','c') NOT NULL, id INT"
    assert split_definitions(body) == ["status ENUM('a,b','c') NOT NULL", "id INT"]


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("t (id INT) ENGINE=InnoDB", "id INT"),
        ("t (a DECIMAL(10,2), b INT)", "a DECIMAL(10,2), b INT"),
        ("t (a VARCHAR(1) DEFAULT ')')", "a VARCHAR(1) DEFAULT ')'"),
    ],
)
def test_enclosed(text: str, expected: str) -> None:
    """Test extracting the contents of a balanced parenthesis."""
    assert enclosed(text, text.index("(")) == expected


def test_enclosed_unbalanced() -> None:
    """Test that an unclosed parenthesis yields None."""
    text = "t (id INT, name VARCHAR(50)"
    assert enclosed(text, text.index("(")) is None


def test_mask_literals_keeps_positions() -> None:
    """Test that literal contents are blanked without moving anything."""
    text = "DEFAULT 'NOT NULL' NOT NULL"
    masked = mask_literals(text)
    assert len(masked) == len(text)
    assert masked == "DEFAULT '        ' NOT NULL"


def test_strip_quotes() -> None:
    """Test that identifier quoting is removed."""
    assert strip_quotes(" `user_id` ") == "user_id"
    assert strip_quotes('"user_id"') == "user_id"
