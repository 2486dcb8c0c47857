"""Tests for the import request contract."""

from http import HTTPStatus
from random import Random

import pytest
from ddl import parse_mysql, result_to_payload

from diagram import DiagramStore, ImportFailure, connect, import_tables


@pytest.fixture(name="store")
def in_memory_store() -> DiagramStore:
    """Create a store on an empty in-memory database."""
    store = DiagramStore(connect())
    store.create_schema()
    return store


@pytest.fixture(name="payload")
def blog_payload() -> dict:
    """Build a request body the way the editor sends it."""
    result = parse_mysql(
        "CREATE TABLE users (id INT PRIMARY KEY, name VARCHAR(50));"
        "CREATE TABLE posts (id INT PRIMARY KEY, user_id INT);",
    )
    payload = result_to_payload(result)
    return {"tables": payload["tables"], "relationships": payload["relationships"]}


def test_successful_import(store: DiagramStore, payload: dict) -> None:
    """Test the response counts of an import."""
    diagram_id = store.create_diagram("Blog")["id"]
    response = import_tables(store, diagram_id, payload, rng=Random(0))
    assert response == {"tablesCreated": 2, "relationshipsCreated": 1}


def test_relationships_are_optional(store: DiagramStore, payload: dict) -> None:
    """Test that a body without relationships imports tables only."""
    diagram_id = store.create_diagram("Blog")["id"]
    response = import_tables(store, diagram_id, {"tables": payload["tables"]})
    assert response == {"tablesCreated": 2, "relationshipsCreated": 0}


@pytest.mark.parametrize("body", [{}, {"tables": []}, {"tables": "users"}])
def test_no_tables_is_a_client_error(store: DiagramStore, body: dict) -> None:
    """Test that a body without tables is rejected before touching storage."""
    with pytest.raises(ImportFailure) as raised:
        import_tables(store, "missing", body)
    assert raised.value.status == HTTPStatus.BAD_REQUEST
    assert "no tables provided" in raised.value.message.lower()


def test_unknown_diagram_is_not_found(store: DiagramStore, payload: dict) -> None:
    """Test that importing into an unknown diagram is a not-found error."""
    with pytest.raises(ImportFailure) as raised:
        import_tables(store, "missing", payload)
    assert raised.value.status == HTTPStatus.NOT_FOUND


def test_malformed_table_is_a_server_error(store: DiagramStore) -> None:
    """Test that other failures carry the underlying error text."""
    diagram_id = store.create_diagram("Blog")["id"]
    with pytest.raises(ImportFailure) as raised:
        import_tables(store, diagram_id, {"tables": [{"columns": []}]})
    assert raised.value.status == HTTPStatus.INTERNAL_SERVER_ERROR
    assert raised.value.message == "Failed to import SQL"
    assert raised.value.details == "'name'"
    assert store.get_diagram(diagram_id)["tables"] == []  # type: ignore[index]
