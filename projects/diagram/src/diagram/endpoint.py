"""Request handling for importing parsed DDL into a diagram."""

from collections.abc import Mapping
from http import HTTPStatus
from logging import getLogger
from random import Random
from typing import Any, TypedDict

from ddl import relationship_from_payload, table_from_payload

from diagram.errors import DiagramNotFoundError, ImportFailure
from diagram.importer import import_schema
from diagram.store import DiagramStore

logger = getLogger(__name__)


class ImportResponse(TypedDict):
    """Body of a successful import."""

    tablesCreated: int
    relationshipsCreated: int


def import_tables(
    store: DiagramStore,
    diagram_id: str,
    payload: Mapping[str, Any],
    *,
    rng: Random | None = None,
) -> ImportResponse:
    """Serve an import request of the form ``{tables, relationships}``.

    Failures are reported as ``ImportFailure`` carrying the response status.
    """
    tables = payload.get("tables")
    if not isinstance(tables, list) or not tables:
        raise ImportFailure(HTTPStatus.BAD_REQUEST, "No tables provided for import")

    try:
        summary = import_schema(
            store,
            diagram_id,
            [table_from_payload(table) for table in tables],
            [
                relationship_from_payload(relationship)
                for relationship in payload.get("relationships") or []
            ],
            rng=rng,
        )
    except DiagramNotFoundError as e:
        raise ImportFailure(HTTPStatus.NOT_FOUND, "Diagram not found") from e
    except Exception as e:
        logger.exception("Error importing SQL into diagram %s", diagram_id)
        raise ImportFailure(
            HTTPStatus.INTERNAL_SERVER_ERROR,
            "Failed to import SQL",
            str(e),
        ) from e

    return {
        "tablesCreated": summary.tables_created,
        "relationshipsCreated": summary.relationships_created,
    }
