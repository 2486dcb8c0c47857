"""SQLAlchemy storage for diagrams, tables, columns and relationships."""

from __future__ import annotations

from collections import defaultdict
from contextlib import contextmanager
from datetime import UTC, datetime
from logging import getLogger
from secrets import token_urlsafe
from threading import Lock, RLock
from typing import TYPE_CHECKING, Any
from weakref import WeakValueDictionary

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Engine,
    Float,
    ForeignKey,
    Integer,
    MetaData,
    String,
    Table,
    create_engine,
    delete,
    event,
    func,
    insert,
    select,
    update,
)
from sqlalchemy.pool import StaticPool

from diagram.errors import (
    DiagramNotFoundError,
    DuplicateTableNameError,
    InvalidDiagramNameError,
    InvalidRelationshipError,
    StaleDiagramError,
)

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator, Mapping
    from pathlib import Path

    from sqlalchemy import Connection, Row, Select

    from diagram.schema_types import (
        ColumnRecord,
        DiagramRecord,
        DiagramSnapshot,
        DiagramSummary,
        RelationshipRecord,
        TablePosition,
        TableRecord,
    )

logger = getLogger(__name__)

ID_BYTES = 15  # 20 URL-safe characters

metadata = MetaData()


def _reference(name: str, target: str, *, index: bool = False) -> Column[Any]:
    """Non-null foreign key column whose rows go away with their target."""
    return Column(
        name,
        ForeignKey(target, ondelete="CASCADE"),
        nullable=False,
        index=index,
    )


DIAGRAMS = Table(
    "diagrams",
    metadata,
    Column("id", String, primary_key=True),
    Column("name", String, nullable=False),
    Column("created_at", DateTime, nullable=False),
    Column("updated_at", DateTime, nullable=False),
    Column("version", Integer, nullable=False, default=0),
)

TABLES = Table(
    "tables",
    metadata,
    Column("id", String, primary_key=True),
    _reference("diagram_id", "diagrams.id", index=True),
    Column("name", String, nullable=False),
    Column("position_x", Float, nullable=False),
    Column("position_y", Float, nullable=False),
    Column("color", String, nullable=False),
)

COLUMNS = Table(
    "columns",
    metadata,
    Column("id", String, primary_key=True),
    _reference("table_id", "tables.id", index=True),
    Column("name", String, nullable=False),
    Column("data_type", String, nullable=False),
    Column("nullable", Boolean, nullable=False),
    Column("index_type", String, nullable=False),
    Column("auto_increment", Boolean, nullable=False),
    Column("unsigned", Boolean, nullable=False),
    Column("default_value", String),
    Column("comment", String),
    Column("order", Integer, nullable=False),
)

RELATIONSHIPS = Table(
    "relationships",
    metadata,
    Column("id", String, primary_key=True),
    _reference("diagram_id", "diagrams.id", index=True),
    _reference("source_table_id", "tables.id"),
    _reference("source_column_id", "columns.id"),
    _reference("target_table_id", "tables.id"),
    _reference("target_column_id", "columns.id"),
    Column("type", String, nullable=False),
    Column("offset_x", Float),
    Column("offset_y", Float),
)

TABLE_FIELDS = ("name", "position_x", "position_y", "color")
COLUMN_FIELDS = (
    "table_id",
    "name",
    "data_type",
    "nullable",
    "index_type",
    "auto_increment",
    "unsigned",
    "default_value",
    "comment",
    "order",
)
RELATIONSHIP_FIELDS = (
    "source_table_id",
    "source_column_id",
    "target_table_id",
    "target_column_id",
    "type",
    "offset_x",
    "offset_y",
)


def new_id() -> str:
    """Create a short opaque identifier."""
    return token_urlsafe(ID_BYTES)


def now() -> datetime:
    """Current time for diagram timestamps."""
    return datetime.now(UTC)


def enable_foreign_keys(
    dbapi_connection: Any,  # noqa: ANN401
    _connection_record: Any,  # noqa: ANN401
) -> None:
    """Turn on SQLite foreign key enforcement so deletes cascade."""
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def connect(location: Path | None = None) -> Engine:
    """Create an engine for a SQLite diagram database.

    Without a location the database lives in memory and is shared by every
    connection of the returned engine.
    """
    if location is None:
        engine = create_engine(
            "sqlite://",
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
    else:
        engine = create_engine(f"sqlite:///{location}")
    event.listen(engine, "connect", enable_foreign_keys)
    return engine


def _pick(record: Mapping[str, object], fields: Iterable[str]) -> dict[str, object]:
    return {name: record.get(name) for name in fields}


def _column(row: Row[Any]) -> ColumnRecord:
    return {
        "id": row.id,
        "table_id": row.table_id,
        "name": row.name,
        "data_type": row.data_type,
        "nullable": row.nullable,
        "index_type": row.index_type,
        "auto_increment": row.auto_increment,
        "unsigned": row.unsigned,
        "default_value": row.default_value,
        "comment": row.comment,
        "order": row.order,
    }


def _relationship(row: Row[Any]) -> RelationshipRecord:
    return {
        "id": row.id,
        "diagram_id": row.diagram_id,
        "source_table_id": row.source_table_id,
        "source_column_id": row.source_column_id,
        "target_table_id": row.target_table_id,
        "target_column_id": row.target_column_id,
        "type": row.type,
        "offset_x": row.offset_x,
        "offset_y": row.offset_y,
    }


def _clean_name(name: object) -> str:
    if not isinstance(name, str) or not name.strip():
        msg = "Diagram name must be a non-empty string"
        raise InvalidDiagramNameError(msg)
    return name.strip()


class DiagramStore:
    """Persists diagrams and serializes writers per diagram.

    Every write runs in one transaction. Writers to the same diagram are
    serialized by a per-diagram lock, and commits that were based on an older
    diagram version are rejected.
    """

    def __init__(self, engine: Engine) -> None:
        """Initialize the store on an engine."""
        self.engine = engine
        # Entries disappear once no writer holds or waits for them
        self._locks: WeakValueDictionary[str, RLock] = WeakValueDictionary()
        self._locks_guard = Lock()

    def create_schema(self) -> None:
        """Create the storage tables when missing."""
        metadata.create_all(self.engine)

    @contextmanager
    def lock(self, diagram_id: str) -> Iterator[None]:
        """Hold the write lock of a diagram."""
        with self._locks_guard:
            diagram_lock = self._locks.get(diagram_id)
            if diagram_lock is None:
                diagram_lock = self._locks[diagram_id] = RLock()
        with diagram_lock:
            yield

    @contextmanager
    def transaction(
        self,
        diagram_id: str,
        expected_version: int | None = None,
    ) -> Iterator[Connection]:
        """Write to a diagram atomically.

        On success the diagram timestamp is refreshed and its version bumped.
        Any exception rolls back every change made through the connection.
        """
        with self.lock(diagram_id), self.engine.begin() as connection:
            if self._version(connection, diagram_id) is None:
                raise DiagramNotFoundError(diagram_id)
            yield connection
            self._touch(connection, diagram_id, expected_version)

    def _version(self, connection: Connection, diagram_id: str) -> int | None:
        return connection.scalar(
            select(DIAGRAMS.c.version).where(DIAGRAMS.c.id == diagram_id),
        )

    def _touch(
        self,
        connection: Connection,
        diagram_id: str,
        expected_version: int | None,
    ) -> None:
        statement = (
            update(DIAGRAMS)
            .where(DIAGRAMS.c.id == diagram_id)
            .values(updated_at=now(), version=DIAGRAMS.c.version + 1)
        )
        if expected_version is not None:
            statement = statement.where(DIAGRAMS.c.version == expected_version)
        if connection.execute(statement).rowcount == 0:
            logger.warning("Rejected stale write to diagram %s", diagram_id)
            raise StaleDiagramError(diagram_id, expected_version or 0)

    def create_diagram(self, name: str) -> DiagramSummary:
        """Create an empty diagram."""
        created = now()
        row = {
            "id": new_id(),
            "name": _clean_name(name),
            "created_at": created,
            "updated_at": created,
            "version": 0,
        }
        with self.engine.begin() as connection:
            connection.execute(insert(DIAGRAMS), row)
        logger.info("Created diagram %s", row["id"])
        return self._summary(row["id"])

    def _summaries(self, diagram_id: str | None = None) -> list[DiagramSummary]:
        table_count = (
            select(func.count())
            .where(TABLES.c.diagram_id == DIAGRAMS.c.id)
            .scalar_subquery()
        )
        relationship_count = (
            select(func.count())
            .where(RELATIONSHIPS.c.diagram_id == DIAGRAMS.c.id)
            .scalar_subquery()
        )
        query = select(
            DIAGRAMS,
            table_count.label("table_count"),
            relationship_count.label("relationship_count"),
        ).order_by(DIAGRAMS.c.updated_at.desc())
        if diagram_id is not None:
            query = query.where(DIAGRAMS.c.id == diagram_id)

        with self.engine.connect() as connection:
            return [
                {
                    "id": row.id,
                    "name": row.name,
                    "created_at": row.created_at,
                    "updated_at": row.updated_at,
                    "version": row.version,
                    "table_count": row.table_count,
                    "relationship_count": row.relationship_count,
                }
                for row in connection.execute(query)
            ]

    def _summary(self, diagram_id: str) -> DiagramSummary:
        if not (summaries := self._summaries(diagram_id)):
            raise DiagramNotFoundError(diagram_id)
        return summaries[0]

    def list_diagrams(self) -> list[DiagramSummary]:
        """List diagrams, most recently updated first."""
        return self._summaries()

    def get_diagram(self, diagram_id: str) -> DiagramRecord | None:
        """Load a diagram with its tables, ordered columns and relationships."""
        with self.engine.connect() as connection:
            diagram = connection.execute(
                select(DIAGRAMS).where(DIAGRAMS.c.id == diagram_id),
            ).first()
            if diagram is None:
                return None

            table_rows = connection.execute(
                select(TABLES).where(TABLES.c.diagram_id == diagram_id),
            ).all()
            column_rows = connection.execute(
                select(COLUMNS)
                .join(TABLES, COLUMNS.c.table_id == TABLES.c.id)
                .where(TABLES.c.diagram_id == diagram_id)
                .order_by(COLUMNS.c.order),
            ).all()
            relationship_rows = connection.execute(
                select(RELATIONSHIPS).where(RELATIONSHIPS.c.diagram_id == diagram_id),
            ).all()

        columns_by_table: defaultdict[str, list[ColumnRecord]] = defaultdict(list)
        for row in column_rows:
            columns_by_table[row.table_id].append(_column(row))

        tables: list[TableRecord] = [
            {
                "id": row.id,
                "diagram_id": row.diagram_id,
                "name": row.name,
                "position_x": row.position_x,
                "position_y": row.position_y,
                "color": row.color,
                "columns": columns_by_table[row.id],
            }
            for row in table_rows
        ]
        return {
            "id": diagram.id,
            "name": diagram.name,
            "created_at": diagram.created_at,
            "updated_at": diagram.updated_at,
            "version": diagram.version,
            "tables": tables,
            "relationships": [_relationship(row) for row in relationship_rows],
        }

    def snapshot(self, diagram_id: str) -> DiagramSnapshot:
        """Read the version and table positions an import is based on."""
        with self.engine.connect() as connection:
            version = self._version(connection, diagram_id)
            if version is None:
                raise DiagramNotFoundError(diagram_id)
            rows = connection.execute(
                select(
                    TABLES.c.id,
                    TABLES.c.name,
                    TABLES.c.position_x,
                    TABLES.c.position_y,
                ).where(TABLES.c.diagram_id == diagram_id),
            )
            tables: list[TablePosition] = [
                {
                    "id": row.id,
                    "name": row.name,
                    "position_x": row.position_x,
                    "position_y": row.position_y,
                }
                for row in rows
            ]
        return {"id": diagram_id, "version": version, "tables": tables}

    def rename_diagram(self, diagram_id: str, name: str) -> DiagramSummary:
        """Rename a diagram."""
        cleaned = _clean_name(name)
        with self.transaction(diagram_id) as connection:
            connection.execute(
                update(DIAGRAMS)
                .where(DIAGRAMS.c.id == diagram_id)
                .values(name=cleaned),
            )
        return self._summary(diagram_id)

    def delete_diagram(self, diagram_id: str) -> None:
        """Delete a diagram together with everything in it."""
        with self.lock(diagram_id), self.engine.begin() as connection:
            result = connection.execute(
                delete(DIAGRAMS).where(DIAGRAMS.c.id == diagram_id),
            )
            if result.rowcount == 0:
                raise DiagramNotFoundError(diagram_id)
        logger.info("Deleted diagram %s", diagram_id)

    def _ids(self, connection: Connection, query: Select[Any]) -> set[str]:
        return set(connection.scalars(query))

    def save_diagram(
        self,
        diagram_id: str,
        tables: list[TableRecord],
        relationships: list[RelationshipRecord],
        expected_version: int | None = None,
    ) -> None:
        """Reconcile stored entities with the given ones by identifier.

        Entities missing from the input are deleted, known ones updated and new
        ones created. Deleting a table or column also deletes its
        relationships.
        """
        table_ids = {table["id"] for table in tables}
        column_ids = {column["id"] for table in tables for column in table["columns"]}
        relationship_ids = {relationship["id"] for relationship in relationships}
        _check_table_names(tables)
        for relationship in relationships:
            _check_endpoints(relationship, table_ids, column_ids)

        diagram_tables = select(TABLES.c.id).where(TABLES.c.diagram_id == diagram_id)
        diagram_columns = select(COLUMNS.c.id).where(
            COLUMNS.c.table_id.in_(diagram_tables),
        )
        diagram_relationships = select(RELATIONSHIPS.c.id).where(
            RELATIONSHIPS.c.diagram_id == diagram_id,
        )

        with self.transaction(diagram_id, expected_version) as connection:
            for table, query, kept in (
                (TABLES, diagram_tables, table_ids),
                (COLUMNS, diagram_columns, column_ids),
                (RELATIONSHIPS, diagram_relationships, relationship_ids),
            ):
                if removed := self._ids(connection, query) - kept:
                    connection.execute(
                        delete(table).where(table.c.id.in_(list(removed))),
                    )

            # Read after deleting so rows removed by cascades are recreated
            existing_tables = self._ids(connection, diagram_tables)
            existing_columns = self._ids(connection, diagram_columns)
            existing_relationships = self._ids(connection, diagram_relationships)

            for table in tables:
                _upsert(
                    connection,
                    TABLES,
                    table["id"],
                    {**_pick(table, TABLE_FIELDS), "diagram_id": diagram_id},
                    exists=table["id"] in existing_tables,
                )
                for column in table["columns"]:
                    _upsert(
                        connection,
                        COLUMNS,
                        column["id"],
                        {**_pick(column, COLUMN_FIELDS), "table_id": table["id"]},
                        exists=column["id"] in existing_columns,
                    )

            for relationship in relationships:
                _upsert(
                    connection,
                    RELATIONSHIPS,
                    relationship["id"],
                    {
                        **_pick(relationship, RELATIONSHIP_FIELDS),
                        "diagram_id": diagram_id,
                    },
                    exists=relationship["id"] in existing_relationships,
                )

        logger.info(
            "Saved diagram %s: %d tables, %d relationships",
            diagram_id,
            len(tables),
            len(relationships),
        )


def _check_table_names(tables: list[TableRecord]) -> None:
    """Reject tables whose names differ only in case."""
    seen: set[str] = set()
    for table in tables:
        if (lowered := table["name"].lower()) in seen:
            msg = f"Duplicate table name in diagram: {table['name']}"
            raise DuplicateTableNameError(msg)
        seen.add(lowered)


def _check_endpoints(
    relationship: RelationshipRecord,
    table_ids: set[str],
    column_ids: set[str],
) -> None:
    """Reject relationships pointing outside the saved diagram."""
    tables = (relationship["source_table_id"], relationship["target_table_id"])
    columns = (relationship["source_column_id"], relationship["target_column_id"])
    if not (table_ids.issuperset(tables) and column_ids.issuperset(columns)):
        msg = (
            f"Relationship {relationship['id']} references a missing table "
            "or column"
        )
        raise InvalidRelationshipError(msg)


def _upsert(
    connection: Connection,
    table: Table,
    record_id: str,
    values: dict[str, object],
    *,
    exists: bool,
) -> None:
    if exists:
        connection.execute(
            update(table).where(table.c.id == record_id).values(values),
        )
    else:
        connection.execute(insert(table), {**values, "id": record_id})
