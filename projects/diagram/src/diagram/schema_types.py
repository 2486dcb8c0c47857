"""TypedDict shapes of persisted diagram entities."""

from datetime import datetime
from typing import NotRequired, TypedDict


class ColumnRecord(TypedDict):
    """A stored column."""

    id: str
    table_id: str
    name: str
    data_type: str
    nullable: bool
    index_type: str  # PK, UK, FK, Index or None
    auto_increment: bool
    unsigned: bool
    default_value: str | None
    comment: str | None
    order: int  # Dense 0-based position within the table


class TableRecord(TypedDict):
    """A stored table with its columns."""

    id: str
    diagram_id: str
    name: str
    position_x: float
    position_y: float
    color: str
    columns: list[ColumnRecord]


class RelationshipRecord(TypedDict):
    """A stored relationship between two columns."""

    id: str
    diagram_id: str
    source_table_id: str
    source_column_id: str
    target_table_id: str
    target_column_id: str
    type: str  # 1:1, 1:N or N:1
    offset_x: NotRequired[float | None]  # Rendering hints only
    offset_y: NotRequired[float | None]


class TablePosition(TypedDict):
    """Where an existing table sits on the canvas."""

    id: str
    name: str
    position_x: float
    position_y: float


class DiagramSummary(TypedDict):
    """Diagram metadata with entity counts."""

    id: str
    name: str
    created_at: datetime
    updated_at: datetime
    version: int
    table_count: int
    relationship_count: int


class DiagramRecord(TypedDict):
    """A complete diagram."""

    id: str
    name: str
    created_at: datetime
    updated_at: datetime
    version: int
    tables: list[TableRecord]
    relationships: list[RelationshipRecord]


class DiagramSnapshot(TypedDict):
    """What an import reads before writing."""

    id: str
    version: int
    tables: list[TablePosition]
