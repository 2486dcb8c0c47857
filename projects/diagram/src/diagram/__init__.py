"""Diagram storage, layout and DDL import."""

from diagram.endpoint import ImportResponse, import_tables
from diagram.errors import (
    DiagramError,
    DiagramNotFoundError,
    DuplicateTableNameError,
    ImportFailure,
    InvalidDiagramNameError,
    InvalidRelationshipError,
    StaleDiagramError,
)
from diagram.importer import ImportSummary, import_schema, unique_names
from diagram.layout import GridLayout, LayoutPosition, calculate_auto_layout
from diagram.palette import MUTED_COLORS, generate_muted_color
from diagram.store import DiagramStore, connect

__all__ = [
    "MUTED_COLORS",
    "DiagramError",
    "DiagramNotFoundError",
    "DiagramStore",
    "DuplicateTableNameError",
    "GridLayout",
    "ImportFailure",
    "ImportResponse",
    "ImportSummary",
    "InvalidDiagramNameError",
    "InvalidRelationshipError",
    "LayoutPosition",
    "StaleDiagramError",
    "calculate_auto_layout",
    "connect",
    "generate_muted_color",
    "import_schema",
    "import_tables",
    "unique_names",
]
