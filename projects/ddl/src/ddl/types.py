"""Type definitions for parsed DDL."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum


class Severity(StrEnum):
    """Severity of a parse problem."""

    ERROR = "error"
    WARNING = "warning"


class Origin(StrEnum):
    """How a relationship was discovered."""

    EXPLICIT = "explicit"
    IMPLICIT = "implicit"


class Cardinality(StrEnum):
    """Relationship cardinality labels."""

    ONE_TO_ONE = "1:1"
    ONE_TO_MANY = "1:N"
    MANY_TO_ONE = "N:1"


class IndexType(StrEnum):
    """Per-column tag for the constraint a column takes part in."""

    PK = "PK"
    UK = "UK"
    FK = "FK"
    INDEX = "Index"
    NONE = "None"


@dataclass
class ParsedColumn:
    """A single column definition from a CREATE TABLE body."""

    name: str
    data_type: str
    nullable: bool = True
    auto_increment: bool = False
    unsigned: bool = False
    default_value: str | None = None
    comment: str | None = None


@dataclass
class ParsedTable:
    """A table assembled from a CREATE TABLE statement."""

    name: str
    columns: list[ParsedColumn] = field(default_factory=list)
    primary_keys: list[str] = field(default_factory=list)
    unique_keys: list[list[str]] = field(default_factory=list)
    indexes: list[list[str]] = field(default_factory=list)

    def column(self, name: str) -> ParsedColumn | None:
        """Find a column by name, ignoring case."""
        lowered = name.lower()
        return next((c for c in self.columns if c.name.lower() == lowered), None)

    def index_type(self, column_name: str) -> IndexType:
        """Derive the index tag of a column, PK > UK > Index > None."""
        if column_name in self.primary_keys:
            return IndexType.PK
        if any(column_name in group for group in self.unique_keys):
            return IndexType.UK
        if any(column_name in group for group in self.indexes):
            return IndexType.INDEX
        return IndexType.NONE


@dataclass
class ParsedRelationship:
    """A foreign-key-like link between two table columns."""

    source_table: str
    source_column: str
    target_table: str
    target_column: str
    origin: Origin = Origin.EXPLICIT


@dataclass
class ParseError:
    """A problem found while parsing.

    ``line`` is the 1-based index of the statement, not the source line.
    """

    line: int
    message: str
    severity: Severity = Severity.ERROR


@dataclass
class ParseResult:
    """Everything a single parse produced."""

    tables: list[ParsedTable] = field(default_factory=list)
    relationships: list[ParsedRelationship] = field(default_factory=list)
    errors: list[ParseError] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        """Whether any problem blocks a commit."""
        return any(error.severity == Severity.ERROR for error in self.errors)

    @property
    def warnings(self) -> list[ParseError]:
        """Informational problems only."""
        return [e for e in self.errors if e.severity == Severity.WARNING]
