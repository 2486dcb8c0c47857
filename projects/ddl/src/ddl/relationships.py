"""Implicit relationship detection and cardinality classification."""

from collections.abc import Callable, Iterable

from ddl.types import Cardinality, Origin, ParsedRelationship, ParsedTable

type CandidateStrategy = Callable[[str], Iterable[str]]

FOREIGN_KEY_SUFFIX = "_id"
TARGET_COLUMN = "id"


def plural_candidates(base_name: str) -> list[str]:
    """Table names a ``<base>_id`` column may point at, in priority order.

    The base itself, the base with an ``s`` appended, and the base with a
    trailing ``s`` toggled.
    """
    if base_name.endswith("s"):
        toggled = base_name.removesuffix("s")
    else:
        toggled = f"{base_name}s"
    return [base_name, f"{base_name}s", toggled]


class ImplicitRelationshipDetector:
    """Infers references from the ``<table>_id`` column naming convention.

    This is a best-effort heuristic. Ambiguous or missing matches are silent.
    """

    def __init__(self, candidates: CandidateStrategy = plural_candidates) -> None:
        """Initialize the detector with a candidate name strategy."""
        self._candidates = candidates

    def detect(
        self,
        tables: list[ParsedTable],
        explicit: Iterable[ParsedRelationship] = (),
    ) -> list[ParsedRelationship]:
        """Find implicit relationships across a complete table set.

        Columns that already carry an explicit relationship are left alone.
        """
        by_name: dict[str, ParsedTable] = {}
        for table in tables:
            by_name.setdefault(table.name.lower(), table)
        declared = {
            (r.source_table.lower(), r.source_column.lower()) for r in explicit
        }

        return [
            relationship
            for table in tables
            for column in table.columns
            if (table.name.lower(), column.name.lower()) not in declared
            and (relationship := self._match(table, column.name, by_name))
        ]

    def _match(
        self,
        table: ParsedTable,
        column_name: str,
        by_name: dict[str, ParsedTable],
    ) -> ParsedRelationship | None:
        lowered = column_name.lower()
        if not lowered.endswith(FOREIGN_KEY_SUFFIX):
            return None

        base_name = lowered.removesuffix(FOREIGN_KEY_SUFFIX)
        for candidate in self._candidates(base_name):
            target = by_name.get(candidate.lower())
            if target and target.column(TARGET_COLUMN):
                return ParsedRelationship(
                    source_table=table.name,
                    source_column=column_name,
                    target_table=target.name,
                    target_column=TARGET_COLUMN,
                    origin=Origin.IMPLICIT,
                )
        return None


def detect_implicit_relationships(
    tables: list[ParsedTable],
    candidates: CandidateStrategy = plural_candidates,
    explicit: Iterable[ParsedRelationship] = (),
) -> list[ParsedRelationship]:
    """Detect implicit relationships with the given naming strategy."""
    return ImplicitRelationshipDetector(candidates).detect(tables, explicit)


def is_unique_or_primary(table: ParsedTable, column_name: str) -> bool:
    """Whether a column is a primary key member or a single-column unique key."""
    return column_name in table.primary_keys or any(
        group == [column_name] for group in table.unique_keys
    )


def determine_cardinality(
    source_table: ParsedTable,
    target_table: ParsedTable,
    source_column: str,
    target_column: str,
) -> Cardinality:
    """Classify a relationship from the key attributes of its two endpoints.

    Without any uniqueness information the foreign key is assumed to point at a
    primary key, which reads as one-to-many.
    """
    source_unique = is_unique_or_primary(source_table, source_column)
    target_unique = is_unique_or_primary(target_table, target_column)

    if source_unique and target_unique:
        return Cardinality.ONE_TO_ONE
    if source_unique:
        return Cardinality.MANY_TO_ONE
    return Cardinality.ONE_TO_MANY
