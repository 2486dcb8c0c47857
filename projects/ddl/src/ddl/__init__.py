"""MySQL DDL parsing and relationship inference."""

from ddl.main import parse_create_table, parse_mysql, parse_mysql_async
from ddl.mysql_types import DATA_TYPE_GROUPS, MYSQL_DATA_TYPES, type_family
from ddl.relationships import (
    ImplicitRelationshipDetector,
    determine_cardinality,
    detect_implicit_relationships,
    plural_candidates,
)
from ddl.serialization import (
    ResultPayload,
    relationship_from_payload,
    result_from_payload,
    result_to_payload,
    table_from_payload,
)
from ddl.types import (
    Cardinality,
    IndexType,
    Origin,
    ParsedColumn,
    ParsedRelationship,
    ParsedTable,
    ParseError,
    ParseResult,
    Severity,
)

__all__ = [
    "DATA_TYPE_GROUPS",
    "MYSQL_DATA_TYPES",
    "Cardinality",
    "ImplicitRelationshipDetector",
    "IndexType",
    "Origin",
    "ParseError",
    "ParseResult",
    "ParsedColumn",
    "ParsedRelationship",
    "ParsedTable",
    "ResultPayload",
    "Severity",
    "detect_implicit_relationships",
    "determine_cardinality",
    "parse_create_table",
    "parse_mysql",
    "parse_mysql_async",
    "plural_candidates",
    "relationship_from_payload",
    "result_from_payload",
    "result_to_payload",
    "table_from_payload",
    "type_family",
]
