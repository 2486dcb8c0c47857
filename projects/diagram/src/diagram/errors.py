"""Exceptions raised by diagram storage and import."""

from http import HTTPStatus


class DiagramError(Exception):
    """Base class for diagram storage errors."""


class DiagramNotFoundError(DiagramError):
    """The requested diagram does not exist."""

    def __init__(self, diagram_id: str) -> None:
        """Initialize with the id that was looked up."""
        super().__init__(f"Diagram not found: {diagram_id}")
        self.diagram_id = diagram_id


class StaleDiagramError(DiagramError):
    """The diagram changed between reading it and committing a write."""

    def __init__(self, diagram_id: str, expected_version: int) -> None:
        """Initialize with the version the writer based its changes on."""
        super().__init__(
            f"Diagram {diagram_id} was modified concurrently "
            f"(expected version {expected_version})",
        )
        self.diagram_id = diagram_id
        self.expected_version = expected_version


class InvalidDiagramNameError(DiagramError, ValueError):
    """Diagram names must be non-empty strings."""


class ImportFailure(Exception):  # noqa: N818
    """An import request that could not be served."""

    def __init__(
        self,
        status: HTTPStatus,
        message: str,
        details: str | None = None,
    ) -> None:
        """Initialize with a response status and human-readable message."""
        super().__init__(message if details is None else f"{message}: {details}")
        self.status = status
        self.message = message
        self.details = details


class InvalidRelationshipError(DiagramError, ValueError):
    """A relationship endpoint is not part of the same diagram."""


class DuplicateTableNameError(DiagramError, ValueError):
    """Two tables of one diagram share a name, ignoring case."""
