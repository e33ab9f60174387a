"""Exceptions raised while extracting persisted queries."""

from __future__ import annotations

from pathlib import Path
from typing import Optional


class PersistedQueriesError(Exception):
    """Base class for all extraction failures."""


class ConfigurationError(PersistedQueriesError):
    """Raised for an unknown hash type, transformer or sink before any work starts."""


class SourceReadError(PersistedQueriesError):
    """Raised when a file or directory under the input root cannot be read."""

    def __init__(self, path: Path, cause: Exception) -> None:
        self.path = path
        self.cause = cause
        super().__init__(f"Could not read {path}: {cause}")


class OutputWriteError(PersistedQueriesError):
    """Raised when the query map cannot be written."""

    def __init__(self, path: Path, cause: Exception) -> None:
        self.path = path
        self.cause = cause
        super().__init__(f"Could not write {path}: {cause}")


class DocumentSyntaxError(PersistedQueriesError):
    """
    Raised when the aggregated document text is not valid GraphQL.

    ``line`` and ``column`` point into the aggregated text. When the failing
    line can be traced back to the segment it came from, ``source_file`` and
    ``source_line`` point into the original file.
    """

    def __init__(
        self,
        message: str,
        line: int = 0,
        column: int = 0,
        source_file: Optional[Path] = None,
        source_line: Optional[int] = None,
        context: str = "",
    ) -> None:
        self.message = message
        self.line = line
        self.column = column
        self.source_file = source_file
        self.source_line = source_line
        self.context = context
        super().__init__(str(self))

    def __str__(self) -> str:
        if self.source_file is not None:
            location = f"{self.source_file}:{self.source_line}:{self.column}"
        else:
            location = f"line {self.line}, column {self.column}"
        text = f"{location}: {self.message}"
        if self.context:
            text += f"\n    {self.context.strip()}"
        return text


class SinkError(PersistedQueriesError):
    """Raised when one or more writes to the key-value sink fail."""

    def __init__(self, failed: dict[str, Exception]) -> None:
        self.failed = failed
        keys = ", ".join(sorted(failed))
        super().__init__(f"Failed to push {len(failed)} queries: {keys}")
