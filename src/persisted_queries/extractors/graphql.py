"""Standalone document extractor - files that hold nothing but GraphQL."""

from __future__ import annotations

from pathlib import Path

from .base import BaseExtractor, ExtractedQuery


class GraphQLExtractor(BaseExtractor):
    """
    Extractor for standalone document files.

    The file is contributed as-is: operations and fragments it defines join
    the aggregated document unchanged.
    """

    def extract(self, file_path: Path, content: str) -> list[ExtractedQuery]:
        """Return the whole file as one segment, or nothing for a blank file."""
        if not content.strip():
            return []

        return [ExtractedQuery(content=content, source_file=file_path, start_line=1, identifier=file_path.stem)]
