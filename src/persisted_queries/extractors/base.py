"""Base extractor interface for pulling GraphQL document text out of files."""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path

# Line terminators as the GraphQL lexer counts them.
LINE_BREAK = re.compile(r"\r\n|[\n\r]")


def split_lines(text: str) -> list[str]:
    """Split ``text`` on \\r\\n, \\n and lone \\r, the way GraphQL source locations do."""
    return LINE_BREAK.split(text)


@dataclass
class ExtractedQuery:
    """A piece of GraphQL document text found in a source file."""

    content: str
    """Raw document text, interpolations already removed."""

    source_file: Path
    """Path to the original source file."""

    start_line: int
    """1-based line number where the text starts in the source file."""

    start_col: int = 1
    """1-based column number where the text starts."""

    identifier: str = ""
    """Optional label (file stem or template tag)."""

    @property
    def line_count(self) -> int:
        """Number of lines the content occupies."""
        return len(split_lines(self.content))

    def get_absolute_line(self, relative_line: int) -> int:
        """
        Convert a line number relative to the content to an absolute line
        number in the source file.

        Args:
            relative_line: 1-based line number within the content

        Returns:
            1-based line number in the source file
        """
        return self.start_line + relative_line - 1


class BaseExtractor(ABC):
    """Abstract base class for document extractors."""

    @abstractmethod
    def extract(self, file_path: Path, content: str) -> list[ExtractedQuery]:
        """
        Extract all GraphQL document text from file content.

        Args:
            file_path: Path to the source file
            content: Raw content of the file

        Returns:
            Extracted segments, in the order they appear in the file
        """
        ...
