"""Query collector - walks a source tree and aggregates its document text."""

from __future__ import annotations

import logging
import stat
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from .config import normalize_extension
from .errors import SourceReadError
from .extractors import BaseExtractor, ExtractedQuery, GraphQLExtractor, TemplateLiteralExtractor
from .extractors.base import split_lines

logger = logging.getLogger(__name__)

# Segments are joined on their own line so a trailing comment in one file
# cannot swallow the first line of the next.
SEGMENT_SEPARATOR = "\n"


def get_file_extension(file_path: Path) -> str:
    """Return the last dot-separated piece of the file name, or '' if there is none."""
    pieces = Path(file_path).name.split(".")
    if len(pieces) <= 1:
        return ""
    return pieces[-1]


@dataclass
class AggregatedSource:
    """
    Document text from every matching file under the input root, in traversal order.

    The whole tree is parsed as one document, so fragment and operation names
    share a single namespace across files. The segments are kept so that a
    line in the aggregated text can be traced back to the file it came from.
    """

    segments: list[ExtractedQuery] = field(default_factory=list)

    @property
    def text(self) -> str:
        """The aggregated document text."""
        return SEGMENT_SEPARATOR.join(segment.content for segment in self.segments)

    @property
    def source_files(self) -> list[Path]:
        """Files that contributed at least one segment, without repeats."""
        return list(dict.fromkeys(segment.source_file for segment in self.segments))

    def locate(self, line: int) -> Optional[tuple[ExtractedQuery, int]]:
        """
        Map a 1-based line of the aggregated text to its segment.

        Returns:
            The segment and the absolute line in its source file, or None if
            the line is outside every segment
        """
        # Start lines come from the joined text: a segment ending in a lone \r
        # merges with the separator into a single \r\n break.
        text = self.text
        offset = 0
        located = None
        for segment in self.segments:
            segment_start = len(split_lines(text[:offset]))
            if segment_start > line:
                break
            located = segment, segment_start
            offset += len(segment.content) + len(SEGMENT_SEPARATOR)

        if located is None:
            return None
        segment, segment_start = located
        if line - segment_start >= segment.line_count:
            return None
        return segment, segment.get_absolute_line(line - segment_start + 1)

    def __bool__(self) -> bool:
        return bool(self.segments)


class QueryCollector:
    """
    Collects GraphQL document text from a file or a directory tree.

    Only files whose extension matches the configured one contribute; all
    others contribute nothing and are never opened. In embedded mode the
    contribution is the set of tagged template literals in the file,
    otherwise it is the whole file.
    """

    def __init__(
        self,
        extension: str = "graphql",
        in_js_code: bool = False,
        literal_tag: str = "gql",
        max_workers: Optional[int] = None,
    ) -> None:
        """
        Initialize the collector.

        Args:
            extension: Extension of the files to read, with or without the dot
            in_js_code: Look for tagged template literals instead of whole documents
            literal_tag: Template tag marking GraphQL documents in program source
            max_workers: Thread pool size for concurrent file reads
        """
        self.extension = normalize_extension(extension)
        self.in_js_code = in_js_code
        self.max_workers = max_workers
        self.extractor: BaseExtractor
        if in_js_code:
            self.extractor = TemplateLiteralExtractor(literal_tag)
        else:
            self.extractor = GraphQLExtractor()

    def matches(self, file_path: Path) -> bool:
        """Check whether a file contributes to the aggregated document."""
        return get_file_extension(file_path) == self.extension

    def list_input_files(self, input_path: Path) -> list[Path]:
        """
        Walk ``input_path`` depth-first and list every matching file.

        Directory entries are visited in name order so the aggregated text is
        the same on every machine.

        Raises:
            SourceReadError: If any path cannot be stat-ed or listed
        """
        try:
            is_directory = stat.S_ISDIR(input_path.stat().st_mode)
        except OSError as e:
            raise SourceReadError(input_path, e) from e

        if not is_directory:
            return [input_path] if self.matches(input_path) else []

        logger.info("Crawling %s...", input_path)
        try:
            entries = sorted(input_path.iterdir(), key=lambda entry: entry.name)
        except OSError as e:
            raise SourceReadError(input_path, e) from e

        files: list[Path] = []
        for entry in entries:
            files.extend(self.list_input_files(entry))
        return files

    def read_input_file(self, file_path: Path) -> list[ExtractedQuery]:
        """
        Read one file and extract its document segments.

        Raises:
            SourceReadError: If the file cannot be read or is not UTF-8
        """
        if not self.matches(file_path):
            return []

        try:
            content = file_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise SourceReadError(file_path, e) from e

        queries = self.extractor.extract(file_path, content)
        logger.debug("Found %d document segments in %s", len(queries), file_path)
        return queries

    def collect(self, input_path: Path) -> AggregatedSource:
        """
        Aggregate the document text of every matching file under ``input_path``.

        Files are read concurrently, but their segments are joined back in
        traversal order before anything is parsed. The first read failure
        aborts the whole collection.

        Args:
            input_path: File or directory to scan

        Returns:
            The aggregated source, possibly empty
        """
        files = self.list_input_files(Path(input_path))

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            per_file = list(executor.map(self.read_input_file, files))

        return AggregatedSource(
            segments=[segment for segments in per_file for segment in segments]
        )

    def collect_from_content(self, content: str, file_path: Path) -> AggregatedSource:
        """
        Aggregate the document text of in-memory content (useful for testing or piped input).

        Args:
            content: File content
            file_path: Virtual path for the content
        """
        return AggregatedSource(segments=self.extractor.extract(file_path, content))
