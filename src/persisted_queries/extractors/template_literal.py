"""Template literal extractor - handles GraphQL documents embedded in program source."""

from __future__ import annotations

import re
from collections.abc import Iterator
from pathlib import Path

from .base import BaseExtractor, ExtractedQuery, split_lines

TEMPLATE_DELIMITER = "`"
INTERPOLATION_START = "${"
QUOTES = ("'", '"')


def _skip_string(text: str, start: int) -> int:
    """Return the index just past the quoted string opening at ``start``."""
    quote = text[start]
    i = start + 1
    while i < len(text):
        ch = text[i]
        if ch == "\\":
            i += 2
            continue
        if ch == quote or ch == "\n":
            return i + 1
        i += 1
    return len(text)


def _scan_expression(text: str, start: int) -> int:
    """
    Find the end of an interpolation expression whose body starts at ``start``.

    Braces are counted and nested strings and template literals are skipped,
    so ``${cond ? `a ${b}` : '}'}`` closes on the last brace.

    Returns:
        Index just past the closing brace, or -1 if the expression never closes
    """
    depth = 1
    i = start
    while i < len(text):
        ch = text[i]
        if ch in QUOTES:
            i = _skip_string(text, i)
            continue
        if ch == TEMPLATE_DELIMITER:
            end = _scan_template(text, i + 1)
            if end < 0:
                return -1
            i = end + 1
            continue
        if ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return i + 1
        i += 1
    return -1


def _scan_template(text: str, start: int) -> int:
    """
    Find the backtick closing a template literal whose body starts at ``start``.

    Returns:
        Index of the closing backtick, or -1 if the template never closes
    """
    i = start
    while i < len(text):
        ch = text[i]
        if ch == "\\":
            i += 2
            continue
        if ch == TEMPLATE_DELIMITER:
            return i
        if text.startswith(INTERPOLATION_START, i):
            i = _scan_expression(text, i + len(INTERPOLATION_START))
            if i < 0:
                return -1
            continue
        i += 1
    return -1


def find_tagged_template_literals(content: str, tag: str) -> Iterator[tuple[int, str]]:
    """
    Lazily yield ``(offset, body)`` for every ``tag`...`` template in ``content``.

    ``offset`` is the index of the first character of the body. Scanning stops
    at the first template that is never closed.
    """
    opening = re.compile(rf"(?<![\w$]){re.escape(tag)}\s*{TEMPLATE_DELIMITER}")
    position = 0
    while True:
        match = opening.search(content, position)
        if match is None:
            return
        body_start = match.end()
        body_end = _scan_template(content, body_start)
        if body_end < 0:
            return
        yield body_start, content[body_start:body_end]
        position = body_end + 1


def eliminate_interpolations(body: str) -> str:
    """
    Delete every ``${...}`` hole from a template literal body.

    Holes are removed, not replaced, so they must only ever stand for
    optional pieces of the document (directives, extra fragments). An
    unbalanced hole leaves the rest of the body untouched.
    """
    pieces: list[str] = []
    i = 0
    copied_from = 0
    while i < len(body):
        ch = body[i]
        if ch == "\\":
            i += 2
            continue
        if body.startswith(INTERPOLATION_START, i):
            end = _scan_expression(body, i + len(INTERPOLATION_START))
            if end < 0:
                break
            pieces.append(body[copied_from:i])
            i = copied_from = end
            continue
        i += 1
    pieces.append(body[copied_from:])
    return "".join(pieces)


class TemplateLiteralExtractor(BaseExtractor):
    """
    Extractor for program source containing tagged GraphQL template literals.

    Supports patterns like:
        const QUERY = gql`
            query Hero { hero { ...HeroFields ${includeExtras} } }
        `;

    The tag defaults to ``gql`` and can be any identifier.
    """

    def __init__(self, tag: str = "gql") -> None:
        self.tag = tag

    def extract(self, file_path: Path, content: str) -> list[ExtractedQuery]:
        """
        Extract every tagged template literal body, with interpolations removed.

        Args:
            file_path: Path to the source file
            content: Source file content

        Returns:
            One ExtractedQuery per non-empty literal, in file order
        """
        queries: list[ExtractedQuery] = []

        for offset, body in find_tagged_template_literals(content, self.tag):
            document = eliminate_interpolations(body)
            if not document.strip():
                continue

            lines_before = split_lines(content[:offset])
            queries.append(
                ExtractedQuery(
                    content=document,
                    source_file=file_path,
                    start_line=len(lines_before),
                    start_col=len(lines_before[-1]) + 1,
                    identifier=self.tag,
                )
            )

        return queries
