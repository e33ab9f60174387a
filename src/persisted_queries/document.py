"""Parsing the aggregated text and splitting it into one document per operation."""

from __future__ import annotations

import logging
from typing import Union

from graphql import (
    DocumentNode,
    FragmentDefinitionNode,
    OperationDefinitionNode,
    parse,
)
from graphql.error import GraphQLSyntaxError

from .errors import DocumentSyntaxError
from .extractors.base import split_lines
from .query_collector import AggregatedSource

logger = logging.getLogger(__name__)


def operation_name(operation: OperationDefinitionNode) -> str:
    """Provide the empty string for anonymous operations."""
    return operation.name.value if operation.name else ""


def get_operation_definitions(document: DocumentNode) -> list[OperationDefinitionNode]:
    """All operation definitions of a document, in document order."""
    return [
        definition
        for definition in document.definitions
        if isinstance(definition, OperationDefinitionNode)
    ]


def get_fragment_definitions(document: DocumentNode) -> dict[str, FragmentDefinitionNode]:
    """
    Fragment definitions by name.

    When several definitions share a name the first one in document order
    wins and the rest are dropped.
    """
    fragments: dict[str, FragmentDefinitionNode] = {}
    for definition in document.definitions:
        if not isinstance(definition, FragmentDefinitionNode):
            continue
        name = definition.name.value
        if name in fragments:
            logger.debug("Dropping duplicate definition of fragment %s", name)
            continue
        fragments[name] = definition
    return fragments


def _syntax_error(
    error: GraphQLSyntaxError, text: str, source: Union[str, AggregatedSource]
) -> DocumentSyntaxError:
    line = column = 0
    if error.locations:
        line, column = error.locations[0].line, error.locations[0].column

    lines = split_lines(text)
    context = lines[line - 1] if 0 < line <= len(lines) else ""

    source_file = source_line = None
    if isinstance(source, AggregatedSource):
        located = source.locate(line)
        if located is not None:
            segment, source_line = located
            source_file = segment.source_file
            if source_line == segment.start_line:
                column = segment.start_col + column - 1

    return DocumentSyntaxError(
        error.message,
        line=line,
        column=column,
        source_file=source_file,
        source_line=source_line,
        context=context,
    )


def parse_document(source: Union[str, AggregatedSource]) -> DocumentNode:
    """
    Parse aggregated text into a single document.

    Blank input yields an empty document.

    Raises:
        DocumentSyntaxError: If the text is not valid GraphQL
    """
    text = source.text if isinstance(source, AggregatedSource) else source
    if not text.strip():
        return DocumentNode(definitions=())

    try:
        return parse(text)
    except GraphQLSyntaxError as e:
        raise _syntax_error(e, text, source) from e


def split_operations(document: DocumentNode) -> list[DocumentNode]:
    """
    Split a document into one sub-document per operation.

    Every sub-document holds its operation followed by all fragment
    definitions of the full document; unused fragments are pruned later.
    Anonymous operations each get their own sub-document. A named operation
    whose name was already seen is dropped.
    """
    fragments = tuple(
        definition
        for definition in document.definitions
        if isinstance(definition, FragmentDefinitionNode)
    )

    seen: set[str] = set()
    documents: list[DocumentNode] = []
    for operation in get_operation_definitions(document):
        name = operation_name(operation)
        if name:
            if name in seen:
                logger.debug("Dropping duplicate definition of operation %s", name)
                continue
            seen.add(name)
        documents.append(DocumentNode(definitions=(operation, *fragments)))

    return documents
