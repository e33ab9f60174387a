"""Query transformers - document rewrites applied before queries are keyed."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Callable

from graphql import (
    DocumentNode,
    FieldNode,
    NameNode,
    OperationDefinitionNode,
    SelectionSetNode,
    Visitor,
    visit,
)

from .errors import ConfigurationError

QueryTransformer = Callable[[DocumentNode], DocumentNode]
"""A pure document -> document rewrite. It must be idempotent and keep
definition names and order intact."""

TYPENAME = "__typename"


def _typename_field() -> FieldNode:
    return FieldNode(name=NameNode(value=TYPENAME), arguments=(), directives=())


class AddTypenameVisitor(Visitor):
    """
    Appends a ``__typename`` selection to every selection set that lacks one.

    The root selection set of an operation is left alone; fragment
    definitions, fields and inline fragments all get one.
    """

    def enter_selection_set(self, node: SelectionSetNode, _key, parent, *_args):
        if isinstance(parent, OperationDefinitionNode):
            return None

        has_typename = any(
            isinstance(selection, FieldNode) and selection.name.value == TYPENAME
            for selection in node.selections
        )
        if has_typename:
            return None

        return SelectionSetNode(
            selections=(*node.selections, _typename_field()),
            loc=node.loc,
        )


def add_typename_transformer(document: DocumentNode) -> DocumentNode:
    """Add ``__typename`` to every non-root selection set of the document."""
    return visit(document, AddTypenameVisitor())


TRANSFORMERS: dict[str, QueryTransformer] = {
    "add_typename": add_typename_transformer,
}


def get_transformer(name: str) -> QueryTransformer:
    """
    Look up a transformer by name.

    Raises:
        ConfigurationError: If no transformer is registered under ``name``
    """
    try:
        return TRANSFORMERS[name.replace("-", "_")]
    except KeyError:
        choices = ", ".join(sorted(TRANSFORMERS))
        raise ConfigurationError(
            f"Unknown query transformer '{name}'. Must be one of [{choices}]"
        ) from None


def apply_query_transformers(
    document: DocumentNode, transformers: Iterable[QueryTransformer]
) -> DocumentNode:
    """Run ``document`` through ``transformers`` from left to right."""
    for transformer in transformers:
        document = transformer(document)
    return document
