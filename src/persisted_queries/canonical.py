"""Canonical keys - the printed form used to deduplicate and hash operations."""

from __future__ import annotations

from graphql import DocumentNode, OperationDefinitionNode, print_ast

from .fragments import resolve_operation_document


def get_query_document_key(document: DocumentNode) -> str:
    """
    Print a resolved operation document.

    The printer ignores source formatting and comments, so documents with the
    same shape always print the same text.
    """
    return print_ast(document)


def get_query_key(document: DocumentNode, operation: OperationDefinitionNode) -> str:
    """The canonical key of ``operation`` together with the fragments it needs from ``document``."""
    return get_query_document_key(resolve_operation_document(document, operation))
