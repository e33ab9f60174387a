"""Fragment resolution - the transitive fragment closure of an operation."""

from __future__ import annotations

from typing import Optional

from graphql import (
    DocumentNode,
    FragmentDefinitionNode,
    FragmentSpreadNode,
    OperationDefinitionNode,
    SelectionSetNode,
    Visitor,
    visit,
)

from .document import get_fragment_definitions


class FragmentSpreadCollector(Visitor):
    """Records the name of every fragment spread below the visited node."""

    def __init__(self) -> None:
        super().__init__()
        self.names: list[str] = []

    def enter_fragment_spread(self, node: FragmentSpreadNode, *_args) -> None:
        self.names.append(node.name.value)


def collect_fragment_spreads(selection_set: Optional[SelectionSetNode]) -> list[str]:
    """
    Names of the fragments spread anywhere inside a selection set.

    Fields and inline fragments are descended into; fragment spreads are not
    followed. Each name appears once, in first-seen order.
    """
    if selection_set is None:
        return []
    collector = FragmentSpreadCollector()
    visit(selection_set, collector)
    return list(dict.fromkeys(collector.names))


def resolve_fragment_names(
    operation: OperationDefinitionNode, document: DocumentNode
) -> set[str]:
    """
    Names of every fragment the operation needs, directly or through other fragments.

    Each fragment is scanned at most once, so spread cycles terminate. A
    spread of a fragment the document does not define stays in the result
    but contributes nothing further.
    """
    fragments = get_fragment_definitions(document)
    required = set(collect_fragment_spreads(operation.selection_set))
    unvisited = list(required)

    while unvisited:
        fragment = fragments.get(unvisited.pop())
        if fragment is None:
            continue
        for name in collect_fragment_spreads(fragment.selection_set):
            if name not in required:
                required.add(name)
                unvisited.append(name)

    return required


def get_query_fragments(
    document: DocumentNode, operation: OperationDefinitionNode
) -> list[FragmentDefinitionNode]:
    """
    The fragment definitions ``operation`` depends on, sorted by name.

    Duplicate names resolve to their first definition in document order;
    undefined names are silently left out.
    """
    required = resolve_fragment_names(operation, document)
    fragments = get_fragment_definitions(document)
    return [fragments[name] for name in sorted(required) if name in fragments]


def resolve_operation_document(
    document: DocumentNode, operation: OperationDefinitionNode
) -> DocumentNode:
    """A document holding ``operation`` followed by its name-sorted fragment closure."""
    return DocumentNode(definitions=(operation, *get_query_fragments(document, operation)))
