"""Tests for transitive fragment resolution."""

from __future__ import annotations

from graphql import parse, print_ast

from persisted_queries.document import get_operation_definitions
from persisted_queries.fragments import (
    collect_fragment_spreads,
    get_query_fragments,
    resolve_fragment_names,
    resolve_operation_document,
)


def _operation(document, index: int = 0):
    return get_operation_definitions(document)[index]


def test_direct_and_transitive_fragments() -> None:
    document = parse(
        """
        query Q { hero { ...A } }
        fragment A on Hero { ...B friends { ...C } }
        fragment B on Hero { name }
        fragment C on Hero { id }
        fragment Unused on Hero { age }
        """
    )

    assert resolve_fragment_names(_operation(document), document) == {"A", "B", "C"}


def test_spread_cycle_terminates() -> None:
    document = parse(
        """
        query Q { ...F1 }
        fragment F1 on T { a ...F2 }
        fragment F2 on T { b ...F1 }
        """
    )
    operation = _operation(document)

    assert resolve_fragment_names(operation, document) == {"F1", "F2"}
    fragments = get_query_fragments(document, operation)
    assert [fragment.name.value for fragment in fragments] == ["F1", "F2"]


def test_spreads_inside_inline_fragments_are_found() -> None:
    document = parse("query Q { node { ... on User { ...UserFields } } }")

    assert collect_fragment_spreads(_operation(document).selection_set) == ["UserFields"]


def test_undefined_fragment_is_silently_omitted() -> None:
    document = parse("query Q { ...Missing ...Known } fragment Known on T { id }")
    operation = _operation(document)

    assert resolve_fragment_names(operation, document) == {"Missing", "Known"}
    assert [f.name.value for f in get_query_fragments(document, operation)] == ["Known"]


def test_result_is_sorted_and_deduplicated() -> None:
    document = parse(
        """
        query Q { ...Zed ...Alpha }
        fragment Zed on T { z }
        fragment Alpha on T { a }
        fragment Zed on T { duplicate }
        """
    )

    resolved = resolve_operation_document(document, _operation(document))

    assert print_ast(resolved) == (
        "query Q {\n"
        "  ...Zed\n"
        "  ...Alpha\n"
        "}\n"
        "\n"
        "fragment Alpha on T {\n"
        "  a\n"
        "}\n"
        "\n"
        "fragment Zed on T {\n"
        "  z\n"
        "}"
    )


def test_operation_without_spreads_needs_nothing() -> None:
    document = parse("query Q { a } fragment F on T { b }")

    assert resolve_fragment_names(_operation(document), document) == set()
    assert print_ast(resolve_operation_document(document, _operation(document))) == (
        "query Q {\n  a\n}"
    )
