"""Tests for parsing aggregated text and splitting it per operation."""

from __future__ import annotations

from pathlib import Path

import pytest
from graphql import FragmentDefinitionNode, OperationDefinitionNode, print_ast

from persisted_queries.document import (
    get_fragment_definitions,
    operation_name,
    parse_document,
    split_operations,
)
from persisted_queries.errors import DocumentSyntaxError
from persisted_queries.extractors import ExtractedQuery
from persisted_queries.query_collector import AggregatedSource


def test_blank_text_parses_to_empty_document() -> None:
    assert parse_document("  \n").definitions == ()


def test_invalid_text_raises_syntax_error() -> None:
    with pytest.raises(DocumentSyntaxError) as excinfo:
        parse_document("query Q { a ) }")

    error = excinfo.value
    assert error.line == 1
    assert error.column == 13
    assert error.source_file is None
    assert error.context == "query Q { a ) }"


def test_syntax_error_points_back_to_source_file() -> None:
    source = AggregatedSource(
        segments=[
            ExtractedQuery(content="query A { a }\n", source_file=Path("a.graphql"), start_line=1),
            ExtractedQuery(
                content="query B { b }\nquery C { c ) }\n",
                source_file=Path("b.graphql"),
                start_line=1,
            ),
        ]
    )

    with pytest.raises(DocumentSyntaxError) as excinfo:
        parse_document(source)

    error = excinfo.value
    assert error.line == 4
    assert error.source_file == Path("b.graphql")
    assert error.source_line == 2
    assert "Expected Name" in str(error)
    assert "b.graphql:2:13" in str(error)


def test_syntax_error_location_with_carriage_return_line_endings() -> None:
    source = AggregatedSource(
        segments=[
            ExtractedQuery(content="query A { a }\r", source_file=Path("a.graphql"), start_line=1),
            ExtractedQuery(
                content="query B { b }\rquery C { c ) }\r",
                source_file=Path("b.graphql"),
                start_line=1,
            ),
        ]
    )

    with pytest.raises(DocumentSyntaxError) as excinfo:
        parse_document(source)

    error = excinfo.value
    assert error.line == 3
    assert error.source_file == Path("b.graphql")
    assert error.source_line == 2
    assert error.context == "query C { c ) }"
    assert "b.graphql:2:13" in str(error)


def test_split_gives_each_operation_every_fragment() -> None:
    document = parse_document(
        """
        query A { ...F }
        fragment F on T { id }
        mutation B { doIt }
        fragment G on T { name }
        """
    )

    documents = split_operations(document)

    assert len(documents) == 2
    for split, name in zip(documents, ["A", "B"]):
        operation, *fragments = split.definitions
        assert isinstance(operation, OperationDefinitionNode)
        assert operation_name(operation) == name
        assert [fragment.name.value for fragment in fragments] == ["F", "G"]
        assert all(isinstance(fragment, FragmentDefinitionNode) for fragment in fragments)


def test_anonymous_operations_are_kept_separately() -> None:
    documents = split_operations(parse_document("{ a }\n{ b }"))

    assert [print_ast(document) for document in documents] == ["{\n  a\n}", "{\n  b\n}"]


def test_duplicate_operation_name_keeps_first() -> None:
    documents = split_operations(parse_document("query Q { first }\nquery Q { second }"))

    assert len(documents) == 1
    assert "first" in print_ast(documents[0])


def test_duplicate_fragment_name_keeps_first() -> None:
    document = parse_document("fragment F on T { first }\nfragment F on T { second }")

    fragments = get_fragment_definitions(document)

    assert list(fragments) == ["F"]
    assert "first" in print_ast(fragments["F"])
