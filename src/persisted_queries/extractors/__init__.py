"""Document extractors for different kinds of source files."""

from .base import BaseExtractor, ExtractedQuery
from .graphql import GraphQLExtractor
from .template_literal import (
    TemplateLiteralExtractor,
    eliminate_interpolations,
    find_tagged_template_literals,
)

__all__ = [
    "BaseExtractor",
    "ExtractedQuery",
    "GraphQLExtractor",
    "TemplateLiteralExtractor",
    "eliminate_interpolations",
    "find_tagged_template_literals",
]
