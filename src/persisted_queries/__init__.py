"""Persisted Queries - extract GraphQL operations into a persisted query map."""

from .config import ExtractorConfig, HashType, SinkConfig
from .errors import (
    ConfigurationError,
    DocumentSyntaxError,
    OutputWriteError,
    PersistedQueriesError,
    SinkError,
    SourceReadError,
)
from .extractor import ExtractionResult, QueryExtractor
from .identifiers import IdentifierAssigner, OutputMap

__version__ = "0.1.0"

__all__ = [
    "ConfigurationError",
    "DocumentSyntaxError",
    "ExtractionResult",
    "ExtractorConfig",
    "HashType",
    "IdentifierAssigner",
    "OutputMap",
    "OutputWriteError",
    "PersistedQueriesError",
    "QueryExtractor",
    "SinkConfig",
    "SinkError",
    "SourceReadError",
]
