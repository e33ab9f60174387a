"""Extraction pipeline - from a source tree to a persisted query map."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union

from graphql import DocumentNode

from .canonical import get_query_key
from .config import ExtractorConfig, HashType
from .document import get_operation_definitions, parse_document, split_operations
from .errors import SourceReadError
from .identifiers import IdentifierAssigner, OutputMap
from .output import write_output_map
from .query_collector import AggregatedSource, QueryCollector
from .sinks import open_store, push_output_map, sink_scheme
from .transformers import QueryTransformer, apply_query_transformers, get_transformer

logger = logging.getLogger(__name__)


@dataclass
class ExtractionResult:
    """Outcome of one extraction run."""

    output_map: OutputMap
    input_path: Path
    output_path: Path
    hash_type: HashType
    source_files: list[Path] = field(default_factory=list)
    pushed: Optional[int] = None
    """Entries written to the key-value sink, or None when no sink is configured."""


class QueryExtractor:
    """
    Extracts the operations of a source tree into a persisted query map.

    Pipeline:
    1. Collect and aggregate document text from every matching file
    2. Parse it as one document and split it per operation
    3. Transform, resolve fragments and print each operation
    4. Assign each distinct printed operation an id
    """

    def __init__(
        self,
        config: ExtractorConfig,
        query_transformers: Optional[list[QueryTransformer]] = None,
    ) -> None:
        """
        Initialize the extractor.

        Args:
            config: Extraction settings
            query_transformers: Extra transformers, applied after the named ones

        Raises:
            ConfigurationError: If a transformer name or the sink URL is invalid
        """
        self.config = config
        self.query_transformers: list[QueryTransformer] = [
            get_transformer(name) for name in config.transformers
        ]
        self.query_transformers.extend(query_transformers or [])

        if config.sink is not None:
            sink_scheme(config.sink.url)

        self.collector = QueryCollector(
            extension=config.file_extension,
            in_js_code=config.in_js_code,
            literal_tag=config.literal_tag,
        )

    @property
    def hash_type(self) -> HashType:
        return self.config.hash_type

    def add_query_transformer(self, query_transformer: QueryTransformer) -> None:
        """Add a transformer to the end of the list."""
        self.query_transformers.append(query_transformer)

    def apply_query_transformers(self, document: DocumentNode) -> DocumentNode:
        return apply_query_transformers(document, self.query_transformers)

    def new_assigner(self) -> IdentifierAssigner:
        """A fresh id cache for one run."""
        return IdentifierAssigner(self.hash_type)

    def create_map_from_document(
        self,
        document: DocumentNode,
        assigner: Optional[IdentifierAssigner] = None,
    ) -> OutputMap:
        """
        Key and id every operation of a document.

        The document is transformed first; each operation is then printed
        together with the fragments it needs from the transformed document.
        """
        if assigner is None:
            assigner = self.new_assigner()

        transformed = self.apply_query_transformers(document)
        result: OutputMap = {}
        for operation in get_operation_definitions(transformed):
            query_key = get_query_key(transformed, operation)
            result[query_key] = assigner.assign(query_key)
        return result

    def create_output_map(
        self,
        source: Union[str, AggregatedSource],
        assigner: Optional[IdentifierAssigner] = None,
    ) -> OutputMap:
        """
        Build the query map of aggregated document text.

        Raises:
            DocumentSyntaxError: If the text is not valid GraphQL
        """
        if assigner is None:
            assigner = self.new_assigner()

        document = parse_document(source)
        output_map: OutputMap = {}
        for operation_document in split_operations(document):
            output_map.update(self.create_map_from_document(operation_document, assigner))
        return output_map

    def process_graphql_file(self, graphql_file: Path) -> OutputMap:
        """Build the query map of a single standalone document file."""
        try:
            content = Path(graphql_file).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise SourceReadError(Path(graphql_file), e) from e
        return self.create_output_map(content)

    def read_input_path(self, input_path: Optional[Path] = None) -> AggregatedSource:
        """Aggregate the document text under ``input_path`` (default: the configured input)."""
        return self.collector.collect(Path(input_path or self.config.input_path))

    def process_input_path(self, input_path: Optional[Path] = None) -> OutputMap:
        """Build the query map of a file or directory tree."""
        return self.create_output_map(self.read_input_path(input_path))

    def extract(self) -> ExtractionResult:
        """
        Run the whole extraction: read, key, write the map file, then push.

        Nothing is written unless every file was read and parsed.
        """
        source = self.read_input_path()
        output_map = self.create_output_map(source)

        write_output_map(output_map, self.config.output_path)
        logger.info("Wrote output file to %s", self.config.output_path)

        result = ExtractionResult(
            output_map=output_map,
            input_path=self.config.input_path,
            output_path=self.config.output_path,
            hash_type=self.hash_type,
            source_files=source.source_files,
        )

        sink = self.config.sink
        if sink is not None:
            logger.info("Pushing to %s...", sink.url)
            store = open_store(sink)
            try:
                result.pushed = push_output_map(output_map, store, prefix=sink.prefix)
            finally:
                store.close()

        return result
