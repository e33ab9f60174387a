"""Configuration models for persisted query extraction."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Optional, Union

from pydantic import BaseModel, Field, field_validator

from .errors import ConfigurationError


class HashType(str, Enum):
    """Identifier strategies for extracted queries."""

    MD5 = "md5"
    SHA1 = "sha1"
    SHA256 = "sha256"
    SEQUENTIAL = "sequential"
    UUID = "uuid"

    @classmethod
    def parse(cls, value: Union[str, "HashType"]) -> "HashType":
        """Resolve a hash type name, raising ConfigurationError if unknown."""
        try:
            return cls(value.lower() if isinstance(value, str) else value)
        except ValueError:
            choices = ", ".join(h.value for h in cls)
            raise ConfigurationError(
                f"Invalid hash type '{value}'. Must be one of [{choices}]"
            ) from None


class OutputFormat(str, Enum):
    """Output format options."""

    HUMAN = "human"
    JSON = "json"


def normalize_extension(extension: str) -> str:
    """Strip a leading dot so '.js' and 'js' compare equal."""
    return extension[1:] if extension.startswith(".") else extension


class SinkConfig(BaseModel):
    """Where the id -> query view is pushed after extraction."""

    url: str = Field(..., description="redis:// or http(s):// endpoint of the key-value store")
    prefix: str = Field("graphqlQueries", description="Namespace prepended to every key")
    timeout: float = Field(30.0, description="Request timeout in seconds")


class ExtractorConfig(BaseModel):
    """Main configuration for an extraction run."""

    input_path: Path = Field(..., description="File or directory to extract queries from")
    output_path: Path = Field(
        Path("extracted_queries.json"), description="Where the query map is written"
    )
    transformers: list[str] = Field(
        default_factory=list, description="Transformer names, applied left to right"
    )
    extension: Optional[str] = Field(
        None, description="Extension of files to read (default: graphql, or js with in_js_code)"
    )
    in_js_code: bool = Field(False, description="Read tagged template literals from program source")
    literal_tag: str = Field("gql", description="Template literal tag marking GraphQL documents")
    hash_type: HashType = Field(HashType.SEQUENTIAL, description="Identifier strategy")
    sink: Optional[SinkConfig] = Field(None, description="Optional key-value store to push to")

    @field_validator("hash_type", mode="before")
    @classmethod
    def _parse_hash_type(cls, value: Union[str, HashType]) -> HashType:
        return HashType.parse(value)

    @property
    def file_extension(self) -> str:
        """Extension of the files that contribute documents, without the dot."""
        if self.extension:
            return normalize_extension(self.extension)
        return "js" if self.in_js_code else "graphql"
