"""Identifier assignment - one stable id per distinct canonical key."""

from __future__ import annotations

import hashlib
import secrets
from typing import Union

from .config import HashType

Identifier = Union[int, str]
OutputMap = dict[str, Identifier]


def hex_digest(algorithm: str, query: str) -> str:
    """Hex digest of the UTF-8 bytes of ``query``."""
    return hashlib.new(algorithm, query.encode("utf-8")).hexdigest()


def random_uuid() -> str:
    """32 random hex characters grouped 8-4-4-4-12."""
    digits = secrets.token_hex(16)
    return "-".join(
        (digits[:8], digits[8:12], digits[12:16], digits[16:20], digits[20:32])
    )


class IdentifierAssigner:
    """
    Assigns ids to canonical keys and remembers them.

    The output map doubles as the cache: a key gets an id the first time it
    is seen, and every later lookup returns that id without touching the
    counter. One assigner belongs to one extraction run, and its strategy
    cannot change once it is created.
    """

    def __init__(self, hash_type: Union[str, HashType] = HashType.SEQUENTIAL) -> None:
        """
        Initialize the assigner.

        Args:
            hash_type: Identifier strategy

        Raises:
            ConfigurationError: If the strategy is unknown
        """
        self._hash_type = HashType.parse(hash_type)
        self.query_id = 0
        self.output_map: OutputMap = {}

    @property
    def hash_type(self) -> HashType:
        return self._hash_type

    def get_query_id(self, query: str) -> Identifier:
        """Compute a fresh id for ``query`` under the configured strategy."""
        if self._hash_type == HashType.UUID:
            return random_uuid()
        if self._hash_type == HashType.SEQUENTIAL:
            self.query_id += 1
            return self.query_id
        return hex_digest(self._hash_type.value, query)

    def assign(self, query: str) -> Identifier:
        """Return the id of ``query``, assigning one if it has not been seen."""
        if query in self.output_map:
            return self.output_map[query]
        identifier = self.get_query_id(query)
        self.output_map[query] = identifier
        return identifier

    def __contains__(self, query: str) -> bool:
        return query in self.output_map

    def __len__(self) -> int:
        return len(self.output_map)
