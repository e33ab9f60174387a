"""Shared fixtures for persisted query tests."""

from __future__ import annotations

from pathlib import Path
from typing import Callable

import pytest

from persisted_queries import ExtractorConfig, QueryExtractor


@pytest.fixture
def write_tree(tmp_path: Path) -> Callable[[dict[str, str]], Path]:
    """Create files under a temporary source root and return the root."""

    def _write(files: dict[str, str]) -> Path:
        root = tmp_path / "src"
        root.mkdir(exist_ok=True)
        for relative, content in files.items():
            path = root / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        return root

    return _write


@pytest.fixture
def make_extractor(tmp_path: Path) -> Callable[..., QueryExtractor]:
    """Build an extractor whose output file lives in the temporary directory."""

    def _make(input_path: Path, **options) -> QueryExtractor:
        options.setdefault("output_path", tmp_path / "extracted_queries.json")
        return QueryExtractor(ExtractorConfig(input_path=input_path, **options))

    return _make
