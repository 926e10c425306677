"""Shared fixtures for generator tests.

The "books" API is the reference scenario: one path with a GET taking a
query parameter and a POST taking a JSON body, neither with a summary.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable

import pytest

from mcp_rest_gen.config import GenerationConfig
from mcp_rest_gen.naming import parameter_type_name
from mcp_rest_gen.operations import Operation

FIXTURES = Path(__file__).parent / "fixtures"


@pytest.fixture
def books_json() -> bytes:
    return (FIXTURES / "books.json").read_bytes()


@pytest.fixture
def books_yaml() -> bytes:
    return (FIXTURES / "books.yaml").read_bytes()


@pytest.fixture
def books_spec(books_json: bytes) -> dict[str, Any]:
    """A fresh parsed copy of the books document, safe to mutate."""
    return json.loads(books_json)


@pytest.fixture
def spec_file(tmp_path: Path, books_json: bytes) -> Path:
    """The books document copied into tmp_path."""
    path = tmp_path / "openapi.json"
    path.write_bytes(books_json)
    return path


@pytest.fixture
def make_config(tmp_path: Path) -> Callable[..., GenerationConfig]:
    """Build a GenerationConfig reading and writing under tmp_path unless overridden."""
    def _make(**overrides: Any) -> GenerationConfig:
        values: dict[str, Any] = {
            "spec": str(tmp_path / "openapi.json"),
            "output": str(tmp_path / "out" / "server.py"),
        }
        values.update(overrides)
        return GenerationConfig(**values)
    return _make


@pytest.fixture
def make_op() -> Callable[..., Operation]:
    """Build an Operation directly, bypassing extraction."""
    def _make(
        op_id: str,
        has_request_body: bool = False,
        method: str = "GET",
        path: str = "/things",
        description: str | None = None,
    ) -> Operation:
        summary = f"{method} {path}"
        return Operation(
            id=op_id,
            summary=summary,
            description=description or summary,
            parameter_type_name=parameter_type_name(op_id, has_request_body),
            has_request_body=has_request_body,
            method=method,
            path=path,
        )
    return _make
