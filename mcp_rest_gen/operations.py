"""Extract the operation table from a validated OpenAPI document.

One Operation per unique operationId across every path and the seven
standard HTTP methods. Method slots without an operationId produce no tool.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import BaseModel, ConfigDict

from .errors import DuplicateOperationError, NoOperationsError
from .naming import parameter_type_name
from .spec_parser import get_paths

logger = logging.getLogger(__name__)

HTTP_METHODS: tuple[str, ...] = ("GET", "POST", "PUT", "DELETE", "PATCH", "HEAD", "OPTIONS")


class Operation(BaseModel):
    """A single API operation, normalized for code generation."""

    model_config = ConfigDict(frozen=True)

    id: str
    summary: str
    description: str
    parameter_type_name: str
    has_request_body: bool
    method: str
    path: str

    @property
    def location(self) -> str:
        return f"{self.method} {self.path}"


def build_operation(path: str, method: str, definition: dict[str, Any] | None) -> Operation | None:
    """Build an Operation from one path/method slot, or None when it has no operationId."""
    if not definition:
        return None
    op_id = definition.get("operationId") or ""
    if not op_id:
        return None

    has_request_body = definition.get("requestBody") is not None

    summary = definition.get("summary") or f"{method} {path}"
    description = definition.get("description") or summary

    return Operation(
        id=op_id,
        summary=summary,
        description=description,
        parameter_type_name=parameter_type_name(op_id, has_request_body),
        has_request_body=has_request_body,
        method=method,
        path=path,
    )


def extract_operations(doc: dict[str, Any], strict: bool = False) -> dict[str, Operation]:
    """Build the operation table keyed by operationId.

    A repeated operationId overwrites the earlier entry with a warning, or
    raises DuplicateOperationError when ``strict`` is set.
    """
    operations: dict[str, Operation] = {}

    for path, path_item in get_paths(doc).items():
        if not isinstance(path_item, dict):
            continue
        for method in HTTP_METHODS:
            op = build_operation(path, method, path_item.get(method.lower()))
            if op is None:
                continue

            previous = operations.get(op.id)
            if previous is not None:
                if strict:
                    raise DuplicateOperationError(op.id, previous.location, op.location)
                logger.warning(
                    "operationId %r on %s overwrites the one on %s",
                    op.id, op.location, previous.location,
                )
            operations[op.id] = op

    if not operations:
        raise NoOperationsError(
            "no valid operations found in the OpenAPI spec",
            suggestion="add an operationId to at least one path operation",
        )

    logger.info("Found %d operations in the OpenAPI spec", len(operations))
    return operations


def sorted_operations(operations: dict[str, Operation]) -> list[Operation]:
    """Return the table's operations ordered by operationId."""
    return [operations[op_id] for op_id in sorted(operations)]
