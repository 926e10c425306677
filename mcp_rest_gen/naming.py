"""Map operationIds to the symbols the generated bridge references.

Pattern, for operationId ``ListBooks`` without a request body:
  - tool name       -> ListBooks               (operationId verbatim)
  - handler         -> handle_list_books
  - client method   -> list_books_with_response
  - argument type   -> ListBooksParams         (passed as params=...)

and for ``AddBook`` with a request body:
  - argument type   -> AddBookJSONRequestBody  (passed positionally)

Ids that are not Python identifiers (``get-books``, ``2fa.verify``) are
sanitized first; two ids that end up on the same symbol are a collision.
"""

from __future__ import annotations

import re
from collections import defaultdict
from typing import TYPE_CHECKING, Iterable, NamedTuple

if TYPE_CHECKING:
    from .operations import Operation

PARAMS_SUFFIX = "Params"
BODY_SUFFIX = "JSONRequestBody"


class ToolSymbols(NamedTuple):
    """Names the synthesizer emits for one operation."""

    tool_name: str
    handler_name: str
    client_method: str
    argument_type: str
    pass_by_value: bool


def camel_to_snake(name: str) -> str:
    """Convert camelCase or PascalCase to snake_case."""
    s1 = re.sub(r"([A-Z]+)([A-Z][a-z])", r"\1_\2", name)
    return re.sub(r"([a-z\d])([A-Z])", r"\1_\2", s1).lower()


def to_snake_symbol(op_id: str) -> str:
    """Sanitize an operationId into a snake_case Python identifier."""
    name = camel_to_snake(op_id)
    name = re.sub(r"[^a-z0-9_]", "_", name)
    name = re.sub(r"_+", "_", name).strip("_")
    if not name:
        return "op"
    if name[0].isdigit():
        name = f"op_{name}"
    return name


def to_type_symbol(op_id: str) -> str:
    """Return the operationId as a PascalCase type prefix.

    Valid identifiers are kept verbatim so ``ListBooks`` stays ``ListBooks``.
    """
    if op_id.isidentifier():
        return op_id
    parts = [p for p in re.split(r"[^A-Za-z0-9]+", op_id) if p]
    name = "".join(p[0].upper() + p[1:] for p in parts) or "Op"
    if name[0].isdigit():
        name = f"Op{name}"
    return name


def parameter_type_name(op_id: str, has_request_body: bool) -> str:
    """Return <id>JSONRequestBody in body mode, <id>Params otherwise."""
    suffix = BODY_SUFFIX if has_request_body else PARAMS_SUFFIX
    return f"{to_type_symbol(op_id)}{suffix}"


def resolve_symbols(operation: Operation) -> ToolSymbols:
    """Compute the generated names for an operation."""
    snake = to_snake_symbol(operation.id)
    return ToolSymbols(
        tool_name=operation.id,
        handler_name=f"handle_{snake}",
        client_method=f"{snake}_with_response",
        argument_type=operation.parameter_type_name,
        pass_by_value=operation.has_request_body,
    )


def find_collisions(operations: Iterable[Operation]) -> dict[str, list[str]]:
    """Return {symbol: [operation ids]} for symbols claimed more than once."""
    claims: dict[str, list[str]] = defaultdict(list)
    for op in operations:
        symbols = resolve_symbols(op)
        for symbol in {symbols.handler_name, symbols.client_method, symbols.argument_type}:
            claims[symbol].append(op.id)
    return {
        symbol: sorted(ids)
        for symbol, ids in claims.items()
        if len(ids) > 1
    }
