"""Build the bridge program as a Python AST.

The program is assembled as ``ast`` nodes and only turned into text by
codegen.render(), so tests can assert on the tree. Shape of the output:

    imports
    logger = logging.getLogger(__name__)

    @click.command()
    @click.option('--host', ...) / '--username' / '--password'
    def main(host, username, password):
        configure logging, build rest_client, build server
        one nested handler + server.add_tool(...) per operation
        log startup, server.run(transport='stdio')

    if __name__ == '__main__':
        main()
"""

from __future__ import annotations

import ast
import logging
from typing import Iterable

from .config import GenerationConfig
from .errors import ConfigurationError, NoOperationsError, SymbolCollisionError
from .naming import ToolSymbols, find_collisions, resolve_symbols
from .operations import Operation

logger = logging.getLogger(__name__)

CLIENT_FACTORY = "ClientWithResponses"
SERVER_VAR = "server"
CLIENT_VAR = "rest_client"
ARGUMENT_VAR = "arguments"
RESPONSE_VAR = "resp"
ERROR_VAR = "exc"


# ---------------------------------------------------------------------------
# Node helpers
# ---------------------------------------------------------------------------

def _name(name: str, store: bool = False) -> ast.Name:
    return ast.Name(id=name, ctx=ast.Store() if store else ast.Load())


def _attr(dotted: str) -> ast.expr:
    """Build a (possibly nested) attribute access from 'a.b.c'."""
    head, *rest = dotted.split(".")
    node: ast.expr = _name(head)
    for part in rest:
        node = ast.Attribute(value=node, attr=part, ctx=ast.Load())
    return node


def _call(func: str | ast.expr, *args: ast.expr, **keywords: ast.expr) -> ast.Call:
    if isinstance(func, str):
        func = _attr(func)
    return ast.Call(
        func=func,
        args=list(args),
        keywords=[ast.keyword(arg=key, value=value) for key, value in keywords.items()],
    )


def _const(value) -> ast.Constant:
    return ast.Constant(value=value)


def _expr(value: ast.expr) -> ast.Expr:
    return ast.Expr(value=value)


def _assign(target: str, value: ast.expr) -> ast.Assign:
    return ast.Assign(targets=[_name(target, store=True)], value=value, type_comment=None)


def _fstring(*parts: str | ast.expr) -> ast.JoinedStr:
    values: list[ast.expr] = []
    for part in parts:
        if isinstance(part, str):
            values.append(_const(part))
        else:
            values.append(ast.FormattedValue(value=part, conversion=-1, format_spec=None))
    return ast.JoinedStr(values=values)


def _arguments(*params: tuple[str, ast.expr | None]) -> ast.arguments:
    return ast.arguments(
        posonlyargs=[],
        args=[ast.arg(arg=name, annotation=annotation, type_comment=None) for name, annotation in params],
        vararg=None,
        kwonlyargs=[],
        kw_defaults=[],
        kwarg=None,
        defaults=[],
    )


def _function(
    name: str,
    params: Iterable[tuple[str, ast.expr | None]],
    body: list[ast.stmt],
    returns: ast.expr | None = None,
    decorators: Iterable[ast.expr] = (),
) -> ast.FunctionDef:
    node = ast.FunctionDef(
        name=name,
        args=_arguments(*params),
        body=body,
        decorator_list=list(decorators),
        returns=returns,
        type_comment=None,
    )
    node.type_params = []
    return node


def _fatal(message: str) -> list[ast.stmt]:
    """logger.critical('<message>: %s', exc); sys.exit(1)"""
    return [
        _expr(_call("logger.critical", _const(f"{message}: %s"), _name(ERROR_VAR))),
        _expr(_call("sys.exit", _const(1))),
    ]


def _try(body: list[ast.stmt], exc_type: str, handler: list[ast.stmt]) -> ast.Try:
    return ast.Try(
        body=body,
        handlers=[ast.ExceptHandler(type=_attr(exc_type), name=ERROR_VAR, body=handler)],
        orelse=[],
        finalbody=[],
    )


# ---------------------------------------------------------------------------
# Program sections
# ---------------------------------------------------------------------------

def _client_import(config: GenerationConfig) -> ast.stmt:
    """Import the typed client module under its configured alias."""
    module = config.client_import
    alias = config.client_package
    parent, _, last = module.rpartition(".")
    if parent and last == alias:
        return ast.ImportFrom(module=parent, names=[ast.alias(name=last, asname=None)], level=0)
    asname = None if module == alias else alias
    return ast.Import(names=[ast.alias(name=module, asname=asname)])


def build_imports(config: GenerationConfig) -> list[ast.stmt]:
    return [
        ast.Import(names=[ast.alias(name="logging", asname=None)]),
        ast.Import(names=[ast.alias(name="sys", asname=None)]),
        ast.Import(names=[ast.alias(name="click", asname=None)]),
        ast.Import(names=[ast.alias(name="httpx", asname=None)]),
        ast.ImportFrom(module="mcp.server.fastmcp", names=[ast.alias(name="FastMCP", asname=None)], level=0),
        ast.ImportFrom(
            module="mcp.server.fastmcp.exceptions",
            names=[ast.alias(name="ToolError", asname=None)],
            level=0,
        ),
        _client_import(config),
    ]


def build_cli_decorators(config: GenerationConfig) -> list[ast.expr]:
    """click decorators: host with a default, credentials from env vars."""
    return [
        _call("click.command"),
        _call(
            "click.option",
            _const("--host"),
            default=_const(config.server_url),
            show_default=_const(True),
            help=_const("API server host"),
        ),
        _call(
            "click.option",
            _const("--username"),
            envvar=_const(config.username_env),
            default=_const(""),
            help=_const("API username"),
        ),
        _call(
            "click.option",
            _const("--password"),
            envvar=_const(config.password_env),
            default=_const(""),
            help=_const("API password"),
        ),
    ]


def build_client_setup(config: GenerationConfig) -> list[ast.stmt]:
    """Authenticated REST client; any failure is fatal before serving."""
    factory = f"{config.client_package}.{CLIENT_FACTORY}"
    auth = _call("httpx.BasicAuth", _name("username"), _name("password"))
    return [
        _try(
            [_assign(CLIENT_VAR, _call(factory, _name("host"), auth=auth))],
            "Exception",
            _fatal("error creating REST client"),
        ),
        _assign(SERVER_VAR, _call("FastMCP", _const(config.package))),
    ]


def build_rest_call(symbols: ToolSymbols) -> ast.Call:
    """Body mode passes the argument positionally, parameter mode as params=."""
    method = f"{CLIENT_VAR}.{symbols.client_method}"
    if symbols.pass_by_value:
        return _call(method, _name(ARGUMENT_VAR))
    return _call(method, params=_name(ARGUMENT_VAR))


def build_handler(operation: Operation, config: GenerationConfig) -> ast.FunctionDef:
    """Handler that forwards one tool call to the REST API."""
    symbols = resolve_symbols(operation)
    resp = _name(RESPONSE_VAR)

    call_rest = ast.Try(
        body=[_assign(RESPONSE_VAR, build_rest_call(symbols))],
        handlers=[
            ast.ExceptHandler(
                type=_attr("httpx.HTTPError"),
                name=ERROR_VAR,
                body=[
                    ast.Raise(
                        exc=_call("ToolError", _fstring(f"error calling {operation.id}: ", _name(ERROR_VAR))),
                        cause=_name(ERROR_VAR),
                    ),
                ],
            ),
        ],
        orelse=[],
        finalbody=[],
    )

    check_status = ast.If(
        test=ast.UnaryOp(op=ast.Not(), operand=ast.Attribute(value=resp, attr="is_success", ctx=ast.Load())),
        body=[
            ast.Raise(
                exc=_call(
                    "ToolError",
                    _fstring(
                        f"error on {operation.id}: ",
                        _attr(f"{RESPONSE_VAR}.status_code"),
                        " ",
                        _attr(f"{RESPONSE_VAR}.reason_phrase"),
                    ),
                ),
                cause=None,
            ),
        ],
        orelse=[],
    )

    return _function(
        symbols.handler_name,
        [(ARGUMENT_VAR, _attr(f"{config.client_package}.{symbols.argument_type}"))],
        [call_rest, check_status, ast.Return(value=_attr(f"{RESPONSE_VAR}.text"))],
        returns=_name("str"),
    )


def build_registration(operation: Operation) -> ast.Expr:
    """server.add_tool(handler, name=<id>, description=<text>)"""
    symbols = resolve_symbols(operation)
    return _expr(
        _call(
            f"{SERVER_VAR}.add_tool",
            _name(symbols.handler_name),
            name=_const(symbols.tool_name),
            description=_const(operation.description),
        )
    )


def build_serve() -> list[ast.stmt]:
    return [
        _expr(_call("logger.info", _const("Server started"))),
        _try(
            [_expr(_call(f"{SERVER_VAR}.run", transport=_const("stdio")))],
            "Exception",
            _fatal("server error"),
        ),
    ]


def build_main(operations: list[Operation], config: GenerationConfig) -> ast.FunctionDef:
    body: list[ast.stmt] = [
        _expr(_const(f"Serve the {config.package} REST operations as MCP tools over stdio.")),
        _expr(_call("logging.basicConfig", level=_attr("logging.INFO"), stream=_attr("sys.stderr"))),
    ]
    body.extend(build_client_setup(config))
    for operation in operations:
        body.append(build_handler(operation, config))
        body.append(build_registration(operation))
    body.extend(build_serve())

    return _function(
        "main",
        [("host", _name("str")), ("username", _name("str")), ("password", _name("str"))],
        body,
        returns=_const(None),
        decorators=build_cli_decorators(config),
    )


def build_entry_point() -> ast.If:
    return ast.If(
        test=ast.Compare(left=_name("__name__"), ops=[ast.Eq()], comparators=[_const("__main__")]),
        body=[_expr(_call("main"))],
        orelse=[],
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def check_inputs(operations: list[Operation], config: GenerationConfig) -> None:
    """Raise before building anything if the output would be invalid."""
    if not operations:
        raise NoOperationsError("cannot generate a bridge without operations")

    missing = config.missing_fields()
    if missing:
        raise ConfigurationError(
            f"generation config is missing required fields: {', '.join(missing)}"
        )

    collisions = find_collisions(operations)
    if collisions:
        raise SymbolCollisionError(collisions)


def build_module(operations: Iterable[Operation], config: GenerationConfig) -> ast.Module:
    """Build the complete bridge program for the given operations."""
    ordered = sorted(operations, key=lambda op: op.id)
    check_inputs(ordered, config)

    body: list[ast.stmt] = [
        _expr(_const(f"MCP bridge exposing the {config.package} REST API as tools.")),
    ]
    body.extend(build_imports(config))
    body.append(_assign("logger", _call("logging.getLogger", _name("__name__"))))
    body.append(build_main(ordered, config))
    body.append(build_entry_point())

    module = ast.Module(body=body, type_ignores=[])
    ast.fix_missing_locations(module)
    logger.debug("Built bridge module with %d tools", len(ordered))
    return module


def registered_tools(tree: ast.AST) -> list[str]:
    """Return the tool names of every server.add_tool(...) call in a tree."""
    names = []
    for node in ast.walk(tree):
        if (
            isinstance(node, ast.Call)
            and isinstance(node.func, ast.Attribute)
            and node.func.attr == "add_tool"
        ):
            for kw in node.keywords:
                if kw.arg == "name" and isinstance(kw.value, ast.Constant):
                    names.append(kw.value.value)
    return names
