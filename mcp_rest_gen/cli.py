"""CLI entry point for mcp-rest-gen."""

from __future__ import annotations

import logging
import sys

import click
from pydantic import ValidationError

from mcp_rest_gen import config as defaults
from mcp_rest_gen.codegen import build_source, generate
from mcp_rest_gen.config import GenerationConfig
from mcp_rest_gen.errors import GeneratorError

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _configure_logging(verbose: int) -> None:
    level = logging.WARNING
    if verbose == 1:
        level = logging.INFO
    elif verbose > 1:
        level = logging.DEBUG
    logging.basicConfig(format=LOG_FORMAT, level=level, stream=sys.stderr)


def _check(config: GenerationConfig, strict: bool) -> None:
    """Exit non-zero when the file on disk differs from a fresh render."""
    source, _ = build_source(config, strict=strict)
    path = config.output_path
    try:
        current = path.read_text(encoding="utf-8") if path.exists() else None
    except (OSError, UnicodeDecodeError) as exc:
        click.echo(f"Error: cannot read {path}: {exc}", err=True)
        sys.exit(1)
    if current != source:
        click.echo(f"{path} is out of date", err=True)
        sys.exit(1)
    click.echo(f"{path} is up to date")


@click.command(name="mcp-rest-gen")
@click.option("--spec", required=True, help="Path or URL to the OpenAPI specification.")
@click.option(
    "--output",
    default=defaults.DEFAULT_OUTPUT,
    show_default=True,
    help="Output file for the generated code. Empty derives cmd/<app>/server.py from --server-url.",
)
@click.option("--package", default=defaults.DEFAULT_PACKAGE, show_default=True, help="Name of the generated MCP server.")
@click.option("--client-package", default=defaults.DEFAULT_CLIENT_PACKAGE, show_default=True, help="Name the client module is imported as.")
@click.option("--client-import", default=defaults.DEFAULT_CLIENT_IMPORT, show_default=True, help="Import path of the client module.")
@click.option("--server-url", default=defaults.DEFAULT_SERVER_URL, show_default=True, help="URL of the API server.")
@click.option("--username-env", default=defaults.DEFAULT_USERNAME_ENV, show_default=True, help="Environment variable name for username.")
@click.option("--password-env", default=defaults.DEFAULT_PASSWORD_ENV, show_default=True, help="Environment variable name for password.")
@click.option("--strict-duplicates", is_flag=True, help="Fail when an operationId is defined more than once.")
@click.option("--check", is_flag=True, help="Only verify the output file is up to date.")
@click.option("-v", "--verbose", count=True, help="Increase log verbosity (-v info, -vv debug).")
def main(
    spec: str,
    output: str,
    package: str,
    client_package: str,
    client_import: str,
    server_url: str,
    username_env: str,
    password_env: str,
    strict_duplicates: bool,
    check: bool,
    verbose: int,
):
    """Generate an MCP server from an OpenAPI spec."""
    _configure_logging(verbose)

    try:
        config = GenerationConfig(
            spec=spec,
            output=output,
            package=package,
            client_package=client_package,
            client_import=client_import,
            server_url=server_url,
            username_env=username_env,
            password_env=password_env,
        )
    except ValidationError as exc:
        raise click.BadParameter(str(exc)) from exc

    if not config.output:
        config = config.with_derived_output()
        click.echo(f"Output file not specified, using: {config.output}")

    try:
        if check:
            _check(config, strict_duplicates)
            return
        result = generate(config, strict=strict_duplicates)
    except GeneratorError as exc:
        click.echo(f"Error: {exc.to_message()}", err=True)
        sys.exit(1)

    click.echo(f"MCP server generated successfully: {result.path} ({result.tool_count} tools)")
