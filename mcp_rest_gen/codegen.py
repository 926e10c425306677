"""Render the synthesized program and run the full generation pipeline.

Takes the tree from synthesizer and produces the bridge source file.
"""

from __future__ import annotations

import ast
import logging
from pathlib import Path
from typing import NamedTuple

import jinja2

from .config import GenerationConfig
from .emitter import write_output
from .loader import read_source
from .operations import extract_operations, sorted_operations
from .spec_parser import get_info, load_document
from .synthesizer import build_module, registered_tools

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).parent / "templates"
TEMPLATE_NAME = "bridge.py.j2"


class GenerationResult(NamedTuple):
    path: Path
    tool_count: int
    source: str


def _environment() -> jinja2.Environment:
    return jinja2.Environment(
        loader=jinja2.FileSystemLoader(str(TEMPLATE_DIR)),
        keep_trailing_newline=True,
        trim_blocks=True,
        lstrip_blocks=True,
        undefined=jinja2.StrictUndefined,
    )


def _one_line(value: object) -> str:
    """Collapse all whitespace, newlines included, so a value stays in its comment line."""
    return " ".join(str(value).split())


def render(
    tree: ast.Module,
    config: GenerationConfig,
    api_title: str = "API",
    api_version: str = "unknown",
) -> str:
    """Serialize a bridge module tree to source text."""
    template = _environment().get_template(TEMPLATE_NAME)
    return template.render(
        body=ast.unparse(tree),
        api_title=_one_line(api_title),
        api_version=_one_line(api_version),
        tool_count=len(registered_tools(tree)),
        spec=_one_line(config.spec),
        output=_one_line(config.output),
    )


def build_source(config: GenerationConfig, strict: bool = False) -> tuple[str, int]:
    """Load, extract and synthesize; return (source, tool count) without writing."""
    doc = load_document(read_source(config.spec))
    operations = sorted_operations(extract_operations(doc, strict=strict))
    tree = build_module(operations, config)

    info = get_info(doc)
    source = render(
        tree,
        config,
        api_title=str(info.get("title") or "API"),
        api_version=str(info.get("version") or "unknown"),
    )
    return source, len(operations)


def generate(config: GenerationConfig, strict: bool = False) -> GenerationResult:
    """Generate the bridge program and write it to config.output."""
    config = config.with_derived_output()
    source, tool_count = build_source(config, strict=strict)
    path = write_output(source, config.output_path)

    logger.info("Generated %s (%d tools)", path, tool_count)
    return GenerationResult(path=path, tool_count=tool_count, source=source)
