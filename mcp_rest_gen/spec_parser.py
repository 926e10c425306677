"""Parse and validate the OpenAPI description.

Handles:
- JSON / YAML auto-detection
- OpenAPI 3.x version check (Swagger 2.0 and other dialects are rejected)
- Structural validation via openapi-spec-validator
- $ref resolution (recursive references become permissive object schemas)
"""

from __future__ import annotations

import json
import logging
from typing import Any

import prance
import yaml
from prance.util.resolver import permissive_object_on_recursion
from prance.util.url import ResolutionError

from .errors import SpecParseError, SpecValidationError

logger = logging.getLogger(__name__)

VALIDATOR_BACKEND = "openapi-spec-validator"


def detect_format(data: bytes) -> str:
    """Return 'json' when the document starts with '{' or '[', else 'yaml'."""
    head = data.lstrip(b"\xef\xbb\xbf \t\r\n")[:1]
    return "json" if head in (b"{", b"[") else "yaml"


def parse_document(data: bytes) -> dict[str, Any]:
    """Parse raw bytes as JSON or YAML into a mapping."""
    try:
        text = data.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise SpecParseError(f"spec is not valid UTF-8: {exc}") from exc

    fmt = detect_format(data)
    try:
        doc = json.loads(text) if fmt == "json" else yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise SpecParseError(f"error parsing spec as {fmt.upper()}: {exc}") from exc

    if not isinstance(doc, dict):
        raise SpecParseError(
            f"spec must be a {fmt.upper()} object, got {type(doc).__name__}"
        )
    logger.debug("Parsed spec as %s", fmt)
    return doc


def validate_document(doc: dict[str, Any]) -> dict[str, Any]:
    """Validate an OpenAPI 3 document and return it with all $refs resolved."""
    version = str(doc.get("openapi", ""))
    if not version.startswith("3."):
        found = f"swagger {doc['swagger']}" if "swagger" in doc else repr(version or None)
        raise SpecValidationError(
            f"unsupported API description: expected OpenAPI 3.x, found {found}",
            suggestion="convert the document to OpenAPI 3 first",
        )

    spec_string = json.dumps(doc, default=str)
    try:
        parser = prance.ResolvingParser(
            spec_string=spec_string,
            backend=VALIDATOR_BACKEND,
            strict=False,
            recursion_limit_handler=permissive_object_on_recursion,
        )
    except prance.ValidationError as exc:
        raise SpecValidationError(f"invalid OpenAPI spec: {exc}") from exc
    except ResolutionError as exc:
        raise SpecValidationError(f"unresolvable reference in OpenAPI spec: {exc}") from exc

    return parser.specification


def load_document(data: bytes) -> dict[str, Any]:
    """Parse and validate raw description bytes."""
    return validate_document(parse_document(data))


def get_paths(doc: dict[str, Any]) -> dict[str, Any]:
    """Extract paths from the document."""
    return doc.get("paths") or {}


def get_info(doc: dict[str, Any]) -> dict[str, Any]:
    """Extract the info block from the document."""
    return doc.get("info") or {}
