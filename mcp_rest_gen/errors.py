"""Structured error types for the generator.

Every stage raises one of these with enough context to diagnose the
failure without re-running. The CLI formats them with ``to_message()``.
"""

from __future__ import annotations


class GeneratorError(Exception):
    """Base error with an optional fix suggestion."""

    def __init__(self, message: str, suggestion: str | None = None):
        self.suggestion = suggestion
        super().__init__(message)

    def to_message(self) -> str:
        """Format the error with suggestion."""
        parts = [str(self)]
        if self.suggestion:
            parts.append(f"Suggestion: {self.suggestion}")
        return " | ".join(parts)


# Input errors

class SpecLoadError(GeneratorError):
    """The description could not be read from its file or URL."""


class SpecParseError(GeneratorError):
    """The description is not valid JSON or YAML."""


class SpecValidationError(GeneratorError):
    """The description parsed but is not a structurally valid OpenAPI 3 document."""


# Extraction and synthesis errors

class ExtractionError(GeneratorError):
    """Operations could not be extracted from the description."""


class SynthesisError(GeneratorError):
    """The bridge program could not be synthesized."""


class NoOperationsError(ExtractionError, SynthesisError):
    """No path/method pair carries an operationId."""


class DuplicateOperationError(ExtractionError):
    """The same operationId appears on more than one path/method pair."""

    def __init__(self, operation_id: str, first: str, second: str):
        self.operation_id = operation_id
        self.locations = (first, second)
        super().__init__(
            f"operationId {operation_id!r} is defined by both {first} and {second}",
            suggestion="give each operation a unique operationId",
        )


class SymbolCollisionError(SynthesisError):
    """Two operations map to the same generated Python symbol."""

    def __init__(self, collisions: dict[str, list[str]]):
        self.collisions = collisions
        details = "; ".join(
            f"{symbol} <- {', '.join(ids)}" for symbol, ids in sorted(collisions.items())
        )
        super().__init__(
            f"generated symbol collision: {details}",
            suggestion="rename the operationIds so they differ after snake_case conversion",
        )


class ConfigurationError(SynthesisError):
    """The generation configuration is missing required fields."""


class EmitError(GeneratorError):
    """The generated source could not be written."""
