"""Generation configuration.

Built once by the CLI (or a caller) and passed explicitly through the
pipeline. Nothing in the generator keeps module-level mutable state.
"""

from __future__ import annotations

import re
from pathlib import Path
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, field_validator

DEFAULT_OUTPUT = "generated/server.py"
DEFAULT_PACKAGE = "main"
DEFAULT_CLIENT_PACKAGE = "api"
DEFAULT_CLIENT_IMPORT = "generated.api"
DEFAULT_SERVER_URL = "http://localhost:8080/api"
DEFAULT_USERNAME_ENV = "API_USERNAME"
DEFAULT_PASSWORD_ENV = "API_PASSWORD"

_DOTTED_MODULE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)*$")

# Fields the synthesizer cannot work without
_REQUIRED_FIELDS = (
    "spec",
    "output",
    "package",
    "client_package",
    "client_import",
    "server_url",
    "username_env",
    "password_env",
)


def app_name_from_url(url: str) -> str:
    """Return the first non-empty path segment of a URL, or 'app'."""
    try:
        path = urlparse(url).path
    except ValueError:
        return "app"
    for part in path.split("/"):
        if part:
            return part
    return "app"


def default_output_for(server_url: str) -> str:
    """Derive an output path from the server URL: cmd/<app>/server.py."""
    app = app_name_from_url(server_url).lower()
    return str(Path("cmd") / app / "server.py")


class GenerationConfig(BaseModel):
    """Immutable settings for one generator run."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    spec: str
    output: str = DEFAULT_OUTPUT
    package: str = DEFAULT_PACKAGE
    client_package: str = DEFAULT_CLIENT_PACKAGE
    client_import: str = DEFAULT_CLIENT_IMPORT
    server_url: str = DEFAULT_SERVER_URL
    username_env: str = DEFAULT_USERNAME_ENV
    password_env: str = DEFAULT_PASSWORD_ENV

    @field_validator("client_import")
    @classmethod
    def _check_client_import(cls, value: str) -> str:
        if value and not _DOTTED_MODULE.match(value):
            raise ValueError(f"{value!r} is not a dotted Python module path")
        return value

    @field_validator("client_package", "username_env", "password_env")
    @classmethod
    def _check_identifier(cls, value: str) -> str:
        if value and not value.isidentifier():
            raise ValueError(f"{value!r} is not a valid identifier")
        return value

    def missing_fields(self) -> list[str]:
        """Return the names of required fields that are empty."""
        return [name for name in _REQUIRED_FIELDS if not getattr(self, name).strip()]

    def with_derived_output(self) -> GenerationConfig:
        """Return a copy whose empty output path is derived from the server URL."""
        if self.output:
            return self
        return self.model_copy(update={"output": default_output_for(self.server_url)})

    @property
    def output_path(self) -> Path:
        return Path(self.output)
