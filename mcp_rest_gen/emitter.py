"""Write generated source to disk, all or nothing."""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

from .errors import EmitError

logger = logging.getLogger(__name__)


def write_output(text: str, path: Path | str) -> Path:
    """Write text to path via a temp file and rename.

    Missing parent directories are created. On failure the temp file is
    removed and any previous content at path is left untouched.
    """
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise EmitError(f"error creating output directory {path.parent}: {exc}") from exc

    tmp_name = None
    try:
        with tempfile.NamedTemporaryFile(
            "w",
            encoding="utf-8",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
        ) as tmp:
            tmp_name = tmp.name
            tmp.write(text)
            tmp.flush()
            os.fsync(tmp.fileno())
        # NamedTemporaryFile creates 0600
        os.chmod(tmp_name, 0o644)
        os.replace(tmp_name, path)
    except OSError as exc:
        if tmp_name is not None and os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise EmitError(f"error writing {path}: {exc}") from exc

    logger.debug("Wrote %d bytes to %s", len(text), path)
    return path
