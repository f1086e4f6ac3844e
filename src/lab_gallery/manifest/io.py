from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Any, Dict

import orjson


class ManifestReadError(ValueError):
    """Manifest file is missing, unreadable or not a manifest object."""


def load_manifest(path: Path) -> Dict[str, Any]:
    try:
        raw = path.read_bytes()
    except OSError as e:
        raise ManifestReadError(f"cannot read manifest {path}: {e}") from e
    try:
        obj = orjson.loads(raw)
    except orjson.JSONDecodeError as e:
        raise ManifestReadError(f"manifest is not valid JSON {path}: {e}") from e
    if not isinstance(obj, dict) or not isinstance(obj.get("files"), list):
        raise ManifestReadError(f"manifest has no 'files' list: {path}")
    return obj


def dumps_manifest(manifest: Dict[str, Any]) -> bytes:
    return orjson.dumps(manifest, option=orjson.OPT_INDENT_2)


def write_manifest(path: Path, manifest: Dict[str, Any]) -> None:
    """
    Write to a temp file next to the target, then os.replace() it over the
    manifest. Readers see the old file or the new one, never a partial one.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(dumps_manifest(manifest))
        # mkstemp creates 0600; the manifest is served as a static file
        os.chmod(tmp, 0o644)
        os.replace(tmp, path)
    except BaseException:
        try:
            os.unlink(tmp)
        except OSError:
            pass
        raise
