from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, Optional

from lab_gallery.manifest.io import ManifestReadError, load_manifest, write_manifest
from lab_gallery.manifest.models import utc_now_iso


@dataclass(frozen=True)
class CaptureResult:
    filename: str
    screenshot: Optional[str]
    success: bool


@dataclass(frozen=True)
class PatchOutcome:
    patched: bool
    updated_entries: int = 0
    screenshots: int = 0
    error: Optional[str] = None


def patch_manifest_screenshots(manifest_path: Path, results: Iterable[CaptureResult]) -> PatchOutcome:
    """
    Merge capture results into the existing manifest by file name.

    - covered entry, success -> screenshot = <stem>.png
    - covered entry, failure -> screenshot = None
    - entry with no result   -> unchanged
    Entries are never added or removed. If the manifest cannot be read the
    merge is abandoned and the file is left as it was.
    """
    by_name: Dict[str, Optional[str]] = {}
    for r in results:
        by_name[r.filename] = r.screenshot if r.success else None

    try:
        manifest = load_manifest(manifest_path)
    except ManifestReadError as e:
        print(f"[PATCH FAIL] {e}")
        return PatchOutcome(patched=False, error=str(e))

    meta = manifest.setdefault("metadata", {})
    if not isinstance(meta, dict):
        err = f"manifest 'metadata' is not an object: {manifest_path}"
        print(f"[PATCH FAIL] {err}")
        return PatchOutcome(patched=False, error=err)

    updated = 0
    for entry in manifest["files"]:
        if not isinstance(entry, dict):
            continue
        name = entry.get("name")
        if name in by_name:
            entry["screenshot"] = by_name[name]
            updated += 1

    n_shots = sum(1 for v in by_name.values() if v)
    meta["lastScreenshotUpdate"] = utc_now_iso()
    meta["screenshotsGenerated"] = n_shots

    write_manifest(manifest_path, manifest)
    print(f"[PATCH DONE] manifest={manifest_path} entries={updated} screenshots={n_shots}")
    return PatchOutcome(patched=True, updated_entries=updated, screenshots=n_shots)
