from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from lab_gallery import catalog
from lab_gallery.manifest.builder import BuildResult, run_build
from lab_gallery.manifest.io import ManifestReadError, load_manifest
from lab_gallery.settings import Cfg


@dataclass(frozen=True)
class FreshnessReport:
    stale: bool
    reason: str


@dataclass(frozen=True)
class RebuildOutcome:
    stale: bool
    reason: str
    rebuilt: bool
    result: Optional[BuildResult] = None
    error: Optional[str] = None


def check_manifest_freshness(cfg: Cfg) -> FreshnessReport:
    """
    Stale when the manifest is missing or unreadable, when any gallery file
    is newer than it, or when its file count differs from the directory.
    """
    mp = cfg.manifest_path
    try:
        manifest_mtime = mp.stat().st_mtime
    except OSError:
        return FreshnessReport(True, "manifest missing")

    try:
        files = catalog.scan_files(cfg.prototypes_dir)
    except OSError as e:
        return FreshnessReport(True, f"cannot scan prototypes: {e}")

    for name in files:
        try:
            if (cfg.prototypes_dir / name).stat().st_mtime > manifest_mtime:
                return FreshnessReport(True, f"{name} is newer than manifest")
        except OSError:
            return FreshnessReport(True, f"cannot stat {name}")

    try:
        manifest = load_manifest(mp)
    except ManifestReadError as e:
        return FreshnessReport(True, str(e))

    if len(manifest["files"]) != len(files):
        return FreshnessReport(
            True, f"file count changed: manifest={len(manifest['files'])} dir={len(files)}"
        )
    return FreshnessReport(False, "up to date")


def ensure_manifest_up_to_date(cfg: Cfg) -> RebuildOutcome:
    """Rebuild in-process when stale. Build errors are returned, not raised."""
    report = check_manifest_freshness(cfg)
    if not report.stale:
        print("[MANIFEST] up to date")
        return RebuildOutcome(stale=False, reason=report.reason, rebuilt=False)

    print(f"[MANIFEST] stale ({report.reason}), rebuilding")
    try:
        res = run_build(cfg)
    except Exception as e:
        print(f"[MANIFEST FAIL] {type(e).__name__}: {e}")
        return RebuildOutcome(
            stale=True, reason=report.reason, rebuilt=False, error=f"{type(e).__name__}: {e}"
        )
    return RebuildOutcome(stale=True, reason=report.reason, rebuilt=True, result=res)
