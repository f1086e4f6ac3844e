# src/lab_gallery/manifest/builder.py
from __future__ import annotations

import argparse
import json
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

from lab_gallery import catalog
from lab_gallery.manifest.io import write_manifest
from lab_gallery.manifest.models import ManifestEntry, round_half_up, utc_now_iso
from lab_gallery.settings import Cfg, load_cfg


@dataclass(frozen=True)
class BuildResult:
    manifest_path: str
    total_files: int
    with_screenshots: int
    failed: int


def screenshot_name(filename: str) -> str:
    stem = filename[: -len(catalog.HTML_SUFFIX)] if filename.endswith(catalog.HTML_SUFFIX) else filename
    return f"{stem}.png"


def build_manifest(cfg: Cfg, entries: List[ManifestEntry], generated: Optional[str] = None) -> Dict[str, Any]:
    """Sort newest first and derive the statistics block from scratch."""
    ordered = catalog.sort_newest_first(entries)
    total_size = sum(e.size for e in ordered)
    average = round_half_up(total_size / len(ordered)) if ordered else 0

    return {
        "metadata": {
            "version": cfg.manifest_version,
            "generated": generated or utc_now_iso(),
            "generator": cfg.generator,
            "description": cfg.description,
            "totalFiles": len(ordered),
        },
        "environment": {
            "isStatic": True,
            "supportsFileManagement": False,
            "platform": cfg.platform,
        },
        "files": [e.to_dict() for e in ordered],
        "statistics": {
            "totalSize": total_size,
            "averageSize": average,
            "newestFile": ordered[0].name if ordered else None,
            "oldestFile": ordered[-1].name if ordered else None,
        },
    }


class ManifestBuilder:
    def __init__(self, cfg: Cfg):
        self.cfg = cfg
        self.failed = 0

    def check_directory(self) -> None:
        catalog.check_directory(self.cfg.prototypes_dir)
        print(f"[SCAN] prototypes_dir={self.cfg.prototypes_dir}")

    def scan_files(self) -> List[str]:
        files = catalog.scan_files(self.cfg.prototypes_dir)
        if not files:
            print("[SCAN] no HTML files found")
        else:
            print(f"[SCAN] found {len(files)} HTML files")
            for i, name in enumerate(files, 1):
                print(f"   {i}. {name}")
        return files

    def attach_screenshot(self, entry: ManifestEntry) -> ManifestEntry:
        name = screenshot_name(entry.name)
        if (self.cfg.screenshots_dir / name).is_file():
            entry.screenshot = name
        return entry

    def extract_metadata_for_all(self, files: List[str]) -> List[ManifestEntry]:
        out: List[ManifestEntry] = []
        for filename in files:
            entry, ok = catalog.read_entry_or_placeholder(self.cfg.prototypes_dir, filename)
            if not ok:
                self.failed += 1

            self.attach_screenshot(entry)
            shot = "with screenshot" if entry.screenshot else "no screenshot"
            print(f"   ok {filename} - {entry.title} ({shot})")
            out.append(entry)
        return out

    def write(self, manifest: Dict[str, Any]) -> Path:
        write_manifest(self.cfg.manifest_path, manifest)
        return self.cfg.manifest_path

    def build(self) -> BuildResult:
        self.failed = 0
        self.check_directory()
        files = self.scan_files()
        entries = self.extract_metadata_for_all(files)
        manifest = build_manifest(self.cfg, entries)
        path = self.write(manifest)

        res = BuildResult(
            manifest_path=str(path),
            total_files=len(entries),
            with_screenshots=sum(1 for e in entries if e.screenshot),
            failed=self.failed,
        )
        print(f"[BUILD DONE] manifest={path} files={res.total_files} failed={res.failed}")
        return res


def run_build(cfg: Cfg) -> BuildResult:
    return ManifestBuilder(cfg).build()


def main(argv: Optional[List[str]] = None) -> None:
    ap = argparse.ArgumentParser(prog="gallery-build", description="Scan prototypes and write files-manifest.json")
    ap.add_argument("--config", default=None, help="Path to gallery YAML (default: configs/gallery.yaml)")
    args = ap.parse_args(argv)

    try:
        res = run_build(load_cfg(args.config))
    except Exception as e:
        print(f"[ERROR] {type(e).__name__}: {e}", file=sys.stderr)
        sys.exit(2)
    print(json.dumps(res.__dict__, ensure_ascii=False, indent=2))


if __name__ == "__main__":
    main()
