# src/lab_gallery/screenshots/generator.py
from __future__ import annotations

import argparse
import json
import sys
import time
from dataclasses import dataclass
from typing import Any, List, Optional

from playwright.sync_api import sync_playwright

from lab_gallery import catalog
from lab_gallery.manifest.builder import screenshot_name
from lab_gallery.screenshots.batching import batch_count, iter_batches
from lab_gallery.screenshots.patch import CaptureResult, patch_manifest_screenshots
from lab_gallery.settings import Cfg, load_cfg

CHROMIUM_ARGS = ["--no-sandbox", "--disable-setuid-sandbox"]


@dataclass(frozen=True)
class ScreenshotSummary:
    total: int
    succeeded: int
    failed: int
    manifest_patched: bool


class ScreenshotGenerator:
    """
    Renders every gallery file in headless Chromium and writes
    <screenshots_dir>/<stem>.png.

    A browser object can be injected (anything with new_page(**kw)); otherwise
    start() launches Chromium through Playwright.
    """

    def __init__(self, cfg: Cfg, browser: Any = None):
        self.cfg = cfg
        self.browser = browser
        self._pw = None
        self._owns_browser = browser is None

    def start(self) -> None:
        self.cfg.screenshots_dir.mkdir(parents=True, exist_ok=True)
        if self.browser is None:
            self._pw = sync_playwright().start()
            try:
                self.browser = self._pw.chromium.launch(headless=True, args=CHROMIUM_ARGS)
            except Exception:
                self._pw.stop()
                self._pw = None
                raise
            print("[SHOT] chromium started")

    def close(self) -> None:
        if self._owns_browser and self.browser is not None:
            self.browser.close()
            self.browser = None
            print("[SHOT] chromium closed")
        if self._pw is not None:
            self._pw.stop()
            self._pw = None

    def __enter__(self) -> "ScreenshotGenerator":
        self.start()
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    def capture(self, filename: str) -> CaptureResult:
        w, h = self.cfg.viewport_width, self.cfg.viewport_height
        page = None
        try:
            page = self.browser.new_page(viewport={"width": w, "height": h}, device_scale_factor=1)
            url = (self.cfg.prototypes_dir / filename).resolve().as_uri()
            page.goto(url, wait_until="networkidle", timeout=self.cfg.nav_timeout_ms)
            page.wait_for_timeout(self.cfg.settle_delay_sec * 1000)

            name = screenshot_name(filename)
            page.screenshot(
                path=str(self.cfg.screenshots_dir / name),
                type="png",
                clip={"x": 0, "y": 0, "width": w, "height": h},
            )
            print(f"[SHOT] {filename} -> {name}")
            return CaptureResult(filename=filename, screenshot=name, success=True)
        except Exception as e:
            print(f"[SHOT FAIL] {filename} -> {e}")
            return CaptureResult(filename=filename, screenshot=None, success=False)
        finally:
            if page is not None:
                page.close()

    def generate_all(self, files: List[str]) -> List[CaptureResult]:
        results: List[CaptureResult] = []
        size = self.cfg.batch_size
        n_batches = batch_count(len(files), size)

        for i, batch in enumerate(iter_batches(files, size), 1):
            print(f"[SHOT] batch {i}/{n_batches} ({len(batch)} files)")
            for filename in batch:
                results.append(self.capture(filename))
            if i < n_batches and self.cfg.batch_pause_sec > 0:
                time.sleep(self.cfg.batch_pause_sec)
        return results


def run_screenshots(cfg: Cfg, browser: Any = None) -> ScreenshotSummary:
    files = catalog.scan_files(cfg.prototypes_dir)
    print(f"[SHOT] {len(files)} files in {cfg.prototypes_dir}")

    with ScreenshotGenerator(cfg, browser=browser) as gen:
        results = gen.generate_all(files)

    outcome = patch_manifest_screenshots(cfg.manifest_path, results)

    ok = sum(1 for r in results if r.success)
    summary = ScreenshotSummary(
        total=len(results),
        succeeded=ok,
        failed=len(results) - ok,
        manifest_patched=outcome.patched,
    )
    print(f"[SHOT DONE] ok={summary.succeeded} failed={summary.failed}")
    return summary


def main(argv: Optional[List[str]] = None) -> None:
    ap = argparse.ArgumentParser(prog="gallery-shots", description="Capture PNG screenshots of every gallery file")
    ap.add_argument("--config", default=None, help="Path to gallery YAML (default: configs/gallery.yaml)")
    args = ap.parse_args(argv)

    try:
        summary = run_screenshots(load_cfg(args.config))
    except Exception as e:
        print(f"[ERROR] {type(e).__name__}: {e}", file=sys.stderr)
        sys.exit(2)
    print(json.dumps(summary.__dict__, ensure_ascii=False, indent=2))


if __name__ == "__main__":
    main()
