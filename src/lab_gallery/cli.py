from __future__ import annotations

import argparse
import json
import sys

from lab_gallery.settings import load_cfg


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="gallery", description="Static HTML gallery: manifest, screenshots, server")
    p.add_argument("--config", default=None, help="Path to config YAML (default: configs/gallery.yaml)")
    sub = p.add_subparsers(dest="cmd", required=True)
    sub.add_parser("build", help="Scan prototypes and write the JSON manifest")
    sub.add_parser("shots", help="Capture screenshots and patch them into the manifest")
    sub.add_parser("serve", help="Serve static files and the file API")
    return p


def main() -> None:
    args = build_parser().parse_args()

    try:
        cfg = load_cfg(args.config)
        if args.cmd == "serve":
            from lab_gallery.server import run_server

            run_server(cfg)
            return
        if args.cmd == "build":
            from lab_gallery.manifest.builder import run_build

            res = run_build(cfg)
        else:
            from lab_gallery.screenshots.generator import run_screenshots

            res = run_screenshots(cfg)
    except Exception as e:
        print(f"[ERROR] {type(e).__name__}: {e}", file=sys.stderr)
        sys.exit(2)

    print(json.dumps(res.__dict__, ensure_ascii=False, indent=2))


if __name__ == "__main__":
    main()
