# src/lab_gallery/settings.py
from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

DEFAULT_CONFIG_PATH = "configs/gallery.yaml"

DEFAULT_CORS_ORIGINS = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
    "http://localhost:8080",
]


@dataclass
class Cfg:
    # storage
    root: Path
    prototypes_dir: Path
    screenshots_dir: Path
    manifest_path: Path
    site_root: Path

    # service
    host: str = "0.0.0.0"
    port: int = 3000
    environment: str = "development"
    cors_origins: list[str] = field(default_factory=lambda: list(DEFAULT_CORS_ORIGINS))

    # manifest header
    manifest_version: str = "1.0.0"
    generator: str = "lab-gallery build"
    description: str = "AI creative lab file manifest - for GitHub Pages"
    platform: str = "GitHub Pages"

    # screenshots
    viewport_width: int = 1920
    viewport_height: int = 1080
    batch_size: int = 5
    batch_pause_sec: float = 1.0
    settle_delay_sec: float = 2.0
    nav_timeout_ms: int = 30000

    @property
    def is_production(self) -> bool:
        return self.environment.strip().lower() == "production"


def _as_rooted_path(root: Path, p: str | Path) -> Path:
    """Resolve a possibly-relative path under root."""
    pp = Path(p)
    return pp if pp.is_absolute() else (root / pp)


def _section(obj: Dict[str, Any], name: str) -> Dict[str, Any]:
    sec = obj.get(name, {}) or {}
    if not isinstance(sec, dict):
        raise ValueError(f"{name} must be a mapping")
    return sec


def _positive_int(v: Any, key: str) -> int:
    try:
        n = int(v)
    except (TypeError, ValueError):
        raise ValueError(f"{key} must be an integer, got {v!r}") from None
    if n <= 0:
        raise ValueError(f"{key} must be > 0, got {n}")
    return n


def _non_negative_float(v: Any, key: str) -> float:
    try:
        x = float(v)
    except (TypeError, ValueError):
        raise ValueError(f"{key} must be a number, got {v!r}") from None
    if x < 0:
        raise ValueError(f"{key} must be >= 0, got {x}")
    return x


def cfg_from_dict(
    obj: Dict[str, Any],
    *,
    base_dir: Path,
    env: Optional[Dict[str, str]] = None,
) -> Cfg:
    """
    Build Cfg from a parsed YAML mapping.

    - storage.root is resolved against base_dir when relative
    - every other path is resolved under storage.root
    - env PORT / GALLERY_ENV override service.port / service.environment
    """
    if not isinstance(obj, dict):
        raise ValueError("config root must be a mapping (YAML dict)")
    env = dict(os.environ) if env is None else env

    storage = _section(obj, "storage")
    paths = _section(obj, "paths")
    service = _section(obj, "service")
    man = _section(obj, "manifest")
    shots = _section(obj, "screenshots")

    root = _as_rooted_path(base_dir, storage.get("root", "."))

    port_raw = env.get("PORT") or service.get("port", 3000)
    environment = env.get("GALLERY_ENV") or service.get("environment", "development")

    cors = service.get("cors_origins", DEFAULT_CORS_ORIGINS)
    if not isinstance(cors, list):
        raise ValueError("service.cors_origins must be a list")

    return Cfg(
        root=root,
        prototypes_dir=_as_rooted_path(root, paths.get("prototypes_dir", "prototypes")),
        screenshots_dir=_as_rooted_path(root, paths.get("screenshots_dir", "screenshots")),
        manifest_path=_as_rooted_path(root, paths.get("manifest_path", "files-manifest.json")),
        site_root=_as_rooted_path(root, paths.get("site_root", ".")),

        host=str(service.get("host", "0.0.0.0")),
        port=_positive_int(port_raw, "service.port"),
        environment=str(environment),
        cors_origins=[str(o) for o in cors],

        manifest_version=str(man.get("version", "1.0.0")),
        generator=str(man.get("generator", "lab-gallery build")),
        description=str(man.get("description", "AI creative lab file manifest - for GitHub Pages")),
        platform=str(man.get("platform", "GitHub Pages")),

        viewport_width=_positive_int(shots.get("viewport_width", 1920), "screenshots.viewport_width"),
        viewport_height=_positive_int(shots.get("viewport_height", 1080), "screenshots.viewport_height"),
        batch_size=_positive_int(shots.get("batch_size", 5), "screenshots.batch_size"),
        batch_pause_sec=_non_negative_float(shots.get("batch_pause_sec", 1.0), "screenshots.batch_pause_sec"),
        settle_delay_sec=_non_negative_float(shots.get("settle_delay_sec", 2.0), "screenshots.settle_delay_sec"),
        nav_timeout_ms=_positive_int(shots.get("nav_timeout_ms", 30000), "screenshots.nav_timeout_ms"),
    )


def load_cfg(path: str | Path | None = None) -> Cfg:
    """
    Load YAML config. A missing file at the default location falls back to
    defaults rooted at the current working directory; an explicitly given
    path must exist.
    """
    if path is None:
        p = Path(DEFAULT_CONFIG_PATH)
        if not p.exists():
            return cfg_from_dict({}, base_dir=Path.cwd())
    else:
        p = Path(path)
        if not p.exists():
            raise FileNotFoundError(f"[CONFIG NOT FOUND] {p}")

    obj = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    # relative storage.root is relative to the config file itself
    return cfg_from_dict(obj, base_dir=p.resolve().parent)
