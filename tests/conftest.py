from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Callable, Dict, Optional

import pytest

from lab_gallery.settings import Cfg, cfg_from_dict


def _write_piece(
    proto_dir: Path,
    name: str,
    html: str = "<html><head><title>Piece</title></head><body></body></html>",
    mtime: Optional[float] = None,
) -> Path:
    p = proto_dir / name
    p.write_text(html, encoding="utf-8")
    if mtime is not None:
        os.utime(p, (mtime, mtime))
    return p


def _make_cfg(root: Path, extra: Optional[Dict[str, Any]] = None) -> Cfg:
    obj: Dict[str, Any] = {
        "storage": {"root": str(root)},
        "screenshots": {"batch_pause_sec": 0, "settle_delay_sec": 0},
    }
    for k, v in (extra or {}).items():
        obj.setdefault(k, {}).update(v)
    return cfg_from_dict(obj, base_dir=root, env={})


@pytest.fixture
def write_piece() -> Callable[..., Path]:
    """write_piece(dir, name, html=..., mtime=None) -> Path"""
    return _write_piece


@pytest.fixture
def make_cfg() -> Callable[..., Cfg]:
    """make_cfg(root, extra=None) -> Cfg with no pauses and no env overrides"""
    return _make_cfg


@pytest.fixture
def cfg(tmp_path: Path) -> Cfg:
    c = _make_cfg(tmp_path)
    c.prototypes_dir.mkdir()
    return c
