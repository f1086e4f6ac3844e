from __future__ import annotations

from pathlib import Path

import orjson
import pytest

from lab_gallery import catalog
from lab_gallery.manifest import builder as builder_mod
from lab_gallery.manifest.builder import ManifestBuilder, build_manifest, run_build
from lab_gallery.manifest.models import ManifestEntry
from lab_gallery.settings import Cfg


def _read(path: Path) -> dict:
    return orjson.loads(path.read_bytes())


def test_build_writes_sorted_manifest_with_statistics(cfg: Cfg, write_piece) -> None:
    d = cfg.prototypes_dir
    write_piece(d, "old.html", "<title>Old</title>" + "a" * 2000, mtime=1_600_000_000)
    write_piece(d, "new.html", "<title>New</title>" + "b" * 5000, mtime=1_700_000_000)
    write_piece(d, "mid.html", "<title>Mid</title>" + "c" * 600, mtime=1_650_000_000)
    write_piece(d, "index.html", "<title>Index</title>")

    res = run_build(cfg)
    assert res.total_files == 3
    assert res.failed == 0

    m = _read(cfg.manifest_path)
    names = [f["name"] for f in m["files"]]
    assert names == ["new.html", "mid.html", "old.html"]
    assert "index.html" not in names

    sizes = [f["size"] for f in m["files"]]
    assert sizes == [5, 1, 2]
    st = m["statistics"]
    assert st["totalSize"] == sum(sizes) == 8
    assert st["averageSize"] == 3  # 8 / 3 = 2.67
    assert st["newestFile"] == "new.html"
    assert st["oldestFile"] == "old.html"

    meta = m["metadata"]
    assert meta["totalFiles"] == 3
    assert meta["version"] == "1.0.0"
    assert meta["generated"].endswith("Z")
    assert m["environment"] == {
        "isStatic": True,
        "supportsFileManagement": False,
        "platform": "GitHub Pages",
    }
    assert set(m["files"][0]) == {"name", "title", "description", "lastModified", "size", "screenshot"}


def test_empty_directory_gives_empty_statistics(cfg: Cfg) -> None:
    run_build(cfg)
    m = _read(cfg.manifest_path)
    assert m["files"] == []
    assert m["statistics"] == {"totalSize": 0, "averageSize": 0, "newestFile": None, "oldestFile": None}


def test_average_rounds_half_up(cfg: Cfg) -> None:
    entries = [
        ManifestEntry("a.html", "A", "d", "2024-01-02T00:00:00.000Z", 1),
        ManifestEntry("b.html", "B", "d", "2024-01-01T00:00:00.000Z", 2),
    ]
    m = build_manifest(cfg, entries, generated="2024-01-03T00:00:00.000Z")
    assert m["statistics"]["averageSize"] == 2
    assert m["metadata"]["generated"] == "2024-01-03T00:00:00.000Z"


def test_screenshot_attached_only_when_png_exists(cfg: Cfg, write_piece) -> None:
    write_piece(cfg.prototypes_dir, "with_shot.html", mtime=1_700_000_000)
    write_piece(cfg.prototypes_dir, "no_shot.html", mtime=1_600_000_000)
    cfg.screenshots_dir.mkdir()
    (cfg.screenshots_dir / "with_shot.png").write_bytes(b"\x89PNG")

    res = run_build(cfg)
    assert res.with_screenshots == 1

    files = {f["name"]: f for f in _read(cfg.manifest_path)["files"]}
    assert files["with_shot.html"]["screenshot"] == "with_shot.png"
    assert files["no_shot.html"]["screenshot"] is None


def test_unreadable_file_becomes_placeholder(
    cfg: Cfg, monkeypatch: pytest.MonkeyPatch, write_piece
) -> None:
    write_piece(cfg.prototypes_dir, "good.html", "<title>Good</title>", mtime=1_700_000_000)
    write_piece(cfg.prototypes_dir, "broken_piece.html")
    cfg.screenshots_dir.mkdir()
    (cfg.screenshots_dir / "broken_piece.png").write_bytes(b"\x89PNG")

    real_read = catalog.read_entry

    def flaky_read(path: Path, filename: str) -> ManifestEntry:
        if filename == "broken_piece.html":
            raise PermissionError("denied")
        return real_read(path, filename)

    monkeypatch.setattr(builder_mod.catalog, "read_entry", flaky_read)

    res = run_build(cfg)
    assert res.total_files == 2
    assert res.failed == 1

    files = _read(cfg.manifest_path)["files"]
    assert [f["name"] for f in files] == ["good.html", "broken_piece.html"]
    broken = files[1]
    assert broken == {
        "name": "broken_piece.html",
        "title": "Broken Piece",
        "description": "standalone HTML artwork",
        "lastModified": None,
        "size": 0,
        "screenshot": "broken_piece.png",
    }


def test_missing_prototypes_dir_is_fatal(tmp_path: Path, make_cfg) -> None:
    cfg = make_cfg(tmp_path)
    with pytest.raises(catalog.PrototypesDirMissing):
        ManifestBuilder(cfg).build()
    assert not cfg.manifest_path.exists()


def test_rebuild_overwrites_previous_manifest(cfg: Cfg, write_piece) -> None:
    write_piece(cfg.prototypes_dir, "a.html")
    write_piece(cfg.prototypes_dir, "b.html")
    run_build(cfg)
    assert len(_read(cfg.manifest_path)["files"]) == 2

    (cfg.prototypes_dir / "b.html").unlink()
    run_build(cfg)
    assert [f["name"] for f in _read(cfg.manifest_path)["files"]] == ["a.html"]
    # no temp files left behind
    assert [p.name for p in cfg.manifest_path.parent.glob(".files-manifest.json.*")] == []


def test_non_ascii_is_kept(cfg: Cfg, write_piece) -> None:
    write_piece(cfg.prototypes_dir, "lantern.html", "<title>燈籠 Lantern</title>")
    run_build(cfg)
    raw = cfg.manifest_path.read_bytes()
    assert "燈籠 Lantern".encode("utf-8") in raw
