from __future__ import annotations

import json
import sys
from pathlib import Path

import pytest

from lab_gallery import cli
from lab_gallery.manifest import builder
from lab_gallery.screenshots import generator


@pytest.fixture(autouse=True)
def _no_env_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("PORT", raising=False)
    monkeypatch.delenv("GALLERY_ENV", raising=False)


def _write_config(tmp_path: Path) -> Path:
    p = tmp_path / "gallery.yaml"
    p.write_text(
        f"""
storage:
  root: "{tmp_path.as_posix()}"

paths:
  prototypes_dir: "art"
""".strip(),
        encoding="utf-8",
    )
    return p


def test_build_main_missing_dir_exits_2(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    cfg_path = _write_config(tmp_path)

    with pytest.raises(SystemExit) as ei:
        builder.main(["--config", str(cfg_path)])
    assert ei.value.code == 2

    err = capsys.readouterr().err
    assert "[ERROR] PrototypesDirMissing:" in err
    assert not (tmp_path / "files-manifest.json").exists()


def test_build_main_prints_json_summary(tmp_path: Path, capsys: pytest.CaptureFixture[str], write_piece) -> None:
    cfg_path = _write_config(tmp_path)
    d = tmp_path / "art"
    d.mkdir()
    write_piece(d, "a.html")

    builder.main(["--config", str(cfg_path)])

    out = capsys.readouterr().out
    summary = json.loads(out[out.index("\n{") + 1:])
    assert summary["total_files"] == 1
    assert summary["failed"] == 0
    assert Path(summary["manifest_path"]).is_file()


def test_build_main_missing_config_exits_2(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as ei:
        builder.main(["--config", str(tmp_path / "nope.yaml")])
    assert ei.value.code == 2
    assert "[ERROR] FileNotFoundError:" in capsys.readouterr().err


def test_shots_main_missing_dir_exits_2(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    cfg_path = _write_config(tmp_path)

    with pytest.raises(SystemExit) as ei:
        generator.main(["--config", str(cfg_path)])
    assert ei.value.code == 2
    assert "[ERROR] PrototypesDirMissing:" in capsys.readouterr().err


@pytest.mark.parametrize("cmd", ["build", "shots"])
def test_gallery_cli_missing_dir_exits_2(
    cmd: str, tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    cfg_path = _write_config(tmp_path)
    monkeypatch.setattr(sys, "argv", ["gallery", "--config", str(cfg_path), cmd])

    with pytest.raises(SystemExit) as ei:
        cli.main()
    assert ei.value.code == 2
    assert "[ERROR] PrototypesDirMissing:" in capsys.readouterr().err
