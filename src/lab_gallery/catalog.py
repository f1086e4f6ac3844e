# src/lab_gallery/catalog.py
from __future__ import annotations

from pathlib import Path
from typing import Iterable, List, Tuple

from lab_gallery.extract.metadata import GENERIC_DESCRIPTION, extract_metadata, title_from_filename
from lab_gallery.manifest.models import ManifestEntry, iso_utc, parse_iso, size_kb

INDEX_FILE = "index.html"
HTML_SUFFIX = ".html"


class PrototypesDirMissing(FileNotFoundError):
    pass


class InvalidFilename(ValueError):
    pass


class ProtectedFile(PermissionError):
    pass


def check_directory(path: Path) -> Path:
    if not path.is_dir():
        raise PrototypesDirMissing(f"prototypes directory does not exist: {path}")
    return path


def is_gallery_file(name: str) -> bool:
    return name.endswith(HTML_SUFFIX) and name != INDEX_FILE


def scan_files(path: Path) -> List[str]:
    """*.html in path (not recursive), index.html excluded, sorted by name."""
    check_directory(path)
    return sorted(p.name for p in path.iterdir() if p.is_file() and is_gallery_file(p.name))


def read_entry(path: Path, filename: str) -> ManifestEntry:
    """stat + read + extract. Raises OSError if the file cannot be read."""
    fp = path / filename
    st = fp.stat()
    html = fp.read_bytes().decode("utf-8", errors="replace")
    meta = extract_metadata(html, filename)
    return ManifestEntry(
        name=filename,
        title=meta.title,
        description=meta.description,
        last_modified=iso_utc(st.st_mtime),
        size=size_kb(st.st_size),
    )


def placeholder_entry(filename: str) -> ManifestEntry:
    return ManifestEntry(
        name=filename,
        title=title_from_filename(filename),
        description=GENERIC_DESCRIPTION,
        last_modified=None,
        size=0,
    )


def read_entry_or_placeholder(path: Path, filename: str) -> Tuple[ManifestEntry, bool]:
    """Returns (entry, ok); ok is False when the placeholder was substituted."""
    try:
        return read_entry(path, filename), True
    except OSError as e:
        print(f"[EXTRACT FAIL] {filename} -> {e}")
        return placeholder_entry(filename), False


def sort_newest_first(entries: Iterable[ManifestEntry]) -> List[ManifestEntry]:
    """Descending by last_modified; entries without a timestamp go last. Stable."""
    entries = list(entries)
    dated = [e for e in entries if e.last_modified]
    undated = [e for e in entries if not e.last_modified]
    dated.sort(key=lambda e: parse_iso(e.last_modified), reverse=True)
    return dated + undated


def validate_filename(name: str, *, protect_index: bool = True) -> str:
    """
    Reject anything that could address a file outside the prototypes
    directory and non-HTML names. The index page is refused unless
    protect_index is False.
    """
    if not name or ".." in name or "/" in name or "\\" in name:
        raise InvalidFilename("invalid file name")
    if not name.endswith(HTML_SUFFIX):
        raise InvalidFilename("only HTML files are supported")
    if protect_index and name == INDEX_FILE:
        raise ProtectedFile(f"{INDEX_FILE} cannot be deleted")
    return name
