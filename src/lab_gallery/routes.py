# src/lab_gallery/routes.py
from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Request
from pydantic import BaseModel

from lab_gallery import catalog
from lab_gallery.manifest.models import utc_now_iso
from lab_gallery.settings import Cfg

router = APIRouter(prefix="/api")


class ApiError(Exception):
    """Turned into {"error": message, ...extra} with the given status by the app."""

    def __init__(self, status_code: int, message: str, **extra: Any) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.extra = extra

    def body(self) -> Dict[str, Any]:
        return {"error": self.message, **self.extra}


class FileSummary(BaseModel):
    name: str
    title: str
    description: str
    lastModified: Optional[str]
    size: int


class FileMetadata(BaseModel):
    title: str
    description: str
    lastModified: Optional[str]
    size: int


class DeleteResponse(BaseModel):
    success: bool
    message: str
    filename: str


class HealthResponse(BaseModel):
    status: str
    timestamp: str
    prototypesDir: str


def _cfg(request: Request) -> Cfg:
    return request.app.state.cfg


def _checked_name(filename: str, *, protect_index: bool) -> str:
    try:
        return catalog.validate_filename(filename, protect_index=protect_index)
    except catalog.InvalidFilename as e:
        raise ApiError(400, str(e)) from e
    except catalog.ProtectedFile as e:
        raise ApiError(403, str(e)) from e


@router.get("/files", response_model=List[FileSummary])
def list_files(request: Request) -> List[Dict[str, Any]]:
    cfg = _cfg(request)
    if not cfg.prototypes_dir.is_dir():
        raise ApiError(404, "prototypes directory does not exist", path=str(cfg.prototypes_dir))

    try:
        names = catalog.scan_files(cfg.prototypes_dir)
        entries = [catalog.read_entry_or_placeholder(cfg.prototypes_dir, n)[0] for n in names]
    except OSError as e:
        print(f"[API FAIL] list files -> {e}")
        raise ApiError(500, "cannot read file list") from e

    return [e.summary() for e in catalog.sort_newest_first(entries)]


@router.get("/files/{filename:path}/metadata", response_model=FileMetadata)
def file_metadata(filename: str, request: Request) -> Dict[str, Any]:
    cfg = _cfg(request)
    name = _checked_name(filename, protect_index=False)

    if not (cfg.prototypes_dir / name).is_file():
        raise ApiError(404, "file not found")
    try:
        entry = catalog.read_entry(cfg.prototypes_dir, name)
    except OSError as e:
        print(f"[API FAIL] metadata {name} -> {e}")
        raise ApiError(500, "cannot read file metadata") from e

    d = entry.summary()
    d.pop("name")
    return d


@router.delete("/files/{filename:path}", response_model=DeleteResponse)
def delete_file(filename: str, request: Request) -> Dict[str, Any]:
    cfg = _cfg(request)
    # validated before any filesystem access
    name = _checked_name(filename, protect_index=True)

    fp = cfg.prototypes_dir / name
    if not fp.is_file():
        raise ApiError(404, "file not found")
    try:
        fp.unlink()
    except OSError as e:
        print(f"[API FAIL] delete {name} -> {e}")
        raise ApiError(500, "error while deleting file") from e

    print(f"[DELETE] {name}")
    return {"success": True, "message": f"deleted {name}", "filename": name}


@router.get("/health", response_model=HealthResponse)
def health(request: Request) -> Dict[str, str]:
    return {
        "status": "ok",
        "timestamp": utc_now_iso(),
        "prototypesDir": str(_cfg(request).prototypes_dir),
    }
