# src/lab_gallery/server.py
from __future__ import annotations

import argparse
import sys
from typing import List, Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from lab_gallery.manifest.freshness import RebuildOutcome, ensure_manifest_up_to_date
from lab_gallery.manifest.models import utc_now_iso
from lab_gallery.routes import ApiError, router as api_router
from lab_gallery.settings import Cfg, load_cfg


def create_app(cfg: Cfg) -> FastAPI:
    app = FastAPI(title="lab-gallery", version="0.1.0")
    app.state.cfg = cfg

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cfg.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        print(f"{utc_now_iso()} - {request.method} {request.url.path}")
        return await call_next(request)

    @app.exception_handler(ApiError)
    async def api_error(_request: Request, exc: ApiError) -> JSONResponse:
        return JSONResponse(exc.body(), status_code=exc.status_code)

    @app.exception_handler(StarletteHTTPException)
    async def http_error(_request: Request, exc: StarletteHTTPException) -> JSONResponse:
        # no route or method match: 404 like any unknown path
        if exc.status_code in (404, 405):
            return JSONResponse({"error": "resource not found"}, status_code=404)
        return JSONResponse({"error": str(exc.detail)}, status_code=exc.status_code)

    @app.exception_handler(Exception)
    async def unexpected_error(_request: Request, exc: Exception) -> JSONResponse:
        print(f"[SERVER ERROR] {type(exc).__name__}: {exc}", file=sys.stderr)
        return JSONResponse({"error": "internal server error"}, status_code=500)

    app.include_router(api_router)

    # static site last, so /api/* wins; "/" serves index.html
    if cfg.site_root.is_dir():
        app.mount("/", StaticFiles(directory=cfg.site_root, html=True), name="site")
    else:
        print(f"[SERVER] site root missing, static files disabled: {cfg.site_root}")

    return app


def startup_checks(cfg: Cfg) -> Optional[RebuildOutcome]:
    """
    Outside production, bring the manifest up to date before serving.
    A failed rebuild is reported and the server still starts.
    """
    outcome = None
    if not cfg.is_production:
        outcome = ensure_manifest_up_to_date(cfg)
        if outcome.error:
            print(f"[SERVER] manifest rebuild failed ({outcome.error}); the static page may list stale files")

    if cfg.prototypes_dir.is_dir():
        print(f"[SERVER] prototypes_dir={cfg.prototypes_dir}")
    else:
        print(f"[SERVER] prototypes directory missing: {cfg.prototypes_dir}")
    return outcome


def run_server(cfg: Cfg) -> None:
    startup_checks(cfg)
    app = create_app(cfg)

    print(f"[SERVER] http://localhost:{cfg.port}")
    print("   GET    /api/files                      list files")
    print("   GET    /api/files/{filename}/metadata  file metadata")
    print("   DELETE /api/files/{filename}           delete file")
    print("   GET    /api/health                     health check")
    uvicorn.run(app, host=cfg.host, port=cfg.port)


def main(argv: Optional[List[str]] = None) -> None:
    ap = argparse.ArgumentParser(prog="gallery-serve", description="Serve the gallery and its file API")
    ap.add_argument("--config", default=None, help="Path to gallery YAML (default: configs/gallery.yaml)")
    args = ap.parse_args(argv)

    try:
        cfg = load_cfg(args.config)
    except Exception as e:
        print(f"[ERROR] {type(e).__name__}: {e}", file=sys.stderr)
        sys.exit(2)
    run_server(cfg)


if __name__ == "__main__":
    main()
