"""Static FastAPI app serving a built Particle Symphony web directory.

Run under uvicorn (see server.AppServer):
    uvicorn --factory symphony_e2e.static_app:create_app
"""

from __future__ import annotations

import mimetypes
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.responses import FileResponse, HTMLResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
from loguru import logger

from symphony_e2e.config import settings

mimetypes.add_type("application/wasm", ".wasm")
mimetypes.add_type("application/manifest+json", ".webmanifest")

_MISSING_BUILD = """
<html>
    <head><title>Particle Symphony</title></head>
    <body style="background: #0a0a0f; color: #00f0ff; font-family: monospace;">
        <h1>Particle Symphony</h1>
        <p>App build not found at {path}.</p>
    </body>
</html>
"""


def create_app(app_dir: Path | str | None = None) -> FastAPI:
    """Build the static server for *app_dir* (defaults to settings.app_dir)."""
    root = Path(app_dir or settings.app_dir).resolve()
    app = FastAPI(title="Particle Symphony static server", version="0.1.0")

    @app.middleware("http")
    async def no_cache(request: Request, call_next):
        """Disable caching of the served build."""
        response = await call_next(request)
        response.headers["Cache-Control"] = "no-cache, no-store, must-revalidate"
        return response

    @app.get("/health")
    async def health():
        return {"status": "operational", "app_dir": str(root), "exists": root.is_dir()}

    @app.get("/manifest.json")
    async def manifest():
        path = root / "manifest.json"
        if not path.is_file():
            return JSONResponse({"detail": "manifest.json not found"}, status_code=404)
        return FileResponse(path, media_type="application/manifest+json")

    @app.get("/", response_class=HTMLResponse)
    async def index():
        path = root / "index.html"
        if path.is_file():
            return FileResponse(path)
        return HTMLResponse(_MISSING_BUILD.format(path=root), status_code=404)

    if root.is_dir():
        app.mount("/", StaticFiles(directory=root, html=True, follow_symlink=True), name="app")
    else:
        logger.warning(f"App directory not found: {root}")

    return app
