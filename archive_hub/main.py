from __future__ import annotations

import logging
from pathlib import Path

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.responses import HTMLResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates

from archive_hub.config import Settings, settings
from archive_hub.errors import ArchiveError, InputError
from archive_hub.services.archiver import Archiver
from archive_hub.services.browser import BrowserManager
from archive_hub.storage.local import LocalArchiveStore

logger = logging.getLogger(__name__)
templates = Jinja2Templates(directory=str(Path(__file__).parent / "templates"))
router = APIRouter()


def get_archiver(request: Request) -> Archiver:
    return request.app.state.archiver


def _require_url(url: str | None) -> str:
    if not url or not url.strip():
        raise InputError("URL is required as a query parameter.")
    return url.strip()


@router.get("/", response_class=HTMLResponse)
async def index(request: Request):
    return templates.TemplateResponse(request, "index.html", {"app_name": request.app.title})


@router.get("/archive")
async def do_archive(request: Request, url: str | None = None, archiver: Archiver = Depends(get_archiver)):
    try:
        target = _require_url(url)
    except InputError as exc:
        return JSONResponse({"error": str(exc)}, status_code=400)

    try:
        record = await archiver.archive(target, str(request.base_url))
    except ArchiveError as exc:
        logger.warning("Archive failed for %s: %s", target, exc)
        return JSONResponse({"error": str(exc) or "Archiving failed."}, status_code=500)
    except Exception as exc:
        logger.exception("Archive failed for URL: %s", target)
        return JSONResponse({"error": str(exc) or "Archiving failed."}, status_code=500)

    return JSONResponse(record.artifacts)


@router.get("/healthz")
async def healthz(archiver: Archiver = Depends(get_archiver)):
    healthy = archiver.browser.is_healthy()
    return {
        "status": "ok" if healthy else "degraded",
        "browser": healthy,
        "in_use": archiver.gate.in_use,
        "capacity": archiver.gate.capacity,
    }


def create_app(config: Settings = settings, browser=None) -> FastAPI:
    """Build the application around one shared browser.

    ``browser`` defaults to a BrowserManager launched on startup; anything
    with ``start``/``stop``/``new_page``/``is_healthy`` works.
    """
    root = Path(config.base_storage_dir)
    root.mkdir(parents=True, exist_ok=True)

    browser = browser or BrowserManager(config)
    app = FastAPI(title=config.app_name)
    app.state.archiver = Archiver(browser, LocalArchiveStore(root), config)

    app.include_router(router)
    app.mount("/files", StaticFiles(directory=str(root)), name="files")

    @app.on_event("startup")
    async def startup():
        # BrowserInitError propagates: no browser, no traffic
        await browser.start()

    @app.on_event("shutdown")
    async def shutdown():
        await browser.stop()

    return app


app = create_app()
