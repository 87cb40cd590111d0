from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from logging.handlers import RotatingFileHandler

import httpx
from fastapi import FastAPI, Request
from fastapi.responses import RedirectResponse
from starlette.staticfiles import StaticFiles

from asciimmo_client.config import load_client_config, resolve_fallback_path
from asciimmo_client.home import ensure_client_layout, resolve_client_home
from asciimmo_client.services import build_http_client
from asciimmo_client.ui.router import STATIC_DIR as UI_STATIC_DIR
from asciimmo_client.ui.router import router as ui_router

logger = logging.getLogger(__name__)


def create_app(*, transport: httpx.AsyncBaseTransport | None = None) -> FastAPI:
    """Browser front-end for the world generator.

    ``transport`` replaces the network layer of the outbound HTTP client.
    """

    @asynccontextmanager
    async def _lifespan(app: FastAPI):
        home = resolve_client_home()
        paths = ensure_client_layout(home)
        config = load_client_config(paths)

        # Configure Logging
        log_path = paths.logs_dir / "client.log"
        file_handler = RotatingFileHandler(
            log_path,
            maxBytes=config.logging.max_size_mb * 1024 * 1024,
            backupCount=config.logging.backup_count,
            encoding="utf-8",
        )
        formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        file_handler.setFormatter(formatter)

        root = logging.getLogger()
        root.setLevel(logging.INFO)
        # Avoid adding duplicate handlers if reloaded
        if not any(isinstance(h, RotatingFileHandler) for h in root.handlers):
            root.addHandler(file_handler)

        logger.info("World generator UI starting up")
        logger.info("Auth service: %s", config.services.auth_base_url)
        logger.info("World service: %s", config.services.world_base_url)

        app.state.client_home = home
        app.state.client_paths = paths
        app.state.client_config = config
        app.state.fallback_path = resolve_fallback_path(paths, config)
        app.state.http = build_http_client(config, transport=transport)

        try:
            yield
        finally:
            await app.state.http.aclose()

    app = FastAPI(title="asciimmo client", version="0.1.0", lifespan=_lifespan)

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        response = await call_next(request)
        logger.info(f"{request.method} {request.url.path} - {response.status_code}")
        return response

    if UI_STATIC_DIR.is_dir():
        app.mount(
            "/ui/static",
            StaticFiles(directory=str(UI_STATIC_DIR)),
            name="ui-static",
        )
    else:
        logger.warning(
            "UI static directory is missing (%s); /ui/static will not be served",
            UI_STATIC_DIR,
        )
    app.include_router(ui_router)

    @app.get("/")
    async def root() -> RedirectResponse:
        return RedirectResponse(url="/ui", status_code=302)

    @app.get("/healthz")
    async def healthz() -> dict[str, str]:
        return {"status": "ok"}

    return app
