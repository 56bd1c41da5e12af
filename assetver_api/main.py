from __future__ import annotations

import logging
import time
import uuid
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse
from fastapi.staticfiles import StaticFiles

from assetver.logging_utils import maybe_enable_json_logging, set_request_id
from assetver.metrics import export_prometheus
from assetver.resolver import AssetResolver, build_resolver
from assetver.settings import AssetSettings, get_settings

from .errors import register_exception_handlers
from .routes.assets import router as assets_router


logger = logging.getLogger("assetver_api")


def create_app(
    settings: Optional[AssetSettings] = None,
    resolver: Optional[AssetResolver] = None,
) -> FastAPI:
    maybe_enable_json_logging()
    settings = settings or get_settings()
    # Bad ASSET_FORMAT_PATTERN fails here, before the app is served
    resolver = resolver or build_resolver(settings)

    @asynccontextmanager
    async def lifespan(_: FastAPI):
        if settings.preload:
            resolver.preload()
            logger.info("Asset manifest preloaded")
        yield

    application = FastAPI(title="Asset Versioning", lifespan=lifespan)
    application.state.asset_settings = settings
    application.state.asset_resolver = resolver

    application.include_router(assets_router, prefix="/api")
    register_exception_handlers(application)

    if settings.static_dir:
        static_dir = Path(settings.static_dir)
        if static_dir.is_dir():
            application.mount("/static", StaticFiles(directory=str(static_dir)), name="static")
        else:
            logger.warning("ASSET_STATIC_DIR %s does not exist; /static not mounted", static_dir)

    @application.middleware("http")
    async def request_id_middleware(request: Request, call_next):
        rid = request.headers.get("X-Request-ID") or uuid.uuid4().hex
        set_request_id(rid)
        t0 = time.perf_counter()
        resp = await call_next(request)
        resp.headers["X-Request-ID"] = rid
        logger.debug("%s %s -> %s in %.4fs", request.method, request.url.path, resp.status_code, time.perf_counter() - t0)
        return resp

    @application.get("/metrics", include_in_schema=False)
    async def metrics():
        return PlainTextResponse(export_prometheus(), media_type="text/plain; version=0.0.4; charset=utf-8")

    return application


load_dotenv()  # .env for local runs
app = create_app()
