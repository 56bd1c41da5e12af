from __future__ import annotations

import logging
from secrets import compare_digest

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from assetver.resolver import AssetResolver
from assetver.settings import AssetSettings

from ..schemas import AssetUrlResponse, HealthResponse, ManifestStatusResponse, SimpleOkResponse


logger = logging.getLogger("assetver_api.assets")

router = APIRouter(tags=["assets"])


def get_asset_resolver(request: Request) -> AssetResolver:
    return request.app.state.asset_resolver


def get_asset_settings(request: Request) -> AssetSettings:
    return request.app.state.asset_settings


def _require_admin(request: Request, settings: AssetSettings) -> None:
    expected = settings.admin_token
    supplied = (request.headers.get("X-Admin-Token") or "").strip()
    # Empty ASSET_ADMIN_TOKEN disables the endpoint entirely
    if not expected or not supplied or not compare_digest(supplied, expected):
        raise HTTPException(status_code=403, detail="forbidden")


@router.get("/assets/url", response_model=AssetUrlResponse)
def asset_url(
    path: str = Query(..., min_length=1),
    resolver: AssetResolver = Depends(get_asset_resolver),
):
    return AssetUrlResponse(path=path, url=resolver.resolve(path), version=resolver.get_version(path))


@router.get("/assets/manifest", response_model=ManifestStatusResponse)
def manifest_status(
    resolver: AssetResolver = Depends(get_asset_resolver),
    settings: AssetSettings = Depends(get_asset_settings),
):
    store = resolver.store
    if store is None:
        return ManifestStatusResponse(strategy=settings.strategy, state="none")
    # Status reporting never triggers the lazy load
    entries = store.entries
    return ManifestStatusResponse(
        strategy=settings.strategy,
        state=store.state,
        entries=entries,
        source=store.describe(),
        loaded_at=store.loaded_at,
    )


@router.post("/assets/invalidate", response_model=SimpleOkResponse)
def invalidate_manifest(
    request: Request,
    resolver: AssetResolver = Depends(get_asset_resolver),
    settings: AssetSettings = Depends(get_asset_settings),
):
    _require_admin(request, settings)
    resolver.invalidate()
    logger.info("Asset manifest invalidated via API")
    return SimpleOkResponse()


@router.get("/healthz", response_model=HealthResponse)
def healthz(resolver: AssetResolver = Depends(get_asset_resolver)):
    store = resolver.store
    if store is not None and store.state == "failed":
        return HealthResponse(ok=False, status="degraded", error="manifest load failed")
    return HealthResponse(ok=True, status="healthy")


@router.get("/livez", response_model=SimpleOkResponse)
def livez():
    return SimpleOkResponse()
