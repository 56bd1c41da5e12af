from __future__ import annotations

from typing import Optional

from pydantic import BaseModel


class HealthResponse(BaseModel):
    ok: bool
    status: Optional[str] = None
    error: Optional[str] = None


class SimpleOkResponse(BaseModel):
    ok: bool = True


class ErrorResponse(BaseModel):
    ok: bool = False
    error: str
    code: Optional[str] = None
    request_id: Optional[str] = None


class AssetUrlResponse(BaseModel):
    ok: bool = True
    path: str
    url: str
    version: str = ""


class ManifestStatusResponse(BaseModel):
    ok: bool = True
    strategy: str
    state: str
    entries: Optional[int] = None
    source: Optional[str] = None
    loaded_at: Optional[float] = None
