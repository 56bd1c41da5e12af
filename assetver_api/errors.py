from __future__ import annotations

from http import HTTPStatus

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from assetver.errors import ManifestError
from assetver.logging_utils import get_request_id


def _format_error_payload(detail: object, code: str | None = None) -> dict:
    if isinstance(detail, dict):
        message = detail.get("error") or detail.get("detail") or str(detail)
        code = code or detail.get("code")
    else:
        message = str(detail or "")
    payload = {"ok": False, "error": message or "error"}
    if code:
        payload["code"] = str(code)
    return payload


def _request_id(request: Request) -> str:
    return get_request_id() or request.headers.get("x-request-id") or ""


def register_exception_handlers(target) -> None:
    def _wants_problem_json(request: Request) -> bool:
        accept = (request.headers.get("accept") or "").lower()
        return "application/problem+json" in accept

    def _problem_payload(request: Request, status: int, detail: str | dict | list | None = None):
        rid = _request_id(request)
        try:
            title = HTTPStatus(status).phrase
        except ValueError:
            title = "Error"
        if isinstance(detail, dict):
            det = detail.get("detail") or detail.get("error") or detail
        else:
            det = detail or ""
        return {
            "type": "about:blank",
            "title": title,
            "status": status,
            "detail": det,
            "instance": str(request.url.path),
            "request_id": rid,
        }

    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        if _wants_problem_json(request):
            content = _problem_payload(request, exc.status_code, exc.detail)
            return JSONResponse(status_code=exc.status_code, content=content, media_type="application/problem+json")
        payload = _format_error_payload(exc.detail)
        payload["request_id"] = _request_id(request)
        return JSONResponse(status_code=exc.status_code, content=payload)

    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        if _wants_problem_json(request):
            content = _problem_payload(request, 422, {"detail": exc.errors()})
            return JSONResponse(status_code=422, content=content, media_type="application/problem+json")
        payload = {
            "ok": False,
            "error": "validation_error",
            "code": "validation_error",
            "details": exc.errors(),
            "request_id": _request_id(request),
        }
        return JSONResponse(status_code=422, content=payload)

    async def manifest_error_handler(request: Request, exc: ManifestError):
        if _wants_problem_json(request):
            content = _problem_payload(request, 503, str(exc))
            return JSONResponse(status_code=503, content=content, media_type="application/problem+json")
        payload = _format_error_payload(str(exc), exc.code)
        payload["request_id"] = _request_id(request)
        return JSONResponse(status_code=503, content=payload)

    target.add_exception_handler(StarletteHTTPException, http_exception_handler)
    target.add_exception_handler(RequestValidationError, validation_exception_handler)
    target.add_exception_handler(ManifestError, manifest_error_handler)
