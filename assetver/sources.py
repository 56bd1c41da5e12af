from __future__ import annotations

import urllib.error
import urllib.request
from pathlib import Path
from typing import Any, Mapping, Optional, Protocol, Union

from .errors import ManifestUnreadable


class ManifestSource(Protocol):
    def read(self) -> Union[str, bytes, Mapping[str, Any]]:
        ...

    def describe(self) -> str:
        ...


class FileManifestSource:
    """Manifest JSON stored on the local filesystem.

    With ``missing_ok`` a missing file reads as an empty object so that a dev
    checkout serves unversioned assets until the first build writes it.
    """

    def __init__(self, path: Union[str, Path], missing_ok: bool = False) -> None:
        self.path = Path(path)
        self.missing_ok = missing_ok

    def read(self) -> str:
        try:
            return self.path.read_text(encoding="utf-8")
        except FileNotFoundError as exc:
            if self.missing_ok:
                return "{}"
            raise ManifestUnreadable("manifest file not found", self.describe()) from exc
        except (OSError, UnicodeDecodeError) as exc:
            raise ManifestUnreadable(f"cannot read manifest file: {exc}", self.describe()) from exc

    def describe(self) -> str:
        return str(self.path)


class HttpManifestSource:
    def __init__(self, url: str, timeout: float = 5.0) -> None:
        self.url = url
        self.timeout = timeout

    def read(self) -> bytes:
        try:
            with urllib.request.urlopen(self.url, timeout=self.timeout) as resp:  # nosec - configured URL
                status = getattr(resp, "status", None) or resp.getcode()
                if status != 200:
                    raise ManifestUnreadable(f"unexpected HTTP status {status}", self.describe())
                return resp.read()
        except ManifestUnreadable:
            raise
        except (urllib.error.URLError, OSError, ValueError) as exc:
            raise ManifestUnreadable(f"cannot fetch manifest: {exc}", self.describe()) from exc

    def describe(self) -> str:
        return self.url


class RedisManifestSource:
    """Manifest kept as a Redis hash of path -> token."""

    def __init__(self, url: Optional[str] = None, key: str = "assets:manifest", client: Any = None) -> None:
        if client is None and not url:
            raise ValueError("RedisManifestSource needs a url or a client")
        self.url = url
        self.key = key
        self._client = client

    def _get_client(self):
        if self._client is None:
            from redis import Redis  # type: ignore

            self._client = Redis.from_url(self.url, decode_responses=True)
        return self._client

    def read(self) -> Mapping[str, Any]:
        from redis.exceptions import RedisError  # type: ignore

        try:
            data = self._get_client().hgetall(self.key)
        except (RedisError, OSError) as exc:
            raise ManifestUnreadable(f"cannot read manifest hash: {exc}", self.describe()) from exc
        return {_text(k): _text(v) for k, v in (data or {}).items()}

    def describe(self) -> str:
        where = self.url or "redis"
        return f"{where}#{self.key}"


class MappingManifestSource:
    """In-memory manifest, e.g. embedded in the application package."""

    def __init__(self, mapping: Mapping[str, Any], name: str = "memory") -> None:
        self.mapping = mapping
        self.name = name

    def read(self) -> Mapping[str, Any]:
        return dict(self.mapping)

    def describe(self) -> str:
        return self.name


def _text(value: Any) -> Any:
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return value


def open_source(
    location: str,
    *,
    missing_ok: bool = False,
    timeout: float = 5.0,
    redis_key: str = "assets:manifest",
) -> ManifestSource:
    """Pick a manifest source for ``location`` by its scheme."""

    loc = (location or "").strip()
    if not loc:
        raise ValueError("manifest source location is empty")
    lowered = loc.lower()
    if lowered.startswith(("http://", "https://")):
        return HttpManifestSource(loc, timeout=timeout)
    if lowered.startswith(("redis://", "rediss://", "unix://")):
        return RedisManifestSource(loc, key=redis_key)
    return FileManifestSource(loc, missing_ok=missing_ok)
