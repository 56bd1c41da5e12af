from __future__ import annotations

import json
import logging
import threading
import time
from types import MappingProxyType
from typing import Any, Callable, Mapping, Optional

from . import metrics
from .errors import ManifestError, ManifestMalformed, ManifestUnreadable
from .sources import ManifestSource


logger = logging.getLogger("assetver.manifest")

Manifest = Mapping[str, str]

STATE_UNLOADED = "unloaded"
STATE_LOADED = "loaded"
STATE_FAILED = "failed"


def parse_manifest(raw: Any, source: Optional[str] = None) -> Manifest:
    """Turn a raw source payload into a frozen path -> token mapping."""

    if isinstance(raw, (bytes, bytearray)):
        try:
            raw = bytes(raw).decode("utf-8")
        except UnicodeDecodeError as exc:
            raise ManifestMalformed("manifest is not valid UTF-8", source) from exc
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise ManifestMalformed(f"invalid JSON: {exc.msg} at line {exc.lineno}", source) from exc
    if not isinstance(raw, Mapping):
        raise ManifestMalformed(f"expected a JSON object, got {type(raw).__name__}", source)
    data: dict[str, str] = {}
    for key, value in raw.items():
        if not isinstance(key, str) or not isinstance(value, str):
            raise ManifestMalformed(f"entry {key!r} is not a string -> string pair", source)
        data[key] = value
    return MappingProxyType(data)


class ManifestStore:
    """Lazily loads one manifest source and caches the result.

    States: unloaded -> loaded on the first successful ``load()``; a failed
    first load parks the store in ``failed`` and re-raises the same error until
    ``invalidate()``. Only the load step takes the lock; a loaded manifest is an
    immutable snapshot read without locking.
    """

    def __init__(
        self,
        source: ManifestSource,
        ttl_seconds: float = 0.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.source = source
        self.ttl_seconds = max(0.0, float(ttl_seconds or 0.0))
        self._clock = clock
        self._lock = threading.Lock()
        self._manifest: Optional[Manifest] = None
        self._error: Optional[ManifestError] = None
        self._loaded_at: Optional[float] = None
        self._loaded_wall: Optional[float] = None

    @property
    def state(self) -> str:
        if self._manifest is not None:
            return STATE_LOADED
        if self._error is not None:
            return STATE_FAILED
        return STATE_UNLOADED

    @property
    def loaded_at(self) -> Optional[float]:
        """Wall-clock time of the last successful read."""
        return self._loaded_wall

    def describe(self) -> str:
        return self.source.describe()

    def _fresh(self) -> bool:
        if self._manifest is None:
            return False
        if not self.ttl_seconds or self._loaded_at is None:
            return True
        return (self._clock() - self._loaded_at) < self.ttl_seconds

    def load(self) -> Manifest:
        manifest = self._manifest
        if manifest is not None and self._fresh():
            return manifest
        with self._lock:
            if self._manifest is not None and self._fresh():
                return self._manifest
            if self._error is not None:
                # Drop frames from earlier re-raises so the traceback stays one call deep
                raise self._error.with_traceback(None)
            stale = self._manifest
            try:
                fresh = self._read()
            except ManifestError as exc:
                if stale is not None:
                    # Expired TTL refresh: keep serving the previous snapshot.
                    logger.warning("Manifest refresh failed, keeping previous manifest: %s", exc)
                    self._loaded_at = self._clock()
                    return stale
                logger.error("Manifest load failed: %s", exc)
                self._error = exc
                raise
            self._manifest = fresh
            self._loaded_at = self._clock()
            self._loaded_wall = time.time()
            return fresh

    def _read(self) -> Manifest:
        where = self.describe()
        t0 = time.perf_counter()
        try:
            manifest = parse_manifest(self.source.read(), where)
        except ManifestUnreadable:
            metrics.observe_manifest_load("unreadable", time.perf_counter() - t0)
            raise
        except ManifestMalformed:
            metrics.observe_manifest_load("malformed", time.perf_counter() - t0)
            raise
        metrics.observe_manifest_load("ok", time.perf_counter() - t0)
        logger.info("Loaded asset manifest with %d entries from %s", len(manifest), where)
        return manifest

    def invalidate(self) -> None:
        with self._lock:
            self._manifest = None
            self._error = None
            self._loaded_at = None
            self._loaded_wall = None
        logger.info("Asset manifest invalidated (%s)", self.describe())

    @property
    def entries(self) -> Optional[int]:
        """Size of the cached manifest, or None when nothing is loaded. Never reads the source."""
        manifest = self._manifest
        return len(manifest) if manifest is not None else None

    def lookup(self, path: str) -> str:
        return self.load().get(path, "")
