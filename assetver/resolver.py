from __future__ import annotations

import logging
import re
import threading
from typing import Optional

from . import metrics
from .formatter import FormatPattern, UrlFormatter
from .manifest import ManifestStore
from .settings import AssetSettings, get_settings
from .sources import open_source
from .strategies import STRATEGY_MANIFEST, STRATEGY_MANIFEST_PATH, VersionStrategy, build_strategy


logger = logging.getLogger("assetver.resolver")

_ABSOLUTE_URL = re.compile(r"^(?:[a-zA-Z][a-zA-Z0-9+.-]*://|//|data:)")


def is_absolute_url(path: str) -> bool:
    return bool(_ABSOLUTE_URL.match(path))


def normalize_path(path: str) -> str:
    """Lookup key for ``path``: leading slashes stripped, nothing else touched."""
    return str(path or "").lstrip("/")


class AssetResolver:
    """Maps logical asset paths to versioned public URLs.

    Unknown assets resolve to their unversioned path; only manifest read
    failures surface as exceptions (``ManifestUnreadable``/``ManifestMalformed``).
    """

    def __init__(self, strategy: VersionStrategy, base_url: str = "") -> None:
        self.strategy = strategy
        self.base_url = (base_url or "").strip()

    @property
    def store(self) -> Optional[ManifestStore]:
        return getattr(self.strategy, "store", None)

    def resolve(self, logical_path: str) -> str:
        raw = str(logical_path or "")
        if is_absolute_url(raw):
            return raw
        key = normalize_path(raw)
        version = self.strategy.get_version(key)
        metrics.observe_lookup(bool(version))
        if not version:
            return self._prefix(raw)
        versioned = self.strategy.apply_version(key)
        if self.base_url:
            return self._prefix(versioned)
        # Keep a root-absolute request root-absolute
        if raw.startswith("/"):
            return "/" + versioned.lstrip("/")
        return versioned

    def get_version(self, logical_path: str) -> str:
        raw = str(logical_path or "")
        if is_absolute_url(raw):
            return ""
        return self.strategy.get_version(normalize_path(raw))

    def _prefix(self, path: str) -> str:
        if not self.base_url:
            return path
        return f"{self.base_url.rstrip('/')}/{path.lstrip('/')}"

    def preload(self) -> None:
        store = self.store
        if store is not None:
            store.load()

    def invalidate(self) -> None:
        store = self.store
        if store is not None:
            store.invalidate()


def build_resolver(settings: Optional[AssetSettings] = None) -> AssetResolver:
    """Wire source, store, formatter and strategy from settings.

    Raises ``InvalidFormatPattern`` for a bad ``ASSET_FORMAT_PATTERN``.
    """

    settings = settings or get_settings()
    formatter = UrlFormatter(FormatPattern.parse(settings.format_pattern))
    store: Optional[ManifestStore] = None
    if settings.strategy in (STRATEGY_MANIFEST, STRATEGY_MANIFEST_PATH):
        source = open_source(
            settings.manifest_source,
            missing_ok=not settings.manifest_required,
            timeout=settings.manifest_timeout,
            redis_key=settings.manifest_redis_key,
        )
        store = ManifestStore(source, ttl_seconds=settings.manifest_ttl)
    strategy = build_strategy(
        settings.strategy,
        store=store,
        formatter=formatter,
        static_version=settings.effective_static_version,
    )
    logger.debug(
        "Asset resolver configured: strategy=%s pattern=%s base_url=%s",
        settings.strategy,
        settings.format_pattern,
        settings.base_url or "-",
    )
    return AssetResolver(strategy, base_url=settings.base_url)


_singleton: Optional[AssetResolver] = None
_singleton_lock = threading.Lock()


def get_resolver() -> AssetResolver:
    global _singleton
    if _singleton is None:
        with _singleton_lock:
            if _singleton is None:
                _singleton = build_resolver()
    return _singleton


def reset_resolver_cache() -> None:
    """Testing helper to drop the process-wide resolver."""
    global _singleton
    with _singleton_lock:
        _singleton = None
