from __future__ import annotations

from typing import Optional, Protocol

from .formatter import UrlFormatter
from .manifest import ManifestStore


STRATEGY_MANIFEST = "manifest"
STRATEGY_MANIFEST_PATH = "manifest_path"
STRATEGY_STATIC = "static"
STRATEGY_NONE = "none"

STRATEGY_KINDS = (STRATEGY_MANIFEST, STRATEGY_MANIFEST_PATH, STRATEGY_STATIC, STRATEGY_NONE)


class VersionStrategy(Protocol):
    """Maps an asset path to a version token and a versioned path.

    ``get_version`` returns "" for unknown paths instead of raising; manifest
    read errors are configuration errors and do propagate.
    """

    store: Optional[ManifestStore]

    def get_version(self, path: str) -> str:
        ...

    def apply_version(self, path: str) -> str:
        ...


class ManifestVersionStrategy:
    def __init__(self, store: ManifestStore, formatter: UrlFormatter) -> None:
        self.store = store
        self.formatter = formatter

    def get_version(self, path: str) -> str:
        return self.store.lookup(path)

    def apply_version(self, path: str) -> str:
        version = self.get_version(path)
        if not version:
            return path
        return self.formatter.apply(path, version)


class ManifestPathStrategy:
    """Manifest values are full rewritten paths (``css/app.css`` -> ``dist/css/app.3f2a.css``)."""

    def __init__(self, store: ManifestStore) -> None:
        self.store = store

    def get_version(self, path: str) -> str:
        return self.store.lookup(path)

    def apply_version(self, path: str) -> str:
        return self.get_version(path) or path


class StaticVersionStrategy:
    """Same token for every asset, typically a release id or git sha."""

    store: Optional[ManifestStore] = None

    def __init__(self, version: str, formatter: UrlFormatter) -> None:
        self.version = (version or "").strip()
        self.formatter = formatter

    def get_version(self, path: str) -> str:
        return self.version

    def apply_version(self, path: str) -> str:
        if not self.version:
            return path
        return self.formatter.apply(path, self.version)


class EmptyVersionStrategy:
    store: Optional[ManifestStore] = None

    def get_version(self, path: str) -> str:
        return ""

    def apply_version(self, path: str) -> str:
        return path


def build_strategy(
    kind: str,
    *,
    store: Optional[ManifestStore] = None,
    formatter: Optional[UrlFormatter] = None,
    static_version: str = "",
) -> VersionStrategy:
    kind = (kind or "").strip().lower()
    if kind == STRATEGY_NONE:
        return EmptyVersionStrategy()
    if kind == STRATEGY_STATIC:
        return StaticVersionStrategy(static_version, formatter or UrlFormatter())
    if kind in (STRATEGY_MANIFEST, STRATEGY_MANIFEST_PATH):
        if store is None:
            raise ValueError(f"strategy {kind!r} requires a manifest store")
        if kind == STRATEGY_MANIFEST_PATH:
            return ManifestPathStrategy(store)
        return ManifestVersionStrategy(store, formatter or UrlFormatter())
    raise ValueError(f"unknown version strategy: {kind!r}")
