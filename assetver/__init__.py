from .errors import AssetError, InvalidFormatPattern, ManifestError, ManifestMalformed, ManifestUnreadable
from .formatter import DEFAULT_PATTERN, FormatPattern, UrlFormatter, format_url
from .manifest import ManifestStore, parse_manifest
from .resolver import AssetResolver, build_resolver, get_resolver, reset_resolver_cache
from .settings import AssetSettings, get_settings, reset_settings_cache
from .sources import (
    FileManifestSource,
    HttpManifestSource,
    MappingManifestSource,
    RedisManifestSource,
    open_source,
)
from .strategies import (
    EmptyVersionStrategy,
    ManifestPathStrategy,
    ManifestVersionStrategy,
    StaticVersionStrategy,
    build_strategy,
)

__all__ = [
    "AssetError",
    "InvalidFormatPattern",
    "ManifestError",
    "ManifestMalformed",
    "ManifestUnreadable",
    "DEFAULT_PATTERN",
    "FormatPattern",
    "UrlFormatter",
    "format_url",
    "ManifestStore",
    "parse_manifest",
    "AssetResolver",
    "build_resolver",
    "get_resolver",
    "reset_resolver_cache",
    "AssetSettings",
    "get_settings",
    "reset_settings_cache",
    "FileManifestSource",
    "HttpManifestSource",
    "MappingManifestSource",
    "RedisManifestSource",
    "open_source",
    "EmptyVersionStrategy",
    "ManifestPathStrategy",
    "ManifestVersionStrategy",
    "StaticVersionStrategy",
    "build_strategy",
]
