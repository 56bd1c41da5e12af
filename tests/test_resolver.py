from __future__ import annotations

import json

import pytest

from assetver import metrics
from assetver.errors import InvalidFormatPattern, ManifestMalformed, ManifestUnreadable
from assetver.formatter import UrlFormatter
from assetver.manifest import ManifestStore
from assetver.resolver import AssetResolver, build_resolver, get_resolver, normalize_path, reset_resolver_cache
from assetver.settings import AssetSettings
from assetver.strategies import EmptyVersionStrategy, ManifestVersionStrategy, StaticVersionStrategy
from conftest import CountingSource


def _resolver(source, pattern="%s?version=%s", base_url=""):
    strategy = ManifestVersionStrategy(ManifestStore(source), UrlFormatter(pattern))
    return AssetResolver(strategy, base_url=base_url)


def test_end_to_end_example(manifest_file):
    settings = AssetSettings(ASSET_MANIFEST_SOURCE=str(manifest_file), ASSET_FORMAT_PATTERN="%s?version=%s")
    resolver = build_resolver(settings)
    assert resolver.resolve("css/style.css") == "css/style.css?version=91cd067f79a5839536b46c494c4272d8"
    assert resolver.resolve("css/missing.css") == "css/missing.css"


def test_leading_slash_is_stripped_only_for_lookup(counting_source):
    resolver = _resolver(counting_source)
    assert resolver.resolve("/css/style.css") == "/css/style.css?version=91cd067f79a5839536b46c494c4272d8"
    assert resolver.resolve("css/style.css") == "css/style.css?version=91cd067f79a5839536b46c494c4272d8"
    assert resolver.get_version("/js/script.js") == "f9c7afd05729f10f55b689f36bb20172"


def test_lookup_is_case_sensitive(counting_source):
    resolver = _resolver(counting_source)
    assert resolver.resolve("CSS/Style.css") == "CSS/Style.css"


def test_normalize_path_only_strips_leading_slashes():
    assert normalize_path("//a/b.css") == "a/b.css"
    assert normalize_path("a/b/") == "a/b/"
    assert normalize_path("A\\b.css") == "A\\b.css"
    assert normalize_path(None) == ""  # type: ignore[arg-type]


@pytest.mark.parametrize(
    "base_url,expected",
    [
        ("https://cdn.example.com", "https://cdn.example.com/css/style.css?version=91cd067f79a5839536b46c494c4272d8"),
        ("https://cdn.example.com/", "https://cdn.example.com/css/style.css?version=91cd067f79a5839536b46c494c4272d8"),
        ("/static", "/static/css/style.css?version=91cd067f79a5839536b46c494c4272d8"),
        ("/static/", "/static/css/style.css?version=91cd067f79a5839536b46c494c4272d8"),
    ],
)
def test_base_url_is_joined_with_one_slash(counting_source, base_url, expected):
    resolver = _resolver(counting_source, base_url=base_url)
    assert resolver.resolve("/css/style.css") == expected


def test_base_url_applies_to_unversioned_fallback(counting_source):
    resolver = _resolver(counting_source, base_url="/static")
    assert resolver.resolve("img/logo.png") == "/static/img/logo.png"


@pytest.mark.parametrize(
    "url",
    ["https://fonts.example.com/a.css", "//cdn.example.com/x.js", "data:image/png;base64,AAAA"],
)
def test_absolute_urls_pass_through(counting_source, url):
    resolver = _resolver(counting_source, base_url="/static")
    assert resolver.resolve(url) == url
    assert resolver.get_version(url) == ""
    assert counting_source.reads == 0


def test_resolve_is_idempotent(counting_source):
    resolver = _resolver(counting_source)
    assert resolver.resolve("js/script.js") == resolver.resolve("js/script.js")
    assert counting_source.reads == 1


def test_invalidate_and_reload(tmp_path):
    path = tmp_path / "manifest.json"
    path.write_text(json.dumps({"js/app.js": "aaa"}), encoding="utf-8")
    resolver = build_resolver(AssetSettings(ASSET_MANIFEST_SOURCE=str(path)))
    assert resolver.resolve("js/app.js") == "js/app.js?aaa"

    path.write_text(json.dumps({"js/app.js": "bbb"}), encoding="utf-8")
    assert resolver.resolve("js/app.js") == "js/app.js?aaa"
    resolver.invalidate()
    assert resolver.resolve("js/app.js") == "js/app.js?bbb"


def test_preload_surfaces_configuration_errors(tmp_path):
    resolver = build_resolver(AssetSettings(ASSET_MANIFEST_SOURCE=str(tmp_path / "missing.json")))
    with pytest.raises(ManifestUnreadable):
        resolver.preload()


def test_malformed_manifest_propagates_from_resolve(tmp_path):
    path = tmp_path / "manifest.json"
    path.write_text("{oops", encoding="utf-8")
    resolver = build_resolver(AssetSettings(ASSET_MANIFEST_SOURCE=str(path)))
    with pytest.raises(ManifestMalformed):
        resolver.resolve("js/app.js")


def test_optional_manifest_serves_unversioned(tmp_path):
    settings = AssetSettings(ASSET_MANIFEST_SOURCE=str(tmp_path / "missing.json"), ASSET_MANIFEST_REQUIRED="0")
    resolver = build_resolver(settings)
    assert resolver.resolve("/js/app.js") == "/js/app.js"


def test_build_resolver_rejects_bad_pattern(manifest_file):
    with pytest.raises(InvalidFormatPattern):
        build_resolver(AssetSettings(ASSET_MANIFEST_SOURCE=str(manifest_file), ASSET_FORMAT_PATTERN="%s"))


def test_build_resolver_static_and_none():
    static = build_resolver(AssetSettings(ASSET_STRATEGY="static", ASSET_STATIC_VERSION="r42"))
    assert isinstance(static.strategy, StaticVersionStrategy)
    assert static.store is None
    assert static.resolve("/a.css") == "/a.css?r42"
    static.invalidate()  # no store, nothing to drop
    static.preload()

    none = build_resolver(AssetSettings(ASSET_STRATEGY="none", ASSET_BASE_URL="/static"))
    assert isinstance(none.strategy, EmptyVersionStrategy)
    assert none.resolve("a.css") == "/static/a.css"


def test_static_strategy_falls_back_to_release_version():
    resolver = build_resolver(AssetSettings(ASSET_STRATEGY="static", APP_VERSION="2024.10.1"))
    assert resolver.resolve("a.css") == "a.css?2024.10.1"
    dev = build_resolver(AssetSettings(ASSET_STRATEGY="static", APP_VERSION="dev"))
    assert dev.resolve("a.css") == "a.css"


def test_get_resolver_is_cached_per_process(monkeypatch, manifest_file):
    monkeypatch.setenv("ASSET_MANIFEST_SOURCE", str(manifest_file))
    first = get_resolver()
    assert get_resolver() is first
    reset_resolver_cache()
    assert get_resolver() is not first


def test_missing_paths_never_raise():
    resolver = _resolver(CountingSource({}))
    for path in ("", "/", "a", "dir/", "../../etc/passwd"):
        assert resolver.resolve(path) == path


def test_root_absolute_miss_keeps_leading_slash():
    resolver = _resolver(CountingSource({"css/style.css": "abc"}))
    assert resolver.resolve("/css/missing.css") == "/css/missing.css"
    assert resolver.resolve("/css/style.css") == "/css/style.css?version=abc"


def test_resolve_counts_one_lookup_per_call(counting_source):
    resolver = _resolver(counting_source)
    resolver.resolve("css/style.css")
    resolver.resolve("/css/missing.css")
    resolver.get_version("css/style.css")
    assert metrics.snapshot()["lookups"] == {"hit": 1, "miss": 1}
