from __future__ import annotations

import json
import os
import sys
import threading
import time
from pathlib import Path

import pytest

# Ensure project root is importable as a module path
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from assetver import metrics
from assetver.resolver import reset_resolver_cache
from assetver.settings import reset_settings_cache


STYLE_MANIFEST = {"css/style.css": "91cd067f79a5839536b46c494c4272d8"}


class CountingSource:
    """Stub manifest source that records how often it is read."""

    def __init__(self, payload, delay: float = 0.0, error: Exception | None = None) -> None:
        self.payload = payload
        self.delay = delay
        self.error = error
        self.reads = 0
        self._lock = threading.Lock()

    def read(self):
        with self._lock:
            self.reads += 1
        if self.delay:
            time.sleep(self.delay)
        if self.error is not None:
            raise self.error
        if isinstance(self.payload, dict):
            return dict(self.payload)
        return self.payload

    def describe(self) -> str:
        return "counting-stub"


@pytest.fixture(autouse=True)
def _isolate(monkeypatch, tmp_path):
    """Keep ASSET_* env vars and process-wide caches from leaking between tests."""

    for key in list(os.environ):
        if key.startswith("ASSET_") or key in {"APP_VERSION", "JSON_LOGS"}:
            monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
    reset_settings_cache()
    reset_resolver_cache()
    metrics.reset_metrics()
    yield
    reset_settings_cache()
    reset_resolver_cache()


@pytest.fixture()
def manifest_file(tmp_path):
    path = tmp_path / "manifest.json"
    path.write_text(json.dumps(STYLE_MANIFEST), encoding="utf-8")
    return path


@pytest.fixture()
def counting_source():
    return CountingSource(
        {
            "css/style.css": "91cd067f79a5839536b46c494c4272d8",
            "js/script.js": "f9c7afd05729f10f55b689f36bb20172",
        }
    )
