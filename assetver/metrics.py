from __future__ import annotations

import threading
from collections import defaultdict
from typing import Dict


_lock = threading.Lock()
_lookups: Dict[str, int] = defaultdict(int)
_loads: Dict[str, int] = defaultdict(int)
_load_seconds_sum = 0.0
_load_seconds_count = 0


def observe_lookup(hit: bool) -> None:
    with _lock:
        _lookups["hit" if hit else "miss"] += 1


def observe_manifest_load(outcome: str, duration_s: float) -> None:
    global _load_seconds_sum, _load_seconds_count
    with _lock:
        _loads[outcome] += 1
        _load_seconds_sum += max(0.0, float(duration_s))
        _load_seconds_count += 1


def snapshot() -> dict:
    with _lock:
        return {
            "lookups": dict(_lookups),
            "loads": dict(_loads),
            "load_seconds_sum": _load_seconds_sum,
            "load_seconds_count": _load_seconds_count,
        }


def reset_metrics() -> None:
    """Testing helper to zero all counters."""
    global _load_seconds_sum, _load_seconds_count
    with _lock:
        _lookups.clear()
        _loads.clear()
        _load_seconds_sum = 0.0
        _load_seconds_count = 0


def export_prometheus() -> str:
    lines = []
    with _lock:
        lines.append("# HELP asset_lookup_total Asset version lookups by manifest result")
        lines.append("# TYPE asset_lookup_total counter")
        for result in ("hit", "miss"):
            lines.append(f'asset_lookup_total{{result="{result}"}} {int(_lookups.get(result, 0))}')

        lines.append("# HELP asset_manifest_load_total Manifest reads by outcome")
        lines.append("# TYPE asset_manifest_load_total counter")
        for outcome, val in sorted(_loads.items()):
            lines.append(f'asset_manifest_load_total{{outcome="{outcome}"}} {int(val)}')

        lines.append("# HELP asset_manifest_load_seconds Time spent reading manifests")
        lines.append("# TYPE asset_manifest_load_seconds summary")
        lines.append(f"asset_manifest_load_seconds_sum {float(_load_seconds_sum)}")
        lines.append(f"asset_manifest_load_seconds_count {int(_load_seconds_count)}")
    return "\n".join(lines) + "\n"
