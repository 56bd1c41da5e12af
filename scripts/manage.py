from __future__ import annotations

import argparse
import json
import sys
import urllib.request

from assetver.errors import AssetError
from assetver.resolver import build_resolver
from assetver.settings import get_settings


def cmd_resolve(args: argparse.Namespace) -> int:
    try:
        resolver = build_resolver(get_settings())
        for path in args.paths:
            print(f"{path}\t{resolver.resolve(path)}")
    except AssetError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


def cmd_check(_: argparse.Namespace) -> int:
    settings = get_settings()
    try:
        resolver = build_resolver(settings)
        store = resolver.store
        if store is None:
            print(f"Strategy {settings.strategy!r} uses no manifest")
            return 0
        manifest = store.load()
    except AssetError as e:
        print(f"Manifest check failed: {e}", file=sys.stderr)
        return 1
    print(f"Manifest OK: {len(manifest)} entries from {store.describe()}")
    return 0


def cmd_health(args: argparse.Namespace) -> int:
    host = args.host or "127.0.0.1"
    port = args.port or 8000
    url = f"http://{host}:{port}/api/healthz"
    try:
        with urllib.request.urlopen(url, timeout=3) as resp:  # nosec - local
            ok = resp.getcode() == 200 and json.loads(resp.read().decode("utf-8")).get("ok")
            print("HEALTH:", "OK" if ok else "FAIL", url)
            return 0 if ok else 1
    except Exception as e:
        print("HEALTH: ERROR", e)
        return 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="manage", description="Asset versioning management CLI")
    sub = parser.add_subparsers(dest="cmd", required=True)

    p_resolve = sub.add_parser("resolve", help="Print the versioned URL for each asset path")
    p_resolve.add_argument("paths", nargs="+")
    p_resolve.set_defaults(func=cmd_resolve)

    sub.add_parser("check", help="Load the configured manifest and report its size").set_defaults(func=cmd_check)

    p_health = sub.add_parser("health", help="Call /api/healthz on host:port")
    p_health.add_argument("--host", default="127.0.0.1")
    p_health.add_argument("--port", type=int, default=8000)
    p_health.set_defaults(func=cmd_health)
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    return int(args.func(args))


if __name__ == "__main__":
    raise SystemExit(main())
