from __future__ import annotations

from pathlib import Path
from typing import Union

from fastapi.templating import Jinja2Templates

from assetver.resolver import AssetResolver


def install_asset_globals(env, resolver: AssetResolver) -> None:
    """Expose ``asset_url(path)`` and ``asset_version(path)`` to Jinja templates."""

    env.globals["asset_url"] = resolver.resolve
    env.globals["asset_version"] = resolver.get_version


def asset_templates(directory: Union[str, Path], resolver: AssetResolver) -> Jinja2Templates:
    templates = Jinja2Templates(directory=str(directory))
    install_asset_globals(templates.env, resolver)
    return templates
