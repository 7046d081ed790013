"""Static assets for the mdgrow web UI."""

from __future__ import annotations

from functools import lru_cache
from importlib.resources import files

from fastapi import APIRouter
from fastapi.responses import Response

RELOAD_SCRIPT_PATH = "/__reload__.js"
RELOAD_EVENTS_PATH = "/__reload__"

router = APIRouter()


@lru_cache(maxsize=None)
def load_asset(name: str) -> str:
    asset = files("mdgrow.web").joinpath("static", name)
    return asset.read_text(encoding="utf-8")


@router.get(RELOAD_SCRIPT_PATH)
async def reload_script() -> Response:
    return Response(content=load_asset("reload.js"), media_type="application/javascript")
