from __future__ import annotations

import json
from typing import Any

from fastapi import APIRouter, Body, Request

from mediadb.core.config import PATH_CONFIG_KEYS, read_path_config
from mediadb.core.errors import InvalidInputError
from mediadb.routers.state import settings_from

router = APIRouter(prefix="/api/settings", tags=["settings"])


@router.get("/paths")
def get_paths(request: Request):
    settings = settings_from(request)
    return {**settings.path_settings(), **read_path_config(settings.path_config_file)}


@router.post("/paths")
def save_paths(request: Request, payload: Any = Body(None)):
    if not isinstance(payload, dict):
        raise InvalidInputError("Request body must be a JSON object")
    unknown = sorted(set(payload) - set(PATH_CONFIG_KEYS))
    if unknown:
        raise InvalidInputError(f"Unknown path settings: {', '.join(unknown)}")
    if not all(isinstance(v, str) for v in payload.values()):
        raise InvalidInputError("Path settings must be strings")
    settings = settings_from(request)
    path = settings.path_config_file
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
    return {
        "success": True,
        "message": "Paths saved. Please restart the server to apply changes.",
        "paths": payload,
    }
