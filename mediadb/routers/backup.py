from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Body, Request
from fastapi.responses import Response

from mediadb.core.errors import InvalidInputError
from mediadb.routers.state import store_from

router = APIRouter(prefix="/api/backup", tags=["backup"])


def backup_filename() -> str:
    return f"mediadb-backup-{datetime.now(timezone.utc).date().isoformat()}.json"


@router.get("")
def download_backup(request: Request):
    payload = store_from(request).export_all()
    return Response(
        content=json.dumps(payload, ensure_ascii=False, indent=2),
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{backup_filename()}"'},
    )


@router.post("")
def restore_backup(request: Request, payload: Any = Body(None)):
    if not isinstance(payload, dict):
        raise InvalidInputError("Invalid format")
    restored = store_from(request).restore_collections(payload)
    return {"success": True, "message": "Restore successful", "restored": restored}


@router.get("/snapshots")
def list_snapshots(request: Request):
    return {"snapshots": store_from(request).list_snapshots()}


@router.post("/snapshots", status_code=201)
def create_snapshot(request: Request):
    path = store_from(request).create_snapshot()
    return {"success": True, "name": path.name}


@router.post("/snapshots/{name}/restore")
def restore_snapshot(request: Request, name: str):
    restored = store_from(request).restore_snapshot(name)
    return {"success": True, "message": "Restore successful", "restored": restored}
