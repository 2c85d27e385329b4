from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Body, Request

from mediadb.core.errors import InvalidInputError, RecordNotFoundError
from mediadb.core.utils import generate_record_id, utc_now_iso
from mediadb.domain.collections import ensure_collection
from mediadb.routers.state import store_from

router = APIRouter(prefix="/api/db", tags=["collections"])


def _require_object(payload: Any) -> dict:
    if not isinstance(payload, dict):
        raise InvalidInputError("Request body must be a JSON object")
    return payload


@router.get("/{collection}")
def list_or_get(request: Request, collection: str, id: Optional[str] = None, include_deleted: bool = True):
    ensure_collection(collection)
    store = store_from(request)
    if id:
        item = store.get_by_id(collection, id)
        if item is None:
            raise RecordNotFoundError(collection, id)
        return item
    if include_deleted:
        return store.load_all(collection)
    return store.query(collection, lambda record: not record.get("deletedAt"))


@router.post("/{collection}", status_code=201)
def create_record(request: Request, collection: str, payload: Any = Body(None)):
    ensure_collection(collection)
    body = dict(_require_object(payload))
    if not body.get("id"):
        body["id"] = generate_record_id(collection)
    now = utc_now_iso()
    body["createdAt"] = now
    body["updatedAt"] = now
    return store_from(request).create(collection, body)


@router.put("/{collection}")
def update_record(request: Request, collection: str, payload: Any = Body(None)):
    ensure_collection(collection)
    body = dict(_require_object(payload))
    record_id = body.pop("id", None)
    if not record_id:
        raise InvalidInputError("id is required")
    return store_from(request).update(collection, record_id, body)


@router.patch("/{collection}")
def bulk_update_records(request: Request, collection: str, payload: Any = Body(None)):
    ensure_collection(collection)
    updates = _require_object(payload).get("updates")
    if not isinstance(updates, list) or not all(
        isinstance(u, dict) and u.get("id") and isinstance(u.get("data", {}), dict) for u in updates
    ):
        raise InvalidInputError('"updates" must be a list of {"id": ..., "data": {...}}')
    store_from(request).bulk_update(collection, updates)
    return {"success": True}


@router.delete("/{collection}")
def delete_record(request: Request, collection: str, id: Optional[str] = None, soft: bool = False):
    ensure_collection(collection)
    if not id:
        raise InvalidInputError("id is required")
    store = store_from(request)
    if soft:
        return store.soft_delete(collection, id)
    if not store.remove(collection, id):
        raise RecordNotFoundError(collection, id)
    return {"success": True}
