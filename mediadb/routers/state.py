from __future__ import annotations

from fastapi import Request

from mediadb.core.config import Settings
from mediadb.repositories.collection_store import CollectionStore


def store_from(request: Request) -> CollectionStore:
    store = getattr(getattr(request.app, "state", None), "store", None)
    if store is None:
        raise RuntimeError("CollectionStore not configured")
    return store


def settings_from(request: Request) -> Settings:
    settings = getattr(getattr(request.app, "state", None), "settings", None)
    if settings is None:
        raise RuntimeError("Settings not configured")
    return settings
