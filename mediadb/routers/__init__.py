"""
FastAPI routers grouped by domain (collections, backup, media, settings).

Each module exposes an APIRouter included by ``mediadb.app.create_app``.
"""
