"""
MediaDB: JSON-file-backed media database API for a fan-maintained archive.

Serve with ``uvicorn mediadb.app:create_app --factory``.
"""

__version__ = "0.1.0"
