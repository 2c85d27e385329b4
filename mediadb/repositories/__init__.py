"""
Persistence adapters.

``collection_store`` keeps one JSON array per collection on disk with a
short-lived in-memory cache (``cache.TTLCache``) in front of it.
"""
