"""
Core utilities shared across the MediaDB service.

This package hosts:
- configuration helpers (env vars, media folders, path-config overrides)
- the error taxonomy mapped to HTTP statuses by the app
- logging setup and small time/id helpers
"""
