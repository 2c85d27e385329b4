"""
Configuration helpers for the MediaDB backend.

Settings are read from environment variables once (``get_settings`` is
cached). Media folders may also be overridden by the path-config JSON file
written through ``/api/settings/paths``; those changes apply after restart.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
import json
import os

PATH_CONFIG_KEYS = {
    "mediaRoot": "media_root",
    "galleryRoot": "gallery_root",
    "albumArtRoot": "album_art_root",
    "videoRoot": "video_root",
}


@dataclass(frozen=True)
class Settings:
    """Typed view of environment variables."""

    app_env: str
    data_dir: Path
    cache_ttl_seconds: float
    media_root: Path
    gallery_root: Path
    album_art_root: Path
    video_root: Path
    upload_dir: Path
    path_config_file: Path
    cors_origins: tuple[str, ...]
    log_level: str

    def path_settings(self) -> dict:
        """Media folders in the shape used by the path-config file."""
        return {key: str(getattr(self, attr)) for key, attr in PATH_CONFIG_KEYS.items()}


def read_path_config(path: Path) -> dict:
    """Return the path-config overrides, or an empty dict when the file is absent."""
    if not path.exists():
        return {}
    with path.open("r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        return {}
    return {k: v for k, v in data.items() if k in PATH_CONFIG_KEYS and isinstance(v, str) and v.strip()}


@lru_cache
def get_settings() -> Settings:
    """Read the current environment and build a Settings instance."""
    def _float(value: str | None, default: float = 0.0) -> float:
        try:
            return float(value)
        except (TypeError, ValueError):
            return default

    def _path(name: str, default: str) -> Path:
        return Path(os.getenv(name) or default).expanduser().resolve()

    cwd = Path.cwd()
    path_config_file = _path("MEDIADB_PATH_CONFIG", str(cwd / "path-config.json"))
    overrides = read_path_config(path_config_file)

    def _media_path(key: str, env_name: str, default: str) -> Path:
        if key in overrides:
            return Path(overrides[key]).expanduser().resolve()
        return _path(env_name, default)

    origins = os.getenv("MEDIADB_CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000")

    return Settings(
        app_env=(os.getenv("APP_ENV") or "dev").lower(),
        data_dir=_path("MEDIADB_DATA_DIR", str(cwd / "data" / "db")),
        cache_ttl_seconds=max(0.0, _float(os.getenv("MEDIADB_CACHE_TTL_SECONDS"), 5.0)),
        media_root=_media_path("mediaRoot", "MEDIADB_MEDIA_ROOT", str(cwd / "programs" / "media")),
        gallery_root=_media_path("galleryRoot", "MEDIADB_GALLERY_ROOT", str(cwd / "programs" / "gallery")),
        album_art_root=_media_path("albumArtRoot", "MEDIADB_ALBUM_ART_ROOT", str(cwd / "programs" / "album_art")),
        video_root=_media_path("videoRoot", "MEDIADB_VIDEO_ROOT", str(cwd / "programs" / "media" / "videos")),
        upload_dir=_path("MEDIADB_UPLOAD_DIR", str(cwd / "public" / "uploads")),
        path_config_file=path_config_file,
        cors_origins=tuple(o.strip().rstrip("/") for o in origins.split(",") if o.strip()),
        log_level=(os.getenv("MEDIADB_LOG_LEVEL") or "INFO").upper(),
    )
