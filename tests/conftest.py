from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Make the mediadb package importable when running tests from a checkout
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from fastapi.testclient import TestClient  # noqa: E402

from mediadb.app import create_app  # noqa: E402
from mediadb.core.config import Settings  # noqa: E402


@pytest.fixture()
def app_settings(tmp_path) -> Settings:
    base = tmp_path.resolve()
    return Settings(
        app_env="test",
        data_dir=base / "db",
        cache_ttl_seconds=5.0,
        media_root=base / "media",
        gallery_root=base / "gallery",
        album_art_root=base / "album_art",
        video_root=base / "videos",
        upload_dir=base / "uploads",
        path_config_file=base / "path-config.json",
        cors_origins=(),
        log_level="INFO",
    )


@pytest.fixture()
def app(app_settings):
    return create_app(app_settings)


@pytest.fixture()
def client(app):
    with TestClient(app) as test_client:
        yield test_client
