from __future__ import annotations

import json

import pytest

from mediadb.core import config as core_config


@pytest.fixture()
def fresh_settings(tmp_path, monkeypatch):
    """Run get_settings against a temporary working directory and clean env."""
    monkeypatch.chdir(tmp_path)
    for name in (
        "APP_ENV",
        "MEDIADB_DATA_DIR",
        "MEDIADB_CACHE_TTL_SECONDS",
        "MEDIADB_MEDIA_ROOT",
        "MEDIADB_GALLERY_ROOT",
        "MEDIADB_PATH_CONFIG",
        "MEDIADB_CORS_ORIGINS",
    ):
        monkeypatch.delenv(name, raising=False)
    core_config.get_settings.cache_clear()
    yield
    core_config.get_settings.cache_clear()


def test_defaults_are_relative_to_cwd(fresh_settings, tmp_path):
    settings = core_config.get_settings()
    base = tmp_path.resolve()
    assert settings.app_env == "dev"
    assert settings.data_dir == base / "data" / "db"
    assert settings.media_root == base / "programs" / "media"
    assert settings.cache_ttl_seconds == 5.0
    assert "http://localhost:3000" in settings.cors_origins


def test_env_overrides_and_bad_numbers(fresh_settings, tmp_path, monkeypatch):
    monkeypatch.setenv("APP_ENV", "PROD")
    monkeypatch.setenv("MEDIADB_DATA_DIR", str(tmp_path / "elsewhere"))
    monkeypatch.setenv("MEDIADB_CACHE_TTL_SECONDS", "not-a-number")
    monkeypatch.setenv("MEDIADB_CORS_ORIGINS", "https://fans.example/, ")
    settings = core_config.get_settings()
    assert settings.app_env == "prod"
    assert settings.data_dir == (tmp_path / "elsewhere").resolve()
    assert settings.cache_ttl_seconds == 5.0
    assert settings.cors_origins == ("https://fans.example",)


def test_path_config_file_overrides_media_roots(fresh_settings, tmp_path):
    (tmp_path / "path-config.json").write_text(
        json.dumps({"galleryRoot": str(tmp_path / "photos"), "unknown": "ignored", "mediaRoot": ""}),
        encoding="utf-8",
    )
    settings = core_config.get_settings()
    assert settings.gallery_root == (tmp_path / "photos").resolve()
    assert settings.media_root == tmp_path.resolve() / "programs" / "media"
    assert settings.path_settings()["galleryRoot"] == str((tmp_path / "photos").resolve())
