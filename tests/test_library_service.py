from __future__ import annotations

import re

import pytest

from mediadb.core.errors import AccessDeniedError, InvalidInputError, NotFoundError
from mediadb.services import library_service


def _touch(path, data: bytes = b"x"):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)


def test_list_media_files_groups_by_section(tmp_path):
    root = tmp_path / "media"
    _touch(root / "song.mp3")
    _touch(root / "song.jpg")
    _touch(root / "notes.txt")
    _touch(root / "other" / "ignored.mp3")
    _touch(root / "live_remix" / "2019" / "a.mp3")
    _touch(root / "rare" / "b.wav")
    _touch(root / "rare" / "b.png")

    files = library_service.list_media_files(root)

    assert files == [
        {"name": "song.mp3", "path": "song.mp3", "type": "mp3", "category": "Original", "thumbnail": "song.jpg"},
        {"name": "a.mp3", "path": "live_remix/2019/a.mp3", "type": "mp3", "category": "LIVE REMIX / 2019", "thumbnail": None},
        {"name": "b.wav", "path": "rare/b.wav", "type": "wav", "category": "Rare / Unreleased", "thumbnail": "rare/b.png"},
    ]


def test_list_media_files_creates_missing_root(tmp_path):
    root = tmp_path / "media"
    assert library_service.list_media_files(root) == []
    assert root.is_dir()


def test_list_videos_recurses_and_stays_inside_root(tmp_path):
    root = tmp_path / "videos"
    _touch(root / "live" / "clip.mp4")
    _touch(root / "live" / "clip.jpg")
    _touch(root / "top.webm")
    _touch(root / "readme.txt")

    result = library_service.list_videos(root)
    assert result["count"] == 2
    assert result["files"][0] == {
        "name": "clip.mp4", "path": "live/clip.mp4", "type": "mp4", "category": "live", "thumbnail": "live/clip.jpg",
    }
    assert result["files"][1]["category"] == "Videos"

    sub = library_service.list_videos(root, "live")
    assert sub["basePath"] == "live"
    assert [f["path"] for f in sub["files"]] == ["live/clip.mp4"]

    with pytest.raises(AccessDeniedError):
        library_service.list_videos(root, "../")
    with pytest.raises(NotFoundError):
        library_service.list_videos(root, "missing")


def test_gallery_folders_and_images(tmp_path):
    root = tmp_path / "gallery"
    _touch(root / "2019 Tour" / "a.jpg")
    _touch(root / "2019 Tour" / "b.PNG")
    _touch(root / "2019 Tour" / "c.txt")
    (root / "empty").mkdir()
    _touch(root / "loose.jpg")

    assert library_service.list_gallery_folders(root) == [
        {"name": "2019 Tour", "path": "2019 Tour", "imageCount": 2}
    ]
    images = library_service.list_gallery_images(root, "2019 Tour")
    assert [i["path"] for i in images] == ["2019 Tour/a.jpg", "2019 Tour/b.PNG"]
    assert library_service.list_gallery_images(root, "nope") == []
    assert library_service.list_gallery_folders(tmp_path / "missing") == []


def test_find_album_art_exact_and_normalized(tmp_path):
    root = tmp_path / "art"
    _touch(root / "Tree.png")
    _touch(root / "EYE LIFE.jpg")

    assert library_service.find_album_art(root, "Tree") == root / "Tree.png"
    assert library_service.find_album_art(root, "EYE/ LIFE") == root / "EYE LIFE.jpg"
    assert library_service.find_album_art(root, "Missing") is None
    assert library_service.find_album_art(tmp_path / "nope", "Tree") is None


def test_find_album_art_strips_hostile_characters(tmp_path):
    root = tmp_path / "art"
    _touch(root / "Lip.jpg")
    assert library_service.find_album_art(root, 'Lip?') == root / "Lip.jpg"


def test_album_title_for_song_checks_discs_and_flat_tracks():
    albums = [
        {"id": "d1", "title": "Tree", "discs": [{"discNumber": 1, "tracks": [{"id": "t1", "title": "Dragon Night"}]}]},
        {"id": "d2", "title": "Entertainment", "tracks": ["Starlight Parade"]},
    ]
    assert library_service.album_title_for_song(albums, "dragon") == "Tree"
    assert library_service.album_title_for_song(albums, "STARLIGHT") == "Entertainment"
    assert library_service.album_title_for_song(albums, "unknown") is None
    assert library_service.album_title_for_song(albums, "") is None


def test_sanitize_upload_name():
    name = library_service.sanitize_upload_name("My Song (live).mp3")
    assert re.fullmatch(r"My_Song__live_-\d+-\d+\.mp3", name)
    assert re.fullmatch(r"noext-\d+-\d+", library_service.sanitize_upload_name("noext"))
    assert "/" not in library_service.sanitize_upload_name("../../etc/passwd")


def test_save_upload_writes_file(tmp_path):
    name = library_service.save_upload(tmp_path / "uploads", "cover.png", b"png-bytes")
    assert (tmp_path / "uploads" / name).read_bytes() == b"png-bytes"
    with pytest.raises(InvalidInputError):
        library_service.save_upload(tmp_path / "uploads", "", b"")
