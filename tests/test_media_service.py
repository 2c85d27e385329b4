from __future__ import annotations

import pytest

from mediadb.core.errors import AccessDeniedError, RangeNotSatisfiableError
from mediadb.core.utils import resolve_within_root
from mediadb.services.media_service import content_type_for, parse_range


@pytest.mark.parametrize(
    "header, expected",
    [
        (None, None),
        ("", None),
        ("bytes=200-299", (200, 299)),
        ("bytes=900-", (900, 999)),
        ("bytes=-100", (900, 999)),
        ("bytes=-5000", (0, 999)),
        ("bytes=0-5000", (0, 999)),
        ("bytes=0-9, 20-29", (0, 9)),
        ("BYTES=10-10", (10, 10)),
    ],
)
def test_parse_range(header, expected):
    assert parse_range(header, 1000) == expected


@pytest.mark.parametrize(
    "header",
    [
        "bytes=1000-",
        "bytes=5-2",
        "items=0-10",
        "bytes=abc-",
        "bytes=-0",
        "bytes=10",
        "bytes=",
        "bytes=1_0-2_0",
        "bytes=+5-10",
        "bytes=0-+9",
        "bytes=10 - 20",
        "bytes=--5",
        "bytes=\u0663-9",
    ],
)
def test_parse_range_rejects_unsatisfiable(header):
    with pytest.raises(RangeNotSatisfiableError) as info:
        parse_range(header, 1000)
    assert info.value.size == 1000
    assert info.value.status_code == 416


def test_parse_range_on_empty_file():
    with pytest.raises(RangeNotSatisfiableError):
        parse_range("bytes=0-", 0)


def test_content_type_for_media_extensions():
    assert content_type_for("a/b/song.MP3") == "audio/mpeg"
    assert content_type_for("clip.m4v") == "video/mp4"
    assert content_type_for("clip.mkv") == "video/x-matroska"
    assert content_type_for("cover.webp") == "image/webp"
    assert content_type_for("notes.unknownext") == "application/octet-stream"


def test_resolve_within_root_allows_subdirectories(tmp_path):
    root = tmp_path / "media"
    assert resolve_within_root(root, "live/2019/a.mp3") == (root / "live" / "2019" / "a.mp3").resolve()
    assert resolve_within_root(root, "") == root.resolve()
    assert resolve_within_root(root, "/abs/looking.mp3") == (root / "abs" / "looking.mp3").resolve()


@pytest.mark.parametrize("relative", ["../secret.txt", "live/../../secret.txt", "..\\secret.txt"])
def test_resolve_within_root_blocks_escape(tmp_path, relative):
    with pytest.raises(AccessDeniedError):
        resolve_within_root(tmp_path / "media", relative)


def test_resolve_within_root_rejects_sibling_with_common_prefix(tmp_path):
    (tmp_path / "media-private").mkdir()
    with pytest.raises(AccessDeniedError):
        resolve_within_root(tmp_path / "media", "../media-private/x.mp3")
