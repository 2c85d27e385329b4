"""
Media library use cases: music/video listings, gallery browsing, album art
lookup and uploads. All paths are kept inside their configured roots.
"""

from __future__ import annotations

import logging
import re
import secrets
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Iterable, Mapping, Optional

from mediadb.core.errors import InvalidInputError, NotFoundError
from mediadb.core.utils import epoch_ms, resolve_within_root

logger = logging.getLogger(__name__)

PLAYABLE_EXTENSIONS = (".mp3", ".mp4", ".wav", ".m4a", ".m4v")
IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png", ".webp", ".gif")
VIDEO_EXTENSIONS = (".mp4", ".m4v", ".webm", ".mov", ".avi", ".mkv")

# (subfolder of the media root, category label); "" means top-level files only
LIBRARY_SECTIONS = (
    ("", "Original"),
    ("live_remix", "LIVE REMIX"),
    ("rare", "Rare / Unreleased"),
    ("videos", "Videos"),
)

_UNSAFE_FILENAME = re.compile(r"[^a-zA-Z0-9.-]")
_UNSAFE_TITLE = re.compile(r'[/\\:*?"<>|]')


@dataclass
class MediaFile:
    name: str
    path: str
    type: str
    category: str
    thumbnail: Optional[str]


@dataclass
class GalleryFolder:
    name: str
    path: str
    imageCount: int


@dataclass
class GalleryImage:
    name: str
    path: str
    folder: str


def _join(prefix: str, name: str) -> str:
    return f"{prefix}/{name}" if prefix else name


def _thumbnail_for(directory: Path, stem: str, prefix: str) -> Optional[str]:
    for ext in IMAGE_EXTENSIONS:
        if (directory / f"{stem}{ext}").is_file():
            return _join(prefix, f"{stem}{ext}")
    return None


def _sorted_entries(directory: Path) -> list[Path]:
    return sorted(directory.iterdir(), key=lambda p: p.name)


def _scan(directory: Path, category: str, prefix: str, extensions: Iterable[str], recursive: bool) -> list[MediaFile]:
    files: list[MediaFile] = []
    if not directory.is_dir():
        return files
    for entry in _sorted_entries(directory):
        rel = _join(prefix, entry.name)
        if entry.is_dir():
            if recursive:
                files.extend(_scan(entry, f"{category} / {entry.name}", rel, extensions, recursive))
            continue
        ext = entry.suffix.lower()
        if ext in IMAGE_EXTENSIONS or ext not in extensions:
            continue
        files.append(
            MediaFile(
                name=entry.name,
                path=rel,
                type=ext.lstrip("."),
                category=category,
                thumbnail=_thumbnail_for(directory, entry.stem, prefix),
            )
        )
    return files


def list_media_files(media_root: Path) -> list[dict]:
    """Playable files grouped by library section; creates the root on first use."""
    if not media_root.exists():
        media_root.mkdir(parents=True, exist_ok=True)
        return []
    files: list[MediaFile] = []
    for folder, category in LIBRARY_SECTIONS:
        recursive = bool(folder)
        files.extend(_scan(media_root / folder, category, folder, PLAYABLE_EXTENSIONS, recursive))
    return [asdict(f) for f in files]


def list_videos(video_root: Path, relative: str = "") -> dict:
    """Recursive listing of video files below ``relative`` (inside ``video_root``)."""
    base = resolve_within_root(video_root, relative)
    if not base.is_dir():
        raise NotFoundError(f"Directory not found: {relative or '.'}")
    prefix = base.relative_to(video_root.resolve()).as_posix()
    prefix = "" if prefix == "." else prefix
    files = []
    for entry in _sorted_entries(base):
        if entry.is_dir():
            found = _scan(entry, entry.name, _join(prefix, entry.name), VIDEO_EXTENSIONS, recursive=True)
        else:
            found = _scan_single(entry, prefix)
        files.extend(found)
    return {"files": [asdict(f) for f in files], "basePath": prefix, "count": len(files)}


def _scan_single(entry: Path, prefix: str) -> list[MediaFile]:
    ext = entry.suffix.lower()
    if ext not in VIDEO_EXTENSIONS:
        return []
    return [
        MediaFile(
            name=entry.name,
            path=_join(prefix, entry.name),
            type=ext.lstrip("."),
            category="Videos",
            thumbnail=_thumbnail_for(entry.parent, entry.stem, prefix),
        )
    ]


def _count_images(folder: Path) -> int:
    try:
        return sum(1 for p in folder.iterdir() if p.is_file() and p.suffix.lower() in IMAGE_EXTENSIONS)
    except OSError as exc:
        logger.warning("cannot read gallery folder %s: %s", folder, exc)
        return 0


def list_gallery_folders(gallery_root: Path) -> list[dict]:
    if not gallery_root.is_dir():
        logger.warning("gallery root does not exist: %s", gallery_root)
        return []
    folders = []
    for entry in _sorted_entries(gallery_root):
        if not entry.is_dir():
            continue
        count = _count_images(entry)
        if count > 0:
            folders.append(GalleryFolder(name=entry.name, path=entry.name, imageCount=count))
    return [asdict(f) for f in folders]


def list_gallery_images(gallery_root: Path, folder: str) -> list[dict]:
    directory = resolve_within_root(gallery_root, folder)
    if not directory.is_dir():
        return []
    prefix = directory.relative_to(gallery_root.resolve()).as_posix()
    images = [
        GalleryImage(name=p.name, path=_join(prefix, p.name), folder=folder)
        for p in _sorted_entries(directory)
        if p.is_file() and p.suffix.lower() in IMAGE_EXTENSIONS
    ]
    return [asdict(i) for i in images]


def find_album_art(album_art_root: Path, album_title: str) -> Optional[Path]:
    """Look for ``<title><ext>``, then the title with filename-hostile characters removed."""
    if not album_title or not album_art_root.is_dir():
        return None
    candidates = [album_title, _UNSAFE_TITLE.sub("", album_title).strip()]
    for stem in candidates:
        if not stem:
            continue
        for ext in IMAGE_EXTENSIONS:
            path = album_art_root / f"{stem}{ext}"
            if path.is_file() and path.resolve().is_relative_to(album_art_root.resolve()):
                return path
    return None


def _track_titles(album: Mapping) -> list[str]:
    titles = [t for t in album.get("tracks") or [] if isinstance(t, str)]
    for disc in album.get("discs") or []:
        if not isinstance(disc, Mapping):
            continue
        for track in disc.get("tracks") or []:
            if isinstance(track, Mapping) and isinstance(track.get("title"), str):
                titles.append(track["title"])
            elif isinstance(track, str):
                titles.append(track)
    return titles


def album_title_for_song(albums: Iterable[Mapping], song_title: str) -> Optional[str]:
    """Title of the first album with a track containing ``song_title`` (case-insensitive)."""
    needle = (song_title or "").lower()
    if not needle:
        return None
    for album in albums:
        if any(needle in title.lower() for title in _track_titles(album)):
            return album.get("title")
    return None


def sanitize_upload_name(filename: str) -> str:
    """``"My Song.mp3"`` -> ``"My_Song-<epoch ms>-<random>.mp3"``."""
    safe = _UNSAFE_FILENAME.sub("_", Path(filename).name)
    stem, dot, ext = safe.rpartition(".")
    if not dot or not stem:
        stem, ext = safe, ""
    unique = f"{epoch_ms()}-{secrets.randbelow(10**9)}"
    return f"{stem}-{unique}.{ext}" if ext else f"{stem}-{unique}"


def save_upload(upload_dir: Path, filename: str, data: bytes) -> str:
    if not filename:
        raise InvalidInputError("No file uploaded")
    name = sanitize_upload_name(filename)
    upload_dir.mkdir(parents=True, exist_ok=True)
    (upload_dir / name).write_bytes(data)
    logger.info("stored upload %s (%d bytes)", name, len(data))
    return name
