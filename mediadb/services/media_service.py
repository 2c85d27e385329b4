"""Byte-range file responses for seekable audio/video playback."""
from __future__ import annotations

import mimetypes
from pathlib import Path
from typing import Iterator, Optional, Tuple

from fastapi.responses import StreamingResponse

from mediadb.core.errors import InvalidInputError, NotFoundError, RangeNotSatisfiableError
from mediadb.core.utils import resolve_within_root

CHUNK_SIZE = 8192 * 16

MEDIA_TYPES = {
    ".mp3": "audio/mpeg",
    ".m4a": "audio/mp4",
    ".wav": "audio/wav",
    ".mp4": "video/mp4",
    ".m4v": "video/mp4",
    ".webm": "video/webm",
    ".mov": "video/quicktime",
    ".avi": "video/x-msvideo",
    ".mkv": "video/x-matroska",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".webp": "image/webp",
    ".gif": "image/gif",
}


def content_type_for(path: Path | str) -> str:
    ext = Path(path).suffix.lower()
    if ext in MEDIA_TYPES:
        return MEDIA_TYPES[ext]
    return mimetypes.guess_type(str(path))[0] or "application/octet-stream"


def parse_range(header: Optional[str], size: int) -> Optional[Tuple[int, int]]:
    """
    Parse a ``Range`` header into an inclusive ``(start, end)`` pair.

    Supports ``bytes=a-b``, ``bytes=a-`` and suffix ``bytes=-n``; only the first
    range of a multi-range header is used. Returns None without a header.
    """
    if not header or not header.strip():
        return None
    try:
        unit, _, ranges = header.strip().partition("=")
        if unit.strip().lower() != "bytes" or not ranges:
            raise ValueError
        first = ranges.split(",", 1)[0].strip()
        start_s, sep, end_s = first.partition("-")
        if not sep:
            raise ValueError
        if any(bound and not (bound.isascii() and bound.isdigit()) for bound in (start_s, end_s)):
            raise ValueError
        if not start_s:
            suffix = int(end_s)
            if suffix <= 0:
                raise ValueError
            start, end = max(0, size - suffix), size - 1
        else:
            start = int(start_s)
            end = int(end_s) if end_s else size - 1
            end = min(end, size - 1)
        if start < 0 or start > end or start >= size:
            raise ValueError
    except ValueError:
        raise RangeNotSatisfiableError(size, header) from None
    return start, end


def _iter_file(path: Path, start: int, length: int) -> Iterator[bytes]:
    with path.open("rb") as f:
        f.seek(start)
        remaining = length
        while remaining > 0:
            data = f.read(min(CHUNK_SIZE, remaining))
            if not data:
                break
            yield data
            remaining -= len(data)


def build_media_response(path: Path, range_header: Optional[str] = None, *, headers: dict | None = None) -> StreamingResponse:
    """Whole file (200) or the requested slice (206) of ``path``."""
    if not path.is_file():
        raise NotFoundError("File not found")
    size = path.stat().st_size
    media_type = content_type_for(path)
    extra = {"Accept-Ranges": "bytes", **(headers or {})}

    byte_range = parse_range(range_header, size)
    if byte_range is None:
        extra["Content-Length"] = str(size)
        return StreamingResponse(_iter_file(path, 0, size), status_code=200, media_type=media_type, headers=extra)

    start, end = byte_range
    length = end - start + 1
    extra["Content-Range"] = f"bytes {start}-{end}/{size}"
    extra["Content-Length"] = str(length)
    return StreamingResponse(_iter_file(path, start, length), status_code=206, media_type=media_type, headers=extra)


def stream_from_root(root: Path, relative: Optional[str], range_header: Optional[str] = None) -> StreamingResponse:
    """Resolve ``relative`` inside ``root`` and stream it, honoring ``Range``."""
    if not relative:
        raise InvalidInputError("File parameter is required")
    path = resolve_within_root(root, relative)
    return build_media_response(path, range_header)
