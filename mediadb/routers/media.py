from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, File, Header, Request, UploadFile
from fastapi.responses import FileResponse

from mediadb.core.errors import InvalidInputError, NotFoundError
from mediadb.core.utils import resolve_within_root
from mediadb.routers.state import settings_from, store_from
from mediadb.services import library_service
from mediadb.services.media_service import content_type_for, stream_from_root

router = APIRouter(prefix="/api", tags=["media"])


@router.get("/media")
def stream_media(request: Request, file: Optional[str] = None, range_header: Optional[str] = Header(None, alias="Range")):
    return stream_from_root(settings_from(request).media_root, file, range_header)


@router.get("/files")
def list_files(request: Request):
    return {"files": library_service.list_media_files(settings_from(request).media_root)}


@router.get("/videos")
def list_videos(request: Request, path: str = ""):
    return library_service.list_videos(settings_from(request).video_root, path)


@router.get("/videos/stream")
def stream_video(request: Request, file: Optional[str] = None, range_header: Optional[str] = Header(None, alias="Range")):
    return stream_from_root(settings_from(request).video_root, file, range_header)


@router.get("/gallery")
def gallery(request: Request, folder: Optional[str] = None, file: Optional[str] = None):
    root = settings_from(request).gallery_root
    if file:
        path = resolve_within_root(root, file)
        if not path.is_file():
            raise NotFoundError("File not found")
        return FileResponse(
            path,
            media_type=content_type_for(path),
            headers={"Cache-Control": "public, max-age=3600"},
        )
    if folder:
        return {"images": library_service.list_gallery_images(root, folder)}
    return {"folders": library_service.list_gallery_folders(root)}


@router.get("/album-art")
def album_art(request: Request, album: Optional[str] = None, song: Optional[str] = None):
    root = settings_from(request).album_art_root
    art = library_service.find_album_art(root, album) if album else None
    if art is None and song:
        albums = store_from(request).load_all("discography")
        title = library_service.album_title_for_song(albums, song)
        if title:
            art = library_service.find_album_art(root, title)
    if art is None:
        raise NotFoundError("Album art not found")
    return FileResponse(
        art,
        media_type=content_type_for(art),
        headers={"Cache-Control": "public, max-age=86400"},
    )


@router.post("/upload")
async def upload(request: Request, file: Optional[UploadFile] = File(None)):
    if file is None or not file.filename:
        raise InvalidInputError("No file uploaded")
    data = await file.read()
    name = library_service.save_upload(settings_from(request).upload_dir, file.filename, data)
    return {"success": True, "url": f"/uploads/{name}", "filename": name}
