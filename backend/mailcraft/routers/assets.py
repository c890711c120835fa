"""
Per-user file upload, listing and public asset serving.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from fastapi.responses import FileResponse

from mailcraft import config
from mailcraft.auth import get_current_user
from mailcraft.services.mime_types import asset_mime_for
from mailcraft.services.storage import (
    list_user_files,
    resolve_asset_path,
    save_user_file,
)

router = APIRouter()

logger = logging.getLogger(__name__)


def _too_large() -> HTTPException:
    return HTTPException(
        status_code=413,
        detail=f"File exceeds the {config.MAX_UPLOAD_MB}MB limit",
    )


def _files_payload(user_id: str) -> list:
    return [f.model_dump(mode="json") for f in list_user_files(user_id)]


@router.post("/upload")
async def upload_file(
    file: Optional[UploadFile] = File(None),
    user_id: str = Depends(get_current_user),
):
    """
    Store an uploaded file in the caller's folder.

    Files with the same (sanitized) name are overwritten. Requires authentication.
    """
    if file is None:
        raise HTTPException(status_code=400, detail="No file uploaded")

    # Size check before reading the spooled upload into memory
    if file.size is not None and file.size > config.MAX_UPLOAD_BYTES:
        raise _too_large()

    content = await file.read()

    # Double-check after reading (size is not always reported)
    if len(content) > config.MAX_UPLOAD_BYTES:
        raise _too_large()

    try:
        path = save_user_file(content, user_id, file.filename)
    except (OSError, ValueError) as e:
        logger.error(f"Upload failed for user {user_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to store file")

    logger.info(f"Stored {path.name!r} ({len(content)} bytes) for user {user_id}")

    return {
        "success": True,
        "folder": user_id,
        "uploadedFile": {"filename": path.name, "path": str(path)},
        "files": _files_payload(user_id),
    }


@router.get("/files")
async def list_files(user_id: str = Depends(get_current_user)):
    """List the caller's uploaded files."""
    return {"files": _files_payload(user_id)}


@router.get("/assets/{folder}/{filename}")
async def get_asset(folder: str, filename: str):
    """
    Serve an uploaded file inline (for <img> tags and iframes in email previews).

    Public: asset URLs are embedded in generated emails.
    """
    try:
        path = resolve_asset_path(folder, filename)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid asset path")
    except FileNotFoundError:
        raise HTTPException(status_code=404, detail="File not found")

    if not path.is_file():
        raise HTTPException(status_code=400, detail="Requested path is not a file")

    return FileResponse(
        path,
        media_type=asset_mime_for(path.name),
        headers={
            "Cache-Control": "public, max-age=3600",
            "Cross-Origin-Resource-Policy": "cross-origin",
        },
    )
