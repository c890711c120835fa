"""
Extension-based MIME type lookup.

Two closed tables: one for attachments sent to the model, and a wider one for
serving uploaded assets back to browsers.
"""

import os

DEFAULT_MIME_TYPE = "application/octet-stream"

MIME_TYPES = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".webp": "image/webp",
    ".pdf": "application/pdf",
    ".txt": "text/plain",
    ".md": "text/markdown",
    ".csv": "text/csv",
    ".json": "application/json",
    ".xml": "application/xml",
    ".html": "text/html",
    ".svg": "image/svg+xml",
}

ASSET_MIME_TYPES = {
    **MIME_TYPES,
    ".css": "text/css",
    ".js": "application/javascript",
    ".mp4": "video/mp4",
    ".mp3": "audio/mpeg",
    ".wav": "audio/wav",
}


def _extension(path_or_ext: str) -> str:
    # Accept a bare extension (".PNG") as well as a full path
    value = os.fspath(path_or_ext)
    ext = os.path.splitext(value)[1]
    if not ext and value.startswith("."):
        ext = value
    return ext.lower()


def mime_for(path_or_ext) -> str:
    """Return the MIME type for a file path or extension, case-insensitive."""
    return MIME_TYPES.get(_extension(path_or_ext), DEFAULT_MIME_TYPE)


def asset_mime_for(path_or_ext) -> str:
    """Like ``mime_for`` but covers the extra types served from /api/assets."""
    return ASSET_MIME_TYPES.get(_extension(path_or_ext), DEFAULT_MIME_TYPE)
