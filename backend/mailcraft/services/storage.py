"""
Local disk storage for user uploads.
Handles saving, listing and resolving files under UPLOADS_DIR/{user_id}/.
"""

import re
from datetime import datetime, timezone
from pathlib import Path
from typing import List
from uuid import uuid4

from pydantic import BaseModel

from mailcraft import config


class StoredFile(BaseModel):
    """Metadata of one file in a user's upload folder."""

    name: str
    size: int
    created: datetime
    modified: datetime


def uploads_root() -> Path:
    return Path(config.UPLOADS_DIR).resolve()


def sanitize_filename(filename: str | None) -> str:
    """
    Replace spaces and special chars with underscores.

    Keeps the original name otherwise so re-uploads overwrite the previous file.
    Empty or dot-only names get a generated ``upload_<hex>`` name.
    """
    sanitized = re.sub(r'[^\w\-.]', '_', filename or "")
    if not sanitized.strip("."):
        return f"upload_{uuid4().hex}"
    return sanitized


def user_folder(user_id: str) -> Path:
    return _inside_root(uploads_root() / sanitize_filename(user_id))


def save_user_file(content: bytes, user_id: str, filename: str | None) -> Path:
    """
    Write an uploaded file to the user's folder.

    Args:
        content: Binary content of the file
        user_id: Owner; also the folder name
        filename: Original filename (sanitized before use)

    Returns:
        Absolute path of the stored file
    """
    folder = user_folder(user_id)
    folder.mkdir(parents=True, exist_ok=True)

    path = _inside_root(folder / sanitize_filename(filename))
    path.write_bytes(content)
    return path


def list_user_files(user_id: str) -> List[StoredFile]:
    """Return metadata for every file in the user's folder, sorted by name."""
    folder = user_folder(user_id)
    if not folder.is_dir():
        return []

    files = []
    for entry in sorted(folder.iterdir()):
        if not entry.is_file():
            continue
        stats = entry.stat()
        files.append(
            StoredFile(
                name=entry.name,
                size=stats.st_size,
                # st_ctime is the closest portable stand-in for creation time
                created=datetime.fromtimestamp(stats.st_ctime, tz=timezone.utc),
                modified=datetime.fromtimestamp(stats.st_mtime, tz=timezone.utc),
            )
        )
    return files


def resolve_asset_path(folder: str, filename: str) -> Path:
    """
    Resolve a public asset path under the uploads root.

    Raises:
        ValueError: The path escapes the uploads root
        FileNotFoundError: Nothing exists at the path
    """
    path = _inside_root(uploads_root() / folder / filename)
    if not path.exists():
        raise FileNotFoundError(f"File not found: {folder}/{filename}")
    return path


def _inside_root(path: Path) -> Path:
    root = uploads_root()
    resolved = path.resolve()
    if resolved != root and root not in resolved.parents:
        raise ValueError(f"Path escapes uploads directory: {path}")
    return resolved
