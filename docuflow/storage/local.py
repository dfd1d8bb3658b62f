# docuflow/storage/local.py

from __future__ import annotations
import asyncio
import mimetypes
from pathlib import Path
from typing import List

from docuflow.errors import StorageError
from docuflow.storage.base import JSON_MIME, SourceFile
from docuflow.utils.io import list_files, read_text, to_path, write_text
from docuflow.utils.logger import get_logger

log = get_logger("storage.local")

_EXTRA_TYPES = {".md": "text/markdown", ".json": JSON_MIME}


def guess_mime(path: Path) -> str:
    suffix = path.suffix.lower()
    if suffix in _EXTRA_TYPES:
        return _EXTRA_TYPES[suffix]
    return mimetypes.guess_type(path.name)[0] or "application/octet-stream"


class LocalFolderStorage:
    """
    Storage collaborator over the local filesystem.

    Folder ids are directory paths, file ids are file paths. Listing is
    non-recursive and sorted by name; uploads are atomic and overwrite a
    same-named file.
    """

    async def list_files(self, folder_id: str, mime_filter: str = JSON_MIME) -> List[SourceFile]:
        folder = to_path(folder_id)
        if not folder.is_dir():
            raise StorageError(f"source folder not found: {folder}")
        try:
            paths = await asyncio.to_thread(list_files, folder)
        except OSError as e:
            raise StorageError(f"cannot list {folder}: {e}") from e
        files = [
            SourceFile(id=str(p), name=p.name, mime_type=guess_mime(p))
            for p in paths
        ]
        return [f for f in files if not mime_filter or f.mime_type == mime_filter]

    async def fetch_content(self, file_id: str) -> str:
        try:
            return await asyncio.to_thread(read_text, file_id)
        except (OSError, UnicodeDecodeError) as e:
            raise StorageError(f"cannot read {file_id}: {e}") from e

    async def upload_file(self, name: str, content: str, parent_folder_id: str, mime_type: str) -> None:
        if not name or Path(name).name != name:
            raise StorageError(f"refusing to write outside the destination folder: {name!r}")
        target = to_path(parent_folder_id) / name
        try:
            await asyncio.to_thread(write_text, target, content)
        except OSError as e:
            raise StorageError(f"cannot write {target}: {e}") from e
        log.debug("wrote %s (%s, %d chars)", target, mime_type, len(content))
