# docuflow/storage/base.py

from __future__ import annotations
from dataclasses import dataclass
from typing import List, Protocol, runtime_checkable

JSON_MIME = "application/json"
MARKDOWN_MIME = "text/markdown"


@dataclass(frozen=True)
class SourceFile:
    id: str
    name: str
    mime_type: str = JSON_MIME


@runtime_checkable
class StorageClient(Protocol):
    """
    Capabilities the batch run needs from a storage service. Implementations
    are expected to be authenticated already and to raise StorageError on
    failure.
    """

    async def list_files(self, folder_id: str, mime_filter: str = JSON_MIME) -> List[SourceFile]:
        ...

    async def fetch_content(self, file_id: str) -> str:
        ...

    async def upload_file(self, name: str, content: str, parent_folder_id: str, mime_type: str) -> None:
        ...
