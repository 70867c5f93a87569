"""
Client of the storage service, which owns the roster of submitted files.
"""

import logging
from datetime import datetime
from typing import List, Optional
from urllib.parse import quote

import httpx
from pydantic import BaseModel

from exceptions.exceptions import UpstreamUnavailableError
from plagiarism.interfaces import FileCatalogProvider
from plagiarism.schemas import FileDescriptor

log = logging.getLogger(__name__)


class CatalogItem(BaseModel):
    student_id: str
    updated_at: datetime


class CatalogListing(BaseModel):
    items: List[CatalogItem] = []


class DownloadUrl(BaseModel):
    url: str


class HttpFileCatalog(FileCatalogProvider):
    """
    Lists a task's files and resolves an internal download URL for each of them.

    Args:
        base_url: Storage service root, e.g. http://storage:5002
        timeout: Per-request timeout in seconds
        client: Optional shared httpx client
    """

    def __init__(self, base_url: str, timeout: float = 10.0, client: Optional[httpx.AsyncClient] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = client
        self._owns_client = client is None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout)
        return self._client

    async def list_task_files(self, task_id: str) -> List[FileDescriptor]:
        try:
            response = await self.client.get(f"{self.base_url}/tasks/{quote(task_id, safe='')}/files")
            response.raise_for_status()
            listing = CatalogListing.model_validate(response.json())

            files = []
            for item in listing.items:
                url = await self._generate_download_url(task_id, item.student_id)
                files.append(FileDescriptor(
                    student_id=item.student_id,
                    updated_at=item.updated_at,
                    content_locator=url,
                ))
        except httpx.HTTPError as e:
            log.error(f"[Task {task_id}] Failed to contact storage service: {e}")
            raise UpstreamUnavailableError("failed to connect to storage service") from e
        except ValueError as e:
            log.error(f"[Task {task_id}] Malformed storage service response: {e}")
            raise UpstreamUnavailableError("storage service returned a malformed response") from e

        log.debug(f"[Task {task_id}] Storage service listed {len(files)} files")
        return files

    async def _generate_download_url(self, task_id: str, student_id: str) -> str:
        response = await self.client.post(
            f"{self.base_url}/files/download-url",
            json={"student_id": student_id, "task_id": task_id, "from_inside": True},
        )
        response.raise_for_status()
        return DownloadUrl.model_validate(response.json()).url

    async def close(self) -> None:
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None
