"""
Downloads submitted files and extracts their text.
PDF documents are decoded with PyMuPDF, everything else is read as text.
"""

import asyncio
import logging
import re
from pathlib import Path
from typing import Optional

import fitz
import httpx

from exceptions.exceptions import DownloadFailedError, ExtractionFailedError
from plagiarism.interfaces import TextExtractor

log = logging.getLogger(__name__)

DEFAULT_FETCH_TIMEOUT = 30.0

PDF_MAGIC = b"%PDF-"

# printable ASCII, tab, newline, carriage return and the Cyrillic block
_UNSUPPORTED_CHARS = re.compile(r"[^\x20-\x7e\t\n\r\u0400-\u04ff]")


def clean_raw_text(text: str) -> str:
    """Replace unsupported characters with spaces and collapse whitespace runs."""
    return " ".join(_UNSUPPORTED_CHARS.sub(" ", text).split())


def is_pdf(data: bytes) -> bool:
    return data.lstrip()[:len(PDF_MAGIC)] == PDF_MAGIC


def extract_text_from_pdf_bytes(data: bytes) -> str:
    try:
        doc = fitz.open(stream=data, filetype="pdf")
    except Exception as e:
        raise ExtractionFailedError(f"failed to open PDF: {e}") from e

    pages = []
    with doc:
        for page in doc:
            try:
                page_text = page.get_text("text")
            except Exception as e:
                log.debug(f"Skipping unreadable PDF page {page.number}: {e}")
                continue
            if page_text:
                pages.append(page_text)

    text = "\n".join(pages)
    if not text.strip():
        raise ExtractionFailedError("failed to extract text from PDF")
    return text


def extract_text_from_bytes(data: bytes) -> str:
    """Text of a downloaded file, detecting PDF content by its signature."""
    if is_pdf(data):
        return extract_text_from_pdf_bytes(data)
    return clean_raw_text(data.decode("utf-8", errors="replace"))


class HttpTextExtractor(TextExtractor):
    """
    Fetches file content from (pre-signed) URLs.

    Args:
        timeout: Per-request timeout in seconds
        client: Optional shared httpx client; created on demand otherwise
    """

    def __init__(self, timeout: float = DEFAULT_FETCH_TIMEOUT, client: Optional[httpx.AsyncClient] = None):
        self.timeout = timeout
        self._client = client
        self._owns_client = client is None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout, follow_redirects=True)
        return self._client

    async def download(self, url: str) -> bytes:
        """Body of url; the whole fetch, not each read, is bounded by the timeout."""
        try:
            response = await asyncio.wait_for(self.client.get(url, timeout=self.timeout), self.timeout)
            response.raise_for_status()
        except asyncio.TimeoutError as e:
            raise DownloadFailedError(f"failed to download file: no complete response in {self.timeout}s") from e
        except httpx.HTTPStatusError as e:
            raise DownloadFailedError(
                f"failed to download file: storage responded {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            raise DownloadFailedError(f"failed to download file: {e}") from e
        return response.content

    async def extract_text(self, locator: str) -> str:
        data = await self.download(locator)
        return await asyncio.to_thread(extract_text_from_bytes, data)

    async def close(self) -> None:
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None


class LocalTextExtractor(TextExtractor):
    """Reads files from the local filesystem; locators are paths or file:// URLs."""

    async def extract_text(self, locator: str) -> str:
        path = Path(locator.removeprefix("file://"))
        try:
            data = await asyncio.to_thread(path.read_bytes)
        except OSError as e:
            raise DownloadFailedError(f"failed to read file {path}: {e}") from e
        return await asyncio.to_thread(extract_text_from_bytes, data)
