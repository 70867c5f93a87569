"""Tests for the storage service catalog client."""

import json
from datetime import datetime, timezone

import httpx
import pytest

from exceptions.exceptions import UpstreamUnavailableError
from plagiarism.catalog import HttpFileCatalog

BASE_URL = "http://storage:5002"


def catalog_for(handler) -> HttpFileCatalog:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return HttpFileCatalog(BASE_URL, client=client)


class TestHttpFileCatalog:
    """Tests for HttpFileCatalog."""

    async def test_lists_files_with_download_urls(self):
        requests = []

        def handler(request):
            requests.append(request)
            if request.method == "GET":
                return httpx.Response(200, json={"items": [
                    {"student_id": "s1", "updated_at": "2026-03-01T10:00:00Z"},
                    {"student_id": "s2", "updated_at": "2026-03-01T13:00:00+03:00"},
                ]})
            body = json.loads(request.content)
            return httpx.Response(200, json={"url": f"http://minio/{body['task_id']}/{body['student_id']}"})

        files = await catalog_for(handler).list_task_files("T1")

        assert [(f.student_id, f.content_locator) for f in files] == [
            ("s1", "http://minio/T1/s1"),
            ("s2", "http://minio/T1/s2"),
        ]
        assert files[0].updated_at == datetime(2026, 3, 1, 10, 0, tzinfo=timezone.utc)
        assert files[1].updated_at == datetime(2026, 3, 1, 10, 0, tzinfo=timezone.utc)

        assert requests[0].url == f"{BASE_URL}/tasks/T1/files"
        assert requests[1].url == f"{BASE_URL}/files/download-url"
        assert json.loads(requests[1].content) == {"student_id": "s1", "task_id": "T1", "from_inside": True}

    async def test_task_id_is_encoded_in_path(self):
        urls = []

        def handler(request):
            urls.append(str(request.url))
            return httpx.Response(200, json={"items": []})

        catalog = catalog_for(handler)
        await catalog.list_task_files("other?x=1#frag")
        await catalog.list_task_files("../admin")

        assert urls == [
            f"{BASE_URL}/tasks/other%3Fx%3D1%23frag/files",
            f"{BASE_URL}/tasks/..%2Fadmin/files",
        ]

    async def test_empty_listing(self):
        files = await catalog_for(lambda request: httpx.Response(200, json={})).list_task_files("T1")
        assert files == []

    async def test_error_status(self):
        with pytest.raises(UpstreamUnavailableError):
            await catalog_for(lambda request: httpx.Response(500)).list_task_files("T1")

    async def test_download_url_failure(self):
        def handler(request):
            if request.method == "GET":
                return httpx.Response(200, json={"items": [
                    {"student_id": "s1", "updated_at": "2026-03-01T10:00:00Z"},
                ]})
            return httpx.Response(404)

        with pytest.raises(UpstreamUnavailableError):
            await catalog_for(handler).list_task_files("T1")

    async def test_malformed_response(self):
        def handler(request):
            return httpx.Response(200, json={"items": [{"student_id": "s1"}]})

        with pytest.raises(UpstreamUnavailableError):
            await catalog_for(handler).list_task_files("T1")

    async def test_not_json(self):
        def handler(request):
            return httpx.Response(200, content=b"<html>oops</html>")

        with pytest.raises(UpstreamUnavailableError):
            await catalog_for(handler).list_task_files("T1")

    async def test_connection_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(UpstreamUnavailableError):
            await catalog_for(handler).list_task_files("T1")
