"""Tests for the HTTP surface."""

import pytest
from fastapi.testclient import TestClient

from app import create_app
from exceptions.exceptions import DownloadFailedError, ExtractionFailedError

from conftest import make_file


@pytest.fixture
def client(service):
    return TestClient(create_app(service))


class TestReportEndpoint:
    """Tests for GET /plagiarism/{task_id}/report."""

    def test_report(self, client, catalog):
        catalog.set_roster("T1", [make_file("s1"), make_file("s2"), make_file("s3")])

        response = client.get("/plagiarism/T1/report")

        assert response.status_code == 200
        body = response.json()
        assert body["task_id"] == "T1"
        assert body["started_at"].startswith("2026-03-01T12:00:00")
        assert [(r["student"], r["matched_student"], r["max_similarity"]) for r in body["reports"]] == [
            ("s1", "s2", 1.0),
            ("s2", "s1", 1.0),
            ("s3", "s1", 0.0),
        ]
        assert set(body["reports"][0]) == {
            "student",
            "matched_student",
            "max_similarity",
            "matched_file_handed_over_at",
        }

    def test_query_variant(self, client, catalog):
        catalog.set_roster("T1", [make_file("s1"), make_file("s2")])

        response = client.get("/plagiarism/report", params={"task_id": "T1"})

        assert response.status_code == 200
        assert len(response.json()["reports"]) == 2

    def test_id_at_length_limit(self, client):
        assert client.get(f"/plagiarism/{'x' * 50}/report").status_code == 200

    def test_cyrillic_id_counts_code_points(self, client):
        assert client.get(f"/plagiarism/{'я' * 50}/report").status_code == 200

    def test_id_too_long(self, client, catalog):
        response = client.get(f"/plagiarism/{'x' * 51}/report")

        assert response.status_code == 400
        assert response.json() == {
            "status": "error",
            "kind": "validation_error",
            "error_details": "task id is too long",
        }
        assert catalog.calls == 0

    def test_empty_query_id(self, client, catalog):
        response = client.get("/plagiarism/report")

        assert response.status_code == 400
        assert response.json()["error_details"] == "task id required"
        assert catalog.calls == 0

    def test_catalog_unavailable(self, client, catalog):
        catalog.fail = True

        response = client.get("/plagiarism/T1/report")

        assert response.status_code == 503
        assert response.json()["kind"] == "upstream_unavailable"

    def test_download_failure(self, client, catalog, extractor):
        extractor.texts["http://storage/s2.txt"] = DownloadFailedError("failed to download file")
        catalog.set_roster("T1", [make_file("s1"), make_file("s2")])

        response = client.get("/plagiarism/T1/report")

        assert response.status_code == 503
        body = response.json()
        assert body["kind"] == "analysis_failed"
        assert body["students"] == ["s1", "s2"]

    def test_extraction_failure(self, client, catalog, extractor):
        extractor.texts["http://storage/s1.txt"] = ExtractionFailedError("failed to open PDF")
        catalog.set_roster("T1", [make_file("s1"), make_file("s2")])

        response = client.get("/plagiarism/T1/report")

        assert response.status_code == 422
        assert "s1" in response.json()["error_details"]

    def test_unexpected_error(self, service, catalog, extractor):
        extractor.texts["http://storage/s1.txt"] = RuntimeError("unexpected")
        catalog.set_roster("T1", [make_file("s1"), make_file("s2")])
        client = TestClient(create_app(service), raise_server_exceptions=False)

        response = client.get("/plagiarism/T1/report")

        assert response.status_code == 500
        assert response.json()["error_details"] == "internal error"


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}
