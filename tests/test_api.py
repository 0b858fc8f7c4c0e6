"""Tests for the FastAPI REST endpoints."""

from collections.abc import Iterator
from unittest.mock import patch

import pytest
from fakes import AADHAAR_TEXTS, VOTER_TEXTS, FakeEngine
from fastapi.testclient import TestClient

from idscan.api.app import app
from idscan.pipeline.orchestrator import ScanPipeline
from idscan.storage.cache import MemoryStore, ResultCache
from idscan.utils.config import AppConfig


@pytest.fixture
def client() -> TestClient:
    """Create a FastAPI test client."""
    return TestClient(app)


def _make_pipeline(
    config: AppConfig,
    texts: dict[str, str],
    fail_on: str | None = None,
    cache: ResultCache | None = None,
) -> ScanPipeline:
    return ScanPipeline(config, engine=FakeEngine(texts, fail_on=fail_on), cache=cache)


@pytest.fixture
def pipeline(app_config: AppConfig) -> Iterator[ScanPipeline]:
    """Patch the shared pipeline with one backed by the fake engine."""
    scan_pipeline = _make_pipeline(
        app_config, AADHAAR_TEXTS, cache=ResultCache(MemoryStore())
    )
    with patch("idscan.api.app._get_pipeline", return_value=scan_pipeline):
        yield scan_pipeline


class TestHealthEndpoint:
    """Tests for GET /health."""

    def test_health_returns_200(
        self, client: TestClient, pipeline: ScanPipeline
    ) -> None:
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert isinstance(data["tesseract_available"], bool)
        assert data["scan_in_progress"] is False


class TestScanEndpoint:
    """Tests for POST /scan."""

    def test_scan_aadhaar(
        self, client: TestClient, pipeline: ScanPipeline, png_bytes: bytes
    ) -> None:
        response = client.post(
            "/scan", files={"file": ("card.png", png_bytes, "image/png")}
        )
        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["document_type"] == "Aadhaar Card"
        assert data["quality"] == "success"
        assert data["status_message"] == "Extraction successful"
        assert data["found_fields"] == 4
        assert data["record"]["aadhaar"] == "1234 5678 9012"
        assert data["record"]["card_no"] == "Not found"
        labels = [row["label"] for row in data["rows"]]
        assert labels == [
            "Document Type",
            "Name",
            "Date of Birth",
            "Gender",
            "Aadhaar Number",
        ]

    def test_scan_voter(
        self, client: TestClient, app_config: AppConfig, png_bytes: bytes
    ) -> None:
        voter_pipeline = _make_pipeline(app_config, VOTER_TEXTS)
        with patch("idscan.api.app._get_pipeline", return_value=voter_pipeline):
            response = client.post(
                "/scan", files={"file": ("card.jpg", png_bytes, "image/jpeg")}
            )
        assert response.status_code == 200
        data = response.json()
        assert data["document_type"] == "Voter ID"
        assert data["record"]["father_name"] == "Ramesh Kumar"

    def test_unsupported_file_type(
        self, client: TestClient, pipeline: ScanPipeline
    ) -> None:
        response = client.post(
            "/scan", files={"file": ("doc.pdf", b"%PDF-1.4", "application/pdf")}
        )
        assert response.status_code == 400
        assert "Unsupported file type" in response.json()["detail"]

    def test_undecodable_image(self, client: TestClient, pipeline: ScanPipeline) -> None:
        response = client.post(
            "/scan", files={"file": ("card.png", b"garbage", "image/png")}
        )
        assert response.status_code == 400
        assert "Image load failed" in response.json()["detail"]

    def test_recognition_failure(
        self, client: TestClient, app_config: AppConfig, png_bytes: bytes
    ) -> None:
        failing = _make_pipeline(app_config, AADHAAR_TEXTS, fail_on="detect")
        with patch("idscan.api.app._get_pipeline", return_value=failing):
            response = client.post(
                "/scan", files={"file": ("card.png", png_bytes, "image/png")}
            )
        assert response.status_code == 502
        assert response.json()["detail"] == "OCR error: Tesseract crashed"

    def test_busy(
        self, client: TestClient, pipeline: ScanPipeline, png_bytes: bytes
    ) -> None:
        pipeline._run_lock.acquire()
        try:
            response = client.post(
                "/scan", files={"file": ("card.png", png_bytes, "image/png")}
            )
        finally:
            pipeline._run_lock.release()
        assert response.status_code == 409


class TestResultEndpoints:
    """Tests for GET and DELETE /result."""

    def test_no_result(self, client: TestClient, pipeline: ScanPipeline) -> None:
        assert client.get("/result").status_code == 404

    def test_result_after_scan_then_clear(
        self, client: TestClient, pipeline: ScanPipeline, png_bytes: bytes
    ) -> None:
        client.post("/scan", files={"file": ("card.png", png_bytes, "image/png")})

        response = client.get("/result")
        assert response.status_code == 200
        data = response.json()
        assert data["status_message"] == "Restored from previous scan"
        assert data["record"]["name"] == "Ravi Kumar"

        cleared = client.delete("/result")
        assert cleared.json() == {"cleared": True}
        assert client.get("/result").status_code == 404

    def test_cache_disabled(
        self, client: TestClient, app_config: AppConfig
    ) -> None:
        uncached = _make_pipeline(app_config, AADHAAR_TEXTS)
        with patch("idscan.api.app._get_pipeline", return_value=uncached):
            assert client.get("/result").status_code == 404
            assert client.delete("/result").json() == {"cleared": False}
