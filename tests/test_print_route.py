"""Tests for the print route served to the headless browser."""

from __future__ import annotations

import json

import pytest
from fastapi.testclient import TestClient

from contract_renderer.config.models import ExportSettings
from contract_renderer.domain.errors import ConfigurationError
from contract_renderer.domain.models.document import ExportRequest
from contract_renderer.infrastructure.print_route import InMemoryDocumentSource, create_print_app

SESSIONS = {"tok-alice": "alice"}


@pytest.fixture
def source():
    store = InMemoryDocumentSource()
    store.add("lease-1", "alice", ExportRequest(content="# Lease\n\nRent is due monthly."))
    store.add("draft-1", "alice", ExportRequest(content="   "))
    store.add("nda-1", "bob", ExportRequest(content="# NDA"))
    return store


@pytest.fixture
def client(source):
    app = create_print_app(source, session_resolver=SESSIONS.get)
    return TestClient(app)


class TestPrintRoute:
    def test_healthz(self, client):
        response = client.get("/healthz")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    def test_anonymous_is_not_found(self, client):
        assert client.get("/documents/lease-1/print").status_code == 404

    def test_user_id_query(self, client):
        response = client.get("/documents/lease-1/print", params={"userId": "alice"})
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/html")
        assert '<div class="paper">' in response.text
        assert "document-renderer" in response.text
        assert "<h1>Lease</h1>" in response.text

    def test_session_cookie(self, client):
        client.cookies.set("session-token", "tok-alice")
        response = client.get("/documents/lease-1/print")
        assert response.status_code == 200

    def test_unknown_session_falls_back_to_query(self, client):
        client.cookies.set("session-token", "expired")
        assert client.get("/documents/lease-1/print").status_code == 404
        response = client.get("/documents/lease-1/print", params={"userId": "alice"})
        assert response.status_code == 200

    def test_foreign_document(self, client):
        response = client.get("/documents/nda-1/print", params={"userId": "alice"})
        assert response.status_code == 404

    def test_unknown_document(self, client):
        response = client.get("/documents/nope/print", params={"userId": "alice"})
        assert response.status_code == 404

    def test_empty_content_placeholder(self, client):
        response = client.get("/documents/draft-1/print", params={"userId": "alice"})
        assert response.status_code == 200
        assert "No Content Available" in response.text
        assert "draft-1" in response.text

    def test_custom_route_template(self, source):
        settings = ExportSettings(print_route_template="/print/{document_id}")
        client = TestClient(create_print_app(source, settings=settings))
        assert client.get("/print/lease-1", params={"userId": "alice"}).status_code == 200


class TestDocumentSource:
    def test_owner_check(self, source):
        assert source.get("lease-1", "alice") is not None
        assert source.get("lease-1", "bob") is None
        assert source.get("missing", "alice") is None

    def test_from_directory(self, tmp_path):
        (tmp_path / "lease.json").write_text(
            json.dumps(
                {
                    "ownerId": "alice",
                    "content": "# Lease",
                    "style": {"fontFamily": "classic"},
                    "signatures": [{"signerName": "Alice", "signedAt": "2025-01-05T10:00:00Z"}],
                    "title": "Lease",
                }
            ),
            encoding="utf-8",
        )
        store = InMemoryDocumentSource.from_directory(tmp_path)

        assert len(store) == 1
        document = store.get("lease", "alice")
        assert document.title == "Lease"
        assert document.signatures[0].signer_name == "Alice"

    def test_missing_owner(self, tmp_path):
        (tmp_path / "x.json").write_text('{"content": "x"}', encoding="utf-8")
        with pytest.raises(ConfigurationError):
            InMemoryDocumentSource.from_directory(tmp_path)

    def test_missing_directory(self, tmp_path):
        with pytest.raises(ConfigurationError):
            InMemoryDocumentSource.from_directory(tmp_path / "absent")


class TestContainer:
    def test_print_app_serves_source(self, source):
        from contract_renderer.bootstrap import Container

        container = Container(settings=ExportSettings())
        client = TestClient(container.print_app(source))

        response = client.get("/documents/lease-1/print", params={"userId": "alice"})
        assert response.status_code == 200
        assert "<h1>Lease</h1>" in response.text

    def test_print_app_without_source(self):
        from contract_renderer.bootstrap import Container

        client = TestClient(Container(settings=ExportSettings()).print_app())
        assert client.get("/healthz").status_code == 200
