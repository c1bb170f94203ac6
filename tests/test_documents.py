import asyncio
import json

import httpx
import pytest
from fastapi.testclient import TestClient

from app.domain.documents.client import DocumentBackendError, DocumentClient, DocumentNotFoundError
from app.domain.documents.router import get_document_service
from app.domain.documents.service import DocumentService
from app.domain.documents.status import DocumentStatus, allowed_transitions, can_transition
from app.main import app

BASE_URL = "http://docs.test"


class FakeBackend:
    """In-memory stand-in for the document backend, served through MockTransport."""

    def __init__(self, documents=None, pdfs=None, fail=False):
        self.documents = documents or {}
        self.pdfs = pdfs or {}
        self.fail = fail
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.fail:
            return httpx.Response(500, text="down")
        path = request.url.path
        if path == "/api/pdf/saved-files":
            files = [{"id": key, **doc} for key, doc in self.documents.items()]
            return httpx.Response(200, json={"success": True, "total": len(files), "page": 1, "limit": 20, "files": files})
        if path.startswith("/api/pdf/viewer/download/"):
            doc_id = path.rsplit("/", 1)[-1]
            if doc_id not in self.pdfs:
                return httpx.Response(404, json={"error": "PDF not found"})
            return httpx.Response(200, content=self.pdfs[doc_id], headers={"content-type": "application/pdf"})
        if path.startswith("/api/pdf/customer-headers/"):
            parts = path.split("/")
            doc_id = parts[4]
            if doc_id not in self.documents:
                return httpx.Response(404, json={"error": "not found"})
            if request.method == "PATCH":
                self.documents[doc_id]["status"] = json.loads(request.content)["status"]
                return httpx.Response(200, json={"success": True})
            return httpx.Response(200, json={"_id": doc_id, **self.documents[doc_id]})
        return httpx.Response(404)


@pytest.fixture
def backend():
    return FakeBackend(
        documents={
            "doc1": {
                "status": "draft",
                "title": "Acme HQ",
                "payload": {
                    "headerTitle": "Acme HQ",
                    "agreement": {"contractMonths": 12},
                    "services": {
                        "carpetCleaning": {"isActive": True, "contractTotal": 6000, "perVisit": 500},
                        "sanipod": {"isActive": True, "totals": {"contract": {"amount": 2000}}},
                    },
                },
            },
            "doc2": {"status": "pending_approval", "payload": {"headerTitle": "Beta Co"}},
        },
        pdfs={"doc1": b"%PDF-1.4 fake"},
    )


@pytest.fixture
def api(backend):
    http = httpx.AsyncClient(transport=httpx.MockTransport(backend))
    app.dependency_overrides[get_document_service] = lambda: DocumentService(DocumentClient(BASE_URL, http))
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_transitions():
    assert can_transition(DocumentStatus.DRAFT, DocumentStatus.PENDING_APPROVAL)
    assert can_transition(DocumentStatus.PENDING_APPROVAL, DocumentStatus.DRAFT)
    assert not can_transition(DocumentStatus.DRAFT, DocumentStatus.APPROVED_ADMIN)
    assert allowed_transitions(DocumentStatus.APPROVED_ADMIN) == []
    assert allowed_transitions(DocumentStatus.PENDING_APPROVAL) == [
        DocumentStatus.DRAFT,
        DocumentStatus.APPROVED_SALESMAN,
    ]


def test_client_maps_errors(backend):
    backend.fail = True

    async def run():
        async with httpx.AsyncClient(transport=httpx.MockTransport(backend)) as http:
            await DocumentClient(BASE_URL, http).list_documents()

    with pytest.raises(DocumentBackendError) as exc:
        asyncio.run(run())
    assert exc.value.status_code == 500


def test_client_404_is_not_found(backend):
    async def run():
        async with httpx.AsyncClient(transport=httpx.MockTransport(backend)) as http:
            await DocumentClient(BASE_URL, http).download_pdf("nope")

    with pytest.raises(DocumentNotFoundError):
        asyncio.run(run())


def test_list_documents(api, backend):
    res = api.get("/documents", params={"status": "draft", "search": "Acme"})
    assert res.status_code == 200
    data = res.json()
    assert data["total"] == 2
    titles = {item["title"] for item in data["files"]}
    assert titles == {"Acme HQ", "Beta Co"}
    assert backend.requests[0].url.params["status"] == "draft"
    assert backend.requests[0].url.params["search"] == "Acme"


def test_list_documents_bad_status_422(api):
    assert api.get("/documents", params={"status": "archived"}).status_code == 422


def test_download_pdf(api):
    res = api.get("/documents/doc1/pdf")
    assert res.status_code == 200
    assert res.content == b"%PDF-1.4 fake"
    assert res.headers["content-type"] == "application/pdf"


def test_missing_pdf_has_remediation(api):
    res = api.get("/documents/doc2/pdf")
    assert res.status_code == 404
    detail = res.json()["detail"]
    assert detail["message"] == "PDF not found"
    assert "regenerate the PDF" in detail["remediation"]


def test_status_forward(api, backend):
    res = api.patch("/documents/doc1/status", json={"status": "pending_approval"})
    assert res.status_code == 200
    assert res.json() == {"id": "doc1", "status": "pending_approval", "previousStatus": "draft"}
    assert backend.documents["doc1"]["status"] == "pending_approval"


def test_status_rejection_back_to_draft(api, backend):
    res = api.patch("/documents/doc2/status", json={"status": "draft"})
    assert res.status_code == 200
    assert backend.documents["doc2"]["status"] == "draft"


def test_illegal_status_change_409(api, backend):
    res = api.patch("/documents/doc1/status", json={"status": "approved_admin"})
    assert res.status_code == 409
    assert res.json()["detail"]["allowed"] == ["pending_approval"]
    assert backend.documents["doc1"]["status"] == "draft"


def test_status_unknown_document_404(api):
    assert api.patch("/documents/ghost/status", json={"status": "pending_approval"}).status_code == 404


def test_document_totals(api):
    res = api.get("/documents/doc1/totals")
    assert res.status_code == 200
    totals = res.json()["totals"]
    assert totals["totalContractAmount"] == 8000
    assert totals["globalContractMonths"] == 12


def test_backend_down_is_502(api, backend):
    backend.fail = True
    res = api.get("/documents")
    assert res.status_code == 502
    assert res.json()["detail"] == "Document service temporarily unavailable"


def test_not_configured_is_503():
    client = TestClient(app)
    res = client.get("/documents")
    assert res.status_code == 503
