"""
HTTP client for the external document backend.

The backend owns saved agreements, their generated PDFs and approval status.
This client only translates transport and status-code failures into
DocumentBackendError so the service layer can map them to HTTP responses.
"""

import logging
from typing import Any, Optional

import httpx

from ... import config

logger = logging.getLogger(__name__)


class DocumentBackendError(Exception):
    """The document backend failed or could not be reached"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class DocumentNotFoundError(DocumentBackendError):
    """The backend answered 404"""


class DocumentClient:
    """Thin async wrapper around the document backend's /api/pdf routes"""

    def __init__(self, base_url: Optional[str] = None, client: Optional[httpx.AsyncClient] = None):
        self.base_url = (config.DOCUMENT_API_BASE_URL if base_url is None else base_url).rstrip("/")
        self.client = client

    @property
    def configured(self) -> bool:
        return bool(self.base_url)

    async def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        url = f"{self.base_url}{path}"
        try:
            if self.client is None:
                async with httpx.AsyncClient(timeout=config.HTTP_TIMEOUT_SECONDS) as owned:
                    resp = await owned.request(method, url, **kwargs)
            else:
                resp = await self.client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"❌ Document backend {method} {path} failed: {e}")
            raise DocumentBackendError(str(e)) from e

        if resp.status_code == 404:
            raise DocumentNotFoundError(f"{path} not found", 404)
        if resp.status_code >= 400:
            logger.error(f"❌ Document backend {method} {path} returned {resp.status_code}: {resp.text[:200]}")
            raise DocumentBackendError(f"Document backend returned {resp.status_code}", resp.status_code)
        return resp

    @staticmethod
    def _json(resp: httpx.Response) -> Any:
        try:
            return resp.json()
        except ValueError as e:
            raise DocumentBackendError("Document backend returned invalid JSON", resp.status_code) from e

    async def list_documents(
        self,
        page: int = 1,
        limit: int = 20,
        status: Optional[str] = None,
        search: Optional[str] = None,
    ) -> dict:
        params: dict[str, Any] = {"page": page, "limit": limit}
        if status:
            params["status"] = status
        if search:
            params["search"] = search
        resp = await self._request("GET", "/api/pdf/saved-files", params=params, headers={"Accept": "application/json"})
        body = self._json(resp)
        return body if isinstance(body, dict) else {"files": body or []}

    async def get_document(self, document_id: str) -> dict:
        resp = await self._request("GET", f"/api/pdf/customer-headers/{document_id}", headers={"Accept": "application/json"})
        body = self._json(resp)
        if not isinstance(body, dict):
            raise DocumentBackendError("Unexpected document shape", resp.status_code)
        return body

    async def download_pdf(self, document_id: str) -> bytes:
        resp = await self._request("GET", f"/api/pdf/viewer/download/{document_id}")
        return resp.content

    async def update_status(self, document_id: str, status: str) -> dict:
        resp = await self._request("PATCH", f"/api/pdf/customer-headers/{document_id}/status", json={"status": status})
        if not resp.content:
            return {}
        body = self._json(resp)
        return body if isinstance(body, dict) else {}
