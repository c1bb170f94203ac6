"""Document service - Saved agreements, PDFs and approval workflow"""

import logging
from typing import Any, Optional

from fastapi import HTTPException

from ..pricing.aggregation import state_from_payloads, summarize
from .client import DocumentBackendError, DocumentClient, DocumentNotFoundError
from .schemas import (
    DocumentListResponse,
    DocumentStatusResponse,
    DocumentSummary,
    DocumentTotalsResponse,
)
from .status import (
    STATUS_LABELS,
    DocumentStatus,
    allowed_transitions,
    can_transition,
    parse_status,
)

logger = logging.getLogger(__name__)

BACKEND_UNAVAILABLE = "Document service temporarily unavailable"
PDF_NOT_FOUND = {
    "message": "PDF not found",
    "remediation": "Open the agreement in edit mode and save it again to regenerate the PDF",
}


def _summary(item: dict[str, Any]) -> DocumentSummary:
    payload = item.get("payload") if isinstance(item.get("payload"), dict) else {}
    raw_status = item.get("status") or DocumentStatus.DRAFT.value
    try:
        label = STATUS_LABELS[parse_status(raw_status)]
    except ValueError:
        label = str(raw_status)
    return DocumentSummary(
        id=str(item.get("id") or item.get("_id") or item.get("agreementId") or ""),
        title=item.get("title") or item.get("fileName") or payload.get("headerTitle") or "Untitled",
        status=str(raw_status),
        statusLabel=label,
        createdAt=item.get("createdAt"),
        updatedAt=item.get("updatedAt"),
        hasPdf=bool(item.get("hasPdf", False)),
    )


def _contract_months(payload: dict[str, Any]) -> Optional[int]:
    agreement = payload.get("agreement")
    if isinstance(agreement, dict):
        months = agreement.get("contractMonths") or agreement.get("globalContractMonths")
        if isinstance(months, (int, float)) and months > 0:
            return int(months)
    return None


def _service_payloads(payload: dict[str, Any]) -> dict[str, dict]:
    """Saved documents keep services keyed by id; older ones as a list"""
    services = payload.get("services")
    if isinstance(services, dict):
        return {key: value for key, value in services.items() if isinstance(value, dict)}
    if isinstance(services, list):
        return {
            str(item.get("serviceId") or index): item
            for index, item in enumerate(services)
            if isinstance(item, dict)
        }
    return {}


class DocumentService:
    """Service layer for the external document backend"""

    def __init__(self, client: DocumentClient):
        self.client = client

    def _ensure_configured(self) -> None:
        if not self.client.configured:
            raise HTTPException(status_code=503, detail="Document service not configured")

    async def list_documents(
        self,
        page: int = 1,
        limit: int = 20,
        status: Optional[DocumentStatus] = None,
        search: Optional[str] = None,
    ) -> DocumentListResponse:
        self._ensure_configured()
        try:
            body = await self.client.list_documents(page, limit, status.value if status else None, search)
        except DocumentBackendError:
            raise HTTPException(status_code=502, detail=BACKEND_UNAVAILABLE)

        items = body.get("files") or body.get("items") or []
        files = [_summary(item) for item in items if isinstance(item, dict)]
        return DocumentListResponse(
            total=int(body.get("total", len(files)) or 0),
            page=int(body.get("page", page) or page),
            limit=int(body.get("limit", limit) or limit),
            files=files,
        )

    async def _get_document(self, document_id: str) -> dict[str, Any]:
        self._ensure_configured()
        try:
            return await self.client.get_document(document_id)
        except DocumentNotFoundError:
            raise HTTPException(status_code=404, detail="Document not found")
        except DocumentBackendError:
            raise HTTPException(status_code=502, detail=BACKEND_UNAVAILABLE)

    async def download_pdf(self, document_id: str) -> bytes:
        self._ensure_configured()
        try:
            return await self.client.download_pdf(document_id)
        except DocumentNotFoundError:
            logger.warning(f"⚠️ PDF missing for document {document_id}")
            raise HTTPException(status_code=404, detail=PDF_NOT_FOUND)
        except DocumentBackendError:
            raise HTTPException(status_code=502, detail=BACKEND_UNAVAILABLE)

    async def update_status(self, document_id: str, target: DocumentStatus) -> DocumentStatusResponse:
        """
        Move a document one step through approval.

        Raises:
            HTTPException 409: If the move is not allowed from the current status
        """
        document = await self._get_document(document_id)
        try:
            current = parse_status(document.get("status"))
        except ValueError:
            raise HTTPException(status_code=502, detail=BACKEND_UNAVAILABLE)

        if current == target:
            return DocumentStatusResponse(id=document_id, status=target, previousStatus=current)

        if not can_transition(current, target):
            allowed = [status.value for status in allowed_transitions(current)]
            logger.info(f"Rejected status change {current.value} -> {target.value} for {document_id}")
            raise HTTPException(
                status_code=409,
                detail={
                    "message": f"Cannot change status from {current.value} to {target.value}",
                    "allowed": allowed,
                },
            )

        try:
            await self.client.update_status(document_id, target.value)
        except DocumentNotFoundError:
            raise HTTPException(status_code=404, detail="Document not found")
        except DocumentBackendError:
            raise HTTPException(status_code=502, detail=BACKEND_UNAVAILABLE)

        logger.info(f"✅ Document {document_id} status {current.value} -> {target.value}")
        return DocumentStatusResponse(id=document_id, status=target, previousStatus=current)

    async def get_totals(self, document_id: str) -> DocumentTotalsResponse:
        """Agreement total of a saved document, from its stored service payloads"""
        document = await self._get_document(document_id)
        payload = document.get("payload") if isinstance(document.get("payload"), dict) else {}
        state = state_from_payloads(_service_payloads(payload), _contract_months(payload))
        return DocumentTotalsResponse(
            id=document_id,
            status=str(document.get("status") or DocumentStatus.DRAFT.value),
            totals=summarize(state),
        )
