"""Document router - FastAPI endpoints for saved agreements"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response

from .client import DocumentClient
from .schemas import (
    DocumentListResponse,
    DocumentStatusResponse,
    DocumentStatusUpdate,
    DocumentTotalsResponse,
)
from .service import DocumentService
from .status import DocumentStatus

router = APIRouter(prefix="/documents", tags=["Documents"])


def get_document_service() -> DocumentService:
    """Dependency injection for DocumentService"""
    return DocumentService(DocumentClient())


@router.get("", response_model=DocumentListResponse)
async def list_documents(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    status: Optional[DocumentStatus] = Query(None, description="Filter by approval status"),
    search: Optional[str] = Query(None, description="Search by agreement title"),
    service: DocumentService = Depends(get_document_service),
):
    """List saved agreements"""
    return await service.list_documents(page, limit, status, search)


@router.get("/{document_id}/pdf")
async def download_pdf(document_id: str, service: DocumentService = Depends(get_document_service)):
    content = await service.download_pdf(document_id)
    return Response(
        content=content,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{document_id}.pdf"'},
    )


@router.patch("/{document_id}/status", response_model=DocumentStatusResponse)
async def update_status(
    document_id: str,
    data: DocumentStatusUpdate,
    service: DocumentService = Depends(get_document_service),
):
    """Move a document through draft, pending approval and the two approvals"""
    return await service.update_status(document_id, data.status)


@router.get("/{document_id}/totals", response_model=DocumentTotalsResponse)
async def get_totals(document_id: str, service: DocumentService = Depends(get_document_service)):
    return await service.get_totals(document_id)
