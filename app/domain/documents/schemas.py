"""Document domain schemas - Pydantic models for validation"""

from typing import Any, Optional

from pydantic import BaseModel, Field

from .status import DocumentStatus


class DocumentSummary(BaseModel):
    """Schema for one saved agreement in a listing"""

    id: str
    title: str
    status: str
    statusLabel: str
    createdAt: Optional[str] = None
    updatedAt: Optional[str] = None
    hasPdf: bool = False


class DocumentListResponse(BaseModel):
    """Schema for a page of saved agreements"""

    total: int
    page: int
    limit: int
    files: list[DocumentSummary] = Field(default_factory=list)


class DocumentStatusUpdate(BaseModel):
    """Schema for moving a document through approval"""

    status: DocumentStatus


class DocumentStatusResponse(BaseModel):
    """Schema for a completed status change"""

    id: str
    status: DocumentStatus
    previousStatus: DocumentStatus


class DocumentTotalsResponse(BaseModel):
    """Schema for the agreement total of a stored document"""

    id: str
    status: str
    totals: dict[str, Any]
