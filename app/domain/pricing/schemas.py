"""Pricing domain schemas - Pydantic models for the HTTP surface"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field

from .coercion import Amount
from .common import QuoteResult


class ServiceInfo(BaseModel):
    """Schema for a priceable service"""

    serviceId: str
    displayName: str


class QuoteResponse(BaseModel):
    """Schema for a single-service quote"""

    quote: QuoteResult
    payload: dict[str, Any]


class ConfigResponse(BaseModel):
    """Schema for an effective (merged) pricing config"""

    serviceId: str
    config: dict[str, Any]


class AgreementCharges(BaseModel):
    """Agreement-level trip and parking charges"""

    globalContractMonths: Optional[int] = None
    tripCharge: Optional[Amount] = None
    tripChargeFrequency: Optional[Amount] = None
    parkingCharge: Optional[Amount] = None
    parkingChargeFrequency: Optional[Amount] = None


class AgreementTotalsRequest(AgreementCharges):
    """Schema for totals over already-computed service payloads"""

    services: dict[str, dict[str, Any]] = Field(default_factory=dict)


class AgreementCreate(AgreementCharges):
    """Schema for opening an agreement session"""

    services: dict[str, dict[str, Any]] = Field(default_factory=dict)


class AgreementSettingsUpdate(AgreementCharges):
    """Schema for updating global months and charges"""


class ContractMonthsUpdate(BaseModel):
    """Schema for pinning (or clearing with null) one service's contract length"""

    contractMonths: Optional[int] = None


class AgreementTotalsResponse(BaseModel):
    """Schema for aggregated totals"""

    totals: dict[str, Any]
    services: dict[str, dict[str, Any]]


class AgreementResponse(AgreementTotalsResponse):
    """Schema for an agreement session"""

    id: str
    forms: dict[str, dict[str, Any]]
    createdAt: datetime
    updatedAt: datetime
