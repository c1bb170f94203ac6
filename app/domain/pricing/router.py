"""Pricing router - FastAPI endpoints for quotes, configs and agreements"""

from typing import Any

from fastapi import APIRouter, Body, Depends

from .schemas import (
    AgreementCreate,
    AgreementResponse,
    AgreementSettingsUpdate,
    AgreementTotalsRequest,
    AgreementTotalsResponse,
    ConfigResponse,
    ContractMonthsUpdate,
    QuoteResponse,
    ServiceInfo,
)
from .service import PricingService

router = APIRouter(prefix="/pricing", tags=["Pricing"])


def get_pricing_service() -> PricingService:
    """Dependency injection for PricingService"""
    return PricingService()


# ============================================================================
# SERVICES, QUOTES AND CONFIGS
# ============================================================================


@router.get("/services", response_model=list[ServiceInfo])
async def list_services(service: PricingService = Depends(get_pricing_service)):
    """List every service that can be priced"""
    return service.list_services()


@router.post("/quotes/{service_id}", response_model=QuoteResponse)
async def quote_service(
    service_id: str,
    form: dict[str, Any] = Body(default_factory=dict),
    service: PricingService = Depends(get_pricing_service),
):
    """Price a single service card from its form fields"""
    return await service.quote(service_id, form)


@router.get("/configs/{service_id}", response_model=ConfigResponse)
async def get_config(service_id: str, service: PricingService = Depends(get_pricing_service)):
    """Effective pricing config (backend merged over defaults)"""
    return await service.get_config(service_id)


@router.post("/configs/{service_id}/refresh", response_model=ConfigResponse)
async def refresh_config(service_id: str, service: PricingService = Depends(get_pricing_service)):
    """Drop the cached config and fetch it again"""
    return await service.refresh_config(service_id)


# ============================================================================
# AGREEMENTS
# ============================================================================


@router.post("/agreements/totals", response_model=AgreementTotalsResponse)
async def agreement_totals(data: AgreementTotalsRequest, service: PricingService = Depends(get_pricing_service)):
    """Aggregate totals over service payloads without opening a session"""
    return service.totals(data)


@router.post("/agreements", response_model=AgreementResponse, status_code=201)
async def create_agreement(data: AgreementCreate, service: PricingService = Depends(get_pricing_service)):
    return await service.create_agreement(data)


@router.get("/agreements/{agreement_id}", response_model=AgreementResponse)
async def get_agreement(agreement_id: str, service: PricingService = Depends(get_pricing_service)):
    return service.get_agreement(agreement_id)


@router.put("/agreements/{agreement_id}/services/{service_id}", response_model=AgreementResponse)
async def update_agreement_service(
    agreement_id: str,
    service_id: str,
    form: dict[str, Any] = Body(default_factory=dict),
    service: PricingService = Depends(get_pricing_service),
):
    """Replace one service card's form and re-quote it"""
    return await service.update_service_form(agreement_id, service_id, form)


@router.delete("/agreements/{agreement_id}/services/{service_id}", response_model=AgreementResponse)
async def remove_agreement_service(
    agreement_id: str,
    service_id: str,
    service: PricingService = Depends(get_pricing_service),
):
    return await service.remove_service_form(agreement_id, service_id)


@router.put("/agreements/{agreement_id}/settings", response_model=AgreementResponse)
async def update_agreement_settings(
    agreement_id: str,
    data: AgreementSettingsUpdate,
    service: PricingService = Depends(get_pricing_service),
):
    """Global contract months and trip/parking charges"""
    return await service.update_settings(agreement_id, data)


@router.put("/agreements/{agreement_id}/services/{service_id}/contract-months", response_model=AgreementResponse)
async def set_service_contract_months(
    agreement_id: str,
    service_id: str,
    data: ContractMonthsUpdate,
    service: PricingService = Depends(get_pricing_service),
):
    """Pin a service's contract length; null re-syncs it to the global length"""
    return await service.set_service_months(agreement_id, service_id, data.contractMonths)


@router.post("/agreements/{agreement_id}/refresh", response_model=AgreementResponse)
async def refresh_agreement(agreement_id: str, service: PricingService = Depends(get_pricing_service)):
    """Re-fetch every config and re-quote, keeping user overrides"""
    return await service.refresh_agreement(agreement_id)
