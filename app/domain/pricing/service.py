"""Pricing service - Business logic behind the pricing endpoints"""

import logging
from typing import Any, Optional

import httpx
from fastapi import HTTPException
from pydantic import ValidationError

from ... import config
from . import config_provider
from .aggregation import (
    SANICLEAN_DEPENDENTS,
    SANICLEAN_ID,
    AgreementState,
    clamp_months,
    remove_service,
    saniclean_flags,
    set_global_charges,
    set_global_contract_months,
    set_service_contract_months,
    state_from_payloads,
    summarize,
    update_service,
)
from .aggregation import effective_contract_months as agreement_months
from .coercion import parse_number
from .common import ServiceForm
from .payload import build_payload
from .registry import ENGINES, PricingEngine, get_engine
from .repository import AgreementRepository, AgreementSession, agreement_repository
from .schemas import (
    AgreementCharges,
    AgreementCreate,
    AgreementResponse,
    AgreementSettingsUpdate,
    AgreementTotalsRequest,
    AgreementTotalsResponse,
    ConfigResponse,
    QuoteResponse,
    ServiceInfo,
)

logger = logging.getLogger(__name__)


class PricingService:
    """Service layer for quoting, configs and agreement sessions"""

    def __init__(
        self,
        repo: Optional[AgreementRepository] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.repo = repo or agreement_repository
        self.client = client

    # ------------------------------------------------------------------
    # Services and configs
    # ------------------------------------------------------------------

    def list_services(self) -> list[ServiceInfo]:
        return [
            ServiceInfo(serviceId=engine.service_id, displayName=engine.display_name)
            for engine in ENGINES.values()
        ]

    def get_engine(self, service_id: str) -> PricingEngine:
        """Get the engine for a service id or raise 404"""
        try:
            return get_engine(service_id)
        except KeyError:
            raise HTTPException(status_code=404, detail=f"Service '{service_id}' not found")

    def parse_form(self, engine: PricingEngine, form_data: dict[str, Any]) -> ServiceForm:
        try:
            return engine.parse_form(form_data)
        except ValidationError as e:
            logger.info(f"Rejected {engine.service_id} form: {e.error_count()} invalid field(s)")
            raise HTTPException(
                status_code=422,
                detail=e.errors(include_url=False, include_context=False, include_input=False),
            )

    async def get_config(self, service_id: str) -> ConfigResponse:
        self.get_engine(service_id)
        cfg = await config_provider.get_config(service_id, self.client)
        return ConfigResponse(serviceId=service_id, config=cfg)

    async def refresh_config(self, service_id: str) -> ConfigResponse:
        self.get_engine(service_id)
        cfg = await config_provider.refresh_config(service_id, self.client)
        return ConfigResponse(serviceId=service_id, config=cfg)

    async def quote(self, service_id: str, form_data: dict[str, Any]) -> QuoteResponse:
        """Price one service card"""
        engine = self.get_engine(service_id)
        form = self.parse_form(engine, form_data)
        cfg = await config_provider.get_config(service_id, self.client)
        result = engine.quote(form, cfg)
        return QuoteResponse(quote=result, payload=build_payload(result))

    # ------------------------------------------------------------------
    # Aggregation
    # ------------------------------------------------------------------

    @staticmethod
    def apply_charges(state: AgreementState, data: AgreementCharges) -> AgreementState:
        return set_global_charges(
            state,
            trip_charge=data.tripCharge,
            trip_charge_frequency=data.tripChargeFrequency,
            parking_charge=data.parkingCharge,
            parking_charge_frequency=data.parkingChargeFrequency,
        )

    def totals(self, data: AgreementTotalsRequest) -> AgreementTotalsResponse:
        """Totals over payloads that were already calculated elsewhere"""
        state = state_from_payloads(data.services, data.globalContractMonths)
        state = self.apply_charges(state, data)
        return AgreementTotalsResponse(totals=summarize(state), services=data.services)

    # ------------------------------------------------------------------
    # Agreement sessions
    # ------------------------------------------------------------------

    def _session(self, agreement_id: str) -> AgreementSession:
        session = self.repo.get(agreement_id)
        if not session:
            raise HTTPException(status_code=404, detail="Agreement not found")
        return session

    @staticmethod
    def _response(session: AgreementSession) -> AgreementResponse:
        return AgreementResponse(
            id=session.id,
            forms=session.forms,
            totals=summarize(session.state),
            services={
                service_id: entry.payload
                for service_id, entry in session.state.services.items()
                if entry.payload is not None
            },
            createdAt=session.created_at,
            updatedAt=session.updated_at,
        )

    async def _apply_form(
        self,
        session: AgreementSession,
        service_id: str,
        form_data: dict[str, Any],
        refresh: bool = False,
    ) -> None:
        """
        Re-quote one service inside a session.

        A contractMonths value in the form pins the service's length; it is
        not stored with the form so clearing the pin later sticks. Flags the
        form leaves out are derived from the session's SaniClean quote.

        The config is fetched before session.state is read, so concurrent
        requests on one session each build on the latest state.
        """
        engine = self.get_engine(service_id)
        data = dict(form_data or {})
        pinned = data.pop("contractMonths", None)
        self.parse_form(engine, data)  # reject bad input before any network call

        if refresh:
            cfg = await config_provider.refresh_config(service_id, self.client)
        else:
            cfg = await config_provider.get_config(service_id, self.client)

        # no awaits from here on
        state = session.state
        form = self.parse_form(engine, {**saniclean_flags(state, service_id), **data})
        if pinned not in (None, "") and parse_number(pinned) > 0:
            state = set_service_contract_months(state, service_id, int(parse_number(pinned)))

        quantity = form.primary_quantity()
        state = update_service(state, service_id, None, quantity)
        months = agreement_months(state, service_id)

        result = engine.quote(form.model_copy(update={"contractMonths": months}), cfg)
        session.state = update_service(state, service_id, build_payload(result), quantity)
        session.forms[service_id] = data

    async def _requote_all(self, session: AgreementSession, refresh: bool = False) -> None:
        # SaniClean first so bundled services see its latest quote
        ordered = sorted(session.forms, key=lambda service_id: service_id != SANICLEAN_ID)
        for service_id in ordered:
            if service_id in session.forms:
                await self._apply_form(session, service_id, session.forms[service_id], refresh=refresh)

    async def _requote_dependents(self, session: AgreementSession) -> None:
        for service_id in SANICLEAN_DEPENDENTS:
            if service_id in session.forms:
                await self._apply_form(session, service_id, session.forms[service_id])

    async def create_agreement(self, data: AgreementCreate) -> AgreementResponse:
        for service_id in data.services:
            self.get_engine(service_id)

        months = clamp_months(data.globalContractMonths or config.DEFAULT_CONTRACT_MONTHS)
        state = self.apply_charges(AgreementState(global_contract_months=months), data)
        session = self.repo.create(state)
        session.forms.update({service_id: dict(form or {}) for service_id, form in data.services.items()})
        await self._requote_all(session)

        self.repo.save(session)
        logger.info(f"📝 Opened agreement {session.id} with {len(data.services)} service(s)")
        return self._response(session)

    def get_agreement(self, agreement_id: str) -> AgreementResponse:
        return self._response(self._session(agreement_id))

    async def update_service_form(self, agreement_id: str, service_id: str, form_data: dict[str, Any]) -> AgreementResponse:
        session = self._session(agreement_id)
        await self._apply_form(session, service_id, form_data)
        if service_id == SANICLEAN_ID:
            await self._requote_dependents(session)
        self.repo.save(session)
        return self._response(session)

    async def remove_service_form(self, agreement_id: str, service_id: str) -> AgreementResponse:
        session = self._session(agreement_id)
        self.get_engine(service_id)
        session.state = remove_service(session.state, service_id)
        session.forms.pop(service_id, None)
        if service_id == SANICLEAN_ID:
            await self._requote_dependents(session)
        self.repo.save(session)
        logger.info(f"🗑️ Removed {service_id} from agreement {agreement_id}")
        return self._response(session)

    async def update_settings(self, agreement_id: str, data: AgreementSettingsUpdate) -> AgreementResponse:
        session = self._session(agreement_id)
        session.state = self.apply_charges(session.state, data)
        if data.globalContractMonths is not None:
            session.state = set_global_contract_months(session.state, data.globalContractMonths)
            await self._requote_all(session)
            logger.info(f"📅 Agreement {agreement_id} now {session.state.global_contract_months} months")
        self.repo.save(session)
        return self._response(session)

    async def set_service_months(self, agreement_id: str, service_id: str, months: Optional[int]) -> AgreementResponse:
        session = self._session(agreement_id)
        self.get_engine(service_id)
        session.state = set_service_contract_months(session.state, service_id, months)
        if service_id in session.forms:
            await self._apply_form(session, service_id, session.forms[service_id])
        self.repo.save(session)
        return self._response(session)

    async def refresh_agreement(self, agreement_id: str) -> AgreementResponse:
        """Re-fetch every service config and re-quote; overrides stay in the forms"""
        session = self._session(agreement_id)
        await self._requote_all(session, refresh=True)
        self.repo.save(session)
        logger.info(f"🔄 Refreshed pricing for agreement {agreement_id}")
        return self._response(session)
