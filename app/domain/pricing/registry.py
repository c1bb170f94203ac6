"""Service id -> pricing engine (form model + calculator)"""

import copy
from dataclasses import dataclass
from typing import Any, Callable, Mapping

from .calculators import (
    carpet,
    electrostatic_spray,
    foaming_drain,
    grease_trap,
    janitorial,
    microfiber_mopping,
    refresh_power_scrub,
    rpm_windows,
    saniclean,
    saniscrub,
    sanipod,
    strip_wax,
)
from .common import QuoteResult, ServiceForm
from .payload import build_payload


@dataclass(frozen=True)
class PricingEngine:
    service_id: str
    display_name: str
    form_model: type[ServiceForm]
    calculator: Callable[[Any, dict], QuoteResult]

    def parse_form(self, data: Mapping[str, Any]) -> ServiceForm:
        """Validate raw form fields; raises pydantic.ValidationError on bad enums"""
        return self.form_model.model_validate(dict(data or {}))

    def quote(self, form: ServiceForm, pricing_config: dict) -> QuoteResult:
        # calculators must never see a config they could mutate
        return self.calculator(form, copy.deepcopy(pricing_config))


def _engine(module, form_model) -> PricingEngine:
    return PricingEngine(
        service_id=module.SERVICE_ID,
        display_name=module.DISPLAY_NAME,
        form_model=form_model,
        calculator=module.calculate,
    )


ENGINES: dict[str, PricingEngine] = {
    engine.service_id: engine
    for engine in (
        _engine(saniclean, saniclean.SanicleanForm),
        _engine(saniscrub, saniscrub.SaniscrubForm),
        _engine(carpet, carpet.CarpetForm),
        _engine(foaming_drain, foaming_drain.FoamingDrainForm),
        _engine(electrostatic_spray, electrostatic_spray.ElectrostaticSprayForm),
        _engine(sanipod, sanipod.SanipodForm),
        _engine(strip_wax, strip_wax.StripWaxForm),
        _engine(rpm_windows, rpm_windows.RpmWindowsForm),
        _engine(grease_trap, grease_trap.GreaseTrapForm),
        _engine(microfiber_mopping, microfiber_mopping.MicrofiberMoppingForm),
        _engine(janitorial, janitorial.JanitorialForm),
        _engine(refresh_power_scrub, refresh_power_scrub.RefreshPowerScrubForm),
    )
}


def get_engine(service_id: str) -> PricingEngine:
    """
    Look up the engine for a service.

    Raises:
        KeyError: If no calculator exists for service_id
    """
    return ENGINES[service_id]


def quote_service(service_id: str, form_data: Mapping[str, Any], pricing_config: dict) -> tuple[QuoteResult, dict]:
    """Parse, calculate and serialize in one step"""
    engine = get_engine(service_id)
    form = engine.parse_form(form_data)
    quote = engine.quote(form, pricing_config)
    return quote, build_payload(quote)


__all__ = ["ENGINES", "PricingEngine", "get_engine", "quote_service"]
