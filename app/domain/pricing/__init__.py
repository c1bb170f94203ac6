"""Pricing domain - calculators, rate configs and agreement aggregation"""

from .router import router

__all__ = ["router"]
