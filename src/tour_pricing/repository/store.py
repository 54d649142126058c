"""
Pricing configuration store interface and an in-memory implementation.
"""
import copy
from typing import Protocol

from ..engine.models import PricingModifier, PricingTier


class PricingRepository(Protocol):
    """Read side of the tier/modifier configuration."""

    def list_tiers(self) -> list[PricingTier]:
        ...

    def list_modifiers(self) -> list[PricingModifier]:
        ...


class InMemoryPricingRepository:
    """Holds tiers and modifiers in memory. Used for fixtures and embedding."""

    def __init__(self, tiers: list[PricingTier] = None, modifiers: list[PricingModifier] = None):
        self.tiers = list(tiers or [])
        self.modifiers = list(modifiers or [])

    def list_tiers(self) -> list[PricingTier]:
        # Copies, so callers can never mutate stored configuration
        return copy.deepcopy(self.tiers)

    def list_modifiers(self) -> list[PricingModifier]:
        return copy.deepcopy(self.modifiers)

    def save_tiers(self, tiers: list[PricingTier]):
        self.tiers = copy.deepcopy(tiers)

    def save_modifiers(self, modifiers: list[PricingModifier]):
        self.modifiers = copy.deepcopy(modifiers)
