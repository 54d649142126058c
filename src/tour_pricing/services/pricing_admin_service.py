"""
Pricing Admin Service - CRUD operations for pricing tiers and modifiers.
Validates changes before they are written back to the configuration store.
"""
import logging
from dataclasses import dataclass, field, fields, replace
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from ..engine.errors import RecordNotFound
from ..engine.models import (
    PRICING_MODELS,
    SERVICE_TYPES,
    TRANSFER_TYPES,
    VALUE_TYPES,
    WEEKDAY_KEYS,
    PricingModifier,
    PricingTier,
    normalize_day_type,
)

logger = logging.getLogger(__name__)


@dataclass
class ValidationResult:
    """Result of tier or modifier validation."""
    valid: bool
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def add_error(self, message: str):
        self.errors.append(message)
        self.valid = False


def _bands_overlap(a: PricingTier, b: PricingTier) -> bool:
    a_min = a.party_size_min if a.party_size_min is not None else float('-inf')
    a_max = a.party_size_max if a.party_size_max is not None else float('inf')
    b_min = b.party_size_min if b.party_size_min is not None else float('-inf')
    b_max = b.party_size_max if b.party_size_max is not None else float('inf')
    return a_min <= b_max and b_min <= a_max


def _days_overlap(a: str, b: str) -> bool:
    a, b = normalize_day_type(a), normalize_day_type(b)
    return a == 'any' or b == 'any' or a == b


def _windows_overlap(a, b) -> bool:
    a_start = a.effective_start_date or date.min
    a_end = a.effective_end_date or date.max
    b_start = b.effective_start_date or date.min
    b_end = b.effective_end_date or date.max
    return a_start <= b_end and b_start <= a_end


class PricingAdminService:
    """Service for managing pricing tiers and modifiers."""

    def __init__(self, repository, today=date.today):
        self.repository = repository
        self.today = today

    # ------------------------------------------------------------------
    # Tiers
    # ------------------------------------------------------------------

    def list_tiers(self, service_type: Optional[str] = None, include_inactive: bool = True) -> list[PricingTier]:
        """List tiers ordered by service type, party size and day type."""
        tiers = [
            t for t in self.repository.list_tiers()
            if (service_type is None or t.service_type == service_type)
            and (include_inactive or t.active)
        ]
        tiers.sort(key=lambda t: (t.service_type, t.party_size_min or 0, t.day_type, t.tier_id))
        return tiers

    def get_tier(self, tier_id: int) -> PricingTier:
        """Get a single tier by ID."""
        for tier in self.repository.list_tiers():
            if tier.tier_id == tier_id:
                return tier
        raise RecordNotFound(f"Tier {tier_id} not found")

    def create_tier(self, tier: PricingTier) -> PricingTier:
        """Create a new tier; assigns the next id and a creation timestamp."""
        tiers = self.repository.list_tiers()
        tier = replace(
            tier,
            tier_id=max((t.tier_id for t in tiers), default=0) + 1,
            day_type=normalize_day_type(tier.day_type),
            created_at=tier.created_at or datetime.now().isoformat(timespec='seconds'),
        )
        tiers.append(tier)
        self.repository.save_tiers(tiers)
        logger.info("Created tier %d (%s, %s)", tier.tier_id, tier.service_type, tier.tier_name)
        return tier

    def update_tier(self, tier_id: int, updates: dict) -> PricingTier:
        """Apply a partial update to an existing tier."""
        tiers = self.repository.list_tiers()
        allowed = {f.name for f in fields(PricingTier)} - {'tier_id', 'created_at'}

        for i, tier in enumerate(tiers):
            if tier.tier_id == tier_id:
                changes = {k: v for k, v in updates.items() if k in allowed}
                if 'day_type' in changes:
                    changes['day_type'] = normalize_day_type(changes['day_type'])
                tiers[i] = replace(tier, **changes)
                self.repository.save_tiers(tiers)
                logger.info("Updated tier %d: %s", tier_id, ", ".join(sorted(changes)))
                return tiers[i]

        raise RecordNotFound(f"Tier {tier_id} not found")

    def delete_tier(self, tier_id: int) -> bool:
        """Delete a tier."""
        tiers = self.repository.list_tiers()
        remaining = [t for t in tiers if t.tier_id != tier_id]
        if len(remaining) == len(tiers):
            raise RecordNotFound(f"Tier {tier_id} not found")
        self.repository.save_tiers(remaining)
        logger.info("Deleted tier %d", tier_id)
        return True

    def validate_tier(self, tier: PricingTier) -> ValidationResult:
        """Validate a tier before saving."""
        result = ValidationResult(valid=True)

        if not tier.tier_name:
            result.add_error("Tier name is required")

        if tier.service_type not in SERVICE_TYPES:
            result.add_error(f"Service type must be one of: {', '.join(SERVICE_TYPES)}")

        if tier.pricing_model not in PRICING_MODELS:
            result.add_error(f"Pricing model must be one of: {', '.join(PRICING_MODELS)}")

        try:
            normalize_day_type(tier.day_type)
        except ValueError as e:
            result.add_error(str(e))

        for name in ('base_rate', 'hourly_rate', 'minimum_charge'):
            if getattr(tier, name) < 0:
                result.add_error(f"{name} cannot be negative")

        for name in ('party_size_min', 'party_size_max'):
            value = getattr(tier, name)
            if value is not None and value < 1:
                result.add_error(f"{name} must be at least 1")

        if (tier.party_size_min is not None and tier.party_size_max is not None
                and tier.party_size_min > tier.party_size_max):
            result.add_error("party_size_min cannot exceed party_size_max")

        if tier.pricing_model == 'hourly' and tier.service_type != 'transfer' and tier.hourly_rate <= 0:
            result.add_error("Hourly tiers need a positive hourly_rate")

        if tier.pricing_model in ('flat', 'per_person', 'per_mile') and tier.base_rate <= 0 and tier.active:
            result.warnings.append(f"Active {tier.pricing_model} tier has no base_rate")

        if tier.service_type == 'transfer':
            if not tier.transfer_type:
                result.add_error("Transfer tiers need a transfer_type")
            elif tier.transfer_type.lower() not in TRANSFER_TYPES:
                result.add_error(f"transfer_type must be one of: {', '.join(TRANSFER_TYPES)}")
            if tier.pricing_model == 'hourly':
                result.add_error("Transfer tiers cannot use hourly pricing")

        if tier.pricing_model == 'per_mile':
            result.warnings.append("per_mile tiers are quoted at base_rate (no mileage input)")

        self._validate_window(tier, result)

        if result.valid and tier.active:
            result.warnings.extend(self._check_tier_conflicts(tier))

        return result

    def _check_tier_conflicts(self, tier: PricingTier) -> list[str]:
        """Check for active tiers that could match the same requests."""
        warnings = []
        for existing in self.repository.list_tiers():
            if existing.tier_id == tier.tier_id or not existing.active:
                continue
            if existing.service_type != tier.service_type:
                continue
            if tier.service_type == 'transfer' and (existing.transfer_type or '') != (tier.transfer_type or '').lower():
                continue
            if not _days_overlap(existing.day_type, tier.day_type):
                continue
            if not _bands_overlap(existing, tier) or not _windows_overlap(existing, tier):
                continue
            warnings.append(
                f"Potential conflict with tier {existing.tier_id} '{existing.tier_name}' "
                f"(narrowest party-size band wins, then highest id)"
            )
        return warnings

    # ------------------------------------------------------------------
    # Modifiers
    # ------------------------------------------------------------------

    def list_modifiers(self, include_inactive: bool = True) -> list[PricingModifier]:
        """List modifiers in stacking order."""
        modifiers = [m for m in self.repository.list_modifiers() if include_inactive or m.active]
        modifiers.sort(key=lambda m: (m.priority, m.modifier_id))
        return modifiers

    def get_modifier(self, modifier_id: int) -> PricingModifier:
        for modifier in self.repository.list_modifiers():
            if modifier.modifier_id == modifier_id:
                return modifier
        raise RecordNotFound(f"Modifier {modifier_id} not found")

    def create_modifier(self, modifier: PricingModifier) -> PricingModifier:
        modifiers = self.repository.list_modifiers()
        modifier = replace(
            modifier,
            modifier_id=max((m.modifier_id for m in modifiers), default=0) + 1,
        )
        modifiers.append(modifier)
        self.repository.save_modifiers(modifiers)
        logger.info("Created modifier %d (%s)", modifier.modifier_id, modifier.name)
        return modifier

    def update_modifier(self, modifier_id: int, updates: dict) -> PricingModifier:
        modifiers = self.repository.list_modifiers()
        allowed = {f.name for f in fields(PricingModifier)} - {'modifier_id'}

        for i, modifier in enumerate(modifiers):
            if modifier.modifier_id == modifier_id:
                changes = {k: v for k, v in updates.items() if k in allowed}
                modifiers[i] = replace(modifier, **changes)
                self.repository.save_modifiers(modifiers)
                logger.info("Updated modifier %d: %s", modifier_id, ", ".join(sorted(changes)))
                return modifiers[i]

        raise RecordNotFound(f"Modifier {modifier_id} not found")

    def delete_modifier(self, modifier_id: int) -> bool:
        modifiers = self.repository.list_modifiers()
        remaining = [m for m in modifiers if m.modifier_id != modifier_id]
        if len(remaining) == len(modifiers):
            raise RecordNotFound(f"Modifier {modifier_id} not found")
        self.repository.save_modifiers(remaining)
        logger.info("Deleted modifier %d", modifier_id)
        return True

    def validate_modifier(self, modifier: PricingModifier) -> ValidationResult:
        """Validate a modifier before saving."""
        result = ValidationResult(valid=True)

        if not modifier.name:
            result.add_error("Name is required")

        if modifier.value_type not in VALUE_TYPES:
            result.add_error(f"Value type must be one of: {', '.join(VALUE_TYPES)}")

        if modifier.value == 0:
            result.warnings.append("Modifier value is zero and has no effect")

        if modifier.value_type == 'percentage' and modifier.value <= Decimal('-100'):
            result.add_error("Percentage reductions must be greater than -100")

        unknown = [s for s in modifier.applies_to_service_types if s not in SERVICE_TYPES]
        if unknown:
            result.add_error(f"Unknown service types: {', '.join(unknown)}")

        unknown_days = [d for d in modifier.applies_days if d not in WEEKDAY_KEYS]
        if unknown_days:
            result.add_error(f"Unknown days: {', '.join(unknown_days)}")

        if (modifier.min_party_size is not None and modifier.max_party_size is not None
                and modifier.min_party_size > modifier.max_party_size):
            result.add_error("min_party_size cannot exceed max_party_size")

        if modifier.min_advance_days is not None and modifier.min_advance_days < 0:
            result.add_error("min_advance_days cannot be negative")

        # Sign is carried by value, not by category
        if modifier.modifier_type in ('discount', 'early_bird', 'volume') and modifier.value > 0:
            result.warnings.append(f"'{modifier.modifier_type}' modifier has a positive value and will increase the price")
        if modifier.modifier_type == 'surcharge' and modifier.value < 0:
            result.warnings.append("'surcharge' modifier has a negative value and will reduce the price")

        self._validate_window(modifier, result)

        for existing in self.repository.list_modifiers():
            if (existing.modifier_id != modifier.modifier_id and existing.active
                    and existing.priority == modifier.priority):
                result.warnings.append(
                    f"Shares priority {modifier.priority} with modifier {existing.modifier_id} "
                    f"'{existing.name}' (ordered by id)"
                )

        return result

    def _validate_window(self, record, result: ValidationResult):
        start, end = record.effective_start_date, record.effective_end_date
        if start and end and start > end:
            result.add_error("Effective start date must be before end date")
        if end and end < self.today():
            result.warnings.append("Effective window has ended (end date is in the past)")

    # ------------------------------------------------------------------

    def get_stats(self) -> dict:
        """Get statistics about the pricing configuration."""
        tiers = self.repository.list_tiers()
        modifiers = self.repository.list_modifiers()

        by_service = {}
        for t in tiers:
            by_service[t.service_type] = by_service.get(t.service_type, 0) + 1

        return {
            'tiers': {
                'total': len(tiers),
                'active': sum(1 for t in tiers if t.active),
                'inactive': sum(1 for t in tiers if not t.active),
                'by_service_type': by_service,
            },
            'modifiers': {
                'total': len(modifiers),
                'active': sum(1 for m in modifiers if m.active),
                'inactive': sum(1 for m in modifiers if not m.active),
            },
        }
