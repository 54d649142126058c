"""
Modifier Matcher - Decides which modifiers apply and stacks them.

Used by the resolver to layer discounts and surcharges on top of the
base rate of the selected tier.
"""
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Callable, Optional

from .models import AppliedModifier, PricingModifier, to_money, weekday_key


@dataclass
class EligibilityContext:
    """Request attributes a modifier can be gated on."""
    service_type: str
    service_date: date
    party_size: Optional[int]
    booking_amount: Decimal
    advance_days: Optional[int] = None

    @property
    def weekday(self) -> str:
        return weekday_key(self.service_date)


EligibilityPredicate = Callable[[PricingModifier, EligibilityContext], bool]


def default_eligibility(modifier: PricingModifier, context: EligibilityContext) -> bool:
    """
    Enumerated eligibility rules over modifier metadata.

    Every restriction left unset on the modifier passes. A restriction on
    party size or advance days never passes when the request does not
    carry that attribute.
    """
    if modifier.applies_to_service_types and context.service_type not in modifier.applies_to_service_types:
        return False

    if modifier.min_party_size is not None:
        if context.party_size is None or context.party_size < modifier.min_party_size:
            return False
    if modifier.max_party_size is not None:
        if context.party_size is None or context.party_size > modifier.max_party_size:
            return False

    if modifier.min_advance_days is not None:
        if context.advance_days is None or context.advance_days < modifier.min_advance_days:
            return False

    if modifier.min_booking_amount is not None and context.booking_amount < modifier.min_booking_amount:
        return False

    if modifier.effective_start_date and context.service_date < modifier.effective_start_date:
        return False
    if modifier.effective_end_date and context.service_date > modifier.effective_end_date:
        return False

    if modifier.applies_days and context.weekday not in modifier.applies_days:
        return False

    return True


class ModifierMatcher:
    """Filters, orders and applies pricing modifiers."""

    def __init__(self, eligibility: Optional[EligibilityPredicate] = None):
        self.eligibility = eligibility or default_eligibility

    def find_applicable(
        self,
        modifiers: list[PricingModifier],
        context: EligibilityContext,
    ) -> list[PricingModifier]:
        """
        Return active, eligible modifiers in stacking order.

        Lower priority applies first; equal priorities fall back to id.
        """
        applicable = [m for m in modifiers if m.active and self.eligibility(m, context)]
        applicable.sort(key=lambda m: (m.priority, m.modifier_id))
        return applicable

    def apply(
        self,
        modifiers: list[PricingModifier],
        running_total: Decimal,
    ) -> tuple[Decimal, list[AppliedModifier], list[str]]:
        """
        Stack modifiers onto a running total.

        Returns (new_total, applied, trace_messages).
        """
        applied = []
        traces = []

        for modifier in modifiers:
            if modifier.value_type == 'percentage':
                amount = to_money(running_total * modifier.value / Decimal('100'))
                label = f"{modifier.value}% of ${running_total:.2f}"
            else:
                amount = to_money(modifier.value)
                label = "flat"

            new_total = running_total + amount
            sign = '+' if amount >= 0 else '-'
            traces.append(
                f"{modifier.name} ({label}): {sign}${abs(amount):.2f}, "
                f"${running_total:.2f} → ${new_total:.2f}"
            )
            running_total = new_total
            applied.append(AppliedModifier(
                name=modifier.name,
                amount=amount,
                modifier_type=modifier.modifier_type,
                value=modifier.value,
                value_type=modifier.value_type,
            ))

            if not modifier.stackable:
                traces.append(f"{modifier.name} is not stackable, later modifiers skipped")
                break

        return running_total, applied, traces
