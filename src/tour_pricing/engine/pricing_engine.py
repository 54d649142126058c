"""
Pricing Resolver - Core quote resolution logic with traceability.

Resolution order:
1. Validate the request for its service type
2. Select the single matching active tier (day bucket, party size, route)
3. Compute the base rate from the tier's pricing model
4. Floor the base rate at the tier's minimum charge
5. Stack eligible modifiers in priority order (optional)
6. Floor the final price at the minimum charge again

The resolver is a pure function of the request and the configuration the
repository returns at call time. It never substitutes a price when no tier
matches.
"""
from datetime import date
from decimal import Decimal
from typing import Callable, Optional

from .errors import InvalidInput, NoTierFound
from .models import (
    SERVICE_TYPES,
    TRANSFER_TYPES,
    CalculationRequest,
    PriceQuote,
    PricingTier,
    day_bucket,
    to_money,
)
from .modifier_matcher import EligibilityContext, EligibilityPredicate, ModifierMatcher
from .tier_matcher import TierMatcher


MAX_HOURS = Decimal('24')


def _fmt_hours(hours: Decimal) -> str:
    text = f"{hours:f}"
    return text.rstrip('0').rstrip('.') if '.' in text else text


def validate_request(request: CalculationRequest) -> None:
    """Raise InvalidInput listing every problem with the request."""
    errors = []

    if request.service_type not in SERVICE_TYPES:
        errors.append(f"serviceType must be one of: {', '.join(SERVICE_TYPES)}")

    if request.date is None:
        errors.append("date is required")

    if request.party_size is not None:
        if isinstance(request.party_size, bool) or not isinstance(request.party_size, int):
            errors.append("partySize must be an integer")
        elif request.party_size < 1:
            errors.append("partySize must be at least 1")
    elif request.service_type in ('wine_tour', 'wait_time'):
        errors.append(f"partySize is required for {request.service_type}")

    if request.service_type == 'wine_tour':
        if request.duration_hours is None:
            errors.append("durationHours is required for wine_tour")
        elif not request.duration_hours.is_finite() or request.duration_hours > MAX_HOURS:
            errors.append(f"durationHours must be a number no greater than {MAX_HOURS}")
        elif request.duration_hours < 1:
            errors.append("durationHours must be at least 1")
        elif (request.duration_hours * 2) % 1 != 0:
            errors.append("durationHours must be in 0.5 hour increments")

    elif request.service_type == 'transfer':
        if not request.transfer_type:
            errors.append("transferType is required for transfer")
        elif request.transfer_type.strip().lower() not in TRANSFER_TYPES:
            errors.append(f"transferType must be one of: {', '.join(TRANSFER_TYPES)}")
        if request.hours is not None and (not request.hours.is_finite() or request.hours > MAX_HOURS):
            errors.append(f"hours must be a number no greater than {MAX_HOURS}")

    elif request.service_type == 'wait_time':
        if request.hours is None:
            errors.append("hours is required for wait_time")
        elif not request.hours.is_finite() or request.hours > MAX_HOURS:
            errors.append(f"hours must be a number no greater than {MAX_HOURS}")
        elif request.hours < Decimal('0.5'):
            errors.append("hours must be at least 0.5")

    if errors:
        raise InvalidInput("Invalid pricing request", details=errors)


class PricingResolver:
    """
    Resolves a quote for a service request against injected configuration.

    Args:
        repository: Read-only source of tiers and modifiers, read per call.
        eligibility: Optional predicate deciding which modifiers apply.
        today: Clock used for advance-booking rules when the request
            carries no booking date.
    """

    def __init__(
        self,
        repository,
        eligibility: Optional[EligibilityPredicate] = None,
        today: Callable[[], date] = date.today,
    ):
        self.repository = repository
        self.tier_matcher = TierMatcher()
        self.modifier_matcher = ModifierMatcher(eligibility)
        self.today = today

    def calculate(self, request: CalculationRequest) -> PriceQuote:
        """
        Calculate a quote with full breakdown.

        Raises:
            InvalidInput: the request is incomplete or out of range
            NoTierFound: no active tier matches
            ConfigurationUnavailable: the store could not be read
        """
        validate_request(request)

        tiers = self.repository.list_tiers()
        matched = self.tier_matcher.select_tier(tiers, request)
        if matched is None:
            raise NoTierFound(
                f"No pricing tier found for {request.service_type}",
                details=[self._describe(request)],
            )
        tier = matched.tier

        quote = PriceQuote(
            tier_used=tier,
            base_rate=Decimal('0'),
            final_price=Decimal('0'),
            day_type=day_bucket(request.date),
        )
        quote.add_trace("Tier Matched", f"{tier.tier_name} ({matched.match_reason})", f"#{tier.tier_id}")

        base_rate = self._base_rate(tier, request, quote)
        quote.raw_rate = base_rate
        minimum = to_money(tier.minimum_charge)
        if base_rate < minimum:
            quote.add_trace("Minimum Charge", f"${base_rate:.2f} raised to tier minimum", f"${minimum:.2f}")
            base_rate = minimum
            quote.minimum_charge_applied = True
        quote.base_rate = base_rate

        if not request.apply_modifiers:
            quote.final_price = base_rate
            quote.add_trace("Final Price", "Modifiers not applied", f"${base_rate:.2f}")
            return quote

        modifiers = self.repository.list_modifiers()
        context = EligibilityContext(
            service_type=request.service_type,
            service_date=request.date,
            party_size=request.party_size,
            booking_amount=base_rate,
            advance_days=(request.date - (request.booking_date or self.today())).days,
        )
        applicable = self.modifier_matcher.find_applicable(modifiers, context)
        running_total, applied, traces = self.modifier_matcher.apply(applicable, base_rate)
        quote.modifiers = applied
        for trace_msg in traces:
            quote.add_trace("Modifier", trace_msg)

        if running_total < minimum:
            quote.add_trace("Minimum Charge", f"${running_total:.2f} raised to tier minimum", f"${minimum:.2f}")
            running_total = minimum
            quote.minimum_charge_applied = True

        quote.final_price = running_total
        quote.add_trace("Final Price", f"{len(applied)} modifier(s) applied", f"${running_total:.2f}")
        return quote

    def _base_rate(self, tier: PricingTier, request: CalculationRequest, quote: PriceQuote) -> Decimal:
        """Compute the pre-floor rate from the tier's pricing model."""
        model = tier.pricing_model

        if model == 'hourly':
            hours = request.duration_hours if request.service_type == 'wine_tour' else request.hours
            if hours is not None:
                rate = to_money(tier.hourly_rate * hours)
                quote.add_trace(
                    "Base Rate",
                    f"${tier.hourly_rate:.2f}/hr × {_fmt_hours(hours)} hours",
                    f"${rate:.2f}",
                )
                return rate
            rate = to_money(tier.base_rate)
            quote.add_trace("Base Rate", "Hourly tier without hours, using base rate", f"${rate:.2f}")
            return rate

        if model == 'per_person':
            if request.party_size is None:
                raise InvalidInput(
                    "Invalid pricing request",
                    details=[f"partySize is required for per-person tier '{tier.tier_name}'"],
                )
            rate = to_money(tier.base_rate * request.party_size)
            quote.add_trace(
                "Base Rate",
                f"${tier.base_rate:.2f}/person × {request.party_size} guests",
                f"${rate:.2f}",
            )
            return rate

        # flat, and per_mile until a mileage input exists
        rate = to_money(tier.base_rate)
        label = "Flat rate" if model == 'flat' else f"{model} rate (base rate passthrough)"
        quote.add_trace("Base Rate", label, f"${rate:.2f}")
        return rate

    @staticmethod
    def _describe(request: CalculationRequest) -> str:
        parts = [f"date={request.date.isoformat()} ({day_bucket(request.date)})"]
        if request.party_size is not None:
            parts.append(f"partySize={request.party_size}")
        if request.transfer_type:
            parts.append(f"transferType={request.transfer_type}")
        return ", ".join(parts)
