"""
Tier Matcher - Selects the pricing tier for a request.

Used by the resolver to pick the single base rate a quote is built on.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from .models import CalculationRequest, PricingTier, day_bucket, normalize_day_type

logger = logging.getLogger(__name__)


@dataclass
class MatchedTier:
    """A tier that matched with context."""
    tier: PricingTier
    match_reason: str


class TierMatcher:
    """
    Matches pricing tiers against request context.

    Filters run in order: active + service type + effective window,
    day bucket, party size (and route for transfers). When more than one
    tier survives, the narrowest party-size band wins, then the highest id.
    """

    def find_matching_tiers(
        self,
        tiers: list[PricingTier],
        request: CalculationRequest,
    ) -> list[MatchedTier]:
        """Find all tiers that match the request, best candidate first."""
        bucket = day_bucket(request.date)
        matched = []

        for tier in tiers:
            reasons = []

            if not tier.active:
                continue
            if tier.service_type != request.service_type:
                continue
            if not tier.is_effective(request.date):
                continue
            reasons.append(f"service={tier.service_type}")

            try:
                tier_day = normalize_day_type(tier.day_type)
            except ValueError as e:
                logger.warning("Skipping tier %s: %s", tier.tier_id, e)
                continue
            if tier_day != 'any' and tier_day != bucket:
                continue
            reasons.append(f"day={tier_day}")

            # Transfers without a party size skip the party-size gate
            if not tier.matches_party_size(request.party_size):
                continue
            if request.party_size is not None and tier.band_width != float('inf'):
                reasons.append(f"party {tier.party_size_min}-{tier.party_size_max}")

            if request.service_type == 'transfer':
                if (tier.transfer_type or '').strip().lower() != (request.transfer_type or '').strip().lower():
                    continue
                reasons.append(f"route={tier.transfer_type}")

            matched.append(MatchedTier(tier=tier, match_reason=", ".join(reasons)))

        matched.sort(key=lambda m: (m.tier.band_width, -m.tier.tier_id))
        return matched

    def select_tier(
        self,
        tiers: list[PricingTier],
        request: CalculationRequest,
    ) -> Optional[MatchedTier]:
        """Return the single tier to price with, or None."""
        matched = self.find_matching_tiers(tiers, request)
        return matched[0] if matched else None
