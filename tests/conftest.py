import sys
import os
from datetime import date
from decimal import Decimal

import pytest

# Add src to path for internal imports
src_path = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'src')
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from tour_pricing.engine.models import PricingModifier, PricingTier
from tour_pricing.repository import InMemoryPricingRepository


# June 2026: Mon 1, Tue 2, Wed 3, Thu 4, Fri 5, Sat 6, Sun 7
MONDAY = date(2026, 6, 1)
TUESDAY = date(2026, 6, 2)
WEDNESDAY = date(2026, 6, 3)
THURSDAY = date(2026, 6, 4)
FRIDAY = date(2026, 6, 5)
SATURDAY = date(2026, 6, 6)
SUNDAY = date(2026, 6, 7)


def make_tier(tier_id: int = 1, **overrides) -> PricingTier:
    values = dict(
        tier_id=tier_id,
        service_type='wine_tour',
        tier_name=f"Tier {tier_id}",
        pricing_model='hourly',
        day_type='sun_wed',
        party_size_min=1,
        party_size_max=14,
        hourly_rate=Decimal('100'),
        minimum_charge=Decimal('400'),
    )
    values.update(overrides)
    return PricingTier(**values)


def make_modifier(modifier_id: int = 1, **overrides) -> PricingModifier:
    values = dict(
        modifier_id=modifier_id,
        name=f"Modifier {modifier_id}",
        value=Decimal('-10'),
        value_type='percentage',
        priority=10,
    )
    values.update(overrides)
    return PricingModifier(**values)


@pytest.fixture
def tier_factory():
    return make_tier


@pytest.fixture
def modifier_factory():
    return make_modifier


@pytest.fixture
def repository():
    """Store with the single Sun-Wed tour tier used in the worked examples."""
    return InMemoryPricingRepository(tiers=[make_tier()])
