"""
Golden quotes against the shipped rate card in src/tour_pricing/data.
"""
from datetime import date
from decimal import Decimal

import pytest

from conftest import FRIDAY, SATURDAY, THURSDAY, TUESDAY
from tour_pricing.config.settings import Settings
from tour_pricing.engine import CalculationRequest, NoTierFound, PricingResolver
from tour_pricing.repository import CsvPricingRepository


@pytest.fixture(scope='module')
def resolver():
    settings = Settings.load()
    repository = CsvPricingRepository(settings.tiers_csv, settings.modifiers_csv)
    return PricingResolver(repository, today=lambda: date(2026, 5, 25))


@pytest.mark.parametrize("service_date, party_size, hours, tier_id, final", [
    (TUESDAY, 4, 6, 2, '570.00'),
    (SATURDAY, 4, 6, 8, '630.00'),
    (TUESDAY, 12, 5, 6, '700.00'),
    (FRIDAY, 9, 8, 11, '1120.00'),
])
def test_wine_tour_rates(resolver, service_date, party_size, hours, tier_id, final):
    quote = resolver.calculate(CalculationRequest(
        service_type='wine_tour', date=service_date, party_size=party_size,
        duration_hours=hours, apply_modifiers=False,
    ))
    assert quote.tier_used.tier_id == tier_id
    assert quote.final_price == Decimal(final)


def test_short_thursday_tour_hits_minimum(resolver):
    quote = resolver.calculate(CalculationRequest(
        service_type='wine_tour', date=THURSDAY, party_size=2, duration_hours=4, apply_modifiers=False,
    ))
    assert quote.raw_rate == Decimal('380.00')
    assert quote.final_price == Decimal('475.00')


def test_seatac_transfer(resolver):
    quote = resolver.calculate(CalculationRequest(service_type='transfer', date=FRIDAY, transfer_type='seatac'))
    assert quote.final_price == Decimal('850.00')
    assert quote.modifiers == []


@pytest.mark.parametrize("transfer_type", ['pasco', 'walla', 'seattle'])
def test_unpriced_transfers(resolver, transfer_type):
    with pytest.raises(NoTierFound):
        resolver.calculate(CalculationRequest(service_type='transfer', date=FRIDAY, transfer_type=transfer_type))


def test_wait_time(resolver):
    quote = resolver.calculate(CalculationRequest(
        service_type='wait_time', date=FRIDAY, party_size=3, hours=2,
    ))
    assert quote.tier_used.tier_id == 16
    assert quote.final_price == Decimal('170.00')


def test_early_large_group_stacks_both_discounts(resolver):
    quote = resolver.calculate(CalculationRequest(
        service_type='wine_tour', date=TUESDAY, party_size=10, duration_hours=6,
        booking_date=date(2026, 4, 18),
    ))

    assert quote.base_rate == Decimal('780.00')
    assert [(m.name, m.amount) for m in quote.modifiers] == [
        ("Early Bird", Decimal('-78.00')),
        ("Large Group", Decimal('-35.10')),
    ]
    assert quote.final_price == Decimal('666.90')


def test_late_large_group_gets_volume_discount_only(resolver):
    quote = resolver.calculate(CalculationRequest(
        service_type='wine_tour', date=TUESDAY, party_size=10, duration_hours=6,
    ))
    assert [m.name for m in quote.modifiers] == ["Large Group"]
    assert quote.final_price == Decimal('741.00')
