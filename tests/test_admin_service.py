"""
Admin service: CRUD, validation and conflict warnings.
"""
from datetime import date
from decimal import Decimal

import pytest

from conftest import make_modifier, make_tier
from tour_pricing.engine.errors import RecordNotFound
from tour_pricing.repository import InMemoryPricingRepository
from tour_pricing.services.pricing_admin_service import PricingAdminService


@pytest.fixture
def service():
    repository = InMemoryPricingRepository(
        tiers=[
            make_tier(1, party_size_min=1, party_size_max=4),
            make_tier(2, party_size_min=5, party_size_max=8),
            make_tier(3, day_type='thu_sat', party_size_min=1, party_size_max=4, active=False),
        ],
        modifiers=[
            make_modifier(1, name="Early Bird", priority=10),
            make_modifier(2, name="Large Group", priority=20, min_party_size=10),
        ],
    )
    return PricingAdminService(repository, today=lambda: date(2026, 6, 1))


class TestTierCrud:

    def test_list_tiers_filters(self, service):
        assert len(service.list_tiers()) == 3
        assert [t.tier_id for t in service.list_tiers(include_inactive=False)] == [1, 2]
        assert service.list_tiers(service_type='transfer') == []

    def test_get_tier(self, service):
        assert service.get_tier(2).party_size_min == 5
        with pytest.raises(RecordNotFound):
            service.get_tier(99)

    def test_create_assigns_next_id_and_timestamp(self, service):
        created = service.create_tier(make_tier(0, day_type='weekend', party_size_min=9, party_size_max=14))

        assert created.tier_id == 4
        assert created.day_type == 'thu_sat'
        assert created.created_at
        assert service.get_tier(4) == created

    def test_update_tier(self, service):
        updated = service.update_tier(1, {'hourly_rate': Decimal('110'), 'day_type': 'weekday', 'tier_id': 50})

        assert updated.tier_id == 1
        assert updated.hourly_rate == Decimal('110')
        assert updated.day_type == 'sun_wed'
        assert service.get_tier(1).hourly_rate == Decimal('110')

    def test_update_missing_tier(self, service):
        with pytest.raises(RecordNotFound):
            service.update_tier(99, {'active': False})

    def test_delete_tier(self, service):
        assert service.delete_tier(2) is True
        assert [t.tier_id for t in service.list_tiers()] == [1, 3]
        with pytest.raises(RecordNotFound):
            service.delete_tier(2)


class TestTierValidation:

    def test_valid_tier(self, service):
        result = service.validate_tier(make_tier(10, party_size_min=9, party_size_max=14))
        assert result.valid
        assert result.errors == []

    def test_band_min_exceeds_max(self, service):
        result = service.validate_tier(make_tier(10, party_size_min=8, party_size_max=3))
        assert not result.valid
        assert "party_size_min cannot exceed party_size_max" in result.errors

    def test_negative_rate_and_bad_enums(self, service):
        tier = make_tier(10, service_type='limo', pricing_model='daily', minimum_charge=Decimal('-1'))
        result = service.validate_tier(tier)
        assert len(result.errors) == 3

    def test_invalid_day_type(self, service):
        result = service.validate_tier(make_tier(10, day_type='holiday'))
        assert not result.valid

    def test_hourly_tier_needs_rate(self, service):
        result = service.validate_tier(make_tier(10, hourly_rate=Decimal('0')))
        assert "Hourly tiers need a positive hourly_rate" in result.errors

    def test_transfer_rules(self, service):
        missing = service.validate_tier(make_tier(10, service_type='transfer', pricing_model='flat',
                                                  base_rate=Decimal('500')))
        hourly = service.validate_tier(make_tier(10, service_type='transfer', transfer_type='seatac'))

        assert "Transfer tiers need a transfer_type" in missing.errors
        assert "Transfer tiers cannot use hourly pricing" in hourly.errors

    def test_effective_window_order(self, service):
        tier = make_tier(10, effective_start_date=date(2026, 9, 1), effective_end_date=date(2026, 8, 1))
        assert not service.validate_tier(tier).valid

    def test_expired_window_warns(self, service):
        result = service.validate_tier(make_tier(10, party_size_min=9, party_size_max=14,
                                                 effective_end_date=date(2026, 1, 1)))
        assert result.valid
        assert any("has ended" in w for w in result.warnings)

    def test_overlapping_band_warns(self, service):
        result = service.validate_tier(make_tier(10, party_size_min=3, party_size_max=6))

        assert result.valid
        assert len(result.warnings) == 2
        assert result.warnings[0].startswith("Potential conflict with tier 1")

    def test_no_conflict_with_other_day_or_inactive(self, service):
        result = service.validate_tier(make_tier(10, day_type='thu_sat', party_size_min=1, party_size_max=4))
        assert result.warnings == []

    def test_any_day_conflicts_with_bucketed_tiers(self, service):
        result = service.validate_tier(make_tier(10, day_type='any', party_size_min=1, party_size_max=2))
        assert len(result.warnings) == 1

    def test_existing_tier_does_not_conflict_with_itself(self, service):
        assert service.validate_tier(service.get_tier(1)).warnings == []


class TestModifiers:

    def test_list_in_stacking_order(self, service):
        service.create_modifier(make_modifier(0, name="Harvest", priority=5))
        assert [m.name for m in service.list_modifiers()] == ["Harvest", "Early Bird", "Large Group"]

    def test_create_update_delete(self, service):
        created = service.create_modifier(make_modifier(0, name="Fuel", value_type='flat', value=Decimal('25')))
        assert created.modifier_id == 3

        updated = service.update_modifier(3, {'active': False})
        assert updated.active is False
        assert service.list_modifiers(include_inactive=False)[-1].name == "Large Group"

        service.delete_modifier(3)
        with pytest.raises(RecordNotFound):
            service.get_modifier(3)

    def test_percentage_floor(self, service):
        result = service.validate_modifier(make_modifier(10, value=Decimal('-100'), priority=30))
        assert "Percentage reductions must be greater than -100" in result.errors

    def test_unknown_service_types_and_days(self, service):
        modifier = make_modifier(10, applies_to_service_types=('limo',), applies_days=('funday',), priority=30)
        assert len(service.validate_modifier(modifier).errors) == 2

    def test_sign_mismatch_warns(self, service):
        result = service.validate_modifier(make_modifier(10, value=Decimal('10'), priority=30))
        assert result.valid
        assert result.warnings == ["'discount' modifier has a positive value and will increase the price"]

    def test_shared_priority_warns(self, service):
        result = service.validate_modifier(make_modifier(10, priority=10))
        assert any("Shares priority 10 with modifier 1" in w for w in result.warnings)


def test_stats(service):
    stats = service.get_stats()
    assert stats['tiers'] == {'total': 3, 'active': 2, 'inactive': 1, 'by_service_type': {'wine_tour': 3}}
    assert stats['modifiers'] == {'total': 2, 'active': 2, 'inactive': 0}
