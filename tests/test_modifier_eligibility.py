"""
Modifier eligibility rules and stacking order.
"""
from datetime import date
from decimal import Decimal

import pytest

from conftest import SATURDAY, TUESDAY, make_modifier
from tour_pricing.engine.modifier_matcher import EligibilityContext, ModifierMatcher, default_eligibility


def context(**overrides):
    values = dict(
        service_type='wine_tour',
        service_date=TUESDAY,
        party_size=4,
        booking_amount=Decimal('600.00'),
        advance_days=10,
    )
    values.update(overrides)
    return EligibilityContext(**values)


def test_unrestricted_modifier_is_eligible():
    assert default_eligibility(make_modifier(), context())


@pytest.mark.parametrize("service_type, expected", [('wine_tour', True), ('transfer', False)])
def test_service_type_restriction(service_type, expected):
    modifier = make_modifier(applies_to_service_types=('wine_tour', 'wait_time'))
    assert default_eligibility(modifier, context(service_type=service_type)) is expected


@pytest.mark.parametrize("party_size, expected", [(None, False), (9, False), (10, True), (12, True), (13, False)])
def test_party_size_range(party_size, expected):
    modifier = make_modifier(min_party_size=10, max_party_size=12)
    assert default_eligibility(modifier, context(party_size=party_size)) is expected


@pytest.mark.parametrize("advance_days, expected", [(29, False), (30, True), (90, True), (None, False)])
def test_min_advance_days(advance_days, expected):
    modifier = make_modifier(min_advance_days=30)
    assert default_eligibility(modifier, context(advance_days=advance_days)) is expected


def test_min_booking_amount():
    modifier = make_modifier(min_booking_amount=Decimal('500'))
    assert default_eligibility(modifier, context(booking_amount=Decimal('500.00')))
    assert not default_eligibility(modifier, context(booking_amount=Decimal('499.99')))


def test_effective_window_is_inclusive():
    modifier = make_modifier(effective_start_date=date(2026, 9, 1), effective_end_date=date(2026, 10, 31))
    assert not default_eligibility(modifier, context(service_date=date(2026, 8, 31)))
    assert default_eligibility(modifier, context(service_date=date(2026, 9, 1)))
    assert default_eligibility(modifier, context(service_date=date(2026, 10, 31)))
    assert not default_eligibility(modifier, context(service_date=date(2026, 11, 1)))


def test_applies_days():
    modifier = make_modifier(applies_days=('thu', 'fri', 'sat'))
    assert default_eligibility(modifier, context(service_date=SATURDAY))
    assert not default_eligibility(modifier, context(service_date=TUESDAY))


class TestModifierMatcher:

    def test_inactive_modifiers_filtered(self):
        matcher = ModifierMatcher()
        modifiers = [make_modifier(1), make_modifier(2, active=False)]
        assert [m.modifier_id for m in matcher.find_applicable(modifiers, context())] == [1]

    def test_sorted_by_priority_then_id(self):
        matcher = ModifierMatcher()
        modifiers = [
            make_modifier(3, priority=20),
            make_modifier(2, priority=5),
            make_modifier(1, priority=20),
        ]
        assert [m.modifier_id for m in matcher.find_applicable(modifiers, context())] == [2, 1, 3]

    def test_priority_zero_applies_first(self):
        matcher = ModifierMatcher()
        modifiers = [make_modifier(1, priority=10), make_modifier(2, priority=0)]
        assert [m.modifier_id for m in matcher.find_applicable(modifiers, context())] == [2, 1]

    def test_apply_percentage_and_flat(self):
        matcher = ModifierMatcher()
        modifiers = [
            make_modifier(1, name="Promo", value=Decimal('-10')),
            make_modifier(2, name="Fuel", value_type='flat', value=Decimal('25.00'), modifier_type='surcharge'),
        ]

        total, applied, traces = matcher.apply(modifiers, Decimal('600.00'))

        assert total == Decimal('565.00')
        assert [a.amount for a in applied] == [Decimal('-60.00'), Decimal('25.00')]
        assert applied[1].modifier_type == 'surcharge'
        assert traces[0] == "Promo (-10% of $600.00): -$60.00, $600.00 → $540.00"
        assert traces[1] == "Fuel (flat): +$25.00, $540.00 → $565.00"

    def test_percentage_amount_rounded_to_cents(self):
        total, applied, _ = ModifierMatcher().apply([make_modifier(value=Decimal('-7.5'))], Decimal('123.45'))
        assert applied[0].amount == Decimal('-9.26')
        assert total == Decimal('114.19')

    def test_non_stackable_stops_later_modifiers(self):
        modifiers = [
            make_modifier(1, name="First"),
            make_modifier(2, name="Exclusive", stackable=False),
            make_modifier(3, name="Never"),
        ]

        total, applied, traces = ModifierMatcher().apply(modifiers, Decimal('100.00'))

        assert [a.name for a in applied] == ["First", "Exclusive"]
        assert total == Decimal('81.00')
        assert traces[-1] == "Exclusive is not stackable, later modifiers skipped"

    def test_custom_predicate_replaces_default(self):
        matcher = ModifierMatcher(lambda modifier, ctx: ctx.weekday == 'tue')
        modifiers = [make_modifier(1, applies_to_service_types=('transfer',))]
        assert len(matcher.find_applicable(modifiers, context())) == 1
        assert matcher.find_applicable(modifiers, context(service_date=SATURDAY)) == []

    def test_modifier_kind_follows_value_sign(self):
        assert make_modifier(value=Decimal('-5')).kind == 'discount'
        assert make_modifier(value=Decimal('15'), modifier_type='discount').kind == 'surcharge'
