#!/usr/bin/env python
"""
Check the pricing configuration files.

Loads every tier and modifier, runs admin validation on each and prints
errors, conflicts and a summary. Exits non-zero when any record is invalid.

Usage:
    python scripts/check_pricing_config.py
"""
import logging
import sys
from pathlib import Path

# Add src to path
src_path = Path(__file__).parent.parent / 'src'
sys.path.insert(0, str(src_path))

from tour_pricing.config.settings import get_settings
from tour_pricing.engine import ConfigurationUnavailable
from tour_pricing.repository import CsvPricingRepository
from tour_pricing.services.pricing_admin_service import PricingAdminService


def main():
    logging.basicConfig(level=logging.WARNING, format="%(levelname)s %(message)s")
    settings = get_settings()

    print("=" * 60)
    print("PRICING CONFIGURATION CHECK")
    print("=" * 60)
    print(f"Tiers:     {settings.tiers_csv}")
    print(f"Modifiers: {settings.modifiers_csv}")
    print()

    service = PricingAdminService(CsvPricingRepository(settings.tiers_csv, settings.modifiers_csv))
    try:
        tiers = service.list_tiers()
        modifiers = service.list_modifiers()
    except ConfigurationUnavailable as e:
        print(f"❌ {e.error}: {'; '.join(e.details)}")
        sys.exit(1)

    failed = 0
    for tier in tiers:
        result = service.validate_tier(tier)
        label = f"tier {tier.tier_id} {tier.service_type}/{tier.tier_name}/{tier.day_type}"
        for err in result.errors:
            print(f"  ❌ {label}: {err}")
        for warning in result.warnings:
            print(f"  ⚠️  {label}: {warning}")
        failed += 0 if result.valid else 1

    for modifier in modifiers:
        result = service.validate_modifier(modifier)
        label = f"modifier {modifier.modifier_id} {modifier.name}"
        for err in result.errors:
            print(f"  ❌ {label}: {err}")
        for warning in result.warnings:
            print(f"  ⚠️  {label}: {warning}")
        failed += 0 if result.valid else 1

    stats = service.get_stats()
    print()
    print("Summary:")
    print(f"  Tiers: {stats['tiers']['active']} active / {stats['tiers']['total']} total")
    for service_type, count in stats['tiers']['by_service_type'].items():
        print(f"    {service_type}: {count}")
    print(f"  Modifiers: {stats['modifiers']['active']} active / {stats['modifiers']['total']} total")

    if failed:
        print(f"\n❌ {failed} invalid record(s)")
        sys.exit(1)
    print("\n✅ Configuration OK")


if __name__ == "__main__":
    main()
