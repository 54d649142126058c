#!/usr/bin/env python
"""
Price a single request against the configured tiers and modifiers.

Usage:
    python scripts/quote.py wine_tour --date 2026-06-02 --party-size 4 --duration 6
    python scripts/quote.py transfer --date 2026-06-05 --transfer-type seatac
    python scripts/quote.py wait_time --date 2026-06-05 --party-size 3 --hours 1.5 --raw
"""
import argparse
import sys
from datetime import date
from pathlib import Path

# Add src to path
src_path = Path(__file__).parent.parent / 'src'
sys.path.insert(0, str(src_path))

from tour_pricing.config.settings import get_settings
from tour_pricing.engine import CalculationError, CalculationRequest, PricingResolver
from tour_pricing.repository import CsvPricingRepository


def main():
    parser = argparse.ArgumentParser(description="Quote a tour, transfer or wait time")
    parser.add_argument("service_type", choices=["wine_tour", "transfer", "wait_time"])
    parser.add_argument("--date", required=True, type=date.fromisoformat)
    parser.add_argument("--party-size", type=int)
    parser.add_argument("--duration", type=float, help="Tour hours (wine_tour)")
    parser.add_argument("--transfer-type", help="Route key (transfer)")
    parser.add_argument("--hours", type=float, help="Wait hours (wait_time)")
    parser.add_argument("--booking-date", type=date.fromisoformat)
    parser.add_argument("--raw", action="store_true", help="Skip modifiers, show the raw tier rate")
    args = parser.parse_args()

    settings = get_settings()
    resolver = PricingResolver(CsvPricingRepository(settings.tiers_csv, settings.modifiers_csv))

    request = CalculationRequest(
        service_type=args.service_type,
        date=args.date,
        party_size=args.party_size,
        duration_hours=args.duration,
        transfer_type=args.transfer_type,
        hours=args.hours,
        apply_modifiers=not args.raw,
        booking_date=args.booking_date,
    )

    try:
        quote = resolver.calculate(request)
    except CalculationError as e:
        print(f"❌ {type(e).__name__}: {e.error}")
        for detail in e.details:
            print(f"   {detail}")
        sys.exit(1)

    print(f"Tier:        {quote.tier_used.tier_name} (#{quote.tier_used.tier_id})")
    print(f"Day type:    {quote.day_type}")
    print(f"Base rate:   ${quote.base_rate:,.2f}")
    for modifier in quote.modifiers:
        print(f"  {modifier.name}: {'+' if modifier.amount >= 0 else '-'}${abs(modifier.amount):,.2f}")
    print(f"Final price: ${quote.final_price:,.2f}")
    print()
    print(quote.get_trace_text())


if __name__ == "__main__":
    main()
