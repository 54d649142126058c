"""
CSV Pricing Store - Reads and writes tiers and modifiers as CSV files.

Each file is read with pandas on every call so an admin edit is visible
to the next calculation. Rows that fail validation are skipped and logged;
a missing or unreadable file makes the whole configuration unavailable.
"""
import logging
import os
import tempfile
from datetime import date
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Optional

import pandas as pd

from ..engine.errors import ConfigurationUnavailable
from ..engine.models import (
    PRICING_MODELS,
    SERVICE_TYPES,
    VALUE_TYPES,
    WEEKDAY_KEYS,
    PricingModifier,
    PricingTier,
    normalize_day_type,
)

logger = logging.getLogger(__name__)


TIER_COLUMNS = [
    'tier_id', 'service_type', 'tier_name', 'description', 'party_size_min',
    'party_size_max', 'day_type', 'pricing_model', 'base_rate', 'hourly_rate',
    'minimum_charge', 'transfer_type', 'active', 'effective_start_date',
    'effective_end_date', 'notes', 'created_at',
]

MODIFIER_COLUMNS = [
    'modifier_id', 'name', 'description', 'modifier_type', 'value_type', 'value',
    'priority', 'active', 'stackable', 'applies_to_service_types', 'min_party_size',
    'max_party_size', 'min_advance_days', 'min_booking_amount',
    'effective_start_date', 'effective_end_date', 'applies_days',
]


def parse_bool(value: str, default: bool = False) -> bool:
    """Parse a boolean from CSV string."""
    if value is None or str(value).strip() == '':
        return default
    return str(value).strip().lower() in ('true', '1', 'yes', 'on')


def parse_optional_str(value: str) -> Optional[str]:
    """Parse optional string (empty = None)."""
    if value is None or str(value).strip() == '':
        return None
    return str(value).strip()


def parse_optional_int(value: str) -> Optional[int]:
    """Parse optional integer."""
    value = parse_optional_str(value)
    if value is None:
        return None
    try:
        return int(float(value))
    except (ValueError, OverflowError):
        raise ValueError(f"'{value}' is not a whole number")


def parse_decimal(value: str, default: str = '0') -> Decimal:
    """Parse a currency amount; empty = default."""
    value = parse_optional_str(value)
    try:
        amount = Decimal(value if value is not None else default)
    except InvalidOperation:
        raise ValueError(f"'{value}' is not a number")
    if not amount.is_finite():
        raise ValueError(f"'{value}' is not a finite number")
    return amount


def parse_optional_decimal(value: str) -> Optional[Decimal]:
    if parse_optional_str(value) is None:
        return None
    return parse_decimal(value)


def parse_optional_date(value: str) -> Optional[date]:
    """Parse optional YYYY-MM-DD date."""
    value = parse_optional_str(value)
    if value is None:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise ValueError(f"'{value}' must be YYYY-MM-DD format")


def parse_list(value: str) -> tuple:
    """Parse a comma-separated list into a tuple of lowercase keys."""
    value = parse_optional_str(value)
    if value is None:
        return ()
    return tuple(v.strip().lower() for v in value.split(',') if v.strip())


def _fmt(value) -> str:
    if value is None:
        return ''
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, (tuple, list)):
        return ','.join(value)
    return str(value)


def tier_from_row(row: dict) -> PricingTier:
    """Create a PricingTier from a CSV row. Raises ValueError on bad data."""
    tier_id = parse_optional_int(row.get('tier_id'))
    if tier_id is None:
        raise ValueError("tier_id is required")

    service_type = (parse_optional_str(row.get('service_type')) or '').lower()
    if service_type not in SERVICE_TYPES:
        raise ValueError(f"invalid service_type '{service_type}', must be one of: {SERVICE_TYPES}")

    pricing_model = (parse_optional_str(row.get('pricing_model')) or 'hourly').lower()
    if pricing_model not in PRICING_MODELS:
        raise ValueError(f"invalid pricing_model '{pricing_model}', must be one of: {PRICING_MODELS}")

    transfer_type = parse_optional_str(row.get('transfer_type'))

    return PricingTier(
        tier_id=tier_id,
        service_type=service_type,
        tier_name=parse_optional_str(row.get('tier_name')) or f"Tier {tier_id}",
        description=parse_optional_str(row.get('description')) or '',
        party_size_min=parse_optional_int(row.get('party_size_min')),
        party_size_max=parse_optional_int(row.get('party_size_max')),
        day_type=normalize_day_type(row.get('day_type')),
        pricing_model=pricing_model,
        base_rate=parse_decimal(row.get('base_rate')),
        hourly_rate=parse_decimal(row.get('hourly_rate')),
        minimum_charge=parse_decimal(row.get('minimum_charge')),
        transfer_type=transfer_type.lower() if transfer_type else None,
        active=parse_bool(row.get('active'), default=True),
        effective_start_date=parse_optional_date(row.get('effective_start_date')),
        effective_end_date=parse_optional_date(row.get('effective_end_date')),
        notes=parse_optional_str(row.get('notes')) or '',
        created_at=parse_optional_str(row.get('created_at')),
    )


def tier_to_row(tier: PricingTier) -> dict:
    """Convert to CSV row format."""
    return {col: _fmt(getattr(tier, col)) for col in TIER_COLUMNS}


def modifier_from_row(row: dict) -> PricingModifier:
    """Create a PricingModifier from a CSV row. Raises ValueError on bad data."""
    modifier_id = parse_optional_int(row.get('modifier_id'))
    if modifier_id is None:
        raise ValueError("modifier_id is required")

    value_type = (parse_optional_str(row.get('value_type')) or 'percentage').lower()
    if value_type not in VALUE_TYPES:
        raise ValueError(f"invalid value_type '{value_type}', must be one of: {VALUE_TYPES}")

    if parse_optional_str(row.get('value')) is None:
        raise ValueError("value is required")

    priority = parse_optional_int(row.get('priority'))

    applies_days = parse_list(row.get('applies_days'))
    unknown_days = [d for d in applies_days if d not in WEEKDAY_KEYS]
    if unknown_days:
        raise ValueError(f"invalid applies_days {unknown_days}, must be among: {WEEKDAY_KEYS}")

    return PricingModifier(
        modifier_id=modifier_id,
        name=parse_optional_str(row.get('name')) or f"Modifier {modifier_id}",
        description=parse_optional_str(row.get('description')) or '',
        modifier_type=(parse_optional_str(row.get('modifier_type')) or 'discount').lower(),
        value_type=value_type,
        value=parse_decimal(row.get('value')),
        priority=50 if priority is None else priority,
        active=parse_bool(row.get('active'), default=True),
        stackable=parse_bool(row.get('stackable'), default=True),
        applies_to_service_types=parse_list(row.get('applies_to_service_types')),
        min_party_size=parse_optional_int(row.get('min_party_size')),
        max_party_size=parse_optional_int(row.get('max_party_size')),
        min_advance_days=parse_optional_int(row.get('min_advance_days')),
        min_booking_amount=parse_optional_decimal(row.get('min_booking_amount')),
        effective_start_date=parse_optional_date(row.get('effective_start_date')),
        effective_end_date=parse_optional_date(row.get('effective_end_date')),
        applies_days=applies_days,
    )


def modifier_to_row(modifier: PricingModifier) -> dict:
    """Convert to CSV row format."""
    return {col: _fmt(getattr(modifier, col)) for col in MODIFIER_COLUMNS}


class CsvPricingRepository:
    """
    Tier and modifier store backed by two CSV files.

    Args:
        tiers_csv: Path to pricing_tiers.csv
        modifiers_csv: Path to pricing_modifiers.csv
    """

    def __init__(self, tiers_csv: Path, modifiers_csv: Path):
        self.tiers_csv = Path(tiers_csv)
        self.modifiers_csv = Path(modifiers_csv)

    def _read_rows(self, path: Path) -> list[dict]:
        """Load a CSV into stripped string records."""
        if not path.exists():
            logger.error("Pricing configuration file not found: %s", path)
            raise ConfigurationUnavailable(
                "Pricing configuration unavailable",
                details=[f"{path.name} not found"],
            )
        try:
            df = pd.read_csv(path, dtype=str, keep_default_na=False)
        except (OSError, UnicodeDecodeError, pd.errors.ParserError, pd.errors.EmptyDataError) as e:
            logger.error("Could not read %s: %s", path, e)
            raise ConfigurationUnavailable(
                "Pricing configuration unavailable",
                details=[f"{path.name}: {e}"],
            ) from e

        df.columns = [c.strip() for c in df.columns]
        for col in df.columns:
            df[col] = df[col].astype(str).str.strip()
        return df.to_dict(orient='records')

    def list_tiers(self) -> list[PricingTier]:
        """List all tiers, active and inactive."""
        tiers = []
        for line_num, row in enumerate(self._read_rows(self.tiers_csv), start=2):
            try:
                tiers.append(tier_from_row(row))
            except ValueError as e:
                logger.warning("Skipping %s line %d: %s", self.tiers_csv.name, line_num, e)
        return tiers

    def list_modifiers(self) -> list[PricingModifier]:
        """List all modifiers, active and inactive."""
        modifiers = []
        for line_num, row in enumerate(self._read_rows(self.modifiers_csv), start=2):
            try:
                modifiers.append(modifier_from_row(row))
            except ValueError as e:
                logger.warning("Skipping %s line %d: %s", self.modifiers_csv.name, line_num, e)
        return modifiers

    def save_tiers(self, tiers: list[PricingTier]):
        """Write tiers back to CSV."""
        self._write(self.tiers_csv, [tier_to_row(t) for t in tiers], TIER_COLUMNS)

    def save_modifiers(self, modifiers: list[PricingModifier]):
        """Write modifiers back to CSV."""
        self._write(self.modifiers_csv, [modifier_to_row(m) for m in modifiers], MODIFIER_COLUMNS)

    def _write(self, path: Path, rows: list[dict], columns: list[str]):
        path.parent.mkdir(parents=True, exist_ok=True)
        # Replace the file in one step so readers see either the old or the new rows
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.stem}-", suffix=".csv")
        os.close(fd)
        try:
            pd.DataFrame(rows, columns=columns).to_csv(tmp_name, index=False)
            os.replace(tmp_name, path)
        finally:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
        logger.info("Wrote %d rows to %s", len(rows), path)
