"""
Data models for the pricing resolver.

Uses dataclasses for structured, type-safe data representation.
Money is carried as Decimal and rounded to cents where it is computed.
"""
from dataclasses import dataclass, field, asdict
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional


SERVICE_TYPES = ('wine_tour', 'transfer', 'wait_time')
PRICING_MODELS = ('hourly', 'flat', 'per_person', 'per_mile')
VALUE_TYPES = ('percentage', 'flat')
TRANSFER_TYPES = ('seatac', 'seattle', 'pasco', 'walla')

DAY_TYPES = ('sun_wed', 'thu_sat', 'any')
LEGACY_DAY_TYPES = {
    'weekday': 'sun_wed',
    'weekend': 'thu_sat',
}

# date.weekday(): Monday=0 ... Sunday=6
WEEKDAY_KEYS = ('mon', 'tue', 'wed', 'thu', 'fri', 'sat', 'sun')
THU_SAT_WEEKDAYS = (3, 4, 5)

CENTS = Decimal('0.01')


def to_money(value) -> Decimal:
    """Round a numeric value to cents."""
    return Decimal(str(value)).quantize(CENTS, rounding=ROUND_HALF_UP)


def normalize_day_type(value: Optional[str]) -> str:
    """
    Normalize a tier day_type to sun_wed / thu_sat / any.

    Legacy weekday/weekend values map onto the current buckets and an
    empty value means the tier applies on any day.
    """
    if value is None:
        return 'any'
    key = str(value).strip().lower()
    if not key:
        return 'any'
    key = LEGACY_DAY_TYPES.get(key, key)
    if key not in DAY_TYPES:
        raise ValueError(f"invalid day_type '{value}', must be one of: {DAY_TYPES + tuple(LEGACY_DAY_TYPES)}")
    return key


def day_bucket(service_date: date) -> str:
    """Sunday-Wednesday -> sun_wed, Thursday-Saturday -> thu_sat."""
    return 'thu_sat' if service_date.weekday() in THU_SAT_WEEKDAYS else 'sun_wed'


def weekday_key(service_date: date) -> str:
    return WEEKDAY_KEYS[service_date.weekday()]


def _jsonable(value):
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, (tuple, list, set, frozenset)):
        return [_jsonable(v) for v in (sorted(value) if isinstance(value, (set, frozenset)) else value)]
    return value


@dataclass
class TraceStep:
    """A single step in the quote breakdown."""
    step: str
    description: str
    value: Optional[str] = None


@dataclass
class PricingTier:
    """An administrator-defined base rate for a service type."""
    tier_id: int
    service_type: str
    tier_name: str
    pricing_model: str = 'hourly'
    day_type: str = 'any'
    party_size_min: Optional[int] = None
    party_size_max: Optional[int] = None
    base_rate: Decimal = Decimal('0')
    hourly_rate: Decimal = Decimal('0')
    minimum_charge: Decimal = Decimal('0')
    transfer_type: Optional[str] = None
    active: bool = True
    effective_start_date: Optional[date] = None
    effective_end_date: Optional[date] = None
    description: str = ''
    notes: str = ''
    created_at: Optional[str] = None

    @property
    def band_width(self) -> float:
        """Width of the party-size band; open bounds count as infinitely wide."""
        if self.party_size_min is None or self.party_size_max is None:
            return float('inf')
        return self.party_size_max - self.party_size_min

    def matches_party_size(self, party_size: Optional[int]) -> bool:
        if party_size is None:
            return True
        if self.party_size_min is not None and party_size < self.party_size_min:
            return False
        if self.party_size_max is not None and party_size > self.party_size_max:
            return False
        return True

    def is_effective(self, service_date: date) -> bool:
        if self.effective_start_date and service_date < self.effective_start_date:
            return False
        if self.effective_end_date and service_date > self.effective_end_date:
            return False
        return True

    def to_dict(self) -> dict:
        return {k: _jsonable(v) for k, v in asdict(self).items()}


@dataclass
class PricingModifier:
    """A priority-ordered percentage or flat adjustment."""
    modifier_id: int
    name: str
    value: Decimal
    value_type: str = 'percentage'
    modifier_type: str = 'discount'
    priority: int = 50
    active: bool = True
    stackable: bool = True
    description: str = ''

    # Eligibility metadata; unset means no restriction
    applies_to_service_types: tuple = ()
    min_party_size: Optional[int] = None
    max_party_size: Optional[int] = None
    min_advance_days: Optional[int] = None
    min_booking_amount: Optional[Decimal] = None
    effective_start_date: Optional[date] = None
    effective_end_date: Optional[date] = None
    applies_days: tuple = ()

    @property
    def kind(self) -> str:
        """Display grouping: negative values reduce the price."""
        return 'discount' if self.value < 0 else 'surcharge'

    def to_dict(self) -> dict:
        data = {k: _jsonable(v) for k, v in asdict(self).items()}
        data['kind'] = self.kind
        return data


@dataclass
class CalculationRequest:
    """A pricing request for a single service."""
    service_type: str
    date: date
    party_size: Optional[int] = None
    duration_hours: Optional[Decimal] = None  # wine_tour
    transfer_type: Optional[str] = None  # transfer
    hours: Optional[Decimal] = None  # wait_time
    apply_modifiers: bool = True

    # Date the booking is made, for advance-booking modifiers
    booking_date: Optional[date] = None

    def __post_init__(self):
        if self.duration_hours is not None and not isinstance(self.duration_hours, Decimal):
            self.duration_hours = Decimal(str(self.duration_hours))
        if self.hours is not None and not isinstance(self.hours, Decimal):
            self.hours = Decimal(str(self.hours))


@dataclass
class AppliedModifier:
    """A modifier that was applied to a quote, with its computed amount."""
    name: str
    amount: Decimal
    modifier_type: str = ''
    value: Decimal = Decimal('0')
    value_type: str = 'percentage'


@dataclass
class PriceQuote:
    """Complete result of a pricing calculation."""
    tier_used: PricingTier
    base_rate: Decimal
    final_price: Decimal
    day_type: str
    raw_rate: Decimal = Decimal('0')  # rate before the minimum-charge floor
    modifiers: list[AppliedModifier] = field(default_factory=list)
    minimum_charge_applied: bool = False
    trace: list[TraceStep] = field(default_factory=list)

    def add_trace(self, step: str, description: str, value: str = None):
        """Add a step to the breakdown."""
        self.trace.append(TraceStep(step=step, description=description, value=value))

    @property
    def breakdown(self) -> list[str]:
        """Human-readable breakdown lines."""
        lines = []
        for t in self.trace:
            if t.value:
                lines.append(f"{t.step}: {t.description} = {t.value}")
            else:
                lines.append(f"{t.step}: {t.description}")
        return lines

    def get_trace_text(self) -> str:
        return "\n".join(f"• {line}" for line in self.breakdown)

    def to_response(self) -> dict:
        """Convert to the camelCase JSON body returned by the calculate endpoint."""
        return {
            "success": True,
            "tierUsed": self.tier_used.to_dict(),
            "rawRate": float(self.raw_rate),
            "baseRate": float(self.base_rate),
            "modifiers": [
                {
                    "name": m.name,
                    "amount": float(m.amount),
                    "type": m.modifier_type,
                    "value": float(m.value),
                    "valueType": m.value_type,
                }
                for m in self.modifiers
            ],
            "finalPrice": float(self.final_price),
            "breakdown": self.breakdown,
            "dayType": self.day_type,
            "minimumChargeApplied": self.minimum_charge_applied,
        }
