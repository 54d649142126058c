"""Engine subpackage - core pricing logic and resolution."""
from .pricing_engine import PricingResolver, validate_request
from .models import CalculationRequest, PricingTier, PricingModifier, PriceQuote
from .errors import CalculationError, InvalidInput, NoTierFound, ConfigurationUnavailable

__all__ = [
    'PricingResolver', 'validate_request',
    'CalculationRequest', 'PricingTier', 'PricingModifier', 'PriceQuote',
    'CalculationError', 'InvalidInput', 'NoTierFound', 'ConfigurationUnavailable',
]
