"""Repository subpackage - tier and modifier configuration stores."""
from .store import PricingRepository, InMemoryPricingRepository
from .csv_store import CsvPricingRepository

__all__ = ['PricingRepository', 'InMemoryPricingRepository', 'CsvPricingRepository']
