"""
Shared API state - the configuration store and the objects built on it.

Exposed as FastAPI dependencies so tests can swap the store through
app.dependency_overrides.
"""
from typing import Optional

from fastapi import Depends

from ..config.settings import get_settings
from ..engine import PricingResolver
from ..repository import CsvPricingRepository
from ..services.pricing_admin_service import PricingAdminService

_repository: Optional[CsvPricingRepository] = None


def get_repository():
    """Get the process-wide CSV store."""
    global _repository
    if _repository is None:
        settings = get_settings()
        _repository = CsvPricingRepository(settings.tiers_csv, settings.modifiers_csv)
    return _repository


def get_resolver(repository=Depends(get_repository)) -> PricingResolver:
    return PricingResolver(repository)


def get_admin_service(repository=Depends(get_repository)) -> PricingAdminService:
    return PricingAdminService(repository)
