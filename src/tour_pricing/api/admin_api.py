"""
Admin API - FastAPI router for pricing tier and modifier management.
"""
import datetime
from dataclasses import replace
from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from ..engine.models import PricingModifier, PricingTier
from ..services.pricing_admin_service import PricingAdminService, ValidationResult
from .state import get_admin_service

router = APIRouter(prefix="/api/admin/pricing", tags=["pricing-admin"])

MONEY_FIELDS = {'base_rate', 'hourly_rate', 'minimum_charge', 'value', 'min_booking_amount'}
LIST_FIELDS = {'applies_to_service_types', 'applies_days'}
NULLABLE_TIER_FIELDS = {'party_size_min', 'party_size_max', 'transfer_type', 'effective_start_date', 'effective_end_date'}
NULLABLE_MODIFIER_FIELDS = {
    'min_party_size', 'max_party_size', 'min_advance_days', 'min_booking_amount',
    'effective_start_date', 'effective_end_date',
}


def _to_domain(data: dict) -> dict:
    """Convert payload values to the types the dataclasses carry."""
    out = {}
    for key, value in data.items():
        if key in MONEY_FIELDS and value is not None:
            value = Decimal(str(value))
        elif key in LIST_FIELDS and value is not None:
            value = tuple(v.strip().lower() for v in value if v.strip())
        elif key == 'transfer_type' and value:
            value = value.strip().lower()
        out[key] = value
    return out


def _null_errors(changes: dict, nullable: set) -> list[str]:
    """Explicit nulls are only accepted on optional fields."""
    return [f"{key} cannot be null" for key, value in changes.items() if value is None and key not in nullable]


def _validation_failed(result: ValidationResult) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={
            "success": False,
            "error": "Validation failed",
            "details": "; ".join(result.errors),
            "errors": result.errors,
            "warnings": result.warnings,
        },
    )


# Pydantic models for API
class TierCreate(BaseModel):
    """Request model for creating a tier."""
    service_type: str
    tier_name: str
    pricing_model: str = "hourly"
    day_type: str = "any"
    party_size_min: Optional[int] = None
    party_size_max: Optional[int] = None
    base_rate: float = Field(default=0, allow_inf_nan=False)
    hourly_rate: float = Field(default=0, allow_inf_nan=False)
    minimum_charge: float = Field(default=0, allow_inf_nan=False)
    transfer_type: Optional[str] = None
    active: bool = True
    effective_start_date: Optional[datetime.date] = None
    effective_end_date: Optional[datetime.date] = None
    description: str = ""
    notes: str = ""


class TierUpdate(BaseModel):
    """Request model for updating a tier."""
    service_type: Optional[str] = None
    tier_name: Optional[str] = None
    pricing_model: Optional[str] = None
    day_type: Optional[str] = None
    party_size_min: Optional[int] = None
    party_size_max: Optional[int] = None
    base_rate: Optional[float] = Field(default=None, allow_inf_nan=False)
    hourly_rate: Optional[float] = Field(default=None, allow_inf_nan=False)
    minimum_charge: Optional[float] = Field(default=None, allow_inf_nan=False)
    transfer_type: Optional[str] = None
    active: Optional[bool] = None
    effective_start_date: Optional[datetime.date] = None
    effective_end_date: Optional[datetime.date] = None
    description: Optional[str] = None
    notes: Optional[str] = None


class ModifierCreate(BaseModel):
    """Request model for creating a modifier."""
    name: str
    value: float = Field(allow_inf_nan=False)
    value_type: str = "percentage"
    modifier_type: str = "discount"
    priority: int = 50
    active: bool = True
    stackable: bool = True
    description: str = ""
    applies_to_service_types: list[str] = []
    min_party_size: Optional[int] = None
    max_party_size: Optional[int] = None
    min_advance_days: Optional[int] = None
    min_booking_amount: Optional[float] = Field(default=None, allow_inf_nan=False)
    effective_start_date: Optional[datetime.date] = None
    effective_end_date: Optional[datetime.date] = None
    applies_days: list[str] = []


class ModifierUpdate(BaseModel):
    """Request model for updating a modifier."""
    name: Optional[str] = None
    value: Optional[float] = Field(default=None, allow_inf_nan=False)
    value_type: Optional[str] = None
    modifier_type: Optional[str] = None
    priority: Optional[int] = None
    active: Optional[bool] = None
    stackable: Optional[bool] = None
    description: Optional[str] = None
    applies_to_service_types: Optional[list[str]] = None
    min_party_size: Optional[int] = None
    max_party_size: Optional[int] = None
    min_advance_days: Optional[int] = None
    min_booking_amount: Optional[float] = Field(default=None, allow_inf_nan=False)
    effective_start_date: Optional[datetime.date] = None
    effective_end_date: Optional[datetime.date] = None
    applies_days: Optional[list[str]] = None


class ValidationResponse(BaseModel):
    """Response model for validation."""
    valid: bool
    errors: list[str]
    warnings: list[str]


# Tier endpoints

@router.get("/tiers")
def list_tiers(
    service_type: Optional[str] = None,
    include_inactive: bool = True,
    service: PricingAdminService = Depends(get_admin_service),
):
    """List pricing tiers."""
    tiers = service.list_tiers(service_type=service_type, include_inactive=include_inactive)
    return {"success": True, "tiers": [t.to_dict() for t in tiers]}


@router.get("/tiers/{tier_id}")
def get_tier(tier_id: int, service: PricingAdminService = Depends(get_admin_service)):
    """Get a single tier by ID."""
    return {"success": True, "tier": service.get_tier(tier_id).to_dict()}


@router.post("/tiers")
def create_tier(data: TierCreate, service: PricingAdminService = Depends(get_admin_service)):
    """Create a new pricing tier."""
    tier = PricingTier(tier_id=0, **_to_domain(data.model_dump()))

    validation = service.validate_tier(tier)
    if not validation.valid:
        return _validation_failed(validation)

    created = service.create_tier(tier)
    return {"success": True, "tier": created.to_dict(), "warnings": validation.warnings}


@router.put("/tiers/{tier_id}")
def update_tier(tier_id: int, updates: TierUpdate, service: PricingAdminService = Depends(get_admin_service)):
    """Update an existing tier; only fields present in the body change."""
    changes = _to_domain(updates.model_dump(exclude_unset=True))
    null_errors = _null_errors(changes, NULLABLE_TIER_FIELDS)
    if null_errors:
        return _validation_failed(ValidationResult(valid=False, errors=null_errors))

    validation = service.validate_tier(replace(service.get_tier(tier_id), **changes))
    if not validation.valid:
        return _validation_failed(validation)

    updated = service.update_tier(tier_id, changes)
    return {"success": True, "tier": updated.to_dict(), "warnings": validation.warnings}


@router.delete("/tiers/{tier_id}")
def delete_tier(tier_id: int, service: PricingAdminService = Depends(get_admin_service)):
    """Delete a tier."""
    service.delete_tier(tier_id)
    return {"success": True, "message": f"Tier {tier_id} deleted"}


@router.post("/tiers/validate", response_model=ValidationResponse)
def validate_tier(data: TierCreate, service: PricingAdminService = Depends(get_admin_service)):
    """Validate a tier without saving."""
    result = service.validate_tier(PricingTier(tier_id=0, **_to_domain(data.model_dump())))
    return ValidationResponse(valid=result.valid, errors=result.errors, warnings=result.warnings)


# Modifier endpoints

@router.get("/modifiers")
def list_modifiers(include_inactive: bool = True, service: PricingAdminService = Depends(get_admin_service)):
    """List pricing modifiers in stacking order."""
    modifiers = service.list_modifiers(include_inactive=include_inactive)
    return {"success": True, "modifiers": [m.to_dict() for m in modifiers]}


@router.get("/modifiers/{modifier_id}")
def get_modifier(modifier_id: int, service: PricingAdminService = Depends(get_admin_service)):
    return {"success": True, "modifier": service.get_modifier(modifier_id).to_dict()}


@router.post("/modifiers")
def create_modifier(data: ModifierCreate, service: PricingAdminService = Depends(get_admin_service)):
    """Create a new pricing modifier."""
    modifier = PricingModifier(modifier_id=0, **_to_domain(data.model_dump()))

    validation = service.validate_modifier(modifier)
    if not validation.valid:
        return _validation_failed(validation)

    created = service.create_modifier(modifier)
    return {"success": True, "modifier": created.to_dict(), "warnings": validation.warnings}


@router.put("/modifiers/{modifier_id}")
def update_modifier(
    modifier_id: int,
    updates: ModifierUpdate,
    service: PricingAdminService = Depends(get_admin_service),
):
    changes = _to_domain(updates.model_dump(exclude_unset=True))
    null_errors = _null_errors(changes, NULLABLE_MODIFIER_FIELDS)
    if null_errors:
        return _validation_failed(ValidationResult(valid=False, errors=null_errors))

    validation = service.validate_modifier(replace(service.get_modifier(modifier_id), **changes))
    if not validation.valid:
        return _validation_failed(validation)

    updated = service.update_modifier(modifier_id, changes)
    return {"success": True, "modifier": updated.to_dict(), "warnings": validation.warnings}


@router.delete("/modifiers/{modifier_id}")
def delete_modifier(modifier_id: int, service: PricingAdminService = Depends(get_admin_service)):
    service.delete_modifier(modifier_id)
    return {"success": True, "message": f"Modifier {modifier_id} deleted"}


@router.post("/modifiers/validate", response_model=ValidationResponse)
def validate_modifier(data: ModifierCreate, service: PricingAdminService = Depends(get_admin_service)):
    """Validate a modifier without saving."""
    result = service.validate_modifier(PricingModifier(modifier_id=0, **_to_domain(data.model_dump())))
    return ValidationResponse(valid=result.valid, errors=result.errors, warnings=result.warnings)


@router.get("/stats")
def get_stats(service: PricingAdminService = Depends(get_admin_service)):
    """Get pricing configuration statistics."""
    return service.get_stats()
