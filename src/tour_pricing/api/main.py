import datetime
import logging
from typing import Optional

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from .. import __version__
from ..config.settings import get_settings
from ..engine import CalculationError, CalculationRequest, ConfigurationUnavailable, PricingResolver
from ..engine.errors import RecordNotFound
from .admin_api import router as admin_router
from .state import get_repository, get_resolver

settings = get_settings()
logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Tour Pricing API",
    description="Pricing calculator for wine tours, transfers and wait time",
    version=__version__,
)

# Admin front end runs on its own origin
app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.cors_origins),
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(admin_router)


class CalcRequest(BaseModel):
    serviceType: str
    date: datetime.date
    partySize: Optional[int] = None
    durationHours: Optional[float] = Field(default=None, allow_inf_nan=False)
    transferType: Optional[str] = None
    hours: Optional[float] = Field(default=None, allow_inf_nan=False)
    applyModifiers: bool = True
    bookingDate: Optional[datetime.date] = None

    def to_request(self) -> CalculationRequest:
        return CalculationRequest(
            service_type=self.serviceType,
            date=self.date,
            party_size=self.partySize,
            duration_hours=self.durationHours,
            transfer_type=self.transferType,
            hours=self.hours,
            apply_modifiers=self.applyModifiers,
            booking_date=self.bookingDate,
        )


@app.exception_handler(CalculationError)
async def calculation_error_handler(request: Request, exc: CalculationError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_response())


@app.exception_handler(RecordNotFound)
async def record_not_found_handler(request: Request, exc: RecordNotFound):
    return JSONResponse(status_code=404, content={"success": False, "error": str(exc)})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    details = []
    for err in exc.errors():
        loc = ".".join(str(part) for part in err.get("loc", ()) if part != "body")
        details.append(f"{loc}: {err.get('msg')}" if loc else err.get("msg", ""))
    return JSONResponse(
        status_code=400,
        content={"success": False, "error": "Invalid pricing request", "details": "; ".join(details)},
    )


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={"success": False, "error": "Internal server error", "details": str(exc)},
    )


@app.get("/")
async def root():
    return {"status": "online", "message": "Tour Pricing API Active"}


@app.post("/api/pricing/calculate")
def calculate_price(req: CalcRequest, resolver: PricingResolver = Depends(get_resolver)):
    quote = resolver.calculate(req.to_request())
    return quote.to_response()


@app.get("/system/status")
def get_status(repository=Depends(get_repository)):
    try:
        tiers = repository.list_tiers()
        modifiers = repository.list_modifiers()
    except ConfigurationUnavailable as e:
        return {
            "engine_active": True,
            "config_available": False,
            "error": e.error,
            "details": e.details,
        }
    return {
        "engine_active": True,
        "config_available": True,
        "tiers_count": len(tiers),
        "active_tiers": sum(1 for t in tiers if t.active),
        "modifiers_count": len(modifiers),
        "active_modifiers": sum(1 for m in modifiers if m.active),
    }
