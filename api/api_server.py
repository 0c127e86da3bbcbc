"""
api_server.py - FastAPI Backend for the FDP Engine
==================================================

RESTful API exposing UK CAA FDP determination to a frontend.

Endpoints:
- GET  /health                   - Health check
- POST /api/fdp/calculate        - Full FDP determination for one duty
- POST /api/acclimatisation      - Table 1 acclimatisation state only
- GET  /api/airports/{code}      - Airport timezone lookup

Usage:
    uvicorn api.api_server:app --reload --host 0.0.0.0 --port 8000
"""

import logging
from datetime import datetime
from typing import List, Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from core import (
    AcclimatisationClassifier, AirportTimeResolver, EngineConfig, FDPCalculator, FDPEngine,
)
from models.data_models import (
    AccommodationType, CrewType, DutyInputs, FDPResult, InFlightRest,
    RestFacilityClass, SplitDuty, StandbyType,
)

logger = logging.getLogger(__name__)

# ============================================================================
# FASTAPI APP INITIALIZATION
# ============================================================================

app = FastAPI(
    title="FDP Engine API",
    description="UK CAA Flight Duty Period determination (Tables 1-5, standby, split duty)",
    version="1.0.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

config = EngineConfig.default_uk_caa_config()
resolver = AirportTimeResolver(config.unknown_airport_timezone)

# ============================================================================
# REQUEST/RESPONSE MODELS
# ============================================================================

class InFlightRestRequest(BaseModel):
    facility: RestFacilityClass = RestFacilityClass.CLASS_1
    sector_bucket: int = 1            # 1 = 1-2 sectors, 3 = 3 sectors
    long_flight: bool = False
    additional_crew: int = 1
    rest_time_available: float = 0.0  # Cabin crew only


class SplitDutyRequest(BaseModel):
    break_duration: float
    break_begin_utc: datetime
    accommodation: AccommodationType = AccommodationType.SUITABLE_ACCOMMODATION


class FDPRequest(BaseModel):
    home_base: str
    report_time_utc: datetime
    sectors: int = Field(1, ge=1)
    secondary_home_base: str = ""
    report_location: str = ""
    timezone_difference: int = 0
    elapsed_time_hours: float = 0.0

    standby_enabled: bool = False
    standby_type: StandbyType = StandbyType.NONE
    standby_start_utc: Optional[datetime] = None
    airport_duty_start_utc: Optional[datetime] = None
    standby_contact_utc: Optional[datetime] = None
    standby_contact_local: Optional[str] = None  # "HH:MM" at home base

    crew_type: CrewType = CrewType.PILOT
    estimated_block_time: float = 0.0

    # Independent toggles, resolved to one modifier
    has_extended_fdp: bool = False
    has_in_flight_rest: bool = False
    in_flight_rest: Optional[InFlightRestRequest] = None
    has_split_duty: bool = False
    split_duty: Optional[SplitDutyRequest] = None


class AcclimatisationRequest(BaseModel):
    timezone_difference: float
    elapsed_time_hours: float
    home_base: str = ""
    departure: str = ""


class AcclimatisationResponse(BaseModel):
    state: str   # "B", "D" or "X"
    acclimatised: bool
    reason: str


class WarningResponse(BaseModel):
    kind: str
    message: str


class StandbyResponse(BaseModel):
    standby_type: str
    duration_hours: float
    threshold_hours: Optional[float] = None
    reduction_hours: float
    is_night_standby: bool
    used_contact_time: bool


class FDPResponse(BaseModel):
    acclimatisation: AcclimatisationResponse
    base_fdp: float
    max_fdp: float
    extension_applied_hours: float
    extension_replaces_base: bool
    standby: StandbyResponse
    total_fdp: float
    commanders_discretion_hours: float
    latest_off_blocks_utc: datetime
    latest_on_blocks_utc: datetime
    latest_off_blocks_with_discretion_utc: datetime
    latest_on_blocks_with_discretion_utc: datetime
    total_duty_time: float
    total_duty_time_with_discretion: float
    breakdown: str
    breakdown_with_discretion: str
    warnings: List[WarningResponse] = []


class AirportResponse(BaseModel):
    """Airport information from the airportsdata database"""
    code: str                 # IATA or ICAO code as requested
    timezone: str             # IANA timezone (e.g., "Europe/London")
    utc_offset_hours: Optional[float] = None  # Current UTC offset (accounts for DST)
    known: bool = True
    name: str = ""
    latitude: float = 0.0
    longitude: float = 0.0


# ============================================================================
# HELPER FUNCTIONS
# ============================================================================

def _build_duty_inputs(request: FDPRequest) -> DutyInputs:
    in_flight_rest = None
    if request.in_flight_rest is not None:
        in_flight_rest = InFlightRest(**request.in_flight_rest.model_dump())

    split_duty = None
    if request.split_duty is not None:
        split_duty = SplitDuty(**request.split_duty.model_dump())

    return DutyInputs.from_flags(
        has_extended_fdp=request.has_extended_fdp,
        has_in_flight_rest=request.has_in_flight_rest,
        in_flight_rest=in_flight_rest,
        has_split_duty=request.has_split_duty,
        split_duty=split_duty,
        home_base=request.home_base.upper(),
        report_time_utc=request.report_time_utc,
        sectors=request.sectors,
        secondary_home_base=request.secondary_home_base.upper(),
        report_location=request.report_location.upper(),
        timezone_difference=request.timezone_difference,
        elapsed_time_hours=request.elapsed_time_hours,
        standby_enabled=request.standby_enabled,
        standby_type=request.standby_type,
        standby_start_utc=request.standby_start_utc,
        airport_duty_start_utc=request.airport_duty_start_utc,
        standby_contact_utc=request.standby_contact_utc,
        crew_type=request.crew_type,
        estimated_block_time=request.estimated_block_time,
    )


def _build_fdp_response(result: FDPResult) -> FDPResponse:
    acclimatisation = result.acclimatisation
    standby = result.standby
    return FDPResponse(
        acclimatisation=AcclimatisationResponse(
            state=acclimatisation.state.code,
            acclimatised=acclimatisation.state.is_acclimatised,
            reason=acclimatisation.reason,
        ),
        base_fdp=result.base_fdp,
        max_fdp=result.max_fdp,
        extension_applied_hours=result.extension_applied_hours,
        extension_replaces_base=result.extension_replaces_base,
        standby=StandbyResponse(
            standby_type=standby.standby_type.value,
            duration_hours=round(standby.duration_hours, 2),
            threshold_hours=standby.threshold_hours,
            reduction_hours=round(standby.reduction_hours, 2),
            is_night_standby=standby.is_night_standby,
            used_contact_time=standby.used_contact_time,
        ),
        total_fdp=round(result.total_fdp, 2),
        commanders_discretion_hours=result.commanders_discretion_hours,
        latest_off_blocks_utc=result.latest_off_blocks_utc,
        latest_on_blocks_utc=result.latest_on_blocks_utc,
        latest_off_blocks_with_discretion_utc=result.latest_off_blocks_with_discretion_utc,
        latest_on_blocks_with_discretion_utc=result.latest_on_blocks_with_discretion_utc,
        total_duty_time=round(result.total_duty_time, 2),
        total_duty_time_with_discretion=round(result.total_duty_time_with_discretion, 2),
        breakdown=result.breakdown,
        breakdown_with_discretion=result.breakdown_with_discretion,
        warnings=[
            WarningResponse(kind=w.kind.value, message=w.message) for w in result.warnings
        ],
    )


# ============================================================================
# ENDPOINTS
# ============================================================================

@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "timestamp": datetime.now().isoformat()
    }


@app.post("/api/fdp/calculate", response_model=FDPResponse)
async def calculate_fdp(request: FDPRequest):
    """
    Determine the maximum FDP for one duty.

    Builds a fresh engine per request; standby contact may be given either
    as a UTC instant or as a home-base local "HH:MM".
    """
    try:
        engine = FDPEngine(_build_duty_inputs(request), FDPCalculator(config, resolver))

        if request.standby_contact_local and request.standby_contact_utc is None:
            if request.standby_start_utc is None:
                raise HTTPException(
                    status_code=400,
                    detail="standby_contact_local requires standby_start_utc"
                )
            engine.set_standby_contact_local(request.standby_contact_local)

        return _build_fdp_response(engine.result)

    except HTTPException:
        raise
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.exception("FDP calculation failed")
        raise HTTPException(status_code=500, detail=f"FDP calculation failed: {str(e)}")


@app.post("/api/acclimatisation", response_model=AcclimatisationResponse)
async def classify_acclimatisation(request: AcclimatisationRequest):
    """Table 1 acclimatisation state for a time zone difference and elapsed time"""
    result = AcclimatisationClassifier.classify(
        request.timezone_difference,
        request.elapsed_time_hours,
        request.home_base.upper(),
        request.departure.upper(),
    )
    return AcclimatisationResponse(
        state=result.state.code,
        acclimatised=result.state.is_acclimatised,
        reason=result.reason,
    )


# ============================================================================
# AIRPORT DATABASE ENDPOINTS
# ============================================================================

@app.get("/api/airports/{code}", response_model=AirportResponse)
async def get_airport(code: str):
    """
    Look up an airport by IATA or ICAO code.

    Unknown codes resolve to the fallback timezone with known=False.
    """
    code = code.upper()
    if len(code) not in (3, 4) or not code.isalnum():
        raise HTTPException(status_code=400, detail=f"Invalid airport code '{code}'")

    record = resolver.airport_record(code) or {}
    return AirportResponse(
        code=code,
        timezone=resolver.timezone_name(code),
        utc_offset_hours=resolver.utc_offset_hours(code),
        known=resolver.is_known(code),
        name=record.get('name', ''),
        latitude=record.get('lat', 0.0),
        longitude=record.get('lon', 0.0),
    )


# ============================================================================
# RUN SERVER
# ============================================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
