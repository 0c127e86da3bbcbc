"""
data_models.py - Core Data Structures
======================================

Data models for UK CAA FDP determination: duty inputs, the mutually
exclusive FDP modifiers, acclimatisation results and the derived FDP result.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import List, Optional, Union


# ============================================================================
# ENUMS
# ============================================================================

class AcclimatisationState(Enum):
    """
    UK CAA ORO.FTL.105 acclimatisation states (Table 1)
    """
    HOME_BASE = "home_base"    # 'B' - acclimatised to home base time zone
    DEPARTURE = "departure"    # 'D' - acclimatised to current departure time zone
    UNKNOWN = "unknown"        # 'X' - unknown state of acclimatisation

    @property
    def code(self) -> str:
        return {
            AcclimatisationState.HOME_BASE: 'B',
            AcclimatisationState.DEPARTURE: 'D',
            AcclimatisationState.UNKNOWN: 'X',
        }[self]

    @property
    def is_acclimatised(self) -> bool:
        return self is not AcclimatisationState.UNKNOWN


class StandbyType(Enum):
    """Duty-start modality when standby/reserve precedes the FDP"""
    NONE = "none"
    HOME_STANDBY = "home_standby"        # Standby at home, FDP counts from report
    AIRPORT_DUTY = "airport_duty"        # All time counts as FDP from airport duty start
    AIRPORT_STANDBY = "airport_standby"  # Standby at the airport, 4h threshold
    RESERVE = "reserve"                  # Reserve day, no FDP reduction


class RestFacilityClass(Enum):
    """
    In-flight rest facility classification per CS FTL.1.205
    """
    NONE = "none"        # No in-flight rest facility
    CLASS_1 = "class_1"  # Bunk or flat bed in a separate compartment
    CLASS_2 = "class_2"  # Reclining seat with leg support, separate compartment
    CLASS_3 = "class_3"  # Reclining seat with leg support in the passenger cabin


class AccommodationType(Enum):
    """Split duty break location"""
    ACCOMMODATION = "accommodation"                    # 6h cap and WOCL exclusion apply
    SUITABLE_ACCOMMODATION = "suitable_accommodation"  # Full 50% extension


class CrewType(Enum):
    PILOT = "pilot"
    CABIN_CREW = "cabin_crew"


class WarningKind(Enum):
    """Rule violations and fallbacks reported alongside the result"""
    DUTY_TIME_CEILING_EXCEEDED = "duty_time_ceiling_exceeded"
    SECTORS_NOT_PERMITTED = "sectors_not_permitted"
    EXTENDED_FDP_UNAVAILABLE = "extended_fdp_unavailable"


# ============================================================================
# FDP MODIFIERS (mutually exclusive)
# ============================================================================

@dataclass(frozen=True)
class NoModifier:
    """No in-flight rest, split duty or extended FDP"""


@dataclass(frozen=True)
class InFlightRest:
    """
    In-flight rest with augmented crew (CS FTL.1.205(c)).

    The looked-up limit replaces the base FDP rather than adding to it.
    """
    facility: RestFacilityClass = RestFacilityClass.CLASS_1
    sector_bucket: int = 1          # 1 = 1-2 sectors, 3 = 3 sectors
    long_flight: bool = False       # One sector > 9h flight time (1-2 sectors only)
    additional_crew: int = 1        # 1 or 2 additional crew members
    rest_time_available: float = 0.0  # Hours, cabin crew Table 5 only

    @property
    def is_active(self) -> bool:
        return self.facility is not RestFacilityClass.NONE

    @property
    def uses_long_flight_table(self) -> bool:
        return self.long_flight and self.sector_bucket <= 2


@dataclass(frozen=True)
class SplitDuty:
    """Split duty break (CS FTL.1.220)"""
    break_duration: float                # Hours
    break_begin_utc: datetime
    accommodation: AccommodationType = AccommodationType.SUITABLE_ACCOMMODATION


@dataclass(frozen=True)
class ExtendedFDP:
    """Rostered extension of the FDP without in-flight rest (Table 4)"""


ActiveModifier = Union[NoModifier, InFlightRest, SplitDuty, ExtendedFDP]


# ============================================================================
# DUTY INPUTS
# ============================================================================

@dataclass(frozen=True)
class DutyInputs:
    """Immutable snapshot of everything the FDP determination depends on"""
    home_base: str
    report_time_utc: datetime
    sectors: int = 1                     # 1 means "1-2 sectors"
    secondary_home_base: str = ""
    report_location: str = ""            # Empty means report at home base
    timezone_difference: int = 0         # Hours between home base and departure
    elapsed_time_hours: float = 0.0      # Since report for the first sector

    # Standby / reserve
    standby_enabled: bool = False
    standby_type: StandbyType = StandbyType.NONE
    standby_start_utc: Optional[datetime] = None
    airport_duty_start_utc: Optional[datetime] = None
    standby_contact_utc: Optional[datetime] = None  # Night standby only

    crew_type: CrewType = CrewType.PILOT
    modifier: ActiveModifier = field(default_factory=NoModifier)
    estimated_block_time: float = 0.0    # Hours

    @property
    def departure(self) -> str:
        return self.report_location or self.home_base

    @property
    def active_standby_type(self) -> StandbyType:
        """Standby type in effect, NONE whenever standby is disabled"""
        return self.standby_type if self.standby_enabled else StandbyType.NONE

    @property
    def in_flight_rest(self) -> Optional[InFlightRest]:
        if isinstance(self.modifier, InFlightRest) and self.modifier.is_active:
            return self.modifier
        return None

    @property
    def split_duty(self) -> Optional[SplitDuty]:
        return self.modifier if isinstance(self.modifier, SplitDuty) else None

    @property
    def has_extended_fdp(self) -> bool:
        return isinstance(self.modifier, ExtendedFDP)

    @property
    def fdp_start_utc(self) -> datetime:
        """
        Reference instant for every FDP lookup and derived time.

        Airport duty counts from the airport duty start; every other
        modality counts from report.
        """
        if (self.active_standby_type is StandbyType.AIRPORT_DUTY
                and self.airport_duty_start_utc is not None):
            return self.airport_duty_start_utc
        return self.report_time_utc

    def with_changes(self, **changes) -> 'DutyInputs':
        return replace(self, **changes)

    @classmethod
    def from_flags(
        cls,
        *,
        has_extended_fdp: bool = False,
        has_in_flight_rest: bool = False,
        in_flight_rest: Optional[InFlightRest] = None,
        has_split_duty: bool = False,
        split_duty: Optional[SplitDuty] = None,
        **fields,
    ) -> 'DutyInputs':
        """
        Build inputs from independent boolean toggles.

        When more than one modifier is switched on, extended FDP wins over
        in-flight rest, which wins over split duty.
        """
        modifier: ActiveModifier = NoModifier()
        if has_extended_fdp:
            modifier = ExtendedFDP()
        elif has_in_flight_rest and in_flight_rest is not None:
            modifier = in_flight_rest
        elif has_split_duty and split_duty is not None:
            modifier = split_duty
        return cls(modifier=modifier, **fields)


# ============================================================================
# RESULTS
# ============================================================================

@dataclass(frozen=True)
class AcclimatisationResult:
    state: AcclimatisationState
    reason: str = ""


@dataclass(frozen=True)
class FDPWarning:
    kind: WarningKind
    message: str


@dataclass(frozen=True)
class StandbyAssessment:
    """Standby duration and the FDP reduction it causes"""
    standby_type: StandbyType
    duration_hours: float = 0.0
    threshold_hours: Optional[float] = None
    reduction_hours: float = 0.0
    is_night_standby: bool = False
    used_contact_time: bool = False

    @property
    def threshold_breached(self) -> bool:
        return self.threshold_hours is not None and self.duration_hours > self.threshold_hours


@dataclass(frozen=True)
class SplitDutyBreakdown:
    extension_hours: float
    effective_break_hours: float
    wocl_overlap_hours: float = 0.0
    explanation: str = ""


@dataclass(frozen=True)
class FDPResult:
    """Read-only snapshot of every derived quantity for one DutyInputs"""
    acclimatisation: AcclimatisationResult
    base_fdp: float                  # Standard Table 2/3 reference limit
    max_fdp: float                   # Base or Table 4 limit, plus split duty
    extension_applied_hours: float   # In-flight rest limit or split duty hours
    extension_replaces_base: bool
    standby: StandbyAssessment
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
    warnings: List[FDPWarning] = field(default_factory=list)

    @property
    def standby_duration(self) -> float:
        return self.standby.duration_hours

    @property
    def has_warnings(self) -> bool:
        return bool(self.warnings)
