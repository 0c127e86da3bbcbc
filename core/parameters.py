"""
Configuration & Parameters for FDP Determination
================================================

Configuration dataclasses for the UK CAA FDP engine:
- UKFTLFramework: regulatory constants (WOCL, standby thresholds, limits)
- EngineConfig: master configuration container

References:
    UK Reg. 965/2012 ORO.FTL.105, ORO.FTL.205, ORO.FTL.225
    CS FTL.1.205, CS FTL.1.220, CS FTL.1.225
"""

from dataclasses import dataclass, field


@dataclass
class UKFTLFramework:
    """UK CAA FTL regulatory definitions"""

    # WOCL definition - ORO.FTL.105(28)
    wocl_start_hour: int = 2
    wocl_end_hour: int = 6  # exclusive, WOCL ends 05:59

    # Night standby window at home base (23:00-06:59)
    night_standby_start_hour: int = 23
    night_standby_end_hour: int = 7  # exclusive

    # FDP limits - ORO.FTL.205
    minimum_fdp_hours: float = 9.0
    fallback_fdp_hours: float = 9.0

    # Commander's discretion - ORO.FTL.205(f)
    discretion_hours: float = 2.0
    discretion_in_flight_rest_hours: float = 3.0
    max_total_extension_hours: float = 2.0  # Table 4 margin + discretion

    # Home standby - CS FTL.1.225(b)
    home_standby_threshold_hours: float = 6.0
    home_standby_extended_threshold_hours: float = 8.0  # With in-flight rest or split duty

    # Airport standby - CS FTL.1.225(a)
    airport_standby_threshold_hours: float = 4.0
    airport_standby_max_awake_hours: float = 16.0
    airport_standby_extended_max_awake_hours: float = 18.0

    # Split duty - CS FTL.1.220
    split_duty_extension_ratio: float = 0.5
    split_duty_accommodation_cap_hours: float = 6.0


@dataclass
class EngineConfig:
    """Master configuration container"""
    framework: UKFTLFramework = field(default_factory=UKFTLFramework)
    unknown_airport_timezone: str = "UTC"

    @classmethod
    def default_uk_caa_config(cls):
        return cls(framework=UKFTLFramework())
