"""
Core FDP Engine Components
==========================

Main exports for UK CAA Flight Duty Period determination.
"""

from core.parameters import UKFTLFramework, EngineConfig

from core.time_resolver import (
    AirportTimeResolver,
    parse_hhmm,
    format_hours_and_minutes,
)
from core.regulatory_tables import (
    RegulatoryTableLookup,
    CabinCrewInFlightRestTable,
    lookup_in_flight_rest_limit,
)
from core.acclimatisation import AcclimatisationClassifier, describe_state

from core.extensions import InFlightRestCalculator, SplitDutyCalculator
from core.standby import StandbyCalculator
from core.fdp_engine import FDPCalculator, FDPEngine

__all__ = [
    # Parameters
    'UKFTLFramework',
    'EngineConfig',
    # Collaborators
    'AirportTimeResolver',
    'parse_hhmm',
    'format_hours_and_minutes',
    'RegulatoryTableLookup',
    'CabinCrewInFlightRestTable',
    'lookup_in_flight_rest_limit',
    # Acclimatisation
    'AcclimatisationClassifier',
    'describe_state',
    # Extensions & standby
    'InFlightRestCalculator',
    'SplitDutyCalculator',
    'StandbyCalculator',
    # Main engine
    'FDPCalculator',
    'FDPEngine',
]
