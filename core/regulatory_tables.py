"""
UK CAA Regulatory Tables
========================

Lookup tables for FDP determination (UK Reg. 965/2012, operator OM-A):
- Table 1: Acclimatisation state
- Table 2: Maximum daily FDP, acclimatised crew
- Table 3: Maximum daily FDP, unknown state of acclimatisation
- Table 4: Maximum daily FDP with extension
- In-flight rest FDP limits for augmented flight crew (CS FTL.1.205(c))
- Table 5: Cabin crew maximum FDP by in-flight rest available

All report-time lookups take a local "HH:MM" string.
"""

import logging
from typing import Dict, List, Optional, Tuple

from core.time_resolver import parse_hhmm
from models.data_models import CrewType, RestFacilityClass

logger = logging.getLogger(__name__)

# (first minute, last minute) of a report-time band, both inclusive
Band = Tuple[int, int]


def _band(start: str, end: str) -> Band:
    return parse_hhmm(start), parse_hhmm(end)


def _find_band(bands: List[Tuple[Band, list]], minutes: int) -> Optional[list]:
    for (first, last), row in bands:
        if first <= minutes <= last:
            return row
    return None


class RegulatoryTableLookup:
    """UK CAA FDP tables keyed by local report time and sector count"""

    # Table 2: columns are 1-2, 3, 4, 5, 6, 7, 8, 9, 10+ sectors
    ACCLIMATISED_TABLE: List[Tuple[Band, List[float]]] = [
        (_band("05:00", "05:14"), [12.0, 11.5, 11.0, 10.5, 10.0, 9.5, 9.0, 9.0, 9.0]),
        (_band("05:15", "05:29"), [12.25, 11.75, 11.25, 10.75, 10.25, 9.75, 9.25, 9.0, 9.0]),
        (_band("05:30", "05:44"), [12.5, 12.0, 11.5, 11.0, 10.5, 10.0, 9.5, 9.0, 9.0]),
        (_band("05:45", "05:59"), [12.75, 12.25, 11.75, 11.25, 10.75, 10.25, 9.75, 9.25, 9.0]),
        (_band("06:00", "13:29"), [13.0, 12.5, 12.0, 11.5, 11.0, 10.5, 10.0, 9.5, 9.0]),
        (_band("13:30", "13:59"), [12.75, 12.25, 11.75, 11.25, 10.75, 10.25, 9.75, 9.25, 9.0]),
        (_band("14:00", "14:29"), [12.5, 12.0, 11.5, 11.0, 10.5, 10.0, 9.5, 9.0, 9.0]),
        (_band("14:30", "14:59"), [12.25, 11.75, 11.25, 10.75, 10.25, 9.75, 9.25, 9.0, 9.0]),
        (_band("15:00", "15:29"), [12.0, 11.5, 11.0, 10.5, 10.0, 9.5, 9.0, 9.0, 9.0]),
        (_band("15:30", "15:59"), [11.75, 11.25, 10.75, 10.25, 9.75, 9.25, 9.0, 9.0, 9.0]),
        (_band("16:00", "16:29"), [11.5, 11.0, 10.5, 10.0, 9.5, 9.0, 9.0, 9.0, 9.0]),
        (_band("16:30", "16:59"), [11.25, 10.75, 10.25, 9.75, 9.25, 9.0, 9.0, 9.0, 9.0]),
    ]
    # 17:00-04:59 wraps midnight, so it is the row for anything unmatched
    ACCLIMATISED_NIGHT_ROW: List[float] = [11.0, 10.5, 10.0, 9.5, 9.0, 9.0, 9.0, 9.0, 9.0]

    # Table 3: index 0 = 1-2 sectors ... index 6 = 8 sectors
    UNKNOWN_ACCLIMATISATION_TABLE: List[float] = [11.0, 10.5, 10.0, 9.5, 9.0, 9.0, 9.0]

    # Table 4: columns are 1-2, 3, 4, 5 sectors; None = extension not allowed.
    # Report times outside these bands (19:00-06:14) are never extendable.
    EXTENDED_TABLE: List[Tuple[Band, List[Optional[float]]]] = [
        (_band("06:15", "06:29"), [13.25, 12.75, 12.25, 11.75]),
        (_band("06:30", "06:44"), [13.5, 13.0, 12.5, 12.0]),
        (_band("06:45", "06:59"), [13.75, 13.25, 12.75, 12.25]),
        (_band("07:00", "13:29"), [14.0, 13.5, 13.0, 12.5]),
        (_band("13:30", "13:59"), [13.75, 13.25, 12.75, 12.25]),
        (_band("14:00", "14:29"), [13.5, 13.0, 12.5, 12.0]),
        (_band("14:30", "14:59"), [13.25, 12.75, 12.25, 11.75]),
        (_band("15:00", "15:29"), [13.0, 12.5, 12.0, 11.5]),
        (_band("15:30", "15:59"), [12.75, 12.25, None, None]),
        (_band("16:00", "16:29"), [12.5, 12.0, None, None]),
        (_band("16:30", "16:59"), [12.25, 11.75, None, None]),
        (_band("17:00", "17:29"), [12.0, None, None, None]),
        (_band("17:30", "17:59"), [11.75, None, None, None]),
        (_band("18:00", "18:29"), [11.5, None, None, None]),
        (_band("18:30", "18:59"), [11.25, None, None, None]),
    ]

    # In-flight rest, flight crew: (additional_crew, facility_class) -> max FDP
    IN_FLIGHT_REST_TABLE: Dict[Tuple[int, str], float] = {
        (1, 'class_1'): 16.0,  # 3 pilots, Class 1 (bunk)
        (1, 'class_2'): 15.0,
        (1, 'class_3'): 14.0,
        (2, 'class_1'): 17.0,  # 4 pilots, Class 1 (bunk)
        (2, 'class_2'): 16.0,
        (2, 'class_3'): 15.0,
    }
    # One or two sectors, one with flight time > 9h
    IN_FLIGHT_REST_LONG_FLIGHT_TABLE: Dict[Tuple[int, str], float] = {
        (1, 'class_1'): 17.0,
        (1, 'class_2'): 16.0,
        (1, 'class_3'): 15.0,
        (2, 'class_1'): 18.0,
        (2, 'class_2'): 17.0,
        (2, 'class_3'): 16.0,
    }

    @staticmethod
    def sectors_for_lookup(sectors: int) -> int:
        """1 sector is the '1-2 sectors' row."""
        return 2 if sectors == 1 else sectors

    @classmethod
    def lookup_acclimatised_fdp(cls, local_report_time: str, sectors: int) -> float:
        minutes = parse_hhmm(local_report_time)
        row = _find_band(cls.ACCLIMATISED_TABLE, minutes) or cls.ACCLIMATISED_NIGHT_ROW

        if sectors <= 2:
            index = 0
        else:
            index = min(sectors - 2, len(row) - 1)

        result = row[index]
        logger.debug(
            f"Table 2 lookup: report {local_report_time}, {sectors} sectors -> {result}h"
        )
        return result

    @classmethod
    def lookup_unknown_acclimatised_fdp(cls, sectors: int) -> float:
        """Table 3. Returns 0.0 for 9+ sectors, which are not permitted."""
        index = 0 if sectors <= 2 else sectors - 2
        if index >= len(cls.UNKNOWN_ACCLIMATISATION_TABLE):
            logger.warning(f"Table 3: {sectors} sectors not permitted for unknown acclimatisation")
            return 0.0

        result = cls.UNKNOWN_ACCLIMATISATION_TABLE[index]
        logger.debug(f"Table 3 lookup: {sectors} sectors -> {result}h")
        return result

    @classmethod
    def lookup_extended_fdp(cls, local_report_time: str, sectors: int) -> Optional[float]:
        """Table 4. None when the extension is not allowed."""
        if sectors > 5:
            logger.debug(f"Table 4: {sectors} sectors never extendable")
            return None

        row = _find_band(cls.EXTENDED_TABLE, parse_hhmm(local_report_time))
        if row is None:
            logger.debug(f"Table 4: no extension at report time {local_report_time}")
            return None

        index = 0 if sectors <= 2 else sectors - 2
        result = row[index]
        logger.debug(
            f"Table 4 lookup: report {local_report_time}, {sectors} sectors -> {result}"
        )
        return result

    @classmethod
    def lookup_inflight_rest_extension(
        cls,
        rest_class: RestFacilityClass,
        additional_crew: int,
        is_long_flight: bool,
        default: float = 9.0,
    ) -> float:
        """Maximum FDP with in-flight rest for augmented flight crew."""
        if rest_class is RestFacilityClass.NONE:
            return 0.0
        table = cls.IN_FLIGHT_REST_LONG_FLIGHT_TABLE if is_long_flight else cls.IN_FLIGHT_REST_TABLE
        result = table.get((additional_crew, rest_class.value), default)
        logger.debug(
            f"In-flight rest lookup: {rest_class.value}, +{additional_crew} crew, "
            f"long flight={is_long_flight} -> {result}h"
        )
        return result


class CabinCrewInFlightRestTable:
    """
    Table 5: maximum FDP for cabin crew by rest facility and rest available.

    Each row is (maximum rest hours for the band, maximum FDP); rest beyond
    the last band is capped at the facility maximum.
    """

    BANDS: Dict[RestFacilityClass, List[Tuple[float, float]]] = {
        RestFacilityClass.CLASS_1: [
            (1.5, 14.5), (1.75, 15.0), (2.0, 15.5), (2.25, 16.0),
            (2.58, 16.5), (3.0, 17.0), (3.42, 17.5), (3.83, 18.0),
        ],
        RestFacilityClass.CLASS_2: [
            (1.5, 14.5), (2.0, 15.0), (2.33, 15.5), (2.67, 16.0),
            (3.0, 16.5), (3.42, 17.0),
        ],
        RestFacilityClass.CLASS_3: [
            (1.5, 14.5), (2.33, 15.0), (2.67, 15.5), (3.0, 16.0),
        ],
    }

    @classmethod
    def lookup_max_fdp(cls, rest_facility: RestFacilityClass, rest_time_available: float) -> float:
        bands = cls.BANDS.get(rest_facility)
        if not bands:
            return 0.0
        for max_rest, max_fdp in bands:
            if rest_time_available <= max_rest:
                return max_fdp
        return bands[-1][1]


def lookup_in_flight_rest_limit(
    crew_type: CrewType,
    facility: RestFacilityClass,
    additional_crew: int,
    long_flight: bool,
    rest_time_available: float,
) -> float:
    """Replacement FDP limit for in-flight rest, by crew type."""
    if crew_type is CrewType.CABIN_CREW:
        return CabinCrewInFlightRestTable.lookup_max_fdp(facility, rest_time_available)
    return RegulatoryTableLookup.lookup_inflight_rest_extension(
        facility, additional_crew, long_flight
    )
