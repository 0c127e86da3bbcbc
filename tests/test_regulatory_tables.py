#!/usr/bin/env python3
"""
test_regulatory_tables.py
=========================

Test suite for the UK CAA lookup tables and airport time resolution:
- Part A: Table 2 (acclimatised) and Table 3 (unknown acclimatisation)
- Part B: Table 4 (extended FDP)
- Part C: In-flight rest (flight crew) and Table 5 (cabin crew)
- Part D: Time string helpers and AirportTimeResolver

Run: python -m pytest tests/test_regulatory_tables.py -v
"""

import pytest
from datetime import date, datetime
import pytz

from models.data_models import CrewType, RestFacilityClass
from core.regulatory_tables import (
    RegulatoryTableLookup, CabinCrewInFlightRestTable, lookup_in_flight_rest_limit,
)
from core.time_resolver import (
    AirportTimeResolver, parse_hhmm, format_hours_and_minutes,
    ensure_utc, hours_between,
)

UTC = pytz.utc


# ============================================================================
# PART A: TABLE 2 / TABLE 3
# ============================================================================

class TestAcclimatisedTable:

    def test_single_sector_uses_two_sector_row(self):
        assert RegulatoryTableLookup.sectors_for_lookup(1) == 2
        assert RegulatoryTableLookup.sectors_for_lookup(2) == 2
        assert RegulatoryTableLookup.sectors_for_lookup(5) == 5

    def test_daytime_band(self):
        lookup = RegulatoryTableLookup.lookup_acclimatised_fdp
        assert lookup("06:00", 2) == 13.0
        assert lookup("13:29", 2) == 13.0
        assert lookup("09:00", 4) == 12.0

    def test_early_morning_quarter_hour_bands(self):
        lookup = RegulatoryTableLookup.lookup_acclimatised_fdp
        assert lookup("05:00", 2) == 12.0
        assert lookup("05:14", 2) == 12.0
        assert lookup("05:15", 2) == 12.25
        assert lookup("05:45", 3) == 12.25

    def test_afternoon_reductions(self):
        lookup = RegulatoryTableLookup.lookup_acclimatised_fdp
        assert lookup("13:30", 3) == 12.25
        assert lookup("16:30", 2) == 11.25

    def test_night_row_wraps_midnight(self):
        """17:00-04:59 has no explicit band, it is the fallback row."""
        lookup = RegulatoryTableLookup.lookup_acclimatised_fdp
        assert lookup("17:00", 2) == 11.0
        assert lookup("23:59", 2) == 11.0
        assert lookup("00:00", 2) == 11.0
        assert lookup("04:59", 3) == 10.5

    def test_ten_or_more_sectors_capped_at_last_column(self):
        lookup = RegulatoryTableLookup.lookup_acclimatised_fdp
        assert lookup("06:00", 10) == 9.0
        assert lookup("06:00", 15) == 9.0
        assert lookup("06:00", 9) == 9.5

    def test_unknown_acclimatisation_table(self):
        lookup = RegulatoryTableLookup.lookup_unknown_acclimatised_fdp
        assert lookup(2) == 11.0
        assert lookup(3) == 10.5
        assert lookup(6) == 9.0
        assert lookup(8) == 9.0

    def test_unknown_acclimatisation_nine_sectors_not_permitted(self):
        assert RegulatoryTableLookup.lookup_unknown_acclimatised_fdp(9) == 0.0
        assert RegulatoryTableLookup.lookup_unknown_acclimatised_fdp(12) == 0.0


# ============================================================================
# PART B: TABLE 4
# ============================================================================

class TestExtendedTable:

    def test_extended_values(self):
        lookup = RegulatoryTableLookup.lookup_extended_fdp
        assert lookup("07:00", 2) == 14.0
        assert lookup("06:15", 5) == 11.75
        assert lookup("18:30", 2) == 11.25

    def test_not_allowed_cells(self):
        lookup = RegulatoryTableLookup.lookup_extended_fdp
        assert lookup("17:00", 3) is None
        assert lookup("15:30", 4) is None

    def test_outside_extendable_window(self):
        lookup = RegulatoryTableLookup.lookup_extended_fdp
        assert lookup("06:14", 2) is None
        assert lookup("19:00", 2) is None
        assert lookup("02:00", 2) is None

    def test_more_than_five_sectors_never_extendable(self):
        assert RegulatoryTableLookup.lookup_extended_fdp("07:00", 6) is None


# ============================================================================
# PART C: IN-FLIGHT REST
# ============================================================================

class TestInFlightRestTables:

    def test_flight_crew_limits(self):
        lookup = RegulatoryTableLookup.lookup_inflight_rest_extension
        assert lookup(RestFacilityClass.CLASS_1, 1, False) == 16.0
        assert lookup(RestFacilityClass.CLASS_3, 1, False) == 14.0
        assert lookup(RestFacilityClass.CLASS_1, 2, False) == 17.0

    def test_flight_crew_long_flight_limits(self):
        lookup = RegulatoryTableLookup.lookup_inflight_rest_extension
        assert lookup(RestFacilityClass.CLASS_1, 1, True) == 17.0
        assert lookup(RestFacilityClass.CLASS_2, 2, True) == 17.0

    def test_no_facility_is_zero(self):
        assert RegulatoryTableLookup.lookup_inflight_rest_extension(
            RestFacilityClass.NONE, 1, False) == 0.0

    def test_missing_combination_falls_back_to_default(self):
        assert RegulatoryTableLookup.lookup_inflight_rest_extension(
            RestFacilityClass.CLASS_1, 3, False) == 9.0

    def test_cabin_crew_bands(self):
        lookup = CabinCrewInFlightRestTable.lookup_max_fdp
        assert lookup(RestFacilityClass.CLASS_1, 1.5) == 14.5
        assert lookup(RestFacilityClass.CLASS_1, 1.6) == 15.0
        assert lookup(RestFacilityClass.CLASS_1, 3.0) == 17.0
        assert lookup(RestFacilityClass.CLASS_3, 2.0) == 15.0

    def test_cabin_crew_rest_beyond_last_band_is_capped(self):
        lookup = CabinCrewInFlightRestTable.lookup_max_fdp
        assert lookup(RestFacilityClass.CLASS_1, 10.0) == 18.0
        assert lookup(RestFacilityClass.CLASS_2, 10.0) == 17.0
        assert lookup(RestFacilityClass.CLASS_3, 10.0) == 16.0

    def test_cabin_crew_no_facility(self):
        assert CabinCrewInFlightRestTable.lookup_max_fdp(RestFacilityClass.NONE, 3.0) == 0.0

    def test_limit_depends_on_crew_type(self):
        pilot = lookup_in_flight_rest_limit(
            CrewType.PILOT, RestFacilityClass.CLASS_1, 1, False, 3.0)
        cabin = lookup_in_flight_rest_limit(
            CrewType.CABIN_CREW, RestFacilityClass.CLASS_1, 1, False, 3.0)
        assert pilot == 16.0
        assert cabin == 17.0


# ============================================================================
# PART D: TIME HELPERS
# ============================================================================

class TestTimeHelpers:

    def test_parse_hhmm(self):
        assert parse_hhmm("00:00") == 0
        assert parse_hhmm("13:45") == 825
        assert parse_hhmm("13:45z") == 825

    @pytest.mark.parametrize("value", ["", "1345", "ab:cd", "24:00", "12:60"])
    def test_parse_hhmm_rejects_malformed(self, value):
        with pytest.raises(ValueError):
            parse_hhmm(value)

    def test_format_hours_and_minutes(self):
        assert format_hours_and_minutes(1.5) == "1h 30m"
        assert format_hours_and_minutes(2.0) == "2h"
        assert format_hours_and_minutes(0.25) == "15m"

    def test_naive_datetimes_are_utc(self):
        naive = datetime(2025, 1, 15, 9, 0)
        assert ensure_utc(naive) == UTC.localize(naive)
        assert hours_between(naive, datetime(2025, 1, 15, 12, 30, tzinfo=UTC)) == 3.5


class TestAirportTimeResolver:

    def setup_method(self):
        self.resolver = AirportTimeResolver()

    def test_iata_and_icao_codes(self):
        assert self.resolver.timezone_name("LHR") == "Europe/London"
        assert self.resolver.timezone_name("egll") == "Europe/London"
        assert self.resolver.timezone_name("DXB") == "Asia/Dubai"

    def test_local_time_follows_dst(self):
        winter = datetime(2025, 1, 15, 9, 0, tzinfo=UTC)
        summer = datetime(2025, 7, 15, 9, 0, tzinfo=UTC)
        assert self.resolver.local_time(winter, "LHR") == "09:00"
        assert self.resolver.local_time(summer, "LHR") == "10:00"
        assert self.resolver.local_time(winter, "DXB") == "13:00"

    def test_utc_time_inverts_local_time(self):
        assert self.resolver.utc_time("10:00", "LHR", date(2025, 7, 1)) == "09:00"
        assert self.resolver.utc_time("13:00", "DXB", date(2025, 1, 15)) == "09:00"

    def test_local_to_utc(self):
        instant = self.resolver.local_to_utc(date(2025, 1, 15), "23:30", "DXB")
        assert instant == datetime(2025, 1, 15, 19, 30, tzinfo=UTC)

    def test_unknown_airport_falls_back_to_utc(self):
        assert not self.resolver.is_known("Z9Z")
        assert self.resolver.timezone_name("Z9Z") == "UTC"
        assert self.resolver.local_time(datetime(2025, 1, 15, 9, 0, tzinfo=UTC), "Z9Z") == "09:00"

    def test_custom_airport_override(self):
        AirportTimeResolver.add_custom_airport("Q9Q", "Asia/Tokyo")
        assert self.resolver.is_known("Q9Q")
        assert self.resolver.local_time(datetime(2025, 1, 15, 0, 0, tzinfo=UTC), "Q9Q") == "09:00"

    def test_custom_airport_rejects_bad_timezone(self):
        with pytest.raises(pytz.UnknownTimeZoneError):
            AirportTimeResolver.add_custom_airport("Q8Q", "Not/AZone")
