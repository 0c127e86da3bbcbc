"""
FDP Extensions: In-Flight Rest & Split Duty
===========================================

The two modifier families that change the FDP limit:
- In-flight rest (CS FTL.1.205(c)): looked-up limit REPLACES the base FDP
- Split duty (CS FTL.1.220): 50% of the break is ADDED to the base FDP

Extended FDP (Table 4) is resolved with the base FDP and contributes no
extension hours here.
"""

import logging
from datetime import date, datetime, time, timedelta
from typing import Optional, Tuple

import pytz

from core.parameters import UKFTLFramework
from core.regulatory_tables import lookup_in_flight_rest_limit
from core.time_resolver import ensure_utc, format_hours_and_minutes
from models.data_models import (
    AccommodationType, CrewType, InFlightRest, SplitDuty, SplitDutyBreakdown,
)

logger = logging.getLogger(__name__)


class InFlightRestCalculator:
    """Replacement FDP limit for in-flight rest."""

    def calculate(
        self,
        rest: Optional[InFlightRest],
        crew_type: CrewType,
        extended_fdp_active: bool = False,
    ) -> float:
        if extended_fdp_active or rest is None or not rest.is_active:
            return 0.0

        limit = lookup_in_flight_rest_limit(
            crew_type,
            rest.facility,
            rest.additional_crew,
            rest.uses_long_flight_table,
            rest.rest_time_available,
        )
        logger.debug(f"In-flight rest limit ({crew_type.value}, {rest.facility.value}): {limit}h")
        return limit


class SplitDutyCalculator:
    """
    Split duty extension.

    Suitable accommodation: extension = 50% of the break.
    Accommodation: break time beyond 6h and break time inside the WOCL do not
    count, and a break starting inside the WOCL earns nothing:

        effective = max(0, min(min(break, 6) - wocl_overlap, pre_wocl_portion))
        extension = effective * 0.5

    WOCL bounds are wall-clock times at the acclimatised location; overlaps
    are measured between UTC instants so DST transitions are honoured.
    """

    def __init__(self, framework: UKFTLFramework = None):
        self.framework = framework or UKFTLFramework()

    @staticmethod
    def _localize(tz, day: date, hour: int) -> datetime:
        return tz.normalize(tz.localize(datetime.combine(day, time(hour, 0)))).astimezone(pytz.utc)

    def wocl_window(self, day: date, tz=None) -> Tuple[datetime, datetime]:
        """UTC bounds of the 02:00-05:59 local window on a local date"""
        tz = tz or pytz.utc
        fw = self.framework
        return (self._localize(tz, day, fw.wocl_start_hour),
                self._localize(tz, day, fw.wocl_end_hour))

    def wocl_overlap_hours(self, break_begin: datetime, break_hours: float, tz=None) -> float:
        """Break time inside the WOCL on the begin day and every following day"""
        tz = tz or pytz.utc
        begin = ensure_utc(break_begin)
        end = begin + timedelta(hours=break_hours)

        total = timedelta()
        current_day = begin.astimezone(tz).date()
        end_day = end.astimezone(tz).date()

        while current_day <= end_day:
            wocl_start, wocl_end = self.wocl_window(current_day, tz)

            overlap_start = max(begin, wocl_start)
            overlap_end = min(end, wocl_end)
            if overlap_start < overlap_end:
                total += overlap_end - overlap_start

            current_day += timedelta(days=1)

        return total.total_seconds() / 3600

    def pre_wocl_hours(self, break_begin: datetime, break_hours: float, tz=None) -> float:
        """
        Break time before the next WOCL begins, zero if the break starts inside it.

        A break starting after 05:59 is measured up to the following night's 02:00.
        """
        tz = tz or pytz.utc
        fw = self.framework
        begin = ensure_utc(break_begin)
        begin_local = begin.astimezone(tz)
        if fw.wocl_start_hour <= begin_local.hour < fw.wocl_end_hour:
            return 0.0

        next_wocl, _ = self.wocl_window(begin_local.date(), tz)
        if next_wocl <= begin:
            next_wocl, _ = self.wocl_window(begin_local.date() + timedelta(days=1), tz)

        until_wocl = (next_wocl - begin).total_seconds() / 3600
        return min(break_hours, until_wocl)

    def calculate(
        self,
        split: Optional[SplitDuty],
        tz=None,
        extended_fdp_active: bool = False,
    ) -> SplitDutyBreakdown:
        """
        Args:
            split: Split duty modifier, None when split duty is off
            tz: pytz timezone of the acclimatised location (UTC when omitted)
            extended_fdp_active: Extended FDP excludes split duty
        """
        if extended_fdp_active or split is None:
            return SplitDutyBreakdown(0.0, 0.0, explanation="Split duty not applied")

        fw = self.framework
        tz = tz or pytz.utc
        break_hours = max(0.0, split.break_duration)
        ratio = fw.split_duty_extension_ratio

        if split.accommodation is AccommodationType.SUITABLE_ACCOMMODATION:
            extension = break_hours * ratio
            return SplitDutyBreakdown(
                extension_hours=extension,
                effective_break_hours=break_hours,
                explanation=(
                    f"Suitable accommodation: full 50% extension "
                    f"({format_hours_and_minutes(extension)})"
                ),
            )

        capped = min(break_hours, fw.split_duty_accommodation_cap_hours)
        wocl = self.wocl_overlap_hours(split.break_begin_utc, break_hours, tz)
        before_wocl = self.pre_wocl_hours(split.break_begin_utc, break_hours, tz)

        effective = max(0.0, min(capped - wocl, before_wocl))
        extension = effective * ratio

        notes = ["Accommodation:"]
        if break_hours > fw.split_duty_accommodation_cap_hours:
            notes.append(
                f"{fw.split_duty_accommodation_cap_hours:g}h limit applied (exceeded by "
                f"{format_hours_and_minutes(break_hours - fw.split_duty_accommodation_cap_hours)})."
            )
        if wocl > 0:
            notes.append(f"WOCL encroachment: {format_hours_and_minutes(wocl)} excluded.")
        notes.append(
            f"Final extension: {format_hours_and_minutes(extension)} "
            f"(50% of {format_hours_and_minutes(effective)} effective break time)"
        )

        begin_local = ensure_utc(split.break_begin_utc).astimezone(tz)
        logger.debug(
            f"Split duty: break {break_hours}h from {begin_local:%H:%M} local, capped {capped}h, "
            f"WOCL {wocl}h, pre-WOCL {before_wocl}h -> extension {extension}h"
        )
        return SplitDutyBreakdown(
            extension_hours=extension,
            effective_break_hours=effective,
            wocl_overlap_hours=wocl,
            explanation=" ".join(notes),
        )
