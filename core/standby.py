"""
Standby & Reserve
=================

Standby duration and the FDP reduction it causes (CS FTL.1.225):
- Home standby: FDP reduced by standby time beyond 6h (8h with in-flight
  rest or split duty)
- Airport standby: FDP reduced by standby time beyond 4h; standby plus FDP
  should not exceed 16h (18h with in-flight rest or split duty)
- Airport duty, reserve: no reduction

Night standby (starting 23:00-06:59 at home base) counts from the time the
crew member was contacted, when recorded.
"""

import logging
from datetime import datetime, timedelta
from typing import Optional

from core.parameters import UKFTLFramework
from core.time_resolver import (
    AirportTimeResolver, ensure_utc, format_hours_and_minutes, hours_between,
)
from models.data_models import (
    DutyInputs, FDPWarning, StandbyAssessment, StandbyType, WarningKind,
)

logger = logging.getLogger(__name__)


class StandbyCalculator:

    def __init__(self, framework: UKFTLFramework = None, resolver: AirportTimeResolver = None):
        self.framework = framework or UKFTLFramework()
        self.resolver = resolver or AirportTimeResolver()

    def is_night_standby(self, inputs: DutyInputs) -> bool:
        if inputs.standby_start_utc is None:
            return False
        fw = self.framework
        hour = self.resolver.to_local(inputs.standby_start_utc, inputs.home_base).hour
        return hour >= fw.night_standby_start_hour or hour < fw.night_standby_end_hour

    def threshold_hours(self, inputs: DutyInputs) -> Optional[float]:
        fw = self.framework
        standby_type = inputs.active_standby_type
        if standby_type is StandbyType.HOME_STANDBY:
            if inputs.in_flight_rest is not None or inputs.split_duty is not None:
                return fw.home_standby_extended_threshold_hours
            return fw.home_standby_threshold_hours
        if standby_type is StandbyType.AIRPORT_STANDBY:
            return fw.airport_standby_threshold_hours
        return None

    def assess(self, inputs: DutyInputs) -> StandbyAssessment:
        standby_type = inputs.active_standby_type
        if standby_type is StandbyType.NONE or inputs.standby_start_utc is None:
            return StandbyAssessment(standby_type=standby_type)

        is_night = self.is_night_standby(inputs)
        used_contact = is_night and inputs.standby_contact_utc is not None
        reference = inputs.standby_contact_utc if used_contact else inputs.standby_start_utc
        duration = hours_between(reference, inputs.report_time_utc)

        threshold = self.threshold_hours(inputs)
        reduction = 0.0
        if threshold is not None and duration > threshold:
            reduction = duration - threshold

        logger.debug(
            f"Standby {standby_type.value}: {duration:.2f}h "
            f"(night={is_night}, contact={used_contact}), threshold={threshold}, "
            f"reduction={reduction:.2f}h"
        )
        return StandbyAssessment(
            standby_type=standby_type,
            duration_hours=duration,
            threshold_hours=threshold,
            reduction_hours=reduction,
            is_night_standby=is_night,
            used_contact_time=used_contact,
        )

    def check_awake_ceiling(
        self,
        inputs: DutyInputs,
        assessment: StandbyAssessment,
        adjusted_fdp: float,
    ) -> Optional[FDPWarning]:
        """Airport standby + FDP against the 16h/18h ceiling. Reported, not corrected."""
        if assessment.standby_type is not StandbyType.AIRPORT_STANDBY:
            return None

        fw = self.framework
        extended = inputs.in_flight_rest is not None or inputs.split_duty is not None
        ceiling = (fw.airport_standby_extended_max_awake_hours if extended
                   else fw.airport_standby_max_awake_hours)
        total = assessment.duration_hours + adjusted_fdp
        if total <= ceiling:
            return None

        message = (
            f"Airport standby ({format_hours_and_minutes(assessment.duration_hours)}) plus FDP "
            f"({format_hours_and_minutes(adjusted_fdp)}) is {format_hours_and_minutes(total)}, "
            f"exceeding the {ceiling:g}h limit"
        )
        logger.warning(message)
        return FDPWarning(WarningKind.DUTY_TIME_CEILING_EXCEEDED, message)

    def contact_instant_from_local(
        self,
        standby_start_utc: datetime,
        local_contact_time: str,
        home_base: str,
    ) -> datetime:
        """
        Contact time entered as a home-base local "HH:MM", placed on the
        standby-start date (or the next day if that would precede the start).
        """
        start_local = self.resolver.to_local(standby_start_utc, home_base)
        contact = self.resolver.local_to_utc(start_local.date(), local_contact_time, home_base)
        if contact < ensure_utc(standby_start_utc):
            contact = self.resolver.local_to_utc(
                start_local.date() + timedelta(days=1), local_contact_time, home_base
            )
        return contact
