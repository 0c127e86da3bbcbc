"""
FDP Determination Engine
========================

Turns a DutyInputs snapshot into an FDPResult:

    acclimatisation -> base FDP (Table 2/3, or Table 4 when extended)
        -> in-flight rest (replaces) | split duty (adds) | extended FDP
        -> standby/reserve reduction -> floor -> total FDP
        -> commander's discretion -> latest off/on blocks

FDPCalculator is stateless. FDPEngine owns one mutable set of inputs and
caches the result until the next mutation; it is not thread-safe and must
have a single owner.

References:
    UK Reg. 965/2012 ORO.FTL.205, CS FTL.1.205, CS FTL.1.220, CS FTL.1.225
"""

import logging
from datetime import datetime, timedelta
from typing import List, Optional

from core.acclimatisation import AcclimatisationClassifier
from core.extensions import InFlightRestCalculator, SplitDutyCalculator
from core.parameters import EngineConfig
from core.regulatory_tables import RegulatoryTableLookup
from core.standby import StandbyCalculator
from core.time_resolver import AirportTimeResolver, ensure_utc, format_hours_and_minutes
from models.data_models import (
    AcclimatisationResult, AcclimatisationState, ActiveModifier, CrewType,
    DutyInputs, ExtendedFDP, FDPResult, FDPWarning, InFlightRest, NoModifier,
    SplitDuty, SplitDutyBreakdown, StandbyType, WarningKind,
)

logger = logging.getLogger(__name__)


class FDPCalculator:
    """Pure FDP determination for a DutyInputs snapshot."""

    def __init__(self, config: EngineConfig = None, resolver: AirportTimeResolver = None):
        self.config = config or EngineConfig.default_uk_caa_config()
        self.framework = self.config.framework
        self.resolver = resolver or AirportTimeResolver(self.config.unknown_airport_timezone)
        self.classifier = AcclimatisationClassifier
        self.tables = RegulatoryTableLookup
        self.in_flight_rest = InFlightRestCalculator()
        self.split_duty = SplitDutyCalculator(self.framework)
        self.standby = StandbyCalculator(self.framework, self.resolver)

    # ------------------------------------------------------------------
    # Acclimatisation & base FDP
    # ------------------------------------------------------------------

    def classify(self, inputs: DutyInputs) -> AcclimatisationResult:
        return self.classifier.classify(
            inputs.timezone_difference,
            inputs.elapsed_time_hours,
            inputs.home_base,
            inputs.departure,
        )

    def local_report_time(self, inputs: DutyInputs, state: AcclimatisationState) -> str:
        location = self.resolver.acclimatised_location(inputs, state)
        return self.resolver.local_time(inputs.fdp_start_utc, location)

    def _standard_base_fdp(
        self,
        inputs: DutyInputs,
        acclimatisation: AcclimatisationResult,
        warnings: Optional[List[FDPWarning]] = None,
    ) -> float:
        sectors = self.tables.sectors_for_lookup(inputs.sectors)
        state = acclimatisation.state

        if state in (AcclimatisationState.HOME_BASE, AcclimatisationState.DEPARTURE):
            local_time = self.local_report_time(inputs, state)
            return self.tables.lookup_acclimatised_fdp(local_time, sectors)

        if state is AcclimatisationState.UNKNOWN:
            result = self.tables.lookup_unknown_acclimatised_fdp(sectors)
            if result == 0.0 and warnings is not None:
                warnings.append(FDPWarning(
                    WarningKind.SECTORS_NOT_PERMITTED,
                    f"{inputs.sectors} sectors are not permitted with unknown acclimatisation",
                ))
            return result

        return self.framework.fallback_fdp_hours

    def get_base_fdp(self, inputs: DutyInputs) -> float:
        """Standard Table 2/3 limit, never the Table 4 extension."""
        return self._standard_base_fdp(inputs, self.classify(inputs))

    def resolve_base_fdp(
        self,
        inputs: DutyInputs,
        acclimatisation: Optional[AcclimatisationResult] = None,
        warnings: Optional[List[FDPWarning]] = None,
    ) -> float:
        """Table 4 when extended FDP is active and allowed, else the standard limit."""
        acclimatisation = acclimatisation or self.classify(inputs)

        if inputs.has_extended_fdp:
            local_time = self.local_report_time(inputs, acclimatisation.state)
            sectors = self.tables.sectors_for_lookup(inputs.sectors)
            extended = self.tables.lookup_extended_fdp(local_time, sectors)
            if extended is not None:
                return extended

            logger.info(
                f"Extended FDP not available at {local_time} local with {inputs.sectors} sectors; "
                "using standard limits"
            )
            if warnings is not None:
                warnings.append(FDPWarning(
                    WarningKind.EXTENDED_FDP_UNAVAILABLE,
                    f"Extended FDP not available for a {local_time} report with "
                    f"{inputs.sectors} sectors; standard limits apply",
                ))

        return self._standard_base_fdp(inputs, acclimatisation, warnings)

    # ------------------------------------------------------------------
    # Extensions
    # ------------------------------------------------------------------

    def split_duty_breakdown(
        self,
        inputs: DutyInputs,
        state: AcclimatisationState,
    ) -> SplitDutyBreakdown:
        split = inputs.split_duty
        tz = None
        if split is not None:
            tz = self.resolver.timezone(self.resolver.acclimatised_location(inputs, state))
        return self.split_duty.calculate(split, tz, inputs.has_extended_fdp)

    def in_flight_rest_limit(self, inputs: DutyInputs) -> float:
        return self.in_flight_rest.calculate(
            inputs.in_flight_rest, inputs.crew_type, inputs.has_extended_fdp
        )

    def commanders_discretion(self, inputs: DutyInputs, max_fdp: float, base_fdp: float) -> float:
        fw = self.framework
        if inputs.has_extended_fdp:
            # Table 4 margin and discretion together may not exceed 2h
            margin = max_fdp - base_fdp
            return max(0.0, fw.max_total_extension_hours - margin)
        if inputs.in_flight_rest is not None:
            return fw.discretion_in_flight_rest_hours
        return fw.discretion_hours

    # ------------------------------------------------------------------
    # Derived times
    # ------------------------------------------------------------------

    @staticmethod
    def latest_on_blocks(inputs: DutyInputs, fdp_hours: float) -> datetime:
        return ensure_utc(inputs.fdp_start_utc) + timedelta(hours=fdp_hours)

    @classmethod
    def latest_off_blocks(cls, inputs: DutyInputs, fdp_hours: float) -> datetime:
        return cls.latest_on_blocks(inputs, fdp_hours) - timedelta(hours=inputs.estimated_block_time)

    @staticmethod
    def format_utc(instant: datetime, reference: datetime) -> str:
        """'HH:MMz', prefixed with the date when it falls on another UTC day"""
        instant, reference = ensure_utc(instant), ensure_utc(reference)
        if instant.date() == reference.date():
            return instant.strftime('%H:%Mz')
        return instant.strftime('%d %b %H:%Mz')

    def format_breakdown(self, inputs: DutyInputs, fdp_hours: float) -> str:
        start = ensure_utc(inputs.fdp_start_utc)
        if (inputs.active_standby_type is StandbyType.AIRPORT_DUTY
                and inputs.airport_duty_start_utc is not None):
            label = "Airport Duty Start"
        else:
            label = "Reporting Time"

        on_blocks = self.latest_on_blocks(inputs, fdp_hours)
        off_blocks = self.latest_off_blocks(inputs, fdp_hours)
        return (
            f"{start:%H:%M}z ({label}) + {format_hours_and_minutes(fdp_hours)} = "
            f"{self.format_utc(on_blocks, start)} - "
            f"{format_hours_and_minutes(inputs.estimated_block_time)} = "
            f"{self.format_utc(off_blocks, start)}"
        )

    # ------------------------------------------------------------------
    # Aggregation
    # ------------------------------------------------------------------

    def evaluate(self, inputs: DutyInputs) -> FDPResult:
        fw = self.framework
        warnings: List[FDPWarning] = []

        acclimatisation = self.classify(inputs)
        base_fdp = self._standard_base_fdp(inputs, acclimatisation)
        resolved = self.resolve_base_fdp(inputs, acclimatisation, warnings)

        split = self.split_duty_breakdown(inputs, acclimatisation.state)
        max_fdp = resolved + split.extension_hours

        in_flight_rest_limit = self.in_flight_rest_limit(inputs)
        replaces_base = in_flight_rest_limit > 0.0
        adjusted = in_flight_rest_limit if replaces_base else max_fdp

        standby = self.standby.assess(inputs)
        adjusted -= standby.reduction_hours

        # Standby threshold breaches may legitimately take the FDP below 9h
        if adjusted < fw.minimum_fdp_hours and not standby.threshold_breached:
            adjusted = fw.minimum_fdp_hours

        ceiling_warning = self.standby.check_awake_ceiling(inputs, standby, adjusted)
        if ceiling_warning is not None:
            warnings.append(ceiling_warning)

        discretion = self.commanders_discretion(inputs, max_fdp, base_fdp)
        with_discretion = adjusted + discretion

        logger.info(
            f"FDP determined: {acclimatisation.state.code}, base {base_fdp}h, max {max_fdp}h, "
            f"total {adjusted:.2f}h (+{discretion}h discretion)"
        )

        return FDPResult(
            acclimatisation=acclimatisation,
            base_fdp=base_fdp,
            max_fdp=max_fdp,
            extension_applied_hours=in_flight_rest_limit if replaces_base else split.extension_hours,
            extension_replaces_base=replaces_base,
            standby=standby,
            total_fdp=adjusted,
            commanders_discretion_hours=discretion,
            latest_off_blocks_utc=self.latest_off_blocks(inputs, adjusted),
            latest_on_blocks_utc=self.latest_on_blocks(inputs, adjusted),
            latest_off_blocks_with_discretion_utc=self.latest_off_blocks(inputs, with_discretion),
            latest_on_blocks_with_discretion_utc=self.latest_on_blocks(inputs, with_discretion),
            total_duty_time=adjusted,
            total_duty_time_with_discretion=with_discretion,
            breakdown=self.format_breakdown(inputs, adjusted),
            breakdown_with_discretion=self.format_breakdown(inputs, with_discretion),
            warnings=warnings,
        )


class FDPEngine:
    """
    Mutable duty inputs with a lazily computed, cached FDPResult.

    Every mutator replaces the inputs snapshot and drops the cached result;
    the next read recomputes from the current inputs.
    """

    def __init__(self, inputs: DutyInputs, calculator: FDPCalculator = None):
        self._inputs = inputs
        self.calculator = calculator or FDPCalculator()
        self._result: Optional[FDPResult] = None

    @property
    def inputs(self) -> DutyInputs:
        return self._inputs

    @property
    def is_cached(self) -> bool:
        return self._result is not None

    @property
    def result(self) -> FDPResult:
        if self._result is None:
            self._result = self.calculator.evaluate(self._inputs)
        return self._result

    def invalidate(self):
        self._result = None

    def update(self, **changes) -> 'FDPEngine':
        self._inputs = self._inputs.with_changes(**changes)
        self.invalidate()
        return self

    # -- derived values -------------------------------------------------

    def total_fdp(self) -> float:
        return self.result.total_fdp

    def base_fdp(self) -> float:
        return self.result.base_fdp

    def latest_off_blocks(self, with_discretion: bool = False) -> datetime:
        if with_discretion:
            return self.result.latest_off_blocks_with_discretion_utc
        return self.result.latest_off_blocks_utc

    def latest_on_blocks(self, with_discretion: bool = False) -> datetime:
        if with_discretion:
            return self.result.latest_on_blocks_with_discretion_utc
        return self.result.latest_on_blocks_utc

    def total_duty_time(self, with_discretion: bool = False) -> float:
        if with_discretion:
            return self.result.total_duty_time_with_discretion
        return self.result.total_duty_time

    def breakdown(self, with_discretion: bool = False) -> str:
        if with_discretion:
            return self.result.breakdown_with_discretion
        return self.result.breakdown

    # -- mutators -------------------------------------------------------

    def set_home_base(self, code: str):
        return self.update(home_base=code.upper())

    def set_secondary_home_base(self, code: str):
        return self.update(secondary_home_base=code.upper())

    def set_report_location(self, code: str):
        return self.update(report_location=code.upper())

    def set_report_time(self, report_time_utc: datetime):
        return self.update(report_time_utc=report_time_utc)

    def set_sectors(self, sectors: int):
        return self.update(sectors=sectors)

    def set_timezone_difference(self, hours: int):
        return self.update(timezone_difference=hours)

    def set_elapsed_time(self, hours: float):
        return self.update(elapsed_time_hours=hours)

    def set_standby(self, standby_type: StandbyType, start_utc: Optional[datetime] = None):
        enabled = standby_type is not StandbyType.NONE
        changes = dict(standby_enabled=enabled, standby_type=standby_type)
        if start_utc is not None:
            changes['standby_start_utc'] = start_utc
            if standby_type is StandbyType.AIRPORT_DUTY and self._inputs.airport_duty_start_utc is None:
                changes['airport_duty_start_utc'] = start_utc
        return self.update(**changes)

    def set_standby_enabled(self, enabled: bool):
        return self.update(standby_enabled=enabled)

    def set_standby_start(self, start_utc: datetime):
        return self.update(standby_start_utc=start_utc)

    def set_airport_duty_start(self, start_utc: datetime):
        return self.update(airport_duty_start_utc=start_utc)

    def set_standby_contact(self, contact_utc: Optional[datetime]):
        return self.update(standby_contact_utc=contact_utc)

    def set_standby_contact_local(self, local_contact_time: Optional[str]):
        """Record the night standby contact as a home-base local "HH:MM"."""
        if not local_contact_time or self._inputs.standby_start_utc is None:
            return self.set_standby_contact(None)
        contact = self.calculator.standby.contact_instant_from_local(
            self._inputs.standby_start_utc, local_contact_time, self._inputs.home_base
        )
        return self.set_standby_contact(contact)

    def set_crew_type(self, crew_type: CrewType):
        return self.update(crew_type=crew_type)

    def set_modifier(self, modifier: ActiveModifier):
        return self.update(modifier=modifier)

    def set_in_flight_rest(self, rest: Optional[InFlightRest]):
        return self.set_modifier(rest if rest is not None else NoModifier())

    def set_split_duty(self, split: Optional[SplitDuty]):
        return self.set_modifier(split if split is not None else NoModifier())

    def set_extended_fdp(self, enabled: bool):
        if enabled:
            return self.set_modifier(ExtendedFDP())
        if self._inputs.has_extended_fdp:
            return self.set_modifier(NoModifier())
        return self.update()

    def clear_modifier(self):
        return self.set_modifier(NoModifier())

    def set_estimated_block_time(self, hours: float):
        return self.update(estimated_block_time=hours)
