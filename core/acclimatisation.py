"""
Acclimatisation Classifier
==========================

UK CAA ORO.FTL.105 / AMC1 Table 1: maps the time zone difference between the
reference time and the local time where the crew member starts the next duty,
and the time elapsed since reporting for the first sector, to a state:

    B = acclimatised to home base time zone
    D = acclimatised to the current departure time zone
    X = unknown state of acclimatisation
"""

import logging
import math
from typing import Optional

from models.data_models import AcclimatisationResult, AcclimatisationState

logger = logging.getLogger(__name__)


class AcclimatisationClassifier:
    """Table 1 lookup. Never raises; indeterminate input is X."""

    # rows = time zone diff bands [min, max), cols = elapsed time bands
    TABLE_1 = {
        (0, 4):  ['B', 'D', 'D', 'D', 'D'],
        (4, 6):  ['B', 'X', 'D', 'D', 'D'],
        (6, 9):  ['B', 'X', 'X', 'D', 'D'],
        (9, 12): ['B', 'X', 'X', 'X', 'D'],
    }

    ELAPSED_BANDS = ['<48', '48-71:59', '72-95:59', '96-119:59', '>=120']

    STATES = {
        'B': AcclimatisationState.HOME_BASE,
        'D': AcclimatisationState.DEPARTURE,
        'X': AcclimatisationState.UNKNOWN,
    }

    @staticmethod
    def _elapsed_column(elapsed_hours: float) -> int:
        if elapsed_hours < 48:
            return 0
        elif elapsed_hours < 72:
            return 1
        elif elapsed_hours < 96:
            return 2
        elif elapsed_hours < 120:
            return 3
        return 4

    @classmethod
    def _row_key(cls, abs_diff: float) -> Optional[tuple]:
        for (min_diff, max_diff) in cls.TABLE_1:
            if min_diff <= abs_diff < max_diff:
                return (min_diff, max_diff)
        return None

    @classmethod
    def classify(
        cls,
        timezone_diff: float,
        elapsed_hours: float,
        home_base: str = "",
        departure: str = "",
    ) -> AcclimatisationResult:
        if (timezone_diff is None or elapsed_hours is None
                or math.isnan(timezone_diff) or math.isnan(elapsed_hours)
                or elapsed_hours < 0):
            return AcclimatisationResult(
                AcclimatisationState.UNKNOWN,
                "Result X: indeterminate time zone difference or elapsed time",
            )

        abs_diff = abs(timezone_diff)
        row_key = cls._row_key(abs_diff)
        if row_key is None:
            logger.debug(f"Time zone difference {timezone_diff}h outside Table 1")
            return AcclimatisationResult(
                AcclimatisationState.UNKNOWN,
                f"Result X: time zone difference of {abs_diff:g}h is outside Table 1",
            )

        col = cls._elapsed_column(elapsed_hours)
        code = cls.TABLE_1[row_key][col]
        state = cls.STATES[code]

        location = {
            'B': f" ({home_base})" if home_base else "",
            'D': f" ({departure})" if departure else "",
            'X': "",
        }[code]
        reason = (
            f"Result {code}: {abs_diff:g}h time zone difference, "
            f"{cls.ELAPSED_BANDS[col]}h elapsed - {describe_state(state)}{location}"
        )
        return AcclimatisationResult(state, reason)


def describe_state(state: AcclimatisationState) -> str:
    return {
        AcclimatisationState.HOME_BASE: "acclimatised to home base",
        AcclimatisationState.DEPARTURE: "acclimatised to departure location",
        AcclimatisationState.UNKNOWN: "unknown state of acclimatisation",
    }[state]
