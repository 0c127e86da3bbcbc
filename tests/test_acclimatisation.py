#!/usr/bin/env python3
"""
test_acclimatisation.py
=======================

Table 1 acclimatisation: time zone difference x elapsed time -> B / D / X.

Run: python -m pytest tests/test_acclimatisation.py -v
"""

import pytest

from models.data_models import AcclimatisationState
from core.acclimatisation import AcclimatisationClassifier, describe_state

B = AcclimatisationState.HOME_BASE
D = AcclimatisationState.DEPARTURE
X = AcclimatisationState.UNKNOWN


def state(diff, elapsed):
    return AcclimatisationClassifier.classify(diff, elapsed).state


class TestAcclimatisationTable:
    """AcclimatisationClassifier: Table 1 lookup."""

    def test_first_48h_always_home_base(self):
        assert state(0, 0) == B
        assert state(5, 24) == B
        assert state(11, 47.9) == B

    def test_full_table_grid(self):
        # <4h
        assert state(3, 50) == D
        assert state(3, 80) == D
        assert state(3, 130) == D
        # 4-6h
        assert state(5, 50) == X
        assert state(5, 80) == D
        # 6-9h
        assert state(7, 50) == X
        assert state(7, 80) == X
        assert state(7, 100) == D
        # 9-12h
        assert state(10, 50) == X
        assert state(10, 100) == X
        assert state(10, 125) == D

    def test_band_edges_are_half_open(self):
        assert state(3.99, 48) == D
        assert state(4, 48) == X
        assert state(4, 47.99) == B
        assert state(9, 100) == X
        assert state(8.99, 100) == D

    def test_negative_difference_uses_magnitude(self):
        """Westbound and eastbound differences classify the same."""
        assert state(-5, 80) == D
        assert state(-10, 100) == X
        assert state(-3, 50) == D

    def test_difference_outside_table_is_unknown(self):
        assert state(12, 0) == X
        assert state(14, 200) == X

    @pytest.mark.parametrize("diff,elapsed", [
        (None, 10.0),
        (3.0, None),
        (float('nan'), 10.0),
        (3.0, float('nan')),
        (3.0, -1.0),
    ])
    def test_indeterminate_input_is_unknown(self, diff, elapsed):
        assert state(diff, elapsed) == X


class TestAcclimatisationReason:

    def test_reason_names_result_and_location(self):
        result = AcclimatisationClassifier.classify(3, 50, home_base="LHR", departure="DXB")
        assert result.reason.startswith("Result D")
        assert "DXB" in result.reason

        result = AcclimatisationClassifier.classify(3, 10, home_base="LHR", departure="DXB")
        assert result.reason.startswith("Result B")
        assert "LHR" in result.reason

    def test_unknown_reason(self):
        result = AcclimatisationClassifier.classify(15, 10)
        assert result.reason.startswith("Result X")

    def test_state_codes(self):
        assert B.code == 'B' and D.code == 'D' and X.code == 'X'
        assert B.is_acclimatised and D.is_acclimatised
        assert not X.is_acclimatised
        assert describe_state(X) == "unknown state of acclimatisation"
