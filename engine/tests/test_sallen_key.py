"""
Tests for the Sallen-Key design equations.

Validates:
1. Forward f0/Q formulas and NaN on undefined inputs
2. Resistor reconstruction from a capacitor pair
3. Feasibility gate (C1 >= 4Q²C2) and error kinds
4. Equal-resistor pot helpers and frequency response
"""

import math

import numpy as np
import pytest
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(__file__))))

from engine.errors import (
    DegenerateSolutionError,
    ErrorKind,
    ImaginaryRootError,
    InvalidInputError,
    is_error,
)
from engine.sallen_key import (
    DEFAULT_SWEEP_ALPHAS,
    ResistorPair,
    effective_r,
    equal_r_capacitance,
    fc_from_equal_r,
    generate_frequencies,
    lowpass_response,
    natural_frequency,
    q_from_caps,
    quality_factor,
    solve_resistors_for_capacitors,
    sweep_pot,
)


class TestForwardEquations:

    def test_matches_closed_form(self):
        r1, r2, c1, c2 = 1800.0, 2700.0, 4.7e-9, 1e-9
        expected_fc = 1 / (2 * math.pi * math.sqrt(r1 * r2 * c1 * c2))
        expected_q = math.sqrt(r1 * r2 * c1 * c2) / (c2 * (r1 + r2))

        assert natural_frequency(r1, r2, c1, c2) == pytest.approx(expected_fc, rel=1e-12)
        assert quality_factor(r1, r2, c1, c2) == pytest.approx(expected_q, rel=1e-12)

    def test_non_positive_inputs_give_nan(self):
        """Undefined inputs return NaN rather than raising."""
        assert math.isnan(natural_frequency(0.0, 1000.0, 1e-9, 1e-9))
        assert math.isnan(natural_frequency(-1.0, 1000.0, 1e-9, 1e-9))
        assert math.isnan(quality_factor(1000.0, 1000.0, -1e-9, 1e-9))

    def test_non_finite_product_gives_nan(self):
        assert math.isnan(natural_frequency(math.inf, 1000.0, 1e-9, 1e-9))
        assert math.isnan(quality_factor(math.nan, 1000.0, 1e-9, 1e-9))


class TestSolveResistorsForCapacitors:

    def test_reconstructs_sum_and_product(self):
        """R1·R2 and R1+R2 must satisfy the design identities."""
        fc, q, c1, c2 = 1200.0, 0.9, 3.3e-9, 1e-9
        pair = solve_resistors_for_capacitors(fc, q, c1, c2)
        assert not is_error(pair)

        omega0 = 2 * math.pi * fc
        assert pair.r1 * pair.r2 == pytest.approx(1 / (omega0 ** 2 * c1 * c2), rel=1e-9)
        assert pair.r1 + pair.r2 == pytest.approx(1 / (omega0 * q * c2), rel=1e-9)

    def test_smaller_resistor_first(self):
        pair = solve_resistors_for_capacitors(1200.0, 0.9, 3.3e-9, 1e-9)
        assert isinstance(pair, ResistorPair)
        assert pair.r1 <= pair.r2

    def test_round_trip_through_forward_equations(self):
        fc, q, c1, c2 = 2500.0, 1.3, 33e-9, 3.3e-9
        pair = solve_resistors_for_capacitors(fc, q, c1, c2)
        assert natural_frequency(pair.r1, pair.r2, c1, c2) == pytest.approx(fc, rel=1e-6)
        assert quality_factor(pair.r1, pair.r2, c1, c2) == pytest.approx(q, rel=1e-6)

    def test_equal_caps_cannot_reach_butterworth_q(self):
        """Equal capacitors top out at Q = 0.5 at unity gain."""
        result = solve_resistors_for_capacitors(1000.0, 0.707, 1e-9, 1e-9)
        assert isinstance(result, ImaginaryRootError)
        assert result.kind == ErrorKind.IMAGINARY_ROOT
        assert '4·Q²·C2' in result.message

    def test_errors_are_returned_not_raised(self):
        result = solve_resistors_for_capacitors(1000.0, 0.707, 1e-9, 1e-9)
        assert is_error(result)

    def test_q_half_with_equal_caps_gives_equal_resistors(self):
        """The boundary case has a zero discriminant and must still solve."""
        pair = solve_resistors_for_capacitors(1000.0, 0.5, 1e-9, 1e-9)
        assert not is_error(pair)
        assert pair.r1 == pytest.approx(pair.r2, rel=1e-6)
        assert pair.r1 == pytest.approx(1 / (2 * math.pi * 1000.0 * 1e-9), rel=1e-6)

    @pytest.mark.parametrize("fc,q,c1,c2", [
        (0.0, 0.707, 2.2e-9, 1e-9),
        (-100.0, 0.707, 2.2e-9, 1e-9),
        (1000.0, 0.0, 2.2e-9, 1e-9),
        (1000.0, math.nan, 2.2e-9, 1e-9),
        (1000.0, 0.707, 0.0, 1e-9),
        (1000.0, 0.707, 2.2e-9, -1e-9),
        (math.inf, 0.707, 2.2e-9, 1e-9),
    ])
    def test_invalid_inputs(self, fc, q, c1, c2):
        result = solve_resistors_for_capacitors(fc, q, c1, c2)
        assert isinstance(result, InvalidInputError)

    def test_degenerate_root(self):
        """A vanishing R1·R2 relative to (R1+R2)² collapses R1 to zero."""
        result = solve_resistors_for_capacitors(1000.0, 0.5, 1.0, 1e-20)
        assert isinstance(result, DegenerateSolutionError)
        assert result.kind == ErrorKind.DEGENERATE

    @pytest.mark.parametrize("fc", [1e-160, 1e300])
    def test_out_of_range_target_is_degenerate(self, fc):
        """Intermediate terms that underflow or overflow come back as a value."""
        result = solve_resistors_for_capacitors(fc, 0.707, 4.7e-9, 1e-9)
        assert isinstance(result, DegenerateSolutionError)


class TestEqualResistorHelpers:

    def test_q_from_caps(self):
        assert q_from_caps(4.7e-9, 1e-9) == pytest.approx(0.5 * math.sqrt(4.7), rel=1e-9)

    def test_q_from_caps_invalid(self):
        assert math.isnan(q_from_caps(0.0, 1e-9))

    def test_fc_from_equal_r(self):
        assert fc_from_equal_r(10_000, 10e-9, 10e-9) == pytest.approx(1591.549, rel=1e-6)

    def test_fc_from_equal_r_invalid(self):
        assert math.isnan(fc_from_equal_r(-1.0, 10e-9, 10e-9))

    def test_fc_from_equal_r_underflow(self):
        assert math.isnan(fc_from_equal_r(1e-320, 1e-12, 1e-12))

    def test_equal_r_capacitance(self):
        assert equal_r_capacitance(10_000, 1000.0) == pytest.approx(15.915e-9, rel=1e-4)
        assert math.isnan(equal_r_capacitance(-1.0, 1000.0))

    def test_equal_r_capacitance_saturates(self):
        assert equal_r_capacitance(1e-320, 1e-10) == math.inf
        assert equal_r_capacitance(1e300, 1e300) == 0.0

    def test_effective_r_end_stop(self):
        """At alpha = 0 the pot contributes its end-stop resistance."""
        assert effective_r(0.0, 50_000) == pytest.approx(20.0)

    def test_effective_r_series_resistors(self):
        assert effective_r(0.5, 50_000, 100.0, 100.0) == pytest.approx(25_200.0)

    def test_effective_r_clamps_alpha(self):
        assert effective_r(2.0, 50_000) == pytest.approx(50_000.0)
        assert effective_r(-1.0, 50_000, eps=0.0) == pytest.approx(0.0)

    def test_effective_r_nan_alpha(self):
        assert math.isnan(effective_r(math.nan, 50_000))

    def test_sweep_is_monotonic(self):
        sweep = sweep_pot(50_000, 10e-9, 10e-9)
        assert len(sweep) == len(DEFAULT_SWEEP_ALPHAS)

        for prev, point in zip(sweep, sweep[1:]):
            assert point.r > prev.r
            assert point.fc < prev.fc

        assert sweep[0].r >= 20
        assert sweep[0].fc > 100_000

    def test_sweep_points_use_equal_r_formula(self):
        for point in sweep_pot(50_000, 10e-9, 4.7e-9):
            expected = 1 / (2 * math.pi * point.r * math.sqrt(10e-9 * 4.7e-9))
            assert point.fc == pytest.approx(expected, rel=1e-9)


class TestLowpassResponse:

    def setup_method(self):
        self.c1, self.c2 = 6.8e-9, 3.3e-9
        self.pair = solve_resistors_for_capacitors(1000.0, 0.707, self.c1, self.c2)

    def test_passband_is_unity(self):
        mag, phase = lowpass_response(self.pair.r1, self.pair.r2, self.c1, self.c2, np.array([1.0]))
        assert mag[0] == pytest.approx(0.0, abs=0.01)
        assert phase[0] == pytest.approx(0.0, abs=1.0)

    def test_magnitude_at_f0_equals_q(self):
        """For a 2nd-order low-pass |H(jω0)| = Q and the phase is -90°."""
        mag, phase = lowpass_response(self.pair.r1, self.pair.r2, self.c1, self.c2, np.array([1000.0]))
        assert mag[0] == pytest.approx(20 * math.log10(0.707), abs=0.01)
        assert phase[0] == pytest.approx(-90.0, abs=0.01)

    def test_rolloff_40db_per_decade(self):
        mag, _ = lowpass_response(self.pair.r1, self.pair.r2, self.c1, self.c2, np.array([10_000.0, 100_000.0]))
        assert mag[0] - mag[1] == pytest.approx(40.0, abs=0.5)

    def test_generate_frequencies(self):
        freqs = generate_frequencies(1000.0, decade_span=4, num_points=101)
        assert len(freqs) == 101
        assert freqs[0] == pytest.approx(10.0)
        assert freqs[50] == pytest.approx(1000.0)
        assert freqs[-1] == pytest.approx(100_000.0)

    def test_generate_frequencies_invalid(self):
        with pytest.raises(ValueError):
            generate_frequencies(0.0)
