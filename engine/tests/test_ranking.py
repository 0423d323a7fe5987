"""
Tests for the deterministic candidate comparator.

Validates:
1. Keys are consulted in priority order
2. Differences inside the tolerance fall through to the next key
3. Transitivity and stable min-reduction
"""

import itertools
from types import SimpleNamespace

import pytest
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(__file__))))

from engine.ranking import (
    DUAL_GANG_ORDER,
    EQUAL_RESISTOR_ORDER,
    FIXED_WINDOW_ORDER,
    ComparatorConfig,
    RankingKey,
    compare_candidates,
    select_best,
    sort_candidates,
)


def make(**metrics):
    return SimpleNamespace(metrics=metrics)


def fixed(spread, max_r, cap_ratio=2.2, seed_bias=0.0, c2=1e-9, c1=2.2e-9, accuracy=0.0):
    return make(
        accuracy=accuracy, spread=spread, max_r=max_r, cap_ratio=cap_ratio,
        seed_bias=seed_bias, c2=c2, c1=c1,
    )


class TestCompareCandidates:

    def test_tighter_spread_beats_smaller_resistors(self):
        """Spread outranks absolute resistor size in the fixed-window order."""
        better = fixed(spread=2000 / 1500, max_r=2000, cap_ratio=4.7)
        worse = fixed(spread=3.0, max_r=1000, cap_ratio=3.3)

        assert compare_candidates(better, worse, FIXED_WINDOW_ORDER) < 0
        assert compare_candidates(worse, better, FIXED_WINDOW_ORDER) > 0

    def test_accuracy_outranks_everything(self):
        accurate = fixed(spread=5.0, max_r=9000, accuracy=0.0)
        sloppy = fixed(spread=1.1, max_r=1000, accuracy=0.01)
        assert compare_candidates(accurate, sloppy, FIXED_WINDOW_ORDER) == -1

    def test_noise_inside_tolerance_falls_through(self):
        """A 1e-15 accuracy difference is float noise, not a ranking signal."""
        a = fixed(spread=1.5, max_r=1000, accuracy=2e-15)
        b = fixed(spread=1.6, max_r=1000, accuracy=0.0)
        assert compare_candidates(a, b, FIXED_WINDOW_ORDER) == -1

    def test_full_tie_returns_zero(self):
        a = fixed(spread=1.5, max_r=1000)
        b = fixed(spread=1.5, max_r=1000)
        assert compare_candidates(a, b, FIXED_WINDOW_ORDER) == 0

    def test_capacitance_keys_use_scaled_tolerance(self):
        """Raw capacitances differ by far less than 1e-9 yet still decide."""
        a = fixed(spread=1.5, max_r=1000, c2=1.0e-9)
        b = fixed(spread=1.5, max_r=1000, c2=1.5e-9)
        assert compare_candidates(a, b, FIXED_WINDOW_ORDER) == -1
        assert compare_candidates(b, a, FIXED_WINDOW_ORDER) == 1

    def test_seed_bias_breaks_equal_accuracy(self):
        near = make(accuracy=0.01, seed_bias=0.1, ratio_delta=1.0, c2=150e-9, c1=1.5e-9)
        far = make(accuracy=0.01, seed_bias=1.1, ratio_delta=0.0, c2=15e-9, c1=15e-9)
        assert compare_candidates(near, far, EQUAL_RESISTOR_ORDER) == -1

    def test_q_penalty_second_in_dual_gang_order(self):
        butterworth = make(accuracy=0.001, q_penalty=0.0, total_capacitance=2e-8, spread=2.0, c2=1e-8, c1=1e-8)
        flat = make(accuracy=0.001, q_penalty=0.2, total_capacitance=1e-8, spread=1.0, c2=5e-9, c1=5e-9)
        assert compare_candidates(butterworth, flat, DUAL_GANG_ORDER) == -1

    def test_custom_epsilon(self):
        config = ComparatorConfig(keys=(RankingKey('x'),), epsilon=0.1)
        assert compare_candidates(make(x=1.0), make(x=1.05), config) == 0
        assert compare_candidates(make(x=1.0), make(x=1.2), config) == -1

    def test_transitive(self):
        """a ≺ b and b ≺ c imply a ≺ c."""
        pool = [
            fixed(spread=s, max_r=r, seed_bias=b)
            for s, r, b in itertools.product((1.2, 1.2 + 1e-12, 1.5), (800.0, 1200.0), (0.0, 0.3))
        ]
        for a, b, c in itertools.permutations(pool, 3):
            if (compare_candidates(a, b, FIXED_WINDOW_ORDER) < 0
                    and compare_candidates(b, c, FIXED_WINDOW_ORDER) < 0):
                assert compare_candidates(a, c, FIXED_WINDOW_ORDER) < 0

    def test_antisymmetric(self):
        a = fixed(spread=1.2, max_r=900)
        b = fixed(spread=1.2, max_r=1100)
        assert compare_candidates(a, b, FIXED_WINDOW_ORDER) == -compare_candidates(b, a, FIXED_WINDOW_ORDER)


class TestSelectBest:

    def test_skips_none(self):
        best = select_best([None, fixed(1.5, 1000), None], FIXED_WINDOW_ORDER)
        assert best.metrics['spread'] == 1.5

    def test_empty_returns_none(self):
        assert select_best([None, None], FIXED_WINDOW_ORDER) is None

    def test_first_seen_wins_ties(self):
        first = fixed(1.5, 1000)
        second = fixed(1.5, 1000)
        assert select_best([first, second], FIXED_WINDOW_ORDER) is first

    def test_picks_minimum(self):
        pool = [fixed(2.0, 500), fixed(1.1, 4000), fixed(1.1, 3000), fixed(3.0, 100)]
        assert select_best(pool, FIXED_WINDOW_ORDER) is pool[2]

    def test_agrees_with_sort(self):
        pool = [fixed(2.0, 500), fixed(1.1, 4000), fixed(1.1, 3000), fixed(3.0, 100)]
        ordered = sort_candidates(pool, FIXED_WINDOW_ORDER)
        assert ordered[0] is select_best(pool, FIXED_WINDOW_ORDER)
        assert [c.metrics['max_r'] for c in ordered] == [3000, 4000, 500, 100]


class TestComparatorConfig:

    def test_names(self):
        assert FIXED_WINDOW_ORDER.names == [
            'accuracy', 'spread', 'max_r', 'cap_ratio', 'seed_bias', 'c2', 'c1',
        ]

    def test_with_epsilon_keeps_keys(self):
        widened = EQUAL_RESISTOR_ORDER.with_epsilon(1e-6)
        assert widened.keys == EQUAL_RESISTOR_ORDER.keys
        assert widened.epsilon == pytest.approx(1e-6)
