"""
Candidate evaluation for the Sallen-Key component searches.

Each evaluator takes one trial capacitor pair, derives the stage's
electrical quantities, and either discards the pair (returns None) or
returns a Candidate whose metrics feed the comparator in engine.ranking.
Every metric is non-negative and smaller-is-better.
"""

import math
from dataclasses import dataclass, field
from typing import Dict, Optional

from engine.config import DEFAULT_CONFIG, DEFAULT_Q, SolverConfig
from engine.errors import is_error
from engine.sallen_key import (
    fc_from_equal_r,
    natural_frequency,
    q_from_caps,
    quality_factor,
    solve_resistors_for_capacitors,
)


@dataclass(frozen=True)
class DesignTarget:
    """
    What the search is trying to realize.

    fc: cutoff frequency (Hz)
    q: quality factor; None means Butterworth (1/√2)
    seed: capacitor already on hand (F); biases ranking, never feasibility
    ratio: exact C1/C2 ratio to restrict the search to
    """
    fc: float
    q: Optional[float] = None
    seed: Optional[float] = None
    ratio: Optional[float] = None

    @property
    def effective_q(self) -> float:
        return DEFAULT_Q if self.q is None else self.q


@dataclass(frozen=True)
class Candidate:
    c1: float
    c2: float
    r1: float
    r2: float
    fc: float
    q: float
    rel_err: float
    metrics: Dict[str, float] = field(default_factory=dict)


def _finite_positive(*values: float) -> bool:
    return all(math.isfinite(v) and v > 0 for v in values)


def seed_bias(c2: float, seed: Optional[float]) -> float:
    """Decades between C2 and the seed capacitor; 0 without a usable seed."""
    if seed is None or not math.isfinite(seed) or seed <= 0:
        return 0.0
    return abs(math.log10(c2) - math.log10(seed))


def evaluate_fixed_window(
    c1: float,
    c2: float,
    target: DesignTarget,
    config: SolverConfig = DEFAULT_CONFIG,
) -> Optional[Candidate]:
    """
    Solve the resistors for (c1, c2) and score the resulting stage.

    Discarded when the quadratic has no positive real roots or either
    resistor falls outside the configured resistor bounds.
    """
    q_target = target.effective_q
    pair = solve_resistors_for_capacitors(target.fc, q_target, c1, c2, config)
    if is_error(pair):
        return None

    r1, r2 = pair.r1, pair.r2
    if r1 < config.min_resistance or r2 < config.min_resistance:
        return None
    if r1 > config.max_resistance or r2 > config.max_resistance:
        return None

    fc = natural_frequency(r1, r2, c1, c2)
    q = quality_factor(r1, r2, c1, c2)
    if not _finite_positive(fc, q):
        return None

    metrics = {
        'accuracy': abs(math.log(fc) - math.log(target.fc)),
        'spread': max(r1, r2) / min(r1, r2),
        'max_r': max(r1, r2),
        'cap_ratio': max(c1, c2) / min(c1, c2),
        'seed_bias': seed_bias(c2, target.seed),
        'c2': c2,
        'c1': c1,
    }
    return Candidate(
        c1=c1, c2=c2, r1=r1, r2=r2, fc=fc, q=q,
        rel_err=abs(fc - target.fc) / target.fc,
        metrics=metrics,
    )


def evaluate_equal_resistor(
    c1: float,
    c2: float,
    target_fc: float,
    r_effective: float,
    seed: Optional[float] = None,
) -> Optional[Candidate]:
    """
    Score (c1, c2) for an equal-resistor stage with both resistors at r_effective.

    Accuracy is the log10 distance between the realized and target cutoff.
    """
    fc = fc_from_equal_r(r_effective, c1, c2)
    if not _finite_positive(fc, target_fc):
        return None

    cap_ratio = max(c1, c2) / min(c1, c2)
    metrics = {
        'accuracy': abs(math.log10(fc) - math.log10(target_fc)),
        'seed_bias': seed_bias(c2, seed),
        'ratio_delta': abs(math.log10(cap_ratio)),
        'c2': c2,
        'c1': c1,
    }
    return Candidate(
        c1=c1, c2=c2, r1=r_effective, r2=r_effective, fc=fc, q=q_from_caps(c1, c2),
        rel_err=abs(fc - target_fc) / target_fc,
        metrics=metrics,
    )


def evaluate_dual_gang(
    c1: float,
    c2: float,
    target_fc: float,
    r50: float,
    target_q: float = DEFAULT_Q,
) -> Optional[Candidate]:
    """
    Score (c1, c2) for a dual-gang pot stage at its 50% position (R = r50).

    Prefers accurate cutoff first, then Q close to Butterworth, then the
    smallest total capacitance, then the tightest capacitor spread.
    """
    fc = fc_from_equal_r(r50, c1, c2)
    if not _finite_positive(fc, target_fc):
        return None

    q = q_from_caps(c1, c2)
    metrics = {
        'accuracy': abs(math.log(fc) - math.log(target_fc)),
        'q_penalty': abs(q - target_q) if math.isfinite(q) else math.inf,
        'total_capacitance': c1 + c2,
        'spread': max(c1, c2) / min(c1, c2),
        'c2': c2,
        'c1': c1,
    }
    return Candidate(
        c1=c1, c2=c2, r1=r50, r2=r50, fc=fc, q=q,
        rel_err=abs(fc - target_fc) / target_fc,
        metrics=metrics,
    )
