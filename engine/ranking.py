"""
Deterministic candidate ordering.

Candidates carry a tuple of smaller-is-better metrics. The comparator
walks them in a fixed priority order and lets the first metric that differs
by more than its tolerance decide. Tolerances keep float noise (1e-16
differences between pairs that are mathematically identical) from
deciding the ranking, and make the order stable under rounding.

Each solver variant ranks with its own metric order; the orders are not
interchangeable.
"""

import functools
from dataclasses import dataclass
from typing import Iterable, List, Optional, Protocol, Sequence, Tuple


class Ranked(Protocol):
    metrics: dict


@dataclass(frozen=True)
class RankingKey:
    """
    One metric of the ranking tuple.

    scale is the metric's typical magnitude; the comparison tolerance is
    epsilon × scale, so capacitances (~1e-9 F) and log errors (~1) get
    tolerances that fit them.
    """
    name: str
    scale: float = 1.0


@dataclass(frozen=True)
class ComparatorConfig:
    keys: Tuple[RankingKey, ...]
    epsilon: float = 1e-9

    def with_epsilon(self, epsilon: float) -> 'ComparatorConfig':
        return ComparatorConfig(keys=self.keys, epsilon=epsilon)

    @property
    def names(self) -> List[str]:
        return [key.name for key in self.keys]


# Fixed-window fc/Q search: accuracy is ~0 for every feasible pair since the
# resistors are solved exactly, so resistor spread does the real ranking.
FIXED_WINDOW_ORDER = ComparatorConfig(keys=(
    RankingKey('accuracy'),
    RankingKey('spread'),
    RankingKey('max_r'),
    RankingKey('cap_ratio'),
    RankingKey('seed_bias'),
    RankingKey('c2', 1e-12),
    RankingKey('c1', 1e-12),
))

# Equal-resistor search: the seed only breaks ties between equally accurate pairs
EQUAL_RESISTOR_ORDER = ComparatorConfig(keys=(
    RankingKey('accuracy'),
    RankingKey('seed_bias'),
    RankingKey('ratio_delta'),
    RankingKey('c2', 1e-12),
    RankingKey('c1', 1e-12),
))

# Dual-gang expanding search
DUAL_GANG_ORDER = ComparatorConfig(keys=(
    RankingKey('accuracy'),
    RankingKey('q_penalty'),
    RankingKey('total_capacitance', 1e-12),
    RankingKey('spread'),
    RankingKey('c2', 1e-12),
    RankingKey('c1', 1e-12),
))


def compare_candidates(a: Ranked, b: Ranked, config: ComparatorConfig) -> int:
    """
    Three-way comparison of two candidates.

    Returns:
        -1 if a ranks before b, 1 if after, 0 if every key ties.
    """
    for key in config.keys:
        left = a.metrics[key.name]
        right = b.metrics[key.name]
        tolerance = config.epsilon * key.scale
        if left < right - tolerance:
            return -1
        if left > right + tolerance:
            return 1
    return 0


def select_best(candidates: Iterable[Optional[Ranked]], config: ComparatorConfig) -> Optional[Ranked]:
    """
    Comparator-minimal candidate; None entries are skipped.

    On a full tie the earlier candidate is kept, so a fixed enumeration
    order always produces the same winner.
    """
    best = None
    for candidate in candidates:
        if candidate is None:
            continue
        if best is None or compare_candidates(candidate, best, config) < 0:
            best = candidate
    return best


def sort_candidates(candidates: Sequence[Ranked], config: ComparatorConfig) -> List[Ranked]:
    """Stable ascending sort under the comparator."""
    return sorted(
        candidates,
        key=functools.cmp_to_key(lambda a, b: compare_candidates(a, b, config)),
    )
