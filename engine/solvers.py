"""
Preferred-value search strategies for the unity-gain Sallen-Key low-pass.

Three variants share one skeleton: enumerate capacitor pairs from a
preferred-value window, evaluate each pair, keep the comparator-minimal
feasible candidate.

- solve_component_pair: fc/Q design. Every (C1, C2) in the window, with the
  resistors solved exactly from the quadratic.
- solve_capacitors_for_target: equal resistors set by a pot at 50%.
- pick_caps_for_target: dual-gang pot. Searches the decade nearest the
  seed (or the target's geometric-mean capacitance) first and widens one
  decade per pass until a pair lands within tolerance.

Failures are returned as SolverError values, not raised.
"""

import logging
import math
from dataclasses import dataclass
from typing import Iterator, List, Optional, Sequence, Tuple, Union

from engine import advisories
from engine.candidates import (
    Candidate,
    DesignTarget,
    evaluate_dual_gang,
    evaluate_equal_resistor,
    evaluate_fixed_window,
)
from engine.components import (
    generate_preferred_series,
    series_mantissas,
    values_by_decade,
)
from engine.config import DEFAULT_CONFIG, SolverConfig
from engine.errors import (
    InvalidInputError,
    SolutionNotFoundError,
    SolverError,
)
from engine.ranking import (
    DUAL_GANG_ORDER,
    EQUAL_RESISTOR_ORDER,
    FIXED_WINDOW_ORDER,
    ComparatorConfig,
    compare_candidates,
    select_best,
)
from engine.sallen_key import SweepPoint, effective_r, equal_r_capacitance, sweep_pot

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SolverResult:
    """Winning component values and how closely they realize the target."""
    variant: str
    c1: float
    c2: float
    r1: float
    r2: float
    fc: float
    q: float
    deviation: float        # signed relative fc error
    rel_err: float
    within_tolerance: bool
    advisories: Tuple[str, ...] = ()
    sweep: Tuple[SweepPoint, ...] = ()


def _is_positive(value: Optional[float]) -> bool:
    return value is not None and math.isfinite(value) and value > 0


def _comparator(order: ComparatorConfig, config: SolverConfig) -> ComparatorConfig:
    return order.with_epsilon(config.comparison_tolerance)


def _build_result(
    variant: str,
    best: Candidate,
    target_fc: float,
    tolerance: float,
    notes: Sequence[Optional[str]] = (),
    sweep: Sequence[SweepPoint] = (),
) -> SolverResult:
    within = best.rel_err <= tolerance
    return SolverResult(
        variant=variant,
        c1=best.c1,
        c2=best.c2,
        r1=best.r1,
        r2=best.r2,
        fc=best.fc,
        q=best.q,
        deviation=(best.fc - target_fc) / target_fc,
        rel_err=best.rel_err,
        within_tolerance=within,
        advisories=tuple(advisories.collect(*notes)),
        sweep=tuple(sweep),
    )


# --- Fixed-window fc/Q search ---

def _validate_target(target: DesignTarget) -> Optional[SolverError]:
    if not _is_positive(target.fc):
        return InvalidInputError('Cutoff frequency must be greater than zero.')
    if target.q is not None and not _is_positive(target.q):
        return InvalidInputError('Quality factor must be greater than zero.')
    if target.seed is not None and not _is_positive(target.seed):
        return InvalidInputError('Capacitor seed must be positive when provided.')
    if target.ratio is not None and not _is_positive(target.ratio):
        return InvalidInputError('Capacitor ratio must be positive when provided.')
    return None


def _ratio_matches(c1: float, c2: float, ratio: Optional[float], tolerance: float) -> bool:
    if ratio is None:
        return True
    return abs(c1 / c2 - ratio) / ratio <= tolerance


def solve_component_pair(
    target: DesignTarget,
    config: SolverConfig = DEFAULT_CONFIG,
) -> Union[SolverResult, SolverError]:
    """
    Pick the best preferred-value capacitor pair for a target fc and Q.

    Every (C1, C2) pair in the configured capacitor window is tried; the
    resistors are solved exactly, so the winner is chosen on resistor
    spread, then largest resistor, then capacitor ratio, then closeness
    to the seed.

    Args:
        target: fc (Hz), optional Q (defaults to 1/√2), seed (F) and
            C1/C2 ratio restriction
        config: Capacitor window, resistor bounds and tolerances

    Returns:
        SolverResult, or InvalidInputError / SolutionNotFoundError.
    """
    problem = _validate_target(target)
    if problem is not None:
        return problem

    capacitors = generate_preferred_series(
        config.series, config.min_capacitance, config.max_capacitance, config.series_tolerance,
    )

    order = _comparator(FIXED_WINDOW_ORDER, config)

    def candidates() -> Iterator[Optional[Candidate]]:
        for c1 in capacitors:
            for c2 in capacitors:
                if not _ratio_matches(c1, c2, target.ratio, config.ratio_tolerance):
                    continue
                yield evaluate_fixed_window(c1, c2, target, config)

    best = select_best(candidates(), order)
    logger.debug(
        "fixed-window search over %d capacitors for fc=%g Q=%g: %s",
        len(capacitors), target.fc, target.effective_q, best,
    )

    if best is None:
        return SolutionNotFoundError('No feasible capacitor pair found for the requested cutoff and Q.')

    return _build_result(
        'fixed_window',
        best,
        target.fc,
        config.relative_tolerance,
        notes=(
            advisories.q_range_advisory(target.effective_q),
            advisories.seed_advisory(target.seed),
        ),
    )


def solve_sallen_key_lp(
    fc: float,
    q: Optional[float] = None,
    seed: Optional[float] = None,
    ratio: Optional[float] = None,
    config: SolverConfig = DEFAULT_CONFIG,
) -> Union[SolverResult, SolverError]:
    """Keyword convenience wrapper around solve_component_pair."""
    return solve_component_pair(DesignTarget(fc=fc, q=q, seed=seed, ratio=ratio), config)


def build_ratio_options(series: str = 'E6') -> List[Tuple[float, str]]:
    """C1:C2 ratios offered for the fixed-window search, one per mantissa."""
    return [(mantissa, f"{mantissa:g}:1") for mantissa in series_mantissas(series)]


# --- Equal-resistor search ---

def solve_capacitors_for_target(
    target_fc: float,
    r_pot_max: float,
    seed: Optional[float] = None,
    r_series_top: float = 0.0,
    r_series_bottom: float = 0.0,
    eps: Optional[float] = None,
    config: SolverConfig = DEFAULT_CONFIG,
) -> Union[SolverResult, SolverError]:
    """
    Pick C1, C2 so an equal-resistor stage hits target_fc with the pot at 50%.

    Both resistors equal r_series_top + 0.5·r_pot_max + r_series_bottom.
    Every pair of the capacitor window is tried independently as C1 and C2.

    Returns:
        SolverResult (r1 == r2 == effective resistance), or a SolverError.
    """
    if not _is_positive(target_fc):
        return InvalidInputError('Target frequency must be greater than zero.')
    if not _is_positive(r_pot_max):
        return InvalidInputError('Potentiometer maximum must be greater than zero.')
    if seed is not None and not _is_positive(seed):
        return InvalidInputError('Capacitor seed must be positive when provided.')
    if r_series_top < 0 or r_series_bottom < 0:
        return InvalidInputError('Series resistors must be non-negative.')

    end_stop = config.pot_epsilon_ohms if eps is None else eps
    r_effective = effective_r(0.5, r_pot_max, r_series_top, r_series_bottom, end_stop)
    if not _is_positive(r_effective):
        return InvalidInputError('Unable to determine effective resistance at 50%.')

    capacitors = generate_preferred_series(
        config.series, config.min_capacitance, config.max_capacitance, config.series_tolerance,
    )

    order = _comparator(EQUAL_RESISTOR_ORDER, config)
    best = select_best(
        (
            evaluate_equal_resistor(c1, c2, target_fc, r_effective, seed)
            for c1 in capacitors
            for c2 in capacitors
        ),
        order,
    )
    logger.debug("equal-resistor search at R=%g for fc=%g: %s", r_effective, target_fc, best)

    if best is None:
        return SolutionNotFoundError('No capacitor combination from the series satisfies the request.')

    sweep = sweep_pot(r_pot_max, best.c1, best.c2, r_series_top, r_series_bottom, end_stop)
    return _build_result(
        'equal_resistor',
        best,
        target_fc,
        config.relative_tolerance,
        notes=(
            advisories.seed_advisory(seed),
            advisories.end_stop_advisory(min(point.r for point in sweep)),
        ),
        sweep=sweep,
    )


# --- Dual-gang expanding-decade search ---

def _decade_order(decades: Sequence[int], anchor: float) -> List[int]:
    """
    Decades sorted by distance from the anchor's decade, lower first on ties.

    An anchor that saturated to inf starts from the top of the window; one
    that underflowed to zero (or is NaN) starts from the bottom.
    """
    if math.isfinite(anchor) and anchor > 0:
        anchor_decade = math.floor(math.log10(anchor))
    elif anchor == math.inf:
        anchor_decade = max(decades)
    else:
        anchor_decade = min(decades)
    return sorted(decades, key=lambda decade: (abs(decade - anchor_decade), decade))


def pick_caps_for_target(
    f_target: float,
    r_pot_max: float,
    seed: Optional[float] = None,
    tolerance: Optional[float] = None,
    config: SolverConfig = DEFAULT_CONFIG,
) -> Union[SolverResult, SolverError]:
    """
    Pick C1, C2 for a dual-gang pot stage so fc at the 50% position hits f_target.

    The search starts with the single decade nearest the seed (or the
    geometric-mean capacitance 1/(2π·R50·f_target) without a seed) and
    adds the next-nearest decade on each pass. It stops at the first pass
    that produces a candidate within the relative tolerance. When no pass
    does, the comparator-best candidate over the whole window is returned
    with within_tolerance=False.

    Args:
        f_target: Target cutoff at the 50% pot position (Hz)
        r_pot_max: Full-scale resistance of each gang (Ohms)
        seed: Optional capacitor (F) whose decade is searched first
        tolerance: Relative fc error accepted (default 2%)
        config: Capacitor window and comparator epsilon

    Returns:
        SolverResult, or InvalidInputError / SolutionNotFoundError.
    """
    if not _is_positive(f_target):
        return InvalidInputError('Target frequency must be greater than zero.')
    if not _is_positive(r_pot_max):
        return InvalidInputError('Potentiometer maximum must be greater than zero.')
    if seed is not None and not _is_positive(seed):
        return InvalidInputError('Capacitor seed must be positive when provided.')

    tolerance = config.relative_tolerance if tolerance is None else tolerance
    if not (math.isfinite(tolerance) and tolerance >= 0):
        return InvalidInputError('Tolerance must be a non-negative number.')

    r50 = 0.5 * r_pot_max
    if not _is_positive(r50):
        return InvalidInputError('Potentiometer maximum is too small to evaluate.')

    grouped = values_by_decade(
        config.series, config.pot_min_capacitance, config.pot_max_capacitance, config.series_tolerance,
    )
    if not grouped:
        return SolutionNotFoundError('The capacitor window holds no series values.')

    anchor = seed if seed is not None else equal_r_capacitance(r50, f_target)
    decades = _decade_order(list(grouped), anchor)
    order = _comparator(DUAL_GANG_ORDER, config)

    best_overall: Optional[Candidate] = None
    best_within: Optional[Candidate] = None
    searched: List[int] = []

    for decade in decades:
        searched.append(decade)
        # Only pairs touching the newly added decade are new this pass
        for decade_c1 in searched:
            for decade_c2 in searched:
                if decade not in (decade_c1, decade_c2):
                    continue
                for c1 in grouped[decade_c1]:
                    for c2 in grouped[decade_c2]:
                        candidate = evaluate_dual_gang(c1, c2, f_target, r50)
                        if candidate is None:
                            continue
                        if best_overall is None or compare_candidates(candidate, best_overall, order) < 0:
                            best_overall = candidate
                        if candidate.rel_err <= tolerance and (
                            best_within is None or compare_candidates(candidate, best_within, order) < 0
                        ):
                            best_within = candidate

        logger.debug(
            "dual-gang pass %d (decades %s): best_within=%s",
            len(searched), searched, best_within,
        )
        if best_within is not None:
            break

    chosen = best_within if best_within is not None else best_overall
    if chosen is None:
        return SolutionNotFoundError('No capacitor pair produced a finite cutoff frequency.')

    within = chosen.rel_err <= tolerance
    if not within:
        logger.info(
            "dual-gang search for fc=%g with Rpot=%g fell back to closest pair (rel_err=%.3g)",
            f_target, r_pot_max, chosen.rel_err,
        )

    return _build_result(
        'dual_gang',
        chosen,
        f_target,
        tolerance,
        notes=(
            advisories.capacitance_window_advisory(f_target, r50, config),
            advisories.seed_advisory(seed),
            advisories.tolerance_advisory(within, tolerance),
        ),
        sweep=sweep_pot(r_pot_max, chosen.c1, chosen.c2, eps=config.pot_epsilon_ohms),
    )
