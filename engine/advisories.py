"""
Advisory messages for inputs outside typical ranges.

These never block a solve; they are attached to the result so the caller
can show them next to the component values.
"""

import math
from typing import List, Optional

from engine.components import engineering_notation
from engine.config import DEFAULT_CONFIG, SolverConfig
from engine.sallen_key import equal_r_capacitance

# Suggested unity-gain Q range
MIN_SUGGESTED_Q = 0.3
MAX_SUGGESTED_Q = 5.0

# Pot end-stop resistance below which the sweep runs away (Ohms)
SMALL_RESISTANCE_THRESHOLD = 200.0


def q_range_advisory(q: Optional[float]) -> Optional[str]:
    if q is None or not math.isfinite(q):
        return None
    if q < MIN_SUGGESTED_Q or q > MAX_SUGGESTED_Q:
        return (
            f"Q outside suggested range ({MIN_SUGGESTED_Q} – {MAX_SUGGESTED_Q:g}). "
            "Results may require extreme component values."
        )
    return None


def seed_advisory(seed: Optional[float]) -> Optional[str]:
    if seed is None or not math.isfinite(seed) or seed <= 0:
        return None
    return f"Seed capacitor ≈ {engineering_notation(seed, 'F')} (used as a preference only)."


def capacitance_window_advisory(
    f_target: float,
    r50: float,
    config: SolverConfig = DEFAULT_CONFIG,
) -> Optional[str]:
    """Warn when the geometric-mean capacitance for the target is outside the window."""
    geometric_mean = equal_r_capacitance(r50, f_target)
    if math.isnan(geometric_mean):
        return None
    if geometric_mean < config.pot_min_capacitance:
        return (
            f"Target demands capacitors below ~{engineering_notation(config.pot_min_capacitance, 'F')}. "
            "Expect noticeable error."
        )
    if geometric_mean > config.pot_max_capacitance:
        return (
            f"Target demands capacitors above ~{engineering_notation(config.pot_max_capacitance, 'F')}. "
            "Expect noticeable error."
        )
    return None


def end_stop_advisory(min_resistance: float) -> Optional[str]:
    if not math.isfinite(min_resistance):
        return None
    if min_resistance <= SMALL_RESISTANCE_THRESHOLD:
        return (
            "End-stop may push f_c very high. "
            "Consider adding small series resistors to tame the sweep."
        )
    return None


def tolerance_advisory(within_tolerance: bool, tolerance: float) -> Optional[str]:
    if within_tolerance:
        return None
    return f"Exact {tolerance * 100:g}% match unavailable; closest option shown."


def collect(*messages: Optional[str]) -> List[str]:
    """Drop empty messages and duplicates, keeping first-seen order."""
    out: List[str] = []
    for message in messages:
        if message and message not in out:
            out.append(message)
    return out
