"""
Unity-gain Sallen-Key low-pass design equations.

    f0 = 1 / (2π·√(R1·R2·C1·C2))
    Q  = √(R1·R2·C1·C2) / (C2·(R1 + R2))

C1 is the feedback capacitor, C2 the capacitor to ground. At unity gain
Q > 0.5 is only reachable when C1 >= 4·Q²·C2.

The equal-resistor variants (R1 = R2 = R, swept by a dual-gang pot)
reduce to f0 = 1/(2π·R·√(C1·C2)) and Q = 0.5·√(C1/C2).

References:
- TI SLOA024B, "Analysis of the Sallen-Key Architecture"
- Horowitz & Hill, "The Art of Electronics" (3rd ed.), §6.3
"""

import math
from dataclasses import dataclass
from typing import List, Sequence, Tuple, Union

import numpy as np

from engine.config import DEFAULT_CONFIG, SolverConfig
from engine.errors import (
    DegenerateSolutionError,
    ImaginaryRootError,
    InvalidInputError,
    SolverError,
)

DEFAULT_SWEEP_ALPHAS = (0.0, 0.25, 0.5, 0.75, 1.0)


@dataclass(frozen=True)
class ResistorPair:
    r1: float
    r2: float


@dataclass(frozen=True)
class SweepPoint:
    """One potentiometer position: wiper fraction, effective R, cutoff."""
    alpha: float
    r: float
    fc: float


def _positive(*values: float) -> bool:
    return all(math.isfinite(v) and v > 0 for v in values)


# --- Forward equations ---

def natural_frequency(r1: float, r2: float, c1: float, c2: float) -> float:
    """Natural frequency f0 (Hz). NaN when the RC product is not positive."""
    product = r1 * r2 * c1 * c2
    if not math.isfinite(product) or product <= 0:
        return math.nan
    return 1.0 / (2 * math.pi * math.sqrt(product))


def quality_factor(r1: float, r2: float, c1: float, c2: float) -> float:
    """Quality factor Q. NaN when either term is not positive."""
    product = r1 * r2 * c1 * c2
    if not math.isfinite(product) or product <= 0:
        return math.nan
    sqrt_term = math.sqrt(product)
    denominator = c2 * (r1 + r2)
    if not math.isfinite(denominator) or denominator <= 0:
        return math.nan
    return sqrt_term / denominator


# --- Inverse: capacitors → resistors ---

def solve_resistors_for_capacitors(
    fc: float,
    q: float,
    c1: float,
    c2: float,
    config: SolverConfig = DEFAULT_CONFIG,
) -> Union[ResistorPair, SolverError]:
    """
    Solve the resistor pair that realizes (fc, Q) with a chosen capacitor pair.

    From ω0 = 2π·fc:
        R1·R2 = 1 / (ω0²·C1·C2)
        R1 + R2 = 1 / (ω0·Q·C2)
    so R1, R2 are the roots of x² − sum·x + product = 0.

    Args:
        fc: Target cutoff frequency (Hz)
        q: Target quality factor
        c1: Feedback capacitor (F)
        c2: Capacitor to ground (F)
        config: Supplies the discriminant tolerance

    Returns:
        ResistorPair with r1 <= r2, or the SolverError describing why the
        pair cannot realize the target.
    """
    if not _positive(fc):
        return InvalidInputError('Cutoff frequency must be greater than zero.')
    if not _positive(q):
        return InvalidInputError('Quality factor must be greater than zero.')
    if not _positive(c1, c2):
        return InvalidInputError('Capacitance values must be positive.')

    required_minimum = 4 * q * q * c2
    if c1 < required_minimum * (1 - 1e-12):
        return ImaginaryRootError(
            'Selected capacitors cannot realize the requested Q for unity-gain '
            'Sallen-Key (needs C1 >= 4·Q²·C2).'
        )

    omega0 = 2 * math.pi * fc
    product_denominator = omega0 * omega0 * c1 * c2
    total_denominator = omega0 * q * c2
    if not _positive(product_denominator, total_denominator):
        return DegenerateSolutionError(
            'Target and capacitor values are outside the representable range.'
        )
    product = 1.0 / product_denominator
    total = 1.0 / total_denominator
    if not _positive(product, total, total * total):
        return DegenerateSolutionError(
            'Target and capacitor values are outside the representable range.'
        )

    # Tolerance is relative to sum² so rounding at the Q boundary is clamped, not rejected
    discriminant = total * total - 4 * product
    if discriminant < -config.discriminant_tolerance * total * total:
        return ImaginaryRootError(
            'Selected capacitors produce imaginary resistors for the requested cutoff.'
        )

    sqrt_term = math.sqrt(max(0.0, discriminant))
    r1 = (total - sqrt_term) / 2
    r2 = (total + sqrt_term) / 2

    if not _positive(r1, r2):
        return DegenerateSolutionError(
            'Unable to compute positive resistor values for the provided parameters.'
        )

    if r1 > r2:
        r1, r2 = r2, r1
    return ResistorPair(r1=r1, r2=r2)


# --- Equal-resistor helpers ---

def q_from_caps(c1: float, c2: float) -> float:
    """Q of the equal-resistor stage: 0.5·√(C1/C2)."""
    if c1 <= 0 or c2 <= 0:
        return math.nan
    return 0.5 * math.sqrt(c1 / c2)


def fc_from_equal_r(r: float, c1: float, c2: float) -> float:
    """Cutoff of the equal-resistor stage: 1/(2π·R·√(C1·C2))."""
    if r <= 0 or c1 <= 0 or c2 <= 0:
        return math.nan
    denominator = 2 * math.pi * r * math.sqrt(c1 * c2)
    if not _positive(denominator):
        return math.nan
    return 1.0 / denominator


def equal_r_capacitance(r: float, fc: float) -> float:
    """
    Geometric-mean capacitance √(C1·C2) that puts an equal-resistor stage at fc.

    Saturates to 0 or inf when the result leaves the float range; NaN for
    non-positive inputs.
    """
    if not _positive(r, fc):
        return math.nan
    denominator = 2 * math.pi * r * fc
    if denominator <= 0:
        return math.inf
    return 1.0 / denominator


def effective_r(
    alpha: float,
    r_pot_max: float,
    r_series_top: float = 0.0,
    r_series_bottom: float = 0.0,
    eps: float = DEFAULT_CONFIG.pot_epsilon_ohms,
) -> float:
    """
    Resistance seen by one gang of the pot at wiper position alpha.

    alpha is clamped to [0, 1]; the pot contribution never drops below eps
    (wiper end-stop resistance). Negative inputs are treated as zero.
    """
    if not math.isfinite(alpha):
        return math.nan
    clamped_alpha = min(max(alpha, 0.0), 1.0)
    pot = max(clamped_alpha * max(r_pot_max, 0.0), max(eps, 0.0))
    return max(r_series_top, 0.0) + pot + max(r_series_bottom, 0.0)


def sweep_pot(
    r_pot_max: float,
    c1: float,
    c2: float,
    r_series_top: float = 0.0,
    r_series_bottom: float = 0.0,
    eps: float = DEFAULT_CONFIG.pot_epsilon_ohms,
    alphas: Sequence[float] = DEFAULT_SWEEP_ALPHAS,
) -> List[SweepPoint]:
    """Cutoff frequency at each pot position (0%, 25%, 50%, 75%, 100%)."""
    points = []
    for alpha in alphas:
        r = effective_r(alpha, r_pot_max, r_series_top, r_series_bottom, eps)
        points.append(SweepPoint(alpha=min(max(alpha, 0.0), 1.0), r=r, fc=fc_from_equal_r(r, c1, c2)))
    return points


# --- Frequency response ---

def generate_frequencies(
    fc: float,
    decade_span: float = 4.0,
    num_points: int = 100,
) -> np.ndarray:
    """Log-spaced frequencies centred on fc, spanning decade_span decades."""
    if not _positive(fc):
        raise ValueError(f"fc must be positive, got {fc}")
    half = max(decade_span, 0.0) / 2
    return np.logspace(np.log10(fc) - half, np.log10(fc) + half, max(int(num_points), 1))


def lowpass_response(
    r1: float,
    r2: float,
    c1: float,
    c2: float,
    frequencies: np.ndarray,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Evaluate the unity-gain low-pass transfer function.

        H(s) = 1 / (s²·R1R2C1C2 + s·C2(R1 + R2) + 1)

    Returns:
        (magnitude_db, phase_deg) arrays matching frequencies.
    """
    s = 1j * 2 * np.pi * np.asarray(frequencies, dtype=float)
    H = 1.0 / (s ** 2 * r1 * r2 * c1 * c2 + s * c2 * (r1 + r2) + 1.0)

    magnitude_db = 20 * np.log10(np.maximum(np.abs(H), 1e-12))
    phase_deg = np.degrees(np.angle(H))
    return magnitude_db, phase_deg
