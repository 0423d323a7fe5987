"""
Preferred-number (E-series) component values and engineering notation.

Generates the sorted set of standard values inside a magnitude window,
finds the neighbouring standard values around an arbitrary target, and
snaps computed values onto a series.
"""

import math
from typing import Dict, List, Optional, Sequence, Tuple, Union

from engine.errors import InvalidRangeError

# IEC 60063 mantissas per decade (1.0 to <10.0)

E6_BASE = [1.0, 1.5, 2.2, 3.3, 4.7, 6.8]

E12_BASE = [1.0, 1.2, 1.5, 1.8, 2.2, 2.7, 3.3, 3.9, 4.7, 5.6, 6.8, 8.2]

E24_BASE = [
    1.0, 1.1, 1.2, 1.3, 1.5, 1.6, 1.8, 2.0, 2.2, 2.4, 2.7, 3.0,
    3.3, 3.6, 3.9, 4.3, 4.7, 5.1, 5.6, 6.2, 6.8, 7.5, 8.2, 9.1,
]

E_SERIES = {
    'E6': E6_BASE,
    'E12': E12_BASE,
    'E24': E24_BASE,
}

# Significant digits kept when deduplicating generated values
SIGNIFICANT_DIGITS = 12

DEFAULT_RELATIVE_EPSILON = 1e-9

# Default capacitor window searched by the Sallen-Key solvers (Farads)
MIN_CAPACITANCE_F = 100e-12
MAX_CAPACITANCE_F = 10e-6

# SI prefix table
_SI_PREFIXES = [
    (1e-15, 'f'),
    (1e-12, 'p'),
    (1e-9,  'n'),
    (1e-6,  'µ'),
    (1e-3,  'm'),
    (1e0,   ''),
    (1e3,   'k'),
    (1e6,   'M'),
    (1e9,   'G'),
]

SeriesSpec = Union[str, Sequence[float]]


def series_mantissas(series: SeriesSpec) -> List[float]:
    """Resolve a series name ('E6', 'E12', 'E24') or explicit mantissa list."""
    if isinstance(series, str):
        key = series.strip().upper()
        if key not in E_SERIES:
            raise ValueError(f"Unknown series '{series}'. Must be one of: {list(E_SERIES.keys())}")
        return list(E_SERIES[key])

    mantissas = [float(m) for m in series]
    if not mantissas:
        raise ValueError("Mantissa list must not be empty")
    if any(not math.isfinite(m) or m <= 0 for m in mantissas):
        raise ValueError("Mantissas must be finite and positive")
    return mantissas


def _round_significant(value: float, digits: int = SIGNIFICANT_DIGITS) -> float:
    return float(f"{value:.{digits}g}")


def _check_window(min_value: float, max_value: float) -> None:
    if not (math.isfinite(min_value) and math.isfinite(max_value)):
        raise InvalidRangeError(f"Series bounds must be finite, got [{min_value}, {max_value}]")
    if min_value <= 0:
        raise InvalidRangeError(f"Series minimum must be positive, got {min_value}")
    if max_value < min_value:
        raise InvalidRangeError(
            f"Series maximum {max_value} is below the minimum {min_value}"
        )


def _iter_window(
    mantissas: Sequence[float],
    min_value: float,
    max_value: float,
    epsilon: float,
):
    """Yield (decade exponent, rounded value) for every series value in the window."""
    # One decade of margin on each side so boundary mantissas are never missed
    first = math.floor(math.log10(min_value)) - 1
    last = min(math.floor(math.log10(max_value)) + 1, 308)
    lower = min_value * (1.0 - epsilon)
    upper = max_value * (1.0 + epsilon)

    for exponent in range(first, last + 1):
        decade = 10.0 ** exponent
        for mantissa in mantissas:
            candidate = mantissa * decade
            if candidate < lower or candidate > upper:
                continue
            yield exponent, _round_significant(candidate)


def generate_preferred_series(
    series: SeriesSpec,
    min_value: float,
    max_value: float,
    epsilon: float = DEFAULT_RELATIVE_EPSILON,
) -> List[float]:
    """
    Generate every preferred value of a series inside [min_value, max_value].

    Args:
        series: Series name ('E6', 'E12', 'E24') or a mantissa sequence
        min_value: Lower bound of the window (must be > 0)
        max_value: Upper bound of the window (must be >= min_value)
        epsilon: Relative slack applied to both bounds

    Returns:
        Distinct values (rounded to 12 significant digits), ascending.

    Raises:
        InvalidRangeError: when the window is malformed.
    """
    _check_window(min_value, max_value)
    mantissas = series_mantissas(series)

    values = {value for _, value in _iter_window(mantissas, min_value, max_value, epsilon)}
    return sorted(values)


def generate_e6_capacitors(
    min_value: float = MIN_CAPACITANCE_F,
    max_value: float = MAX_CAPACITANCE_F,
) -> List[float]:
    """E6 capacitor values (Farads) in the default 100pF–10µF window."""
    return generate_preferred_series('E6', min_value, max_value)


def values_by_decade(
    series: SeriesSpec,
    min_value: float,
    max_value: float,
    epsilon: float = DEFAULT_RELATIVE_EPSILON,
) -> Dict[int, List[float]]:
    """
    Group the values of a series window by decade exponent.

    Decades with no value inside the window are omitted.
    """
    _check_window(min_value, max_value)
    mantissas = series_mantissas(series)

    grouped: Dict[int, List[float]] = {}
    seen = set()
    for exponent, value in _iter_window(mantissas, min_value, max_value, epsilon):
        if value in seen:
            continue
        seen.add(value)
        grouped.setdefault(exponent, []).append(value)

    return {exponent: sorted(grouped[exponent]) for exponent in sorted(grouped)}


def nearest_neighbors(
    target: float,
    series: SeriesSpec = 'E24',
    tolerance: float = 1e-9,
) -> Tuple[Optional[float], Optional[float]]:
    """
    Find the series values immediately below and above a target.

    A target that is itself a series value returns its two neighbours.
    Crosses decade boundaries (e.g. 1.0k in E24 → 910 and 1.1k).

    Returns:
        (below, above), or (None, None) for a non-positive/non-finite target.
    """
    if not math.isfinite(target) or target <= 0:
        return None, None

    mantissas = series_mantissas(series)
    exponent = math.floor(math.log10(target))

    candidates = sorted(
        _round_significant(m * 10.0 ** e)
        for e in range(exponent - 1, exponent + 2)
        for m in mantissas
    )

    below = None
    above = None
    for value in candidates:
        if abs(value - target) <= tolerance * target:
            continue
        if value < target:
            below = value
        elif above is None:
            above = value

    return below, above


def snap_to_e_series(value: float, series: str = 'E24') -> Tuple[float, float]:
    """
    Snap a value to the nearest standard E-series value.

    Distance is measured on a log scale, so 1.2 and 1.5 are equally far
    from their geometric mean.

    Args:
        value: The target value (resistors in Ohms, capacitors in F)
        series: Which E-series to use ('E6', 'E12', 'E24')

    Returns:
        Tuple of (snapped_value, error_percentage)
        error_percentage is signed: positive means snapped value is higher.
    """
    if value <= 0:
        raise ValueError(f"Value must be positive, got {value}")

    mantissas = series_mantissas(series)
    exponent = math.floor(math.log10(value))

    best = None
    best_distance = math.inf
    for e in (exponent - 1, exponent, exponent + 1):
        for mantissa in mantissas:
            candidate = _round_significant(mantissa * 10.0 ** e)
            distance = abs(math.log10(candidate / value))
            if distance < best_distance:
                best_distance = distance
                best = candidate

    error_pct = ((best - value) / value) * 100
    return best, round(error_pct, 4)


def snap_resistor(value_ohm: float, series: str = 'E24') -> Tuple[float, float]:
    """Snap a resistor value (in Ohms) to nearest E-series standard value."""
    return snap_to_e_series(value_ohm, series)


def engineering_notation(value: float, unit: str = '', precision: int = 3) -> str:
    """
    Format a value in engineering notation with SI prefix.

    Examples:
        engineering_notation(4700, 'Ω')   → '4.7kΩ'
        engineering_notation(220e-9, 'F') → '220nF'
        engineering_notation(1e-12, 'F')  → '1pF'
    """
    if value == 0:
        return f"0{unit}"
    if not math.isfinite(value):
        return f"--{unit}"

    abs_value = abs(value)
    sign = '-' if value < 0 else ''

    for scale, prefix in reversed(_SI_PREFIXES):
        # Tolerate 1e-9 style values that land a hair under their prefix
        if abs_value >= scale * (1 - 1e-12):
            scaled = _round_significant(abs_value / scale, precision)
            if scaled == int(scaled):
                return f"{sign}{int(scaled)}{prefix}{unit}"
            return f"{sign}{scaled:.{precision}g}{prefix}{unit}"

    return f"{value:.{precision}g}{unit}"
