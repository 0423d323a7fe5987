"""
Solver configuration.

Search windows and comparison tolerances live in one immutable struct that
is passed into the generator, evaluator and comparator. DEFAULT_CONFIG holds
the values the calculators ship with.
"""

import math
import os
from dataclasses import dataclass, replace

from engine.components import series_mantissas
from engine.errors import InvalidRangeError


# Butterworth alignment, used when no Q is requested
DEFAULT_Q = 1.0 / math.sqrt(2.0)


@dataclass(frozen=True)
class SolverConfig:
    series: str = 'E6'

    # Capacitor window for the fixed-window and equal-resistor searches (F)
    min_capacitance: float = 100e-12
    max_capacitance: float = 10e-6

    # Wider window for the dual-gang expanding search (F)
    pot_min_capacitance: float = 10e-12
    pot_max_capacitance: float = 10e-6

    # Acceptable resistor values out of the quadratic solve (Ohms)
    min_resistance: float = 100.0
    max_resistance: float = 10_000_000.0

    ratio_tolerance: float = 1e-6
    discriminant_tolerance: float = 1e-9
    comparison_tolerance: float = 1e-9
    series_tolerance: float = 1e-9

    # Relative fc error accepted by the dual-gang search
    relative_tolerance: float = 0.02

    # Potentiometer end-stop floor (Ohms)
    pot_epsilon_ohms: float = 20.0

    def __post_init__(self):
        # ValueError for unknown series names
        series_mantissas(self.series)

        windows = (
            ('min_capacitance', 'max_capacitance'),
            ('pot_min_capacitance', 'pot_max_capacitance'),
            ('min_resistance', 'max_resistance'),
        )
        for low_name, high_name in windows:
            low, high = getattr(self, low_name), getattr(self, high_name)
            if not (math.isfinite(low) and math.isfinite(high)) or low <= 0 or high < low:
                raise InvalidRangeError(
                    f"{low_name} and {high_name} must satisfy 0 < min <= max, got [{low}, {high}]"
                )

        for name in (
            'ratio_tolerance', 'discriminant_tolerance', 'comparison_tolerance',
            'series_tolerance', 'relative_tolerance', 'pot_epsilon_ohms',
        ):
            value = getattr(self, name)
            if not math.isfinite(value) or value < 0:
                raise ValueError(f"{name} must be a non-negative number, got {value}")

    def with_overrides(self, **changes) -> 'SolverConfig':
        return replace(self, **changes)

    @classmethod
    def from_env(cls, prefix: str = 'SKLP_') -> 'SolverConfig':
        """
        Build a config from environment variables.

        Every float field can be overridden as PREFIX + FIELD_NAME in upper
        case, e.g. SKLP_MAX_RESISTANCE=1e6. SKLP_SERIES selects the series.
        """
        changes = {}
        for name, default in cls.__dataclass_fields__.items():
            raw = os.getenv(f"{prefix}{name.upper()}")
            if raw is None or raw.strip() == '':
                continue
            if name == 'series':
                changes[name] = raw.strip().upper()
            else:
                try:
                    changes[name] = float(raw)
                except ValueError:
                    raise ValueError(f"{prefix}{name.upper()} must be a number, got {raw!r}")
        return cls(**changes)


DEFAULT_CONFIG = SolverConfig()
