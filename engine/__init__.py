"""
Sallen-Key Preferred-Value Engine

Core computation library for picking standard (E-series) capacitor and
resistor values that realize a unity-gain Sallen-Key low-pass stage.

All math is deterministic: identical inputs always select identical parts.
"""

from engine.components import (
    generate_preferred_series,
    generate_e6_capacitors,
    nearest_neighbors,
    snap_to_e_series,
    engineering_notation,
)
from engine.sallen_key import (
    natural_frequency,
    quality_factor,
    solve_resistors_for_capacitors,
    sweep_pot,
    lowpass_response,
)
from engine.ranking import compare_candidates, select_best
from engine.candidates import DesignTarget, Candidate
from engine.solvers import (
    SolverResult,
    solve_component_pair,
    solve_sallen_key_lp,
    solve_capacitors_for_target,
    pick_caps_for_target,
    build_ratio_options,
)
from engine.errors import (
    SolverError,
    InvalidRangeError,
    InvalidInputError,
    ImaginaryRootError,
    DegenerateSolutionError,
    SolutionNotFoundError,
    is_error,
)
from engine.config import SolverConfig, DEFAULT_CONFIG

__version__ = "0.1.0"
