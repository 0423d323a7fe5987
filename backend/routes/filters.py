"""Sallen-Key routes: filter targets in, preferred-value components out."""

import logging
import math

from fastapi import APIRouter, HTTPException, Query

from backend.models import (
    DualGangRequest,
    EqualResistorRequest,
    FrequencyResponse,
    Neighbors,
    RatioOption,
    ResistorSolveRequest,
    ResistorSolveResponse,
    SallenKeyRequest,
    SallenKeyResponse,
    SeriesName,
    SeriesResponse,
    SnappedValue,
    SweepPointModel,
)
from engine.candidates import DesignTarget
from engine.components import (
    engineering_notation,
    generate_preferred_series,
    nearest_neighbors,
    snap_resistor,
)
from engine.config import SolverConfig
from engine.errors import ErrorKind, InvalidRangeError, SolverError, is_error
from engine.sallen_key import (
    generate_frequencies,
    lowpass_response,
    natural_frequency,
    quality_factor,
    solve_resistors_for_capacitors,
)
from engine.solvers import (
    SolverResult,
    build_ratio_options,
    pick_caps_for_target,
    solve_capacitors_for_target,
    solve_component_pair,
)

logger = logging.getLogger(__name__)

router = APIRouter()

_STATUS_BY_KIND = {
    ErrorKind.INVALID_RANGE: 400,
    ErrorKind.INVALID_INPUT: 400,
    ErrorKind.IMAGINARY_ROOT: 422,
    ErrorKind.DEGENERATE: 422,
    ErrorKind.NOT_FOUND: 404,
}

# Widest window /api/series will enumerate
MAX_SERIES_DECADES = 30

_config = None


def get_config() -> SolverConfig:
    global _config
    if _config is None:
        _config = SolverConfig.from_env()
    return _config


def _raise_for(error: SolverError) -> None:
    logger.warning("Solver rejected request: %s (%s)", error.message, error.kind.value)
    raise HTTPException(status_code=_STATUS_BY_KIND[error.kind], detail=error.message)


def _snapped(resistance: float) -> SnappedValue:
    value, error_pct = snap_resistor(resistance)
    return SnappedValue(value=value, error_pct=error_pct)


def _to_response(result: SolverResult, include_response: bool = False) -> SallenKeyResponse:
    r1_below, r1_above = nearest_neighbors(result.r1, 'E24')
    r2_below, r2_above = nearest_neighbors(result.r2, 'E24')

    response = None
    if include_response:
        freqs = generate_frequencies(result.fc)
        magnitude_db, phase_deg = lowpass_response(result.r1, result.r2, result.c1, result.c2, freqs)
        response = FrequencyResponse(
            frequency=freqs.tolist(),
            magnitude_db=magnitude_db.tolist(),
            phase_deg=phase_deg.tolist(),
        )

    return SallenKeyResponse(
        variant=result.variant,
        c1=result.c1,
        c2=result.c2,
        r1=result.r1,
        r2=result.r2,
        fc=result.fc,
        q=result.q,
        deviation=result.deviation,
        within_tolerance=result.within_tolerance,
        display={
            "c1": engineering_notation(result.c1, "F"),
            "c2": engineering_notation(result.c2, "F"),
            "r1": engineering_notation(result.r1, "Ω"),
            "r2": engineering_notation(result.r2, "Ω"),
            "fc": engineering_notation(result.fc, "Hz"),
        },
        r1_neighbors=Neighbors(below=r1_below, above=r1_above),
        r2_neighbors=Neighbors(below=r2_below, above=r2_above),
        r1_e24=_snapped(result.r1),
        r2_e24=_snapped(result.r2),
        sweep=[SweepPointModel(alpha=p.alpha, r=p.r, fc=p.fc) for p in result.sweep],
        advisories=list(result.advisories),
        response=response,
    )


@router.post("/sallen-key/solve", response_model=SallenKeyResponse)
async def solve_sallen_key(request: SallenKeyRequest):
    """Pick an E-series capacitor pair and exact resistors for a target fc and Q."""
    target = DesignTarget(fc=request.fc, q=request.q, seed=request.c_base, ratio=request.ratio)
    result = solve_component_pair(target, get_config())
    if is_error(result):
        _raise_for(result)
    return _to_response(result, request.include_response)


@router.post("/sallen-key/resistors", response_model=ResistorSolveResponse)
async def solve_resistors(request: ResistorSolveRequest):
    """Solve R1, R2 for a caller-chosen capacitor pair."""
    pair = solve_resistors_for_capacitors(request.fc, request.q, request.c1, request.c2, get_config())
    if is_error(pair):
        _raise_for(pair)
    return ResistorSolveResponse(
        r1=pair.r1,
        r2=pair.r2,
        fc=natural_frequency(pair.r1, pair.r2, request.c1, request.c2),
        q=quality_factor(pair.r1, pair.r2, request.c1, request.c2),
        r1_e24=_snapped(pair.r1),
        r2_e24=_snapped(pair.r2),
    )


@router.post("/sallen-key/equal-r", response_model=SallenKeyResponse)
async def solve_equal_resistor(request: EqualResistorRequest):
    """Equal-resistor stage: capacitors for a target fc with the pot at 50%."""
    result = solve_capacitors_for_target(
        request.fc,
        request.r_pot_max,
        seed=request.c_base,
        r_series_top=request.r_series_top,
        r_series_bottom=request.r_series_bottom,
        config=get_config(),
    )
    if is_error(result):
        _raise_for(result)
    return _to_response(result)


@router.post("/sallen-key/dual-gang", response_model=SallenKeyResponse)
async def solve_dual_gang(request: DualGangRequest):
    """Dual-gang pot stage: expanding decade search around the target."""
    result = pick_caps_for_target(
        request.fc,
        request.r_pot_max,
        seed=request.c_base,
        tolerance=request.tolerance,
        config=get_config(),
    )
    if is_error(result):
        _raise_for(result)
    return _to_response(result)


@router.get("/sallen-key/ratios", response_model=list[RatioOption])
async def list_ratios():
    """C1:C2 ratio presets derived from the E6 mantissas."""
    return [RatioOption(value=value, label=label) for value, label in build_ratio_options()]


@router.get("/series/{name}", response_model=SeriesResponse)
async def get_series(
    name: SeriesName,
    min_value: float = Query(..., description="Window minimum"),
    max_value: float = Query(..., description="Window maximum"),
):
    """List the preferred values of a series inside a magnitude window."""
    if 0 < min_value <= max_value and math.log10(max_value / min_value) > MAX_SERIES_DECADES:
        raise HTTPException(status_code=400, detail="Window too wide. Narrow the range to fewer decades.")
    try:
        values = generate_preferred_series(name.value, min_value, max_value)
    except InvalidRangeError as e:
        _raise_for(e)
    return SeriesResponse(series=name, min_value=min_value, max_value=max_value, values=values)
