"""Pydantic models for the Sallen-Key API requests and responses."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


# --- Enums ---

class SeriesName(str, Enum):
    E6 = "E6"
    E12 = "E12"
    E24 = "E24"


class SolverVariant(str, Enum):
    FIXED_WINDOW = "fixed_window"
    EQUAL_RESISTOR = "equal_resistor"
    DUAL_GANG = "dual_gang"


# --- Requests ---

class SallenKeyRequest(BaseModel):
    """fc/Q design over the full capacitor window."""
    fc: float = Field(..., gt=0, description="Target cutoff frequency (Hz)")
    q: Optional[float] = Field(None, gt=0, description="Quality factor (defaults to 0.7071)")
    c_base: Optional[float] = Field(None, gt=0, description="Seed capacitor on hand (F)")
    ratio: Optional[float] = Field(None, gt=0, description="Restrict C1/C2 to this ratio")
    include_response: bool = Field(False, description="Return the magnitude/phase response")


class ResistorSolveRequest(BaseModel):
    fc: float = Field(..., gt=0, description="Target cutoff frequency (Hz)")
    q: float = Field(..., gt=0, description="Quality factor")
    c1: float = Field(..., gt=0, description="Feedback capacitor (F)")
    c2: float = Field(..., gt=0, description="Capacitor to ground (F)")


class EqualResistorRequest(BaseModel):
    """Equal-resistor stage with a pot at its 50% position."""
    fc: float = Field(..., gt=0, description="Target cutoff at 50% (Hz)")
    r_pot_max: float = Field(..., gt=0, description="Pot full-scale resistance (Ohms)")
    c_base: Optional[float] = Field(None, gt=0, description="Seed capacitor (F)")
    r_series_top: float = Field(0.0, ge=0, description="Series resistor above the pot (Ohms)")
    r_series_bottom: float = Field(0.0, ge=0, description="Series resistor below the pot (Ohms)")


class DualGangRequest(BaseModel):
    fc: float = Field(..., gt=0, description="Target cutoff at 50% (Hz)")
    r_pot_max: float = Field(..., gt=0, description="Pot full-scale resistance per gang (Ohms)")
    c_base: Optional[float] = Field(None, gt=0, description="Seed capacitor (F)")
    tolerance: Optional[float] = Field(None, ge=0, le=1, description="Relative fc tolerance")


# --- Responses ---

class Neighbors(BaseModel):
    below: Optional[float] = None
    above: Optional[float] = None


class SnappedValue(BaseModel):
    """Nearest E24 value and its signed error (%)."""
    value: float
    error_pct: float


class SweepPointModel(BaseModel):
    alpha: float
    r: float
    fc: float


class FrequencyResponse(BaseModel):
    frequency: list[float]
    magnitude_db: list[float]
    phase_deg: list[float]


class SallenKeyResponse(BaseModel):
    variant: SolverVariant
    c1: float
    c2: float
    r1: float
    r2: float
    fc: float
    q: float
    deviation: float
    within_tolerance: bool
    display: dict[str, str] = {}
    r1_neighbors: Optional[Neighbors] = None
    r2_neighbors: Optional[Neighbors] = None
    r1_e24: Optional[SnappedValue] = None
    r2_e24: Optional[SnappedValue] = None
    sweep: list[SweepPointModel] = []
    advisories: list[str] = []
    response: Optional[FrequencyResponse] = None


class ResistorSolveResponse(BaseModel):
    r1: float
    r2: float
    fc: float
    q: float
    r1_e24: Optional[SnappedValue] = None
    r2_e24: Optional[SnappedValue] = None


class SeriesResponse(BaseModel):
    series: SeriesName
    min_value: float
    max_value: float
    values: list[float]


class RatioOption(BaseModel):
    value: float
    label: str
