from __future__ import annotations

import math
from dataclasses import dataclass, field, asdict
from typing import Dict, Literal, Optional, Tuple, Union

from .constants import (
    DEFAULT_SOIL_TYPE,
    DEFAULT_WALL_THICKNESS_M,
    MAX_AIR_TEMP_C,
    MIN_AIR_TEMP_C,
    MONTHS_PER_YEAR,
    SOIL_CONDUCTIVITY,
)
from .errors import (
    InvalidClimateSeriesError,
    InvalidConstructionError,
    InvalidGroundParamsError,
)

MaterialCategory = Literal[
    "insulation", "masonry", "timber", "metal", "membrane", "plasterboard",
    "render", "cladding", "concrete", "airgap", "flooring", "glazing", "custom",
]
MATERIAL_CATEGORIES: Tuple[str, ...] = (
    "insulation", "masonry", "timber", "metal", "membrane", "plasterboard",
    "render", "cladding", "concrete", "airgap", "flooring", "glazing", "custom",
)

ElementType = Literal["wall", "floor", "roof", "junction"]
ELEMENT_TYPES: Tuple[str, ...] = ("wall", "floor", "roof", "junction")

FloorType = Literal["ground", "suspended", "solid", "intermediate"]
FLOOR_TYPES: Tuple[str, ...] = ("ground", "suspended", "solid", "intermediate")


def _finite(value: float) -> bool:
    return isinstance(value, (int, float)) and math.isfinite(value)


@dataclass(frozen=True)
class Homogeneous:
    lambda_: float  # thermal conductivity [W/mK]

    def __post_init__(self):
        if not _finite(self.lambda_) or self.lambda_ <= 0:
            raise InvalidConstructionError(
                f"Thermal conductivity must be > 0 W/mK, got {self.lambda_!r}"
            )


@dataclass(frozen=True)
class FixedResistance:
    R: float  # thermal resistance [m2K/W], e.g. air gaps

    def __post_init__(self):
        if not _finite(self.R) or self.R < 0:
            raise InvalidConstructionError(
                f"Fixed thermal resistance must be >= 0 m2K/W, got {self.R!r}"
            )


ThermalProperty = Union[Homogeneous, FixedResistance]


@dataclass(frozen=True)
class Material:
    id: str
    name: str
    category: MaterialCategory
    thermal: ThermalProperty
    vapour_resistivity: float  # [MN·s/(g·m)]
    density: float = 0.0  # [kg/m3]
    specific_heat: float = 0.0  # [J/(kg·K)]
    description: str = ""
    is_custom: bool = False

    def __post_init__(self):
        if self.category not in MATERIAL_CATEGORIES:
            raise InvalidConstructionError(
                f"Unknown material category {self.category!r} for {self.name!r}"
            )
        if not isinstance(self.thermal, (Homogeneous, FixedResistance)):
            raise InvalidConstructionError(
                f"Material {self.name!r} needs a conductivity or a fixed resistance"
            )
        if not _finite(self.vapour_resistivity) or self.vapour_resistivity < 0:
            raise InvalidConstructionError(
                f"Vapour resistivity of {self.name!r} must be >= 0, got {self.vapour_resistivity!r}"
            )

    @property
    def thermal_conductivity(self) -> Optional[float]:
        return self.thermal.lambda_ if isinstance(self.thermal, Homogeneous) else None

    @property
    def thermal_resistance(self) -> Optional[float]:
        return self.thermal.R if isinstance(self.thermal, FixedResistance) else None


@dataclass(frozen=True)
class BridgingElement:
    material: Material
    percentage: float  # share of the layer area [%]
    spacing: Optional[float] = None  # centre-to-centre [mm]
    width: Optional[float] = None  # [mm]

    def __post_init__(self):
        if not isinstance(self.material, Material):
            raise InvalidConstructionError(f"Bridging material must be a Material, got {self.material!r}")
        if not _finite(self.percentage) or not 0 < self.percentage <= 100:
            raise InvalidConstructionError(
                f"Bridging percentage must be in (0, 100], got {self.percentage!r}"
            )

    @property
    def fraction(self) -> float:
        return self.percentage / 100.0


@dataclass(frozen=True)
class Layer:
    material: Material
    thickness: float  # [mm]
    bridging: Optional[BridgingElement] = None
    id: str = ""

    def __post_init__(self):
        if not isinstance(self.material, Material):
            raise InvalidConstructionError(f"Layer material must be a Material, got {self.material!r}")
        if self.bridging is not None and not isinstance(self.bridging, BridgingElement):
            raise InvalidConstructionError(f"Not a bridging element: {self.bridging!r}")
        if not _finite(self.thickness) or self.thickness <= 0:
            raise InvalidConstructionError(
                f"Layer {self.material.name!r} thickness must be > 0 mm, got {self.thickness!r}"
            )

    @property
    def d(self) -> float:
        """Thickness in metres."""
        return self.thickness / 1000.0


@dataclass(frozen=True)
class Construction:
    """Layer stack ordered from the internal surface to the external one."""

    layers: Tuple[Layer, ...]
    element_type: ElementType = "wall"
    Rsi: float = 0.13  # internal surface resistance [m2K/W]
    Rse: float = 0.04  # external surface resistance [m2K/W]
    name: str = ""
    id: str = ""

    def __post_init__(self):
        object.__setattr__(self, "layers", tuple(self.layers))
        if not self.layers:
            raise InvalidConstructionError("Construction needs at least one layer")
        for layer in self.layers:
            if not isinstance(layer, Layer):
                raise InvalidConstructionError(f"Not a construction layer: {layer!r}")
        if self.element_type not in ELEMENT_TYPES:
            raise InvalidConstructionError(f"Unknown element type {self.element_type!r}")
        for label, value in (("Rsi", self.Rsi), ("Rse", self.Rse)):
            if not _finite(value) or value < 0:
                raise InvalidConstructionError(f"{label} must be >= 0 m2K/W, got {value!r}")

    @property
    def is_bridged(self) -> bool:
        return any(layer.bridging is not None for layer in self.layers)

    @property
    def total_thickness(self) -> float:
        return sum(layer.thickness for layer in self.layers)


@dataclass(frozen=True)
class ClimateMonth:
    month: str
    theta_e: float  # outdoor temperature [°C]
    phi_e: float  # outdoor relative humidity [%]
    theta_i: float  # indoor temperature [°C]
    phi_i: float  # indoor relative humidity [%]

    def __post_init__(self):
        for label, value in (("external temperature", self.theta_e),
                             ("internal temperature", self.theta_i)):
            if not _finite(value) or not MIN_AIR_TEMP_C <= value <= MAX_AIR_TEMP_C:
                raise InvalidClimateSeriesError(
                    f"{self.month}: {label} {value!r} outside "
                    f"[{MIN_AIR_TEMP_C:g}, {MAX_AIR_TEMP_C:g}] °C"
                )
        for label, value in (("external RH", self.phi_e), ("internal RH", self.phi_i)):
            if not _finite(value) or not 0 <= value <= 100:
                raise InvalidClimateSeriesError(f"{self.month}: {label} {value!r} outside [0, 100] %")


@dataclass(frozen=True)
class ClimateSeries:
    months: Tuple[ClimateMonth, ...]

    def __post_init__(self):
        object.__setattr__(self, "months", tuple(self.months))
        if len(self.months) != MONTHS_PER_YEAR:
            raise InvalidClimateSeriesError(
                f"Climate series needs {MONTHS_PER_YEAR} months, got {len(self.months)}"
            )
        for m in self.months:
            if not isinstance(m, ClimateMonth):
                raise InvalidClimateSeriesError(f"Not a climate month: {m!r}")
        labels = [m.month for m in self.months]
        if len(set(labels)) != len(labels):
            raise InvalidClimateSeriesError(f"Duplicate month labels in climate series: {labels}")

    def __iter__(self):
        return iter(self.months)

    def __len__(self) -> int:
        return len(self.months)

    def __getitem__(self, index: int) -> ClimateMonth:
        return self.months[index]


@dataclass(frozen=True)
class GroundFloorParams:
    perimeter: float  # exposed perimeter P [m]
    area: float  # floor area A [m2]
    floor_type: FloorType = "ground"
    wall_thickness: float = DEFAULT_WALL_THICKNESS_M  # w [m]
    soil_type: str = DEFAULT_SOIL_TYPE
    soil_conductivity: Optional[float] = None  # λg override [W/mK]

    def __post_init__(self):
        if not _finite(self.perimeter) or self.perimeter <= 0:
            raise InvalidGroundParamsError(f"Exposed perimeter must be > 0 m, got {self.perimeter!r}")
        if not _finite(self.area) or self.area <= 0:
            raise InvalidGroundParamsError(f"Floor area must be > 0 m2, got {self.area!r}")
        if self.floor_type not in FLOOR_TYPES:
            raise InvalidGroundParamsError(f"Unknown floor type {self.floor_type!r}")
        if not _finite(self.wall_thickness) or self.wall_thickness < 0:
            raise InvalidGroundParamsError(f"Wall thickness must be >= 0 m, got {self.wall_thickness!r}")
        if self.soil_conductivity is None:
            if self.soil_type not in SOIL_CONDUCTIVITY:
                raise InvalidGroundParamsError(f"Unknown soil type {self.soil_type!r}")
        elif not _finite(self.soil_conductivity) or self.soil_conductivity <= 0:
            raise InvalidGroundParamsError(
                f"Soil conductivity must be > 0 W/mK, got {self.soil_conductivity!r}"
            )

    @property
    def lambda_g(self) -> float:
        if self.soil_conductivity is not None:
            return self.soil_conductivity
        return SOIL_CONDUCTIVITY[self.soil_type]


# Results


@dataclass(frozen=True)
class TemperaturePoint:
    position: float  # from the internal surface [mm]
    temperature: float  # [°C]


@dataclass(frozen=True)
class VapourPoint:
    position: float  # [mm]
    pressure: float  # partial vapour pressure [Pa]
    saturation: float  # saturation vapour pressure [Pa]


@dataclass(frozen=True)
class MonthlyAnalysis:
    month: str
    condensation: float  # [g/m2]
    evaporation: float  # [g/m2]
    net: float  # [g/m2]
    cumulative: float  # [g/m2]
    condensing_interfaces: Tuple[int, ...] = ()


@dataclass(frozen=True)
class SurfaceCondensationMonth:
    month: str
    theta_e: float
    phi_e: float
    theta_i: float
    phi_i: float
    min_temperature_factor: float  # fRsi,min
    min_tsi: float  # [°C]
    tsi: float  # [°C]
    passes: bool


@dataclass(frozen=True)
class LayerCondensation:
    layer: int
    position: float  # interface on the external face of the layer [mm]
    risk: Literal["none", "interstitial"]
    condensing_months: Tuple[str, ...] = ()


@dataclass(frozen=True)
class ComplianceCheck:
    name: str
    passed: bool
    detail: str = ""


@dataclass(frozen=True)
class AnalysisResult:
    construction: Construction
    u_value: float
    u_value_without_bridging: float
    u_value_upper: float  # equal to u_value when the ground method applies
    u_value_lower: float
    design_month: str
    temperature_gradient: Tuple[TemperaturePoint, ...]
    vapour_pressure_gradient: Tuple[VapourPoint, ...]
    layer_condensation: Tuple[LayerCondensation, ...]
    monthly: Tuple[MonthlyAnalysis, ...]
    surface_condensation: Tuple[SurfaceCondensationMonth, ...]
    overall_result: Literal["pass", "fail"]
    failure_reason: Optional[str] = None
    checks: Tuple[ComplianceCheck, ...] = field(default_factory=tuple)

    @property
    def passes(self) -> bool:
        return self.overall_result == "pass"

    @property
    def year_end_moisture(self) -> float:
        return self.monthly[-1].cumulative if self.monthly else 0.0

    @property
    def peak_moisture(self) -> float:
        return max((m.cumulative for m in self.monthly), default=0.0)

    def as_dict(self) -> Dict[str, object]:
        """Plain, JSON-ready view for renderers and the web layer."""
        return asdict(self)
