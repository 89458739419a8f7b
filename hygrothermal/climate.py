"""UK monthly climate reference data and standard surface resistances.

The base series is London & South East. Regions shift the external
temperature and relative humidity by a fixed offset for every month.
"""
from __future__ import annotations

from typing import Dict, List, Optional, Tuple

from .dataclasses import ClimateMonth, ClimateSeries
from .errors import InvalidConstructionError

UK_MONTHLY_CLIMATE: List[ClimateMonth] = [
    ClimateMonth("January", theta_e=4.4, phi_e=86, theta_i=20, phi_i=60),
    ClimateMonth("February", theta_e=4.6, phi_e=83, theta_i=20, phi_i=60),
    ClimateMonth("March", theta_e=6.8, phi_e=79, theta_i=20, phi_i=55),
    ClimateMonth("April", theta_e=9.0, phi_e=73, theta_i=20, phi_i=55),
    ClimateMonth("May", theta_e=12.2, phi_e=71, theta_i=20, phi_i=50),
    ClimateMonth("June", theta_e=15.3, phi_e=70, theta_i=22, phi_i=50),
    ClimateMonth("July", theta_e=17.5, phi_e=70, theta_i=22, phi_i=50),
    ClimateMonth("August", theta_e=17.2, phi_e=72, theta_i=22, phi_i=50),
    ClimateMonth("September", theta_e=14.5, phi_e=76, theta_i=21, phi_i=55),
    ClimateMonth("October", theta_e=11.0, phi_e=81, theta_i=20, phi_i=55),
    ClimateMonth("November", theta_e=7.2, phi_e=85, theta_i=20, phi_i=60),
    ClimateMonth("December", theta_e=5.0, phi_e=87, theta_i=20, phi_i=60),
]

# External temperature [K] and RH [%] offsets per region
UK_REGIONS: Dict[str, Dict[str, object]] = {
    "london": {"name": "London & South East", "temp_offset": 0.0, "rh_offset": 0},
    "south-west": {"name": "South West", "temp_offset": 0.5, "rh_offset": 3},
    "midlands": {"name": "Midlands", "temp_offset": -0.5, "rh_offset": 2},
    "north-west": {"name": "North West", "temp_offset": -1.0, "rh_offset": 5},
    "north-east": {"name": "North East", "temp_offset": -1.5, "rh_offset": 3},
    "scotland-lowland": {"name": "Scotland (Lowlands)", "temp_offset": -2.0, "rh_offset": 4},
    "scotland-highland": {"name": "Scotland (Highlands)", "temp_offset": -3.5, "rh_offset": 5},
    "wales": {"name": "Wales", "temp_offset": -0.5, "rh_offset": 5},
    "northern-ireland": {"name": "Northern Ireland", "temp_offset": -0.8, "rh_offset": 4},
}

# BS EN ISO 6946 Table 7 [m2K/W]
SURFACE_RESISTANCES: Dict[str, Dict[str, float]] = {
    "internal": {"horizontal": 0.13, "upward": 0.10, "downward": 0.17},
    "external": {"sheltered": 0.06, "normal": 0.04, "exposed": 0.02},
}

# Heat-flow direction through each element type
HEAT_FLOW_DIRECTION: Dict[str, str] = {
    "wall": "horizontal",
    "junction": "horizontal",
    "roof": "upward",
    "floor": "downward",
}


def surface_resistances(element_type: str, exposure: str = "normal") -> Tuple[float, float]:
    """Default (Rsi, Rse) for an element type and external exposure."""
    direction = HEAT_FLOW_DIRECTION.get(element_type, "horizontal")
    if exposure not in SURFACE_RESISTANCES["external"]:
        raise InvalidConstructionError(f"Unknown exposure {exposure!r}")
    return SURFACE_RESISTANCES["internal"][direction], SURFACE_RESISTANCES["external"][exposure]


def regional_climate(region_id: str) -> ClimateSeries:
    """Base series shifted by the region's offsets; unknown ids get the base series."""
    region = UK_REGIONS.get(region_id)
    if region is None:
        return ClimateSeries(tuple(UK_MONTHLY_CLIMATE))
    t_off = float(region["temp_offset"])
    rh_off = float(region["rh_offset"])
    return ClimateSeries(tuple(
        ClimateMonth(
            m.month,
            theta_e=round(m.theta_e + t_off, 1),
            phi_e=min(100.0, max(0.0, m.phi_e + rh_off)),
            theta_i=m.theta_i,
            phi_i=m.phi_i,
        )
        for m in UK_MONTHLY_CLIMATE
    ))


def with_internal_conditions(
    climate: ClimateSeries, theta_i: Optional[float] = None, phi_i: Optional[float] = None
) -> ClimateSeries:
    """Replace the internal temperature and/or RH of every month."""
    return ClimateSeries(tuple(
        ClimateMonth(
            m.month,
            theta_e=m.theta_e,
            phi_e=m.phi_e,
            theta_i=m.theta_i if theta_i is None else theta_i,
            phi_i=m.phi_i if phi_i is None else phi_i,
        )
        for m in climate
    ))
