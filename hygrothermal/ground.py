"""Ground-floor U-values per BS EN ISO 13370.

Solid and ground-bearing floors use the characteristic dimension
B' = 2A/P and the equivalent thickness dt = w + λg(Rsi + Rf + Rse).
Suspended floors add a ground resistance and an underfloor ventilation term
to the construction U-value. Intermediate floors are not ground coupled.
"""
from __future__ import annotations

import logging
import math

from .constants import (
    MIN_GROUND_U_VALUE,
    SOLID_FLOOR_POOR_INSULATION_COEFF,
    UNDERFLOOR_VENT_AREA_M2_PER_M,
    UNDERFLOOR_VENT_CONSTANT,
    UNDERFLOOR_VOID_HEIGHT_M,
)
from .dataclasses import Construction, GroundFloorParams
from .errors import InvalidGroundParamsError
from .thermal import u_value

logger = logging.getLogger(__name__)


def characteristic_dimension(area: float, perimeter: float) -> float:
    """B' = A / (0.5·P) [m]."""
    if perimeter <= 0 or area <= 0:
        raise InvalidGroundParamsError(
            f"Perimeter and area must be > 0, got P={perimeter!r}, A={area!r}"
        )
    return 2.0 * area / perimeter


def floor_resistance(construction: Construction) -> float:
    """Rf of the floor layers, bridging-aware, without surface resistances."""
    return 1.0 / u_value(construction) - construction.Rsi - construction.Rse


def equivalent_thickness(construction: Construction, wall_thickness: float, lambda_g: float) -> float:
    """dt = w + λg·(Rsi + Rf + Rse) [m]."""
    R_f = floor_resistance(construction)
    return wall_thickness + lambda_g * (construction.Rsi + R_f + construction.Rse)


def well_insulated_u_value(b_prime: float, dt: float, lambda_g: float) -> float:
    """Ug for dt < B'."""
    return 2.0 * lambda_g / (math.pi * b_prime + dt) * math.log(math.pi * b_prime / dt + 1.0)


def poorly_insulated_u_value(b_prime: float, dt: float, lambda_g: float) -> float:
    """Ug for dt >= B'."""
    return lambda_g / (SOLID_FLOOR_POOR_INSULATION_COEFF * b_prime + dt)


def solid_floor_u_value(b_prime: float, dt: float, lambda_g: float) -> float:
    if dt < b_prime:
        return well_insulated_u_value(b_prime, dt, lambda_g)
    return poorly_insulated_u_value(b_prime, dt, lambda_g)


def underfloor_ventilation_u_value(b_prime: float) -> float:
    """Additive ventilation heat-loss term of a suspended floor [W/m²K].

    Simplified: assumes a fixed vent opening area per metre of perimeter and a
    fixed void height.
    """
    return 2.0 * UNDERFLOOR_VENT_AREA_M2_PER_M * (
        UNDERFLOOR_VENT_CONSTANT / (b_prime * UNDERFLOOR_VOID_HEIGHT_M)
    )


def suspended_floor_u_value(construction: Construction, b_prime: float, lambda_g: float) -> float:
    base_u = u_value(construction)
    R_g = b_prime / (2.0 * lambda_g)
    U_g = 1.0 / (1.0 / base_u + R_g)
    return U_g + underfloor_ventilation_u_value(b_prime)


def ground_floor_u_value(construction: Construction, params: GroundFloorParams) -> float:
    """Ground-coupled U-value of a floor construction [W/m²K]."""
    if params.floor_type == "intermediate":
        return u_value(construction)

    lambda_g = params.lambda_g
    b_prime = characteristic_dimension(params.area, params.perimeter)

    if params.floor_type == "suspended":
        U = suspended_floor_u_value(construction, b_prime, lambda_g)
    else:
        dt = equivalent_thickness(construction, params.wall_thickness, lambda_g)
        U = solid_floor_u_value(b_prime, dt, lambda_g)
        logger.debug("Ground floor B'=%.3f m, dt=%.3f m, λg=%.2f -> Ug=%.4f", b_prime, dt, lambda_g, U)

    return max(MIN_GROUND_U_VALUE, U)
