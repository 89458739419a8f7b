"""Layer resistances and construction U-values per BS EN ISO 6946.

Layers are resolved individually by :func:`layer_thermal_resistance`; bridging
only enters at the construction level through the Combined Method
(BS EN ISO 6946 §6.7.2), where the upper limit splits the whole assembly into
parallel heat-flow paths and the lower limit replaces every bridged layer by
its parallel equivalent. The reported total resistance is the mean of the two.
"""
from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from .constants import STILL_AIR_VAPOUR_RESISTIVITY, VAPOUR_RESISTANCE_UNIT_FACTOR
from .dataclasses import Construction, FixedResistance, Layer, Material
from .errors import NumericDegeneracyError

logger = logging.getLogger(__name__)


def material_thermal_resistance(material: Material, d: float) -> float:
    """R [m²K/W] of ``material`` at thickness ``d`` [m]."""
    if isinstance(material.thermal, FixedResistance):
        return material.thermal.R
    return d / material.thermal.lambda_


def layer_thermal_resistance(layer: Layer) -> float:
    """R of the layer's primary material; bridging is resolved per construction."""
    return material_thermal_resistance(layer.material, layer.d)


def layer_vapour_resistance(layer: Layer) -> float:
    """Vapour resistance of a layer (μ·d scaled to s/g), area-weighted over bridging."""
    base = layer.material.vapour_resistivity * layer.d * VAPOUR_RESISTANCE_UNIT_FACTOR
    if layer.bridging is None:
        return base
    bridge = layer.bridging.material.vapour_resistivity * layer.d * VAPOUR_RESISTANCE_UNIT_FACTOR
    f = layer.bridging.fraction
    return (1.0 - f) * base + f * bridge


def layer_sd_value(layer: Layer) -> float:
    """Equivalent air-layer thickness Sd [m] of the primary material.

    Vapour resistivity in MN·s/(g·m) divided by that of still air
    (≈5 MN·s/(g·m)) gives μ, and Sd = μ·d.
    """
    return layer.material.vapour_resistivity / STILL_AIR_VAPOUR_RESISTIVITY * layer.d


def bridging_fraction(construction: Construction) -> Optional[float]:
    """Bridged area fraction of the assembly, taken from the first bridged layer.

    Returns ``None`` when no layer is bridged.
    """
    bridged = [layer for layer in construction.layers if layer.bridging is not None]
    if not bridged:
        return None
    first = bridged[0].bridging.percentage
    others = {layer.bridging.percentage for layer in bridged[1:]} - {first}
    if others:
        logger.warning(
            "Bridged layers declare different percentages (%s); "
            "using %.1f%% from the first bridged layer for the upper limit",
            ", ".join(f"{p:g}%" for p in sorted(others)), first,
        )
    return first / 100.0


def parallel_layer_resistance(layer: Layer) -> float:
    """Area-weighted parallel equivalent R of a layer and its bridging element."""
    R_primary = layer_thermal_resistance(layer)
    if layer.bridging is None:
        return R_primary
    R_bridging = material_thermal_resistance(layer.bridging.material, layer.d)
    f = layer.bridging.fraction
    conductance = 0.0
    for share, R in ((1.0 - f, R_primary), (f, R_bridging)):
        if share > 0:
            conductance += share / R if R > 0 else float("inf")
    return 1.0 / conductance


def _check_total(R_total: float, what: str) -> float:
    if not R_total > 0:
        raise NumericDegeneracyError(f"{what} must be > 0 m2K/W, got {R_total!r}")
    return R_total


def _series_resistance(construction: Construction) -> float:
    R_layers = sum(layer_thermal_resistance(layer) for layer in construction.layers)
    return _check_total(
        construction.Rsi + R_layers + construction.Rse, "Total thermal resistance"
    )


def resistance_limits(construction: Construction) -> Tuple[float, float]:
    """Return (R_upper, R_lower) of the Combined Method.

    Without bridging both limits equal the plain series resistance.
    """
    f_bridge = bridging_fraction(construction)
    if f_bridge is None:
        R = _series_resistance(construction)
        return R, R

    surfaces = construction.Rsi + construction.Rse
    R_main = surfaces
    R_bridge = surfaces
    R_lower = surfaces
    for layer in construction.layers:
        R_primary = layer_thermal_resistance(layer)
        R_main += R_primary
        if layer.bridging is None:
            R_bridge += R_primary
            R_lower += R_primary
            continue
        R_bridge += material_thermal_resistance(layer.bridging.material, layer.d)
        # Parallel equivalent of this layer alone, with its own fraction
        R_lower += parallel_layer_resistance(layer)

    _check_total(R_main, "Unbridged path resistance")
    _check_total(R_bridge, "Bridged path resistance")
    R_upper = 1.0 / ((1.0 - f_bridge) / R_main + f_bridge / R_bridge)
    return R_upper, _check_total(R_lower, "Lower-limit resistance")


def total_resistance(construction: Construction) -> float:
    """R_T [m²K/W] including Rsi and Rse; Combined Method when bridged."""
    R_upper, R_lower = resistance_limits(construction)
    return _check_total((R_upper + R_lower) / 2.0, "Total thermal resistance")


def u_value(construction: Construction) -> float:
    """Construction U-value [W/m²K]."""
    return 1.0 / total_resistance(construction)


def u_value_without_bridging(construction: Construction) -> float:
    """U-value of the primary materials in series, ignoring all bridging."""
    return 1.0 / _series_resistance(construction)


def profile_resistances(construction: Construction) -> List[float]:
    """Per-layer resistances for walking a temperature profile.

    Without bridging these are the plain layer resistances. With bridging,
    bridged layers take their parallel equivalent and every layer is scaled so
    that Rsi + ΣR + Rse equals the Combined-Method R_T.
    """
    if not construction.is_bridged:
        return [layer_thermal_resistance(layer) for layer in construction.layers]
    Rs = [parallel_layer_resistance(layer) for layer in construction.layers]
    R_layers = sum(Rs)
    if R_layers <= 0:
        return Rs
    scale = (total_resistance(construction) - construction.Rsi - construction.Rse) / R_layers
    return [R * scale for R in Rs]
