"""Steady-state hygrothermal analysis of a layered construction.

Temperature and vapour pressure profiles follow the Glaser method of
BS EN ISO 13788: both are linear in the cumulative thermal and vapour
resistance measured from the internal surface. Interstitial condensation is
predicted wherever the partial vapour pressure at an interior interface
exceeds the saturation pressure at that interface's temperature.
"""
from __future__ import annotations

import logging
import math
from typing import List, Optional, Sequence, Tuple, Union

from .constants import (
    ABSOLUTE_ZERO_C,
    CONDENSATION_SCALE,
    EVAPORATION_BASE_TEMP_C,
    EVAPORATION_RATE_PER_K,
    ISOTHERMAL_TEMPERATURE_FACTOR,
    MAGNUS_A,
    MAGNUS_B_C,
    MAGNUS_P0_PA,
    PART_L_LIMITING_U,
    YEAR_END_MOISTURE_THRESHOLD_G_M2,
)
from .dataclasses import (
    AnalysisResult,
    ClimateMonth,
    ClimateSeries,
    ComplianceCheck,
    Construction,
    GroundFloorParams,
    LayerCondensation,
    MonthlyAnalysis,
    SurfaceCondensationMonth,
    TemperaturePoint,
    VapourPoint,
)
from .errors import NumericDegeneracyError
from .ground import ground_floor_u_value
from .thermal import (
    layer_vapour_resistance,
    profile_resistances,
    resistance_limits,
    u_value,
    u_value_without_bridging,
)

logger = logging.getLogger(__name__)


def saturation_pressure(T: float) -> float:
    """Saturation vapour pressure [Pa] over water at ``T`` [°C] (Magnus)."""
    return MAGNUS_P0_PA * math.exp(MAGNUS_A * T / (MAGNUS_B_C + T))


def vapour_pressure(T: float, phi: float) -> float:
    """Partial vapour pressure [Pa] of air at ``T`` [°C] and RH ``phi`` [%]."""
    return saturation_pressure(T) * phi / 100.0


def dew_point(theta: float, phi: float) -> float:
    """Dew point temperature (°C) from air temperature θ (°C) and RH φ (%).

    Inverse Magnus. Perfectly dry air has no dew point; absolute zero is
    returned so comparisons against it always pass.
    """
    if phi <= 0:
        return ABSOLUTE_ZERO_C
    alpha = math.log(phi / 100.0) + (MAGNUS_A * theta) / (MAGNUS_B_C + theta)
    return (MAGNUS_B_C * alpha) / (MAGNUS_A - alpha)


def interface_positions(construction: Construction) -> List[float]:
    """Positions [mm] of the internal surface and every layer's external face.

    Starts at 0 and ends at the total construction thickness.
    """
    xs = [0.0]
    accum = 0.0
    for layer in construction.layers:
        accum += layer.thickness
        xs.append(accum)
    return xs


def temperature_gradient(
    construction: Construction, theta_i: float, theta_e: float, u: Optional[float] = None
) -> List[TemperaturePoint]:
    """Temperatures at the internal surface and after each layer.

    ``u`` defaults to the Combined-Method U-value of the construction. The heat
    flux is q = (θi − θe)·U and each point sits at θi − q·ΣR, with ΣR starting
    at Rsi. Bridged layers are walked with :func:`profile_resistances`, so the
    external face lands on θe + q·Rse.
    """
    U = u_value(construction) if u is None else u
    q = (theta_i - theta_e) * U
    R_accum = construction.Rsi
    xs = interface_positions(construction)
    points = [TemperaturePoint(xs[0], theta_i - q * R_accum)]
    for x, R in zip(xs[1:], profile_resistances(construction)):
        R_accum += R
        points.append(TemperaturePoint(x, theta_i - q * R_accum))
    return points


def vapour_pressure_gradient(
    construction: Construction, month: ClimateMonth, u: Optional[float] = None
) -> List[VapourPoint]:
    """Linear partial pressure p(G) and co-located saturation pressure.

    The partial pressure runs from the internal air value at the internal
    surface to the external air value at the external surface, linear in the
    cumulative vapour resistance.
    """
    p_i = vapour_pressure(month.theta_i, month.phi_i)
    p_e = vapour_pressure(month.theta_e, month.phi_e)
    G_layers = [layer_vapour_resistance(layer) for layer in construction.layers]
    G_total = sum(G_layers)
    if not G_total > 0:
        raise NumericDegeneracyError(
            f"Total vapour resistance must be > 0, got {G_total!r}; "
            "at least one layer needs a vapour resistivity"
        )
    g = (p_i - p_e) / G_total
    temps = temperature_gradient(construction, month.theta_i, month.theta_e, u)

    points = [VapourPoint(temps[0].position, p_i, saturation_pressure(temps[0].temperature))]
    G_accum = 0.0
    for G, tp in zip(G_layers, temps[1:]):
        G_accum += G
        points.append(VapourPoint(tp.position, p_i - g * G_accum, saturation_pressure(tp.temperature)))
    return points


def condensation_interfaces(gradient: Sequence[VapourPoint]) -> List[int]:
    """Indices of interior interfaces where p exceeds p_sat.

    The internal and external surface points are never reported.
    """
    return [
        i for i in range(1, len(gradient) - 1)
        if gradient[i].pressure > gradient[i].saturation
    ]


def evaporation_potential(theta_e: float) -> float:
    """Drying a month can offer [g/m²]; zero at or below the base temperature."""
    return max(0.0, (theta_e - EVAPORATION_BASE_TEMP_C) * EVAPORATION_RATE_PER_K)


def monthly_analysis(
    construction: Construction, climate: ClimateSeries, u: Optional[float] = None
) -> List[MonthlyAnalysis]:
    """Run the 12-month condensation/evaporation balance.

    Each month condenses ``CONDENSATION_SCALE`` g/m² per Pa of excess pressure
    summed over the condensing interfaces, and evaporates at most what has
    accumulated so far. The running total is carried unrounded; the reported
    figures are rounded to 2 decimals.
    """
    out: List[MonthlyAnalysis] = []
    cumulative = 0.0
    for month in climate:
        gradient = vapour_pressure_gradient(construction, month, u)
        wet = condensation_interfaces(gradient)
        condensation = sum(
            gradient[i].pressure - gradient[i].saturation for i in wet
        ) * CONDENSATION_SCALE
        evaporation = min(cumulative, evaporation_potential(month.theta_e))
        net = condensation - evaporation
        cumulative = max(0.0, cumulative + net)
        out.append(MonthlyAnalysis(
            month=month.month,
            condensation=round(condensation, 2),
            evaporation=round(evaporation, 2),
            net=round(net, 2),
            cumulative=round(cumulative, 2),
            condensing_interfaces=tuple(wet),
        ))
    return out


def surface_condensation(
    construction: Construction, climate: ClimateSeries, u: Optional[float] = None
) -> List[SurfaceCondensationMonth]:
    """Monthly mould-risk check per BS EN ISO 13788 Annex C.

    θsi = θi − U·(θi − θe)·Rsi is compared with the minimum acceptable surface
    temperature derived from the internal dew point.
    """
    U = u_value(construction) if u is None else u
    out: List[SurfaceCondensationMonth] = []
    for month in climate:
        delta_t = month.theta_i - month.theta_e
        tsi = month.theta_i - U * delta_t * construction.Rsi
        theta_s = dew_point(month.theta_i, month.phi_i)
        if delta_t != 0:
            f_rsi_min = (theta_s - month.theta_e) / delta_t
        else:
            f_rsi_min = ISOTHERMAL_TEMPERATURE_FACTOR
        min_tsi = month.theta_e + f_rsi_min * delta_t
        out.append(SurfaceCondensationMonth(
            month=month.month,
            theta_e=month.theta_e,
            phi_e=month.phi_e,
            theta_i=month.theta_i,
            phi_i=month.phi_i,
            min_temperature_factor=round(f_rsi_min, 3),
            min_tsi=round(min_tsi, 1),
            tsi=round(tsi, 1),
            passes=not tsi < min_tsi,
        ))
    return out


def layer_condensation(
    construction: Construction, monthly: Sequence[MonthlyAnalysis]
) -> List[LayerCondensation]:
    """Per-layer interstitial risk from the interface on each layer's external face."""
    xs = interface_positions(construction)
    out: List[LayerCondensation] = []
    for i in range(len(construction.layers)):
        months = tuple(m.month for m in monthly if (i + 1) in m.condensing_interfaces)
        out.append(LayerCondensation(
            layer=i,
            position=xs[i + 1],
            risk="interstitial" if months else "none",
            condensing_months=months,
        ))
    return out


def evaluate_compliance(
    monthly: Sequence[MonthlyAnalysis],
    surface: Sequence[SurfaceCondensationMonth],
    u: float,
    element_type: str,
) -> Tuple[str, Optional[str], Tuple[ComplianceCheck, ...]]:
    """Return (overall_result, failure_reason, checks).

    Only the year-end moisture balance decides the overall result. Surface
    condensation and the limiting U-value are reported as advisory checks.
    """
    year_end = monthly[-1].cumulative if monthly else 0.0
    peak = max((m.cumulative for m in monthly), default=0.0)
    dried_out = year_end <= YEAR_END_MOISTURE_THRESHOLD_G_M2

    failure_reason = None
    if not dried_out:
        failure_reason = (
            f"Condensation of {year_end:.2f} g/m² remains at year-end. "
            "Moisture has not fully evaporated during the annual cycle, so "
            "accumulation will increase year over year. This fails the Glaser "
            "method assessment of BS EN ISO 13788. "
            f"Peak accumulation during the year was {peak:.2f} g/m²."
        )

    checks = [ComplianceCheck(
        name="Interstitial condensation (BS EN ISO 13788)",
        passed=dried_out,
        detail=f"Year-end {year_end:.2f} g/m², peak {peak:.2f} g/m²",
    )]

    failing = [s.month for s in surface if not s.passes]
    checks.append(ComplianceCheck(
        name="Surface condensation / mould risk (BS EN ISO 13788 Annex C)",
        passed=not failing,
        detail=("Tsi below minimum in " + ", ".join(failing)) if failing
        else "Tsi at or above the minimum in every month",
    ))

    limit = PART_L_LIMITING_U.get(element_type)
    if limit is not None:
        checks.append(ComplianceCheck(
            name="Limiting U-value (Approved Document L 2021)",
            passed=u <= limit,
            detail=f"U = {u:.3f} W/m²K against a limit of {limit:.2f} W/m²K",
        ))

    return ("pass" if dried_out else "fail"), failure_reason, tuple(checks)


def analyze(
    construction: Construction,
    climate: Union[ClimateSeries, Sequence[ClimateMonth]],
    ground_params: Optional[GroundFloorParams] = None,
) -> AnalysisResult:
    """End-to-end condensation and U-value analysis.

    ``climate`` may be a :class:`ClimateSeries` or any sequence of 12
    :class:`ClimateMonth` values. ``ground_params`` applies BS EN ISO 13370 to
    the reported U-value of floor constructions; the profiles always use the
    construction's own Combined-Method U-value, and the reported upper and
    lower bounds collapse onto the ground U-value. The displayed gradients are
    those of the first month in the series.

    Raises a :class:`~hygrothermal.errors.HygrothermalError` subclass on any
    invalid or degenerate input; a result is never partially populated.
    """
    if not isinstance(climate, ClimateSeries):
        climate = ClimateSeries(tuple(climate))

    U_construction = u_value(construction)
    R_upper, R_lower = resistance_limits(construction)
    U_upper, U_lower = 1.0 / R_lower, 1.0 / R_upper
    if ground_params is not None and construction.element_type == "floor":
        U = ground_floor_u_value(construction, ground_params)
        U_upper = U_lower = U
    else:
        if ground_params is not None:
            logger.warning(
                "Ground-floor parameters ignored for %s construction %r",
                construction.element_type, construction.name,
            )
        U = U_construction

    design = climate[0]
    temps = temperature_gradient(construction, design.theta_i, design.theta_e, U_construction)
    vapour = vapour_pressure_gradient(construction, design, U_construction)
    monthly = monthly_analysis(construction, climate, U_construction)
    surface = surface_condensation(construction, climate, U_construction)
    overall, reason, checks = evaluate_compliance(monthly, surface, U, construction.element_type)

    logger.debug(
        "Analysed %r: U=%.4f, year-end moisture %.2f g/m², result %s",
        construction.name, U, monthly[-1].cumulative, overall,
    )

    return AnalysisResult(
        construction=construction,
        u_value=round(U, 3),
        u_value_without_bridging=round(u_value_without_bridging(construction), 3),
        u_value_upper=round(U_upper, 3),
        u_value_lower=round(U_lower, 3),
        design_month=design.month,
        temperature_gradient=tuple(
            TemperaturePoint(p.position, round(p.temperature, 1)) for p in temps
        ),
        vapour_pressure_gradient=tuple(
            VapourPoint(p.position, round(p.pressure), round(p.saturation)) for p in vapour
        ),
        layer_condensation=tuple(layer_condensation(construction, monthly)),
        monthly=tuple(monthly),
        surface_condensation=tuple(surface),
        overall_result=overall,
        failure_reason=reason,
        checks=checks,
    )
