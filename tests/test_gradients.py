import sys
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from hygrothermal.climate import UK_MONTHLY_CLIMATE
from hygrothermal.core import (
    analyze,
    condensation_interfaces,
    dew_point,
    evaporation_potential,
    interface_positions,
    saturation_pressure,
    temperature_gradient,
    vapour_pressure,
    vapour_pressure_gradient,
)
from hygrothermal.dataclasses import (
    BridgingElement,
    ClimateMonth,
    Construction,
    FixedResistance,
    Homogeneous,
    Layer,
    Material,
    VapourPoint,
)
from hygrothermal.errors import NumericDegeneracyError
from hygrothermal.thermal import layer_thermal_resistance, profile_resistances, u_value

INSULATION = Material("ins", "Insulation", "insulation", Homogeneous(0.04), 5)
SHEATHING = Material("sheathing", "Sheathing", "timber", Homogeneous(0.13), 1000)
PLASTERBOARD = Material("pb", "Plasterboard", "plasterboard", Homogeneous(0.21), 45)
MINERAL_WOOL = Material("mw", "Mineral wool", "insulation", Homogeneous(0.035), 5)
TIMBER = Material("timber", "Softwood", "timber", Homogeneous(0.13), 60)
OSB = Material("osb", "OSB", "timber", Homogeneous(0.13), 150)

DECEMBER = ClimateMonth("December", theta_e=5, phi_e=87, theta_i=20, phi_i=60)


def build_wall():
    return Construction(layers=[Layer(INSULATION, 100)], Rsi=0.13, Rse=0.04)


def build_stud_wall():
    return Construction(
        layers=[
            Layer(PLASTERBOARD, 12.5),
            Layer(MINERAL_WOOL, 140, BridgingElement(TIMBER, 15)),
            Layer(OSB, 11),
        ],
        Rsi=0.13,
        Rse=0.04,
    )


def test_saturation_pressure_reference_points():
    assert saturation_pressure(0) == pytest.approx(610.78)
    assert saturation_pressure(20) == pytest.approx(2333.3, abs=0.5)


def test_saturation_pressure_strictly_increasing():
    temps = [t / 2 for t in range(-40, 81)]
    values = [saturation_pressure(t) for t in temps]
    assert all(a < b for a, b in zip(values, values[1:]))


def test_vapour_pressure_scales_with_rh():
    assert vapour_pressure(20, 60) == pytest.approx(0.6 * saturation_pressure(20))
    assert vapour_pressure(20, 0) == 0


def test_dew_point_inverts_magnus():
    assert dew_point(20, 100) == pytest.approx(20)
    td = dew_point(20, 60)
    assert td < 20
    assert saturation_pressure(td) == pytest.approx(vapour_pressure(20, 60))


def test_dew_point_of_dry_air():
    assert dew_point(20, 0) == -273.15


def test_interface_positions():
    c = Construction(layers=[Layer(INSULATION, 100), Layer(SHEATHING, 12.5)])
    assert interface_positions(c) == [0.0, 100.0, 112.5]


def test_temperature_gradient_single_layer():
    c = build_wall()
    points = temperature_gradient(c, DECEMBER.theta_i, DECEMBER.theta_e)
    assert [p.position for p in points] == [0.0, 100.0]
    tsi = points[0].temperature
    assert 5 < tsi < 20
    assert abs(tsi - 20) < abs(tsi - 5)
    q = 15 * u_value(c)
    assert tsi == pytest.approx(20 - q * 0.13)
    assert points[-1].temperature == pytest.approx(5 + q * 0.04)
    assert round(tsi, 2) == 19.27


def test_temperature_gradient_is_monotonic_through_layers():
    c = Construction(layers=[Layer(INSULATION, 100), Layer(SHEATHING, 12.5)])
    temps = [p.temperature for p in temperature_gradient(c, 20, -5)]
    assert all(a > b for a, b in zip(temps, temps[1:]))


def test_bridged_profile_stays_between_air_temperatures():
    c = build_stud_wall()
    temps = [p.temperature for p in temperature_gradient(c, 20, 5)]
    assert all(5 <= t <= 20 for t in temps)
    assert all(a > b for a, b in zip(temps, temps[1:]))
    q = 15 * u_value(c)
    assert temps[0] == pytest.approx(20 - q * 0.13)
    assert temps[-1] == pytest.approx(5 + q * 0.04)


def test_profile_resistances_add_up_to_total():
    c = build_stud_wall()
    assert c.Rsi + sum(profile_resistances(c)) + c.Rse == pytest.approx(1 / u_value(c))
    plain = Construction(layers=[Layer(INSULATION, 100), Layer(SHEATHING, 12.5)])
    assert profile_resistances(plain) == [layer_thermal_resistance(layer) for layer in plain.layers]


def test_bridged_wall_external_face_is_warmer_than_outside_air():
    result = analyze(build_stud_wall(), UK_MONTHLY_CLIMATE)
    january = UK_MONTHLY_CLIMATE[0]
    assert result.temperature_gradient[-1].temperature > january.theta_e
    # Wool/OSB interface sits near 5 °C, well above freezing
    assert result.vapour_pressure_gradient[2].saturation > 800


def test_vapour_gradient_runs_from_inside_to_outside():
    c = Construction(layers=[Layer(INSULATION, 100), Layer(SHEATHING, 12.5)])
    points = vapour_pressure_gradient(c, DECEMBER)
    assert points[0].pressure == pytest.approx(vapour_pressure(20, 60))
    assert points[-1].pressure == pytest.approx(vapour_pressure(5, 87))
    # Drop across each layer is proportional to its vapour resistance
    drop_1 = points[0].pressure - points[1].pressure
    drop_2 = points[1].pressure - points[2].pressure
    assert drop_1 / drop_2 == pytest.approx((5 * 0.1) / (1000 * 0.0125))


def test_surface_points_are_never_condensation_interfaces():
    gradient = [
        VapourPoint(0, 2000, 1000),
        VapourPoint(50, 500, 1000),
        VapourPoint(100, 2000, 1000),
    ]
    assert condensation_interfaces(gradient) == []
    gradient[1] = VapourPoint(50, 1200, 1000)
    assert condensation_interfaces(gradient) == [1]


def test_zero_vapour_resistance_is_rejected():
    gap = Material("gap", "Cavity", "airgap", FixedResistance(0.18), 0)
    c = Construction(layers=[Layer(gap, 50)])
    with pytest.raises(NumericDegeneracyError):
        vapour_pressure_gradient(c, DECEMBER)


@pytest.mark.parametrize("theta_e, expected", [(-5, 0), (5, 0), (10, 10), (15.5, 21)])
def test_evaporation_potential(theta_e, expected):
    assert evaporation_potential(theta_e) == pytest.approx(expected)
