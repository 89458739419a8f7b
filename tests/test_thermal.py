import logging
import sys
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from hygrothermal.dataclasses import (
    BridgingElement,
    Construction,
    FixedResistance,
    Homogeneous,
    Layer,
    Material,
)
from hygrothermal.errors import InvalidConstructionError, NumericDegeneracyError
from hygrothermal.thermal import (
    layer_sd_value,
    layer_thermal_resistance,
    layer_vapour_resistance,
    parallel_layer_resistance,
    resistance_limits,
    total_resistance,
    u_value,
    u_value_without_bridging,
)


def material(name, lambda_, mu=5.0, category="insulation"):
    return Material(id=name, name=name, category=category, thermal=Homogeneous(lambda_), vapour_resistivity=mu)


INSULATION = material("insulation", 0.035, mu=5)
TIMBER = material("timber", 0.13, mu=60, category="timber")
PLASTERBOARD = material("plasterboard", 0.21, mu=45, category="plasterboard")


def build_single_layer(thickness=100, lambda_=0.04):
    return Construction(layers=[Layer(material("ins", lambda_), thickness)], Rsi=0.13, Rse=0.04)


def build_stud_wall(insulation_thickness=140, percentage=15, insulation=INSULATION):
    return Construction(
        layers=[
            Layer(PLASTERBOARD, 12.5),
            Layer(insulation, insulation_thickness, BridgingElement(TIMBER, percentage)),
        ],
        Rsi=0.13,
        Rse=0.04,
    )


def test_single_layer_u_value():
    c = build_single_layer()
    assert layer_thermal_resistance(c.layers[0]) == pytest.approx(2.5)
    assert total_resistance(c) == pytest.approx(2.67)
    assert u_value(c) == pytest.approx(1 / 2.67)
    assert round(u_value(c), 3) == 0.375


def test_fixed_resistance_ignores_thickness():
    gap = Material("gap", "Cavity", "airgap", FixedResistance(0.18), 0.0)
    assert layer_thermal_resistance(Layer(gap, 25)) == 0.18
    assert layer_thermal_resistance(Layer(gap, 50)) == 0.18


@pytest.mark.parametrize("thickness", [10, 50, 100, 250])
def test_unbridged_u_value_equals_without_bridging(thickness):
    c = Construction(
        layers=[Layer(PLASTERBOARD, 12.5), Layer(INSULATION, thickness)], Rsi=0.13, Rse=0.04
    )
    assert u_value(c) == u_value_without_bridging(c)
    R_upper, R_lower = resistance_limits(c)
    assert R_upper == R_lower


def test_bridging_increases_u_value():
    c = build_stud_wall()
    assert u_value(c) > u_value_without_bridging(c)
    # Unbridged reference: the same stack with the insulation alone
    assert u_value_without_bridging(c) == pytest.approx(1 / (0.17 + 0.0125 / 0.21 + 0.14 / 0.035))


@pytest.mark.parametrize("percentage", [5, 15, 25, 60])
def test_combined_method_lies_between_limits(percentage):
    c = build_stud_wall(percentage=percentage)
    R_upper, R_lower = resistance_limits(c)
    R_T = 1 / u_value(c)
    assert R_lower < R_upper
    assert R_lower <= R_T <= R_upper
    assert R_T == pytest.approx((R_upper + R_lower) / 2)


def test_combined_method_reference_values():
    c = build_stud_wall()
    R_upper, R_lower = resistance_limits(c)
    R_main = 0.17 + 0.0125 / 0.21 + 0.14 / 0.035
    R_bridge = 0.17 + 0.0125 / 0.21 + 0.14 / 0.13
    assert R_upper == pytest.approx(1 / (0.85 / R_main + 0.15 / R_bridge))
    R_layer = 1 / (0.85 / (0.14 / 0.035) + 0.15 / (0.14 / 0.13))
    assert R_lower == pytest.approx(0.17 + 0.0125 / 0.21 + R_layer)


@pytest.mark.parametrize("builder", [
    lambda t: build_single_layer(thickness=t),
    lambda t: build_stud_wall(insulation_thickness=t),
])
def test_thicker_layer_lowers_u_value(builder):
    values = [u_value(builder(t)) for t in (50, 100, 150, 200)]
    assert all(a > b for a, b in zip(values, values[1:]))


def test_higher_conductivity_raises_u_value():
    values = [u_value(build_single_layer(lambda_=lam)) for lam in (0.02, 0.04, 0.1, 1.0)]
    assert all(a < b for a, b in zip(values, values[1:]))
    bridged = [u_value(build_stud_wall(insulation=material("i", lam))) for lam in (0.02, 0.035, 0.05)]
    assert all(a < b for a, b in zip(bridged, bridged[1:]))


def test_vapour_resistance_is_area_weighted():
    plain = Layer(INSULATION, 100)
    assert layer_vapour_resistance(plain) == pytest.approx(5 * 0.1 * 1e9)
    bridged = Layer(INSULATION, 100, BridgingElement(TIMBER, 15))
    assert layer_vapour_resistance(bridged) == pytest.approx((0.85 * 5 + 0.15 * 60) * 0.1 * 1e9)


def test_sd_value_of_primary_material():
    assert layer_sd_value(Layer(INSULATION, 100)) == pytest.approx(0.1)
    assert layer_sd_value(Layer(TIMBER, 50)) == pytest.approx(0.6)


def test_inconsistent_bridging_fractions_warn(caplog):
    c = Construction(layers=[
        Layer(INSULATION, 100, BridgingElement(TIMBER, 10)),
        Layer(INSULATION, 50, BridgingElement(TIMBER, 20)),
    ])
    with caplog.at_level(logging.WARNING, logger="hygrothermal.thermal"):
        u_value(c)
    assert "first bridged layer" in caplog.text


def test_invalid_constructions_raise():
    with pytest.raises(InvalidConstructionError):
        Construction(layers=[])
    with pytest.raises(InvalidConstructionError):
        Layer(INSULATION, 0)
    with pytest.raises(InvalidConstructionError):
        Layer(INSULATION, -10)
    with pytest.raises(InvalidConstructionError):
        Homogeneous(0)
    with pytest.raises(InvalidConstructionError):
        FixedResistance(-0.1)
    with pytest.raises(InvalidConstructionError):
        BridgingElement(TIMBER, 0)
    with pytest.raises(InvalidConstructionError):
        BridgingElement(TIMBER, 120)
    with pytest.raises(InvalidConstructionError):
        Construction(layers=[Layer(INSULATION, 100)], Rsi=-0.1)
    with pytest.raises(InvalidConstructionError):
        Material("x", "x", "unobtainium", Homogeneous(1.0), 5)
    with pytest.raises(InvalidConstructionError):
        Material("x", "x", "custom", Homogeneous(1.0), -5)


def test_parallel_layer_resistance():
    assert parallel_layer_resistance(Layer(INSULATION, 140)) == pytest.approx(4.0)
    bridged = Layer(INSULATION, 140, BridgingElement(TIMBER, 15))
    expected = 1 / (0.85 / (0.14 / 0.035) + 0.15 / (0.14 / 0.13))
    assert parallel_layer_resistance(bridged) == pytest.approx(expected)


def test_layer_parts_must_be_typed():
    with pytest.raises(InvalidConstructionError):
        Layer("mineral-wool", 100)
    with pytest.raises(InvalidConstructionError):
        Layer(None, 100)
    with pytest.raises(InvalidConstructionError):
        Layer(INSULATION, 100, bridging={"material_id": "timber", "percentage": 15})
    with pytest.raises(InvalidConstructionError):
        BridgingElement("timber", 15)


def test_invalid_construction_is_a_value_error():
    with pytest.raises(ValueError):
        Construction(layers=[])


def test_zero_total_resistance_is_rejected():
    membrane = Material("m", "Membrane", "membrane", FixedResistance(0.0), 100)
    c = Construction(layers=[Layer(membrane, 1)], Rsi=0.0, Rse=0.0)
    with pytest.raises(NumericDegeneracyError):
        u_value(c)
    with pytest.raises(NumericDegeneracyError):
        u_value_without_bridging(c)
