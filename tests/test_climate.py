import sys
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from hygrothermal.climate import (
    UK_MONTHLY_CLIMATE,
    UK_REGIONS,
    regional_climate,
    surface_resistances,
    with_internal_conditions,
)
from hygrothermal.errors import InvalidConstructionError


def test_base_series_is_a_full_year():
    assert len(UK_MONTHLY_CLIMATE) == 12
    assert UK_MONTHLY_CLIMATE[0].month == "January"
    assert UK_MONTHLY_CLIMATE[-1].month == "December"


def test_london_is_the_base_series():
    assert tuple(regional_climate("london")) == tuple(UK_MONTHLY_CLIMATE)


def test_unknown_region_falls_back_to_base():
    assert tuple(regional_climate("atlantis")) == tuple(UK_MONTHLY_CLIMATE)


@pytest.mark.parametrize("region_id", sorted(UK_REGIONS))
def test_regional_offsets(region_id):
    region = UK_REGIONS[region_id]
    for base, month in zip(UK_MONTHLY_CLIMATE, regional_climate(region_id)):
        assert month.month == base.month
        assert month.theta_e == pytest.approx(base.theta_e + region["temp_offset"], abs=0.05)
        assert month.phi_e == min(100, base.phi_e + region["rh_offset"])
        assert month.theta_i == base.theta_i
        assert month.phi_i == base.phi_i


def test_regional_rh_is_clamped():
    # December is 87 % in the base series
    highland = regional_climate("scotland-highland")
    assert all(m.phi_e <= 100 for m in highland)
    assert highland[11].phi_e == 92


def test_with_internal_conditions():
    base = regional_climate("wales")
    humid = with_internal_conditions(base, phi_i=70)
    assert all(m.phi_i == 70 for m in humid)
    assert [m.theta_i for m in humid] == [m.theta_i for m in base]
    warm = with_internal_conditions(base, theta_i=23)
    assert all(m.theta_i == 23 for m in warm)
    assert [m.phi_i for m in warm] == [m.phi_i for m in base]


@pytest.mark.parametrize("element_type, expected", [
    ("wall", (0.13, 0.04)),
    ("junction", (0.13, 0.04)),
    ("roof", (0.10, 0.04)),
    ("floor", (0.17, 0.04)),
])
def test_surface_resistances_follow_heat_flow(element_type, expected):
    assert surface_resistances(element_type) == expected


def test_surface_resistances_exposure():
    assert surface_resistances("wall", "sheltered") == (0.13, 0.06)
    assert surface_resistances("roof", "exposed") == (0.10, 0.02)
    with pytest.raises(InvalidConstructionError):
        surface_resistances("wall", "windswept")
