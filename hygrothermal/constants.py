# Named constants used across the hygrothermal engine.
#
# Sources:
#   BS EN ISO 6946:2017   (surface resistances, combined method)
#   BS EN ISO 13370:2017  (ground floors, soil conductivity Table 7)
#   BS EN ISO 13788:2012  (Glaser method, Annex C surface criterion)
#   Approved Document L 2021, Volume 1, Table 4.1 (limiting U-values)

from __future__ import annotations

from typing import Dict

# ─────────────────────────────────────────────────────────────────────────────
# Psychrometrics (Magnus formula)
# ─────────────────────────────────────────────────────────────────────────────

MAGNUS_P0_PA: float = 610.78
MAGNUS_A: float = 17.27
MAGNUS_B_C: float = 237.7  # °C

ABSOLUTE_ZERO_C: float = -273.15

# MN·s/(g·m) × m → s/g
VAPOUR_RESISTANCE_UNIT_FACTOR: float = 1e9

# Still air, used to turn vapour resistivity into μ and Sd
STILL_AIR_VAPOUR_RESISTIVITY: float = 5.0  # MN·s/(g·m)

# ─────────────────────────────────────────────────────────────────────────────
# Monthly moisture simulation
#
# Approximations; BS EN ISO 13788 has no clause for these figures.
# ─────────────────────────────────────────────────────────────────────────────

CONDENSATION_SCALE: float = 0.1           # g/m² per Pa of excess pressure
EVAPORATION_BASE_TEMP_C: float = 5.0      # °C, no drying at or below
EVAPORATION_RATE_PER_K: float = 2.0       # g/m² per K above the base

# Year-end moisture at or below this counts as fully dried out
YEAR_END_MOISTURE_THRESHOLD_G_M2: float = 0.01

# ─────────────────────────────────────────────────────────────────────────────
# Surface condensation
# ─────────────────────────────────────────────────────────────────────────────

# fRsi used when internal and external temperatures coincide
ISOTHERMAL_TEMPERATURE_FACTOR: float = 0.5

# ─────────────────────────────────────────────────────────────────────────────
# Ground floors (BS EN ISO 13370)
# ─────────────────────────────────────────────────────────────────────────────

SOIL_CONDUCTIVITY: Dict[str, float] = {
    "clay_silt": 1.5,
    "sand_gravel": 2.0,
    "homogeneous_rock": 3.5,
}
DEFAULT_SOIL_TYPE: str = "clay_silt"
DEFAULT_WALL_THICKNESS_M: float = 0.3

SOLID_FLOOR_POOR_INSULATION_COEFF: float = 0.457

# Suspended floor ventilation heuristic
UNDERFLOOR_VENT_AREA_M2_PER_M: float = 0.0015
UNDERFLOOR_VOID_HEIGHT_M: float = 0.3
UNDERFLOOR_VENT_CONSTANT: float = 1450.0

MIN_GROUND_U_VALUE: float = 0.01  # W/m²K

# ─────────────────────────────────────────────────────────────────────────────
# Climate sanity ranges
# ─────────────────────────────────────────────────────────────────────────────

MONTHS_PER_YEAR: int = 12
MIN_AIR_TEMP_C: float = -50.0
MAX_AIR_TEMP_C: float = 60.0

# ─────────────────────────────────────────────────────────────────────────────
# Limiting fabric U-values (Approved Document L 2021 Vol. 1 Table 4.1)
# ─────────────────────────────────────────────────────────────────────────────

PART_L_LIMITING_U: Dict[str, float] = {
    "wall": 0.26,
    "roof": 0.16,
    "floor": 0.18,
}
