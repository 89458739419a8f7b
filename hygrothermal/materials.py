from __future__ import annotations

import csv
import logging
import os
from pathlib import Path
from typing import Dict, Iterator, List, Optional

from .dataclasses import (
    BridgingElement,
    FixedResistance,
    Homogeneous,
    Layer,
    Material,
)
from .errors import InvalidConstructionError

logger = logging.getLogger(__name__)

ROOT = Path(__file__).resolve().parents[1]
MATERIALS_CSV = Path(os.environ.get("HYGROTHERMAL_MATERIALS_CSV", ROOT / 'context' / 'materials.csv'))


def _parse_float(s: str | float | int | None) -> Optional[float]:
    if s is None or str(s).strip() == "":
        return None
    if isinstance(s, (int, float)):
        return float(s)
    txt = str(s).strip().replace("\u00a0", " ").replace(" ", "").replace(",", ".")
    return float(txt)


def _require_float(s: str | float | int | None, field: str, row: int) -> float:
    """Parse *s* as float or raise ``ValueError`` with row context."""
    try:
        value = _parse_float(s)
    except ValueError as exc:
        raise ValueError(f"Invalid number for {field!r} in row {row}: {s}") from exc
    if value is None:
        raise ValueError(f"Missing value for {field!r} in row {row}")
    return value


def _optional_float(s: str | float | int | None, field: str, row: int) -> Optional[float]:
    try:
        return _parse_float(s)
    except ValueError as exc:
        raise ValueError(f"Invalid number for {field!r} in row {row}: {s}") from exc


def _get(row: Dict[str, str], *keys: str) -> Optional[str]:
    lowered = {(k or '').strip().lower(): v for k, v in row.items()}
    for key in keys:
        value = lowered.get(key)
        if value is not None and str(value).strip() != "":
            return value
    return None


def load_materials(path: Optional[Path] = None) -> List[Material]:
    """Load the material reference table from context/materials.csv if present.

    Expected columns (case-insensitive, flexible order):
    id, name, category, lambda, R, mu, rho, cp

    ``lambda`` may be left empty when ``R`` gives a fixed thermal resistance
    (air gaps). ``mu`` is the vapour resistivity in MN·s/(g·m).
    """
    path = MATERIALS_CSV if path is None else Path(path)
    if not path.exists():
        logger.info("No material table at %s", path)
        return []
    out: List[Material] = []
    with path.open('r', encoding='utf-8') as f:
        rdr = csv.DictReader(f)
        for idx, row in enumerate(rdr, start=2):  # header is row 1
            if not any((v or '').strip() for v in row.values() if isinstance(v, str)):
                continue
            name = (_get(row, 'name') or '').strip()
            if not name:
                raise ValueError(f"Error parsing {path.name}: missing value for 'name' in row {idx}")
            try:
                R = _optional_float(_get(row, 'r', 'thermal_resistance'), 'R', idx)
                if R is not None:
                    thermal = FixedResistance(R)
                else:
                    thermal = Homogeneous(_require_float(_get(row, 'lambda', 'lambda_'), 'lambda', idx))
                out.append(Material(
                    id=(_get(row, 'id') or name).strip(),
                    name=name,
                    category=(_get(row, 'category') or 'custom').strip().lower(),
                    thermal=thermal,
                    vapour_resistivity=_require_float(_get(row, 'mu', 'vapour_resistivity'), 'mu', idx),
                    density=_optional_float(_get(row, 'rho', 'density'), 'rho', idx) or 0.0,
                    specific_heat=_optional_float(_get(row, 'cp', 'specific_heat'), 'cp', idx) or 0.0,
                    description=(_get(row, 'description') or '').strip(),
                ))
            except ValueError as exc:
                raise ValueError(f"Error parsing {path.name}: {exc}") from exc
    logger.debug("Loaded %d materials from %s", len(out), path)
    return out


class MaterialRepository:
    """Materials keyed by id.

    Passed explicitly to whatever needs to resolve material ids, so several
    independent tables can coexist (reference data, a user's custom
    materials, test fixtures).
    """

    def __init__(self, materials: Optional[List[Material]] = None):
        self._by_id: Dict[str, Material] = {}
        for m in materials or []:
            self.add(m)

    @classmethod
    def from_csv(cls, path: Optional[Path] = None) -> "MaterialRepository":
        return cls(load_materials(path))

    def add(self, material: Material) -> None:
        self._by_id[material.id] = material

    def get(self, material_id: str) -> Optional[Material]:
        return self._by_id.get(material_id)

    def search(self, query: str = "") -> List[Material]:
        q = query.strip().lower()
        return [
            m for m in self._by_id.values()
            if not q or q in m.name.lower() or q in m.id.lower() or q == m.category
        ]

    def __contains__(self, material_id: object) -> bool:
        return material_id in self._by_id

    def __iter__(self) -> Iterator[Material]:
        return iter(self._by_id.values())

    def __len__(self) -> int:
        return len(self._by_id)


def material_to_dict(material: Material) -> Dict[str, object]:
    return {
        'id': material.id,
        'name': material.name,
        'category': material.category,
        'lambda': material.thermal_conductivity,
        'R': material.thermal_resistance,
        'mu': material.vapour_resistivity,
        'rho': material.density,
        'cp': material.specific_heat,
        'description': material.description,
        'is_custom': material.is_custom,
    }


def material_from_dict(data: Dict[str, object]) -> Material:
    """Build a :class:`Material` from the payload of :func:`material_to_dict`."""
    name = str(data.get('name') or data.get('id') or 'Custom material')
    R = data.get('R')
    lambda_ = data.get('lambda')
    if R is not None:
        thermal = FixedResistance(float(R))
    elif lambda_ is not None:
        thermal = Homogeneous(float(lambda_))
    else:
        raise InvalidConstructionError(f"Material {name!r} needs either 'lambda' or 'R'")
    return Material(
        id=str(data.get('id') or name),
        name=name,
        category=str(data.get('category') or 'custom'),
        thermal=thermal,
        vapour_resistivity=float(data.get('mu', 0.0)),
        density=float(data.get('rho') or 0.0),
        specific_heat=float(data.get('cp') or 0.0),
        description=str(data.get('description') or ''),
        is_custom=bool(data.get('is_custom', True)),
    )


def _custom_payload(material: Material, repository: MaterialRepository) -> Optional[Dict[str, object]]:
    # Materials the repository cannot resolve travel with their full payload
    if material.id in repository:
        return None
    return material_to_dict(material)


def serialize_layers(layers: List[Layer], repository: MaterialRepository) -> List[Dict[str, object]]:
    """Store layers as material ids, embedding materials unknown to ``repository``."""
    out: List[Dict[str, object]] = []
    for layer in layers:
        bridging = None
        if layer.bridging is not None:
            bridging = {
                'material_id': layer.bridging.material.id,
                'custom_material': _custom_payload(layer.bridging.material, repository),
                'percentage': layer.bridging.percentage,
            }
        out.append({
            'id': layer.id,
            'material_id': layer.material.id,
            'custom_material': _custom_payload(layer.material, repository),
            'thickness': layer.thickness,
            'bridging': bridging,
        })
    return out


def _resolve(material_id: object, custom: object, repository: MaterialRepository) -> Optional[Material]:
    material = repository.get(str(material_id)) if material_id is not None else None
    if material is None and custom:
        material = material_from_dict(custom)  # type: ignore[arg-type]
    return material


def deserialize_layers(data: List[Dict[str, object]], repository: MaterialRepository) -> List[Layer]:
    """Restore layers stored by :func:`serialize_layers`.

    Ids are looked up in ``repository`` first, then in the embedded payload.
    Layers whose material cannot be resolved are skipped; an unresolvable
    bridging material drops only the bridging.
    """
    layers: List[Layer] = []
    for idx, item in enumerate(data):
        material = _resolve(item.get('material_id'), item.get('custom_material'), repository)
        if material is None:
            logger.warning("Material not found for layer %d: %r", idx, item.get('material_id'))
            continue
        bridging = None
        b = item.get('bridging')
        if b:
            b_material = _resolve(b.get('material_id'), b.get('custom_material'), repository)
            if b_material is None:
                logger.warning("Bridging material not found for layer %d: %r", idx, b.get('material_id'))
            else:
                bridging = BridgingElement(b_material, float(b['percentage']))
        layers.append(Layer(
            material=material,
            thickness=float(item['thickness']),
            bridging=bridging,
            id=str(item.get('id') or ''),
        ))
    return layers
