import logging
import os
import sys
from pathlib import Path
from typing import Optional

from flask import Flask, request, jsonify

# Ensure repository root is on sys.path for package import
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.append(str(ROOT))

from hygrothermal.climate import UK_REGIONS, regional_climate, surface_resistances, with_internal_conditions
from hygrothermal.core import analyze
from hygrothermal.dataclasses import ClimateMonth, ClimateSeries, Construction, GroundFloorParams
from hygrothermal.errors import HygrothermalError, InvalidConstructionError
from hygrothermal.materials import MaterialRepository, deserialize_layers, material_to_dict
from hygrothermal.report import report

app = Flask(__name__)

EXAMPLE_REQUEST = {
    'construction': {
        'name': 'Insulated stud wall',
        'element_type': 'wall',
        'Rsi': 0.13,
        'Rse': 0.04,
        'layers': [
            {'material_id': 'plasterboard', 'thickness': 12.5},
            {'material_id': 'mineral-wool', 'thickness': 140,
             'bridging': {'material_id': 'softwood', 'percentage': 15}},
            {'material_id': 'osb', 'thickness': 11},
        ],
    },
    'climate': {'region': 'london', 'theta_i': 20, 'phi_i': 60},
    'ground': None,
}


def _unresolved_material_ids(items: list, repository: MaterialRepository) -> list:
    missing = []
    for item in items:
        refs = [item]
        if isinstance(item, dict) and item.get('bridging'):
            refs.append(item['bridging'])
        for ref in refs:
            if not isinstance(ref, dict):
                raise InvalidConstructionError(f"Layer and bridging entries must be JSON objects, got {ref!r}")
            if ref.get('custom_material') or ref.get('material_id') in repository:
                continue
            missing.append(ref.get('material_id'))
    return missing


def _construction_from_json(data: dict, repository: MaterialRepository) -> Construction:
    items = data.get('layers') or []
    missing = _unresolved_material_ids(items, repository)
    if missing:
        raise InvalidConstructionError(
            'Unknown material id(s): ' + ', '.join(repr(m) for m in missing)
        )
    layers = deserialize_layers(items, repository)
    element_type = data.get('element_type', 'wall')
    Rsi, Rse = surface_resistances(element_type, data.get('exposure', 'normal'))
    return Construction(
        layers=layers,
        element_type=element_type,
        Rsi=Rsi if data.get('Rsi') is None else float(data['Rsi']),
        Rse=Rse if data.get('Rse') is None else float(data['Rse']),
        name=str(data.get('name', '')),
    )


def _climate_from_json(data: dict) -> ClimateSeries:
    months = data.get('months')
    if months:
        climate = ClimateSeries(tuple(
            ClimateMonth(
                str(m.get('month', f'Month {idx + 1}')),
                theta_e=float(m['theta_e']),
                phi_e=float(m['phi_e']),
                theta_i=float(m['theta_i']),
                phi_i=float(m['phi_i']),
            )
            for idx, m in enumerate(months)
        ))
    else:
        climate = regional_climate(str(data.get('region', 'london')))
    theta_i = data.get('theta_i')
    phi_i = data.get('phi_i')
    if theta_i is not None or phi_i is not None:
        climate = with_internal_conditions(
            climate,
            theta_i=None if theta_i is None else float(theta_i),
            phi_i=None if phi_i is None else float(phi_i),
        )
    return climate


def _ground_from_json(data) -> Optional[GroundFloorParams]:
    if not data:
        return None
    kwargs = {
        'perimeter': float(data['perimeter']),
        'area': float(data['area']),
        'floor_type': data.get('floor_type', 'ground'),
    }
    if data.get('wall_thickness') is not None:
        kwargs['wall_thickness'] = float(data['wall_thickness'])
    if data.get('soil_type'):
        kwargs['soil_type'] = data['soil_type']
    if data.get('soil_conductivity') is not None:
        kwargs['soil_conductivity'] = float(data['soil_conductivity'])
    return GroundFloorParams(**kwargs)


def _run_analysis(data: dict):
    repository = MaterialRepository.from_csv()
    construction = _construction_from_json(data.get('construction') or {}, repository)
    climate = _climate_from_json(data.get('climate') or {})
    ground = _ground_from_json(data.get('ground'))
    return analyze(construction, climate, ground)


@app.route('/', methods=['GET'])
def index():
    return jsonify({
        'ok': True,
        'usage': 'POST JSON to /analyze or /report with {construction, climate, ground}',
        'example': EXAMPLE_REQUEST,
        'regions': sorted(UK_REGIONS),
    })


@app.route('/analyze', methods=['POST'])
def analyze_api():
    data = request.get_json(force=True, silent=True)
    if not isinstance(data, dict):
        return jsonify({'ok': False, 'error': 'Request body must be a JSON object'}), 400
    try:
        result = _run_analysis(data)
    except (HygrothermalError, KeyError, TypeError, ValueError) as e:
        return jsonify({'ok': False, 'error': str(e)}), 400
    except Exception as e:
        app.logger.exception("Analysis failed")
        return jsonify({'ok': False, 'error': str(e)}), 500
    return jsonify({'ok': True, 'result': result.as_dict()})


@app.route('/report', methods=['POST'])
def report_api():
    data = request.get_json(force=True, silent=True)
    if not isinstance(data, dict):
        return jsonify({'ok': False, 'error': 'Request body must be a JSON object'}), 400
    try:
        result = _run_analysis(data)
        html = report(result)
    except (HygrothermalError, KeyError, TypeError, ValueError) as e:
        return jsonify({'ok': False, 'error': str(e)}), 400
    except Exception as e:
        app.logger.exception("Report rendering failed")
        return jsonify({'ok': False, 'error': str(e)}), 500
    return html, 200, {'Content-Type': 'text/html; charset=utf-8'}


@app.route('/materials', methods=['GET'])
def materials_api():
    repository = MaterialRepository.from_csv()
    mats = repository.search(request.args.get('q', ''))
    return jsonify({'ok': True, 'materials': [material_to_dict(m) for m in mats]})


@app.route('/climate/<region>', methods=['GET'])
def climate_api(region):
    if region not in UK_REGIONS:
        return jsonify({'ok': False, 'error': f'Unknown region {region!r}', 'regions': sorted(UK_REGIONS)}), 404
    climate = regional_climate(region)
    return jsonify({
        'ok': True,
        'region': region,
        'name': UK_REGIONS[region]['name'],
        'months': [vars(m) for m in climate],
    })


@app.errorhandler(405)
def handle_405(e):
    return jsonify({'ok': False, 'error': 'Method Not Allowed', 'hint': 'GET / for usage, POST JSON to /analyze'}), 405


if __name__ == '__main__':
    logging.basicConfig(
        level=os.environ.get('HYGROTHERMAL_LOG_LEVEL', 'INFO').upper(),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )
    app.run(debug=True)
