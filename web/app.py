"""
Contract Tracker - Web Application
JSON endpoints for the contract list, contract CRUD with file attachments,
and the financial analysis dashboard.
"""

import sys
import sqlite3
import logging
from datetime import date
from pathlib import Path
from typing import Dict, Any

from flask import Flask, Blueprint, current_app, jsonify, request, send_file, url_for
from flask_cors import CORS

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from contract_tracker.config import Config
from contract_tracker.contract_list import filter_contracts
from contract_tracker.contract_status import derive_status
from contract_tracker.database import DatabaseManager
from contract_tracker.file_storage import LocalFileStorage, UnsafePathError
from contract_tracker.models import ContractValidationError, validate_contract_payload
from contract_tracker.spend_analysis import SpendAnalysisEngine, load_analysis

bp = Blueprint('contracts', __name__)


def get_db() -> DatabaseManager:
    return current_app.extensions['contract_db']


def get_storage() -> LocalFileStorage:
    return current_app.extensions['contract_files']


def get_engine() -> SpendAnalysisEngine:
    return current_app.extensions['spend_engine']


def _payload() -> Dict[str, Any]:
    """Request body from JSON or form fields."""
    data = request.get_json(silent=True)
    if isinstance(data, dict):
        return data
    return request.form.to_dict()


def _uploaded_file():
    file = request.files.get('contract_file')
    if file and file.filename:
        return file
    return None


def _contract_detail(contract) -> Dict:
    data = contract.to_dict()
    data.update(derive_status(contract, date.today()).to_dict())
    data['file_url'] = url_for('contracts.download_file', filepath=contract.file_path) if contract.file_path else None
    return data


# ==========================
# LIST VIEW
# ==========================

@bp.route('/')
@bp.route('/api/contracts')
def contracts_list():
    """All contracts with search, filters and sorting."""
    df = get_db().get_all_contracts()
    result = filter_contracts(
        df,
        search=request.args.get('search', ''),
        contract_type=request.args.get('type', ''),
        vendor=request.args.get('vendor', ''),
        status=request.args.get('status', ''),
        sort_by=request.args.get('sort', ''),
        descending=request.args.get('order', 'asc') == 'desc',
    )
    return jsonify(result)


# ==========================
# ANALYSIS
# ==========================

@bp.route('/analysis')
@bp.route('/api/analysis')
def analysis_dashboard():
    """Financial analysis KPIs over the requested date range."""
    result = load_analysis(
        get_db(),
        start=request.args.get('start'),
        end=request.args.get('end'),
        engine=get_engine(),
    )
    return jsonify(result.to_dict())


# ==========================
# CONTRACT CRUD
# ==========================

@bp.route('/api/contracts', methods=['POST'])
def api_create_contract():
    """Create a contract, optionally with an attached file."""
    data = validate_contract_payload(_payload())

    storage = get_storage()
    file = _uploaded_file()
    if file is not None:
        try:
            data['file_path'] = storage.save(file)
        except OSError as e:
            logger.error(f"Could not upload file: {e}")
            return jsonify({'error': 'Could not upload file.', 'details': str(e)}), 500

    try:
        contract_id = get_db().create_contract(data)
    except sqlite3.Error as e:
        logger.error(f"Could not save contract: {e}")
        if data.get('file_path'):
            storage.delete(data['file_path'])
        return jsonify({'error': 'Could not save the contract.', 'details': str(e)}), 500

    return jsonify({'success': True, 'id': contract_id}), 201


@bp.route('/api/contracts/<int:contract_id>')
def api_contract(contract_id):
    """Get a single contract."""
    contract = get_db().get_contract(contract_id)
    if not contract:
        return jsonify({'error': 'Contract not found'}), 404
    return jsonify(_contract_detail(contract))


@bp.route('/api/contracts/<int:contract_id>', methods=['PUT', 'POST'])
def api_update_contract(contract_id):
    """Update a contract. A newly uploaded file replaces the old one."""
    db = get_db()
    existing = db.get_contract(contract_id)
    if not existing:
        return jsonify({'error': f'Contract with id {contract_id} not found'}), 404

    data = validate_contract_payload(_payload())

    storage = get_storage()
    file = _uploaded_file()
    if file is not None:
        try:
            data['file_path'] = storage.save(file)
        except OSError as e:
            logger.error(f"Could not upload file: {e}")
            return jsonify({'error': 'Could not upload file.', 'details': str(e)}), 500

    try:
        updated = db.update_contract(contract_id, data)
    except sqlite3.Error as e:
        logger.error(f"Failed to update contract {contract_id}: {e}")
        if file is not None:
            _discard_file(data['file_path'])
        return jsonify({'error': 'Failed to update contract.', 'details': str(e)}), 500

    if not updated:
        # Removed between the lookup and the write
        if file is not None:
            _discard_file(data['file_path'])
        return jsonify({'error': f'Contract with id {contract_id} not found'}), 404

    if file is not None and existing.file_path:
        _discard_file(existing.file_path)

    return jsonify({'success': True, 'id': contract_id})


@bp.route('/api/contracts/<int:contract_id>', methods=['DELETE'])
def api_delete_contract(contract_id):
    """Delete a contract and its attached file."""
    db = get_db()
    contract = db.get_contract(contract_id)
    if not contract:
        return jsonify({'error': 'Contract not found'}), 404

    try:
        db.delete_contract(contract_id)
    except sqlite3.Error as e:
        logger.error(f"Failed to delete contract {contract_id}: {e}")
        return jsonify({'error': 'Failed to delete contract.', 'details': str(e)}), 500

    if contract.file_path:
        _discard_file(contract.file_path)

    return jsonify({'success': True})


def _discard_file(reference: str):
    try:
        get_storage().delete(reference)
    except (UnsafePathError, OSError) as e:
        logger.error(f"Could not delete contract file {reference}: {e}")


# ==========================
# FILES
# ==========================

@bp.route('/uploads/<path:filepath>')
def download_file(filepath):
    """Stream an attached contract file."""
    try:
        path = get_storage().resolve(filepath)
    except UnsafePathError:
        return jsonify({'error': 'Forbidden'}), 403
    if path is None:
        return jsonify({'error': 'Not Found'}), 404
    return send_file(path, mimetype='application/octet-stream')


# ==========================
# ERRORS
# ==========================

@bp.app_errorhandler(ContractValidationError)
def handle_validation_error(error):
    return jsonify({'error': error.message, 'details': error.details}), 400


# ==========================
# APP FACTORY
# ==========================

def create_app(config_overrides: Dict[str, Any] = None) -> Flask:
    """Build the Flask app with its own contract store, file storage and analysis engine."""
    app = Flask(__name__)
    app.config.from_object(Config)
    if config_overrides:
        app.config.update(config_overrides)
    CORS(app)

    app.extensions['contract_db'] = DatabaseManager(app.config['DATABASE_PATH'])
    app.extensions['contract_files'] = LocalFileStorage(app.config['UPLOAD_DIR'])
    app.extensions['spend_engine'] = SpendAnalysisEngine(
        yearly_policy=app.config['YEARLY_PAYMENT_POLICY'],
        top_n=app.config['TOP_CONTRACTS_LIMIT'],
    )

    app.register_blueprint(bp)
    return app


if __name__ == '__main__':
    app = create_app()

    # Check if we need to generate sample data
    with app.app_context():
        if not get_db().list_all():
            logger.info("No contracts found, generating sample data...")
            from data.sample_data import generate_sample_data
            generate_sample_data(get_db())

    app.run(debug=True, port=5002)
