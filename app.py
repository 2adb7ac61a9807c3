import logging
from datetime import datetime
from flask import Flask, request, jsonify
from flask_cors import CORS

# Import configuration and pipeline components
from config import API_HOST, API_PORT, API_DEBUG, API_VERSION, LOG_LEVEL
from analysis_store import AnalysisStore
from database import init_db
from errors import InputError, PipelineError
from pipeline import ContractPipeline
from utils import error_response

# Setup logging
logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")
logger = logging.getLogger(__name__)

# --- FLASK APP SETUP ---
app = Flask(__name__)
CORS(app)  # Cross-Origin Resource Sharing configuration for frontend compatibility

# Table registration happens once, before any request is served
init_db()

_pipeline = None

logger.info("Flask application initialized")


def get_pipeline() -> ContractPipeline:
    """Process-wide pipeline, built on first use."""
    global _pipeline
    if _pipeline is None:
        _pipeline = ContractPipeline(store=AnalysisStore())
    return _pipeline


def _request_data():
    """Fields from a JSON body or, failing that, from form data."""
    data = request.get_json(silent=True)
    if isinstance(data, dict):
        return data
    return request.form


def _serialize(record):
    return record.model_dump(mode="json", by_alias=True)

# --- API ENDPOINTS ---

@app.route('/ping', methods=['GET'])
def ping():
    """
    Health check endpoint to verify the server is running.
    Returns server status and timestamp.
    """
    return jsonify({
        "status": "ok",
        "message": "Contract Analysis API is running",
        "timestamp": datetime.now().isoformat(),
        "version": API_VERSION
    }), 200


@app.route('/contracts/detect', methods=['POST'])
def detect_contract_type():
    """
    Detects the contract type of an uploaded PDF.
    """
    try:
        data = _request_data()
        file_url = data.get('fileUrl')

        logger.info(f"Detecting contract type for: {file_url}")
        detected_type = get_pipeline().detect(file_url)
        return jsonify({"detectedType": detected_type.value}), 200

    except PipelineError as e:
        body, status = error_response(e)
        return jsonify(body), status
    except Exception as e:
        logger.error(f"Contract type detection failed: {str(e)}", exc_info=True)
        return jsonify({"error": "An unexpected error occurred while detecting the contract type."}), 500


@app.route('/contracts/analyze', methods=['POST'])
def analyze_contract():
    """
    Runs the full analysis pipeline for an uploaded PDF and returns the stored record.
    The contract type is detected when not supplied.
    """
    try:
        data = _request_data()
        file_url = data.get('fileUrl')
        user_id = data.get('userId')
        contract_type = data.get('contractType') or None

        record = get_pipeline().run(file_url, user_id, contract_type)

        logger.info(f"Contract analyzed successfully: {record.id}")
        return jsonify(_serialize(record)), 200

    except PipelineError as e:
        body, status = error_response(e)
        return jsonify(body), status
    except Exception as e:
        logger.error(f"Contract analysis failed: {str(e)}", exc_info=True)
        return jsonify({"error": "An unexpected error occurred during analysis."}), 500


@app.route('/contracts/<contract_id>', methods=['GET'])
def get_contract(contract_id):
    """
    Returns one stored analysis by id.
    """
    try:
        record = get_pipeline().store.find_by_id(contract_id)
        if record is None:
            return jsonify({"error": "Contract not found"}), 404
        return jsonify(_serialize(record)), 200

    except PipelineError as e:
        body, status = error_response(e)
        return jsonify(body), status
    except Exception as e:
        logger.error(f"Unexpected error while fetching the contract: {str(e)}", exc_info=True)
        return jsonify({"error": "An unexpected error occurred while fetching the contract."}), 500


@app.route('/contracts/user-contracts', methods=['GET'])
def get_user_contracts():
    """
    Returns the analyses owned by the user given in the ``userId`` query parameter.
    """
    try:
        user_id = request.args.get('userId')
        if not user_id:
            raise InputError("Missing userId in query parameters")

        records = get_pipeline().store.find_by_owner(user_id)
        return jsonify([_serialize(record) for record in records]), 200

    except PipelineError as e:
        body, status = error_response(e)
        return jsonify(body), status
    except Exception as e:
        logger.error(f"Unexpected error while fetching the user's contracts: {str(e)}", exc_info=True)
        return jsonify({"error": "An unexpected error occurred while fetching the user's contracts."}), 500


@app.route('/contracts', methods=['GET'])
def list_contracts():
    """
    Returns every analysis with its owner's display name.
    """
    try:
        records = get_pipeline().store.list_with_owner_names()
        return jsonify([_serialize(record) for record in records]), 200

    except PipelineError as e:
        body, status = error_response(e)
        return jsonify(body), status
    except Exception as e:
        logger.error(f"Unexpected error while listing contracts: {str(e)}", exc_info=True)
        return jsonify({"error": "An unexpected error occurred while listing contracts."}), 500

# --- RUN THE APP ---
if __name__ == '__main__':
    logger.info(f"Starting Contract Analysis API on {API_HOST}:{API_PORT}")
    app.run(host=API_HOST, port=API_PORT, debug=API_DEBUG)
