import json
import logging

from flask import Blueprint, current_app, jsonify, request
from pydantic import ValidationError as PydanticValidationError

from pageglot.core.loop_runner import run_on_main_loop
from pageglot.model import PreferencesUpdate

logger = logging.getLogger(__name__)

preferences_router = Blueprint('preferences_router', __name__)


def get_storage():
    """Retrieves the storage backend from the Flask application context."""
    storage = current_app.config.get('STORAGE')
    if not storage:
        raise RuntimeError("Storage is not set in app.config['STORAGE']")
    return storage


@preferences_router.route('/preferences', methods=['GET', 'POST'])
def preferences_route():
    """Retrieves the preferences singleton, or merges a partial update into it."""
    storage = get_storage()

    if request.method == 'POST':
        payload = request.get_json(silent=True)
        if not isinstance(payload, dict):
            return jsonify({"error": "Invalid input", "details": "Request body must be a JSON object"}), 400
        try:
            update = PreferencesUpdate.model_validate(payload)
        except PydanticValidationError as e:
            return jsonify({"error": "Invalid input", "details": json.loads(e.json(include_url=False))}), 400

    try:
        if request.method == 'POST':
            preferences = run_on_main_loop(storage.update_preferences(update))
            logger.info("Preferences updated: %s", update.model_dump(exclude_unset=True))
        else:
            preferences = run_on_main_loop(storage.get_preferences())
    except Exception as e:
        logger.error("Preferences storage failed: %s", e, exc_info=True)
        return jsonify({"error": "Failed to access preferences", "details": str(e) or "Unknown error"}), 500

    return jsonify(preferences.model_dump(by_alias=True))
