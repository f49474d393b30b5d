import logging

from flask import Blueprint, current_app, jsonify, request

from overlay.translation.factory import STRATEGY_NAMES
from overlay.translation.languages import supported_languages
from pageglot.core.errors import PipelineError
from pageglot.core.loop_runner import run_on_main_loop

logger = logging.getLogger(__name__)

translate_router = Blueprint('translate_router', __name__)


# --- HELPER FUNCTIONS ---

def get_translate_controller():
    """Retrieves the translate controller from the Flask application context."""
    controller = current_app.config.get('TRANSLATE_CONTROLLER')
    if not controller:
        raise RuntimeError("TranslateController is not set in app.config['TRANSLATE_CONTROLLER']")
    return controller


def error_response(error: PipelineError):
    return jsonify(error.to_dict()), error.http_status


# --- API ROUTES ---

@translate_router.route('/translate', methods=['POST'])
def translate():
    """
    Fetches, transforms and returns a page as standalone HTML.
    The body is validated before any network access.
    """
    controller = get_translate_controller()
    payload = request.get_json(silent=True)

    try:
        outcome = run_on_main_loop(controller.translate(payload, cookie=request.headers.get('Cookie')))
    except PipelineError as e:
        if e.http_status >= 500:
            logger.error("Translation error: %s", e.message)
        else:
            logger.info("Translation rejected (%s): %s", e.http_status, e.message)
        return error_response(e)
    except Exception as e:
        logger.error(f"Unexpected translation error: {e}", exc_info=True)
        return jsonify({"error": "Failed to translate webpage", "details": str(e) or "Unknown error"}), 500

    response = jsonify({"html": outcome.html})
    for cookie in outcome.set_cookies:
        response.headers.add('Set-Cookie', cookie)
    return response


@translate_router.route('/translations', methods=['GET'])
def list_translations():
    """Lists the stored translation records for one source URL."""
    url = request.args.get('url')
    if not url:
        return jsonify({"error": "Invalid input", "details": "Missing required parameter 'url'"}), 400

    try:
        records = run_on_main_loop(get_translate_controller().storage.get_translations(url))
        return jsonify([r.model_dump(mode='json', by_alias=True) for r in records])
    except Exception as e:
        logger.error(f"Error fetching translations: {e}", exc_info=True)
        return jsonify({"error": str(e)}), 500


@translate_router.route('/languages', methods=['GET'])
def list_languages():
    """Lists the supported languages and transformation strategies."""
    controller = get_translate_controller()
    return jsonify({
        "languages": supported_languages(),
        "strategies": list(STRATEGY_NAMES),
        "activeStrategy": controller.config.get_nested("translation.strategy", "pattern"),
    })
