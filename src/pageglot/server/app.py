"""
PageGlot - Translation Server
Flask application factory for the translation API.
"""

import logging
from typing import Optional

from flask import Flask

from overlay.translation.word_list import DictionaryStore, dictionary_store
from pageglot.controllers.translate_controller import TranslateController
from pageglot.core.managers.config_manager import ConfigManager, config_manager
from pageglot.core.managers.storage_manager import StorageBase, create_storage
from pageglot.server.routers.preferences_router import preferences_router
from pageglot.server.routers.translate_router import translate_router
from retriever.services.page_fetch_service import PageFetchService

logger = logging.getLogger(__name__)


def create_app(
        config: Optional[ConfigManager] = None,
        storage: Optional[StorageBase] = None,
        fetcher: Optional[PageFetchService] = None,
        store: Optional[DictionaryStore] = None,
        preload_dictionaries: bool = False,
) -> Flask:
    """
    Application factory. Collaborators can be injected; anything left out is
    built from settings.json.
    """
    flask_app = Flask(__name__)
    config = config or config_manager

    # 1. Initialize Data Layers
    storage = storage or create_storage(config)
    fetcher = fetcher or PageFetchService.from_config(config)
    store = store or dictionary_store
    if preload_dictionaries:
        store.preload()

    # 2. Initialize Controller
    controller = TranslateController(fetcher, storage, config=config, store=store)

    # 3. Inject into App Config for Blueprint access
    flask_app.config['TRANSLATE_CONTROLLER'] = controller
    flask_app.config['STORAGE'] = storage

    # 4. Register Blueprints
    flask_app.register_blueprint(translate_router, url_prefix='/api')
    flask_app.register_blueprint(preferences_router, url_prefix='/api')

    return flask_app
