# src/pageglot/core/managers/config_manager.py
import json
import logging
import os
from typing import Any, Dict, Mapping, Optional

from pageglot.core.utils.path_utils import PathUtils

logger = logging.getLogger(__name__)

ENV_PREFIX = "PAGEGLOT_"
ENV_SEPARATOR = "__"

_TRUE_STRINGS = ("1", "true", "yes", "on")


def cast_like(original: Any, value: Any) -> Any:
    """
    Casts `value` to the type of `original`. Containers and unset values
    are not cast; a failed cast keeps the value as given.
    """
    if original is None or isinstance(original, (dict, list)):
        return value
    if isinstance(original, bool):
        if isinstance(value, str):
            return value.strip().lower() in _TRUE_STRINGS
        return bool(value)
    try:
        return type(original)(value)
    except (ValueError, TypeError):
        logger.warning("Could not cast %r to %s. Storing as given.", value, type(original).__name__)
        return value


class ConfigManager:
    """
    Singleton holding the application settings.

    Layers, lowest first: the bundled settings.json, then PAGEGLOT_* environment
    variables, then in-memory changes made through `set_nested`. `reset` drops
    the in-memory layer.
    """
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super(ConfigManager, cls).__new__(cls)
            cls._instance._config = {}
            cls._instance.reset()
        return cls._instance

    # --- READ ---

    def get_all(self) -> Dict[str, Any]:
        return self._config

    def get_section(self, name: str) -> Dict[str, Any]:
        """Returns a top-level section, or an empty dict when it is missing."""
        section = self._config.get(name)
        return section if isinstance(section, dict) else {}

    def get_nested(self, key_path: str, default: Optional[Any] = None) -> Any:
        """
        Looks up a dotted path such as 'fetcher.timeout'. Missing keys and
        explicit nulls both yield `default`.
        """
        node: Any = self._config
        for key in key_path.split('.'):
            if not isinstance(node, dict):
                return default
            node = node.get(key)
        return default if node is None else node

    # --- WRITE ---

    def set_nested(self, key_path: str, value: Any) -> bool:
        """
        Sets a dotted path in memory, casting to the type of the value it
        replaces (e.g. 'translation.concurrent_persistence', 'true').
        Returns False when a parent on the path is not a section.
        """
        *parents, leaf = key_path.split('.')
        section = self._config
        for key in parents:
            section = section.setdefault(key, {})
            if not isinstance(section, dict):
                logger.error("Cannot set '%s': '%s' is not a section.", key_path, key)
                return False

        section[leaf] = cast_like(section.get(leaf), value)
        logger.info("Configuration updated: %s = %s", key_path, section[leaf])
        return True

    def reset(self) -> None:
        """Reloads settings.json and re-applies environment overrides."""
        self._config = self._load_file()
        self.apply_environment(os.environ)

    def apply_environment(self, environ: Mapping[str, str]) -> int:
        """
        Applies PAGEGLOT_<SECTION>__<KEY> variables. Returns how many were used.
        """
        applied = 0
        for name, raw in sorted(environ.items()):
            if not name.upper().startswith(ENV_PREFIX):
                continue
            parts = [p.lower() for p in name[len(ENV_PREFIX):].split(ENV_SEPARATOR) if p]
            if not parts:
                continue
            if self.set_nested(".".join(parts), raw):
                applied += 1
        if applied:
            logger.debug("Applied %d configuration override(s) from the environment.", applied)
        return applied

    # --- INTERNAL ---

    @staticmethod
    def _load_file() -> Dict[str, Any]:
        config_path = PathUtils.get_app_package_root() / "settings.json"
        if not config_path.exists():
            logger.warning("settings.json not found at %s. Using empty config.", config_path)
            return {}
        try:
            with open(config_path, "r", encoding="utf-8") as f:
                loaded = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error("Failed to load settings.json: %s", e, exc_info=True)
            return {}
        logger.debug("Configuration loaded from %s", config_path)
        return loaded if isinstance(loaded, dict) else {}


# The global singleton instance that the entire application will use.
config_manager = ConfigManager()
