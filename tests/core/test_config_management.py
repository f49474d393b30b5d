# tests/core/test_config_management.py
import json
import logging

import pytest

from pageglot.core.managers.config_manager import ConfigManager, cast_like
from pageglot.core.utils.configure_logging import configure_from_settings
from pageglot.core.utils.path_utils import PathUtils

# A small, predictable configuration for these tests
MOCK_SETTINGS_CONTENT = {
    "debug": {
        "level": "WARNING",
        "module_levels": {"overlay": "DEBUG"},
        "silenced_loggers": {"urllib3": "CRITICAL"}
    },
    "fetcher": {
        "timeout": 10,
        "max_redirects": 5
    },
    "translation": {
        "concurrent_persistence": False
    }
}


@pytest.fixture
def config_env(tmp_path, monkeypatch):
    """
    Sets up an isolated environment for the ConfigManager:
    - Creates a temporary package root holding a fake 'settings.json'.
    - Monkeypatches PathUtils to point at it.
    The shared singleton is reloaded from the real file afterwards.
    """
    package_root = tmp_path / "pageglot"
    package_root.mkdir()
    (package_root / "settings.json").write_text(json.dumps(MOCK_SETTINGS_CONTENT))

    monkeypatch.setattr(PathUtils, "get_app_package_root", lambda: package_root)

    manager = ConfigManager()
    manager.reset()
    yield manager

    monkeypatch.undo()
    manager.reset()


def test_config_manager_is_singleton():
    assert ConfigManager() is ConfigManager()


def test_config_manager_load(config_env):
    config = config_env.get_all()
    assert config["debug"]["level"] == "WARNING"
    assert config["fetcher"]["max_redirects"] == 5


def test_config_manager_get_nested(config_env):
    assert config_env.get_nested("fetcher.timeout") == 10
    assert config_env.get_nested("non.existent.key", "default") == "default"
    assert config_env.get_nested("fetcher.timeout.deeper", "default") == "default"


def test_config_manager_get_section(config_env):
    assert config_env.get_section("fetcher") == {"timeout": 10, "max_redirects": 5}
    assert config_env.get_section("missing") == {}


def test_config_manager_set_nested(config_env):
    config_env.set_nested("debug.level", "INFO")
    assert config_env.get_nested("debug.level") == "INFO"

    # A new key is stored as given
    config_env.set_nested("new_feature.enabled", "True")
    assert config_env.get_nested("new_feature.enabled") == "True"

    # The original value is an int, so the string '20' is cast
    config_env.set_nested("fetcher.timeout", "20")
    assert config_env.get_nested("fetcher.timeout") == 20
    assert isinstance(config_env.get_nested("fetcher.timeout"), int)

    config_env.set_nested("translation.concurrent_persistence", "yes")
    assert config_env.get_nested("translation.concurrent_persistence") is True


def test_config_manager_set_nested_refuses_non_dict_parent(config_env):
    assert config_env.set_nested("fetcher.timeout.deeper", 1) is False


def test_config_manager_reset(config_env):
    config_env.set_nested("debug.level", "DEBUG")
    assert config_env.get_nested("debug.level") == "DEBUG"

    config_env.reset()
    assert config_env.get_nested("debug.level") == "WARNING"


def test_config_manager_missing_file_gives_empty_config(tmp_path, monkeypatch):
    monkeypatch.setattr(PathUtils, "get_app_package_root", lambda: tmp_path)
    manager = ConfigManager()
    manager.reset()
    try:
        assert manager.get_all() == {}
    finally:
        monkeypatch.undo()
        manager.reset()


def test_bundled_settings_have_every_section(config):
    for section in ("debug", "user_agent", "fetcher", "access_denied", "selection",
                    "translation", "vocabulary", "storage", "server"):
        assert config.get_section(section), section
    assert len(config.get_nested("access_denied.test_urls")) == 3


def test_configure_from_settings_applies_levels(config_env):
    configure_from_settings(config_env)

    assert logging.getLogger().level == logging.WARNING
    assert logging.getLogger("overlay").level == logging.DEBUG
    assert logging.getLogger("urllib3").level == logging.CRITICAL


def test_environment_overrides_are_cast(config_env):
    applied = config_env.apply_environment({
        "PAGEGLOT_FETCHER__TIMEOUT": "25",
        "PAGEGLOT_TRANSLATION__CONCURRENT_PERSISTENCE": "on",
        "PAGEGLOT_SERVER__HOST": "0.0.0.0",
        "UNRELATED": "x",
    })

    assert applied == 3
    assert config_env.get_nested("fetcher.timeout") == 25
    assert config_env.get_nested("translation.concurrent_persistence") is True
    assert config_env.get_nested("server.host") == "0.0.0.0"


def test_reset_reapplies_environment(config_env, monkeypatch):
    monkeypatch.setenv("PAGEGLOT_DEBUG__LEVEL", "ERROR")
    config_env.set_nested("debug.level", "DEBUG")

    config_env.reset()

    assert config_env.get_nested("debug.level") == "ERROR"


def test_cast_like():
    assert cast_like(3, "7") == 7
    assert cast_like(0.5, "1") == 1.0
    assert cast_like(False, "yes") is True
    assert cast_like(True, "off") is False
    assert cast_like(3, "three") == "three"
    assert cast_like(None, "free") == "free"
    assert cast_like(["a"], "b") == "b"
