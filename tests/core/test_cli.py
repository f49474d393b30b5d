from unittest.mock import MagicMock, patch

import pytest

from pageglot.app import main, output_filename
from pageglot.core.errors import NetworkError
from pageglot.core.managers.storage_manager import MemoryStorage


@pytest.mark.parametrize("url, expected", [
    ("https://example.com/", "example_com.html"),
    ("https://example.com/a/b.html?q=1", "example_com_a_b_html.html"),
    ("https://sub.example.org:8080/x", "sub_example_org_8080_x.html"),
])
def test_output_filename(url, expected):
    assert output_filename(url) == expected


@patch("pageglot.app.configure_from_settings")
@patch("pageglot.app.PageFetchService")
def test_translate_command_writes_files(mock_service_class, mock_logging, fake_fetcher, tmp_path, config):
    mock_service_class.from_config.return_value = fake_fetcher

    exit_code = main([
        "translate", "https://example.com/a", "https://example.com/b",
        "--percentage", "100", "--language", "german", "--out-dir", str(tmp_path / "out"),
    ])

    assert exit_code == 0
    mock_logging.assert_called_once()
    assert [url for url, _ in fake_fetcher.calls] == ["https://example.com/a", "https://example.com/b"]
    written = sorted(p.name for p in (tmp_path / "out").iterdir())
    assert written == ["example_com_a.html", "example_com_b.html"]
    assert "pageglot-segment" in (tmp_path / "out" / "example_com_a.html").read_text(encoding="utf-8")


@patch("pageglot.app.configure_from_settings")
@patch("pageglot.app.PageFetchService")
def test_translate_command_reports_failures(mock_service_class, mock_logging, make_fetcher, tmp_path, config):
    mock_service_class.from_config.return_value = make_fetcher(error=NetworkError("timed out"))

    exit_code = main(["translate", "https://example.com/a", "--out-dir", str(tmp_path)])

    assert exit_code == 1
    assert list(tmp_path.iterdir()) == []


@patch("pageglot.app.configure_from_settings")
def test_translate_command_rejects_unknown_language(mock_logging):
    with pytest.raises(SystemExit):
        main(["translate", "https://example.com/a", "--language", "klingon"])


@patch("pageglot.app.stop_background_loop")
@patch("pageglot.app.ensure_background_loop")
@patch("pageglot.app.configure_from_settings")
def test_serve_command_runs_app(mock_logging, mock_ensure_loop, mock_stop_loop, capsys):
    fake_app = MagicMock()
    fake_app.config = {"STORAGE": MagicMock()}
    fake_app.url_map.iter_rules.return_value = ["/api/translate", "/static/<path:filename>"]

    with patch("pageglot.server.app.create_app", return_value=fake_app) as mock_create_app:
        exit_code = main(["serve", "--host", "0.0.0.0", "--port", "8123"])

    assert exit_code == 0
    mock_create_app.assert_called_once_with(preload_dictionaries=False)
    mock_ensure_loop.assert_called_once()
    mock_stop_loop.assert_called_once()
    fake_app.run.assert_called_once_with(debug=False, host="0.0.0.0", port=8123, use_reloader=False)
    fake_app.config["STORAGE"].close.assert_called_once()

    out = capsys.readouterr().out
    assert "/api/translate" in out
    assert "/static" not in out


@patch("pageglot.app.stop_background_loop")
@patch("pageglot.app.ensure_background_loop")
@patch("pageglot.app.configure_from_settings")
def test_serve_command_closes_storage_on_interrupt(mock_logging, mock_ensure_loop, mock_stop_loop):
    fake_app = MagicMock()
    fake_app.config = {"STORAGE": MagicMock()}
    fake_app.url_map.iter_rules.return_value = []
    fake_app.run.side_effect = KeyboardInterrupt

    with patch("pageglot.server.app.create_app", return_value=fake_app):
        with pytest.raises(KeyboardInterrupt):
            main(["serve"])

    fake_app.config["STORAGE"].close.assert_called_once()
    mock_stop_loop.assert_called_once()


@patch("pageglot.app.configure_from_settings")
@patch("pageglot.app.PageFetchService")
def test_translate_command_closes_storage(mock_service_class, mock_logging, fake_fetcher, tmp_path, config):
    mock_service_class.from_config.return_value = fake_fetcher
    storage = MemoryStorage()
    storage.close = MagicMock()

    with patch("pageglot.app.create_storage", return_value=storage):
        main(["translate", "https://example.com/a", "--out-dir", str(tmp_path)])

    storage.close.assert_called_once()
