"""
A 'mock and drive' test for app.py.

- Saves and loads the config file
- Initializes the ChatApp class
- Starts the application and exits
"""

from unittest.mock import patch

import pytest

from ollachat import app as ollachat_app
from ollachat.app import ChatApp
from ollachat.chat_store import ChatStore
from ollachat.config import Config

# 1. Configuration Tests


def test_config_defaults():
    cfg = Config()

    assert cfg.host == "http://localhost:11434"
    assert cfg.default_model == "llama3.2:latest"
    assert cfg.temperature == 0.7
    assert cfg.context_window == 2048
    assert cfg.system_prompt.startswith("You are a helpful AI assistant called MAX.")


def test_config_save_load(tmp_path):
    """Config file location is patched so real settings are never overwritten."""
    fake_config_file = tmp_path / "settings.json"

    with patch("ollachat.config.CONFIG_FILE", str(fake_config_file)):
        # 1. Missing file is created with defaults on load
        cfg = Config()
        cfg.load()
        assert fake_config_file.exists()

        # 2. Changes survive a round trip, stale keys are ignored
        cfg.default_model = "qwen2.5:7b"
        cfg.save()
        fake_config_file.write_text(
            fake_config_file.read_text().replace("{", '{"stale_key": 1,', 1)
        )

        cfg_loaded = Config()
        cfg_loaded.load()
        assert cfg_loaded.default_model == "qwen2.5:7b"
        assert not hasattr(cfg_loaded, "stale_key")


def test_chat_app_uses_config_defaults(tmp_path, backend):
    cfg = Config()
    cfg.default_model = "qwen2.5:7b"
    cfg.temperature = 0.4

    chat = ChatApp(cfg, backend=backend, store=ChatStore(str(tmp_path)))

    assert chat.session.model == "qwen2.5:7b"
    assert chat.session.params.temperature == 0.4
    assert chat.session.defaults.temperature == 0.4
    assert chat.session.history[0].content == cfg.system_prompt


# 2. Main loop


@patch("ollachat.cli_controller.prompt")
@patch("ollachat.globals.prompt")
def test_run_loop_until_bye(mock_root_prompt, mock_prompt, app):
    mock_prompt.return_value = "1"
    mock_root_prompt.side_effect = ["", "Hello", "/bye", "never read"]

    app.run()

    assert app.controller.exited
    assert mock_root_prompt.call_count == 3
    assert len(app.session.history) == 3


@patch("ollachat.cli_controller.prompt")
@patch("ollachat.globals.prompt")
def test_startup_listing_failure_keeps_default_model(
    mock_root_prompt, mock_prompt, app, capsys
):
    app.backend.list_error = ConnectionError("backend unreachable")
    mock_root_prompt.side_effect = EOFError

    app.run()

    assert "backend unreachable" in capsys.readouterr().out
    assert app.session.model == "llama3.2:latest"


@patch("ollachat.globals.prompt")  # Mock the user input
@patch("ollachat.app.OllamaBackend")  # Mock the API
@patch("ollachat.app.init_logger")
def test_application_startup_and_quit(
    mock_logger, mock_backend, mock_root_prompt, tmp_path
):
    """
    1. Starts app.py with a temp config file.
    2. Mocks the user typing '/bye' immediately.
    3. Verifies the app shuts down cleanly without errors.
    """
    mock_backend.return_value.list_models.return_value = []
    mock_root_prompt.return_value = "/bye"

    with patch("ollachat.config.CONFIG_FILE", str(tmp_path / "settings.json")):
        try:
            ollachat_app.main()
        except SystemExit as e:
            assert e.code == 0
        except Exception as e:
            pytest.fail(f"App crashed during startup: {e}")

    mock_root_prompt.assert_called_once()
    mock_backend.assert_called_once_with("http://localhost:11434")


@patch("ollachat.app.init_logger")
@patch("ollachat.app.Config")
def test_startup_failure_exits_nonzero(mock_config, mock_logger):
    mock_config.return_value.load.side_effect = OSError("read-only filesystem")

    with pytest.raises(SystemExit) as excinfo:
        ollachat_app.main()

    assert excinfo.value.code == 1


def test_invalid_settings_fall_back_to_defaults(tmp_path, backend, capsys):
    cfg = Config()
    cfg.temperature = 5
    cfg.context_window = 0

    chat = ChatApp(cfg, backend=backend, store=ChatStore(str(tmp_path)))

    out = capsys.readouterr().out
    assert "Invalid temperature" in out
    assert "Invalid context window" in out
    assert chat.session.params.temperature == 0.7
    assert chat.session.params.context_window == 2048

    # A full turn now commits instead of failing on the status panel
    chat.controller.dispatch("Hello")
    assert len(chat.session.history) == 3

    chat.controller.dispatch("/clear")
    assert chat.session.params.context_window == 2048


def test_valid_settings_are_kept_per_value(tmp_path, backend):
    cfg = Config()
    cfg.temperature = 0.3
    cfg.context_window = "many"

    chat = ChatApp(cfg, backend=backend, store=ChatStore(str(tmp_path)))

    assert chat.session.params.temperature == 0.3
    assert chat.session.params.context_window == 2048
