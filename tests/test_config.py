import logging

import pytest

from biobin.core.config import DEFAULT_CONFIG_PATH, AppConfig, load_config
from biobin.core.errors import ConfigError
from biobin.logging_config import configure_logging


def test_shipped_config_loads():
    cfg = load_config(DEFAULT_CONFIG_PATH)
    assert cfg.backend.base_url == "http://localhost:3000"
    assert cfg.views.live.poll_seconds == 5
    assert cfg.views.graph.interval == "5m"
    assert cfg.display.timezone == "Asia/Tokyo"
    assert len(cfg.display.palette) == 8


def test_missing_file_means_defaults(tmp_path):
    assert load_config(tmp_path / "nope.yaml") == AppConfig()


def test_env_var_picks_the_file(tmp_path, monkeypatch):
    path = tmp_path / "cfg.yaml"
    path.write_text("backend:\n  base_url: http://pi.local:3000\nviews:\n  readings:\n    limit: 25\n")
    monkeypatch.setenv("BIOBIN_CONFIG", str(path))
    cfg = load_config()
    assert cfg.backend.base_url == "http://pi.local:3000"
    assert cfg.views.readings.limit == 25
    assert cfg.views.live.poll_seconds == 5


@pytest.mark.parametrize("text", [
    "views:\n  readings:\n    limit: 7\n",
    "views:\n  graph:\n    interval: 2w\n",
    "display:\n  timezone: Mars/Olympus\n",
    "backend:\n  timeout_seconds: 0\n",
    "- just\n- a list\n",
    "backend: [unclosed\n",
])
def test_invalid_config_is_rejected(tmp_path, text):
    path = tmp_path / "bad.yaml"
    path.write_text(text)
    with pytest.raises(ConfigError):
        load_config(path)


def test_log_level_comes_from_the_environment(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "debug")
    assert configure_logging() == logging.DEBUG
    assert logging.getLogger("biobin").level == logging.DEBUG
    assert logging.getLogger("urllib3").level == logging.WARNING
    assert logging.getLogger("uvicorn.access").propagate

    monkeypatch.setenv("LOG_LEVEL", "chatty")
    assert configure_logging() == logging.INFO
    assert configure_logging("error") == logging.ERROR
    assert logging.getLogger("urllib3").level == logging.ERROR
    configure_logging("info")
