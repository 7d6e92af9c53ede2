"""Tests for the uvicorn launcher options."""

from __future__ import annotations

import pytest

from freezer.server import run
from freezer.server.run import ServerOptions, options_from_env


def test_defaults_bind_localhost():
    assert options_from_env({}) == ServerOptions(host="127.0.0.1", port=8000)


def test_environment_values_are_parsed():
    options = options_from_env(
        {
            "FREEZER_SERVER_HOST": "0.0.0.0",
            "FREEZER_SERVER_PORT": "9090",
            "FREEZER_SERVER_DURATION": "2.5",
        }
    )

    assert options == ServerOptions(host="0.0.0.0", port=9090, duration=2.5)
    assert options.uvicorn_kwargs() == {
        "host": "0.0.0.0",
        "port": 9090,
        "log_config": None,
        "access_log": False,
    }


@pytest.mark.parametrize(
    "environ",
    [
        {"FREEZER_SERVER_PORT": "eighty"},
        {"FREEZER_SERVER_PORT": "70000"},
        {"FREEZER_SERVER_DURATION": "soon"},
        {"FREEZER_SERVER_DURATION": "0"},
        {"RELOAD": "1", "FREEZER_SERVER_DURATION": "5"},
    ],
)
def test_invalid_environment_exits(environ):
    with pytest.raises(SystemExit):
        options_from_env(environ)


def test_reload_uses_import_string(monkeypatch):
    calls = []
    monkeypatch.setenv("RELOAD", "1")
    monkeypatch.delenv("FREEZER_SERVER_DURATION", raising=False)
    monkeypatch.setattr(run.uvicorn, "run", lambda app, **kwargs: calls.append((app, kwargs)))

    run.main()

    assert len(calls) == 1
    app, kwargs = calls[0]
    assert app == "freezer.server.app:app"
    assert kwargs["reload"] is True
    assert kwargs["log_config"] is None
