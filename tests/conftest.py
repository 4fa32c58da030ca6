"""Shared fixtures: an isolated environment and a Config built from it."""
import pytest

from jsclean import config as config_module
from jsclean.config import Config

JSCLEAN_VARS = [
    "JSCLEAN_OUTPUT_SUFFIX",
    "JSCLEAN_FORMAT",
    "JSCLEAN_PRETTIER_CMD",
    "JSCLEAN_FORMAT_TIMEOUT",
    "JSCLEAN_UNTIL_STABLE",
    "JSCLEAN_MAX_PASSES",
    "JSCLEAN_GRAMMAR",
]


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch):
    """Start every test without JSCLEAN_* variables and without a cached Config."""
    for name in JSCLEAN_VARS:
        # setenv first so monkeypatch restores the variable to "absent" afterwards
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    config_module.reset_config()
    yield
    config_module.reset_config()


@pytest.fixture
def config(tmp_path):
    """Config that reads no .env file from the working tree."""
    return Config(env_path=tmp_path / ".env")
