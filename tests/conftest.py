"""Pytest configuration and shared fixtures for redis-gli tests."""

import json
import logging

import pytest

import redis_gli.io.logging_setup
import redis_gli.io.settings


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    """Point settings and logs at tmp_path; drop any REDIS_GLI_* from the real env."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("REDIS_GLI_LOG_DIR", str(tmp_path / "logs"))
    for var in list(redis_gli.io.settings.ENV_VARS) + [
        "REDIS_GLI_GIT_COMMIT",
        "REDIS_GLI_LOG_FILE",
        "REDIS_GLI_LOG_LEVEL",
    ]:
        monkeypatch.delenv(var, raising=False)
    return tmp_path


@pytest.fixture(autouse=True)
def isolated_logging(monkeypatch):
    """Each test sees an unconfigured logging_setup; handlers are restored afterwards."""
    logger = logging.getLogger("redis_gli")
    saved = (list(logger.handlers), logger.propagate, logger.level)
    monkeypatch.setattr(redis_gli.io.logging_setup, "_RUNTIME", None)
    yield
    for handler in logger.handlers:
        if handler not in saved[0]:
            handler.close()
    logger.handlers[:] = saved[0]
    logger.propagate = saved[1]
    logger.setLevel(saved[2])


@pytest.fixture
def settings_path(isolated_env):
    return redis_gli.io.settings.get_config_path()


@pytest.fixture
def write_settings(settings_path):
    """Write the settings file as a user would."""

    def write(data):
        settings_path.parent.mkdir(parents=True, exist_ok=True)
        settings_path.write_text(json.dumps(data), encoding="utf-8")

    return write
