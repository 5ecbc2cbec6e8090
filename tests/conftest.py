from __future__ import annotations

import pytest

from app.config import reset_app_config_cache
from app.version import get_app_version
from shared import logging_config

_ISOLATED_ENV_VARS = (
    "VITALS_INSTALL_BIN_DIR",
    "VITALS_INSTALL_MANIFEST",
    "VITALS_INSTALL_BASE_URL",
    "VITALS_INSTALL_TIMEOUT",
    "VITALS_LOG_FILE",
    "VITALS_INSTALLER_VERSION",
)


@pytest.fixture(autouse=True)
def _isolated_install_env(monkeypatch: pytest.MonkeyPatch, tmp_path_factory: pytest.TempPathFactory):
    """Keep tests away from the real binary directory and log location."""

    for name in _ISOLATED_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    log_dir = tmp_path_factory.mktemp("logs")
    monkeypatch.setenv("VITALS_LOG_DIR", str(log_dir))
    reset_app_config_cache()
    get_app_version.cache_clear()
    logging_config._reset_for_tests()

    yield

    logging_config._reset_for_tests()
    reset_app_config_cache()
    get_app_version.cache_clear()
