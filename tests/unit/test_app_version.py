from __future__ import annotations

from importlib import metadata

from app import version as version_module
from app.version import get_app_version


def _reset_cache() -> None:
    get_app_version.cache_clear()  # type: ignore[attr-defined]


def test_get_app_version_prefers_environment(monkeypatch) -> None:
    monkeypatch.setenv("VITALS_INSTALLER_VERSION", " v1.2.3 ")
    _reset_cache()

    assert get_app_version() == "1.2.3"


def test_get_app_version_uses_distribution_metadata(monkeypatch) -> None:
    monkeypatch.delenv("VITALS_INSTALLER_VERSION", raising=False)
    monkeypatch.setattr(version_module, "_read_version_file", lambda: None)
    monkeypatch.setattr(version_module.metadata, "version", lambda name: "4.5.6")
    _reset_cache()

    assert get_app_version() == "4.5.6"


def test_get_app_version_falls_back_to_development_string(monkeypatch) -> None:
    monkeypatch.delenv("VITALS_INSTALLER_VERSION", raising=False)
    monkeypatch.setattr(version_module, "_read_version_file", lambda: None)

    def _missing(name: str) -> str:
        raise metadata.PackageNotFoundError(name)

    monkeypatch.setattr(version_module.metadata, "version", _missing)
    _reset_cache()

    assert get_app_version() == "0.0.0-dev"
