"""Unit tests for configuration loading."""

import json

import pytest

from panopto_batch_users.config import (
    ApiSettings,
    ConfigFileError,
    MissingEnvError,
    ProvisioningSettings,
    load_app_config,
)
from panopto_batch_users.models import AccessRole


@pytest.fixture
def panopto_env(monkeypatch) -> None:
    monkeypatch.setenv("PANOPTO_HOST", "panopto.example.edu/")
    monkeypatch.setenv("PANOPTO_USERNAME", "admin")
    monkeypatch.setenv("PANOPTO_PASSWORD", "secret")


class TestLoadAppConfig:
    def test_env_and_json(self, panopto_env, tmp_path) -> None:
        path = tmp_path / "panopto_config.json"
        path.write_text(
            json.dumps(
                {
                    "api": {"api_version": "4.2", "timeout": "15", "verify_ssl": "false"},
                    "provisioning": {"access_role": "Publisher"},
                }
            ),
            encoding="utf-8",
        )

        app_config = load_app_config(str(path))

        assert app_config.server.host == "panopto.example.edu"
        assert app_config.server.username == "admin"
        assert app_config.api.api_version == "4.2"
        assert app_config.api.timeout == 15
        assert app_config.api.verify_ssl is False
        assert app_config.provisioning.access_role is AccessRole.PUBLISHER
        assert app_config.base_url == "https://panopto.example.edu"
        assert "secret" not in repr(app_config.server)

    def test_missing_file_uses_defaults(self, panopto_env, tmp_path, capsys) -> None:
        app_config = load_app_config(str(tmp_path / "absent.json"))

        assert app_config.api.api_version == "4.6"
        assert app_config.api.timeout == 30
        assert app_config.provisioning.access_role is AccessRole.CREATOR
        assert "Config file not found" in capsys.readouterr().out

    def test_invalid_json(self, panopto_env, tmp_path) -> None:
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(ConfigFileError):
            load_app_config(str(path))

    def test_missing_host(self, monkeypatch, tmp_path) -> None:
        monkeypatch.delenv("PANOPTO_HOST", raising=False)

        with pytest.raises(MissingEnvError):
            load_app_config(str(tmp_path / "absent.json"))

    def test_explicit_scheme_is_kept(self, monkeypatch, tmp_path) -> None:
        monkeypatch.setenv("PANOPTO_HOST", "http://localhost:8080")

        app_config = load_app_config(str(tmp_path / "absent.json"))

        assert app_config.base_url == "http://localhost:8080"

    def test_config_path_env_read_at_load_time(self, panopto_env, monkeypatch, tmp_path) -> None:
        path = tmp_path / "late.json"
        path.write_text(json.dumps({"api": {"api_version": "9.9"}}), encoding="utf-8")
        monkeypatch.setenv("PANOPTO_CONFIG_PATH", str(path))

        assert load_app_config().api.api_version == "9.9"


class TestMalformedConfigFile:
    def test_section_must_be_an_object(self, panopto_env, tmp_path) -> None:
        path = tmp_path / "list_section.json"
        path.write_text(json.dumps({"api": ["4.6"]}), encoding="utf-8")

        with pytest.raises(ConfigFileError, match="Config section 'api' must be a JSON object"):
            load_app_config(str(path))

    def test_provisioning_section_must_be_an_object(self, panopto_env, tmp_path) -> None:
        path = tmp_path / "string_section.json"
        path.write_text(json.dumps({"provisioning": "Creator"}), encoding="utf-8")

        with pytest.raises(ConfigFileError, match="provisioning"):
            load_app_config(str(path))

    def test_directory_path(self, panopto_env, tmp_path) -> None:
        with pytest.raises(ConfigFileError, match="Unable to read config file"):
            load_app_config(str(tmp_path))

    def test_non_utf8_file(self, panopto_env, tmp_path) -> None:
        path = tmp_path / "latin1.json"
        path.write_bytes(b'{"api": {"api_version": "\xe9"}}')

        with pytest.raises(ConfigFileError, match="not UTF-8"):
            load_app_config(str(path))


def test_invalid_timeout_falls_back() -> None:
    assert ApiSettings.from_json({"timeout": "soon"}).timeout == 30
    assert ApiSettings.from_json({"timeout": 0}).timeout == 30


def test_unknown_role_falls_back() -> None:
    assert ProvisioningSettings.from_json({"access_role": "Owner"}).access_role is AccessRole.CREATOR
