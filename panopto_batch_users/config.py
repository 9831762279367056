"""Configuration loading for the Panopto batch user provisioning tool."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from typing import Dict, List, Optional

from dotenv import load_dotenv

from panopto_batch_users.models import AccessRole


class ConfigError(Exception):
    """Base exception for configuration issues."""


class MissingEnvError(ConfigError):
    """Raised when required environment variables are missing."""


class ConfigFileError(ConfigError):
    """Raised when the JSON config file is invalid."""


CONFIG_PATH_ENV = "PANOPTO_CONFIG_PATH"
DEFAULT_CONFIG_PATH = "panopto_config.json"

DEFAULT_API_VERSION = "4.6"
DEFAULT_TIMEOUT_SECONDS = 30


def _config_candidates(path: str) -> List[str]:
    """Paths tried for a config file, in order: as given (or under cwd), then under the repo root."""
    if os.path.isabs(path):
        return [path]
    repo_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
    return [os.path.abspath(path), os.path.join(repo_root, path)]


def _coerce_bool(value: object, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    lowered = str(value).strip().lower()
    if lowered in {"true", "1", "yes", "on"}:
        return True
    if lowered in {"false", "0", "no", "off"}:
        return False
    return default


@dataclass
class ServerSettings:
    host: str
    username: Optional[str]
    password: Optional[str]

    @classmethod
    def from_env(cls) -> "ServerSettings":
        host = (os.getenv("PANOPTO_HOST") or "").strip()
        if not host:
            raise MissingEnvError("PANOPTO_HOST environment variable is required")
        username = os.getenv("PANOPTO_USERNAME") or None
        password = os.getenv("PANOPTO_PASSWORD") or None
        return cls(host=host.rstrip("/"), username=username, password=password)

    def __repr__(self) -> str:
        return f"ServerSettings(host={self.host!r}, username={self.username!r}, password='***')"


@dataclass
class ApiSettings:
    api_version: str
    timeout: int
    verify_ssl: bool
    use_https: bool

    @classmethod
    def from_json(cls, data: Dict[str, object]) -> "ApiSettings":
        api_version = str(data.get("api_version") or DEFAULT_API_VERSION).strip() or DEFAULT_API_VERSION
        raw_timeout = data.get("timeout", DEFAULT_TIMEOUT_SECONDS)
        try:
            timeout = int(raw_timeout)
        except (TypeError, ValueError):
            print(f"⚠️ Invalid api.timeout '{raw_timeout}'; using {DEFAULT_TIMEOUT_SECONDS}s")
            timeout = DEFAULT_TIMEOUT_SECONDS
        if timeout <= 0:
            timeout = DEFAULT_TIMEOUT_SECONDS
        return cls(
            api_version=api_version,
            timeout=timeout,
            verify_ssl=_coerce_bool(data.get("verify_ssl"), True),
            use_https=_coerce_bool(data.get("use_https"), True),
        )


@dataclass
class ProvisioningSettings:
    access_role: AccessRole

    @classmethod
    def from_json(cls, data: Dict[str, object]) -> "ProvisioningSettings":
        raw_role = data.get("access_role")
        if raw_role is None:
            return cls(access_role=AccessRole.CREATOR)
        try:
            role = AccessRole.parse(str(raw_role))
        except ValueError:
            print(f"⚠️ Unknown provisioning.access_role '{raw_role}'; using {AccessRole.CREATOR.value}")
            role = AccessRole.CREATOR
        return cls(access_role=role)


@dataclass
class AppConfig:
    server: ServerSettings
    api: ApiSettings
    provisioning: ProvisioningSettings

    @property
    def base_url(self) -> str:
        host = self.server.host
        if host.startswith(("http://", "https://")):
            return host
        scheme = "https" if self.api.use_https else "http"
        return f"{scheme}://{host}"


def _load_json_config(path: str) -> Dict[str, object]:
    candidates = _config_candidates(path)
    resolved = next((candidate for candidate in candidates if os.path.exists(candidate)), None)
    if resolved is None:
        print(f"⚠️  Config file not found: {candidates[0]}; continuing with defaults")
        return {}
    try:
        with open(resolved, "r", encoding="utf-8") as handle:
            data = json.load(handle)
    except json.JSONDecodeError as exc:
        raise ConfigFileError(f"Invalid JSON in config file '{resolved}': {exc}") from exc
    except UnicodeDecodeError as exc:
        raise ConfigFileError(f"Config file '{resolved}' is not UTF-8 text: {exc}") from exc
    except OSError as exc:
        raise ConfigFileError(f"Unable to read config file '{resolved}': {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigFileError(f"Config file '{resolved}' must contain a JSON object")
    return data


def _section(data: Dict[str, object], name: str) -> Dict[str, object]:
    value = data.get(name)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigFileError(f"Config section '{name}' must be a JSON object, got {type(value).__name__}")
    return value


def load_app_config(path: str | None = None) -> AppConfig:
    """Load `.env`, then build settings from the environment and the JSON config file."""
    load_dotenv()
    data = _load_json_config(path or os.getenv(CONFIG_PATH_ENV) or DEFAULT_CONFIG_PATH)
    return AppConfig(
        server=ServerSettings.from_env(),
        api=ApiSettings.from_json(_section(data, "api")),
        provisioning=ProvisioningSettings.from_json(_section(data, "provisioning")),
    )


__all__ = [
    "AppConfig",
    "ApiSettings",
    "ConfigError",
    "ConfigFileError",
    "MissingEnvError",
    "ProvisioningSettings",
    "ServerSettings",
    "load_app_config",
]
