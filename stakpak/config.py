"""Loading and saving the command-line tool's configuration."""

from __future__ import annotations

import os
import tomllib
from dataclasses import asdict, dataclass
from pathlib import Path

import tomli_w

DEFAULT_API_ENDPOINT = "https://apiv2.stakpak.dev"
ENV_PREFIX = "STAKPAK_"
_FIELDS = ("api_endpoint", "api_key", "mcp_server_host")


class ConfigError(Exception):
    """Raised when the configuration cannot be read or written."""


def config_path() -> Path:
    """Return the location of the user's configuration file."""
    return Path(f"{os.environ.get('HOME', '')}/.stakpak/config.toml")


def _environment_values() -> dict[str, str]:
    return {
        name[len(ENV_PREFIX):].lower(): value
        for name, value in os.environ.items()
        if name.startswith(ENV_PREFIX) and len(name) > len(ENV_PREFIX)
    }


def _as_string(name: str, value: object) -> str | None:
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        raise ConfigError(f"invalid type for {name!r}: expected a string")
    return str(value)


@dataclass
class AppConfig:
    """Settings that tell the tool where and how to reach the API."""

    api_endpoint: str = DEFAULT_API_ENDPOINT
    api_key: str | None = None
    mcp_server_host: str | None = None

    @classmethod
    def load(cls, path: str | os.PathLike[str] | None = None) -> "AppConfig":
        """Merge defaults, ``STAKPAK_*`` variables and the file, later ones winning."""
        file_path = Path(path) if path is not None else config_path()
        values: dict[str, object] = {"api_endpoint": DEFAULT_API_ENDPOINT}
        values.update(_environment_values())
        if file_path.is_file():
            try:
                data = tomllib.loads(file_path.read_text(encoding="utf-8"))
            except (OSError, UnicodeDecodeError, tomllib.TOMLDecodeError) as exc:
                raise ConfigError(f"failed to read {file_path}: {exc}") from exc
            values.update(data)
        settings = {name: _as_string(name, values.get(name)) for name in _FIELDS}
        if settings["api_endpoint"] is None:
            raise ConfigError("missing field `api_endpoint`")
        return cls(**settings)

    def save(self, path: str | os.PathLike[str] | None = None) -> None:
        """Write the configuration as TOML, leaving out unset values."""
        file_path = Path(path) if path is not None else config_path()
        data = {key: value for key, value in asdict(self).items() if value is not None}
        try:
            file_path.parent.mkdir(parents=True, exist_ok=True)
            file_path.write_text(tomli_w.dumps(data), encoding="utf-8")
        except OSError as exc:
            raise ConfigError(str(exc)) from exc