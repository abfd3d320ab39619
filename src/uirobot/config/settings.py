"""Configuration management for uirobot.

Loads settings from a YAML configuration file with environment variable
overrides. Supports .env files.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field
from pydantic.fields import FieldInfo
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("config/uirobot.yaml")

# Program and arguments that shut the peer down. Assumes Windows.
DEFAULT_POWER_DOWN_PROGRAM = "C:/Windows/System32/shutdown.exe||/s /f /t 0"


class RobotConfig(BaseModel):
    host: str = Field(default="127.0.0.1", description="Host running the UIRobot agent")
    port: int = Field(default=3047, ge=1, le=65535)
    max_line_length: int | None = Field(default=None, gt=0)
    mac_address: str | None = Field(default=None, description="MAC address used for Wake-on-LAN")
    broadcast_address: str = Field(default="255.255.255.255")
    reconnect_interval: float = Field(default=2.0, gt=0)


class SessionConfig(BaseModel):
    key_release_delay: float = Field(default=0.2, gt=0)
    power_down_program: str = Field(default=DEFAULT_POWER_DOWN_PROGRAM, min_length=1)


class ServerConfig(BaseModel):
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8080, ge=1, le=65535)


class ClientConfig(BaseModel):
    base_url: str = Field(default="http://localhost:8080")
    timeout: float = Field(default=10.0, gt=0)


class LoggingConfig(BaseModel):
    level: str = Field(default="INFO")
    format: str = Field(
        default="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    file: str | None = Field(default=None)


class Settings(BaseSettings):
    """Root configuration for uirobot.

    Loads from YAML file and supports environment variable overrides.
    Reads .env files automatically.
    """

    model_config = {
        "env_prefix": "UIROBOT_",
        "env_nested_delimiter": "__",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    robot: RobotConfig = Field(default_factory=RobotConfig)
    session: SessionConfig = Field(default_factory=SessionConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    client: ClientConfig = Field(default_factory=ClientConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


class _FileSettingsSource(PydanticBaseSettingsSource):
    """Values read from the YAML file, below env vars and .env in priority."""

    def __init__(self, settings_cls: type[BaseSettings], data: dict) -> None:
        super().__init__(settings_cls)
        self._data = data

    def get_field_value(self, field: FieldInfo, field_name: str) -> tuple[Any, str, bool]:
        return self._data.get(field_name), field_name, False

    def __call__(self) -> dict[str, Any]:
        return {k: v for k, v in self._data.items() if v is not None}


def load_settings(config_path: Path | str | None = None) -> Settings:
    """Load settings from YAML + .env + environment variables.

    Priority: env vars > .env file > shorthand UIROBOT_HOST / UIROBOT_MAC
    > YAML file > defaults. Nested sections are merged, so
    ``UIROBOT_ROBOT__HOST`` replaces only ``robot.host`` from the YAML.
    """
    path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH

    _load_dotenv()

    yaml_data: dict = {}
    if path.exists():
        with open(path) as f:
            yaml_data = yaml.safe_load(f) or {}
        logger.info("Loaded configuration from %s", path)
    else:
        logger.warning("Config file %s not found, using defaults + env vars", path)

    _apply_env_overrides(yaml_data)

    class FileBackedSettings(Settings):
        @classmethod
        def settings_customise_sources(
            cls,
            settings_cls: type[BaseSettings],
            init_settings: PydanticBaseSettingsSource,
            env_settings: PydanticBaseSettingsSource,
            dotenv_settings: PydanticBaseSettingsSource,
            file_secret_settings: PydanticBaseSettingsSource,
        ) -> tuple[PydanticBaseSettingsSource, ...]:
            return (
                init_settings,
                env_settings,
                dotenv_settings,
                _FileSettingsSource(settings_cls, yaml_data),
                file_secret_settings,
            )

    return FileBackedSettings()


def _load_dotenv() -> None:
    """Load .env file into os.environ if it exists."""
    env_path = Path(".env")
    if not env_path.exists():
        return
    with open(env_path) as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            if "=" in line:
                key, _, value = line.partition("=")
                key = key.strip()
                value = value.strip()
                if not os.environ.get(key):
                    os.environ[key] = value


def _apply_env_overrides(yaml_data: dict) -> None:
    """Apply overrides for the common non-prefixed robot variables."""
    host = os.environ.get("UIROBOT_HOST", "")
    mac = os.environ.get("UIROBOT_MAC", "")

    if "robot" not in yaml_data or yaml_data["robot"] is None:
        yaml_data["robot"] = {}

    if host:
        yaml_data["robot"]["host"] = host
    if mac:
        yaml_data["robot"]["mac_address"] = mac
