"""
Configuration for the device console.

Settings are loaded from environment variables or a ``.env`` file and may be
seeded from a YAML deployment file. Environment variables take precedence
over values defined in the YAML file, which in turn override the defaults
below (suitable for a backend running on localhost:8000).
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Literal, Optional

import yaml
from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_PATH = Path(__file__).resolve().parents[2] / ".env"
load_dotenv(ENV_PATH, override=False)


class Settings(BaseSettings):
    """Console configuration loaded from environment variables."""

    backend_url: str = Field(default="http://localhost:8000", validation_alias="CONSOLE_BACKEND_URL")
    api_prefix: str = Field(default="/api/v1", validation_alias="CONSOLE_API_PREFIX")
    regula_path: str = Field(default="regula", validation_alias="CONSOLE_REGULA_PATH")
    rfid_path: str = Field(default="fake_rfid/", validation_alias="CONSOLE_RFID_PATH")
    # Photo endpoints hang off the Regula collection path.
    photos_list_path: str = Field(default="photos", validation_alias="CONSOLE_PHOTOS_LIST_PATH")
    photo_path: str = Field(default="photo", validation_alias="CONSOLE_PHOTO_PATH")
    photo_upload_mode: Literal["json", "multipart"] = Field(default="json", validation_alias="CONSOLE_PHOTO_UPLOAD_MODE")
    max_upload_bytes: int = Field(default=5 * 1024 * 1024, validation_alias="CONSOLE_MAX_UPLOAD_BYTES")
    request_timeout_sec: float = Field(default=10.0, validation_alias="CONSOLE_REQUEST_TIMEOUT_SEC")
    notification_ttl_sec: float = Field(default=3.0, validation_alias="CONSOLE_NOTIFICATION_TTL_SEC")
    log_level: str = Field(default="WARNING", validation_alias="CONSOLE_LOG_LEVEL")
    log_file: str | None = Field(default=None, validation_alias="CONSOLE_LOG_FILE")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    @property
    def api_root(self) -> str:
        return f"{self.backend_url.rstrip('/')}/{self.api_prefix.strip('/')}"

    def regula_device_url(self, regula_id: int | str) -> str:
        return f"{self.backend_url.rstrip('/')}/regula/{regula_id}"

    def rfid_device_url(self, rfid_id: int | str = "{rfid_id}") -> str:
        return f"{self.api_root}/{self.rfid_path.strip('/')}/{rfid_id}/"


_YAML_KEYS = {
    "backend_url": "CONSOLE_BACKEND_URL",
    "api_prefix": "CONSOLE_API_PREFIX",
    "regula_path": "CONSOLE_REGULA_PATH",
    "rfid_path": "CONSOLE_RFID_PATH",
    "photos_list_path": "CONSOLE_PHOTOS_LIST_PATH",
    "photo_path": "CONSOLE_PHOTO_PATH",
    "photo_upload_mode": "CONSOLE_PHOTO_UPLOAD_MODE",
    "max_upload_bytes": "CONSOLE_MAX_UPLOAD_BYTES",
    "request_timeout_sec": "CONSOLE_REQUEST_TIMEOUT_SEC",
    "notification_ttl_sec": "CONSOLE_NOTIFICATION_TTL_SEC",
    "log_level": "CONSOLE_LOG_LEVEL",
    "log_file": "CONSOLE_LOG_FILE",
}


def _read_yaml(path: Path) -> dict[str, Any]:
    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Console config {path} must be a mapping, got {type(data).__name__}")
    # Allow the values to live under a top-level "console:" section.
    section = data.get("console")
    if isinstance(section, dict):
        data = section
    return data


def load_settings(config_path: Optional[str] = None) -> Settings:
    """
    Build Settings from an optional YAML file plus the environment.

    Keys present in the YAML file are only used when the matching
    environment variable is not set.
    """
    logger = logging.getLogger("config")
    overrides: dict[str, Any] = {}
    if config_path:
        path = Path(config_path).expanduser()
        if not path.exists():
            raise FileNotFoundError(f"Console config not found: {path}")
        for key, value in _read_yaml(path).items():
            env_name = _YAML_KEYS.get(key)
            if env_name is None:
                logger.warning("Ignoring unknown console config key %s in %s", key, path)
                continue
            if os.getenv(env_name) is not None:
                continue
            overrides[key] = value
    return Settings(**overrides)
