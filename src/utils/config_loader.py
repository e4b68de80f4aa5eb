"""
Configuration loader for the billing agreement broker.

Settings are assembled once at startup from three layers, later layers winning:
1. model defaults below
2. optional YAML file (config/app_config.yml) for non-secret settings
3. environment variables (a .env file is loaded first)
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, Literal, Mapping, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).parent.parent.parent / "config" / "app_config.yml"


class PayPalConfig(BaseModel):
    """Provider credentials and transport settings"""

    model_config = {"frozen": True}

    client_id: str = ""
    client_secret: str = ""
    api_base: str = "https://api-m.sandbox.paypal.com"
    timeout_seconds: float = Field(default=30.0, gt=0.0, le=300.0)
    token_refresh_skew_seconds: int = Field(default=60, ge=0, le=3600)

    @property
    def has_credentials(self) -> bool:
        return bool(self.client_id and self.client_secret)


class ServerConfig(BaseModel):
    model_config = {"frozen": True}

    host: str = "0.0.0.0"
    port: int = Field(default=5174, ge=1, le=65535)
    static_dir: str = "public"
    landing_page: str = "ba.html"


class ChargeDefaults(BaseModel):
    model_config = {"frozen": True}

    amount: str = "10.00"
    currency: str = Field(default="USD", min_length=3, max_length=3)


class AppConfig(BaseModel):
    model_config = {"frozen": True}

    paypal: PayPalConfig = Field(default_factory=PayPalConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    charge_defaults: ChargeDefaults = Field(default_factory=ChargeDefaults)
    integrations_mode: Literal["real", "mock"] = "real"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"


# env var -> (section, key); section None means top level
_ENV_OVERRIDES = {
    "PAYPAL_CLIENT_ID": ("paypal", "client_id"),
    "PAYPAL_CLIENT_SECRET": ("paypal", "client_secret"),
    "PAYPAL_API_BASE": ("paypal", "api_base"),
    "PAYPAL_TIMEOUT_SECONDS": ("paypal", "timeout_seconds"),
    "HOST": ("server", "host"),
    "PORT": ("server", "port"),
    "STATIC_DIR": ("server", "static_dir"),
    "INTEGRATIONS_MODE": (None, "integrations_mode"),
    "LOG_LEVEL": (None, "log_level"),
}


def _apply_env_overrides(data: Dict[str, Any], env: Mapping[str, str]) -> Dict[str, Any]:
    merged = {k: (dict(v) if isinstance(v, dict) else v) for k, v in data.items()}
    for var, (section, key) in _ENV_OVERRIDES.items():
        value = env.get(var)
        if value is None or not value.strip():
            continue
        value = value.strip()
        if key == "integrations_mode":
            value = value.lower()
        elif key == "log_level":
            value = value.upper()
        if section is None:
            merged[key] = value
            continue
        if not isinstance(merged.get(section), dict):
            merged[section] = {}
        merged[section][key] = value
    return merged


def load_app_config(
    config_path: Optional[Path] = None,
    env: Optional[Mapping[str, str]] = None,
) -> AppConfig:
    """
    Load and validate application configuration

    Args:
        config_path: YAML file with non-secret settings. Defaults to
            config/app_config.yml; a missing file is not an error.
        env: Environment mapping. Defaults to os.environ after loading .env.

    Returns:
        Validated AppConfig object

    Raises:
        ValidationError: If the merged settings don't match the schema
    """
    if env is None:
        load_dotenv()
        env = os.environ

    if config_path is None:
        config_path = DEFAULT_CONFIG_PATH

    data: Dict[str, Any] = {}
    if config_path.exists():
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        logger.debug("Read app config file %s", config_path)

    try:
        cfg = AppConfig(**_apply_env_overrides(data, env))
    except ValidationError as e:
        logger.error("App config validation failed: %s", e)
        raise

    if cfg.integrations_mode == "real" and not cfg.paypal.has_credentials:
        logger.warning("PAYPAL_CLIENT_ID / PAYPAL_CLIENT_SECRET are not set; provider calls will fail.")

    logger.info(
        "Loaded app config (mode=%s, api_base=%s, port=%d)",
        cfg.integrations_mode,
        cfg.paypal.api_base,
        cfg.server.port,
    )
    return cfg
