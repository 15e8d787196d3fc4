"""
Configuration for the RDAP lookup system.

This module defines the configuration dataclasses and the loaders that
build them from a JSON file or from environment variables (optionally
read from a .env file).
"""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import find_dotenv, load_dotenv

from .exceptions import ConfigError

IANA_BOOTSTRAP_URL = "https://data.iana.org/rdap/dns.json"
DEFAULT_TIMEOUT_SECONDS = 10.0
DEFAULT_USER_AGENT = "rdap-lookup/0.1.0"
DEFAULT_BOOTSTRAP_PATH = Path.home() / ".rdap_lookup" / "dns.json"
DEFAULT_CONFIG_PATH = Path.home() / ".rdap_lookup" / "config.json"

VALID_LOG_LEVELS = ("debug", "info", "warn", "error")
VALID_OUTPUT_FORMATS = ("json", "text", "both")


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "info"
    output_format: str = "text"  # 'json', 'text', 'both'


@dataclass
class LookupConfig:
    """Main configuration for bootstrap loading and RDAP queries."""

    bootstrap_path: Path = DEFAULT_BOOTSTRAP_PATH
    bootstrap_url: str = IANA_BOOTSTRAP_URL
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    user_agent: str = DEFAULT_USER_AGENT
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def validate(self) -> None:
        """
        Check value ranges.

        Raises:
            ConfigError: If any value is out of range
        """
        if self.timeout_seconds <= 0:
            raise ConfigError(
                code="invalid_timeout",
                message=f"timeout_seconds must be positive, got {self.timeout_seconds}",
                details={"timeout_seconds": self.timeout_seconds},
            )
        if self.logging.level not in VALID_LOG_LEVELS:
            raise ConfigError(
                code="invalid_log_level",
                message=f"Unknown log level: {self.logging.level}",
                details={"allowed": list(VALID_LOG_LEVELS)},
            )
        if self.logging.output_format not in VALID_OUTPUT_FORMATS:
            raise ConfigError(
                code="invalid_output_format",
                message=f"Unknown log output format: {self.logging.output_format}",
                details={"allowed": list(VALID_OUTPUT_FORMATS)},
            )


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        raise ConfigError(
            code="invalid_env_value",
            message=f"{name} must be a number, got {raw!r}",
            details={"variable": name, "value": raw},
        )


def load_config_from_env(env_file: Optional[Path] = None) -> LookupConfig:
    """
    Build configuration from environment variables.

    Variables from ``env_file`` (or a ``.env`` in the working directory) are
    loaded first without overriding variables already set in the process.

    Args:
        env_file: Optional path to a dotenv file

    Returns:
        Validated LookupConfig

    Raises:
        ConfigError: If a variable holds an invalid value
    """
    if env_file is not None:
        load_dotenv(env_file)
    else:
        load_dotenv(find_dotenv(usecwd=True))

    bootstrap_path = os.getenv("RDAP_BOOTSTRAP_PATH", "").strip()
    config = LookupConfig(
        bootstrap_path=Path(bootstrap_path) if bootstrap_path else DEFAULT_BOOTSTRAP_PATH,
        bootstrap_url=os.getenv("RDAP_BOOTSTRAP_URL", "").strip() or IANA_BOOTSTRAP_URL,
        timeout_seconds=_float_env("RDAP_TIMEOUT", DEFAULT_TIMEOUT_SECONDS),
        user_agent=os.getenv("RDAP_USER_AGENT", "").strip() or DEFAULT_USER_AGENT,
        logging=LoggingConfig(
            level=(os.getenv("RDAP_LOG_LEVEL", "") or "info").strip().lower(),
            output_format=(os.getenv("RDAP_LOG_FORMAT", "") or "text").strip().lower(),
        ),
    )
    config.validate()
    return config


def load_config_from_file(config_path: Path) -> LookupConfig:
    """
    Load configuration from a JSON file.

    Args:
        config_path: Path to the configuration file

    Returns:
        Validated LookupConfig

    Raises:
        ConfigError: If the file is missing, unreadable or malformed
    """
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        raise ConfigError(
            code="config_not_found",
            message=f"No configuration found at: {config_path}",
            details={"path": str(config_path)},
        )
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigError(
            code="config_unreadable",
            message=f"Error loading config: {e}",
            details={"path": str(config_path)},
        )

    if not isinstance(data, dict):
        raise ConfigError(
            code="config_malformed",
            message="Configuration root must be a JSON object",
            details={"path": str(config_path)},
        )

    try:
        logging_data = data.get("logging") or {}
        bootstrap_path = data.get("bootstrap_path")
        config = LookupConfig(
            bootstrap_path=Path(bootstrap_path) if bootstrap_path else DEFAULT_BOOTSTRAP_PATH,
            bootstrap_url=data.get("bootstrap_url") or IANA_BOOTSTRAP_URL,
            timeout_seconds=float(data.get("timeout_seconds", DEFAULT_TIMEOUT_SECONDS)),
            user_agent=data.get("user_agent") or DEFAULT_USER_AGENT,
            logging=LoggingConfig(
                level=logging_data.get("level", "info"),
                output_format=logging_data.get("output_format", "text"),
            ),
        )
    except (AttributeError, TypeError, ValueError) as e:
        raise ConfigError(
            code="config_malformed",
            message=f"Error loading config: {e}",
            details={"path": str(config_path)},
        )

    config.validate()
    return config


def save_config_to_file(config: LookupConfig, config_path: Path) -> None:
    """
    Save configuration to a JSON file.

    Raises:
        ConfigError: If the file cannot be written
    """
    data = {
        "bootstrap_path": str(config.bootstrap_path),
        "bootstrap_url": config.bootstrap_url,
        "timeout_seconds": config.timeout_seconds,
        "user_agent": config.user_agent,
        "logging": {
            "level": config.logging.level,
            "output_format": config.logging.output_format,
        },
    }
    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(config_path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
    except OSError as e:
        raise ConfigError(
            code="config_unwritable",
            message=f"Error saving config: {e}",
            details={"path": str(config_path)},
        )
