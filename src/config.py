"""YAML configuration loader with env var resolution and Pydantic validation.

Loads config from (priority order):
1. CLOUDSHIP_CONFIG_PATH / explicit path
2. ./cloudship.yaml (working directory)
3. ~/.cloudship/config.yaml (user home)

Environment variables override YAML: CLOUDSHIP_<SECTION>_<KEY>.
${VAR} references in YAML values resolve from environment at load time.
With no config file at all, defaults plus env overrides are used.
"""

import logging
import os
import re
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, model_validator

logger = logging.getLogger(__name__)

_ENV_VAR_PATTERN = re.compile(r"\$\{([^}]+)\}")
_ENV_PREFIX = "CLOUDSHIP_"


def resolve_env_vars(value: str) -> str:
    """Resolve ${VAR} references in a string from environment variables.

    Missing env vars resolve to empty string.
    """
    def _replace(match: re.Match) -> str:
        return os.environ.get(match.group(1), "")

    return _ENV_VAR_PATTERN.sub(_replace, value)


def _resolve_env_vars_recursive(data: Any) -> Any:
    """Recursively resolve ${VAR} references in a nested data structure."""
    if isinstance(data, str):
        return resolve_env_vars(data)
    elif isinstance(data, dict):
        return {k: _resolve_env_vars_recursive(v) for k, v in data.items()}
    elif isinstance(data, list):
        return [_resolve_env_vars_recursive(item) for item in data]
    return data


class ShopifyConfig(BaseModel):
    """Shopify app credentials and Admin API settings."""

    api_secret: str = ""
    api_version: str = "2024-01"
    request_timeout_seconds: float = Field(default=10.0, gt=0)
    # Whole-computation budget for one carrier-service callback
    rate_deadline_seconds: float | None = Field(default=8.0, gt=0)

    @model_validator(mode="after")
    def secret_from_env(self) -> "ShopifyConfig":
        """Fall back to the conventional SHOPIFY_API_SECRET variable."""
        if not self.api_secret:
            self.api_secret = os.environ.get("SHOPIFY_API_SECRET", "")
        return self


class RateLimitConfig(BaseModel):
    """Fixed-window limits for admin endpoints."""

    window_seconds: int = Field(default=60, gt=0)
    max_requests: int = Field(default=30, gt=0)


class LoggingConfig(BaseModel):
    """Log level for the application loggers."""

    level: str = "INFO"


class CloudshipConfig(BaseModel):
    """Top-level configuration for the Cloudship service."""

    shopify: ShopifyConfig = Field(default_factory=ShopifyConfig)
    rate_limit: RateLimitConfig = Field(default_factory=RateLimitConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def _find_config_file() -> Path | None:
    """Search for config file in standard locations."""
    candidates = [
        Path.cwd() / "cloudship.yaml",
        Path.cwd() / "cloudship.yml",
        Path.home() / ".cloudship" / "config.yaml",
        Path.home() / ".cloudship" / "config.yml",
    ]
    for candidate in candidates:
        if candidate.exists():
            return candidate
    return None


def _apply_env_overrides(data: dict[str, Any]) -> dict[str, Any]:
    """Apply CLOUDSHIP_<SECTION>_<KEY> env var overrides to config data.

    Matches section names by longest prefix so multi-word section names
    like ``rate_limit`` are handled correctly. For example,
    ``CLOUDSHIP_RATE_LIMIT_MAX_REQUESTS`` maps to section ``rate_limit``,
    field ``max_requests``.
    """
    known_sections = sorted(
        CloudshipConfig.model_fields.keys(), key=len, reverse=True
    )
    for key, value in os.environ.items():
        if not key.startswith(_ENV_PREFIX):
            continue
        suffix = key[len(_ENV_PREFIX):].lower()
        matched_section = None
        matched_field = None
        for section in known_sections:
            section_prefix = section + "_"
            if suffix.startswith(section_prefix):
                matched_section = section
                matched_field = suffix[len(section_prefix):]
                break
        if matched_section is None or not matched_field:
            continue
        if not isinstance(data.get(matched_section), dict):
            data[matched_section] = {}
        # Coerce to int, float, bool, or keep as string
        try:
            data[matched_section][matched_field] = int(value)
        except ValueError:
            try:
                data[matched_section][matched_field] = float(value)
            except ValueError:
                if value.lower() in ("true", "false"):
                    data[matched_section][matched_field] = value.lower() == "true"
                else:
                    data[matched_section][matched_field] = value
    return data


def load_config(config_path: str | None = None) -> CloudshipConfig:
    """Load Cloudship configuration from YAML with env var resolution.

    Args:
        config_path: Explicit path to config file. If None, uses
            CLOUDSHIP_CONFIG_PATH, then searches standard locations.

    Returns:
        Validated CloudshipConfig.

    Raises:
        FileNotFoundError: An explicit path does not exist.
    """
    config_path = config_path or os.environ.get("CLOUDSHIP_CONFIG_PATH") or None
    if config_path:
        path: Path | None = Path(config_path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")
    else:
        path = _find_config_file()

    raw_data: dict[str, Any] = {}
    if path is not None:
        logger.info("Loading config from %s", path)
        with open(path) as f:
            raw_data = yaml.safe_load(f) or {}

    data = _resolve_env_vars_recursive(raw_data)
    data = _apply_env_overrides(data)
    return CloudshipConfig(**data)
