"""
Configuration management for polyarb.

Supports:
- Environment variables / .env file for deployment settings
- YAML config for business rules (ranking, guards, scheduler)
"""

from functools import lru_cache
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ==============================================
    # Environment
    # ==============================================
    polyarb_env: str = Field(default="local", description="Environment: local/cloud")
    log_level: str = Field(default="INFO")
    timezone: str = Field(default="UTC", description="Display timezone for reports")

    # ==============================================
    # Polymarket
    # ==============================================
    polymarket_api: str = Field(default="graphql", description="Market source: graphql/gamma")
    polymarket_graphql_url: str = Field(default="https://api.polymarket.com/graphql")
    polymarket_gamma_url: str = Field(default="https://gamma-api.polymarket.com")
    polymarket_market_url: str = Field(
        default="https://polymarket.com/market/{id}",
        description="Outbound link template, keyed by market id",
    )

    # ==============================================
    # Output
    # ==============================================
    snapshot_path: str = Field(default="data.json")
    report_path: str = Field(default="index.html")

    # ==============================================
    # Runtime Config
    # ==============================================
    http_timeout: int = Field(default=15, description="HTTP timeout in seconds")
    http_max_retries: int = Field(default=3, ge=1)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v = v.upper()
        if v not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return v

    @field_validator("polymarket_api")
    @classmethod
    def validate_polymarket_api(cls, v: str) -> str:
        v = v.lower()
        if v not in {"graphql", "gamma"}:
            raise ValueError(f"Invalid Polymarket API: {v}. Must be 'graphql' or 'gamma'")
        return v

    @property
    def is_local(self) -> bool:
        return self.polyarb_env == "local"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def _find_config_dir() -> Optional[Path]:
    """Locate the project's config/ directory (next to pyproject.toml)."""
    current = Path(__file__).resolve()
    for parent in current.parents:
        if (parent / "pyproject.toml").exists():
            return parent / "config"
    return None


def load_yaml_config(config_path: Optional[str] = None) -> dict[str, Any]:
    """
    Load YAML configuration file.

    Args:
        config_path: Path to config file. Defaults to config/config.yaml

    Returns:
        Configuration dictionary

    Raises:
        FileNotFoundError: If the config file does not exist
    """
    if config_path is None:
        config_dir = _find_config_dir()
        if config_dir is not None:
            config_path = str(config_dir / "config.yaml")
        else:
            config_path = "config/config.yaml"

    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}
