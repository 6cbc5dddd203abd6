from __future__ import annotations

from pathlib import Path

from dotenv import dotenv_values
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class RulesConfig(BaseSettings):
    model_config = SettingsConfigDict(extra="ignore")

    log_level: str | None = Field(default=None, alias="NUMBER_WITH_UNITS_LOG_LEVEL")
    currency_units_file: Path | None = Field(default=None, alias="NUMBER_WITH_UNITS_CURRENCY_FILE")


def load_home_env() -> dict[str, str]:
    env_path = Path.home() / ".env"
    if not env_path.exists():
        return {}
    raw = dotenv_values(env_path)
    return {k: v for k, v in raw.items() if isinstance(v, str)}


def resolve_currency_units_file(cli_value: str | None) -> Path | None:
    if cli_value:
        return Path(cli_value)
    configured = RulesConfig().currency_units_file
    if configured is not None:
        return configured
    home_value = load_home_env().get("NUMBER_WITH_UNITS_CURRENCY_FILE")
    return Path(home_value) if home_value else None


def resolve_log_level(cli_value: str | None) -> str:
    if cli_value:
        return cli_value.upper()
    configured = RulesConfig().log_level or load_home_env().get("NUMBER_WITH_UNITS_LOG_LEVEL")
    return (configured or "WARNING").upper()
