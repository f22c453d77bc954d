"""
Configuration management using pydantic-settings.
"""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from saibun.constants import DEFAULT_DUST_THRESHOLD


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="SAIBUN_", env_file=".env", env_file_encoding="utf-8", case_sensitive=False
    )

    network: Literal["mainnet", "testnet"] = "mainnet"

    # Change at or below this many satoshis is added to the fee instead
    dust_threshold: int = Field(default=DEFAULT_DUST_THRESHOLD, ge=0)


def get_settings() -> Settings:
    return Settings()
