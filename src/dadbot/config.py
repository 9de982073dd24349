"""dadbot configuration — loads from dadbot.yaml + env."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _load_yaml_config() -> dict[str, Any]:
    """Load dadbot.yaml from DADBOT_CONFIG_PATH or default locations."""
    config_path = os.getenv("DADBOT_CONFIG_PATH")
    search_paths = (
        [Path(config_path)]
        if config_path
        else [
            Path("/etc/dadbot/dadbot.yaml"),
            Path("dadbot.yaml"),
        ]
    )
    for path in search_paths:
        if path.exists():
            with open(path) as f:
                return yaml.safe_load(f) or {}
    return {}


class DiscordChannelConfig(BaseSettings):
    """Discord channel configuration."""

    enabled: bool = True
    token: str = Field(default="", description="Discord bot token")

    model_config = SettingsConfigDict(env_prefix="DADBOT_DISCORD_")


class ResponderConfig(BaseSettings):
    """Trigger dispatch tuning: cooldown windows and pause duration bounds."""

    joke_cooldown_s: float = Field(default=5.0, ge=0.0, description="Min seconds between joke fetches")
    goodnight_cooldown_s: float = Field(default=3.0, ge=0.0, description="Min seconds between good-night replies")
    pause_min_minutes: int = Field(default=15, ge=0)
    pause_max_minutes: int = Field(default=20, ge=0)

    model_config = SettingsConfigDict(env_prefix="DADBOT_RESPONDER_")

    @model_validator(mode="after")
    def _check_pause_bounds(self) -> ResponderConfig:
        if self.pause_max_minutes < self.pause_min_minutes:
            raise ValueError("pause_max_minutes must be >= pause_min_minutes")
        return self


class RemarksConfig(BaseSettings):
    """Remote joke service configuration."""

    url: str = Field(default="https://icanhazdadjoke.com/", description="Plain-text joke endpoint")
    timeout_s: float = Field(default=10.0, gt=0.0, description="Request timeout in seconds")
    user_agent: str = Field(default="dadbot/1.0 (Discord bot)")

    model_config = SettingsConfigDict(env_prefix="DADBOT_REMARKS_")


class ChannelsConfig(BaseModel):
    """Top-level channels configuration."""

    discord: DiscordChannelConfig = Field(default_factory=DiscordChannelConfig)


class DadbotConfig(BaseSettings):
    """Root dadbot configuration."""

    # Sub-configs
    channels: ChannelsConfig = Field(default_factory=ChannelsConfig)
    responder: ResponderConfig = Field(default_factory=ResponderConfig)
    remarks: RemarksConfig = Field(default_factory=RemarksConfig)

    # Logging
    log_level: str = Field(default="INFO")
    log_format: Literal["json", "console"] = Field(default="json")

    model_config = SettingsConfigDict(
        env_prefix="DADBOT_",
        env_nested_delimiter="__",
    )

    @classmethod
    def load(cls) -> DadbotConfig:
        """Load config from YAML + env vars (env takes precedence)."""
        yaml_cfg = _load_yaml_config()

        channels_data = yaml_cfg.pop("channels", {})
        responder_data = yaml_cfg.pop("responder", {})
        remarks_data = yaml_cfg.pop("remarks", {})

        # Only pass YAML sub-configs if they have data;
        # otherwise let pydantic-settings pick up env vars
        kwargs: dict[str, Any] = {**yaml_cfg}
        if channels_data:
            kwargs["channels"] = ChannelsConfig(**channels_data)
        if responder_data:
            kwargs["responder"] = ResponderConfig(**responder_data)
        if remarks_data:
            kwargs["remarks"] = RemarksConfig(**remarks_data)

        return cls(**kwargs)


# Singleton
_config: DadbotConfig | None = None


def get_config() -> DadbotConfig:
    """Get or create the global config."""
    global _config
    if _config is None:
        _config = DadbotConfig.load()
    return _config
