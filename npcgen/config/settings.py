"""
Application settings and configuration management.

Uses Pydantic Settings for validation and environment variable support.
"""

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BotSettings(BaseSettings):
    """Discord bot configuration."""

    name: str = Field(default="NPC Generator", description="Bot display name")
    command_prefix: str = Field(default="!", description="Command prefix for bot commands")
    token: str = Field(default="", description="Discord bot token")
    allowed_channel_ids: list[int] = Field(
        default_factory=list,
        description="If non-empty, bot only responds in these channel IDs. "
                    "Set via BOT__ALLOWED_CHANNEL_IDS='[123456,789012]'",
    )
    dev_guild_id: int | None = Field(
        default=None,
        description="If set, syncs slash commands to this guild instantly (dev mode). "
                    "If None, syncs globally (up to 1 hour propagation).",
    )


class LLMSettings(BaseSettings):
    """LLM API configuration."""

    model: str = Field(
        default="openai/gpt-4o-mini",
        description="LiteLLM model string, e.g. 'openai/gpt-4o-mini', "
                    "'anthropic/claude-3-5-sonnet-20241022', 'ollama/llama3'. The provider "
                    "prefix tells LiteLLM which API to route the request to.",
    )
    max_tokens: int = Field(default=2048, description="Maximum tokens in response")
    temperature: float = Field(default=0.9, description="Sampling temperature")
    api_key: str = Field(default="", description="API key for the model's provider")
    json_mode: bool = Field(
        default=True,
        description="Request a JSON object response format. Disable for providers "
                    "that reject the response_format parameter.",
    )

    model_config = SettingsConfigDict(env_prefix="LLM_")


class GeneratorSettings(BaseSettings):
    """NPC generation behaviour."""

    hide_alignment: bool = Field(
        default=False,
        description="Write 'Unknown' as the alignment on generated sheets",
    )
    source: str = Field(
        default="NPC Generator (GPT)",
        description="Value stored in the actor's details.source field",
    )
    output_dir: Path = Field(
        default=Path("data/actors"),
        description="Directory where generated actor JSON documents are written",
    )

    model_config = SettingsConfigDict(env_prefix="GENERATOR_")


class CompendiumSettings(BaseSettings):
    """Item and spell packs used to equip generated NPCs."""

    items_pack: Path | None = Field(
        default=None,
        description="JSON or JSON-lines file of item documents (e.g. dnd5e.items export)",
    )
    spells_pack: Path | None = Field(
        default=None,
        description="JSON or JSON-lines file of spell documents (e.g. dnd5e.spells export)",
    )

    model_config = SettingsConfigDict(env_prefix="COMPENDIUM_")


class Settings(BaseSettings):
    """Main application settings."""

    # Environment
    environment: Literal["development", "production"] = Field(
        default="development", description="Deployment environment"
    )

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Logging level"
    )
    log_file: Path | None = Field(default=None, description="Log file path")

    # Sub-configurations
    bot: BotSettings = Field(default_factory=BotSettings)
    llm: LLMSettings = Field(default_factory=LLMSettings)
    generator: GeneratorSettings = Field(default_factory=GeneratorSettings)
    compendium: CompendiumSettings = Field(default_factory=CompendiumSettings)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )


# Global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get or create the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def load_settings(env_file: str | Path | None = None) -> Settings:
    """
    Load settings from file and environment.

    Args:
        env_file: Path to .env file (optional)

    Returns:
        Loaded settings instance
    """
    global _settings
    if env_file:
        _settings = Settings(_env_file=env_file)
    else:
        _settings = Settings()
    return _settings
