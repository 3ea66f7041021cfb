"""
Configuration management for the Hotel Rafaela service desk.
Handles loading and validation of application settings.
"""

import os
from pathlib import Path
from typing import Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

from ..models.agent import Agent, DEFAULT_AGENT, DEFAULT_LANGUAGE, LanguageCode

# Load environment variables
load_dotenv()


class AIConfig(BaseModel):
    """Generative fallback configuration."""
    local_model: str = "llama3.1:8b"
    local_api_url: str = "http://localhost:11434"
    use_local_ai: bool = False
    gemini_api_key: Optional[str] = None
    gemini_model: str = "gemini-1.5-flash"
    openai_api_key: Optional[str] = None
    openai_model: str = "gpt-4o-mini"
    anthropic_api_key: Optional[str] = None
    anthropic_model: str = "claude-3-haiku-20240307"
    temperature: float = 0.7
    max_tokens: int = 512
    request_timeout: float = 15.0


class VoiceConfig(BaseModel):
    """Speech output configuration."""
    tts_engine: str = "pyttsx3"  # pyttsx3, none
    tts_rate: int = 180
    tts_volume: float = 0.9

    @field_validator("tts_engine")
    @classmethod
    def _known_engine(cls, value: str) -> str:
        value = value.lower()
        if value not in ("pyttsx3", "none"):
            raise ValueError(f"Unknown TTS engine: {value}")
        return value


class SessionConfig(BaseModel):
    """Conversation session defaults."""
    default_agent: Agent = DEFAULT_AGENT
    default_language: LanguageCode = DEFAULT_LANGUAGE
    random_seed: Optional[int] = None
    welcome_on_start: bool = True

    @field_validator("default_agent", mode="before")
    @classmethod
    def _parse_agent(cls, value):
        return Agent.parse(value)

    @field_validator("default_language", mode="before")
    @classmethod
    def _parse_language(cls, value):
        return LanguageCode.parse(value)


class TableConfig(BaseModel):
    """Optional overrides for the packaged routing and response tables."""
    routing_file: Optional[Path] = None
    scripted_file: Optional[Path] = None
    phrases_file: Optional[Path] = None


class Config(BaseModel):
    """Main application configuration."""
    app_name: str = "Hotel Rafaela Smart Service"
    version: str = "1.0.0"
    debug: bool = False
    log_level: str = "INFO"
    log_dir: Path = Path("logs")

    ai: AIConfig = Field(default_factory=AIConfig)
    voice: VoiceConfig = Field(default_factory=VoiceConfig)
    session: SessionConfig = Field(default_factory=SessionConfig)
    tables: TableConfig = Field(default_factory=TableConfig)


_ENV_OVERRIDES = {
    "GEMINI_API_KEY": ("ai", "gemini_api_key"),
    "OPENAI_API_KEY": ("ai", "openai_api_key"),
    "ANTHROPIC_API_KEY": ("ai", "anthropic_api_key"),
    "OLLAMA_API_URL": ("ai", "local_api_url"),
    "HOTEL_DESK_LANGUAGE": ("session", "default_language"),
    "HOTEL_DESK_TTS_ENGINE": ("voice", "tts_engine"),
}


def deep_merge(base: dict, override: dict) -> dict:
    """Deep merge two dictionaries."""
    for key, value in override.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            base[key] = deep_merge(base[key], value)
        else:
            base[key] = value
    return base


def load_config(config_file: Optional[str] = None) -> Config:
    """Load configuration from file or environment variables."""
    if config_file is None:
        config_file = "configs/config.yaml"

    config_path = Path(config_file)

    config_data = {}
    if config_path.exists() and config_path.suffix in [".yaml", ".yml"]:
        with open(config_path, "r", encoding="utf-8") as f:
            config_data = yaml.safe_load(f) or {}

    env_overrides = {}
    for variable, (section, key) in _ENV_OVERRIDES.items():
        if os.getenv(variable):
            env_overrides.setdefault(section, {})[key] = os.getenv(variable)

    if os.getenv("HOTEL_DESK_LOG_LEVEL"):
        env_overrides["log_level"] = os.getenv("HOTEL_DESK_LOG_LEVEL")

    return Config(**deep_merge(config_data, env_overrides))


def save_config(config: Config, config_file: str = "configs/config.yaml"):
    """Save configuration to YAML file."""
    config_path = Path(config_file)
    config_path.parent.mkdir(parents=True, exist_ok=True)

    config_dict = config.model_dump(mode="json")

    with open(config_path, "w", encoding="utf-8") as f:
        yaml.dump(config_dict, f, default_flow_style=False, indent=2, allow_unicode=True)
