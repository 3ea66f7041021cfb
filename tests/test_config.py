import pytest
from pydantic import ValidationError

from hotel_desk.core.config import Config, load_config, save_config
from hotel_desk.models.agent import Agent, LanguageCode

ENV_VARS = (
    "GEMINI_API_KEY", "OPENAI_API_KEY", "ANTHROPIC_API_KEY", "OLLAMA_API_URL",
    "HOTEL_DESK_LANGUAGE", "HOTEL_DESK_TTS_ENGINE", "HOTEL_DESK_LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def clear_env(monkeypatch):
    # Ensure env vars don't interfere across tests
    for k in ENV_VARS:
        monkeypatch.delenv(k, raising=False)
    yield


def test_defaults_without_file(tmp_path):
    config = load_config(str(tmp_path / "missing.yaml"))
    assert config.app_name == "Hotel Rafaela Smart Service"
    assert config.session.default_agent is Agent.HOST
    assert config.session.default_language is LanguageCode.EN
    assert config.voice.tts_engine == "pyttsx3"
    assert config.ai.gemini_api_key is None


def test_yaml_file_is_merged(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "session:\n  default_agent: daisy\n  default_language: ja\n  random_seed: 7\n"
        "ai:\n  request_timeout: 3\n",
        encoding="utf-8",
    )
    config = load_config(str(path))
    assert config.session.default_agent is Agent.CONCIERGE
    assert config.session.default_language is LanguageCode.JA
    assert config.session.random_seed == 7
    assert config.ai.request_timeout == 3.0
    assert config.ai.max_tokens == 512


def test_environment_overrides_file(tmp_path, monkeypatch):
    path = tmp_path / "config.yaml"
    path.write_text("session:\n  default_language: ja\n", encoding="utf-8")
    monkeypatch.setenv("HOTEL_DESK_LANGUAGE", "ko")
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    monkeypatch.setenv("HOTEL_DESK_LOG_LEVEL", "DEBUG")

    config = load_config(str(path))
    assert config.session.default_language is LanguageCode.KO
    assert config.ai.openai_api_key == "sk-test"
    assert config.log_level == "DEBUG"


def test_unknown_tts_engine_rejected():
    with pytest.raises(ValidationError):
        Config(voice={"tts_engine": "espeak-ng-ultra"})


def test_unknown_language_rejected():
    with pytest.raises(ValidationError):
        Config(session={"default_language": "fr"})


def test_save_and_reload(tmp_path):
    path = tmp_path / "out" / "config.yaml"
    config = Config(session={"default_language": "tl"}, voice={"tts_engine": "none"})
    save_config(config, str(path))

    reloaded = load_config(str(path))
    assert reloaded.session.default_language is LanguageCode.TL
    assert reloaded.voice.tts_engine == "none"
