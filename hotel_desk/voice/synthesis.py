"""
Voice Synthesis - Speaks agent replies aloud.
Local pyttsx3 engine with per-agent voices, plus a silent output for
text-only sessions.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional

import pyttsx3

from ..core.config import VoiceConfig
from ..models.agent import Agent, LanguageCode
from .profiles import VoiceInfo, get_voice_profile, select_voice

logger = logging.getLogger(__name__)


class SpeechOutput(ABC):
    """Speech output collaborator.

    ``speak`` resolves when playback has finished or failed and must not
    raise.
    """

    @abstractmethod
    async def speak(self, text: str, agent: Agent, language: LanguageCode) -> None:
        """Speak ``text`` in the agent's voice."""

    async def stop(self):
        pass

    async def shutdown(self):
        pass


class SilentSpeechOutput(SpeechOutput):
    """Logs replies instead of speaking them."""

    def __init__(self):
        self.spoken: List[str] = []

    async def speak(self, text: str, agent: Agent, language: LanguageCode) -> None:
        self.spoken.append(text)
        logger.info(f"[{agent.value}/{language.value}] {text}")


def _decode_language(raw) -> str:
    """pyttsx3 drivers report languages as str or as length-prefixed bytes."""
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8", errors="ignore")
    return "".join(ch for ch in str(raw) if ch.isalnum() or ch in "-_")


class Pyttsx3SpeechOutput(SpeechOutput):
    """pyttsx3 text-to-speech with a voice chosen per agent and language."""

    def __init__(self, config: VoiceConfig):
        self.config = config
        self.engine: Optional[pyttsx3.Engine] = None
        self.available_voices: List[VoiceInfo] = []
        # pyttsx3 engines must stay on the thread that created them
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="tts")

    def _init_engine(self):
        self.engine = pyttsx3.init()
        self.available_voices = [
            VoiceInfo(
                id=voice.id,
                name=voice.name or voice.id,
                languages=[_decode_language(lang) for lang in (getattr(voice, "languages", None) or [])],
            )
            for voice in self.engine.getProperty("voices")
        ]
        self.engine.setProperty("rate", self.config.tts_rate)
        self.engine.setProperty("volume", self.config.tts_volume)
        logger.info(f"pyttsx3 initialized with {len(self.available_voices)} voices")

    async def initialize(self):
        """Initialize the pyttsx3 engine."""
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(self._executor, self._init_engine)

    def _speak_blocking(self, text: str, agent: Agent, language: LanguageCode):
        if self.engine is None:
            self._init_engine()

        voice = select_voice(self.available_voices, agent, language)
        if voice:
            self.engine.setProperty("voice", voice.id)

        profile = get_voice_profile(agent, language)
        try:
            # Only some drivers expose pitch (0-100, default 50)
            self.engine.setProperty("pitch", int(50 * profile.pitch))
        except Exception:
            logger.debug("TTS driver does not support pitch")

        self.engine.say(text)
        self.engine.runAndWait()

    async def speak(self, text: str, agent: Agent, language: LanguageCode) -> None:
        if not text.strip():
            return
        loop = asyncio.get_running_loop()
        try:
            await loop.run_in_executor(self._executor, self._speak_blocking, text, agent, language)
        except Exception as e:
            logger.error(f"Speech synthesis failed: {e}")

    async def stop(self):
        if self.engine:
            try:
                self.engine.stop()
            except Exception as e:
                logger.error(f"Failed to stop speech: {e}")

    async def shutdown(self):
        await self.stop()
        self._executor.shutdown(wait=False)
        logger.info("Voice synthesis shutdown")


def create_speech_output(config: VoiceConfig) -> SpeechOutput:
    """Create the configured speech output."""
    if config.tts_engine == "none":
        return SilentSpeechOutput()
    return Pyttsx3SpeechOutput(config)
