"""
Voice Profiles - Which synthetic voice each agent uses in each language.
John speaks with a male voice, Sarah and Daisy with female voices.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from ..models.agent import Agent, DEFAULT_LANGUAGE, LanguageCode

logger = logging.getLogger(__name__)

FEMALE_VOICE_NAMES = (
    "zira", "samantha", "karen", "moira", "ayumi", "huihui", "heami",
    "kyoko", "yuna", "yaoyao", "rosa", "victoria",
)
MALE_VOICE_NAMES = ("david", "alex", "daniel", "ichiro", "yunyang", "otoya", "minsu", "kangkang")


@dataclass(frozen=True)
class VoiceProfile:
    """Voice requirements for one agent speaking one language."""
    locale: str
    gender: str
    pitch: float
    preferred_names: Tuple[str, ...] = ()

    @property
    def language_prefix(self) -> str:
        return self.locale.split("-")[0].lower()


@dataclass
class VoiceInfo:
    """A voice offered by the speech engine."""
    id: str
    name: str
    languages: List[str] = field(default_factory=list)

    def speaks(self, prefix: str) -> bool:
        return any(lang.lower().replace("_", "-").startswith(prefix) for lang in self.languages)

    @property
    def _haystack(self) -> str:
        return f"{self.name} {self.id}".lower()

    @property
    def is_female(self) -> bool:
        haystack = self._haystack
        return "female" in haystack or any(n in haystack for n in FEMALE_VOICE_NAMES)

    @property
    def is_male(self) -> bool:
        if self.is_female:
            return False
        haystack = self._haystack
        return "male" in haystack or any(n in haystack for n in MALE_VOICE_NAMES)


_FEMALE_PREFERRED = {
    LanguageCode.EN: ("Google US English Female", "Microsoft Zira - English (United States)", "Samantha", "Victoria"),
    LanguageCode.TL: ("Google Filipino (Philippines) Female", "Google Filipino Female", "Microsoft Filipino Female", "Rosa"),
    LanguageCode.ZH: ("Google 普通话（中国大陆）Female", "Microsoft Huihui - Chinese (Simplified, PRC)", "Yaoyao"),
    LanguageCode.JA: ("Google 日本語 Female", "Microsoft Ayumi - Japanese (Japan)", "Kyoko"),
    LanguageCode.KO: ("Google 한국의 Female", "Microsoft Heami - Korean (Korea)", "Yuna"),
}

_MALE_PREFERRED = {
    LanguageCode.EN: ("Google US English Male", "Microsoft David - English (United States)", "Alex", "Daniel"),
    LanguageCode.TL: ("Google Filipino (Philippines) Male", "Google Filipino Male", "Microsoft Filipino Male"),
    LanguageCode.ZH: ("Google 普通话（中国大陆）Male", "Microsoft Yunyang - Chinese (Mainland)", "Kangkang"),
    LanguageCode.JA: ("Google 日本語 Male", "Microsoft Ichiro - Japanese (Japan)", "Otoya"),
    LanguageCode.KO: ("Google 한국의 Male", "Microsoft Korean Male", "Minsu"),
}


def _build_profiles() -> Dict[Tuple[Agent, LanguageCode], VoiceProfile]:
    profiles = {}
    for language in LanguageCode:
        profiles[(Agent.SUPPORT, language)] = VoiceProfile(
            language.locale, "male", 0.9, _MALE_PREFERRED[language])
        for agent in (Agent.HOST, Agent.CONCIERGE):
            profiles[(agent, language)] = VoiceProfile(
                language.locale, "female", 1.1, _FEMALE_PREFERRED[language])
    return profiles


VOICE_PROFILES = _build_profiles()


def get_voice_profile(agent: Agent, language: LanguageCode) -> VoiceProfile:
    """Profile for an agent, falling back to the default language."""
    return VOICE_PROFILES.get((agent, language)) or VOICE_PROFILES[(agent, DEFAULT_LANGUAGE)]


def select_voice(voices: Sequence[VoiceInfo], agent: Agent, language: LanguageCode) -> Optional[VoiceInfo]:
    """Pick the best available voice for an agent speaking a language.

    Order of preference: a preferred voice name, a voice matching both
    language and gender, a voice in the language (gender-filtered when
    possible), and finally any voice at all.
    """
    profile = get_voice_profile(agent, language)

    for preferred in profile.preferred_names:
        for voice in voices:
            if preferred in voice.name or preferred in voice.id:
                logger.debug(f"Found preferred voice: {voice.name}")
                return voice

    def gender_ok(voice: VoiceInfo) -> bool:
        return voice.is_female if profile.gender == "female" else voice.is_male

    lang_voices = [v for v in voices if v.speaks(profile.language_prefix)]
    matching = [v for v in lang_voices if gender_ok(v)]
    if matching:
        logger.debug(f"Found {profile.gender} voice for {profile.locale}: {matching[0].name}")
        return matching[0]

    if lang_voices:
        if profile.gender == "female":
            fallback = [v for v in lang_voices if v.is_female or not v.is_male]
        else:
            fallback = [v for v in lang_voices if v.is_male]
        voice = (fallback or lang_voices)[0]
        logger.debug(f"Using fallback voice: {voice.name}")
        return voice

    if voices:
        logger.warning(f"No suitable voice for {agent.value}/{language.value}, using default")
        return voices[0]
    return None
