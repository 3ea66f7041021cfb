"""
Agent Model - The fixed set of front-desk personas and supported languages.
Holds presentation metadata and persona prompts for Sarah, Daisy and John.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Tuple, Union


class Agent(Enum):
    """One of the three customer-service personas."""
    HOST = "host"
    CONCIERGE = "concierge"
    SUPPORT = "support"

    @classmethod
    def parse(cls, value: Union["Agent", str]) -> "Agent":
        """Accept an Agent, its value, or a persona name like 'sarah'."""
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower()
        for agent in cls:
            if key == agent.value or key == AGENT_PROFILES[agent].name.lower():
                return agent
        raise ValueError(f"Unknown agent: {value!r}")


class LanguageCode(Enum):
    """Languages the desk can answer in."""
    EN = "en"
    TL = "tl"
    ZH = "zh"
    JA = "ja"
    KO = "ko"

    @property
    def display_name(self) -> str:
        return _LANGUAGE_NAMES[self]

    @property
    def locale(self) -> str:
        """BCP-47 tag used by speech recognition and synthesis."""
        return _LANGUAGE_LOCALES[self]

    @classmethod
    def parse(cls, value: Union["LanguageCode", str]) -> "LanguageCode":
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower()
        for language in cls:
            if key in (language.value, language.locale.lower(), language.display_name.lower()):
                return language
        raise ValueError(f"Unsupported language: {value!r}")


_LANGUAGE_NAMES = {
    LanguageCode.EN: "English",
    LanguageCode.TL: "Tagalog",
    LanguageCode.ZH: "Chinese",
    LanguageCode.JA: "Japanese",
    LanguageCode.KO: "Korean",
}

_LANGUAGE_LOCALES = {
    LanguageCode.EN: "en-US",
    LanguageCode.TL: "fil-PH",
    LanguageCode.ZH: "zh-CN",
    LanguageCode.JA: "ja-JP",
    LanguageCode.KO: "ko-KR",
}

DEFAULT_AGENT = Agent.HOST
DEFAULT_LANGUAGE = LanguageCode.EN


@dataclass(frozen=True)
class AgentProfile:
    """Display metadata and persona description for an agent."""
    name: str
    role: str
    badge: str
    color: str
    responsibilities: str
    persona: str

    def get_persona_prompt(self) -> str:
        """Build the persona part of a generation prompt."""
        return (
            f"You are {self.name}, the {self.role} at Hotel Rafaela. "
            f"Your responsibilities: {self.responsibilities}. {self.persona}"
        )


AGENT_PROFILES: Dict[Agent, AgentProfile] = {
    Agent.HOST: AgentProfile(
        name="Sarah",
        role="Welcoming Host",
        badge="Host",
        color="#6b9b76",
        responsibilities="General & Logistics",
        persona=(
            "You greet guests and answer general questions about the hotel, "
            "its facilities, WiFi, parking, dining, location and directions. "
            "Send booking questions to Daisy and problems to John."
        ),
    ),
    Agent.CONCIERGE: AgentProfile(
        name="Daisy",
        role="Booking Specialist",
        badge="Concierge",
        color="#d4a574",
        responsibilities="Scheduling & Payments",
        persona=(
            "You handle reservations, availability, room types, pricing, "
            "payments, deposits, cancellations and upgrades. Rooms start at "
            "$120/night for Standard, $180/night for Deluxe and $250/night for Suite."
        ),
    ),
    Agent.SUPPORT: AgentProfile(
        name="John",
        role="Support Manager",
        badge="Support",
        color="#7c6a5c",
        responsibilities="Operations & Assistance",
        persona=(
            "You resolve operational issues: housekeeping, maintenance, "
            "lost items, noise complaints, room temperature, in-room "
            "equipment and emergencies. Ask for the room number when needed."
        ),
    ),
}

AGENT_ORDER: Tuple[Agent, ...] = (Agent.HOST, Agent.CONCIERGE, Agent.SUPPORT)


def get_profile(agent: Union[Agent, str]) -> AgentProfile:
    """Get the profile of an agent."""
    return AGENT_PROFILES[Agent.parse(agent)]
