"""
Conversation Model - Turns, per-agent threads and perceived guest context.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Iterator, List, Mapping, Optional

from .agent import Agent

logger = logging.getLogger(__name__)

EMOTIONS = ("happy", "sad", "angry", "surprised", "neutral", "fearful", "disgusted")
AGE_CATEGORIES = ("child", "adult")
ADULT_AGE = 18


class Speaker(Enum):
    USER = "user"
    AGENT = "agent"


@dataclass(frozen=True)
class Context:
    """Perceived guest attributes attached to a single user turn."""
    age_category: Optional[str] = None
    emotion: Optional[str] = None
    age_value: Optional[int] = None
    gender: Optional[str] = None

    @property
    def is_minor(self) -> bool:
        return self.age_category == "child"

    @classmethod
    def from_detection(cls, detection: Optional[Mapping[str, Any]]) -> Optional["Context"]:
        """Build a context from an emotion detector payload.

        The detector reports ``age`` as a category, ``ageValue`` as an
        estimate in years, ``gender`` and the dominant ``emotion``.
        """
        if not detection:
            return None

        age_value = detection.get("ageValue", detection.get("age_value"))
        if age_value is not None:
            age_value = int(round(float(age_value)))

        age_category = detection.get("age", detection.get("age_category"))
        if isinstance(age_category, (int, float)):
            age_value = int(round(age_category))
            age_category = None
        if age_category is None and age_value is not None:
            age_category = "child" if age_value < ADULT_AGE else "adult"
        if age_category is not None:
            age_category = str(age_category).lower()
            if age_category not in AGE_CATEGORIES:
                logger.warning(f"Ignoring unknown age category: {age_category}")
                age_category = None

        emotion = detection.get("emotion")
        if emotion is not None:
            emotion = str(emotion).lower()
            if emotion not in EMOTIONS:
                logger.warning(f"Ignoring unknown emotion: {emotion}")
                emotion = None

        gender = detection.get("gender")
        return cls(
            age_category=age_category,
            emotion=emotion,
            age_value=age_value,
            gender=str(gender).lower() if gender else None,
        )


@dataclass(frozen=True)
class Turn:
    """One message in a thread, from the guest or from an agent."""
    speaker: Speaker
    text: str
    agent_id: Optional[Agent] = None
    context: Optional[Context] = None
    created_at: datetime = field(default_factory=datetime.now)

    @classmethod
    def from_user(cls, text: str, context: Optional[Context] = None) -> "Turn":
        return cls(speaker=Speaker.USER, text=text, context=context)

    @classmethod
    def from_agent(cls, agent: Agent, text: str) -> "Turn":
        return cls(speaker=Speaker.AGENT, text=text, agent_id=agent)

    @property
    def is_user(self) -> bool:
        return self.speaker is Speaker.USER

    def to_dict(self) -> dict:
        return {
            "speaker": self.speaker.value,
            "agent": self.agent_id.value if self.agent_id else None,
            "text": self.text,
            "context": vars(self.context) if self.context else None,
            "created_at": self.created_at.isoformat(),
        }


class Thread:
    """Append-only turn history owned by one agent."""

    def __init__(self, agent: Agent):
        self.agent = agent
        self._turns: List[Turn] = []

    def append(self, turn: Turn) -> Turn:
        self._turns.append(turn)
        return turn

    @property
    def is_empty(self) -> bool:
        return not self._turns

    @property
    def last(self) -> Optional[Turn]:
        return self._turns[-1] if self._turns else None

    def __len__(self) -> int:
        return len(self._turns)

    def __iter__(self) -> Iterator[Turn]:
        return iter(tuple(self._turns))

    def __getitem__(self, index):
        return self._turns[index]

    def __repr__(self) -> str:
        return f"Thread(agent={self.agent.value}, turns={len(self._turns)})"


@dataclass(frozen=True)
class RenderState:
    """Read-only view of the session for an avatar renderer."""
    active_agent: Agent
    is_speaking: bool
    emotion: str
    spoken_text: str
