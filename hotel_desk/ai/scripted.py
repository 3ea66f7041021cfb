"""
Scripted Resolver - Canned replies chosen by whole-word trigger matching.
"""

import logging
import random
import re
from typing import Callable, Dict, Optional, Sequence

from ..models.agent import Agent, LanguageCode
from ..utils.tables import ScriptedResponseTable, default_scripted_table
from .router import normalize

logger = logging.getLogger(__name__)

Chooser = Callable[[Sequence[str]], str]


def seeded_chooser(seed: Optional[int] = None) -> Chooser:
    """Candidate picker backed by its own random generator."""
    return random.Random(seed).choice


class ScriptedResolver:
    """Looks up scripted replies for (agent, language)."""

    def __init__(self, table: Optional[ScriptedResponseTable] = None, chooser: Optional[Chooser] = None):
        self.table = table or default_scripted_table()
        self.chooser = chooser or seeded_chooser()
        self._patterns: Dict[str, re.Pattern] = {}

    def _pattern(self, phrase: str) -> re.Pattern:
        pattern = self._patterns.get(phrase)
        if pattern is None:
            # ASCII boundaries: "wifi" must match inside "wifi密码"
            pattern = re.compile(rf"\b{re.escape(phrase)}\b", re.IGNORECASE | re.ASCII)
            self._patterns[phrase] = pattern
        return pattern

    def match_phrase(self, text: str, agent: Agent, language: LanguageCode) -> Optional[str]:
        """Return the first trigger phrase that matches, in table order."""
        _, phrases = self.table.lookup(agent, language)
        normalized = normalize(text)
        for phrase in phrases:
            if self._pattern(phrase).search(normalized):
                return phrase
        return None

    def resolve(self, text: str, agent: Agent, language: LanguageCode) -> Optional[str]:
        """Return a scripted reply, or None when the caller should generate one."""
        used_language, phrases = self.table.lookup(agent, language)
        phrase = self.match_phrase(text, agent, language)
        if phrase is None:
            logger.debug(f"No scripted response for {agent.value}/{used_language.value}")
            return None

        candidates = phrases[phrase]
        reply = candidates[0] if len(candidates) == 1 else self.chooser(candidates)
        logger.info(f"Using scripted response for '{phrase}' ({agent.value}/{used_language.value})")
        return reply
