"""
Fallback Response Generator - Generated replies when no scripted reply matches.

Prompts the configured text backend with the agent's persona, the reply
language and tone directives derived from the perceived guest context. Any
backend failure or timeout produces a deterministic templated reply instead,
so callers always receive text.
"""

import asyncio
import logging
import re
from typing import Callable, List, Optional

from ..models.agent import Agent, LanguageCode, get_profile
from ..models.conversation import Context
from ..utils.tables import PhraseBook, default_phrase_book
from .text_services import BaseTextService

logger = logging.getLogger(__name__)

DISTRESSED_EMOTIONS = ("sad", "angry", "fearful", "disgusted")
POSITIVE_EMOTIONS = ("happy", "surprised")
MAX_REPLY_LENGTH = 500


def tone_directives(context: Optional[Context]) -> List[str]:
    """Soft tone instructions for the perceived guest state."""
    if context is None:
        return []

    directives = []
    if context.emotion in DISTRESSED_EMOTIONS:
        directives.append("The guest seems upset. Respond with extra empathy and reassurance.")
    elif context.emotion in POSITIVE_EMOTIONS:
        directives.append("The guest seems in a good mood. Match their enthusiasm.")
    if context.is_minor:
        directives.append("The guest appears to be a child. Use simpler phrasing and a friendly tone.")
    return directives


def build_prompt(text: str, context: Optional[Context], agent: Agent, language: LanguageCode) -> str:
    """Compose the generation prompt for an agent's reply."""
    profile = get_profile(agent)
    lines = [
        profile.get_persona_prompt(),
        "",
        "Instructions:",
        f"- Respond in {language.display_name}.",
        "- Keep the reply short, warm and suitable for being spoken aloud.",
        "- Do not use markdown, lists or stage directions.",
    ]
    lines.extend(f"- {directive}" for directive in tone_directives(context))
    lines.extend(["", f"Guest: {text}", f"{profile.name}:"])
    return "\n".join(lines)


# Response filters

def remove_asterisk_actions(text: str) -> str:
    """Remove asterisk-enclosed actions like *smiles* or *nods*."""
    return re.sub(r'\*[^*]+\*', '', text).strip()


def clean_formatting(text: str) -> str:
    """Collapse whitespace left over by the model or other filters."""
    return re.sub(r'\s+', ' ', text).strip()


def limit_length(text: str) -> str:
    """Limit response length for speech synthesis."""
    if len(text) <= MAX_REPLY_LENGTH:
        return text

    sentences = text.split('. ')
    result = ""
    for sentence in sentences:
        if len(result + sentence) < MAX_REPLY_LENGTH - 50:
            result += sentence.rstrip('.') + ". "
        else:
            break
    return result.strip() or text[:MAX_REPLY_LENGTH].rstrip()


RESPONSE_FILTERS: List[Callable[[str], str]] = [
    remove_asterisk_actions,
    clean_formatting,
    limit_length,
]


class FallbackResponseGenerator:
    """Generates replies through a text backend with templated recovery."""

    def __init__(self,
                 service: Optional[BaseTextService] = None,
                 phrases: Optional[PhraseBook] = None,
                 timeout: float = 15.0):
        self.service = service
        self.phrases = phrases or default_phrase_book()
        self.timeout = timeout
        self.error_count = 0

    def template(self, text: str, agent: Agent, language: LanguageCode) -> str:
        """Deterministic reply echoing the guest's text and the agent's role."""
        return self.phrases.fallback(agent, language, text.strip())

    def _apply_filters(self, response: str) -> str:
        for filter_func in RESPONSE_FILTERS:
            response = filter_func(response)
        return response

    async def generate(self,
                       text: str,
                       context: Optional[Context],
                       agent: Agent,
                       language: LanguageCode) -> str:
        """Produce a reply; never raises."""
        if self.service is None:
            return self.template(text, agent, language)

        prompt = build_prompt(text, context, agent, language)
        try:
            response = await asyncio.wait_for(self.service.complete(prompt), timeout=self.timeout)
            response = self._apply_filters(response or "")
            if response:
                logger.info(f"Generated {agent.value} reply via {self.service.name}")
                return response
            logger.warning(f"{self.service.name} returned an empty reply, using template")
        except asyncio.TimeoutError:
            self.error_count += 1
            logger.warning(f"{self.service.name} timed out after {self.timeout}s, using template")
        except Exception as e:
            self.error_count += 1
            logger.error(f"AI generation error: {e}")

        return self.template(text, agent, language)
