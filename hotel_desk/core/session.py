"""
Session Manager - Per-agent threads, greetings, language and turn sequencing.

One guest, one session. A submission is routed to an agent, answered from
the scripted tables or the generative fallback, appended to that agent's
thread and spoken. Only one submission is handled at a time; submissions
arriving meanwhile are rejected, not queued.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Set, Union

from ..ai.fallback import FallbackResponseGenerator
from ..ai.router import KeywordRouter
from ..ai.scripted import ScriptedResolver
from ..models.agent import Agent, DEFAULT_LANGUAGE, LanguageCode
from ..models.conversation import Context, RenderState, Thread, Turn
from ..perception.context import DEFAULT_AVATAR_EMOTION, PerceptionSource
from ..utils.tables import PhraseBook, default_phrase_book
from ..voice.synthesis import SilentSpeechOutput, SpeechOutput
from .errors import UnsupportedLanguageError
from .event_bus import EventBus, Events

logger = logging.getLogger(__name__)


class AgentState(Enum):
    UNGREETED = "ungreeted"
    GREETED_IDLE = "greeted_idle"
    GREETED_AWAITING_REPLY = "greeted_awaiting_reply"


@dataclass
class Session:
    """Aggregate state of the single guest session."""
    active_agent: Agent
    language: LanguageCode = DEFAULT_LANGUAGE
    threads: Dict[Agent, Thread] = field(default_factory=lambda: {a: Thread(a) for a in Agent})
    greeted_agents: Set[Agent] = field(default_factory=set)
    pending_context: Optional[Context] = None
    busy: bool = False
    awaiting_agent: Optional[Agent] = None
    is_speaking: bool = False
    spoken_text: str = ""


class SessionManager:
    """Sequences routing, reply resolution and speech for one session."""

    def __init__(self,
                 router: Optional[KeywordRouter] = None,
                 resolver: Optional[ScriptedResolver] = None,
                 generator: Optional[FallbackResponseGenerator] = None,
                 speech: Optional[SpeechOutput] = None,
                 perception: Optional[PerceptionSource] = None,
                 event_bus: Optional[EventBus] = None,
                 phrases: Optional[PhraseBook] = None,
                 default_agent: Optional[Agent] = None,
                 language: Union[LanguageCode, str] = DEFAULT_LANGUAGE):
        self.router = router or KeywordRouter()
        self.resolver = resolver or ScriptedResolver()
        self.phrases = phrases or default_phrase_book()
        self.generator = generator or FallbackResponseGenerator(phrases=self.phrases)
        self.speech = speech or SilentSpeechOutput()
        self.perception = perception
        self.event_bus = event_bus

        self.default_agent = Agent.parse(default_agent) if default_agent else self.router.default_agent
        self.session = Session(active_agent=self.default_agent, language=LanguageCode.parse(language))
        self._started = False

        logger.info(f"Session manager initialized (agent={self.default_agent.value}, "
                    f"language={self.session.language.value})")

    # Read accessors

    @property
    def active_agent(self) -> Agent:
        return self.session.active_agent

    @property
    def language(self) -> LanguageCode:
        return self.session.language

    @property
    def busy(self) -> bool:
        return self.session.busy

    @property
    def is_speaking(self) -> bool:
        return self.session.is_speaking

    @property
    def greeted_agents(self) -> Set[Agent]:
        return set(self.session.greeted_agents)

    @property
    def threads(self) -> Dict[Agent, Thread]:
        return dict(self.session.threads)

    def thread(self, agent: Union[Agent, str]) -> Thread:
        return self.session.threads[Agent.parse(agent)]

    def history(self, agent: Union[Agent, str, None] = None) -> List[Turn]:
        """Turns of an agent's thread, the active agent by default."""
        return list(self.thread(agent or self.session.active_agent))

    def state_of(self, agent: Union[Agent, str]) -> AgentState:
        agent = Agent.parse(agent)
        if agent not in self.session.greeted_agents:
            return AgentState.UNGREETED
        if self.session.awaiting_agent is agent:
            return AgentState.GREETED_AWAITING_REPLY
        return AgentState.GREETED_IDLE

    def render_state(self) -> RenderState:
        emotion = self.perception.avatar_emotion if self.perception else DEFAULT_AVATAR_EMOTION
        return RenderState(
            active_agent=self.session.active_agent,
            is_speaking=self.session.is_speaking,
            emotion=emotion,
            spoken_text=self.session.spoken_text,
        )

    # Operations

    async def start(self) -> Optional[Turn]:
        """Greet the guest with the default agent, once per session."""
        if self._started:
            return None
        self._started = True

        agent = self.default_agent
        if agent in self.session.greeted_agents or not self.session.threads[agent].is_empty:
            return None

        language = self.session.language
        if agent is Agent.HOST:
            text = self.phrases.welcome(language)
        else:
            text = self.phrases.introduction(agent, language)
        return await self._greet(agent, text, language)

    async def switch_agent(self, agent: Union[Agent, str]) -> Optional[Turn]:
        """Make an agent active; introduce it on first contact."""
        agent = Agent.parse(agent)
        if agent is self.session.active_agent:
            return None

        await self._set_active(agent)

        if agent in self.session.greeted_agents or not self.session.threads[agent].is_empty:
            return None

        language = self.session.language
        return await self._greet(agent, self.phrases.introduction(agent, language), language)

    async def set_language(self, language: Union[LanguageCode, str]) -> Turn:
        """Change the reply language and confirm it under the active agent."""
        try:
            language = LanguageCode.parse(language)
        except ValueError as e:
            raise UnsupportedLanguageError(str(e)) from e

        self.session.language = language
        logger.info(f"Language changed to {language.value}")
        await self._emit(Events.LANGUAGE_CHANGED, language)

        agent = self.session.active_agent
        text = self.phrases.language_changed(language)
        turn = await self._append(agent, Turn.from_agent(agent, text))
        await self._speak_safely(text, agent, language)
        return turn

    async def submit(self, text: str) -> Optional[Turn]:
        """Handle one guest message and return the reply turn.

        Returns None when the message is blank or a previous message is
        still being answered.
        """
        message = (text or "").strip()
        if not message:
            return None

        if self.session.busy:
            logger.warning(f"Submission rejected while busy: {message[:50]}")
            await self._emit(Events.SUBMISSION_REJECTED, message)
            return None

        self.session.busy = True
        agent: Optional[Agent] = None
        try:
            language = self.session.language
            agent = self.router.route(message)

            # A routed first contact stands in for the introduction
            if agent is not self.session.active_agent:
                await self._set_active(agent)
            self.session.greeted_agents.add(agent)

            context = self.perception.latest() if self.perception else None
            self.session.pending_context = context
            await self._append(agent, Turn.from_user(message, context))

            self.session.awaiting_agent = agent
            reply = self.resolver.resolve(message, agent, language)
            if reply is None:
                reply = await self.generator.generate(message, context, agent, language)
            self.session.pending_context = None

            turn = await self._append(agent, Turn.from_agent(agent, reply))
            await self._speak(reply, agent, language)
            return turn

        except Exception as e:
            logger.error(f"Error handling message: {e}", exc_info=True)
            return await self._apologize(agent or self.session.active_agent)

        finally:
            self.session.pending_context = None
            self.session.awaiting_agent = None
            self.session.busy = False

    # Internals

    async def _emit(self, event_name: str, *args):
        if self.event_bus:
            await self.event_bus.emit(event_name, *args)

    async def _set_active(self, agent: Agent):
        self.session.active_agent = agent
        logger.info(f"Active agent: {agent.value}")
        await self._emit(Events.ACTIVE_AGENT_CHANGED, agent)
        await self._emit(Events.RENDER_STATE, self.render_state())

    async def _append(self, agent: Agent, turn: Turn) -> Turn:
        self.session.threads[agent].append(turn)
        await self._emit(Events.TURN_APPENDED, agent, turn)
        return turn

    async def _greet(self, agent: Agent, text: str, language: LanguageCode) -> Turn:
        self.session.greeted_agents.add(agent)
        turn = await self._append(agent, Turn.from_agent(agent, text))
        await self._speak_safely(text, agent, language)
        return turn

    async def _speak(self, text: str, agent: Agent, language: LanguageCode):
        self.session.is_speaking = True
        self.session.spoken_text = text
        await self._emit(Events.SPEECH_STARTED, agent, text)
        await self._emit(Events.RENDER_STATE, self.render_state())
        try:
            await self.speech.speak(text, agent, language)
        finally:
            self.session.is_speaking = False
            self.session.spoken_text = ""
            await self._emit(Events.SPEECH_ENDED, agent)
            await self._emit(Events.RENDER_STATE, self.render_state())

    async def _speak_safely(self, text: str, agent: Agent, language: LanguageCode):
        try:
            await self._speak(text, agent, language)
        except Exception as e:
            logger.error(f"Speech error: {e}")

    async def _apologize(self, agent: Agent) -> Turn:
        language = self.session.language
        text = self.phrases.apology(language)
        turn = await self._append(agent, Turn.from_agent(agent, text))
        await self._speak_safely(text, agent, language)
        return turn
