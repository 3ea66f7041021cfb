"""
Speech input bridge - Turns recognized transcripts into session submissions.
Recognition itself runs outside the desk and publishes final transcripts
on the event bus.
"""

import logging
from collections import deque
from typing import TYPE_CHECKING, Deque

from ..core.event_bus import EventBus, Events

if TYPE_CHECKING:
    from ..core.session import SessionManager

logger = logging.getLogger(__name__)

MAX_DROPPED_TRANSCRIPTS = 20


class SpeechInputBridge:
    """Submits each final transcript to the session.

    Transcripts heard while an agent is speaking are dropped so the desk
    does not answer its own voice. The most recent ones are kept in
    ``dropped`` and all of them are counted in ``dropped_count``.
    """

    def __init__(self, event_bus: EventBus, session: "SessionManager"):
        self.event_bus = event_bus
        self.session = session
        self.dropped: Deque[str] = deque(maxlen=MAX_DROPPED_TRANSCRIPTS)
        self.dropped_count = 0

    def attach(self):
        self.event_bus.subscribe(Events.SPEECH_RECOGNIZED, self.on_transcript)
        logger.info("Speech input bridge attached")

    def detach(self):
        self.event_bus.unsubscribe(Events.SPEECH_RECOGNIZED, self.on_transcript)

    @property
    def should_listen(self) -> bool:
        """Whether a recognizer should keep the microphone open."""
        return not self.session.is_speaking

    async def on_transcript(self, text: str):
        transcript = (text or "").strip()
        if not transcript:
            return
        if self.session.is_speaking:
            logger.info(f"Ignoring transcript while speaking: {transcript[:50]}")
            self.dropped.append(transcript)
            self.dropped_count += 1
            return
        logger.info(f"Speech input: {transcript}")
        await self.session.submit(transcript)
