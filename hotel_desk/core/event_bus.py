"""
Event Bus - Central event system for component communication.
Carries transcripts, perception updates and session changes between the
session manager and its speech, perception and rendering collaborators.
"""

import inspect
import logging
from collections import defaultdict
from typing import Any, Callable, Dict, List

logger = logging.getLogger(__name__)


class Events:
    """Event names published on the bus."""
    SPEECH_RECOGNIZED = "speech_recognized"        # (text)
    PERCEPTION_UPDATED = "perception_updated"      # (context or None)
    TURN_APPENDED = "turn_appended"                # (agent, turn)
    ACTIVE_AGENT_CHANGED = "active_agent_changed"  # (agent)
    LANGUAGE_CHANGED = "language_changed"          # (language)
    SPEECH_STARTED = "speech_started"              # (agent, text)
    SPEECH_ENDED = "speech_ended"                  # (agent)
    SUBMISSION_REJECTED = "submission_rejected"    # (text)
    RENDER_STATE = "render_state"                  # (RenderState)


class EventBus:
    """Async event bus for component communication."""

    def __init__(self):
        self.listeners: Dict[str, List[Callable]] = defaultdict(list)
        self.running = False

    async def initialize(self):
        """Initialize the event bus."""
        self.running = True
        logger.info("Event bus initialized")

    def subscribe(self, event_name: str, callback: Callable):
        """Subscribe to an event."""
        self.listeners[event_name].append(callback)
        logger.debug(f"Subscribed to event: {event_name}")

    def unsubscribe(self, event_name: str, callback: Callable):
        """Unsubscribe from an event."""
        if callback in self.listeners[event_name]:
            self.listeners[event_name].remove(callback)
            logger.debug(f"Unsubscribed from event: {event_name}")

    def listener_count(self, event_name: str) -> int:
        return len(self.listeners.get(event_name, []))

    async def emit(self, event_name: str, *args: Any, **kwargs: Any):
        """Emit an event to all listeners.

        Listener errors are logged and never reach the emitter.
        """
        if not self.running:
            return

        listeners = list(self.listeners.get(event_name, []))
        if listeners:
            logger.debug(f"Emitting event: {event_name} to {len(listeners)} listeners")

            for callback in listeners:
                try:
                    result = callback(*args, **kwargs)
                    if inspect.isawaitable(result):
                        await result
                except Exception as e:
                    logger.error(f"Error in event listener for {event_name}: {e}")

    async def shutdown(self):
        """Shutdown the event bus."""
        self.running = False
        self.listeners.clear()
        logger.info("Event bus shutdown")
