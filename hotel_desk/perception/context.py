"""
Perception Source - Holds the latest guest context reported by an emotion detector.
Camera capture and face inference happen elsewhere; this only keeps their output.
"""

import logging
from typing import Any, Mapping, Optional, Union

from ..core.event_bus import EventBus, Events
from ..models.conversation import Context

logger = logging.getLogger(__name__)

DEFAULT_AVATAR_EMOTION = "happy"


class PerceptionSource:
    """Latest-value store for detector updates."""

    def __init__(self, event_bus: Optional[EventBus] = None):
        self.event_bus = event_bus
        self._latest: Optional[Context] = None

    def latest(self) -> Optional[Context]:
        return self._latest

    @property
    def avatar_emotion(self) -> str:
        """Emotion the avatar mirrors; happy when nothing is detected."""
        if self._latest and self._latest.emotion:
            return self._latest.emotion
        return DEFAULT_AVATAR_EMOTION

    async def update(self, detection: Union[Context, Mapping[str, Any], None]) -> Optional[Context]:
        """Record a detector update. None means the camera was switched off."""
        if detection is None or isinstance(detection, Context):
            context = detection
        else:
            context = Context.from_detection(detection)

        self._latest = context
        if context:
            logger.debug(f"Perception update: age={context.age_category}, emotion={context.emotion}")
        else:
            logger.debug("Perception cleared")

        if self.event_bus:
            await self.event_bus.emit(Events.PERCEPTION_UPDATED, context)
        return context

    def clear(self):
        self._latest = None
