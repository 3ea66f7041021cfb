"""
Main application class for the Hotel Rafaela service desk.
Builds the routing, response and speech components and wires them together.
"""

import logging
from typing import Optional

from ..ai.fallback import FallbackResponseGenerator
from ..ai.router import KeywordRouter
from ..ai.scripted import ScriptedResolver, seeded_chooser
from ..ai.text_services import BaseTextService, create_text_service
from ..models.conversation import Turn
from ..perception.context import PerceptionSource
from ..utils.tables import (
    default_phrase_book, default_routing_table, default_scripted_table,
    load_phrase_book, load_routing_table, load_scripted_table,
)
from ..voice.speech import SpeechInputBridge
from ..voice.synthesis import SpeechOutput, create_speech_output
from .config import Config
from .event_bus import EventBus
from .session import SessionManager

logger = logging.getLogger(__name__)


class HotelDeskApplication:
    """Main application class that orchestrates all components."""

    def __init__(self, config: Config,
                 speech_output: Optional[SpeechOutput] = None,
                 text_service: Optional[BaseTextService] = None):
        self.config = config
        self.running = False
        self.event_bus = EventBus()

        self._speech_override = speech_output
        self._service_override = text_service

        self.text_service: Optional[BaseTextService] = None
        self.speech_output: Optional[SpeechOutput] = None
        self.perception: Optional[PerceptionSource] = None
        self.session: Optional[SessionManager] = None
        self.speech_bridge: Optional[SpeechInputBridge] = None

        logger.info(f"{config.app_name} application created")

    async def initialize(self):
        """Initialize all application components."""
        logger.info("Initializing application components...")

        try:
            await self.event_bus.initialize()

            tables = self.config.tables
            routing = load_routing_table(tables.routing_file) if tables.routing_file else default_routing_table()
            scripted = load_scripted_table(tables.scripted_file) if tables.scripted_file else default_scripted_table()
            phrases = load_phrase_book(tables.phrases_file) if tables.phrases_file else default_phrase_book()

            router = KeywordRouter(routing)
            resolver = ScriptedResolver(scripted, chooser=seeded_chooser(self.config.session.random_seed))

            self.text_service = self._service_override or create_text_service(self.config.ai)
            if self.text_service is None:
                logger.warning("No generative backend configured, unmatched messages get templated replies")
            generator = FallbackResponseGenerator(
                service=self.text_service,
                phrases=phrases,
                timeout=self.config.ai.request_timeout,
            )

            self.speech_output = self._speech_override or create_speech_output(self.config.voice)
            initialize_speech = getattr(self.speech_output, "initialize", None)
            if initialize_speech:
                try:
                    await initialize_speech()
                except Exception as e:
                    logger.error(f"Speech output unavailable: {e}")

            self.perception = PerceptionSource(self.event_bus)

            self.session = SessionManager(
                router=router,
                resolver=resolver,
                generator=generator,
                speech=self.speech_output,
                perception=self.perception,
                event_bus=self.event_bus,
                phrases=phrases,
                default_agent=self.config.session.default_agent,
                language=self.config.session.default_language,
            )

            self.speech_bridge = SpeechInputBridge(self.event_bus, self.session)
            self.speech_bridge.attach()

            self.running = True
            logger.info("All components initialized successfully")

            if self.config.session.welcome_on_start:
                await self.session.start()

        except Exception as e:
            logger.error(f"Failed to initialize application: {e}", exc_info=True)
            raise

    async def handle_text(self, text: str) -> Optional[Turn]:
        """Submit a typed guest message."""
        if not self.session:
            raise RuntimeError("Application is not initialized")
        return await self.session.submit(text)

    async def shutdown(self):
        """Shutdown the application gracefully."""
        if not self.running:
            return

        logger.info("Shutting down application...")
        self.running = False

        if self.speech_bridge:
            self.speech_bridge.detach()

        for component in (self.speech_output, self.text_service, self.event_bus):
            if component:
                try:
                    await component.shutdown()
                except Exception as e:
                    logger.error(f"Error shutting down component: {e}")

        logger.info("Application shutdown complete")
