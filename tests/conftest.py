import asyncio

import pytest

from hotel_desk.ai.fallback import FallbackResponseGenerator
from hotel_desk.ai.router import KeywordRouter
from hotel_desk.ai.scripted import ScriptedResolver
from hotel_desk.ai.text_services import BaseTextService
from hotel_desk.core.event_bus import EventBus
from hotel_desk.core.session import SessionManager
from hotel_desk.perception.context import PerceptionSource
from hotel_desk.voice.synthesis import SpeechOutput


class FakeSpeechOutput(SpeechOutput):
    """Records what would have been spoken."""

    def __init__(self, fail=False):
        self.spoken = []
        self.fail = fail
        self.gate = None

    async def speak(self, text, agent, language):
        if self.gate is not None:
            await self.gate.wait()
        if self.fail:
            raise RuntimeError("speaker unplugged")
        self.spoken.append((agent, language, text))


class FakeTextService(BaseTextService):
    name = "fake"

    def __init__(self, reply="Generated reply."):
        self.reply = reply
        self.prompts = []

    async def complete(self, prompt):
        self.prompts.append(prompt)
        return self.reply


class FailingTextService(BaseTextService):
    name = "failing"

    def __init__(self, error=None):
        self.error = error or RuntimeError("backend down")
        self.calls = 0

    async def complete(self, prompt):
        self.calls += 1
        raise self.error


class SlowTextService(BaseTextService):
    name = "slow"

    async def complete(self, prompt):
        await asyncio.sleep(10)
        return "too late"


def first_choice(candidates):
    return candidates[0]


@pytest.fixture
def speech():
    return FakeSpeechOutput()


@pytest.fixture
def event_bus():
    bus = EventBus()
    # emit() is a no-op until the bus is running
    bus.running = True
    return bus


@pytest.fixture
def perception(event_bus):
    return PerceptionSource(event_bus)


@pytest.fixture
def make_session(speech, event_bus, perception):
    def factory(service=None, chooser=first_choice, **kwargs):
        return SessionManager(
            router=KeywordRouter(),
            resolver=ScriptedResolver(chooser=chooser),
            generator=FallbackResponseGenerator(service=service, timeout=0.5),
            speech=kwargs.pop("speech", speech),
            perception=perception,
            event_bus=event_bus,
            **kwargs,
        )
    return factory


@pytest.fixture
def session(make_session):
    return make_session()
