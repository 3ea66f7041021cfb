import asyncio

import pytest

from hotel_desk.core.event_bus import Events
from hotel_desk.models.agent import Agent
from hotel_desk.voice.speech import MAX_DROPPED_TRANSCRIPTS, SpeechInputBridge


@pytest.mark.asyncio
async def test_transcripts_are_submitted(session, event_bus):
    bridge = SpeechInputBridge(event_bus, session)
    bridge.attach()

    await event_bus.emit(Events.SPEECH_RECOGNIZED, "My towels are dirty")
    assert len(session.thread(Agent.SUPPORT)) == 2

    bridge.detach()
    await event_bus.emit(Events.SPEECH_RECOGNIZED, "I want to book a room")
    assert session.thread(Agent.CONCIERGE).is_empty


@pytest.mark.asyncio
async def test_transcripts_dropped_while_speaking(session, event_bus, speech):
    bridge = SpeechInputBridge(event_bus, session)
    speech.gate = asyncio.Event()

    greeting = asyncio.create_task(session.start())
    await asyncio.sleep(0)
    assert not bridge.should_listen

    await bridge.on_transcript("Hello? Is anyone there?")
    assert list(bridge.dropped) == ["Hello? Is anyone there?"]
    assert bridge.dropped_count == 1

    speech.gate.set()
    await greeting
    assert bridge.should_listen
    assert len(session.thread(Agent.HOST)) == 1


@pytest.mark.asyncio
async def test_blank_transcripts_ignored(session, event_bus):
    bridge = SpeechInputBridge(event_bus, session)
    await bridge.on_transcript("   ")
    assert not bridge.dropped
    assert bridge.dropped_count == 0
    assert all(thread.is_empty for thread in session.threads.values())


@pytest.mark.asyncio
async def test_dropped_history_is_bounded(session, event_bus, speech):
    bridge = SpeechInputBridge(event_bus, session)
    speech.gate = asyncio.Event()
    greeting = asyncio.create_task(session.start())
    await asyncio.sleep(0)

    for i in range(MAX_DROPPED_TRANSCRIPTS + 5):
        await bridge.on_transcript(f"echo {i}")

    assert len(bridge.dropped) == MAX_DROPPED_TRANSCRIPTS
    assert bridge.dropped[0] == "echo 5"
    assert bridge.dropped_count == MAX_DROPPED_TRANSCRIPTS + 5

    speech.gate.set()
    await greeting
