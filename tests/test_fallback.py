import pytest

from hotel_desk.ai.fallback import (
    FallbackResponseGenerator, build_prompt, limit_length, remove_asterisk_actions, tone_directives,
)
from hotel_desk.models.agent import Agent, LanguageCode
from hotel_desk.models.conversation import Context
from tests.conftest import FailingTextService, FakeTextService, SlowTextService

EN = LanguageCode.EN


@pytest.mark.parametrize("emotion", ["sad", "angry", "fearful", "disgusted"])
def test_distressed_guests_get_empathy(emotion):
    directives = tone_directives(Context(emotion=emotion))
    assert any("empathy" in d for d in directives)


@pytest.mark.parametrize("emotion", ["happy", "surprised"])
def test_positive_guests_get_enthusiasm(emotion):
    directives = tone_directives(Context(emotion=emotion))
    assert any("enthusiasm" in d for d in directives)


def test_neutral_and_missing_context_add_nothing():
    assert tone_directives(None) == []
    assert tone_directives(Context(emotion="neutral", age_category="adult")) == []


def test_children_get_simpler_phrasing():
    directives = tone_directives(Context(age_category="child", emotion="sad"))
    assert len(directives) == 2
    assert any("simpler" in d for d in directives)


def test_prompt_carries_persona_language_and_text():
    prompt = build_prompt("Any rooms for Friday?", Context(emotion="angry"), Agent.CONCIERGE, LanguageCode.JA)
    assert "Daisy" in prompt
    assert "Respond in Japanese." in prompt
    assert "Guest: Any rooms for Friday?" in prompt
    assert "empathy" in prompt


def test_filters_strip_actions_and_cap_length():
    assert remove_asterisk_actions("*smiles* Welcome back!") == "Welcome back!"
    long_reply = "This is a sentence. " * 60
    assert len(limit_length(long_reply)) <= 500


@pytest.mark.asyncio
async def test_generated_reply_is_filtered():
    service = FakeTextService("*nods*   Of course,   right away.")
    generator = FallbackResponseGenerator(service)
    reply = await generator.generate("Can you help?", None, Agent.SUPPORT, EN)
    assert reply == "Of course, right away."
    assert len(service.prompts) == 1


@pytest.mark.asyncio
async def test_no_service_uses_template():
    reply = await FallbackResponseGenerator().generate("a pony", None, Agent.HOST, EN)
    assert '"a pony"' in reply
    assert "host assistant" in reply


@pytest.mark.asyncio
async def test_failure_uses_template_and_counts_error():
    generator = FallbackResponseGenerator(FailingTextService())
    reply = await generator.generate("refund please", None, Agent.CONCIERGE, EN)
    assert reply == generator.template("refund please", Agent.CONCIERGE, EN)
    assert generator.error_count == 1


@pytest.mark.asyncio
async def test_timeout_uses_template():
    generator = FallbackResponseGenerator(SlowTextService(), timeout=0.05)
    reply = await generator.generate("hurry", None, Agent.SUPPORT, EN)
    assert reply == generator.template("hurry", Agent.SUPPORT, EN)


@pytest.mark.asyncio
async def test_empty_reply_uses_template():
    generator = FallbackResponseGenerator(FakeTextService("   "))
    reply = await generator.generate("hmm", None, Agent.HOST, EN)
    assert reply == generator.template("hmm", Agent.HOST, EN)


def test_template_is_localized():
    generator = FallbackResponseGenerator()
    assert generator.template("x", Agent.HOST, EN) != generator.template("x", Agent.HOST, LanguageCode.TL)
