import pytest

from hotel_desk.ai.router import KeywordRouter, normalize, route
from hotel_desk.models.agent import Agent
from hotel_desk.utils.tables import RoutingTable


@pytest.fixture
def small_table():
    return RoutingTable(
        priority=(Agent.HOST, Agent.CONCIERGE, Agent.SUPPORT),
        triggers={
            Agent.HOST: ("wifi", "parking"),
            Agent.CONCIERGE: ("book", "price"),
            Agent.SUPPORT: ("broken", "towels"),
        },
    )


@pytest.mark.parametrize("text,expected", [
    ("Is there wifi in the lobby?", Agent.HOST),
    ("Where is PARKING", Agent.HOST),
    ("I'd like to book", Agent.CONCIERGE),
    ("What's the price per night", Agent.CONCIERGE),
    ("The shower is broken", Agent.SUPPORT),
    ("Fresh towels please", Agent.SUPPORT),
])
def test_single_agent_triggers(small_table, text, expected):
    assert KeywordRouter(small_table).route(text) is expected


@pytest.mark.parametrize("text", [
    "towels broken, and I want to book",
    "I want to book, my towels are broken",
])
def test_higher_priority_agent_wins_regardless_of_order(small_table, text):
    assert KeywordRouter(small_table).route(text) is Agent.CONCIERGE


def test_priority_order_is_configurable(small_table):
    table = RoutingTable(
        priority=(Agent.SUPPORT, Agent.CONCIERGE, Agent.HOST),
        triggers=dict(small_table.triggers),
    )
    assert KeywordRouter(table).route("book a room, the wifi is broken") is Agent.SUPPORT


@pytest.mark.parametrize("text", ["", "   ", "qwerty zxcv"])
def test_no_trigger_goes_to_default_agent(small_table, text):
    assert KeywordRouter(small_table).route(text) is Agent.HOST


def test_default_agent_comes_from_table(small_table):
    table = RoutingTable(
        priority=small_table.priority,
        triggers=dict(small_table.triggers),
        default_agent=Agent.CONCIERGE,
    )
    assert KeywordRouter(table).route("nothing relevant") is Agent.CONCIERGE


def test_substring_matching_fires_inside_words():
    table = RoutingTable(
        priority=(Agent.HOST, Agent.CONCIERGE, Agent.SUPPORT),
        triggers={Agent.HOST: ("lobby",), Agent.CONCIERGE: ("book",), Agent.SUPPORT: ("ac",)},
    )
    assert KeywordRouter(table).route("I need more space") is Agent.SUPPORT


def test_match_reports_trigger(small_table):
    router = KeywordRouter(small_table)
    assert router.match("My towels are wet") == (Agent.SUPPORT, "towels")
    assert router.match("hmm") == (Agent.HOST, None)


@pytest.mark.parametrize("text", ["What is the Check-in time?", "check in time", "CHECK IN TIME"])
def test_check_in_variants_normalize(text):
    assert "check in time" in normalize(text)


def test_default_table_scenarios():
    assert route("I want to book a room") is Agent.CONCIERGE
    assert route("My towels are dirty") is Agent.SUPPORT
    assert route("Hello there") is Agent.HOST
    assert route("Tell me a joke") is Agent.HOST
