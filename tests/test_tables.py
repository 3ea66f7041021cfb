import pytest

from hotel_desk.core.errors import TableValidationError
from hotel_desk.models.agent import AGENT_ORDER, Agent, LanguageCode
from hotel_desk.utils.tables import (
    PhraseBook, RoutingTable, ScriptedResponseTable,
    default_phrase_book, default_routing_table, default_scripted_table,
    load_phrase_book, load_routing_table,
)


def test_packaged_tables_load():
    routing = default_routing_table()
    assert routing.priority == AGENT_ORDER
    assert routing.default_agent is Agent.HOST
    assert "towels" in routing.triggers[Agent.SUPPORT]

    scripted = default_scripted_table()
    for agent in Agent:
        assert scripted.has_table(agent, LanguageCode.EN)

    phrases = default_phrase_book()
    assert phrases.apology(LanguageCode.EN) == "I apologize for the inconvenience. Could you please try again?"


def test_routing_priority_must_cover_every_agent():
    with pytest.raises(TableValidationError):
        RoutingTable(
            priority=(Agent.HOST, Agent.CONCIERGE),
            triggers={Agent.HOST: ("hi",), Agent.CONCIERGE: ("book",), Agent.SUPPORT: ("fix",)},
        )


def test_routing_requires_triggers_for_every_agent():
    with pytest.raises(TableValidationError):
        RoutingTable.from_dict({"triggers": {"host": ["hi"], "concierge": ["book"]}})


def test_routing_rejects_unknown_agent():
    with pytest.raises(TableValidationError):
        RoutingTable.from_dict({
            "priority": ["host", "concierge", "bellhop"],
            "triggers": {"host": ["hi"], "concierge": ["book"], "support": ["fix"]},
        })


def test_routing_triggers_are_frozen_and_lowercased():
    table = RoutingTable.from_dict({
        "triggers": {"host": ["WiFi"], "concierge": ["Book"], "support": ["Fix"]},
    })
    assert table.triggers[Agent.HOST] == ("wifi",)
    with pytest.raises(TypeError):
        table.triggers[Agent.HOST] = ("other",)


def test_scripted_requires_default_language_for_every_agent():
    with pytest.raises(TableValidationError):
        ScriptedResponseTable({
            (Agent.HOST, LanguageCode.EN): {"hi": ("Hi!",)},
            (Agent.CONCIERGE, LanguageCode.EN): {"book": ("Sure.",)},
            (Agent.SUPPORT, LanguageCode.TL): {"tulong": ("Oo.",)},
        })


def test_scripted_rejects_empty_candidates():
    with pytest.raises(TableValidationError):
        ScriptedResponseTable.from_dict({"responses": {
            "host": {"en": {"hi": []}},
            "concierge": {"en": {"book": "Sure."}},
            "support": {"en": {"fix": "On it."}},
        }})


def test_scripted_single_string_becomes_candidate_list():
    table = ScriptedResponseTable.from_dict({"responses": {
        "host": {"en": {"Hi": "Hi!"}},
        "concierge": {"en": {"book": ["A", "B"]}},
        "support": {"en": {"fix": "On it."}},
    }})
    _, phrases = table.lookup(Agent.HOST, LanguageCode.EN)
    assert phrases["hi"] == ("Hi!",)


def test_scripted_lookup_falls_back_to_default_language():
    used, _ = default_scripted_table().lookup(Agent.SUPPORT, LanguageCode.KO)
    assert used in (LanguageCode.KO, LanguageCode.EN)

    table = ScriptedResponseTable.from_dict({"responses": {
        "host": {"en": {"hi": "Hi!"}},
        "concierge": {"en": {"book": "Sure."}},
        "support": {"en": {"fix": "On it."}},
    }})
    used, phrases = table.lookup(Agent.HOST, LanguageCode.JA)
    assert used is LanguageCode.EN
    assert "hi" in phrases


def test_phrase_book_requires_default_language():
    with pytest.raises(TableValidationError):
        PhraseBook.from_dict({
            "welcome": {"tl": "Kumusta"},
            "introduction": {"en": "Hi"},
            "language_changed": {"en": "Ok"},
            "apology": {"en": "Sorry"},
            "rephrase": {"en": "Again?"},
        })


def test_phrase_book_formats_introduction_and_language():
    phrases = default_phrase_book()
    assert phrases.introduction(Agent.SUPPORT, LanguageCode.EN) == (
        "Hi! I'm John, your Support Manager. I specialize in Operations & Assistance. How can I help you?"
    )
    assert phrases.language_changed(LanguageCode.EN) == "Sure! I'll continue in English."


def test_fallback_template_echoes_message_with_braces():
    text = default_phrase_book().fallback(Agent.CONCIERGE, LanguageCode.EN, "rate {per} night")
    assert '"rate {per} night"' in text


def test_fallback_without_templates_uses_rephrase():
    phrases = PhraseBook.from_dict({
        "welcome": {"en": "Welcome"},
        "introduction": {"en": "Hi"},
        "language_changed": {"en": "Ok"},
        "apology": {"en": "Sorry"},
        "rephrase": {"en": "Again?"},
    })
    assert phrases.fallback(Agent.HOST, LanguageCode.ZH, "x") == "Again?"


def test_load_from_custom_file(tmp_path):
    path = tmp_path / "routing.yaml"
    path.write_text(
        "priority: [support, concierge, host]\n"
        "triggers:\n  host: [hi]\n  concierge: [book]\n  support: [fix]\n",
        encoding="utf-8",
    )
    table = load_routing_table(path)
    assert table.priority[0] is Agent.SUPPORT


def test_missing_file_raises(tmp_path):
    with pytest.raises(TableValidationError):
        load_phrase_book(tmp_path / "nope.yaml")
