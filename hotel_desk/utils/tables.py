"""
Configuration tables - Routing keywords, scripted replies and localized phrases.
Tables are loaded from YAML, validated with pydantic and frozen before use.
"""

import logging
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Tuple, Union

import yaml
from pydantic import BaseModel, ValidationError, field_validator

from ..core.errors import TableValidationError
from ..models.agent import AGENT_ORDER, Agent, DEFAULT_AGENT, DEFAULT_LANGUAGE, LanguageCode, get_profile

logger = logging.getLogger(__name__)

RESOURCES_DIR = Path(__file__).resolve().parent.parent / "resources"
ROUTING_FILE = RESOURCES_DIR / "routing.yaml"
SCRIPTED_FILE = RESOURCES_DIR / "scripted_responses.yaml"
PHRASES_FILE = RESOURCES_DIR / "phrases.yaml"

PhraseMap = Mapping[str, Tuple[str, ...]]


def _parse_agent(value) -> Agent:
    try:
        return Agent.parse(value)
    except ValueError as e:
        raise TableValidationError(str(e)) from e


def _parse_language(value) -> LanguageCode:
    try:
        return LanguageCode.parse(value)
    except ValueError as e:
        raise TableValidationError(str(e)) from e


@dataclass(frozen=True)
class RoutingTable:
    """Ordered trigger phrases per agent plus the agent priority order."""
    priority: Tuple[Agent, ...]
    triggers: Mapping[Agent, Tuple[str, ...]]
    default_agent: Agent = DEFAULT_AGENT

    def __post_init__(self):
        if sorted(a.value for a in self.priority) != sorted(a.value for a in Agent):
            raise TableValidationError(
                f"Routing priority must list every agent exactly once, got {[a.value for a in self.priority]}"
            )
        for agent in Agent:
            phrases = self.triggers.get(agent)
            if not phrases:
                raise TableValidationError(f"No routing triggers configured for agent '{agent.value}'")
            if any(not phrase.strip() for phrase in phrases):
                raise TableValidationError(f"Blank routing trigger for agent '{agent.value}'")
        if self.default_agent not in self.priority:
            raise TableValidationError(f"Unknown default agent: {self.default_agent}")

        frozen = {agent: tuple(p.lower() for p in self.triggers[agent]) for agent in Agent}
        object.__setattr__(self, "priority", tuple(self.priority))
        object.__setattr__(self, "triggers", MappingProxyType(frozen))

    @classmethod
    def from_dict(cls, data: Mapping) -> "RoutingTable":
        """Build a routing table from its YAML representation."""
        try:
            model = _RoutingModel(**data)
        except ValidationError as e:
            raise TableValidationError(f"Invalid routing table: {e}") from e

        return cls(
            priority=tuple(_parse_agent(a) for a in model.priority),
            triggers={_parse_agent(a): tuple(p) for a, p in model.triggers.items()},
            default_agent=_parse_agent(model.default_agent),
        )


class ScriptedResponseTable:
    """Trigger-to-reply tables keyed by (agent, language)."""

    def __init__(self,
                 entries: Mapping[Tuple[Agent, LanguageCode], Mapping[str, Tuple[str, ...]]],
                 default_language: LanguageCode = DEFAULT_LANGUAGE):
        self.default_language = default_language

        for agent in Agent:
            if (agent, default_language) not in entries:
                raise TableValidationError(
                    f"Agent '{agent.value}' has no scripted replies for default language '{default_language.value}'"
                )

        frozen: Dict[Tuple[Agent, LanguageCode], PhraseMap] = {}
        for key, phrases in entries.items():
            table: Dict[str, Tuple[str, ...]] = {}
            for phrase, candidates in phrases.items():
                candidates = tuple(candidates)
                if not phrase.strip():
                    raise TableValidationError(f"Blank trigger phrase in {key[0].value}/{key[1].value}")
                if not candidates or any(not c.strip() for c in candidates):
                    raise TableValidationError(
                        f"Trigger '{phrase}' in {key[0].value}/{key[1].value} has no usable replies"
                    )
                table[phrase.lower()] = candidates
            frozen[key] = MappingProxyType(table)
        self._entries = MappingProxyType(frozen)

    def has_table(self, agent: Agent, language: LanguageCode) -> bool:
        return (agent, language) in self._entries

    def lookup(self, agent: Agent, language: LanguageCode) -> Tuple[LanguageCode, PhraseMap]:
        """Return the phrase table for an agent, falling back to the default language."""
        if (agent, language) in self._entries:
            return language, self._entries[(agent, language)]
        logger.debug(
            f"No scripted replies for {agent.value}/{language.value}, using {self.default_language.value}"
        )
        return self.default_language, self._entries[(agent, self.default_language)]

    @classmethod
    def from_dict(cls, data: Mapping) -> "ScriptedResponseTable":
        try:
            model = _ScriptedModel(**data)
        except ValidationError as e:
            raise TableValidationError(f"Invalid scripted response table: {e}") from e

        entries = {}
        for agent_key, languages in model.responses.items():
            agent = _parse_agent(agent_key)
            for lang_key, phrases in languages.items():
                entries[(agent, _parse_language(lang_key))] = {
                    phrase: tuple(replies) for phrase, replies in phrases.items()
                }
        return cls(entries, default_language=_parse_language(model.default_language))


class PhraseBook:
    """Localized system phrases: greetings, confirmations, apologies and fallback templates."""

    KINDS = ("welcome", "introduction", "language_changed", "apology", "rephrase")

    def __init__(self,
                 phrases: Mapping[str, Mapping[LanguageCode, str]],
                 fallback: Mapping[Agent, Mapping[LanguageCode, str]],
                 default_language: LanguageCode = DEFAULT_LANGUAGE):
        self.default_language = default_language
        for kind in self.KINDS:
            if default_language not in phrases.get(kind, {}):
                raise TableValidationError(
                    f"Phrase '{kind}' is missing for default language '{default_language.value}'"
                )
        self._phrases = MappingProxyType({k: MappingProxyType(dict(v)) for k, v in phrases.items()})
        self._fallback = MappingProxyType({a: MappingProxyType(dict(v)) for a, v in fallback.items()})

    def _get(self, kind: str, language: LanguageCode) -> str:
        table = self._phrases[kind]
        return table.get(language) or table[self.default_language]

    def welcome(self, language: LanguageCode) -> str:
        return self._get("welcome", language)

    def introduction(self, agent: Agent, language: LanguageCode) -> str:
        profile = get_profile(agent)
        return self._get("introduction", language).format(
            name=profile.name, role=profile.role, responsibilities=profile.responsibilities
        )

    def language_changed(self, language: LanguageCode) -> str:
        return self._get("language_changed", language).format(language=language.display_name)

    def apology(self, language: LanguageCode) -> str:
        return self._get("apology", language)

    def rephrase(self, language: LanguageCode) -> str:
        return self._get("rephrase", language)

    def fallback(self, agent: Agent, language: LanguageCode, message: str) -> str:
        """Templated reply that echoes the message and restates the agent's role."""
        templates = self._fallback.get(agent, {})
        template = templates.get(language) or templates.get(self.default_language)
        if not template:
            return self.rephrase(language)
        return template.replace("{message}", message)

    @classmethod
    def from_dict(cls, data: Mapping) -> "PhraseBook":
        try:
            model = _PhraseModel(**data)
        except ValidationError as e:
            raise TableValidationError(f"Invalid phrase book: {e}") from e

        phrases = {
            kind: {_parse_language(lang): text for lang, text in getattr(model, kind).items()}
            for kind in cls.KINDS
        }
        fallback = {
            _parse_agent(agent): {_parse_language(lang): text for lang, text in templates.items()}
            for agent, templates in model.fallback.items()
        }
        return cls(phrases, fallback, default_language=_parse_language(model.default_language))


# YAML schemas

class _RoutingModel(BaseModel):
    default_agent: str = DEFAULT_AGENT.value
    priority: List[str] = [a.value for a in AGENT_ORDER]
    triggers: Dict[str, List[str]]


class _ScriptedModel(BaseModel):
    default_language: str = DEFAULT_LANGUAGE.value
    responses: Dict[str, Dict[str, Dict[str, Union[str, List[str]]]]]

    @field_validator("responses")
    @classmethod
    def _listify(cls, value):
        return {
            agent: {
                lang: {phrase: [r] if isinstance(r, str) else list(r) for phrase, r in phrases.items()}
                for lang, phrases in languages.items()
            }
            for agent, languages in value.items()
        }


class _PhraseModel(BaseModel):
    default_language: str = DEFAULT_LANGUAGE.value
    welcome: Dict[str, str]
    introduction: Dict[str, str]
    language_changed: Dict[str, str]
    apology: Dict[str, str]
    rephrase: Dict[str, str]
    fallback: Dict[str, Dict[str, str]] = {}


def _read_yaml(path: Union[str, Path]) -> dict:
    path = Path(path)
    if not path.exists():
        raise TableValidationError(f"Table file not found: {path}")
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise TableValidationError(f"Table file {path} must contain a mapping")
    return data


def load_routing_table(path: Optional[Union[str, Path]] = None) -> RoutingTable:
    """Load the keyword routing table from YAML."""
    table = RoutingTable.from_dict(_read_yaml(path or ROUTING_FILE))
    logger.debug(f"Routing table loaded: {sum(len(t) for t in table.triggers.values())} triggers")
    return table


def load_scripted_table(path: Optional[Union[str, Path]] = None) -> ScriptedResponseTable:
    """Load scripted replies from YAML."""
    return ScriptedResponseTable.from_dict(_read_yaml(path or SCRIPTED_FILE))


def load_phrase_book(path: Optional[Union[str, Path]] = None) -> PhraseBook:
    """Load localized system phrases from YAML."""
    return PhraseBook.from_dict(_read_yaml(path or PHRASES_FILE))


@lru_cache(maxsize=1)
def default_routing_table() -> RoutingTable:
    return load_routing_table()


@lru_cache(maxsize=1)
def default_scripted_table() -> ScriptedResponseTable:
    return load_scripted_table()


@lru_cache(maxsize=1)
def default_phrase_book() -> PhraseBook:
    return load_phrase_book()
