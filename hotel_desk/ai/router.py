"""
Keyword Router - Assigns a guest message to the agent responsible for it.

Agents are checked in the table's priority order and each agent's triggers in
table order; the first trigger found anywhere in the normalized message wins.
Matching is plain substring containment, so short triggers also fire inside
longer words ("ac" in "space"). Messages with no trigger go to the default
agent.
"""

import logging
import re
from typing import Optional, Tuple

from ..models.agent import Agent
from ..utils.tables import RoutingTable, default_routing_table

logger = logging.getLogger(__name__)

_VARIANTS = (
    (re.compile(r"check[- ]in"), "check in"),
    (re.compile(r"check[- ]out"), "check out"),
)


def normalize(text: str) -> str:
    """Lower-case text and fold spelling variants onto canonical trigger forms."""
    normalized = (text or "").lower()
    for pattern, canonical in _VARIANTS:
        normalized = pattern.sub(canonical, normalized)
    return normalized


class KeywordRouter:
    """Deterministic keyword router over a routing table."""

    def __init__(self, table: Optional[RoutingTable] = None):
        self.table = table or default_routing_table()

    @property
    def default_agent(self) -> Agent:
        return self.table.default_agent

    def match(self, text: str) -> Tuple[Agent, Optional[str]]:
        """Return the routed agent and the trigger that selected it."""
        normalized = normalize(text)
        if normalized.strip():
            for agent in self.table.priority:
                for trigger in self.table.triggers[agent]:
                    if trigger in normalized:
                        return agent, trigger
        return self.table.default_agent, None

    def route(self, text: str) -> Agent:
        agent, trigger = self.match(text)
        if trigger:
            logger.debug(f"Routed to {agent.value} (trigger: '{trigger}')")
        else:
            logger.debug(f"Defaulted to {agent.value} (no specific trigger found)")
        return agent


def route(text: str, table: Optional[RoutingTable] = None) -> Agent:
    """Route a message using the given table or the packaged default."""
    return KeywordRouter(table).route(text)
