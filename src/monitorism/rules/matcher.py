"""Classify observed logs against the rule index.

A log is a hit for a rule when its first topic is indexed for that rule and
its emitter is inside the rule's address scope. Anonymous logs (no topics)
carry no signature and never match.
"""

from __future__ import annotations

from collections.abc import Iterable

from monitorism.core.models import MatchResult, ObservedLog
from monitorism.rules.index import RuleIndex
from monitorism.rules.specs import EventEntry, Rule
from monitorism.signatures.topics import normalize_topic


def _matched_event(rule: Rule, topic0: str) -> EventEntry:
    for event in rule.events:
        if event.topic == topic0:
            return event
    return rule.first_event


class EventMatcher:
    def __init__(self, index: RuleIndex) -> None:
        self.index = index

    def match(self, log: ObservedLog) -> list[MatchResult]:
        """All rules firing for one log, in index order."""
        if not log.topics:
            return []
        topic0 = normalize_topic(log.topics[0])
        candidates = self.index.rules_for_topic(topic0)
        if not candidates:
            return []
        return [
            MatchResult(rule=rule, event=_matched_event(rule, topic0), log=log)
            for rule in candidates
            if rule.watches_address(log.address)
        ]

    def match_all(self, logs: Iterable[ObservedLog]) -> list[MatchResult]:
        out: list[MatchResult] = []
        for log in logs:
            out.extend(self.match(log))
        return out
