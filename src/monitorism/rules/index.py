"""Topic → rules lookup built once from a RuleSet.

Every event of every rule is indexed, so a multi-event rule fires on any of
its events. Buckets keep configuration order and hold each rule at most once.
"""

from __future__ import annotations

from collections.abc import Iterator

from monitorism.rules.specs import Rule, RuleSet
from monitorism.signatures.topics import TopicID, normalize_topic


class RuleIndex:
    """Read-only mapping from topic0 to the rules that reference it."""

    def __init__(self, rule_set: RuleSet) -> None:
        buckets: dict[TopicID, list[Rule]] = {}
        for rule in rule_set:
            for event in rule.events:
                bucket = buckets.setdefault(event.topic, [])
                if not any(r is rule for r in bucket):
                    bucket.append(rule)
        self._buckets: dict[TopicID, tuple[Rule, ...]] = {t: tuple(rs) for t, rs in buckets.items()}
        self.rule_set = rule_set

    def rules_for_topic(self, topic: TopicID | bytes) -> tuple[Rule, ...]:
        """Rules referencing `topic`, empty when none."""
        return self._buckets.get(normalize_topic(topic), ())

    def topics(self) -> list[TopicID]:
        return list(self._buckets)

    def __contains__(self, topic: object) -> bool:
        if not isinstance(topic, (str, bytes)):
            return False
        return normalize_topic(topic) in self._buckets

    def __iter__(self) -> Iterator[TopicID]:
        return iter(self._buckets)

    def __len__(self) -> int:
        return len(self._buckets)
