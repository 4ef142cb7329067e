"""Rule primitives.

Defines the immutable objects the global events monitor matches against:
- `EventEntry`: one configured signature, with its canonical form and topic
- `Rule`: named, prioritized list of events with an optional address scope
- `RuleSet`: the ordered collection of rules loaded from configuration
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field

from eth_utils import is_address

from monitorism.signatures.canonical import canonicalize_signature
from monitorism.signatures.topics import TopicID, topic_for_canonical


def normalize_address(address: str) -> str:
    """Lowercased 0x form of an address; raises ValueError if malformed."""
    if not isinstance(address, str) or not is_address(address):
        raise ValueError(f"invalid address: {address!r}")
    a = address.lower()
    return a if a.startswith("0x") else "0x" + a


@dataclass(frozen=True)
class EventEntry:
    """One configured signature, resolved eagerly."""

    signature: str  # as written by the operator, used as metric label
    canonical: str
    topic: TopicID

    @classmethod
    def from_signature(cls, signature: str) -> EventEntry:
        """Canonicalize + hash; raises InvalidSignature."""
        canonical = canonicalize_signature(signature)
        return cls(signature=signature, canonical=canonical, topic=topic_for_canonical(canonical))


@dataclass(frozen=True)
class Rule:
    """One operator-defined alert rule."""

    name: str
    priority: str
    events: tuple[EventEntry, ...]
    addresses: frozenset[str] = frozenset()  # lowercased; empty = any address

    def __post_init__(self):
        if not self.events:
            raise ValueError(f"rule {self.name!r} has no events")

    @property
    def first_event(self) -> EventEntry:
        return self.events[0]

    def watches_address(self, address: str) -> bool:
        """Address scope check; `address` is compared lowercased."""
        if not self.addresses:
            return True
        return address.lower() in self.addresses


@dataclass(frozen=True)
class RuleSet:
    """Ordered, immutable collection of rules."""

    rules: tuple[Rule, ...] = field(default_factory=tuple)

    @classmethod
    def of(cls, rules: Iterable[Rule]) -> RuleSet:
        return cls(rules=tuple(rules))

    def __iter__(self) -> Iterator[Rule]:
        return iter(self.rules)

    def __len__(self) -> int:
        return len(self.rules)

    def watches_every_address(self) -> bool:
        """True when at least one rule has no address scope."""
        return any(not rule.addresses for rule in self.rules)

    def monitored_addresses(self) -> list[str]:
        """Unique scoped addresses across all rules, in first-seen order."""
        seen: dict[str, None] = {}
        for rule in self.rules:
            for addr in sorted(rule.addresses):
                seen.setdefault(addr, None)
        return list(seen)
