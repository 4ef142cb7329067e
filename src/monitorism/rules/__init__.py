"""Rule configuration, indexing and matching.

This package provides:
- Rule primitives (EventEntry, Rule, RuleSet)
- YAML loader with eager signature validation
- RuleIndex (topic0 → rules) and EventMatcher (log → MatchResult)
"""

from monitorism.rules.index import RuleIndex
from monitorism.rules.loader import load_rule_set, parse_rules, rule_set_from_dicts
from monitorism.rules.matcher import EventMatcher
from monitorism.rules.specs import EventEntry, Rule, RuleSet, normalize_address

__all__ = [
    "RuleIndex",
    "load_rule_set",
    "parse_rules",
    "rule_set_from_dicts",
    "EventMatcher",
    "EventEntry",
    "Rule",
    "RuleSet",
    "normalize_address",
]
