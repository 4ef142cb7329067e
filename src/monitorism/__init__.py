"""monitorism: Prometheus monitors for EVM chains."""

from __future__ import annotations

from .core.errors import ConfigurationError, ConnectivityError, InvalidSignature, MonitorError, RpcError
from .rules import EventMatcher, Rule, RuleIndex, RuleSet, load_rule_set
from .signatures import canonicalize_signature, signature_to_topic

__all__ = [
    "ConfigurationError",
    "ConnectivityError",
    "InvalidSignature",
    "MonitorError",
    "RpcError",
    "EventMatcher",
    "Rule",
    "RuleIndex",
    "RuleSet",
    "load_rule_set",
    "canonicalize_signature",
    "signature_to_topic",
]
