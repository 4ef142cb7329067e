"""Hash canonical signatures into log topics (topic0).

A topic is the keccak-256 of the UTF-8 canonical signature, rendered as a
lowercased 0x-prefixed hex string, the same form the RPC client uses for
observed topics.
"""

from __future__ import annotations

from eth_utils import keccak

from monitorism.core.errors import InvalidSignature
from monitorism.signatures.canonical import canonicalize_signature

TopicID = str


def topic_for_canonical(canonical: str) -> TopicID:
    """Hash an already canonical signature."""
    if not canonical:
        raise InvalidSignature(canonical, "empty signature")
    return "0x" + keccak(text=canonical).hex()


def signature_to_topic(signature: str) -> TopicID:
    """Canonicalize then hash a human-written signature."""
    return topic_for_canonical(canonicalize_signature(signature))


def normalize_topic(topic: str | bytes) -> TopicID:
    """Lowercased 0x-hex form of a topic given as hex string or raw bytes."""
    if isinstance(topic, (bytes, bytearray)):
        return "0x" + bytes(topic).hex()
    t = topic.lower()
    return t if t.startswith("0x") else "0x" + t
