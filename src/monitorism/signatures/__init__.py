"""Signature canonicalization and topic hashing.

This package provides:
- `canonicalize_signature`: human signature → canonical type-only form
- `signature_to_topic`: human signature → topic0 (keccak-256)
"""

from monitorism.signatures.canonical import ParsedSignature, canonicalize_signature, parse_signature
from monitorism.signatures.topics import TopicID, normalize_topic, signature_to_topic, topic_for_canonical

__all__ = [
    "ParsedSignature",
    "canonicalize_signature",
    "parse_signature",
    "TopicID",
    "normalize_topic",
    "signature_to_topic",
    "topic_for_canonical",
]
