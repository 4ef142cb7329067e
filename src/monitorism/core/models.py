"""Core data models.

This module defines:
- `BlockHeader`: the two header fields the monitors care about (+ hash)
- `ObservedLog`: one RPC log, minimally normalized (lowercased hex)
- `MatchResult`: a rule that fired for a log during one tick

Logs and match results are transient: they are created and dropped
within a single tick.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from monitorism.rules.specs import EventEntry, Rule


@dataclass(slots=True, frozen=True)
class BlockHeader:
    """Latest block header as returned by `eth_getBlockByNumber`."""

    number: int
    timestamp: int
    hash: str = ""  # lowercased 0x...


@dataclass(slots=True, frozen=True)
class ObservedLog:
    """Raw log as fetched from RPC, minimally normalized."""

    address: str  # lowercased 0x...
    topics: tuple[str, ...]  # lowercased 0x...
    tx_hash: str  # lowercased 0x...
    block_number: int
    log_index: int = 0


@dataclass(slots=True, frozen=True)
class MatchResult:
    """One rule firing for one log."""

    rule: Rule
    event: EventEntry
    log: ObservedLog
