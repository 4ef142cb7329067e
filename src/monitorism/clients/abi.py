"""Minimal ABI helpers for the handful of contract reads the monitors issue.

Only static 32-byte words and `address[]` returns are needed, so calldata is
assembled and decoded by hand from 32-byte words.
"""

from __future__ import annotations

from eth_utils import function_signature_to_4byte_selector, to_checksum_address

from monitorism.signatures.canonical import canonicalize_signature


def word_at(data: bytes, i: int) -> bytes:
    """Return the i-th 32-byte ABI word (zero-padded if out-of-range)."""
    start = 32 * i
    end = start + 32
    word = data[start:end] if start < len(data) else b""
    return word.rjust(32, b"\x00") if len(word) < 32 else word


def encode_address(address: str) -> bytes:
    """Left-pad a 20-byte address into one ABI word."""
    raw = bytes.fromhex(address.lower().removeprefix("0x"))
    if len(raw) != 20:
        raise ValueError(f"invalid address: {address!r}")
    return raw.rjust(32, b"\x00")


def encode_call(signature: str, *args: bytes) -> str:
    """Selector of `signature` followed by pre-encoded static words, as 0x-hex."""
    selector = function_signature_to_4byte_selector(canonicalize_signature(signature))
    return "0x" + (selector + b"".join(args)).hex()


def decode_uint(data: bytes) -> int:
    """Decode a single uint256 return value."""
    return int.from_bytes(word_at(data, 0), "big", signed=False)


def decode_address(word: bytes) -> str:
    """Checksummed address stored in the low 20 bytes of a word."""
    return to_checksum_address(word[-20:])


def decode_address_array(data: bytes) -> list[str]:
    """Decode a single dynamic `address[]` return value."""
    if not data:
        return []
    offset = int.from_bytes(word_at(data, 0), "big")
    if offset % 32:
        raise ValueError(f"misaligned array offset {offset}")
    head = offset // 32
    length = int.from_bytes(word_at(data, head), "big")
    if 32 * (head + 1 + length) > len(data):
        raise ValueError(f"address[] of length {length} overruns {len(data)} bytes of return data")
    return [decode_address(word_at(data, head + 1 + i)) for i in range(length)]
