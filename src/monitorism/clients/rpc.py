"""Lightweight JSON-RPC client for Ethereum-compatible nodes.

This module provides:
- `RPC`: an async client with sane timeouts/connection limits
- Helper utilities to format block numbers and parse hex quantities

It returns `BlockHeader` / `ObservedLog` records ready for matching. Every
failure (transport, HTTP status, JSON-RPC error member, malformed payload)
is raised as `RpcError` so callers have one thing to catch.
"""

from __future__ import annotations

import itertools
from collections.abc import Sequence
from typing import Any

import httpx
from eth_utils import is_address

from monitorism.core.config import normalize_node_url
from monitorism.core.errors import RpcError
from monitorism.core.models import BlockHeader, ObservedLog
from monitorism.signatures.topics import normalize_topic


def to_hex_block(x: int) -> str:
    """Return a 0x-prefixed hex block number."""
    return hex(x)


def parse_quantity(value: Any) -> int:
    """Parse a JSON-RPC quantity ("0x1a" or int)."""
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        return int(value, 16) if value.startswith("0x") else int(value)
    raise ValueError(f"not a quantity: {value!r}")


def parse_header(raw: dict[str, Any]) -> BlockHeader:
    return BlockHeader(
        number=parse_quantity(raw["number"]),
        timestamp=parse_quantity(raw["timestamp"]),
        hash=str(raw.get("hash") or "").lower(),
    )


def parse_log(raw: dict[str, Any]) -> ObservedLog:
    address = raw["address"]
    if not is_address(address):
        raise ValueError(f"invalid log address: {address!r}")
    return ObservedLog(
        address=address.lower(),
        topics=tuple(normalize_topic(t) for t in raw.get("topics", [])),
        tx_hash=(raw.get("transactionHash") or "").lower(),
        block_number=parse_quantity(raw["blockNumber"]),
        log_index=parse_quantity(raw.get("logIndex") or 0),
    )


class RPC:
    """Minimal async RPC client.

    Parameters
    ----------
    url : str
        RPC endpoint URL; `host:port` is accepted and gets `http://`.
    timeout_s : int
        Per-operation timeout in seconds (connect/read/write).
    transport : httpx.AsyncBaseTransport | None
        Optional transport override (used by tests).
    """

    def __init__(
        self,
        url: str,
        *,
        timeout_s: int = 20,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.url = normalize_node_url(url)
        self._ids = itertools.count(1)
        self.client = httpx.AsyncClient(
            timeout=httpx.Timeout(
                connect=timeout_s,
                read=timeout_s,
                write=timeout_s,
                pool=max(30, timeout_s * 3),
            ),
            limits=httpx.Limits(max_connections=4, max_keepalive_connections=2),
            http2=True,
            transport=transport,
        )

    async def request(self, method: str, params: list[Any]) -> Any:
        """Issue one JSON-RPC call and return its `result` member."""
        payload = {"jsonrpc": "2.0", "id": next(self._ids), "method": method, "params": params}
        try:
            r = await self.client.post(self.url, json=payload)
            r.raise_for_status()
            data = r.json()
        except httpx.HTTPError as e:
            raise RpcError(method, f"{type(e).__name__}: {e}") from e
        except ValueError as e:
            raise RpcError(method, f"invalid JSON response: {e}") from e

        if not isinstance(data, dict):
            raise RpcError(method, f"unexpected response: {data!r}")
        if "error" in data:
            err = data["error"]
            if isinstance(err, dict):
                raise RpcError(method, str(err.get("message")), code=err.get("code"))
            raise RpcError(method, str(err))
        if "result" not in data:
            raise RpcError(method, "response has no result")
        return data["result"]

    async def chain_id(self) -> int:
        """Return the chain id as an int."""
        result = await self.request("eth_chainId", [])
        return self._decode("eth_chainId", parse_quantity, result)

    async def block_number(self) -> int:
        """Return the latest block number as an int."""
        result = await self.request("eth_blockNumber", [])
        return self._decode("eth_blockNumber", parse_quantity, result)

    async def latest_header(self) -> BlockHeader:
        """Return the latest block header (transactions not included)."""
        result = await self.request("eth_getBlockByNumber", ["latest", False])
        if not result:
            raise RpcError("eth_getBlockByNumber", "node returned no block")
        return self._decode("eth_getBlockByNumber", parse_header, result)

    async def get_logs(
        self,
        *,
        from_block: int,
        to_block: int,
        addresses: Sequence[str] | None = None,
    ) -> list[ObservedLog]:
        """Fetch logs within an inclusive block range, optionally scoped to emitters."""
        flt: dict[str, Any] = {
            "fromBlock": to_hex_block(from_block),
            "toBlock": to_hex_block(to_block),
        }
        if addresses:
            flt["address"] = [a.lower() for a in addresses]
        result = await self.request("eth_getLogs", [flt])
        if not isinstance(result, list):
            raise RpcError("eth_getLogs", f"expected a list of logs, got {type(result).__name__}")
        return [self._decode("eth_getLogs", parse_log, rl) for rl in result]

    async def call(self, to: str, data: str) -> bytes:
        """`eth_call` against the latest block; returns raw return data."""
        result = await self.request("eth_call", [{"to": to, "data": data}, "latest"])
        if not isinstance(result, str):
            raise RpcError("eth_call", f"expected hex data, got {result!r}")
        return self._decode("eth_call", lambda h: bytes.fromhex(h.removeprefix("0x")), result)

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self.client.aclose()

    @staticmethod
    def _decode(method: str, fn: Any, value: Any) -> Any:
        try:
            return fn(value)
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise RpcError(method, f"malformed response: {e!r}") from e
