from typing import Any

import pytest
from eth_utils import to_checksum_address

from monitorism.clients.abi import decode_address_array, decode_uint, encode_address, encode_call, word_at
from monitorism.core.config import LivenessExpirationConfig
from monitorism.core.errors import ConfigurationError, RpcError
from monitorism.monitors.liveness_expiration import LivenessExpirationMonitor

SAFE = "0x" + "aa" * 20
GUARD = "0x" + "bb" * 20
MODULE = "0x" + "cc" * 20
OWNERS = ["0x" + "11" * 20, "0x" + "22" * 20]
LAST_LIVE = {OWNERS[0]: 1_699_000_000, OWNERS[1]: 1_698_000_000}
INTERVAL = 86_400 * 30

NS = "liveness_expiration_mon"


def _words(*values: int) -> bytes:
    return b"".join(v.to_bytes(32, "big") for v in values)


def _owners_return(owners: list[str]) -> bytes:
    return _words(32, len(owners), *(int(o, 16) for o in owners))


async def _fake_call(to: str, data: str) -> bytes:
    if to == SAFE:
        assert data == "0xa0e67e2b"  # getOwners()
        return _owners_return(OWNERS)
    if to == GUARD:
        owner = "0x" + data[-40:]
        return _words(LAST_LIVE[owner])
    if to == MODULE:
        return _words(INTERVAL)
    raise AssertionError(f"unexpected call to {to}")


def _monitor(mock_rpc: Any) -> LivenessExpirationMonitor:
    return LivenessExpirationMonitor(
        rpc=mock_rpc,
        safe_address=SAFE,
        liveness_guard_address=GUARD,
        liveness_module_address=MODULE,
    )


def test_abi_helpers() -> None:
    assert encode_call("getOwners()") == "0xa0e67e2b"
    assert encode_call("lastLive(address owner)", encode_address(OWNERS[0])).endswith("11" * 20)
    assert decode_uint(_words(42)) == 42
    assert decode_uint(b"") == 0
    assert word_at(b"\x01", 0) == b"\x00" * 31 + b"\x01"
    assert decode_address_array(_owners_return(OWNERS)) == [to_checksum_address(o) for o in OWNERS]
    assert decode_address_array(_owners_return([])) == []
    with pytest.raises(ValueError):
        decode_address_array(_words(32, 5, 1))
    with pytest.raises(ValueError):
        encode_address("0x1234")


@pytest.mark.asyncio
async def test_tick_exports_owner_liveness(mock_rpc: Any) -> None:
    mock_rpc.call.side_effect = _fake_call
    monitor = _monitor(mock_rpc)

    await monitor.run()

    reg = monitor.registry
    for owner, ts in LAST_LIVE.items():
        assert reg.get_sample_value(f"{NS}_lastLiveOfAOwner", {"address": to_checksum_address(owner)}) == ts
    assert reg.get_sample_value(f"{NS}_intervalLiveness", {"interval": "interval"}) == INTERVAL
    assert reg.get_sample_value(f"{NS}_highestBlockNumber", {"blockNumber": "blockNumber"}) == 100
    assert reg.get_sample_value(f"{NS}_BlockTimestamp", {"blocktimestamp": "blocktimestamp"}) == 1_700_000_000
    assert mock_rpc.call.await_count == 1 + len(OWNERS) + 1


@pytest.mark.asyncio
async def test_failed_owner_read_aborts_tick(mock_rpc: Any) -> None:
    async def failing(to: str, data: str) -> bytes:
        if to == GUARD:
            raise RpcError("eth_call", "execution reverted")
        return await _fake_call(to, data)

    mock_rpc.call.side_effect = failing
    monitor = _monitor(mock_rpc)

    await monitor.run()

    reg = monitor.registry
    assert reg.get_sample_value(f"{NS}_unexpectedRpcErrors_total", {"stage": "l1", "operation": "LastLive"}) == 1
    assert reg.get_sample_value(f"{NS}_intervalLiveness", {"interval": "interval"}) is None
    assert reg.get_sample_value(f"{NS}_highestBlockNumber", {"blockNumber": "blockNumber"}) is None


@pytest.mark.asyncio
async def test_malformed_return_data_is_counted(mock_rpc: Any) -> None:
    mock_rpc.call.return_value = _words(32, 9)
    monitor = _monitor(mock_rpc)

    await monitor.run()

    labels = {"stage": "l1", "operation": "GetOwners"}
    assert monitor.registry.get_sample_value(f"{NS}_unexpectedRpcErrors_total", labels) == 1


@pytest.mark.asyncio
async def test_create_validates_addresses(mock_rpc: Any) -> None:
    zero = "0x" + "00" * 20
    config = LivenessExpirationConfig(
        l1_node_url="http://localhost:8545",
        safe_address=zero,
        liveness_module_address=MODULE,
        liveness_guard_address=GUARD,
    )
    with pytest.raises(ConfigurationError):
        await LivenessExpirationMonitor.create(config, rpc=mock_rpc)

    bad = LivenessExpirationConfig(
        l1_node_url="http://localhost:8545",
        safe_address="not-an-address",
        liveness_module_address=MODULE,
        liveness_guard_address=GUARD,
    )
    with pytest.raises(ConfigurationError):
        await LivenessExpirationMonitor.create(bad, rpc=mock_rpc)
    mock_rpc.block_number.assert_not_awaited()


@pytest.mark.asyncio
async def test_create_checks_node(mock_rpc: Any) -> None:
    config = LivenessExpirationConfig(
        l1_node_url="http://localhost:8545",
        safe_address=SAFE.upper().replace("0X", "0x"),
        liveness_module_address=MODULE,
        liveness_guard_address=GUARD,
    )
    monitor = await LivenessExpirationMonitor.create(config, rpc=mock_rpc)

    mock_rpc.block_number.assert_awaited_once()
    assert monitor.safe_address == SAFE
