from typing import Any

import pytest

from monitorism.core.config import TipMonConfig
from monitorism.core.errors import RpcError
from monitorism.monitors.tipmon import TipMonitor


@pytest.mark.asyncio
async def test_lag_is_wall_clock_minus_block_time(mock_rpc: Any) -> None:
    monitor = TipMonitor(rpc=mock_rpc, clock=lambda: 1_700_000_042.7)

    await monitor.run()

    assert monitor.registry.get_sample_value("tip_mon_lagging", {"type": "latest"}) == 42


@pytest.mark.asyncio
async def test_rpc_failure_is_counted(mock_rpc: Any) -> None:
    mock_rpc.latest_header.side_effect = RpcError("eth_getBlockByNumber", "timeout")
    monitor = TipMonitor(rpc=mock_rpc)

    await monitor.run()

    labels = {"stage": "laggingDistance", "operation": "eth_getBlockByNumber"}
    assert monitor.registry.get_sample_value("tip_mon_unexpectedRpcErrors_total", labels) == 1
    assert monitor.registry.get_sample_value("tip_mon_lagging", {"type": "latest"}) is None


@pytest.mark.asyncio
async def test_create_uses_given_client(mock_rpc: Any) -> None:
    monitor = await TipMonitor.create(TipMonConfig(), rpc=mock_rpc)
    assert monitor.rpc is mock_rpc
    await monitor.close()
    mock_rpc.aclose.assert_awaited_once()
