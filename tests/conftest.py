from unittest.mock import AsyncMock

import pytest

from monitorism.core.models import BlockHeader


@pytest.fixture
def mock_rpc():
    rpc = AsyncMock()
    rpc.chain_id = AsyncMock(return_value=1)
    rpc.block_number = AsyncMock(return_value=100)
    rpc.latest_header = AsyncMock(return_value=BlockHeader(number=100, timestamp=1_700_000_000))
    rpc.get_logs = AsyncMock(return_value=[])
    rpc.call = AsyncMock(return_value=b"")
    rpc.aclose = AsyncMock()
    return rpc
