"""Chain node clients.

This package provides:
- `RPC`: async JSON-RPC client returning domain models
- ABI word helpers for static contract reads
"""

from monitorism.clients.rpc import RPC

__all__ = ["RPC"]
