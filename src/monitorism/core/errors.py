"""Exception hierarchy shared by every monitor.

- `InvalidSignature`: a signature string cannot be canonicalized
- `ConfigurationError`: rule file / flags are unusable (fatal at startup)
- `ConnectivityError`: node unreachable while constructing a monitor (fatal)
- `RpcError`: transient failure during a tick (counted, never fatal)
"""

from __future__ import annotations


class MonitorError(Exception):
    """Base class for all monitorism errors."""


class InvalidSignature(MonitorError, ValueError):
    """Raised when a function/event signature does not parse."""

    def __init__(self, signature: str, reason: str) -> None:
        self.signature = signature
        self.reason = reason
        super().__init__(f"Invalid signature {signature!r}: {reason}")


class ConfigurationError(MonitorError):
    """Raised when the monitor configuration cannot be loaded or validated."""


class ConnectivityError(MonitorError):
    """Raised when the node cannot be reached during monitor construction."""


class RpcError(MonitorError):
    """Raised for any failed JSON-RPC exchange (transport, node error, bad payload)."""

    def __init__(self, method: str, message: str, *, code: int | None = None) -> None:
        self.method = method
        self.code = code
        detail = f"{code} {message}" if code is not None else message
        super().__init__(f"{method}: {detail}")
