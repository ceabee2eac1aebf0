"""Error kinds raised while reconciling a transit gateway.

- ConfigValidationError: a local precondition failed; raised before any
  remote call is issued.
- RemoteNotFound: the controller reports the gateway does not exist. Read
  and HA lookups treat this as absence, never as a failure.
- RemoteOperationError: any other controller failure, wrapped with the
  operation and target it happened on.
"""

from __future__ import annotations

import typing as t


class TransitGatewayError(Exception):
    """Base class for all errors raised by this package."""


class ConfigValidationError(TransitGatewayError, ValueError):
    """Declared configuration violates a precondition."""


class RemoteNotFound(TransitGatewayError):
    """The controller has no record of the requested gateway."""

    def __init__(self, name: str = "") -> None:
        self.name = name
        super().__init__(f"gateway not found: {name}" if name else "gateway not found")


class RemoteOperationError(TransitGatewayError):
    def __init__(self, operation: str, target: str, cause: t.Optional[BaseException] = None) -> None:
        self.operation = operation
        self.target = target
        self.cause = cause
        super().__init__(f"failed to {operation} ({target}): {cause}")
