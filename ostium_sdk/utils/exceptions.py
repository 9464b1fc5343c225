"""
Custom exceptions for the Ostium SDK.

This module defines all custom exceptions raised by signers, the chain reader
and the client so callers can tell a bad request apart from a flaky network
or a misbehaving remote service.
"""

from typing import Optional


# Longest slice of a remote response body kept on an exception
BODY_SNIPPET_LENGTH = 300


class OstiumError(Exception):
    """Base exception for all Ostium SDK errors"""

    def __init__(
        self,
        message: str = "",
        *,
        operation: Optional[str] = None,
        status: Optional[int] = None,
        body: Optional[str] = None
    ):
        super().__init__(message)
        self.operation = operation
        self.status = status
        self.body = body[:BODY_SNIPPET_LENGTH] if body else body

    def __str__(self) -> str:
        message = super().__str__()
        context = []
        if self.operation:
            context.append(f"operation={self.operation}")
        if self.status is not None:
            context.append(f"status={self.status}")
        if self.body:
            context.append(f"body={self.body!r}")
        if context:
            return f"{message} ({', '.join(context)})"
        return message


# ==================== Validation Exceptions ====================

class ValidationError(OstiumError):
    """Input rejected before (or by) the backend"""
    pass


class InvalidOrderError(ValidationError):
    """Order parameters invalid (collateral/leverage/slippage/price)"""
    pass


class InvalidAddressError(ValidationError):
    """Address is not a valid EVM address"""
    pass


# ==================== Transport Exceptions ====================

class TransportError(OstiumError):
    """Network or HTTP failure talking to RPC or REST endpoints"""
    pass


# ==================== Protocol Exceptions ====================

class ProtocolError(OstiumError):
    """Remote answered, but the answer is semantically invalid"""
    pass


class CustodialJobFailedError(ProtocolError):
    """Custodial signing job reached a terminal failure state"""

    def __init__(self, message: str = "", *, job_id: Optional[str] = None, state: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.job_id = job_id
        self.state = state


# ==================== Signing Exceptions ====================

class SigningError(OstiumError):
    """Local cryptographic signing failed"""
    pass


class InvalidPrivateKeyError(SigningError):
    """Private key is invalid or malformed"""
    pass


# ==================== Timeout Exceptions ====================

class TimeoutError(OstiumError):
    """Polling exhausted without reaching a terminal state"""
    pass


# ==================== Configuration Exceptions ====================

class ConfigurationError(OstiumError):
    """Configuration error"""
    pass


class MissingEnvironmentVariableError(ConfigurationError):
    """Required environment variable not set"""
    pass


class VaultNotConfiguredError(ConfigurationError):
    """OLP vault address missing from the network config"""
    pass
