"""Exceptions raised by token operations."""

from typing import Optional


class TokenOperationError(Exception):
    """Base class for token operation errors."""


class ValidationError(TokenOperationError):
    """A parameter is missing, malformed, or numerically invalid.

    Raised before any collaborator is called.
    """

    def __init__(self, field: str, message: str):
        self.field = field
        self.message = message
        super().__init__(f"{field}: {message}")


class UnsupportedCapabilityError(TokenOperationError):
    """A bridge operation was attempted on a token without bridge info."""

    def __init__(self, token_id: str, capability: str):
        self.token_id = token_id
        self.capability = capability
        super().__init__(f"Token {token_id} does not support {capability} function")


class CollaboratorError(TokenOperationError):
    """Failure raised by a coin, sender, bridge or rate service.

    Token operations re-raise it as is.
    """

    def __init__(self, message: str, service: str = "", status_code: Optional[int] = None):
        self.service = service
        self.status_code = status_code
        super().__init__(message)
