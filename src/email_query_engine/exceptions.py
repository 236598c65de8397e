"""Custom exceptions for Email Query Engine."""

from __future__ import annotations

from typing import Any


class EmailQueryError(Exception):
    """Base exception for all Email Query Engine errors."""

    kind = "serverError"

    def __init__(self, description: str) -> None:
        super().__init__(description)
        self.description = description

    def to_error_response(self) -> dict[str, Any]:
        """Render the error for the outer protocol layer."""
        return {"type": self.kind, "description": self.description}


class ValidationError(EmailQueryError):
    """Exception raised when a request is structurally invalid.

    Raised before any evaluation happens, so a request either fails as a
    whole or is evaluated as a whole.
    """

    kind = "invalidArguments"


class CollaboratorError(EmailQueryError):
    """Exception raised when an injected collaborator fails."""

    kind = "collaboratorFailure"


class TextIndexUnavailableError(CollaboratorError):
    """Exception raised when the text index cannot answer a lookup."""


class VisibilityResolutionError(CollaboratorError):
    """Exception raised when readable mailboxes cannot be resolved."""


class MessageStoreError(CollaboratorError):
    """Exception raised when message views cannot be loaded."""


class ConfigurationError(EmailQueryError):
    """Exception raised for configuration related errors."""
