"""Exceptions raised by dealerhub services.

The API layer maps each exception to an HTTP status in `dealerhub.main`.
"""

from typing import Optional


class DealerHubException(Exception):
    """Base exception for dealerhub services."""

    code = "InternalError"
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        """Initialize with an optional message.

        Args:
            message: Human-readable description; falls back to the class default
        """
        self.message = message or self.default_message
        super().__init__(self.message)

    def __str__(self) -> str:
        """Return the message."""
        return self.message


class UnauthenticatedException(DealerHubException):
    """No resolvable identity for the request."""

    code = "Unauthenticated"
    default_message = "Unauthorized"


class OrganizationRequiredException(DealerHubException):
    """Organization-scoped action without an active organization."""

    code = "OrganizationRequired"
    default_message = "Organization required"


class InsufficientPermissionsException(DealerHubException):
    """The caller's role is not in the allowed set."""

    code = "InsufficientPermissions"
    default_message = "Insufficient permissions"


class DuplicateKeyException(DealerHubException):
    """A uniqueness constraint would be violated."""

    code = "DuplicateKey"
    default_message = "Resource with this key already exists"


class NotFoundException(DealerHubException):
    """The requested resource does not exist."""

    code = "NotFound"
    default_message = "Resource not found"


class InvalidStateError(DealerHubException):
    """The resource is in a state that does not allow the operation."""

    code = "InvalidState"
    default_message = "Operation not allowed in the current state"


class UpstreamUnavailableException(DealerHubException):
    """The cache or store backend could not be reached."""

    code = "UpstreamUnavailable"
    default_message = "Upstream service unavailable"

    def __init__(self, message: Optional[str] = None, backend: Optional[str] = None):
        """Initialize with the failing backend name.

        Args:
            message: Human-readable description
            backend: Name of the unreachable backend (e.g. "redis", "database")
        """
        self.backend = backend
        super().__init__(message)
