"""Domain exceptions for the membership service.

Defines the error taxonomy of the aggregation layer. These exceptions are
independent of HTTP; the presentation layer maps them to responses in
core.exception_handlers using status_code and to_dict().
"""

from typing import Any


class MembershipException(Exception):
    """Base exception for all membership service errors.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code.
        details: Additional error context (e.g. status, environment).
        status_code: HTTP status the API surface responds with.
    """

    status_code: int = 500

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Optional machine-readable code; defaults to class name.
            details: Optional dict of extra context.
        """
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON error body: {error, details} (details omitted when empty)."""
        body: dict[str, Any] = {"error": self.message}
        if self.details:
            body["details"] = self.details
        return body


class InvalidEnvironmentException(MembershipException):
    """Raised when an environment tag is unknown or not configured."""

    def __init__(self, environment: str | None, reason: str = "unknown environment") -> None:
        """Initialize with the offending tag.

        Args:
            environment: The tag that was requested (may be None when missing).
            reason: Why it could not be resolved.
        """
        super().__init__(
            f"Invalid environment: {environment!r} ({reason})",
            "INVALID_ENVIRONMENT",
            {"environment": environment, "reason": reason},
        )


class UpstreamException(MembershipException):
    """Raised on a non-2xx response or transport failure from the identity source.

    status is None for transport failures (connection refused, DNS, timeout).
    """

    def __init__(
        self,
        operation: str,
        status: int | None = None,
        body: str | None = None,
        reason: str | None = None,
    ) -> None:
        """Initialize with the failed operation and upstream response.

        Args:
            operation: Upstream operation name (e.g. 'list_groups').
            status: HTTP status returned upstream, if any.
            body: Response body text (truncated by the client).
            reason: Transport error description when there is no response.
        """
        self.operation = operation
        self.status = status
        self.body = body
        if reason:
            message = f"Upstream {operation} failed: {reason}"
        elif status is not None:
            message = f"Upstream {operation} failed with status {status}"
        else:
            message = f"Upstream {operation} failed: transport error"
        details: dict[str, Any] = {"operation": operation, "status": status}
        if body:
            details["body"] = body
        if reason:
            details["reason"] = reason
        super().__init__(message, "UPSTREAM_ERROR", details)


class ProjectNotFoundException(MembershipException):
    """Raised when a project id is absent from the environment's project list."""

    status_code = 404

    def __init__(self, environment: str, project_id: str) -> None:
        """Initialize with the environment and the missing project id.

        Args:
            environment: Environment tag that was searched.
            project_id: The project id that was not found.
        """
        self.project_id = project_id
        super().__init__(
            f"Project not found: {project_id}",
            "PROJECT_NOT_FOUND",
            {"environment": environment, "project_id": project_id},
        )

    def to_dict(self) -> dict[str, Any]:
        """Not-found responses carry only the error message."""
        return {"error": self.message}


class InvalidIdentifierException(MembershipException, ValueError):
    """Raised when a project, group or environment id cannot form a cache key.

    Ids must be non-empty and must not contain the cache key separator.
    """

    status_code = 400

    def __init__(self, name: str, value: str, reason: str) -> None:
        super().__init__(
            f"Invalid {name}: {value!r} ({reason})",
            "INVALID_IDENTIFIER",
            {name: value, "reason": reason},
        )


class CacheException(MembershipException):
    """Raised by cache adapters that surface backend failures.

    The cache-aside store treats it as a miss (read) or logs it (write);
    it never reaches the API surface.
    """

    def __init__(self, operation: str, key: str, reason: str) -> None:
        super().__init__(
            f"Cache {operation} failed for key {key}: {reason}",
            "CACHE_ERROR",
            {"operation": operation, "key": key, "reason": reason},
        )


class MemberRemovalException(MembershipException):
    """Raised by the API surface when an upstream member removal fails.

    The upstream status (when present) becomes the response status.
    """

    def __init__(self, cause: UpstreamException) -> None:
        """Wrap the upstream failure.

        Args:
            cause: The UpstreamException raised by the mutation.
        """
        self.status_code = cause.status if cause.status is not None and cause.status >= 400 else 500
        super().__init__(
            "Failed to remove member",
            "MEMBER_REMOVAL_FAILED",
            cause.details,
        )
