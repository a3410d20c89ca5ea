"""Error taxonomy for catalog synchronization.

Upstream failures carry the status code and response body; import operation
outcomes distinguish a remote failure from a local polling timeout so callers
can alert on them differently.
"""

from typing import Any


class CatalogSyncError(Exception):
    """Base exception for all catalog sync errors."""

    def __init__(self, message: str, *, context: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.context: dict[str, Any] = context or {}

    def to_dict(self) -> dict[str, Any]:
        """Serialize exception for structured logging."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            **self.context,
        }


class ConfigurationError(CatalogSyncError):
    """Raised when required configuration is missing or malformed."""


class MissingCredentialError(ConfigurationError):
    """A credential needed to reach an upstream API was not configured."""

    def __init__(self, credential: str):
        super().__init__(
            f"Missing credential: {credential}", context={"credential": credential}
        )
        self.credential = credential


class InvalidCredentialError(ConfigurationError):
    """A configured credential could not be parsed or loaded."""

    def __init__(self, credential: str, reason: str):
        super().__init__(
            f"Invalid credential {credential}: {reason}",
            context={"credential": credential, "reason": reason},
        )
        self.credential = credential
        self.reason = reason


class UpstreamError(CatalogSyncError):
    """Non-2xx response or transport failure from an upstream API."""

    def __init__(
        self,
        service: str,
        message: str,
        *,
        status_code: int | None = None,
        body: str | None = None,
    ):
        detail = f"{service} request failed: {message}"
        if status_code is not None:
            detail = f"{detail} (HTTP {status_code})"
        if body:
            detail = f"{detail} - {body}"
        super().__init__(
            detail,
            context={"service": service, "status_code": status_code, "body": body},
        )
        self.service = service
        self.status_code = status_code
        self.body = body


class ProductNotFoundError(CatalogSyncError):
    """The requested product does not exist in the source catalog."""

    def __init__(self, product_id: str):
        super().__init__(
            f"Product {product_id} not found", context={"product_id": product_id}
        )
        self.product_id = product_id


class ImportOperationError(CatalogSyncError):
    """Base class for terminal import operation outcomes other than success."""

    def __init__(
        self,
        message: str,
        *,
        operation_name: str,
        product_ids: list[str] | None = None,
        context: dict[str, Any] | None = None,
    ):
        super().__init__(
            message,
            context={"operation": operation_name, **(context or {})},
        )
        self.operation_name = operation_name
        self.product_ids = product_ids or []


class ImportOperationFailed(ImportOperationError):
    """The destination reported the import operation as failed or partial."""

    def __init__(
        self,
        reason: str,
        *,
        operation_name: str,
        product_ids: list[str] | None = None,
        error_samples: list[dict[str, Any]] | None = None,
    ):
        super().__init__(
            f"Import operation failed: {reason}",
            operation_name=operation_name,
            product_ids=product_ids,
            context={"error_samples": error_samples or []},
        )
        self.reason = reason
        self.error_samples = error_samples or []


class ImportOperationTimeout(ImportOperationError):
    """The import operation did not report completion within the allowed poll attempts."""

    def __init__(
        self,
        *,
        operation_name: str,
        attempts: int,
        product_ids: list[str] | None = None,
    ):
        super().__init__(
            f"Import operation timed out after {attempts} polls",
            operation_name=operation_name,
            product_ids=product_ids,
            context={"attempts": attempts},
        )
        self.attempts = attempts
