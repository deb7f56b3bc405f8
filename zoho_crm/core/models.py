"""Core data models and exceptions for the Zoho CRM client."""

import secrets
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ApiVersion(Enum):
    """Generation of the Zoho CRM REST API."""
    V1 = "v1"
    V2 = "v2"


@dataclass
class PaginationSettings:
    """
    Pagination options carried by a paginated query.

    Attributes:
        auto_paginated: Whether executing the query fetches every page
        concurrency: Maximum number of pages fetched at once (None = sequential)
    """
    auto_paginated: bool = False
    concurrency: int | None = None

    def set_concurrency(self, concurrency: int | None) -> None:
        """
        Set the concurrency limit.

        Raises:
            ValueError: If the value is not a positive integer or None
        """
        if concurrency is not None and (
            isinstance(concurrency, bool)
            or not isinstance(concurrency, int)
            or concurrency <= 0
        ):
            raise ValueError("Query concurrency must be a positive non-zero integer.")

        self.concurrency = concurrency

    @property
    def concurrent(self) -> bool:
        """True if pages should be fetched by concurrent batches."""
        return self.concurrency is not None and self.concurrency > 1


@dataclass
class ExecutionContext:
    """Context of a single request execution, handed to execution hooks."""
    execution_id: str = field(default_factory=lambda: secrets.token_hex(8))
    batch_index: int | None = None


@dataclass
class ClientSettings:
    """Connection settings for a client profile."""
    api_version: ApiVersion
    endpoint: str | None = None
    auth_token: str | None = None
    client_id: str | None = None
    client_secret: str | None = None
    refresh_token: str | None = None
    timeout_seconds: float = 10.0
    max_retries: int = 3
    concurrency: int | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert ClientSettings to a dictionary."""
        return {
            "api_version": self.api_version.value,
            "endpoint": self.endpoint,
            "auth_token": self.auth_token,
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "refresh_token": self.refresh_token,
            "timeout_seconds": self.timeout_seconds,
            "max_retries": self.max_retries,
            "concurrency": self.concurrency,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ClientSettings":
        """Create ClientSettings from a dictionary."""
        return cls(
            api_version=ApiVersion(data["api_version"]),
            endpoint=data.get("endpoint"),
            auth_token=data.get("auth_token"),
            client_id=data.get("client_id"),
            client_secret=data.get("client_secret"),
            refresh_token=data.get("refresh_token"),
            timeout_seconds=data.get("timeout_seconds", 10.0),
            max_retries=data.get("max_retries", 3),
            concurrency=data.get("concurrency"),
        )


class ZohoCRMError(Exception):
    """Base exception for all client errors."""
    pass


class ConfigError(ZohoCRMError):
    """Raised when there is an error loading or saving configuration."""
    pass


class APIError(ZohoCRMError):
    """Raised when an API request fails."""

    def __init__(self, message: str, status_code: int | None = None, code: str | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.code = code


class InvalidTokenError(APIError):
    """Raised when the API rejects the access token."""
    pass


class BatchRequestError(ZohoCRMError):
    """Raised when one request of a concurrent batch fails."""

    def __init__(self, key_in_batch: int, wrapped_exception: Exception):
        super().__init__(
            f"Request #{key_in_batch} of the batch failed: {wrapped_exception}"
        )
        self.key_in_batch = key_in_batch
        self.wrapped_exception = wrapped_exception


class PaginatedQueryInBatchError(ZohoCRMError):
    """Raised when an automatically paginated query is put in a batch."""

    def __init__(self, message: str = "Automatically paginated queries cannot be executed in a batch."):
        super().__init__(message)


class InvalidQueryError(ZohoCRMError):
    """Raised when a query fails validation."""

    def __init__(self, query: Any, message: str):
        super().__init__(f"Invalid query: {message}")
        self.query = query


class UnsupportedMethodError(ZohoCRMError):
    """Raised when a module does not support the requested API method."""
    pass


class NullAuthTokenError(ZohoCRMError):
    """Raised when a V1 client is created without an auth token."""

    def __init__(self, message: str = "Invalid auth token: it must not be null or empty."):
        super().__init__(message)
