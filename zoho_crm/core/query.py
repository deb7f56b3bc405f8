"""Fluent query builders shared by both API versions."""

import copy
import dataclasses
from datetime import date, datetime, timezone
from typing import Any
from urllib.parse import urlencode

from .models import InvalidQueryError, PaginationSettings


def to_datetime(value: datetime | date | str) -> datetime:
    """
    Convert a date input to a timezone-aware datetime.

    Strings are parsed as ISO 8601 ("Z" suffix accepted). Naive values
    are considered to be UTC.

    Raises:
        ValueError: If the value is not a valid date
    """
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError as e:
            raise ValueError(f"Invalid date string: '{value}'") from e
    elif isinstance(value, date) and not isinstance(value, datetime):
        value = datetime(value.year, value.month, value.day)
    elif not isinstance(value, datetime):
        raise ValueError("Date must be a datetime, a date or a valid date string.")

    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)

    return value


def stringify_parameter(value: Any) -> str:
    """Convert a URL parameter value to the string representation the API expects."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, datetime):
        return value.strftime("%Y-%m-%d %H:%M:%S")
    if isinstance(value, (list, tuple)):
        return ",".join(str(item) for item in value)
    return str(value)


class BaseQuery:
    """
    Base fluent builder for an API request.

    Holds the URL parameters, headers and body of the request, and is
    bound to the client which executes it. Paginated query kinds set
    `pagination` to a PaginationSettings instance.
    """

    http_method = "GET"

    def __init__(self, client: Any):
        self.client = client
        self.url_parameters: dict[str, Any] = {}
        self.headers: dict[str, str] = {}
        self.body: str | bytes | None = None
        self.pagination: PaginationSettings | None = None

    # ===== URL PARAMETERS =====

    def param(self, key: str, value: Any) -> "BaseQuery":
        """Set a URL parameter."""
        self.url_parameters[key] = value
        return self

    def params(self, parameters: dict[str, Any]) -> "BaseQuery":
        """Set several URL parameters at once."""
        for key, value in parameters.items():
            self.param(key, value)
        return self

    def remove_param(self, key: str) -> "BaseQuery":
        self.url_parameters.pop(key, None)
        return self

    def get_url_parameter(self, key: str, default: Any = None) -> Any:
        return self.url_parameters.get(key, default)

    def has_url_parameter(self, key: str) -> bool:
        return key in self.url_parameters

    def get_query_string(self) -> str:
        """Encode the URL parameters, skipping unset (None) values."""
        return urlencode({
            key: stringify_parameter(value)
            for key, value in self.url_parameters.items()
            if value is not None
        })

    # ===== HEADERS AND BODY =====

    def set_header(self, name: str, value: str) -> "BaseQuery":
        self.headers[name] = value
        return self

    def remove_header(self, name: str) -> "BaseQuery":
        self.headers.pop(name, None)
        return self

    def get_header(self, name: str) -> str | None:
        return self.headers.get(name)

    def set_body(self, content: str | bytes | None) -> "BaseQuery":
        self.body = content
        return self

    def get_body(self) -> str | bytes | None:
        return self.body

    # ===== REQUEST ATTRIBUTES =====

    def get_http_method(self) -> str:
        return self.http_method

    def get_url(self) -> str:
        """
        Get the URL of the request, relative to the client endpoint.

        Returns:
            Path and query string (e.g., "Contacts?page=2")
        """
        raise NotImplementedError

    def get_response_transformer(self) -> Any:
        """Return the object which transforms the parsed response content, if any."""
        return None

    # ===== PAGINATION =====

    def is_paginated(self) -> bool:
        return self.pagination is not None

    def auto_paginated(self, enabled: bool = True) -> "BaseQuery":
        """
        Turn on/off automatic pagination.

        If enabled, every page is fetched when the query is executed.

        Raises:
            TypeError: If the query kind is not paginated
        """
        self._pagination_settings().auto_paginated = enabled
        return self

    def concurrency(self, concurrency: int | None) -> "BaseQuery":
        """
        Set the maximum number of pages fetched concurrently.

        Raises:
            ValueError: If the value is not a positive integer or None
            TypeError: If the query kind is not paginated
        """
        self._pagination_settings().set_concurrency(concurrency)
        return self

    def get_concurrency(self) -> int | None:
        return self.pagination.concurrency if self.pagination else None

    def must_be_paginated_automatically(self) -> bool:
        return self.pagination is not None and self.pagination.auto_paginated

    def must_be_paginated_concurrently(self) -> bool:
        return self.pagination is not None and self.pagination.concurrent

    def get_paginator(self) -> Any:
        """Create a new paginator bound to this query."""
        raise TypeError(f"{type(self).__name__} is not a paginated query")

    def get_response_page_merger(self) -> Any:
        """Return the object which merges the contents of several pages."""
        raise TypeError(f"{type(self).__name__} is not a paginated query")

    def _pagination_settings(self) -> PaginationSettings:
        if self.pagination is None:
            raise TypeError(f"{type(self).__name__} is not a paginated query")
        return self.pagination

    # ===== VALIDATION =====

    def validate(self) -> None:
        """
        Check that the query can be executed.

        Raises:
            InvalidQueryError: If the query is malformed
        """
        pass

    def is_valid(self) -> bool:
        try:
            self.validate()
        except InvalidQueryError:
            return False
        return True

    # ===== EXECUTION =====

    def execute(self) -> Any:
        """Execute the query and return the full Response object."""
        return self.client.execute_query(self)

    def get(self) -> Any:
        """Execute the query and return the response content."""
        return self.execute().content

    def copy(self) -> "BaseQuery":
        """
        Return an independent copy of the query.

        The client is shared, the parameters, headers and pagination settings are not.
        """
        clone = copy.copy(self)
        clone.url_parameters = dict(self.url_parameters)
        clone.headers = dict(self.headers)
        if self.pagination is not None:
            clone.pagination = dataclasses.replace(self.pagination)
        return clone

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.get_url()}>"
