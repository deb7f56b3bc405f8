"""Base API client shared by both API versions."""

from typing import Any

import httpx

from .processor import Hook, Middleware, QueryProcessor
from .response import Response
from .transport import RequestSender


class BaseClient:
    """
    Base client which owns the transport and the query processor.

    Subclasses provide the endpoint, the response parser and the
    error handler of their API version.
    """

    DEFAULT_ENDPOINT = ""

    def __init__(
        self,
        endpoint: str | None = None,
        http_client: httpx.Client | None = None,
        timeout_seconds: float = 10.0,
        max_retries: int = 3,
    ):
        """
        Initialize the client.

        Args:
            endpoint: API base URL (the version default if None)
            http_client: Optional httpx client (created if None)
            timeout_seconds: Request timeout in seconds
            max_retries: Maximum attempts for each request
        """
        self.endpoint = (endpoint or self.DEFAULT_ENDPOINT).rstrip("/") + "/"
        self.request_sender = RequestSender(
            http_client=http_client,
            timeout_seconds=timeout_seconds,
            max_retries=max_retries,
        )
        self.query_processor = QueryProcessor(
            endpoint=self.endpoint,
            request_sender=self.request_sender,
            response_parser=self.create_response_parser(),
            error_handler=self.create_error_handler(),
        )

    def create_response_parser(self) -> Any:
        raise NotImplementedError

    def create_error_handler(self) -> Any:
        return None

    def close(self) -> None:
        """Close the HTTP client if we created it."""
        self.request_sender.close()

    def __enter__(self):
        """Context manager support."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager cleanup."""
        self.close()
        return False

    def execute_query(self, query: Any) -> Response:
        """Execute a query and get the parsed response."""
        return self.query_processor.execute_query(query)

    def execute_batch(self, queries: list[Any]) -> list[Response]:
        """Execute queries concurrently; responses come back in the same order."""
        return self.query_processor.execute_batch(queries)

    def register_pre_execution_hook(self, callback: Hook) -> None:
        self.query_processor.register_pre_execution_hook(callback)

    def register_post_execution_hook(self, callback: Hook) -> None:
        self.query_processor.register_post_execution_hook(callback)

    def register_middleware(self, middleware: Middleware) -> None:
        self.query_processor.register_middleware(middleware)

    def get_request_count(self) -> int:
        """Get the number of HTTP requests sent so far."""
        return self.query_processor.get_request_count()
