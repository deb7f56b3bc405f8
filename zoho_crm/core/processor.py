"""
Query processor.

Turns queries into HTTP requests, sends them through the request sender,
and turns the HTTP responses into Response objects with the help of a
version-specific response parser and error handler.
"""

import logging
from collections.abc import Callable
from typing import Any

import httpx

from .models import BatchRequestError, ExecutionContext, PaginatedQueryInBatchError
from .response import Response
from .transport import RequestSender

logger = logging.getLogger(__name__)

Hook = Callable[[Any, ExecutionContext], None]
Middleware = Callable[[Any], None]


class QueryProcessor:
    """Executes queries, single, automatically paginated, or by batches."""

    def __init__(
        self,
        endpoint: str,
        request_sender: RequestSender,
        response_parser: Any,
        error_handler: Any = None,
    ):
        """
        Initialize the processor.

        Args:
            endpoint: Base URL of the API, with a trailing slash
            request_sender: The transport
            response_parser: Object with a parse(http_response, query) method
            error_handler: Optional object with a handle(exception, query) method
        """
        self.endpoint = endpoint
        self.request_sender = request_sender
        self.response_parser = response_parser
        self.error_handler = error_handler
        self._pre_execution_hooks: list[Hook] = []
        self._post_execution_hooks: list[Hook] = []
        self._middlewares: list[Middleware] = []

    # ===== EXECUTION =====

    def execute_query(self, query: Any) -> Response:
        """
        Execute a query and get a parsed response.

        Automatically paginated queries have all their pages fetched and merged.
        """
        if query.must_be_paginated_automatically():
            return self.execute_paginated_query(query)

        query, request, context = self._prepare(query)

        self._fire_hooks(self._pre_execution_hooks, query, context)

        try:
            http_response = self.request_sender.send(request)
        except Exception as e:
            self._handle_exception(e, query)

        self._fire_hooks(self._post_execution_hooks, query, context)

        return self.response_parser.parse(http_response, query)

    def execute_paginated_query(self, query: Any) -> Response:
        """
        Fetch all the pages of a query and merge them into one response.

        Returns:
            A Response whose raw_content is the list of raw page bodies
        """
        paginator = query.get_paginator()
        paginator.fetch_all()

        contents = []
        raw_contents = []

        for page in paginator.responses:
            contents.append(page.content)
            raw_contents.append(page.raw_content)

        # Get rid of empty pages
        contents = [content for content in contents if content]

        # Only the query knows the nature of the content, so it provides the merger
        merged_content = query.get_response_page_merger().merge_paginated_contents(*contents)

        logger.debug(
            f"Merged {len(contents)} pages of {query!r} ({paginator.pages_fetched} pages fetched)"
        )

        return Response(query, merged_content, raw_contents)

    def execute_batch(self, queries: list[Any]) -> list[Response]:
        """
        Execute several queries concurrently and get the responses once all are received.

        Args:
            queries: The queries to execute

        Returns:
            The responses, in the same order as the queries

        Raises:
            PaginatedQueryInBatchError: If a query is automatically paginated
        """
        for query in queries:
            if query.must_be_paginated_automatically():
                raise PaginatedQueryInBatchError()

        prepared = []
        for index, query in enumerate(queries):
            prepared.append(self._prepare(query, batch_index=index))

        for query, _, context in prepared:
            self._fire_hooks(self._pre_execution_hooks, query, context)

        try:
            http_responses = self.request_sender.send_batch([request for _, request, _ in prepared])
        except BatchRequestError as e:
            # Unwrap the actual exception and retrieve the corresponding query
            self._handle_exception(e.wrapped_exception, prepared[e.key_in_batch][0], batch_error=e)

        for query, _, context in prepared:
            self._fire_hooks(self._post_execution_hooks, query, context)

        return [
            self.response_parser.parse(http_response, query)
            for (query, _, _), http_response in zip(prepared, http_responses)
        ]

    def _prepare(self, query: Any, batch_index: int | None = None) -> tuple[Any, httpx.Request, ExecutionContext]:
        """Copy the query, apply the middlewares, validate it, and build the HTTP request."""
        # Middlewares must not alter the caller's query
        query = query.copy()

        for middleware in self._middlewares:
            middleware(query)

        query.validate()

        context = ExecutionContext(batch_index=batch_index)
        request = self.create_http_request(query)

        logger.debug(f"[{context.execution_id}] {request.method} {request.url}")

        return query, request, context

    def create_http_request(self, query: Any) -> httpx.Request:
        """Create an HTTP request out of a query."""
        return httpx.Request(
            query.get_http_method(),
            self.endpoint + query.get_url(),
            headers=query.headers,
            content=query.get_body(),
        )

    def _handle_exception(self, exception: Exception, query: Any, batch_error: Exception | None = None) -> None:
        """
        Let the error handler convert an exception, or re-raise it as is.

        Raises:
            Exception: Always
        """
        if self.error_handler is not None:
            self.error_handler.handle(exception, query)

        # The error handler did not handle the error
        if batch_error is not None:
            raise batch_error
        raise exception

    # ===== HOOKS AND MIDDLEWARES =====

    def register_pre_execution_hook(self, callback: Hook) -> None:
        """Register a callback called with (query, context) before each request."""
        self._pre_execution_hooks.append(callback)

    def register_post_execution_hook(self, callback: Hook) -> None:
        """Register a callback called with (query, context) after each successful request."""
        self._post_execution_hooks.append(callback)

    def register_middleware(self, middleware: Middleware) -> None:
        """Register a callable applied to a copy of each query before it is sent."""
        self._middlewares.append(middleware)

    def _fire_hooks(self, hooks: list[Hook], query: Any, context: ExecutionContext) -> None:
        for callback in hooks:
            callback(query.copy(), context)

    def get_request_count(self) -> int:
        return self.request_sender.request_count
