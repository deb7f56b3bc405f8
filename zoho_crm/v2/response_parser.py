"""Parsing of V2 API responses and handling of V2 API errors."""

import json
import logging
from typing import Any

import httpx

from ..core.models import APIError, InvalidTokenError
from ..core.response import Response

logger = logging.getLogger(__name__)


class ResponseParser:
    """Turns a raw V2 HTTP response into a Response with a clean content."""

    def parse(self, http_response: httpx.Response, query: Any) -> Response:
        """
        Parse an HTTP response.

        An empty body (e.g. 204 No Content) gives an empty content, which
        the query transformer turns into its own empty value.

        Raises:
            APIError: If the body is not valid JSON
        """
        raw_content = http_response.text

        try:
            content = json.loads(raw_content) if raw_content.strip() else None
        except json.JSONDecodeError as e:
            raise APIError(f"Invalid JSON response: {e}", status_code=http_response.status_code)

        transformer = query.get_response_transformer()
        if transformer is not None:
            content = transformer.transform_response(content, query)

        return Response(query, content, raw_content)


class ErrorHandler:
    """Converts authentication failures into InvalidTokenError."""

    def __init__(self, client: Any):
        self.client = client

    def handle(self, exception: Exception, query: Any) -> None:
        """
        Raise a more specific exception if possible, otherwise return.

        Raises:
            InvalidTokenError: If the API rejected the access token
        """
        if isinstance(exception, APIError) and exception.status_code == 401:
            # Force a refresh before the next request
            self.client.token_store.set_access_token(None)

            raise InvalidTokenError(
                f"Access token rejected for {query!r}: {exception}",
                status_code=exception.status_code,
                code="INVALID_TOKEN",
            ) from exception
