"""API response container."""

from typing import Any


class Response:
    """
    The parsed response of a query.

    For a single request, raw_content is the raw body of the HTTP response.
    For an automatically paginated query, content is the merged content of
    every page and raw_content is the list of raw page bodies, in fetch order.
    """

    def __init__(self, query: Any, content: Any, raw_content: Any):
        self.query = query
        self.content = content
        self.raw_content = raw_content

    def is_empty(self) -> bool:
        """Check if the response has no content."""
        if self.content is None:
            return True

        try:
            return len(self.content) == 0
        except TypeError:
            return False

    def has_multiple_pages(self) -> bool:
        return isinstance(self.raw_content, list)

    def __repr__(self) -> str:
        return f"Response(query={self.query!r}, content={self.content!r})"
