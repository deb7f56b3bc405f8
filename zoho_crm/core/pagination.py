"""
Pagination engine shared by both API versions.

A paginator drives the fetching of the pages of one paginated query. It
keeps the responses fetched so far, knows whether there is more data to
fetch, and can fetch pages one by one or by concurrent batches.
"""

import logging
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any

from .query import to_datetime
from .response import Response

logger = logging.getLogger(__name__)

# Maximum number of records per page allowed by the API
PAGE_MAX_SIZE = 200


def _check_positive_int(value: Any, name: str) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ValueError(f"{name} must be a positive non-zero integer.")


class QueryPaginator(ABC):
    """
    Base paginator for a paginated query.

    Subclasses define how the query for the next page is built and what
    the page size is. They can refine handle_page() to detect other
    end-of-data conditions.

    A paginator is meant for one pagination run and one caller thread.
    """

    def __init__(self, query: Any):
        """
        Initialize the paginator.

        Args:
            query: The parent paginated query (never modified)
        """
        self.query = query
        self._responses: list[Response] = []
        self._has_more_data = True
        self._fetch_count = 0
        self._next_cursor = 0

    # ===== STATE ACCESSORS =====

    @property
    def responses(self) -> list[Response]:
        """The pages retrieved so far, in fetch order."""
        return list(self._responses)

    @property
    def has_more_data(self) -> bool:
        """
        Whether there may still be data to fetch.

        True only means the last page has not been detected yet.
        Once False, it never becomes True again.
        """
        return self._has_more_data

    @property
    def pages_fetched(self) -> int:
        return self._fetch_count

    @property
    def items_fetched(self) -> int:
        return sum(len(page.content or []) for page in self._responses)

    @property
    def next_cursor(self) -> int:
        """Zero-based index of the next page to request."""
        return self._next_cursor

    # ===== FETCHING =====

    def fetch(self) -> Response | None:
        """
        Fetch the next page.

        Returns:
            The page response, or None if there is no more data to fetch
        """
        if not self._has_more_data:
            return None

        page = self.query.client.execute_query(self._next_page_query())
        page = self.handle_page(page)
        self._fetch_count += 1

        logger.debug(f"Fetched page #{self._fetch_count} of {self.query!r}")

        return page

    def fetch_all(self) -> list[Response]:
        """Fetch pages until there is no more data, concurrently if the query asks for it."""
        if self.query.must_be_paginated_concurrently():
            return self.fetch_all_async()

        return self.fetch_all_sync()

    def fetch_all_sync(self) -> list[Response]:
        """Fetch pages one at a time until there is no more data."""
        while self._has_more_data:
            self.fetch()

        return self.responses

    def fetch_all_async(self, concurrency: int | None = None) -> list[Response]:
        """
        Fetch pages by concurrent batches until there is no more data.

        Args:
            concurrency: Batch size override (defaults to the query concurrency)

        Raises:
            ValueError: If no valid batch size is available
        """
        if concurrency is None:
            concurrency = self.query.get_concurrency()

        _check_positive_int(concurrency, "Concurrency")

        while self._has_more_data:
            self.fetch_concurrently(concurrency)

        return self.responses

    def fetch_limit(self, limit: int) -> list[Response]:
        """
        Fetch pages until there is no more data or a number of pages is reached.

        The limit applies to the total number of pages fetched by this
        paginator, not only to this call.

        Args:
            limit: The maximum number of pages to fetch
        """
        _check_positive_int(limit, "Page limit")

        while self._has_more_data and self._fetch_count < limit:
            self.fetch()

        return self.responses

    def fetch_concurrently(self, batch_size: int) -> list[Response]:
        """
        Fetch a number of pages concurrently.

        The pages are handled in page order once all of them are received.
        Pages following the last page detected are discarded, but the whole
        batch still counts as fetched.

        Args:
            batch_size: The number of pages to request at once
        """
        _check_positive_int(batch_size, "Batch size")

        if not self._has_more_data:
            return self.responses

        queries = [self._next_page_query() for _ in range(batch_size)]

        pages = self.query.client.execute_batch(queries)

        for page in pages:
            if not self._has_more_data:
                break

            self.handle_page(page)

        self._fetch_count += batch_size

        logger.debug(
            f"Fetched a batch of {batch_size} pages of {self.query!r} "
            f"({self._fetch_count} pages so far)"
        )

        return self.responses

    # ===== PAGE HANDLING =====

    def handle_page(self, page: Response) -> Response:
        """
        Check a freshly retrieved page and store it.

        Subclasses may alter the page content before calling this method.

        Returns:
            The stored page
        """
        self._responses.append(page)

        # If this page is empty, the following ones will be too
        if page.is_empty():
            self._has_more_data = False
            return page

        # A page which is not full is the last one
        if len(page.content) < self.get_page_size():
            self._has_more_data = False

        return page

    def stop(self) -> None:
        """Mark the end of the data."""
        self._has_more_data = False

    def cut_off_page(self, page: Response, field: str, max_date: datetime) -> None:
        """
        Apply a maximum modification date to a non-empty page.

        Records are expected in ascending modification order. If the last
        record of the page reaches the date, this page is the last one and
        its records modified at that date or later are removed.

        Args:
            page: The page, modified in place
            field: Name of the record attribute holding the modification time
            max_date: The exclusive maximum modification date
        """
        if to_datetime(page.content[-1].get(field)) < max_date:
            return

        self.stop()
        page.content = page.content.filter(lambda record: to_datetime(record.get(field)) < max_date)

    def _next_page_query(self) -> Any:
        query = self.get_page_query(self._next_cursor)
        self._next_cursor += 1
        return query

    @abstractmethod
    def get_page_query(self, cursor: int) -> Any:
        """
        Build the query of a page.

        Args:
            cursor: Zero-based page index

        Returns:
            A non auto-paginated copy of the parent query targeting the page
        """
        pass

    @abstractmethod
    def get_page_size(self) -> int:
        """Return the number of records in a full page."""
        pass
