"""Paginator for V2 API queries, based on page numbers."""

from typing import Any

from ..core.pagination import PAGE_MAX_SIZE
from ..core.pagination import QueryPaginator as BaseQueryPaginator
from ..core.response import Response

MODIFIED_TIME_FIELD = "Modified_Time"


class QueryPaginator(BaseQueryPaginator):
    """
    Fetches the pages of a V2 query with the "page" URL parameter.

    If the query has a maximum modification date, records are expected in
    ascending modification order: the first page whose last record reaches
    the date is the last page, and its records from that date on are removed.
    """

    def get_page_query(self, cursor: int) -> Any:
        return self.query.copy().auto_paginated(False).param("page", cursor + 1)

    def get_page_size(self) -> int:
        return int(self.query.get_url_parameter("per_page", PAGE_MAX_SIZE))

    def handle_page(self, page: Response) -> Response:
        max_date = self.query.get_max_modification_date()

        if max_date is not None and not page.is_empty():
            self.cut_off_page(page, MODIFIED_TIME_FIELD, max_date)

        return super().handle_page(page)
