"""Fluent query builder for the V1 API."""

from datetime import date, datetime
from typing import Any

from ..core.models import InvalidQueryError, PaginationSettings
from ..core.query import BaseQuery, to_datetime
from .paginator import QueryPaginator

SUPPORTED_FORMATS = ("json",)


class Query(BaseQuery):
    """
    A V1 API request: a response format, a module, a method and URL parameters.

    Example:
        >>> client.module("Contacts").all().select("First Name", "Email").concurrency(4).get()
    """

    def __init__(self, client: Any):
        super().__init__(client)
        self.pagination = PaginationSettings()
        self._format: str | None = "json"
        self._module: str | None = None
        self._method: str | None = None
        self._limit: int | None = None
        self._max_modification_date: datetime | None = None

    # ===== REQUEST ATTRIBUTES =====

    def get_http_method(self) -> str:
        return self.get_client_method().http_method

    def get_url(self) -> str:
        return f"{self._format}/{self._module}/{self._method}?{self.get_query_string()}"

    def format(self, response_format: str | None) -> "Query":
        self._format = response_format
        return self

    def get_format(self) -> str | None:
        return self._format

    def module(self, module: str | None) -> "Query":
        self._module = module
        return self

    def get_module(self) -> str | None:
        return self._module

    def method(self, method: str | None) -> "Query":
        self._method = method
        return self

    def get_method(self) -> str | None:
        return self._method

    # ===== ORDERING =====

    def order_by(self, column: str, order: str = "asc") -> "Query":
        """Order records by a column, in "asc" or "desc" direction."""
        return self.params({"sortColumnString": column, "sortOrderString": order})

    def order_asc(self) -> "Query":
        return self.param("sortOrderString", "asc")

    def order_desc(self) -> "Query":
        return self.param("sortOrderString", "desc")

    # ===== COLUMN SELECTION =====

    def select(self, *columns: str | list[str]) -> "Query":
        """
        Select one or more columns to retrieve.

        Accepts column names as arguments or as a single list.
        """
        new_selection = list(self.get_selected_columns())
        for column in self._flatten(columns):
            if column not in new_selection:
                new_selection.append(column)

        return self.param("selectColumns", self._wrap_selected_columns(new_selection))

    def unselect(self, *columns: str | list[str]) -> "Query":
        removed = set(self._flatten(columns))
        new_selection = [column for column in self.get_selected_columns() if column not in removed]

        return self.param("selectColumns", self._wrap_selected_columns(new_selection))

    def get_selected_columns(self) -> list[str]:
        selection = self.get_url_parameter("selectColumns")

        if selection is None:
            return []

        # Unwrap the column names: "Module(a,b)" -> "a,b"
        selection = selection[len(f"{self._module}("):-1]

        return [column.strip() for column in selection.split(",") if column.strip()]

    def has_select(self, column: str) -> bool:
        return column in self.get_selected_columns()

    def select_all(self) -> "Query":
        """Remove the column selection."""
        return self.remove_param("selectColumns")

    def select_timestamps(self) -> "Query":
        return self.select("Created Time", "Modified Time")

    def select_default_columns(self) -> "Query":
        """Select the owner, creator, modifier and timestamps, present on all records."""
        entity_name = self.get_client_module().entity_name
        return self.select(f"{entity_name} Owner", "Created By", "Modified By").select_timestamps()

    def _wrap_selected_columns(self, columns: list[str]) -> str:
        return f"{self._module}({','.join(columns)})"

    @staticmethod
    def _flatten(columns: tuple) -> list[str]:
        flat = []
        for column in columns:
            if isinstance(column, (list, tuple)):
                flat.extend(column)
            else:
                flat.append(column)
        return flat

    # ===== FILTERS AND OPTIONS =====

    def modified_after(self, value: datetime | date | str | None) -> "Query":
        """Set the minimum date for records' last modification."""
        if value is None:
            return self.remove_param("lastModifiedTime")

        return self.param("lastModifiedTime", to_datetime(value))

    def modified_before(self, value: datetime | date | str | None) -> "Query":
        """
        Set the maximum date for records' last modification.

        Records modified at this date or later are excluded. They are
        filtered once retrieved, so the records must be ordered by
        ascending modification time.
        """
        self._max_modification_date = None if value is None else to_datetime(value)
        return self

    def modified_between(self, start: datetime | date | str | None, end: datetime | date | str | None) -> "Query":
        return self.modified_after(start).modified_before(end)

    def get_max_modification_date(self) -> datetime | None:
        return self._max_modification_date

    def has_max_modification_date(self) -> bool:
        return self._max_modification_date is not None

    def trigger_workflow_rules(self, enabled: bool = True) -> "Query":
        return self.param("wfTrigger", enabled)

    def limit(self, limit: int | None) -> "Query":
        """
        Limit the number of records to retrieve.

        Raises:
            ValueError: If the limit is not a positive integer or None
        """
        if limit is not None and (isinstance(limit, bool) or not isinstance(limit, int) or limit <= 0):
            raise ValueError("Query limit must be a positive non-zero integer.")

        self._limit = limit
        return self

    def get_limit(self) -> int | None:
        return self._limit

    def has_limit(self) -> bool:
        return self._limit is not None

    # ===== PAGINATION AND RESPONSE HANDLING =====

    def get_paginator(self) -> QueryPaginator:
        return QueryPaginator(self)

    def get_response_page_merger(self) -> Any:
        return self.get_client_method()

    def get_response_transformer(self) -> Any:
        return self.get_client_method()

    def get_client_module(self) -> Any:
        return self.client.module(self._module)

    def get_client_method(self) -> Any:
        return self.client.get_method_handler(self._method)

    # ===== VALIDATION =====

    def is_malformed(self) -> bool:
        return self._format is None or self._module is None or self._method is None

    def validate(self) -> None:
        if self.is_malformed():
            raise InvalidQueryError(self, "the format, the module and the method must be set.")

        if self._format not in SUPPORTED_FORMATS:
            raise InvalidQueryError(self, f"unsupported response format '{self._format}'.")

        if not self.has_max_modification_date():
            return

        if not self.get_client_method().returns_records:
            raise InvalidQueryError(self, f"method '{self._method}' does not support a maximum modification date.")

        selection = self.get_selected_columns()
        if selection and "Modified Time" not in selection:
            raise InvalidQueryError(self, 'the "Modified Time" column is required with a maximum modification date.')

    # ===== SHORTCUTS =====

    def first(self) -> Any:
        """
        Retrieve only the first record matched by the query.

        The record window is reduced to one record to speed up the request.
        """
        from_index = self.get_url_parameter("fromIndex", 1)

        records = (
            self.copy()
            .auto_paginated(False)
            .params({"fromIndex": from_index, "toIndex": from_index})
            .get()
        )

        return records.first() if records else None
