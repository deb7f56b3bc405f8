"""Fluent query builders for the V2 API records endpoints."""

import json
from datetime import date, datetime
from typing import Any

from ..core.entities import Entity
from ..core.models import InvalidQueryError, PaginationSettings
from ..core.query import BaseQuery, to_datetime
from .paginator import MODIFIED_TIME_FIELD, QueryPaginator
from .records import ActionResultTransformer, RecordListTransformer, SingleRecordTransformer

DateInput = datetime | date | str


class AbstractQuery(BaseQuery):
    """Base query on a module of the V2 API."""

    def __init__(self, client: Any, module: str | None = None):
        super().__init__(client)
        self.module = module
        self.max_modification_date: datetime | None = None

    def set_module(self, module: str) -> "AbstractQuery":
        self.module = module
        return self

    def get_module(self) -> str | None:
        return self.module

    def get_url(self) -> str:
        return self._with_query_string(f"{self.module}")

    def _with_query_string(self, path: str) -> str:
        query_string = self.get_query_string()
        return f"{path}?{query_string}" if query_string else path

    def validate(self) -> None:
        if not self.module:
            raise InvalidQueryError(self, "the module must be defined.")

    def get_max_modification_date(self) -> datetime | None:
        return self.max_modification_date


class AbstractListQuery(AbstractQuery):
    """
    Base query listing records, page by page.

    Records are sorted by ascending modification time when a maximum
    modification date is set, so that pagination can stop at that date.
    """

    def __init__(self, client: Any, module: str | None = None):
        super().__init__(client, module)
        self.pagination = PaginationSettings()

    def fields(self, *fields: str) -> "AbstractListQuery":
        """Select the fields to retrieve."""
        return self.param("fields", list(fields))

    def per_page(self, size: int) -> "AbstractListQuery":
        if isinstance(size, bool) or not isinstance(size, int) or not 0 < size <= 200:
            raise ValueError("Page size must be an integer between 1 and 200.")
        return self.param("per_page", size)

    def page(self, number: int) -> "AbstractListQuery":
        return self.param("page", number)

    def sort_by(self, field: str, order: str = "asc") -> "AbstractListQuery":
        if order not in ("asc", "desc"):
            raise ValueError("Sort order must be 'asc' or 'desc'.")
        return self.params({"sort_by": field, "sort_order": order})

    def modified_after(self, value: DateInput | None) -> "AbstractListQuery":
        """Set the minimum date for records' last modification (If-Modified-Since header)."""
        if value is None:
            return self.remove_header("If-Modified-Since")

        return self.set_header("If-Modified-Since", to_datetime(value).isoformat())

    def modified_before(self, value: DateInput | None) -> "AbstractListQuery":
        """
        Set the maximum date for records' last modification.

        Records modified at this date or later are excluded.
        """
        self.max_modification_date = None if value is None else to_datetime(value)

        if self.max_modification_date is not None:
            self.sort_by(MODIFIED_TIME_FIELD, "asc")

        return self

    def modified_between(self, start: DateInput | None, end: DateInput | None) -> "AbstractListQuery":
        return self.modified_after(start).modified_before(end)

    def has_max_modification_date(self) -> bool:
        return self.max_modification_date is not None

    def validate(self) -> None:
        super().validate()

        fields = self.get_url_parameter("fields")
        if self.has_max_modification_date() and fields and MODIFIED_TIME_FIELD not in fields:
            raise InvalidQueryError(self, f'the "{MODIFIED_TIME_FIELD}" field is required with a maximum modification date.')

    def get_paginator(self) -> QueryPaginator:
        return QueryPaginator(self)

    def get_response_transformer(self) -> RecordListTransformer:
        return RecordListTransformer()

    def get_response_page_merger(self) -> RecordListTransformer:
        return RecordListTransformer()


class ListQuery(AbstractListQuery):
    """
    A query to list the records of a module.

    Example:
        >>> client.records("Contacts").list().modified_before("2024-01-01").concurrency(4).get()
    """


class SearchQuery(AbstractListQuery):
    """A query to search the records of a module."""

    SEARCH_PARAMETERS = ("criteria", "email", "phone", "word")

    def get_url(self) -> str:
        return self._with_query_string(f"{self.module}/search")

    def criteria(self, criteria: str) -> "SearchQuery":
        return self.param("criteria", criteria)

    def email(self, email: str) -> "SearchQuery":
        return self.param("email", email)

    def phone(self, phone: str) -> "SearchQuery":
        return self.param("phone", phone)

    def word(self, word: str) -> "SearchQuery":
        return self.param("word", word)

    def validate(self) -> None:
        super().validate()

        if not any(self.get_url_parameter(key) for key in self.SEARCH_PARAMETERS):
            raise InvalidQueryError(self, "a search criteria, email, phone or word must be present.")


class ListRelatedQuery(AbstractListQuery):
    """A query to list the records related to a record."""

    def __init__(self, client: Any, module: str | None = None):
        super().__init__(client, module)
        self.record_id: str | None = None
        self.related_module: str | None = None

    def set_record_id(self, record_id: str) -> "ListRelatedQuery":
        self.record_id = record_id
        return self

    def set_related_module(self, related_module: str) -> "ListRelatedQuery":
        self.related_module = related_module
        return self

    def get_url(self) -> str:
        return self._with_query_string(f"{self.module}/{self.record_id}/{self.related_module}")

    def validate(self) -> None:
        super().validate()

        if not self.record_id:
            raise InvalidQueryError(self, "the record ID must be present.")

        if not self.related_module:
            raise InvalidQueryError(self, "the related module must be defined.")


class GetByIdQuery(AbstractQuery):
    """A query to get a specific record by ID."""

    def __init__(self, client: Any, module: str | None = None):
        super().__init__(client, module)
        self.record_id: str | None = None

    def set_record_id(self, record_id: str) -> "GetByIdQuery":
        self.record_id = record_id
        return self

    def get_url(self) -> str:
        return self._with_query_string(f"{self.module}/{self.record_id}")

    def validate(self) -> None:
        super().validate()

        if not self.record_id:
            raise InvalidQueryError(self, "the record ID must be present.")

    def get_response_transformer(self) -> SingleRecordTransformer:
        return SingleRecordTransformer()


class InsertQuery(AbstractQuery):
    """A query to insert records, sent as a JSON body."""

    http_method = "POST"

    def __init__(self, client: Any, module: str | None = None):
        super().__init__(client, module)
        self.records: list[dict[str, Any]] = []
        self.triggers: list[str] | None = None
        self.set_header("Content-Type", "application/json")

    def add_record(self, record: dict[str, Any] | Entity) -> "InsertQuery":
        if isinstance(record, Entity):
            record = record.to_dict()
        self.records.append(record)
        return self

    def add_records(self, records: list[dict[str, Any] | Entity]) -> "InsertQuery":
        for record in records:
            self.add_record(record)
        return self

    def trigger(self, *triggers: str) -> "InsertQuery":
        """Set the automation triggers ("workflow", "approval", "blueprint")."""
        self.triggers = list(triggers)
        return self

    def get_body(self) -> str:
        body: dict[str, Any] = {"data": self.records}
        if self.triggers is not None:
            body["trigger"] = self.triggers
        return json.dumps(body)

    def validate(self) -> None:
        super().validate()

        if not self.records:
            raise InvalidQueryError(self, "at least one record must be inserted.")

        if len(self.records) > 100:
            raise InvalidQueryError(self, "at most 100 records can be inserted at once.")

    def get_response_transformer(self) -> ActionResultTransformer:
        return ActionResultTransformer()

    def copy(self) -> "InsertQuery":
        clone = super().copy()
        clone.records = list(self.records)
        return clone
