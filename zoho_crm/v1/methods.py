"""
Handlers of the V1 API methods.

A method handler knows the HTTP method of an API method and how to turn
the "result" part of its JSON response into clean Python data. Handlers of
paginated methods also merge the contents of several pages.
"""

from typing import Any

from ..core.entities import Collection

HTTP_GET = "GET"
HTTP_POST = "POST"


def as_list(value: Any) -> list:
    """Wrap a single element in a list. The API does not use arrays for single elements."""
    if value is None:
        return []
    if isinstance(value, list):
        return value
    return [value]


def fields_to_dict(fields: Any) -> dict[str, Any]:
    """Convert a list of {"val": name, "content": value} elements to a dictionary."""
    return {field["val"]: field.get("content") for field in as_list(fields)}


class AbstractMethod:
    """Base handler of an API method."""

    name = ""
    http_method = HTTP_GET
    #: Whether the content is a collection of records with timestamps
    returns_records = False

    def is_response_empty(self, result: dict[str, Any], query: Any) -> bool:
        """Determine if a response result holds no data."""
        return False

    def get_empty_response(self, query: Any) -> Any:
        """Get the content to return for empty responses."""
        return None

    def clean_response(self, result: dict[str, Any], query: Any) -> Any:
        """Keep only the worthy data of the response."""
        return result

    def convert_response(self, cleaned: Any, query: Any) -> Any:
        """Convert the clean response into an adapted data type."""
        return cleaned

    def transform_response(self, result: dict[str, Any], query: Any) -> Any:
        if self.is_response_empty(result, query):
            return self.get_empty_response(query)

        return self.convert_response(self.clean_response(result, query), query)

    def merge_paginated_contents(self, *contents: Any) -> Any:
        """Concatenate the contents of several pages, in order."""
        merged = Collection()
        for content in contents:
            merged.extend(content)
        return merged

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"


class AbstractRecordsMethod(AbstractMethod):
    """Base handler for methods returning rows of records."""

    returns_records = True

    def is_response_empty(self, result: dict[str, Any], query: Any) -> bool:
        module_result = result.get(query.get_module())
        return not isinstance(module_result, dict) or not module_result.get("row")

    def get_empty_response(self, query: Any) -> Any:
        return Collection()

    def clean_response(self, result: dict[str, Any], query: Any) -> list[dict[str, Any]]:
        rows = as_list(result[query.get_module()]["row"])
        return [fields_to_dict(row.get("FL")) for row in rows]

    def convert_response(self, cleaned: list[dict[str, Any]], query: Any) -> Collection:
        entity_class = query.get_client_module().entity_class
        return Collection(entity_class(attributes) for attributes in cleaned)


class GetRecords(AbstractRecordsMethod):
    name = "getRecords"


class GetMyRecords(AbstractRecordsMethod):
    name = "getMyRecords"


class SearchRecords(AbstractRecordsMethod):
    name = "searchRecords"


class GetRelatedRecords(AbstractRecordsMethod):
    name = "getRelatedRecords"


class GetSearchRecordsByPDC(AbstractRecordsMethod):
    name = "getSearchRecordsByPDC"


class GetRecordById(AbstractRecordsMethod):
    """Single record with "id", a collection with "idlist"."""

    name = "getRecordById"

    def get_empty_response(self, query: Any) -> Any:
        if query.has_url_parameter("idlist"):
            return Collection()
        return None

    def convert_response(self, cleaned: list[dict[str, Any]], query: Any) -> Any:
        records = super().convert_response(cleaned, query)

        if query.has_url_parameter("idlist"):
            return records
        return records.first()


class GetDeletedRecordIds(AbstractMethod):
    name = "getDeletedRecordIds"

    def is_response_empty(self, result: dict[str, Any], query: Any) -> bool:
        return not result.get("DeletedIDs")

    def get_empty_response(self, query: Any) -> Any:
        return []

    def clean_response(self, result: dict[str, Any], query: Any) -> list[str]:
        ids = result["DeletedIDs"]
        if isinstance(ids, str):
            ids = ids.split(",")
        return [str(record_id).strip() for record_id in as_list(ids) if str(record_id).strip()]

    def merge_paginated_contents(self, *contents: Any) -> list[str]:
        merged = []
        for content in contents:
            merged.extend(content)
        return merged


def _record_id(fields: Any) -> str | None:
    for field in as_list(fields):
        if field.get("val") == "Id":
            return field.get("content")
    return None


class AbstractWriteMethod(AbstractMethod):
    """
    Base handler for insertRecords and updateRecords.

    The result is a list of record IDs. With "version" 4, a failed or
    duplicate row gives False instead of an ID. With "version" 2, a
    duplicate gives False for the whole request.
    """

    http_method = HTTP_POST

    #: Success code of a row which was not written because it already exists
    DUPLICATE_CODE = "2002"

    def clean_response(self, result: dict[str, Any], query: Any) -> Any:
        version = int(query.get_url_parameter("version", 1))

        if version == 4:
            return self._clean_multiple_records(result)

        if result.get("message") == "Record(s) already exists":
            # The API does not support several records after a failure in this version
            return False

        return [_record_id(record.get("FL")) for record in as_list(result.get("recorddetail"))]

    def _clean_multiple_records(self, result: dict[str, Any]) -> list[Any]:
        record_ids = []

        for row in as_list(result.get("row")):
            success = row.get("success") or {}
            if "error" in row or success.get("code") == self.DUPLICATE_CODE:
                record_ids.append(False)
                continue

            record_ids.append(_record_id((success.get("details") or {}).get("FL")))

        return record_ids


class InsertRecords(AbstractWriteMethod):
    name = "insertRecords"


class UpdateRecords(AbstractWriteMethod):
    name = "updateRecords"


class DeleteRecords(AbstractMethod):
    name = "deleteRecords"
    http_method = HTTP_POST

    def convert_response(self, cleaned: dict[str, Any], query: Any) -> bool:
        return "code" in cleaned and str(cleaned["code"]) == "5000"


METHOD_HANDLERS: dict[str, AbstractMethod] = {
    handler.name: handler
    for handler in (
        GetRecords(),
        GetMyRecords(),
        GetRecordById(),
        SearchRecords(),
        GetRelatedRecords(),
        GetSearchRecordsByPDC(),
        GetDeletedRecordIds(),
        InsertRecords(),
        UpdateRecords(),
        DeleteRecords(),
    )
}
