"""Records of the V2 API and the transformers of record responses."""

from typing import Any

from ..core.entities import Collection, Entity


class Record(Entity):
    """A module record."""

    @property
    def id(self) -> str | None:
        return self.get("id")


class RecordListTransformer:
    """
    Transforms a response listing records into a collection of records.

    Also merges the collections of several pages.
    """

    def transform_response(self, content: Any, query: Any) -> Collection:
        if not content or not content.get("data"):
            return Collection()

        return Collection(Record(attributes) for attributes in content["data"])

    def merge_paginated_contents(self, *contents: Collection) -> Collection:
        merged = Collection()
        for content in contents:
            merged.extend(content)
        return merged


class SingleRecordTransformer:
    """Transforms a response listing a single record into that record."""

    def transform_response(self, content: Any, query: Any) -> Record | None:
        if not content or not content.get("data"):
            return None

        return Record(content["data"][0])


class ActionResultTransformer:
    """
    Transforms the response of a write action into per-record results.

    Each result is the record ID on success, or False.
    """

    def transform_response(self, content: Any, query: Any) -> list[Any]:
        results = []
        for item in (content or {}).get("data", []):
            if item.get("status") == "success":
                results.append((item.get("details") or {}).get("id"))
            else:
                results.append(False)
        return results
