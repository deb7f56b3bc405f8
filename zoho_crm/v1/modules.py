"""Modules of the V1 API and the operations they support."""

from typing import Any

from ..core.models import UnsupportedMethodError
from . import entities
from .xml_builder import build_records

ALL_RECORDS_METHODS = frozenset({
    "getRecords",
    "getMyRecords",
    "getRecordById",
    "searchRecords",
    "getRelatedRecords",
    "getSearchRecordsByPDC",
    "getDeletedRecordIds",
    "insertRecords",
    "updateRecords",
    "deleteRecords",
})


class AbstractModule:
    """
    Base class of a V1 module.

    Subclasses declare the module name, the entity class of its records,
    and the API methods it supports.
    """

    name = ""
    entity_class: type[entities.Record] = entities.Record
    supported_methods: frozenset[str] = frozenset()

    def __init__(self, client: Any):
        self.client = client

    @property
    def entity_name(self) -> str:
        """Singular name of the records (e.g., "Contact")."""
        return self.entity_class.__name__

    def supports(self, method: str) -> bool:
        return method in self.supported_methods

    def new_query(self, method: str, params: dict[str, Any] | None = None, paginated: bool = False) -> Any:
        """
        Create a query on this module.

        Args:
            method: API method name
            params: URL parameters
            paginated: Whether every page is fetched on execution

        Raises:
            UnsupportedMethodError: If the module does not support the method
        """
        if not self.supports(method):
            raise UnsupportedMethodError(
                f"Module '{self.name}' does not support the method '{method}'"
            )

        return self.client.new_query(self.name, method, params or {}, paginated)


class RecordsModule(AbstractModule):
    """A module holding records."""

    supported_methods = ALL_RECORDS_METHODS

    def all(self) -> Any:
        return self.new_query("getRecords", paginated=True)

    def find(self, record_id: str) -> Any:
        """Get a record by ID, or None."""
        return self.new_query("getRecordById", {"id": record_id}).get()

    def find_many(self, record_ids: list[str]) -> Any:
        return self.new_query("getRecordById", {"idlist": ";".join(record_ids)}).get()

    def mine(self) -> Any:
        return self.new_query("getMyRecords", paginated=True)

    def search(self, criteria: str) -> Any:
        return self.new_query("searchRecords", {"criteria": f"({criteria})"}, paginated=True)

    def search_by(self, key: str, value: str) -> Any:
        return self.search(f"{key}:{value}")

    def related_to(self, module: str, record_id: str) -> Any:
        """Query the records of this module related to a record of another module."""
        return self.new_query(
            "getRelatedRecords",
            {"parentModule": module, "id": record_id},
            paginated=True,
        )

    def relations_of(self, record_id: str, module: str) -> Any:
        """Query the records of another module related to a record of this one."""
        return self.related_to(self.name, record_id).module(module)

    def search_by_predefined_column(self, column: str, value: str) -> Any:
        return self.new_query(
            "getSearchRecordsByPDC",
            {"searchColumn": column, "searchValue": value},
            paginated=True,
        )

    def exists(self, record_id: str) -> bool:
        return self.find(record_id) is not None

    def insert(self, data: dict[str, Any]) -> Any:
        """Insert one record and get its ID (False on failure)."""
        return self.insert_many([data])[0]

    def insert_many(self, data: list[dict[str, Any]]) -> Any:
        return self.new_query("insertRecords", {
            # Required for full multiple records support
            "version": 4,
            "duplicateCheck": 1,
            "xmlData": build_records(self.name, data),
        }).get()

    def update(self, record_id: str, data: dict[str, Any]) -> Any:
        result = self.new_query("updateRecords", {
            # Required for single record support
            "version": 2,
            "id": record_id,
            "xmlData": build_records(self.name, [data]),
        }).get()

        if isinstance(result, list):
            return result[0] if result else None
        return result

    def update_many(self, data: list[dict[str, Any]]) -> Any:
        return self.new_query("updateRecords", {
            "version": 4,
            "xmlData": build_records(self.name, data),
        }).get()

    def delete(self, record_id: str) -> bool:
        return self.new_query("deleteRecords", {"id": record_id}).get()

    def delete_many(self, record_ids: list[str]) -> bool:
        return self.new_query("deleteRecords", {"idlist": ";".join(record_ids)}).get()

    def deleted_ids(self) -> Any:
        return self.new_query("getDeletedRecordIds", paginated=True)


class Leads(RecordsModule):
    name = "Leads"
    entity_class = entities.Lead


class Contacts(RecordsModule):
    name = "Contacts"
    entity_class = entities.Contact


class Accounts(RecordsModule):
    name = "Accounts"
    entity_class = entities.Account


class Potentials(RecordsModule):
    name = "Potentials"
    entity_class = entities.Potential


class Products(RecordsModule):
    name = "Products"
    entity_class = entities.Product


class Vendors(RecordsModule):
    name = "Vendors"
    entity_class = entities.Vendor
    supported_methods = ALL_RECORDS_METHODS - {"getMyRecords", "getSearchRecordsByPDC"}


class PriceBooks(RecordsModule):
    name = "PriceBooks"
    entity_class = entities.PriceBook
    supported_methods = ALL_RECORDS_METHODS - {"getMyRecords", "getSearchRecordsByPDC"}


class PotStageHistory(RecordsModule):
    name = "PotStageHistory"
    entity_class = entities.PotentialStageHistoryEntry
    supported_methods = frozenset({"getRelatedRecords"})

    def get_potential_stage_history(self, potential_id: str) -> Any:
        return self.related_to("Potentials", potential_id).get()


MODULES: dict[str, type[AbstractModule]] = {
    module.name: module
    for module in (Leads, Contacts, Accounts, Potentials, Products, Vendors, PriceBooks, PotStageHistory)
}
