"""Entities of the V1 API."""

from ..core.entities import Entity


class Record(Entity):
    """A generic module record."""

    #: Name of the attribute holding the record ID
    primary_key = "Id"

    @property
    def id(self) -> str | None:
        return self.get(self.primary_key)


class Lead(Record):
    primary_key = "LEADID"


class Contact(Record):
    primary_key = "CONTACTID"


class Account(Record):
    primary_key = "ACCOUNTID"


class Potential(Record):
    primary_key = "POTENTIALID"


class Product(Record):
    primary_key = "PRODUCTID"


class Vendor(Record):
    primary_key = "VENDORID"


class PriceBook(Record):
    primary_key = "BOOKID"


class PotentialStageHistoryEntry(Record):
    primary_key = "POTENTIALID"
