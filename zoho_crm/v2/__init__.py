"""V2 API client, authenticated with OAuth 2.0."""

from .client import Client, RecordsHelper
from .access_token_stores import AbstractStore, NoStore, FileStore, CustomStore
from .queries import ListQuery, SearchQuery, ListRelatedQuery, GetByIdQuery, InsertQuery
from .records import Record

__all__ = [
    "Client",
    "RecordsHelper",
    "AbstractStore",
    "NoStore",
    "FileStore",
    "CustomStore",
    "ListQuery",
    "SearchQuery",
    "ListRelatedQuery",
    "GetByIdQuery",
    "InsertQuery",
    "Record",
]
