"""Core components shared by both API versions."""

from .models import (
    ApiVersion,
    PaginationSettings,
    ExecutionContext,
    ClientSettings,
    ZohoCRMError,
    ConfigError,
    APIError,
    InvalidTokenError,
    BatchRequestError,
    PaginatedQueryInBatchError,
    InvalidQueryError,
    UnsupportedMethodError,
    NullAuthTokenError,
)
from .entities import Entity, Collection
from .response import Response
from .query import BaseQuery, to_datetime
from .pagination import QueryPaginator, PAGE_MAX_SIZE
from .transport import RequestSender
from .processor import QueryProcessor
from .client import BaseClient
from .config_store import (
    get_base_dir,
    config_path,
    save_json,
    load_json,
    save_client_settings,
    load_client_settings,
)

__all__ = [
    "ApiVersion",
    "PaginationSettings",
    "ExecutionContext",
    "ClientSettings",
    "ZohoCRMError",
    "ConfigError",
    "APIError",
    "InvalidTokenError",
    "BatchRequestError",
    "PaginatedQueryInBatchError",
    "InvalidQueryError",
    "UnsupportedMethodError",
    "NullAuthTokenError",
    "Entity",
    "Collection",
    "Response",
    "BaseQuery",
    "to_datetime",
    "QueryPaginator",
    "PAGE_MAX_SIZE",
    "RequestSender",
    "QueryProcessor",
    "BaseClient",
    "get_base_dir",
    "config_path",
    "save_json",
    "load_json",
    "save_client_settings",
    "load_client_settings",
]
