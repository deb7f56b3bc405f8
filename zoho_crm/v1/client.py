"""Client for the V1 API, authenticated by an auth token."""

import logging
import re
from typing import Any

import httpx

from ..core.client import BaseClient
from ..core.models import NullAuthTokenError, UnsupportedMethodError
from .methods import METHOD_HANDLERS, AbstractMethod
from .modules import MODULES, AbstractModule
from .query import Query
from .response_parser import ResponseParser

logger = logging.getLogger(__name__)


def _snake_case(name: str) -> str:
    return re.sub(r"(?<!^)(?=[A-Z])", "_", name).lower()


class Client(BaseClient):
    """
    V1 API client.

    Every query is sent with the auth token and the "crmapi" scope.

    Example:
        >>> with Client("my-auth-token") as client:
        ...     contacts = client.contacts.all().get()
    """

    DEFAULT_ENDPOINT = "https://crm.zoho.com/crm/private/"

    def __init__(
        self,
        auth_token: str,
        endpoint: str | None = None,
        http_client: httpx.Client | None = None,
        timeout_seconds: float = 10.0,
        max_retries: int = 3,
    ):
        """
        Initialize the client.

        Args:
            auth_token: The API auth token

        Raises:
            NullAuthTokenError: If the auth token is empty
        """
        if not auth_token:
            raise NullAuthTokenError()

        self.auth_token = auth_token
        self._modules: dict[str, AbstractModule] = {}

        super().__init__(endpoint, http_client, timeout_seconds, max_retries)

        self.register_middleware(self._authenticate_query)

    def create_response_parser(self) -> ResponseParser:
        return ResponseParser()

    def _authenticate_query(self, query: Query) -> None:
        query.params({"authtoken": self.auth_token, "scope": "crmapi"})

    def module(self, name: str) -> AbstractModule:
        """
        Get a module helper by name (e.g., "Contacts").

        Raises:
            ValueError: If the module is not supported
        """
        if name not in self._modules:
            if name not in MODULES:
                raise ValueError(f"Module '{name}' is not supported")
            self._modules[name] = MODULES[name](self)

        return self._modules[name]

    def __getattr__(self, attribute: str) -> AbstractModule:
        # client.contacts, client.pot_stage_history, ...
        for name in MODULES:
            if _snake_case(name) == attribute:
                return self.module(name)

        raise AttributeError(f"'{type(self).__name__}' object has no attribute '{attribute}'")

    def get_method_handler(self, method: str) -> AbstractMethod:
        """
        Get the handler of an API method.

        Raises:
            UnsupportedMethodError: If the method is unknown
        """
        if method not in METHOD_HANDLERS:
            raise UnsupportedMethodError(f"Method '{method}' is not supported")

        return METHOD_HANDLERS[method]

    def new_query(
        self,
        module: str,
        method: str,
        params: dict[str, Any] | None = None,
        paginated: bool = False,
    ) -> Query:
        """Create a query bound to this client."""
        return Query(self).module(module).method(method).params(params or {}).auto_paginated(paginated)
