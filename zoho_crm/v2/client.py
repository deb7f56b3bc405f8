"""Client for the V2 API, authenticated with OAuth 2.0."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any

import httpx

from ..core.client import BaseClient
from ..core.models import APIError
from .access_token_stores import AbstractStore, NoStore
from .queries import GetByIdQuery, InsertQuery, ListQuery, ListRelatedQuery, SearchQuery
from .response_parser import ErrorHandler, ResponseParser

logger = logging.getLogger(__name__)


class RecordsHelper:
    """Creates the record queries of one module."""

    def __init__(self, client: Client, module: str):
        self.client = client
        self.module = module

    def list(self) -> ListQuery:
        """Query every record of the module, all pages included."""
        return ListQuery(self.client, self.module).auto_paginated()

    def search(self) -> SearchQuery:
        return SearchQuery(self.client, self.module).auto_paginated()

    def search_by_criteria(self, criteria: str) -> SearchQuery:
        return self.search().criteria(f"({criteria})")

    def search_by_email(self, email: str) -> SearchQuery:
        return self.search().email(email)

    def search_by_phone(self, phone: str) -> SearchQuery:
        return self.search().phone(phone)

    def search_by_word(self, word: str) -> SearchQuery:
        return self.search().word(word)

    def related_to(self, record_id: str, related_module: str) -> ListRelatedQuery:
        return (
            ListRelatedQuery(self.client, self.module)
            .set_record_id(record_id)
            .set_related_module(related_module)
            .auto_paginated()
        )

    def find(self, record_id: str) -> Any:
        """Get a record by ID, or None."""
        return GetByIdQuery(self.client, self.module).set_record_id(record_id).get()

    def insert(self, record: dict[str, Any]) -> Any:
        """Insert one record and get its ID (False on failure)."""
        return self.insert_many([record])[0]

    def insert_many(self, records: list[dict[str, Any]]) -> list[Any]:
        return InsertQuery(self.client, self.module).add_records(records).get()


class Client(BaseClient):
    """
    V2 API client.

    The access token is obtained from the refresh token and kept in a
    token store; it is refreshed before a query when it is missing or expired.

    Example:
        >>> with Client("client-id", "client-secret", "refresh-token") as client:
        ...     contacts = client.records("Contacts").list().concurrency(4).get()
    """

    DEFAULT_ENDPOINT = "https://www.zohoapis.com/crm/v2/"
    DEFAULT_AUTH_ENDPOINT = "https://accounts.zoho.com/oauth/v2/"

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        refresh_token: str,
        token_store: AbstractStore | None = None,
        endpoint: str | None = None,
        auth_endpoint: str | None = None,
        http_client: httpx.Client | None = None,
        timeout_seconds: float = 10.0,
        max_retries: int = 3,
    ):
        """
        Initialize the client.

        Args:
            client_id: OAuth client ID
            client_secret: OAuth client secret
            refresh_token: OAuth refresh token
            token_store: Where the access token is kept (memory if None)
            endpoint: API base URL
            auth_endpoint: OAuth server base URL
        """
        self.client_id = client_id
        self.client_secret = client_secret
        self.refresh_token = refresh_token
        self.token_store = token_store if token_store is not None else NoStore()
        self.auth_endpoint = (auth_endpoint or self.DEFAULT_AUTH_ENDPOINT).rstrip("/") + "/"

        super().__init__(endpoint, http_client, timeout_seconds, max_retries)

        self.register_middleware(self._authenticate_query)

    def create_response_parser(self) -> ResponseParser:
        return ResponseParser()

    def create_error_handler(self) -> ErrorHandler:
        return ErrorHandler(self)

    def _authenticate_query(self, query: Any) -> None:
        if not self.access_token_is_valid():
            self.refresh_access_token()

        query.set_header("Authorization", f"Zoho-oauthtoken {self.token_store.get_access_token()}")

    def access_token_is_valid(self) -> bool:
        return self.token_store.is_valid()

    def refresh_access_token(self) -> str:
        """
        Get a new access token from the refresh token and store it.

        Returns:
            The new access token

        Raises:
            APIError: If the OAuth server refuses the refresh
        """
        request = httpx.Request(
            "POST",
            self.auth_endpoint + "token",
            params={
                "refresh_token": self.refresh_token,
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "grant_type": "refresh_token",
            },
        )

        response = self.request_sender.send(request)
        data = response.json()

        if "error" in data or "access_token" not in data:
            raise APIError(
                f"Failed to refresh the access token: {data.get('error', 'no access token')}",
                status_code=response.status_code,
                code=data.get("error"),
            )

        expires_in = int(data.get("expires_in_sec", data.get("expires_in", 3600)))

        self.token_store.set_access_token(data["access_token"])
        self.token_store.set_expiry_date(datetime.now(timezone.utc) + timedelta(seconds=expires_in))
        self.token_store.save()

        logger.info(f"Refreshed access token (expires in {expires_in}s)")

        return data["access_token"]

    def records(self, module: str) -> RecordsHelper:
        """Get the query helper of a module (e.g., "Contacts")."""
        return RecordsHelper(self, module)
