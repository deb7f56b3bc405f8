"""Tests for core data models, entities and responses."""

import pytest

from zoho_crm.core.entities import Collection, Entity
from zoho_crm.core.models import (
    ApiVersion,
    APIError,
    BatchRequestError,
    ClientSettings,
    ExecutionContext,
    InvalidQueryError,
    InvalidTokenError,
    NullAuthTokenError,
    PaginationSettings,
    ZohoCRMError,
)
from zoho_crm.core.response import Response


def test_api_version_enum():
    """Test ApiVersion enum values."""
    assert ApiVersion.V1.value == "v1"
    assert ApiVersion.V2.value == "v2"
    assert ApiVersion("v2") == ApiVersion.V2


# ===== Pagination Settings Tests =====

def test_pagination_settings_defaults():
    """Test that pagination is manual and sequential by default."""
    settings = PaginationSettings()

    assert settings.auto_paginated is False
    assert settings.concurrency is None
    assert settings.concurrent is False


def test_pagination_settings_concurrency():
    """Test setting the concurrency."""
    settings = PaginationSettings()

    settings.set_concurrency(1)
    assert settings.concurrent is False

    settings.set_concurrency(5)
    assert settings.concurrency == 5
    assert settings.concurrent is True

    settings.set_concurrency(None)
    assert settings.concurrent is False


@pytest.mark.parametrize("concurrency", [0, -3, True, 2.5, "4"])
def test_pagination_settings_invalid_concurrency(concurrency):
    """Test that invalid concurrency values are rejected."""
    settings = PaginationSettings()

    with pytest.raises(ValueError):
        settings.set_concurrency(concurrency)

    assert settings.concurrency is None


def test_execution_context():
    """Test that execution contexts get a random ID."""
    first = ExecutionContext()
    second = ExecutionContext(batch_index=3)

    assert len(first.execution_id) == 16
    assert first.execution_id != second.execution_id
    assert first.batch_index is None
    assert second.batch_index == 3


# ===== Client Settings Tests =====

def test_client_settings_defaults():
    """Test ClientSettings with default values."""
    settings = ClientSettings(api_version=ApiVersion.V1, auth_token="token")

    assert settings.endpoint is None
    assert settings.timeout_seconds == 10.0
    assert settings.max_retries == 3
    assert settings.concurrency is None


def test_client_settings_round_trip():
    """Test converting ClientSettings to a dictionary and back."""
    settings = ClientSettings(
        api_version=ApiVersion.V2,
        endpoint="https://www.zohoapis.eu/crm/v2/",
        client_id="id",
        client_secret="secret",
        refresh_token="refresh",
        timeout_seconds=30.0,
        max_retries=5,
        concurrency=4,
    )

    data = settings.to_dict()
    assert data["api_version"] == "v2"

    assert ClientSettings.from_dict(data) == settings


def test_client_settings_from_minimal_dict():
    """Test that missing optional keys get their defaults."""
    settings = ClientSettings.from_dict({"api_version": "v1", "auth_token": "token"})

    assert settings.api_version == ApiVersion.V1
    assert settings.auth_token == "token"
    assert settings.max_retries == 3


# ===== Exception Tests =====

def test_exception_hierarchy():
    """Test that every error derives from ZohoCRMError."""
    assert issubclass(APIError, ZohoCRMError)
    assert issubclass(InvalidTokenError, APIError)
    assert issubclass(BatchRequestError, ZohoCRMError)
    assert issubclass(NullAuthTokenError, ZohoCRMError)


def test_api_error_attributes():
    """Test APIError attributes."""
    error = APIError("Failed", status_code=401, code="INVALID_TOKEN")

    assert str(error) == "Failed"
    assert error.status_code == 401
    assert error.code == "INVALID_TOKEN"


def test_batch_request_error():
    """Test BatchRequestError keeps the failing request index and exception."""
    wrapped = APIError("Server error", status_code=500)
    error = BatchRequestError(2, wrapped)

    assert error.key_in_batch == 2
    assert error.wrapped_exception is wrapped
    assert str(error) == "Request #2 of the batch failed: Server error"


def test_invalid_query_error():
    """Test InvalidQueryError keeps the query."""
    query = object()
    error = InvalidQueryError(query, "the module must be defined.")

    assert error.query is query
    assert str(error) == "Invalid query: the module must be defined."


# ===== Entity Tests =====

def test_entity_access():
    """Test reading and writing entity attributes."""
    entity = Entity({"Name": "Jane", "Email": None})

    assert entity.get("Name") == "Jane"
    assert entity["Name"] == "Jane"
    assert entity.get("Phone", "none") == "none"
    assert entity.has("Email")
    assert "Phone" not in entity

    entity.set("Phone", "555")
    assert entity.to_dict() == {"Name": "Jane", "Email": None, "Phone": "555"}


def test_entity_copies_attributes():
    """Test that entities do not share the caller's dictionary."""
    attributes = {"Name": "Jane"}
    entity = Entity(attributes)

    entity.set("Name", "John")
    entity.to_dict()["Name"] = "Jim"

    assert attributes == {"Name": "Jane"}
    assert entity.get("Name") == "John"


def test_entity_equality():
    """Test that entities of the same type and attributes are equal."""
    class Contact(Entity):
        pass

    assert Entity({"a": 1}) == Entity({"a": 1})
    assert Entity({"a": 1}) != Entity({"a": 2})
    assert Contact({"a": 1}) != Entity({"a": 1})


def test_collection_helpers():
    """Test collection accessors."""
    collection = Collection([Entity({"id": "1", "n": 1}), Entity({"id": "2", "n": 2}), Entity({"id": "3", "n": 3})])

    assert collection.first().get("id") == "1"
    assert collection.last().get("id") == "3"
    assert collection.pluck("id") == ["1", "2", "3"]
    assert collection.to_list()[1] == {"id": "2", "n": 2}

    filtered = collection.filter(lambda entity: entity.get("n") != 2)
    assert isinstance(filtered, Collection)
    assert filtered.pluck("id") == ["1", "3"]


def test_empty_collection():
    """Test accessors of an empty collection."""
    collection = Collection()

    assert collection.first() is None
    assert collection.last() is None
    assert collection.to_list() == []


# ===== Response Tests =====

def test_response_is_empty():
    """Test empty response detection."""
    assert Response(None, None, "").is_empty()
    assert Response(None, Collection(), "").is_empty()
    assert not Response(None, Collection([Entity()]), "").is_empty()
    assert not Response(None, Entity({"id": "1"}), "").is_empty()
    assert not Response(None, True, "").is_empty()


def test_response_has_multiple_pages():
    """Test that merged responses hold the list of page payloads."""
    assert Response(None, [], ["page1", "page2"]).has_multiple_pages()
    assert not Response(None, [], "page").has_multiple_pages()
