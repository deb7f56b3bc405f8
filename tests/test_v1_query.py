"""Tests for the V1 query builder and paginator."""

import pytest
import httpx
from datetime import datetime, timezone
from unittest.mock import Mock

from zoho_crm.core.entities import Collection
from zoho_crm.core.models import InvalidQueryError
from zoho_crm.core.response import Response
from zoho_crm.v1 import Client, Query
from zoho_crm.v1.entities import Contact
from zoho_crm.v1.paginator import QueryPaginator


@pytest.fixture
def client():
    """Create a V1 client on a mock HTTP client."""
    return Client("test_token", http_client=Mock(spec=httpx.Client))


@pytest.fixture
def query(client):
    """Create a query listing contacts."""
    return client.new_query("Contacts", "getRecords")


# ===== URL Tests =====

def test_url(query):
    """Test the URL of a query."""
    query.param("fromIndex", 1)

    assert query.get_url() == "json/Contacts/getRecords?fromIndex=1"
    assert query.get_http_method() == "GET"


def test_http_method_follows_api_method(client):
    """Test that write methods are sent with POST."""
    assert client.new_query("Contacts", "insertRecords").get_http_method() == "POST"


def test_ordering(query):
    """Test ordering parameters."""
    query.order_by("Last Name")
    assert query.url_parameters == {"sortColumnString": "Last Name", "sortOrderString": "asc"}

    query.order_desc()
    assert query.get_url_parameter("sortOrderString") == "desc"


def test_modified_after(query):
    """Test the minimum modification date parameter."""
    query.modified_after("2024-03-01T10:30:00")

    assert "lastModifiedTime=2024-03-01+10%3A30%3A00" in query.get_url()

    query.modified_after(None)
    assert not query.has_url_parameter("lastModifiedTime")


def test_trigger_workflow_rules(query):
    """Test the workflow trigger parameter."""
    assert query.trigger_workflow_rules().get_query_string() == "wfTrigger=true"


# ===== Column Selection Tests =====

def test_select(query):
    """Test selecting columns."""
    query.select("First Name", "Email").select(["Email", "Phone"])

    assert query.get_url_parameter("selectColumns") == "Contacts(First Name,Email,Phone)"
    assert query.get_selected_columns() == ["First Name", "Email", "Phone"]
    assert query.has_select("Email")


def test_unselect(query):
    """Test removing columns from the selection."""
    query.select("First Name", "Email", "Phone").unselect("Email")

    assert query.get_selected_columns() == ["First Name", "Phone"]


def test_select_all(query):
    """Test removing the column selection."""
    query.select("Email").select_all()

    assert query.get_selected_columns() == []
    assert not query.has_url_parameter("selectColumns")


def test_select_default_columns(query):
    """Test selecting the columns present on every record."""
    query.select_default_columns()

    assert query.get_selected_columns() == [
        "Contact Owner",
        "Created By",
        "Modified By",
        "Created Time",
        "Modified Time",
    ]


# ===== Limit and Cutoff Tests =====

def test_limit(query):
    """Test the record limit."""
    assert query.has_limit() is False

    query.limit(500)
    assert query.get_limit() == 500
    assert query.has_limit() is True


@pytest.mark.parametrize("limit", [0, -5, True, "10"])
def test_invalid_limit(query, limit):
    """Test that invalid limits are rejected."""
    with pytest.raises(ValueError):
        query.limit(limit)


def test_modified_before(query):
    """Test the maximum modification date."""
    query.modified_between("2024-01-01", "2024-02-01T12:00:00Z")

    assert query.get_max_modification_date() == datetime(2024, 2, 1, 12, tzinfo=timezone.utc)
    assert query.has_url_parameter("lastModifiedTime")
    assert query.has_max_modification_date() is True

    query.modified_before(None)
    assert query.has_max_modification_date() is False


# ===== Validation Tests =====

def test_validate(query):
    """Test that a complete query is valid."""
    query.validate()
    assert query.is_valid() is True


def test_validate_malformed_query(client):
    """Test that the module and method are required."""
    query = Query(client).module("Contacts")

    assert query.is_malformed() is True
    with pytest.raises(InvalidQueryError):
        query.validate()


def test_validate_format(query):
    """Test that only JSON responses are supported."""
    query.format("xml")

    with pytest.raises(InvalidQueryError) as exc_info:
        query.validate()

    assert "xml" in str(exc_info.value)


def test_validate_modified_time_selection(query):
    """Test that the modification time must be selected with a maximum date."""
    query.select("Email").modified_before("2024-01-01")
    assert query.is_valid() is False

    query.select("Modified Time")
    assert query.is_valid() is True


def test_validate_max_date_on_deleted_ids(client):
    """Test that a maximum date is only accepted by methods returning records."""
    query = client.new_query("Contacts", "getDeletedRecordIds", paginated=True).modified_before("2024-01-01")

    with pytest.raises(InvalidQueryError) as exc_info:
        query.validate()

    assert "getDeletedRecordIds" in str(exc_info.value)
    assert query.modified_before(None).is_valid() is True


# ===== Copy and Pagination Tests =====

def test_copy(query):
    """Test that copies keep the request attributes."""
    query.limit(10).modified_before("2024-01-01").auto_paginated()

    clone = query.copy().module("Leads").param("a", 1)

    assert clone.get_module() == "Leads"
    assert clone.get_limit() == 10
    assert clone.get_max_modification_date() == query.get_max_modification_date()
    assert query.get_module() == "Contacts"
    assert not query.has_url_parameter("a")


def test_page_queries(query):
    """Test the index window of each page."""
    paginator = query.auto_paginated().get_paginator()

    assert isinstance(paginator, QueryPaginator)
    windows = [
        (page.get_url_parameter("fromIndex"), page.get_url_parameter("toIndex"))
        for page in (paginator.get_page_query(cursor) for cursor in range(3))
    ]
    assert windows == [(1, 200), (201, 400), (401, 600)]
    assert paginator.get_page_query(0).must_be_paginated_automatically() is False


def test_paginator_limit_truncates_page(query):
    """Test that the page reaching the record limit is truncated and is the last one."""
    paginator = query.limit(3).get_paginator()
    records = Collection(Contact({"CONTACTID": str(index)}) for index in range(5))

    page = paginator.handle_page(Response(query, records, ""))

    assert page.content.pluck("CONTACTID") == ["0", "1", "2"]
    assert isinstance(page.content, Collection)
    assert paginator.has_more_data is False


def test_paginator_cutoff(query):
    """Test that a record modified exactly at the maximum date is excluded."""
    paginator = query.modified_before("2024-01-01 10:00:00").get_paginator()
    records = Collection([
        Contact({"CONTACTID": "1", "Modified Time": "2024-01-01 09:00:00"}),
        Contact({"CONTACTID": "2", "Modified Time": "2024-01-01 10:00:00"}),
    ])

    page = paginator.handle_page(Response(query, records, ""))

    assert page.content.pluck("CONTACTID") == ["1"]
    assert paginator.has_more_data is False
