"""Tests for the V2 API client."""

import pytest
import httpx
from datetime import datetime, timedelta, timezone
from unittest.mock import Mock

from zoho_crm.core.models import APIError, BatchRequestError, InvalidQueryError, InvalidTokenError
from zoho_crm.v2 import Client, CustomStore, NoStore, Record

AUTH_URL = "https://accounts.zoho.com/oauth/v2/token"


def token_response(token="new_token", expires_in_sec=3600):
    return httpx.Response(200, json={
        "access_token": token,
        "expires_in_sec": expires_in_sec,
        "api_domain": "https://www.zohoapis.com",
        "token_type": "Bearer",
    })


def data_response(records, more_records=False):
    return httpx.Response(200, json={
        "data": records,
        "info": {"per_page": 200, "count": len(records), "more_records": more_records},
    })


def valid_store(token="stored_token"):
    store = NoStore()
    store.set_access_token(token)
    store.set_expiry_date(datetime.now(timezone.utc) + timedelta(hours=1))
    return store


@pytest.fixture
def mock_http_client():
    """Create a mock HTTP client."""
    return Mock(spec=httpx.Client)


@pytest.fixture
def client(mock_http_client):
    """Create a V2 client with a valid access token."""
    return Client("client_id", "client_secret", "refresh_token", token_store=valid_store(), http_client=mock_http_client)


def api_requests(mock_http_client):
    """Get the requests sent to the API, OAuth requests excluded."""
    return [
        call.args[0]
        for call in mock_http_client.send.call_args_list
        if not str(call.args[0].url).startswith(AUTH_URL)
    ]


# ===== Construction Tests =====

def test_client_initialization(mock_http_client):
    """Test that the client initializes correctly."""
    client = Client("client_id", "client_secret", "refresh_token", http_client=mock_http_client)

    assert client.endpoint == "https://www.zohoapis.com/crm/v2/"
    assert client.auth_endpoint == "https://accounts.zoho.com/oauth/v2/"
    assert isinstance(client.token_store, NoStore)
    assert client.access_token_is_valid() is False


# ===== Access Token Tests =====

def test_refresh_access_token(mock_http_client):
    """Test getting a new access token."""
    store = NoStore()
    client = Client("client_id", "client_secret", "refresh_token", token_store=store, http_client=mock_http_client)
    mock_http_client.send.return_value = token_response("abc", 3600)

    assert client.refresh_access_token() == "abc"

    request = mock_http_client.send.call_args.args[0]
    assert request.method == "POST"
    assert str(request.url).startswith(AUTH_URL)
    assert request.url.params["grant_type"] == "refresh_token"
    assert request.url.params["refresh_token"] == "refresh_token"
    assert request.url.params["client_id"] == "client_id"
    assert request.url.params["client_secret"] == "client_secret"
    assert store.get_access_token() == "abc"
    assert store.get_expiry_date() > datetime.now(timezone.utc) + timedelta(minutes=59)
    assert client.access_token_is_valid() is True


def test_refresh_access_token_saves_store(mock_http_client):
    """Test that the new token is persisted by the store."""
    saved = []
    store = CustomStore(load_callback=lambda store: None, save_callback=lambda store: saved.append(store.to_dict()) or True)
    client = Client("client_id", "client_secret", "refresh_token", token_store=store, http_client=mock_http_client)
    mock_http_client.send.return_value = token_response("abc")

    client.refresh_access_token()

    assert saved[0]["access_token"] == "abc"


def test_refresh_access_token_error(mock_http_client):
    """Test that an OAuth error raises APIError."""
    client = Client("client_id", "client_secret", "bad_token", http_client=mock_http_client)
    mock_http_client.send.return_value = httpx.Response(200, json={"error": "invalid_code"})

    with pytest.raises(APIError) as exc_info:
        client.refresh_access_token()

    assert exc_info.value.code == "invalid_code"
    assert client.access_token_is_valid() is False


def test_token_refreshed_before_query(mock_http_client):
    """Test that a missing token is obtained before the first query."""
    client = Client("client_id", "client_secret", "refresh_token", http_client=mock_http_client)
    mock_http_client.send.side_effect = [token_response("fresh"), data_response([{"id": "1"}])]

    client.records("Contacts").find("1")

    auth_request, api_request = [call.args[0] for call in mock_http_client.send.call_args_list]
    assert str(auth_request.url).startswith(AUTH_URL)
    assert api_request.headers["Authorization"] == "Zoho-oauthtoken fresh"


def test_valid_token_is_reused(client, mock_http_client):
    """Test that no refresh happens while the token is valid."""
    mock_http_client.send.return_value = data_response([{"id": "1"}])

    client.records("Contacts").find("1")
    client.records("Contacts").find("1")

    assert mock_http_client.send.call_count == 2
    assert api_requests(mock_http_client)[0].headers["Authorization"] == "Zoho-oauthtoken stored_token"


def test_rejected_token(client, mock_http_client):
    """Test that a 401 response raises InvalidTokenError and discards the token."""
    mock_http_client.send.return_value = httpx.Response(401, json={"code": "INVALID_TOKEN", "status": "error"})

    with pytest.raises(InvalidTokenError) as exc_info:
        client.records("Contacts").find("1")

    assert exc_info.value.status_code == 401
    assert exc_info.value.code == "INVALID_TOKEN"
    assert isinstance(exc_info.value.__cause__, APIError)
    assert client.token_store.get_access_token() is None


def test_other_errors_are_not_converted(client, mock_http_client):
    """Test that API errors other than 401 stay APIError."""
    mock_http_client.send.return_value = httpx.Response(400, json={"code": "INVALID_MODULE"})

    with pytest.raises(APIError) as exc_info:
        client.records("Unknown").find("1")

    assert not isinstance(exc_info.value, InvalidTokenError)
    assert exc_info.value.status_code == 400


# ===== Records Tests =====

def test_find(client, mock_http_client):
    """Test getting a record by ID."""
    mock_http_client.send.return_value = data_response([{"id": "42", "Last_Name": "Doe"}])

    record = client.records("Contacts").find("42")

    assert isinstance(record, Record)
    assert record.get("Last_Name") == "Doe"
    assert str(mock_http_client.send.call_args.args[0].url) == "https://www.zohoapis.com/crm/v2/Contacts/42"


def test_find_missing_record(client, mock_http_client):
    """Test that an empty response gives None."""
    mock_http_client.send.return_value = httpx.Response(204)

    assert client.records("Contacts").find("42") is None


def serve_pages(total, per_page=200):
    """Create a send() side effect serving `total` records by page number."""
    def send(request):
        page = int(request.url.params["page"])
        start = (page - 1) * per_page
        count = max(0, min(per_page, total - start))
        if count == 0:
            return httpx.Response(204)
        records = [{"id": str(index)} for index in range(start + 1, start + count + 1)]
        return data_response(records, more_records=start + count < total)
    return send


def test_list_fetches_every_page(client, mock_http_client):
    """Test listing all the records of a module."""
    mock_http_client.send.side_effect = serve_pages(450)

    records = client.records("Contacts").list().get()

    assert len(records) == 450
    assert records.pluck("id") == [str(index) for index in range(1, 451)]
    assert [request.url.params["page"] for request in api_requests(mock_http_client)] == ["1", "2", "3"]


def test_list_concurrently(client, mock_http_client):
    """Test listing records by concurrent batches of pages."""
    mock_http_client.send.side_effect = serve_pages(400)

    response = client.records("Contacts").list().concurrency(2).execute()

    assert len(response.content) == 400
    assert response.has_multiple_pages()
    assert client.get_request_count() == 4
    assert sorted(request.url.params["page"] for request in api_requests(mock_http_client)) == ["1", "2", "3", "4"]


def test_list_with_maximum_modification_date(client, mock_http_client):
    """Test that records modified at the maximum date or later are excluded."""
    records = [
        {"id": str(index), "Modified_Time": (datetime(2024, 1, 1, tzinfo=timezone.utc) + timedelta(hours=index)).isoformat()}
        for index in range(1, 201)
    ]
    mock_http_client.send.return_value = data_response(records, more_records=True)

    result = client.records("Deals").list().modified_before("2024-01-02T00:00:00+00:00").get()

    assert result.pluck("id") == [str(index) for index in range(1, 24)]
    request = api_requests(mock_http_client)[0]
    assert request.url.params["sort_by"] == "Modified_Time"
    assert request.url.params["sort_order"] == "asc"
    assert mock_http_client.send.call_count == 1


def test_list_batch_failure(client, mock_http_client):
    """Test that a failing page of a batch is reported with its index."""
    def send(request):
        if request.url.params["page"] == "3":
            return httpx.Response(400, json={"code": "INVALID_DATA"})
        return data_response([{"id": request.url.params["page"]}] * 200)

    mock_http_client.send.side_effect = send

    with pytest.raises(BatchRequestError) as exc_info:
        client.records("Contacts").list().concurrency(4).get()

    assert exc_info.value.key_in_batch == 2
    assert exc_info.value.wrapped_exception.status_code == 400


def test_search_by_criteria(client, mock_http_client):
    """Test searching records."""
    mock_http_client.send.return_value = data_response([{"id": "1"}])

    records = client.records("Leads").search_by_criteria("Company:equals:Acme").get()

    assert records.pluck("id") == ["1"]
    request = mock_http_client.send.call_args.args[0]
    assert request.url.path == "/crm/v2/Leads/search"
    assert request.url.params["criteria"] == "(Company:equals:Acme)"


def test_related_to(client, mock_http_client):
    """Test listing related records."""
    mock_http_client.send.return_value = data_response([{"id": "5"}])

    records = client.records("Accounts").related_to("42", "Contacts").get()

    assert records.pluck("id") == ["5"]
    assert mock_http_client.send.call_args.args[0].url.path == "/crm/v2/Accounts/42/Contacts"


def test_insert(client, mock_http_client):
    """Test inserting a record."""
    mock_http_client.send.return_value = httpx.Response(201, json={"data": [
        {"code": "SUCCESS", "status": "success", "details": {"id": "100"}},
    ]})

    assert client.records("Leads").insert({"Last_Name": "Doe"}) == "100"

    request = mock_http_client.send.call_args.args[0]
    assert request.method == "POST"
    assert request.headers["Content-Type"] == "application/json"
    assert request.content == b'{"data": [{"Last_Name": "Doe"}]}'


def test_insert_many(client, mock_http_client):
    """Test inserting several records through the records helper."""
    mock_http_client.send.return_value = httpx.Response(201, json={"data": [
        {"code": "SUCCESS", "status": "success", "details": {"id": "100"}},
        {"code": "MANDATORY_NOT_FOUND", "status": "error", "details": {"api_name": "Last_Name"}},
    ]})

    result = client.records("Leads").insert_many([{"Last_Name": "Doe"}, Record({"Email": "x@example.com"})])

    assert result == ["100", False]
    assert mock_http_client.send.call_args.args[0].content == (
        b'{"data": [{"Last_Name": "Doe"}, {"Email": "x@example.com"}]}'
    )


def test_selected_fields_without_modification_time(client, mock_http_client):
    """Test that a maximum date with fields lacking Modified_Time fails before any request."""
    query = client.records("Contacts").list().fields("Email").modified_before("2024-01-10")

    with pytest.raises(InvalidQueryError):
        query.get()

    mock_http_client.send.assert_not_called()
