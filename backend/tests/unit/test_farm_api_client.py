"""Unit tests for the FarmApiClient."""

import json

import httpx
import pytest

from dairy_dashboard.domain.exceptions import (
    AuthenticationFailedError,
    FarmApiError,
    RecordNotFoundError,
    RecordValidationError,
)
from dairy_dashboard.infrastructure.farm_api import FarmApiClient

BASE_URL = "http://farm.test/api"


# ── Helpers ──


def _make_mock_transport(
    response_data: object = None,
    status_code: int = 200,
    content: bytes | None = None,
    captured: list | None = None,
) -> httpx.MockTransport:
    """Create a mock transport that returns a fixed response and records requests."""

    def handler(request: httpx.Request) -> httpx.Response:
        if captured is not None:
            captured.append(request)
        if content is not None:
            return httpx.Response(status_code, content=content)
        if response_data is None:
            return httpx.Response(status_code)
        return httpx.Response(status_code, json=response_data)

    return httpx.MockTransport(handler)


def _client(transport: httpx.MockTransport) -> FarmApiClient:
    return FarmApiClient(base_url=BASE_URL, http_client=httpx.AsyncClient(transport=transport))


# ── Records ──


@pytest.mark.asyncio
async def test_list_records_sends_bearer_token_and_params():
    captured: list[httpx.Request] = []
    client = _client(_make_mock_transport([{"id": 1}], captured=captured))

    result = await client.list_records(
        "health-medicine-records", token="tok-1", params={"all_supervisors": "true"}
    )

    assert result == [{"id": 1}]
    request = captured[0]
    assert request.method == "GET"
    assert request.url.path == "/api/health-medicine-records/"
    assert request.url.params["all_supervisors"] == "true"
    assert request.headers["Authorization"] == "Bearer tok-1"


@pytest.mark.asyncio
async def test_list_records_accepts_paginated_body():
    client = _client(_make_mock_transport({"count": 1, "results": [{"id": 5}]}))

    assert await client.list_records("employees", token="t") == [{"id": 5}]


@pytest.mark.asyncio
async def test_list_records_rejects_non_list_body():
    client = _client(_make_mock_transport({"detail": "weird"}))

    with pytest.raises(FarmApiError):
        await client.list_records("employees", token="t")


@pytest.mark.asyncio
async def test_create_record_posts_json():
    captured: list[httpx.Request] = []
    client = _client(_make_mock_transport({"id": 9, "animal_id": "C-1"}, 201, captured=captured))

    result = await client.create_record("calf-records", {"animal_id": "C-1"}, token="t")

    assert result["id"] == 9
    assert captured[0].method == "POST"
    assert json.loads(captured[0].content) == {"animal_id": "C-1"}


@pytest.mark.asyncio
async def test_update_record_puts_to_record_url():
    captured: list[httpx.Request] = []
    client = _client(_make_mock_transport({"id": 3}, captured=captured))

    await client.update_record("calf-records", 3, {"animal_id": "C-1"}, token="t")

    assert captured[0].method == "PUT"
    assert captured[0].url.path == "/api/calf-records/3/"


@pytest.mark.asyncio
async def test_delete_record_accepts_no_content():
    captured: list[httpx.Request] = []
    client = _client(_make_mock_transport(status_code=204, captured=captured))

    await client.delete_record("calf-records", 3, token="t")

    assert captured[0].method == "DELETE"


@pytest.mark.asyncio
async def test_export_records_returns_raw_bytes():
    captured: list[httpx.Request] = []
    client = _client(_make_mock_transport(content=b"PK\x03\x04xlsx", captured=captured))

    content = await client.export_records(
        "feed-tracking", token="t", params={"start_date": "2024-01-01"}
    )

    assert content == b"PK\x03\x04xlsx"
    assert captured[0].url.path == "/api/feed-tracking/export/"
    assert captured[0].url.params["start_date"] == "2024-01-01"


@pytest.mark.asyncio
async def test_perform_action_uses_declared_method():
    captured: list[httpx.Request] = []
    client = _client(_make_mock_transport({"id": 4}, captured=captured))

    await client.perform_action(
        "PVpurchase-approvals", 4, "approve-reject", {"approval_status": "A"},
        token="t", method="PATCH",
    )

    assert captured[0].method == "PATCH"
    assert captured[0].url.path == "/api/PVpurchase-approvals/4/approve-reject/"


# ── Error mapping ──


@pytest.mark.asyncio
async def test_401_raises_authentication_failed():
    client = _client(_make_mock_transport({"detail": "expired"}, 401))

    with pytest.raises(AuthenticationFailedError):
        await client.list_records("employees", token="t")


@pytest.mark.asyncio
async def test_404_raises_record_not_found():
    client = _client(_make_mock_transport({"detail": "Not found."}, 404))

    with pytest.raises(RecordNotFoundError) as exc_info:
        await client.delete_record("employees", 12, token="t")

    assert exc_info.value.record_id == 12


@pytest.mark.asyncio
async def test_rejected_write_raises_validation_error_with_joined_messages():
    errors = {"animal_id": ["This field is required."], "date": ["Enter a valid date."]}
    client = _client(_make_mock_transport(errors, 400))

    with pytest.raises(RecordValidationError) as exc_info:
        await client.create_record("calf-records", {}, token="t")

    assert exc_info.value.field_errors == errors
    assert exc_info.value.message == "This field is required., Enter a valid date."


@pytest.mark.asyncio
async def test_rejected_read_is_a_farm_api_error():
    client = _client(_make_mock_transport({"detail": "bad filter"}, 400))

    with pytest.raises(FarmApiError) as exc_info:
        await client.list_records("employees", token="t")

    assert exc_info.value.status_code == 400
    assert exc_info.value.message == "bad filter"


@pytest.mark.asyncio
async def test_server_error_without_json_body():
    client = _client(_make_mock_transport(content=b"Internal Server Error", status_code=500))

    with pytest.raises(FarmApiError) as exc_info:
        await client.create_record("calf-records", {}, token="t")

    assert exc_info.value.status_code == 500
    assert exc_info.value.message == "Internal Server Error"


@pytest.mark.asyncio
async def test_transport_error_has_no_status_code():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = _client(httpx.MockTransport(handler))

    with pytest.raises(FarmApiError) as exc_info:
        await client.list_records("employees", token="t")

    assert exc_info.value.status_code is None


# ── Auth ──


@pytest.mark.asyncio
async def test_login_returns_session():
    captured: list[httpx.Request] = []
    body = {"access": "jwt-abc", "user_id": 42, "username": "ravi", "role": "supervisor"}
    client = _client(_make_mock_transport(body, captured=captured))

    session = await client.login("ravi", "secret", "supervisor")

    assert session.token == "jwt-abc"
    assert session.user_id == "42"
    assert session.role == "supervisor"
    assert "Authorization" not in captured[0].headers
    assert json.loads(captured[0].content) == {
        "username": "ravi",
        "password": "secret",
        "role": "supervisor",
    }


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "body, message",
    [
        ({"detail": "No active account found"}, "No active account found"),
        ({"non_field_errors": ["Invalid credentials"]}, "Invalid credentials"),
        ({"role": ["User is not a supervisor"]}, "User is not a supervisor"),
        ({}, "Login failed"),
    ],
)
async def test_login_failure_surfaces_farm_api_message(body, message):
    client = _client(_make_mock_transport(body, 400))

    with pytest.raises(AuthenticationFailedError) as exc_info:
        await client.login("ravi", "wrong", "supervisor")

    assert exc_info.value.message == message


@pytest.mark.asyncio
async def test_login_without_token_is_malformed():
    client = _client(_make_mock_transport({"username": "ravi"}))

    with pytest.raises(FarmApiError):
        await client.login("ravi", "secret", "supervisor")


@pytest.mark.asyncio
async def test_list_users():
    users = [{"id": 1, "username": "ravi", "role": "supervisor"}]
    client = _client(_make_mock_transport(users))

    assert await client.list_users(token="t") == users
