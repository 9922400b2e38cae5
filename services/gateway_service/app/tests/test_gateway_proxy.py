import httpx
import pytest
from services.gateway_service.app import clients
from services.gateway_service.app.tests.stubs import RecordingClient, make_response


@pytest.fixture
def swap_client():
    """Replace a module-level service client for the duration of a test."""
    originals = {}

    def _swap(name: str, stub: RecordingClient) -> RecordingClient:
        originals.setdefault(name, getattr(clients, name))
        setattr(clients, name, stub)
        return stub

    yield _swap

    for name, original in originals.items():
        setattr(clients, name, original)


@pytest.mark.asyncio
async def test_gateway_proxies_status_code_and_json(client, swap_client):
    """Downstream status codes and JSON bodies reach the caller unchanged."""
    stub = swap_client(
        "cups_client", RecordingClient(make_response(201, {"transaction_id": "t-1"}, "POST"))
    )

    response = await client.post(
        "/api/v1/cups/borrow",
        json={"cup_id": "12345678", "store_id": "s-1"},
        headers={"Authorization": "Bearer token-1"},
    )

    assert response.status_code == 201
    assert response.json() == {"transaction_id": "t-1"}
    [call] = stub.calls
    assert call["method"] == "POST"
    assert call["path"] == "/cups/borrow"
    assert call["headers"]["authorization"] == "Bearer token-1"
    assert b'"cup_id":"12345678"' in call["content"].replace(b" ", b"")


@pytest.mark.asyncio
async def test_gateway_forwards_error_bodies(client, swap_client):
    swap_client(
        "wallet_client",
        RecordingClient(
            make_response(400, {"error": "Số dư không đủ", "code": "insufficient_balance"})
        ),
    )

    response = await client.get("/api/v1/wallet/me")

    assert response.status_code == 400
    assert response.json()["code"] == "insufficient_balance"


@pytest.mark.asyncio
async def test_gateway_proxies_non_json_payloads(client, swap_client):
    """Non-JSON responses such as CSV exports pass through as bytes."""
    csv_body = "cup_id,material,qr_payload\n12345678,pp_plastic,CUP|12345678|pp_plastic|SipSmart\n"
    swap_client(
        "cups_client",
        RecordingClient(
            httpx.Response(
                200,
                content=csv_body.encode(),
                headers={
                    "Content-Type": "text/csv",
                    "Content-Disposition": 'attachment; filename="cups.csv"',
                },
            )
        ),
    )

    response = await client.get("/api/v1/admin/cups/export")

    assert response.status_code == 200
    assert response.text == csv_body
    assert response.headers["content-type"].startswith("text/csv")
    assert "content-disposition" in response.headers


@pytest.mark.asyncio
async def test_gateway_keeps_query_string(client, swap_client):
    stub = swap_client("rewards_client", RecordingClient(make_response(200, [])))

    await client.get("/api/v1/rewards/claims/me?skip=20&limit=10")

    assert stub.calls[0]["path"] == "/rewards/claims/me?skip=20&limit=10"


@pytest.mark.asyncio
async def test_gateway_routes_admin_areas(client, swap_client):
    """Admin prefixes go to the owning service, never to a member area."""
    partners = swap_client("partners_client", RecordingClient(make_response(200, [])))
    users = swap_client("users_client", RecordingClient(make_response(200, {"total": 0})))

    await client.get("/api/v1/admin/redistribution/recommendations")
    await client.get("/api/v1/admin/users")

    assert partners.calls[0]["path"] == "/admin/redistribution/recommendations"
    assert users.calls[0]["path"] == "/admin/users"


@pytest.mark.asyncio
async def test_gateway_routes_shared_service_areas(client, swap_client):
    stub = swap_client("rewards_client", RecordingClient(make_response(200, [])))

    await client.get("/api/v1/challenges")

    assert stub.calls[0]["path"] == "/challenges"


@pytest.mark.asyncio
async def test_gateway_passes_204_through(client, swap_client):
    swap_client("social_client", RecordingClient(make_response(204, None, "DELETE")))

    response = await client.delete("/api/v1/social/friends/friend-2")

    assert response.status_code == 204
    assert response.content == b""


@pytest.mark.asyncio
async def test_gateway_reports_unreachable_service(client, swap_client):
    swap_client(
        "mobility_client",
        RecordingClient(error=httpx.ConnectError("Connection refused")),
    )

    response = await client.get("/api/v1/mobility/stations")

    assert response.status_code == 503
    assert response.json()["code"] == "service_unavailable"


@pytest.mark.asyncio
async def test_gateway_health(client):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "service": "gateway"}
    assert "x-response-time" in response.headers


@pytest.mark.asyncio
async def test_gateway_forwards_request_id(client, swap_client):
    stub = swap_client("wallet_client", RecordingClient(make_response(200, {"balance": 0})))

    response = await client.get("/api/v1/wallet/me", headers={"X-Request-ID": "req-42"})

    assert response.headers["x-request-id"] == "req-42"
    assert stub.calls[0]["headers"]["x-request-id"] == "req-42"


@pytest.mark.asyncio
async def test_gateway_generates_request_id(client, swap_client):
    stub = swap_client("wallet_client", RecordingClient(make_response(200, {"balance": 0})))

    response = await client.get("/api/v1/wallet/me")

    generated = response.headers["x-request-id"]
    assert len(generated) == 32
    assert stub.calls[0]["headers"]["x-request-id"] == generated
