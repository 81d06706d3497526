import json

import httpx
import pytest

from client.errors import FALLBACK_MESSAGE, APIError, PaymentRequiredError
from client.http import HTTPBackend
from client.signing import AnonymousSigner, BearerTokenSigner, FingerprintSigner

BASE_URL = "https://backend.test"


def make_backend(handler, signer=None) -> HTTPBackend:
    return HTTPBackend(
        base_url=BASE_URL + "/",
        signer=signer or AnonymousSigner(),
        transport=httpx.MockTransport(handler),
    )


async def test_success_returns_decoded_json():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["method"] = request.method
        seen["url"] = str(request.url)
        seen["body"] = json.loads(request.content)
        seen["content_type"] = request.headers["Content-Type"]
        return httpx.Response(200, json={"session": {"session_id": "s1"}})

    backend = make_backend(handler)
    data = await backend.create_session({"business_type_id": "1", "audience_id": "2", "mission_objective": "x"})

    assert data == {"session": {"session_id": "s1"}}
    assert seen["method"] == "POST"
    assert seen["url"] == f"{BASE_URL}/api/sessions"
    assert seen["body"]["mission_objective"] == "x"
    assert seen["content_type"] == "application/json"


async def test_error_status_uses_server_message():
    def handler(request):
        return httpx.Response(400, json={"message": "Business type not found"})

    with pytest.raises(APIError) as exc:
        await make_backend(handler).list_businesses()

    assert exc.value.message == "Business type not found"
    assert exc.value.status_code == 400


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(500, json={"error": "no message field"}),
        httpx.Response(503, text="<html>Service Unavailable</html>"),
        httpx.Response(404, json={"message": ""}),
    ],
)
async def test_error_status_without_message_uses_fallback(response):
    with pytest.raises(APIError) as exc:
        await make_backend(lambda request: response).get_credit_balance()

    assert exc.value.message == FALLBACK_MESSAGE
    assert str(exc.value) == FALLBACK_MESSAGE


async def test_payment_required_exposes_tier_details():
    def handler(request):
        return httpx.Response(402, json={"message": "Payment required", "price": 29.0, "tier_name": "Deep Dive"})

    with pytest.raises(PaymentRequiredError) as exc:
        await make_backend(handler).start_conversation("1", tier="tier2")

    assert exc.value.price == 29.0
    assert exc.value.tier_name == "Deep Dive"
    assert exc.value.message == "Payment required"


async def test_transport_failure_raises_fallback():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(APIError) as exc:
        await make_backend(handler).get_contact_info()

    assert exc.value.message == FALLBACK_MESSAGE
    assert exc.value.status_code is None


async def test_success_with_invalid_json_raises():
    with pytest.raises(APIError) as exc:
        await make_backend(lambda request: httpx.Response(200, text="not json")).get_api_config()

    assert exc.value.message == "Invalid JSON response"


async def test_bearer_signer_follows_token_changes():
    auth_headers = []

    def handler(request):
        auth_headers.append(request.headers.get("Authorization"))
        return httpx.Response(200, json={})

    backend = make_backend(handler, signer=BearerTokenSigner())
    await backend.get_profile()
    backend.set_token("abc123")
    await backend.get_profile()
    backend.set_token(None)
    await backend.get_profile()

    assert auth_headers == [None, "Bearer abc123", None]
    assert backend.backend_name == "http:auth"


async def test_fingerprint_signer_sends_identity_headers():
    seen = {}

    def handler(request):
        seen.update(request.headers)
        return httpx.Response(200, json={})

    signer = FingerprintSigner(fingerprint="deadbeef", session_id="deadbeef_1700000000000")
    backend = make_backend(handler, signer=signer)
    backend.set_token("ignored")
    await backend.get_session_info()

    assert seen["x-fingerprint"] == "deadbeef"
    assert seen["x-session-id"] == "deadbeef_1700000000000"
    assert "authorization" not in seen


async def test_anonymous_signer_sends_no_identity():
    seen = {}

    def handler(request):
        seen.update(request.headers)
        return httpx.Response(200, json={})

    await make_backend(handler).list_legal_pages()

    assert "authorization" not in seen
    assert "x-fingerprint" not in seen


async def test_paths_are_escaped():
    urls = []

    def handler(request):
        urls.append(str(request.url))
        return httpx.Response(200, json={})

    backend = make_backend(handler)
    await backend.get_session("a b")
    await backend.list_conversation_tiers("ada@example.com")

    assert urls[0] == f"{BASE_URL}/api/sessions/a%20b"
    assert urls[1] == f"{BASE_URL}/api/ai-conversations/tiers?email=ada%40example.com"
