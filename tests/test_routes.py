import time
from contextlib import asynccontextmanager

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from client.mock import MockBackend
from config import settings
from console import Console
from dashboard import dashboard_router
from routes import router, set_console
from views.auth import TokenStore


@pytest.fixture
def client(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "purchase_redirect_delay", 0.0)
    monkeypatch.setattr(settings, "backend_mode", "mock")
    console = Console(
        MockBackend(database_url="sqlite+aiosqlite://"),
        token_store=TokenStore(tmp_path / "token.json"),
        min_delay=0.0,
        max_delay=0.0,
        gap=0.0,
        regenerate_delay=0.0,
    )

    @asynccontextmanager
    async def lifespan(app):
        set_console(console)
        yield
        await console.close()
        set_console(None)

    app = FastAPI(lifespan=lifespan)
    app.include_router(dashboard_router)
    app.include_router(router)
    with TestClient(app) as test_client:
        yield test_client


def register(client, email="ada@example.com"):
    response = client.post("/auth/register", json={"email": email, "password": "secret"})
    assert response.status_code == 200
    return response.json()


def buy(client, package_id="professional"):
    response = client.post("/credits/purchase", json={"package_id": package_id})
    assert response.status_code == 200
    return response.json()


def test_dashboard_page(client):
    response = client.get("/")
    assert response.status_code == 200
    assert "Cognitive Persuasion Engine" in response.text


def test_health(client):
    assert client.get("/health").json() == {"status": "ok", "backend": "mock", "backend_mode": "mock"}


def test_auth_flow(client):
    body = register(client)
    assert body["authenticated"] is True
    assert body["user"]["email"] == "ada@example.com"

    assert client.post("/auth/logout").json()["authenticated"] is False

    bad = client.post("/auth/login", json={"email": "ada@example.com", "password": "wrong"})
    assert bad.status_code == 401
    assert bad.json()["detail"] == "Invalid email or password"

    assert client.post("/auth/login", json={"email": "ada@example.com", "password": "secret"}).status_code == 200


def test_login_form_validation(client):
    assert client.post("/auth/login", json={"email": "", "password": "x"}).status_code == 422


def test_business_list_search_and_create(client):
    register(client)
    body = client.get("/businesses", params={"search": "roof"}).json()
    assert [b["name"] for b in body["items"]] == ["Roofing Services"]
    assert body["showing"] == {"first": 1, "last": 1, "total": 1}

    created = client.post("/businesses", json={"name": "Bakery", "industry_category": "Food"})
    assert created.status_code == 200
    body = client.get("/businesses", params={"category": "Food"}).json()
    assert [b["name"] for b in body["items"]] == ["Bakery"]
    assert "Food" in body["categories"]

    assert client.post("/businesses", json={"name": "   "}).status_code == 422
    assert client.get("/businesses", params={"sort": "price"}).status_code == 400


def test_create_business_requires_login(client):
    response = client.post("/businesses", json={"name": "Bakery"})
    assert response.status_code == 502
    assert response.json()["detail"] == "Failed to create business: User not found"


def test_manual_audience(client):
    register(client)
    response = client.post("/audiences/manual", json={"manual_description": "Retirees downsizing"})
    assert response.json()["target_audience"]["name"] == "Custom Audience"
    assert client.get("/audiences", params={"search": "downsizing"}).json()["showing"]["total"] == 1


def test_credits_and_header(client):
    register(client)
    credits = client.get("/credits").json()
    assert credits["balance_display"] == "$0.00 Credits"
    assert [p["badge"] for p in credits["packages"]] == [None, "Most Popular", "Best Value", None]

    purchase = buy(client, "starter")
    assert purchase["completed"] is True
    assert purchase["balance_display"] == "$10.00 Credits"

    header = client.get("/header").json()
    assert header["credits_display"] == "$10.00 Credits"
    assert header["session_badge"] == "mock-fin"


def test_sessions_flow(client):
    register(client)
    payload = {"business_type_id": "1", "audience_id": "1", "mission_objective": "Book an inspection"}

    broke = client.post("/sessions", json=payload)
    assert broke.status_code == 502
    assert broke.json()["detail"] == "Insufficient credits"

    buy(client)
    created = client.post("/sessions", json=payload).json()
    session_id = created["selected"]["session_id"]
    assert len(created["sessions"]) == 1

    assert client.get(f"/sessions/{session_id}").json()["mission_objective"] == "Book an inspection"
    regenerated = client.post(f"/sessions/{session_id}/regenerate").json()
    assert regenerated["credits_consumed"] == 10
    assert client.get("/sessions/missing").status_code == 404


def test_live_session_flow(client):
    payload = {"business_type_id": "2", "audience_id": "2", "mission_objective": "Try our SEO audit"}
    started = client.post("/live/start", json=payload)
    assert started.status_code == 200

    live = started.json()
    for _ in range(200):
        live = client.get("/live").json()
        if live["state"] == "idle":
            break
        time.sleep(0.01)

    assert live["state"] == "idle"
    assert [m["agent_type"] for m in live["messages"] if m["type"] == "ai"] == [
        "logic", "emotion", "creative", "authority", "social",
    ]
    assert live["stats"]["credits_used"] == 5

    regenerated = client.post("/live/regenerate/social")
    assert regenerated.status_code == 200
    assert regenerated.json()["agent_type"] == "social"
    assert client.post("/live/regenerate/sarcasm").status_code == 404
    assert client.post("/live/stop").json()["state"] == "idle"


def test_live_requires_known_business(client):
    payload = {"business_type_id": "999", "audience_id": "1", "mission_objective": "Anything"}
    assert client.post("/live/start", json=payload).status_code == 404
    assert client.get("/live").status_code == 404


def test_conversation_flow(client):
    no_business = client.post("/conversation/start")
    assert no_business.status_code == 400
    assert no_business.json()["detail"] == "Please select a business first"

    assert client.post("/conversation/select", json={"business_id": "1"}).status_code == 200
    started = client.post("/conversation/start").json()
    assert started["state"] == "running"
    assert started["business"]["name"] == "Roofing Services"

    assert client.post("/conversation/pause").json()["state"] == "paused"
    assert client.post("/conversation/resume").json()["state"] == "running"
    assert client.post("/conversation/stop").json()["state"] == "stopped"
    assert client.post("/conversation/explode").status_code == 404


def test_conversation_reset(client):
    client.post("/conversation/select", json={"business_id": "2"})
    client.post("/conversation/start")

    response = client.post("/conversation/reset")

    assert response.status_code == 200
    body = response.json()
    assert body["state"] == "stopped"
    assert body["conversation_id"] is None
    assert body["stats"] == {"total_messages": 0, "current_round": 0, "duration": 0}


def test_conversation_paid_tier(client):
    client.post("/conversation/select", json={"business_id": "1", "tier": "tier2"})
    response = client.post("/conversation/start")
    assert response.status_code == 402
    assert response.json()["detail"]["tier_name"] == "Deep Dive"


def test_conversation_tiers(client):
    tiers = client.get("/conversation/tiers", params={"email": "ada@example.com"}).json()
    assert [t["id"] for t in tiers["tiers"]] == ["tier1", "tier2", "tier3"]


def test_info_routes(client):
    assert client.get("/contact").json()["whatsapp_url"].startswith("https://wa.me/")
    assert [p["slug"] for p in client.get("/legal").json()["pages"]] == ["terms", "privacy", "gdpr", "cookies"]
    assert client.get("/legal/gdpr").json()["title"] == "GDPR Compliance"
    fallback = client.get("/legal/unknown").json()
    assert fallback["title"] == "Legal Page"
