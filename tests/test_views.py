from client.errors import APIError
from views.audiences import AudienceManager
from views.auth import AuthState, TokenStore
from views.businesses import BusinessManager
from views.forms import AudienceForm, BusinessForm, LoginForm, ManualAudienceForm, SessionForm
from views.info import FALLBACK_LEGAL_CONTENT, InfoView, whatsapp_url
from views.sessions import SessionManager


class BrokenBackend:
    """Every call fails the way the HTTP client does on a 500."""

    def __getattr__(self, name):
        async def fail(*args, **kwargs):
            raise APIError("Internal error", status_code=500)

        return fail

    def set_token(self, token):
        pass


# ── Businesses & audiences ──────────────────────────────

async def test_business_manager_load_and_create(funded_backend):
    manager = BusinessManager(funded_backend)
    await manager.load()
    assert len(manager.businesses) == 2

    created = await manager.create(BusinessForm(name="Bakery", industry_category="Food"))

    assert created.name == "Bakery"
    assert len(manager.businesses) == 3
    assert manager.find(created.business_type_id).industry_category == "Food"
    assert "Food" in manager.list.categories


async def test_business_manager_keeps_state_on_failure(funded_backend):
    manager = BusinessManager(funded_backend)
    await manager.load()
    manager.backend = BrokenBackend()

    await manager.load()

    assert manager.error == "Failed to load businesses: Internal error"
    assert len(manager.businesses) == 2


async def test_audience_manager_manual_creation(funded_backend):
    manager = AudienceManager(funded_backend)
    created = await manager.create_manual(ManualAudienceForm(manual_description="Retirees downsizing"))

    assert created.name == "Custom Audience"
    assert created.display_description == "Retirees downsizing"
    assert manager.find(created.audience_id) is not None

    structured = await manager.create(AudienceForm(name="Landlords", description="Own rental units"))
    assert structured.name == "Landlords"
    assert len(manager.audiences) == 4


async def test_audience_manager_create_failure():
    manager = AudienceManager(BrokenBackend())
    assert await manager.create(AudienceForm(name="Landlords")) is None
    assert manager.error == "Failed to create audience: Internal error"
    assert manager.loading is False


# ── Sessions ────────────────────────────────────────────

async def test_session_manager_create_select_regenerate(funded_backend):
    manager = SessionManager(funded_backend)
    await manager.load()
    assert len(manager.businesses) == 2
    assert len(manager.audiences) == 2
    assert manager.sessions == []

    session = await manager.create(
        SessionForm(business_type_id="1", audience_id="2", mission_objective="Schedule a consultation")
    )
    assert session.mission_objective == "Schedule a consultation"
    assert manager.selected is session
    assert len(manager.sessions) == 1

    manager.selected = None
    selected = await manager.select(session.session_id)
    assert selected.session_id == session.session_id

    regenerated = await manager.regenerate()
    assert regenerated.credits_consumed == 10
    assert set(regenerated.ai_responses) == set(session.ai_responses)


async def test_session_manager_create_failure_keeps_message(mock_backend):
    await mock_backend.register("ada@example.com", "secret")
    manager = SessionManager(mock_backend)

    result = await manager.create(
        SessionForm(business_type_id="1", audience_id="1", mission_objective="Anything")
    )

    assert result is None
    assert manager.error == "Insufficient credits"
    assert manager.loading is False


async def test_select_fetches_full_session_when_responses_missing(funded_backend):
    created = (await funded_backend.create_session(
        {"business_type_id": "1", "audience_id": "1", "mission_objective": "Objective"}
    ))["session"]
    manager = SessionManager(funded_backend)

    selected = await manager.select(created["session_id"])

    assert selected.ai_responses == created["ai_responses"]


# ── Auth ────────────────────────────────────────────────

async def test_login_persists_token_and_logout_clears(mock_backend, tmp_path):
    store = TokenStore(tmp_path / "token.json")
    await mock_backend.register("ada@example.com", "secret")
    auth = AuthState(mock_backend, store)

    user = await auth.login(LoginForm(email="ada@example.com", password="secret"))

    assert user.email == "ada@example.com"
    assert auth.is_authenticated
    assert store.load() == "mock-jwt-token"

    auth.logout()
    assert not auth.is_authenticated
    assert store.load() is None
    assert not store.path.exists()


async def test_login_failure_sets_error(mock_backend, tmp_path):
    auth = AuthState(mock_backend, TokenStore(tmp_path / "token.json"))
    assert await auth.login(LoginForm(email="nobody@example.com", password="x")) is None
    assert auth.error == "Invalid email or password"


async def test_restore_uses_stored_token(mock_backend, tmp_path):
    store = TokenStore(tmp_path / "token.json")
    auth = AuthState(mock_backend, store)
    await auth.register(LoginForm(email="ada@example.com", password="secret"))

    restored = await AuthState(mock_backend, store).restore()

    assert restored.email == "ada@example.com"


async def test_restore_discards_rejected_token(tmp_path):
    store = TokenStore(tmp_path / "token.json")
    store.save("expired")

    assert await AuthState(BrokenBackend(), store).restore() is None
    assert store.load() is None


def test_token_store_ignores_corrupt_file(tmp_path):
    path = tmp_path / "token.json"
    path.write_text("{not json", encoding="utf-8")
    assert TokenStore(path).load() is None


# ── Info ────────────────────────────────────────────────

async def test_header_shows_balance_and_short_fingerprint(funded_backend):
    header = await InfoView(funded_backend).header()
    assert header["credit_balance"] == 50
    assert header["credits_display"] == "$50.00 Credits"
    assert header["session_badge"] == "mock-fin"


async def test_header_survives_backend_failure():
    header = await InfoView(BrokenBackend()).header()
    assert header == {"credit_balance": 0, "credits_display": "$0.00 Credits", "session_badge": None}


async def test_contact_adds_whatsapp_link(mock_backend):
    contact = await InfoView(mock_backend).contact()
    assert contact["whatsapp_url"] == "https://wa.me/15550100200"


def test_whatsapp_url_strips_formatting():
    assert whatsapp_url("+1 (555) 123-4567") == "https://wa.me/15551234567"
    assert whatsapp_url("") is None


async def test_legal_page_falls_back_on_failure():
    page = await InfoView(BrokenBackend()).legal_page("privacy")
    assert page == {"slug": "privacy", "title": "Privacy Policy", "content": FALLBACK_LEGAL_CONTENT}

    pages = await InfoView(BrokenBackend()).legal_pages()
    assert [p["slug"] for p in pages] == ["terms", "privacy", "gdpr", "cookies"]


async def test_legal_page_from_backend(mock_backend):
    page = await InfoView(mock_backend).legal_page("cookies")
    assert page["title"] == "Cookie Policy"
