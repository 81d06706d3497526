"""FastAPI routes for the persuasion console."""

import logging
from typing import Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from client.errors import APIError
from config import settings
from console import Console
from views.forms import AudienceForm, BusinessForm, LoginForm, ManualAudienceForm, SessionForm

logger = logging.getLogger(__name__)
router = APIRouter()

# Set by main.py (or a test) once the backend is built
_console: Console | None = None


def set_console(console: Console | None):
    global _console
    _console = console


def get_console() -> Console:
    if _console is None:
        raise HTTPException(503, "Console not initialised")
    return _console


def _check(error: str | None):
    """A view that failed against the backend surfaces as 502."""
    if error:
        raise HTTPException(502, error)


# ── Pydantic models ─────────────────────────────────────

class PurchaseRequest(BaseModel):
    package_id: str


class ConversationSelect(BaseModel):
    business_id: str
    tier: Optional[str] = None
    email: Optional[str] = None


# ── Status ──────────────────────────────────────────────

@router.get("/health")
async def health():
    """Liveness plus which backend the console talks to."""
    console = get_console()
    return {
        "status": "ok",
        "backend": console.backend.backend_name,
        "backend_mode": settings.backend_mode,
    }


@router.get("/header")
async def header():
    """Credit balance and session badge for the page header."""
    return await get_console().info.header()


# ── Auth ────────────────────────────────────────────────

@router.post("/auth/login")
async def login(form: LoginForm):
    auth = get_console().auth
    if await auth.login(form) is None:
        raise HTTPException(401, auth.error or "Login failed")
    return auth.snapshot()


@router.post("/auth/register")
async def register(form: LoginForm):
    auth = get_console().auth
    if await auth.register(form) is None:
        raise HTTPException(400, auth.error or "Registration failed")
    return auth.snapshot()


@router.post("/auth/logout")
async def logout():
    auth = get_console().auth
    auth.logout()
    return auth.snapshot()


@router.get("/auth")
async def auth_state():
    return get_console().auth.snapshot()


# ── Businesses & audiences ──────────────────────────────

@router.get("/businesses")
async def list_businesses(
    search: str = "",
    category: str = "all",
    sort: str = "name",
    page: int = 1,
):
    """Business types, filtered, sorted and paginated."""
    manager = get_console().businesses
    await manager.load()
    _check(manager.error)
    try:
        manager.list.set_sort(sort)
    except ValueError as e:
        raise HTTPException(400, str(e))
    manager.list.set_search(search)
    manager.list.set_category(category)
    manager.list.go_to(page)
    return manager.list.snapshot(lambda b: b.to_dict())


@router.post("/businesses")
async def create_business(form: BusinessForm):
    manager = get_console().businesses
    created = await manager.create(form)
    _check(manager.error)
    return {"status": "created", "business_type": created.to_dict() if created else None}


@router.get("/audiences")
async def list_audiences(search: str = "", sort: str = "name", page: int = 1):
    """Target audiences, filtered, sorted and paginated."""
    manager = get_console().audiences
    await manager.load()
    _check(manager.error)
    try:
        manager.list.set_sort(sort)
    except ValueError as e:
        raise HTTPException(400, str(e))
    manager.list.set_search(search)
    manager.list.go_to(page)
    return manager.list.snapshot(lambda a: a.to_dict())


@router.post("/audiences")
async def create_audience(form: AudienceForm):
    manager = get_console().audiences
    created = await manager.create(form)
    _check(manager.error)
    return {"status": "created", "target_audience": created.to_dict() if created else None}


@router.post("/audiences/manual")
async def create_manual_audience(form: ManualAudienceForm):
    manager = get_console().audiences
    created = await manager.create_manual(form)
    _check(manager.error)
    return {"status": "created", "target_audience": created.to_dict() if created else None}


# ── Persuasion sessions ─────────────────────────────────

@router.get("/sessions")
async def list_sessions():
    """Businesses, audiences and past sessions in one call."""
    manager = get_console().sessions
    manager.error = None
    await manager.load()
    _check(manager.error)
    return manager.snapshot()


@router.post("/sessions")
async def create_session(form: SessionForm):
    manager = get_console().sessions
    await manager.create(form)
    _check(manager.error)
    return manager.snapshot()


@router.get("/sessions/{session_id}")
async def get_session(session_id: str):
    manager = get_console().sessions
    manager.error = None
    session = await manager.select(session_id)
    if session is None:
        raise HTTPException(404, manager.error or f"Session {session_id} not found")
    return session.to_dict()


@router.post("/sessions/{session_id}/regenerate")
async def regenerate_session(session_id: str):
    """Re-run every persona for a session; credits are charged again."""
    manager = get_console().sessions
    manager.error = None
    if await manager.select(session_id) is None:
        raise HTTPException(404, manager.error or f"Session {session_id} not found")
    await manager.regenerate()
    _check(manager.error)
    return manager.selected.to_dict()


# ── Credits ─────────────────────────────────────────────

@router.get("/credits")
async def get_credits():
    """Credit packages and the current balance."""
    view = get_console().credits
    view.error = None
    await view.load()
    _check(view.error)
    return view.snapshot()


@router.post("/credits/purchase")
async def purchase_credits(data: PurchaseRequest):
    view = get_console().credits
    completed = await view.purchase(data.package_id)
    _check(view.error)
    return {"completed": completed, **view.snapshot()}


# ── Live session ────────────────────────────────────────

@router.post("/live/start")
async def start_live(form: SessionForm):
    """Start the five-agent live session in the background."""
    console = get_console()
    driver = await console.start_live(form.business_type_id, form.audience_id, form.mission_objective)
    if driver is None:
        raise HTTPException(404, "Business or audience not found")
    return driver.snapshot()


@router.get("/live")
async def live_state():
    live = get_console().live
    if live is None:
        raise HTTPException(404, "No live session")
    return live.snapshot()


@router.post("/live/regenerate/{agent_type}")
async def regenerate_live(agent_type: str):
    live = get_console().live
    if live is None:
        raise HTTPException(404, "No live session")
    try:
        message = await live.regenerate(agent_type)
    except ValueError as e:
        raise HTTPException(404, str(e))
    if message is None:
        raise HTTPException(404, f"Agent {agent_type} has not answered yet")
    return message.to_dict()


@router.post("/live/stop")
async def stop_live():
    live = get_console().live
    if live is None:
        raise HTTPException(404, "No live session")
    await live.close()
    return live.snapshot()


# ── Conversation dashboard ──────────────────────────────

CONVERSATION_ACTIONS = ("start", "pause", "resume", "stop", "reset", "sync")


@router.post("/conversation/select")
async def select_conversation_business(data: ConversationSelect):
    console = get_console()
    business = console.businesses.find(data.business_id)
    if business is None:
        await console.businesses.load()
        business = console.businesses.find(data.business_id)
    if business is None:
        raise HTTPException(404, f"Business {data.business_id} not found")
    console.conversation.select_business(business, tier=data.tier, email=data.email)
    return console.conversation.snapshot()


@router.post("/conversation/{action}")
async def conversation_action(action: str):
    """start / pause / resume / stop / reset, or sync from the backend."""
    if action not in CONVERSATION_ACTIONS:
        raise HTTPException(404, f"Unknown conversation action: {action}")
    controller = get_console().conversation
    controller.error = None
    controller.payment_required = None
    await getattr(controller, action)()
    if controller.payment_required:
        raise HTTPException(402, {"message": controller.error, **controller.payment_required})
    if controller.error:
        # No business selected is a client mistake, not a backend failure
        raise HTTPException(400 if controller.business is None else 502, controller.error)
    return controller.snapshot()


@router.get("/conversation")
async def conversation_state():
    return get_console().conversation.snapshot()


@router.get("/conversation/tiers")
async def conversation_tiers(email: str = ""):
    """Pricing tiers for the conversation dashboard."""
    try:
        return await get_console().backend.list_conversation_tiers(email)
    except APIError as e:
        raise HTTPException(502, e.message)


# ── Info ────────────────────────────────────────────────

@router.get("/contact")
async def contact():
    view = get_console().info
    view.error = None
    data = await view.contact()
    _check(view.error)
    return data


@router.get("/legal")
async def legal_pages():
    return {"pages": await get_console().info.legal_pages()}


@router.get("/legal/{slug}")
async def legal_page(slug: str):
    return await get_console().info.legal_page(slug)


@router.get("/config")
async def api_config():
    view = get_console().info
    view.error = None
    data = await view.config()
    _check(view.error)
    return data
