"""In-memory stand-in for the persuasion backend.

Same interface as HTTPBackend, so views and tests can swap it in without
changing call sites. State lives in an async SQLAlchemy store (in-memory
SQLite unless ``mock_database_url`` points at a file).
"""

import asyncio
import logging
import random
import re
import uuid
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable
from urllib.parse import parse_qs, unquote

from sqlalchemy import desc, or_, select

from agents.base import AgentContext
from agents.personas import AGENT_ORDER, generate_all
from client.base import PersuasionBackend
from client.errors import APIError, PaymentRequiredError
from config import settings
from db import create_tables, make_engine, make_sessionmaker
from models import AIConversation, BusinessType, MockUser, PersuasionSession, Purchase, TargetAudience
from schemas import Audience, Business

logger = logging.getLogger(__name__)

MOCK_TOKEN = "mock-jwt-token"

# One credit per persona answer
SESSION_COST = len(AGENT_ORDER)

PREDEFINED_BUSINESS_TYPES = [
    {
        "business_type_id": "1",
        "name": "Roofing Services",
        "description": "Residential and commercial roofing installation, repair, and maintenance services",
        "industry_category": "Construction & Home Services",
    },
    {
        "business_type_id": "2",
        "name": "Digital Marketing Agency",
        "description": "Full-service digital marketing including SEO, PPC, social media, and content marketing",
        "industry_category": "Marketing & Advertising",
    },
]

PREDEFINED_AUDIENCES = [
    {
        "audience_id": "1",
        "name": "Homeowners",
        "description": "Residential property owners aged 25-65 interested in home improvement and maintenance",
    },
    {
        "audience_id": "2",
        "name": "Small Business Owners",
        "description": "Entrepreneurs and business owners with 1-50 employees looking to grow their business",
    },
]

CREDIT_PACKAGES = [
    {"id": "starter", "name": "Starter Package", "credits": 10, "price": 15.76,
     "price_per_credit": 1.58, "description": "Perfect for trying out the service"},
    {"id": "professional", "name": "Professional Package", "credits": 50, "price": 67.25,
     "price_per_credit": 1.34, "description": "Great for regular users"},
    {"id": "enterprise", "name": "Enterprise Package", "credits": 200, "price": 247.48,
     "price_per_credit": 1.24, "description": "Best for businesses"},
    {"id": "bulk", "name": "Bulk Package", "credits": 500, "price": 566.74,
     "price_per_credit": 1.13, "description": "Maximum value for power users"},
]

CONVERSATION_TIERS = [
    {"id": "tier1", "name": "Quick Insight", "rounds": 4, "messages": 16, "duration_minutes": 5,
     "price": 0.0, "includes_publishing": False, "description": "A short four-round expert debate"},
    {"id": "tier2", "name": "Deep Dive", "rounds": 8, "messages": 32, "duration_minutes": 12,
     "price": 29.0, "includes_publishing": False, "description": "Extended debate with follow-up rounds"},
    {"id": "tier3", "name": "Market Launch", "rounds": 12, "messages": 48, "duration_minutes": 20,
     "price": 99.0, "includes_publishing": True, "description": "Full debate plus publishing package"},
]

CONTACT_INFO = {
    "name": "Support Team",
    "company": "VisitorIntel",
    "whatsapp": "+1 (555) 010-0200",
}

LEGAL_PAGES = {
    "terms": ("Terms of Service", "Terms and conditions for using our service"),
    "privacy": ("Privacy Policy", "How we collect and use your information"),
    "gdpr": ("GDPR Compliance", "Our commitment to data protection"),
    "cookies": ("Cookie Policy", "How we use cookies and tracking"),
}

Handler = Callable[[dict, dict], Awaitable[Any]]


def _new_id() -> str:
    return uuid.uuid4().hex[:12]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MockBackend(PersuasionBackend):
    """Backend double that answers the same endpoints from a local store."""

    def __init__(
        self,
        database_url: str | None = None,
        latency: float | None = None,
        rng: random.Random | None = None,
    ):
        self.engine = make_engine(database_url or settings.mock_database_url)
        self.session_factory = make_sessionmaker(self.engine)
        self.latency = settings.mock_latency if latency is None else latency
        self.rng = rng or random.Random()
        self.current_user_id: str | None = None
        self._ready = False
        self._ready_lock = asyncio.Lock()
        # One request at a time against the shared SQLite connection
        self._request_lock = asyncio.Lock()
        self._routes: list[tuple[str, re.Pattern, Handler]] = [
            ("POST", re.compile(r"^/api/auth/register$"), self._register),
            ("POST", re.compile(r"^/api/auth/login$"), self._login),
            ("GET", re.compile(r"^/api/auth/profile$"), self._profile),
            ("GET", re.compile(r"^/api/businesses$"), self._list_businesses),
            ("POST", re.compile(r"^/api/businesses$"), self._create_business),
            ("GET", re.compile(r"^/api/audiences$"), self._list_audiences),
            ("POST", re.compile(r"^/api/audiences$"), self._create_audience),
            ("POST", re.compile(r"^/api/audiences/manual$"), self._create_manual_audience),
            ("GET", re.compile(r"^/api/sessions$"), self._list_sessions),
            ("POST", re.compile(r"^/api/sessions$"), self._create_session),
            ("GET", re.compile(r"^/api/sessions/(?P<session_id>[^/]+)$"), self._get_session),
            ("POST", re.compile(r"^/api/sessions/(?P<session_id>[^/]+)/regenerate$"), self._regenerate_session),
            ("GET", re.compile(r"^/api/payments/packages$"), self._packages),
            ("GET", re.compile(r"^/api/payments/balance$"), self._balance),
            ("POST", re.compile(r"^/api/payments/purchase$"), self._purchase),
            ("POST", re.compile(r"^/api/payments/execute$"), self._execute_purchase),
            ("GET", re.compile(r"^/api/ai-conversations/tiers$"), self._tiers),
            ("POST", re.compile(r"^/api/ai-conversations/start$"), self._start_conversation),
            (
                "POST",
                re.compile(r"^/api/ai-conversations/(?P<conversation_id>[^/]+)/(?P<action>pause|resume|stop|reset)$"),
                self._handle_conversation_action,
            ),
            ("GET", re.compile(r"^/api/ai-conversations/(?P<conversation_id>[^/]+)/status$"), self._conversation_status),
            ("GET", re.compile(r"^/api/ai-conversations/(?P<conversation_id>[^/]+)/messages$"), self._conversation_messages),
            ("GET", re.compile(r"^/api/session$"), self._session_info),
            ("GET", re.compile(r"^/api/contact$"), self._contact),
            ("GET", re.compile(r"^/api/legal$"), self._legal_pages),
            ("GET", re.compile(r"^/api/legal/(?P<slug>[^/]+)$"), self._legal_page),
            ("GET", re.compile(r"^/api/config$"), self._config),
        ]

    @property
    def backend_name(self) -> str:
        return "mock"

    def set_token(self, token: str | None) -> None:
        # Clearing the token is a logout; the mock keys identity on current_user_id
        if not token:
            self.current_user_id = None

    async def close(self) -> None:
        await self.engine.dispose()

    async def _ensure_ready(self) -> None:
        if self._ready:
            return
        async with self._ready_lock:
            if self._ready:
                return
            await create_tables(self.engine)
            await self._seed()
            self._ready = True

    async def _seed(self) -> None:
        async with self.session_factory() as session:
            if (await session.execute(select(BusinessType).limit(1))).scalar_one_or_none() is None:
                for data in PREDEFINED_BUSINESS_TYPES:
                    session.add(BusinessType(is_custom=False, **data))
                for data in PREDEFINED_AUDIENCES:
                    session.add(TargetAudience(is_custom=False, **data))
                await session.commit()
                logger.info("Mock backend seeded with predefined business types and audiences")

    async def request(self, endpoint: str, method: str = "GET", body: dict | None = None) -> Any:
        await self._ensure_ready()
        if self.latency > 0:
            await asyncio.sleep(self.latency)

        path, _, query = endpoint.partition("?")
        method = method.upper()
        for route_method, pattern, handler in self._routes:
            match = pattern.match(path)
            if match and route_method == method:
                params = {k: v[0] for k, v in parse_qs(query).items()}
                params.update({k: unquote(v) for k, v in match.groupdict().items()})
                try:
                    async with self._request_lock:
                        return await handler(body or {}, params)
                except APIError as e:
                    logger.error("Mock %s %s failed: %s", method, endpoint, e.message)
                    raise

        raise APIError(f"Mock endpoint not implemented: {endpoint}", status_code=404)

    async def _current_user(self, session) -> MockUser:
        user = None
        if self.current_user_id:
            user = await session.get(MockUser, self.current_user_id)
        if user is None:
            raise APIError("User not found", status_code=401)
        return user

    def _visible_to_current_user(self, column):
        if self.current_user_id:
            return or_(column.is_(None), column == self.current_user_id)
        return column.is_(None)

    # ── Auth ─────────────────────────────────────────────

    async def _register(self, body: dict, params: dict) -> dict:
        email = (body.get("email") or "").strip()
        password = body.get("password") or ""
        if not email or not password:
            raise APIError("Email and password are required", status_code=400)

        async with self.session_factory() as session:
            existing = (await session.execute(select(MockUser).where(MockUser.email == email))).scalar_one_or_none()
            if existing is not None:
                raise APIError("User with this email already exists", status_code=409)
            user = MockUser(user_id=_new_id(), email=email, password=password, credit_balance=0.0, created_at=_utcnow())
            session.add(user)
            await session.commit()
            self.current_user_id = user.user_id
            return {"message": "User registered successfully", "access_token": MOCK_TOKEN, "user": user.to_api()}

    async def _login(self, body: dict, params: dict) -> dict:
        email = (body.get("email") or "").strip()
        async with self.session_factory() as session:
            user = (await session.execute(select(MockUser).where(MockUser.email == email))).scalar_one_or_none()
            if user is None or user.password != body.get("password"):
                raise APIError("Invalid email or password", status_code=401)
            self.current_user_id = user.user_id
            return {"message": "Login successful", "access_token": MOCK_TOKEN, "user": user.to_api()}

    async def _profile(self, body: dict, params: dict) -> dict:
        async with self.session_factory() as session:
            user = await self._current_user(session)
            return {"user": user.to_api()}

    # ── Businesses & audiences ───────────────────────────

    async def _list_businesses(self, body: dict, params: dict) -> dict:
        async with self.session_factory() as session:
            result = await session.execute(
                select(BusinessType).where(self._visible_to_current_user(BusinessType.user_id))
            )
            return {"business_types": [b.to_api() for b in result.scalars().all()]}

    async def _create_business(self, body: dict, params: dict) -> dict:
        async with self.session_factory() as session:
            user = await self._current_user(session)
            business = BusinessType(
                business_type_id=_new_id(),
                user_id=user.user_id,
                name=body.get("name") or "",
                description=body.get("description"),
                industry_category=body.get("industry_category"),
                is_custom=True,
                created_at=_utcnow(),
            )
            session.add(business)
            await session.commit()
            return {"message": "Business type created successfully", "business_type": business.to_api()}

    async def _list_audiences(self, body: dict, params: dict) -> dict:
        async with self.session_factory() as session:
            result = await session.execute(
                select(TargetAudience).where(self._visible_to_current_user(TargetAudience.user_id))
            )
            return {"target_audiences": [a.to_api() for a in result.scalars().all()]}

    async def _save_audience(self, audience: TargetAudience) -> dict:
        async with self.session_factory() as session:
            user = await self._current_user(session)
            audience.user_id = user.user_id
            session.add(audience)
            await session.commit()
            return {"message": "Target audience created successfully", "target_audience": audience.to_api()}

    async def _create_audience(self, body: dict, params: dict) -> dict:
        return await self._save_audience(TargetAudience(
            audience_id=_new_id(),
            name=body.get("name") or "",
            description=body.get("description"),
            is_custom=True,
            created_at=_utcnow(),
        ))

    async def _create_manual_audience(self, body: dict, params: dict) -> dict:
        manual = body.get("manual_description") or ""
        return await self._save_audience(TargetAudience(
            audience_id=_new_id(),
            name=body.get("name") or "Custom Audience",
            description=manual,
            manual_description=manual,
            is_custom=True,
            created_at=_utcnow(),
        ))

    # ── Persuasion sessions ──────────────────────────────

    async def _generate_responses(self, session, business_type_id: str, audience_id: str, objective: str) -> dict:
        business = await session.get(BusinessType, business_type_id)
        if business is None:
            raise APIError("Business type not found", status_code=404)
        audience = await session.get(TargetAudience, audience_id)
        if audience is None:
            raise APIError("Target audience not found", status_code=404)
        context = AgentContext(
            business=Business.from_api(business.to_api()),
            audience=Audience.from_api(audience.to_api()),
            objective=objective,
        )
        return generate_all(context, self.rng)

    @staticmethod
    def _charge(user: MockUser, credits: int) -> None:
        if user.credit_balance < credits:
            raise PaymentRequiredError("Insufficient credits", status_code=402, payload={"required": credits})
        user.credit_balance -= credits

    async def _create_session(self, body: dict, params: dict) -> dict:
        objective = (body.get("mission_objective") or "").strip()
        if not objective:
            raise APIError("Mission objective is required", status_code=400)

        async with self.session_factory() as session:
            user = await self._current_user(session)
            responses = await self._generate_responses(
                session, str(body.get("business_type_id") or ""), str(body.get("audience_id") or ""), objective
            )
            self._charge(user, SESSION_COST)
            record = PersuasionSession(
                session_id=_new_id(),
                user_id=user.user_id,
                business_type_id=str(body["business_type_id"]),
                audience_id=str(body["audience_id"]),
                mission_objective=objective,
                ai_responses=responses,
                credits_consumed=SESSION_COST,
                status="completed",
                created_at=_utcnow(),
            )
            session.add(record)
            await session.commit()
            logger.info("Mock session %s created for user %s", record.session_id, user.user_id)
            return {"message": "Session created successfully", "session": record.to_api()}

    async def _list_sessions(self, body: dict, params: dict) -> dict:
        async with self.session_factory() as session:
            user = await self._current_user(session)
            result = await session.execute(
                select(PersuasionSession)
                .where(PersuasionSession.user_id == user.user_id)
                .order_by(desc(PersuasionSession.created_at))
            )
            return {"sessions": [s.to_api() for s in result.scalars().all()]}

    async def _owned_session(self, session, session_id: str) -> tuple[MockUser, PersuasionSession]:
        user = await self._current_user(session)
        record = await session.get(PersuasionSession, session_id)
        if record is None or record.user_id != user.user_id:
            raise APIError("Session not found", status_code=404)
        return user, record

    async def _get_session(self, body: dict, params: dict) -> dict:
        async with self.session_factory() as session:
            _user, record = await self._owned_session(session, params["session_id"])
            return {"session": record.to_api()}

    async def _regenerate_session(self, body: dict, params: dict) -> dict:
        async with self.session_factory() as session:
            user, record = await self._owned_session(session, params["session_id"])
            responses = await self._generate_responses(
                session, record.business_type_id, record.audience_id, record.mission_objective
            )
            self._charge(user, SESSION_COST)
            record.ai_responses = responses
            record.credits_consumed = record.credits_consumed + SESSION_COST
            await session.commit()
            return {"ai_responses": responses, "credits_consumed": SESSION_COST}

    # ── Credits ──────────────────────────────────────────

    async def _packages(self, body: dict, params: dict) -> dict:
        return {"packages": [dict(p) for p in CREDIT_PACKAGES]}

    async def _balance(self, body: dict, params: dict) -> dict:
        async with self.session_factory() as session:
            user = await self._current_user(session)
            return {"credit_balance": user.credit_balance}

    async def _purchase(self, body: dict, params: dict) -> dict:
        package = next((p for p in CREDIT_PACKAGES if p["id"] == body.get("package_id")), None)
        if package is None:
            raise APIError("Invalid package", status_code=400)

        async with self.session_factory() as session:
            user = await self._current_user(session)
            purchase = Purchase(
                transaction_id=_new_id(),
                user_id=user.user_id,
                package_id=package["id"],
                credits=package["credits"],
                price=package["price"],
                status="pending",
                created_at=_utcnow(),
            )
            session.add(purchase)
            await session.commit()
            return {
                "transaction_id": purchase.transaction_id,
                "paypal_url": f"https://www.sandbox.paypal.com/checkoutnow?token={purchase.transaction_id}",
                "package": dict(package),
            }

    async def _execute_purchase(self, body: dict, params: dict) -> dict:
        async with self.session_factory() as session:
            user = await self._current_user(session)
            purchase = await session.get(Purchase, str(body.get("transaction_id") or ""))
            if purchase is None or purchase.user_id != user.user_id:
                raise APIError("Transaction not found", status_code=404)
            if purchase.status != "pending":
                raise APIError("Transaction already completed", status_code=409)
            purchase.status = "completed"
            purchase.completed_at = _utcnow()
            user.credit_balance += purchase.credits
            await session.commit()
            return {"message": "Purchase completed", "credit_balance": user.credit_balance}

    # ── AI conversations ─────────────────────────────────

    async def _tiers(self, body: dict, params: dict) -> dict:
        return {"tiers": [dict(t) for t in CONVERSATION_TIERS], "free_access": False}

    async def _start_conversation(self, body: dict, params: dict) -> dict:
        business_id = body.get("business_id")
        if not business_id:
            raise APIError("business_id is required", status_code=400)
        tier_id = body.get("tier")
        if tier_id:
            tier = next((t for t in CONVERSATION_TIERS if t["id"] == tier_id), None)
            if tier is None:
                raise APIError("Unknown tier", status_code=400)
            if tier["price"] > 0:
                raise PaymentRequiredError(
                    "Payment required",
                    status_code=402,
                    payload={"price": tier["price"], "tier_name": tier["name"]},
                )

        async with self.session_factory() as session:
            conversation = AIConversation(
                conversation_id=_new_id(),
                business_id=str(business_id),
                tier=tier_id,
                state="running",
                total_messages=0,
                current_round=1,
                last_activity=_utcnow(),
            )
            session.add(conversation)
            await session.commit()
            return {"conversation_id": conversation.conversation_id, "state": conversation.state}

    async def _conversation(self, session, conversation_id: str) -> AIConversation:
        conversation = await session.get(AIConversation, conversation_id)
        if conversation is None:
            raise APIError("Conversation not found", status_code=404)
        return conversation

    async def _handle_conversation_action(self, body: dict, params: dict) -> dict:
        new_state = {"pause": "paused", "resume": "running", "stop": "stopped", "reset": "stopped"}[params["action"]]
        async with self.session_factory() as session:
            conversation = await self._conversation(session, params["conversation_id"])
            conversation.state = new_state
            if params["action"] == "reset":
                conversation.total_messages = 0
                conversation.current_round = 0
            conversation.last_activity = _utcnow()
            await session.commit()
            return {"conversation_id": conversation.conversation_id, "state": conversation.state}

    async def _conversation_status(self, body: dict, params: dict) -> dict:
        async with self.session_factory() as session:
            conversation = await self._conversation(session, params["conversation_id"])
            return conversation.status_to_api()

    async def _conversation_messages(self, body: dict, params: dict) -> dict:
        async with self.session_factory() as session:
            await self._conversation(session, params["conversation_id"])
            return {"messages": []}

    # ── Informational ────────────────────────────────────

    async def _session_info(self, body: dict, params: dict) -> dict:
        return {"session_id": "mock-session", "fingerprint": "mock-fingerprint", "mode": "mock"}

    async def _contact(self, body: dict, params: dict) -> dict:
        return dict(CONTACT_INFO)

    async def _legal_pages(self, body: dict, params: dict) -> dict:
        return {
            "pages": [
                {"slug": slug, "title": title, "description": description}
                for slug, (title, description) in LEGAL_PAGES.items()
            ]
        }

    async def _legal_page(self, body: dict, params: dict) -> dict:
        page = LEGAL_PAGES.get(params["slug"])
        if page is None:
            raise APIError("Legal page not found", status_code=404)
        title, description = page
        return {"slug": params["slug"], "title": title, "content": description}

    async def _config(self, body: dict, params: dict) -> dict:
        return {"mock_mode": True, "api_base_url": settings.api_base_url}
