"""Abstract backend interface shared by the HTTP client and the mock backend."""

from abc import ABC, abstractmethod
from typing import Any
from urllib.parse import quote, urlencode


class PersuasionBackend(ABC):
    """Everything the console asks of the backend.

    Implementations only provide ``request``; the typed operations below map
    onto the backend's REST paths and are shared by every implementation.

    Implementations: HTTPBackend, MockBackend
    """

    @property
    @abstractmethod
    def backend_name(self) -> str:
        """Return the backend name for logging/tracking."""
        ...

    @abstractmethod
    async def request(self, endpoint: str, method: str = "GET", body: dict | None = None) -> Any:
        """Send one request and return the decoded JSON body.

        Args:
            endpoint: Path beginning with ``/api/``, including any query string.
            method: HTTP method.
            body: JSON-serialisable request body.

        Raises:
            APIError: on a non-2xx status or transport failure.
        """
        ...

    async def close(self) -> None:
        """Release any held connections."""

    # ── Auth ─────────────────────────────────────────────

    async def register(self, email: str, password: str) -> dict:
        return await self.request("/api/auth/register", "POST", {"email": email, "password": password})

    async def login(self, email: str, password: str) -> dict:
        return await self.request("/api/auth/login", "POST", {"email": email, "password": password})

    async def get_profile(self) -> dict:
        return await self.request("/api/auth/profile")

    def set_token(self, token: str | None) -> None:
        """Install a bearer token when the backend signs requests with one."""

    # ── Businesses & audiences ───────────────────────────

    async def list_businesses(self) -> dict:
        return await self.request("/api/businesses")

    async def create_business(self, data: dict) -> dict:
        return await self.request("/api/businesses", "POST", data)

    async def list_audiences(self) -> dict:
        return await self.request("/api/audiences")

    async def create_audience(self, data: dict) -> dict:
        return await self.request("/api/audiences", "POST", data)

    async def create_manual_audience(self, manual_description: str, name: str | None = None) -> dict:
        return await self.request(
            "/api/audiences/manual",
            "POST",
            {"manual_description": manual_description, "name": name},
        )

    # ── Persuasion sessions ──────────────────────────────

    async def create_session(self, data: dict) -> dict:
        return await self.request("/api/sessions", "POST", data)

    async def list_sessions(self) -> dict:
        return await self.request("/api/sessions")

    async def get_session(self, session_id: str) -> dict:
        return await self.request(f"/api/sessions/{quote(str(session_id), safe='')}")

    async def regenerate_session(self, session_id: str) -> dict:
        return await self.request(f"/api/sessions/{quote(str(session_id), safe='')}/regenerate", "POST")

    # ── Credits ──────────────────────────────────────────

    async def get_credit_packages(self) -> dict:
        return await self.request("/api/payments/packages")

    async def get_credit_balance(self) -> dict:
        return await self.request("/api/payments/balance")

    async def initiate_purchase(self, package_id: str) -> dict:
        return await self.request("/api/payments/purchase", "POST", {"package_id": package_id})

    async def complete_purchase(self, transaction_id: str) -> dict:
        return await self.request("/api/payments/execute", "POST", {"transaction_id": transaction_id})

    # ── AI conversations (dashboard) ─────────────────────

    async def start_conversation(self, business_id: str, tier: str | None = None, email: str | None = None) -> dict:
        body: dict = {"business_id": business_id}
        if tier:
            body["tier"] = tier
        if email:
            body["email"] = email
        return await self.request("/api/ai-conversations/start", "POST", body)

    async def _conversation_action(self, conversation_id: str, action: str) -> dict:
        return await self.request(f"/api/ai-conversations/{quote(str(conversation_id), safe='')}/{action}", "POST")

    async def pause_conversation(self, conversation_id: str) -> dict:
        return await self._conversation_action(conversation_id, "pause")

    async def resume_conversation(self, conversation_id: str) -> dict:
        return await self._conversation_action(conversation_id, "resume")

    async def stop_conversation(self, conversation_id: str) -> dict:
        return await self._conversation_action(conversation_id, "stop")

    async def reset_conversation(self, conversation_id: str) -> dict:
        return await self._conversation_action(conversation_id, "reset")

    async def get_conversation_status(self, conversation_id: str) -> dict:
        return await self.request(f"/api/ai-conversations/{quote(str(conversation_id), safe='')}/status")

    async def get_conversation_messages(self, conversation_id: str) -> dict:
        return await self.request(f"/api/ai-conversations/{quote(str(conversation_id), safe='')}/messages")

    async def list_conversation_tiers(self, email: str = "") -> dict:
        return await self.request(f"/api/ai-conversations/tiers?{urlencode({'email': email})}")

    # ── Informational ────────────────────────────────────

    async def get_session_info(self) -> dict:
        return await self.request("/api/session")

    async def get_contact_info(self) -> dict:
        return await self.request("/api/contact")

    async def list_legal_pages(self) -> dict:
        return await self.request("/api/legal")

    async def get_legal_page(self, slug: str) -> dict:
        return await self.request(f"/api/legal/{quote(slug, safe='')}")

    async def get_api_config(self) -> dict:
        return await self.request("/api/config")
