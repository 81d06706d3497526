"""Session manager: pick a business and audience, run the personas, browse past sessions."""

import asyncio
import logging

from client.base import PersuasionBackend
from client.errors import APIError
from schemas import Audience, Business, Session
from views.audiences import audiences_from
from views.businesses import businesses_from
from views.forms import SessionForm

logger = logging.getLogger(__name__)


class SessionManager:
    def __init__(self, backend: PersuasionBackend):
        self.backend = backend
        self.businesses: list[Business] = []
        self.audiences: list[Audience] = []
        self.sessions: list[Session] = []
        self.selected: Session | None = None
        self.loading = False
        self.error: str | None = None

    async def load(self) -> None:
        """Fetch businesses, audiences and sessions concurrently."""
        try:
            business_data, audience_data, session_data = await asyncio.gather(
                self.backend.list_businesses(),
                self.backend.list_audiences(),
                self.backend.list_sessions(),
            )
        except APIError as e:
            logger.error("Failed to load data: %s", e.message)
            self.error = f"Failed to load data: {e.message}"
            return
        self.businesses = businesses_from(business_data)
        self.audiences = audiences_from(audience_data)
        self.sessions = [Session.from_api(s) for s in (session_data or {}).get("sessions") or []]

    async def create(self, form: SessionForm) -> Session | None:
        self.loading = True
        self.error = None
        try:
            result = await self.backend.create_session(form.model_dump())
        except APIError as e:
            logger.error("Failed to create session: %s", e.message)
            self.error = e.message
            return None
        finally:
            self.loading = False

        self.selected = Session.from_api((result or {}).get("session") or {})
        await self.load()
        return self.selected

    async def select(self, session_id: str) -> Session | None:
        """Show a session, fetching the full record when its responses are missing."""
        session = next((s for s in self.sessions if s.session_id == session_id), None)
        if session is not None and session.ai_responses:
            self.selected = session
            return session
        try:
            data = await self.backend.get_session(session_id)
        except APIError as e:
            logger.error("Failed to load session details: %s", e.message)
            self.error = e.message
            return None
        self.selected = Session.from_api((data or {}).get("session") or {})
        return self.selected

    async def regenerate(self) -> Session | None:
        if self.selected is None:
            return None
        self.loading = True
        try:
            result = await self.backend.regenerate_session(self.selected.session_id)
        except APIError as e:
            logger.error("Failed to regenerate responses: %s", e.message)
            self.error = e.message
            return None
        finally:
            self.loading = False

        result = result or {}
        self.selected.ai_responses = result.get("ai_responses")
        self.selected.credits_consumed += result.get("credits_consumed") or 0
        await self.load()
        return self.selected

    def snapshot(self) -> dict:
        return {
            "businesses": [b.to_dict() for b in self.businesses],
            "audiences": [a.to_dict() for a in self.audiences],
            "sessions": [s.to_dict() for s in self.sessions],
            "selected": self.selected.to_dict() if self.selected else None,
            "loading": self.loading,
            "error": self.error,
        }
