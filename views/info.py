"""Header badge, contact details and legal pages."""

import asyncio
import logging
import re

from client.base import PersuasionBackend
from client.errors import APIError
from views.credits import format_credits

logger = logging.getLogger(__name__)

LEGAL_PAGES = [
    {"slug": "terms", "title": "Terms of Service", "description": "Terms and conditions for using our service"},
    {"slug": "privacy", "title": "Privacy Policy", "description": "How we collect and use your information"},
    {"slug": "gdpr", "title": "GDPR Compliance", "description": "Our commitment to data protection"},
    {"slug": "cookies", "title": "Cookie Policy", "description": "How we use cookies and tracking"},
]

FALLBACK_LEGAL_CONTENT = "Legal content for VisitorIntel Cognitive Persuasion Engine."
DEFAULT_SESSION_BADGE = "browser"


def whatsapp_url(number: str | None) -> str | None:
    digits = re.sub(r"[^0-9]", "", number or "")
    return f"https://wa.me/{digits}" if digits else None


class InfoView:
    def __init__(self, backend: PersuasionBackend):
        self.backend = backend
        self.error: str | None = None

    async def header(self) -> dict:
        """Credit balance and the short session badge. Either half may fail on its own."""
        balance, session_info = await asyncio.gather(
            self.backend.get_credit_balance(),
            self.backend.get_session_info(),
            return_exceptions=True,
        )
        credits = 0
        if isinstance(balance, APIError):
            logger.error("Failed to load credit balance: %s", balance.message)
        elif isinstance(balance, BaseException):
            raise balance
        else:
            balance = balance or {}
            credits = balance.get("balance", balance.get("credit_balance")) or 0

        badge = None
        if isinstance(session_info, APIError):
            logger.error("Failed to load session info: %s", session_info.message)
        elif isinstance(session_info, BaseException):
            raise session_info
        elif session_info is not None:
            fingerprint = session_info.get("fingerprint")
            badge = fingerprint[:8] if fingerprint else DEFAULT_SESSION_BADGE

        return {"credit_balance": credits, "credits_display": format_credits(credits), "session_badge": badge}

    async def contact(self) -> dict | None:
        try:
            data = await self.backend.get_contact_info()
        except APIError as e:
            logger.error("Failed to load contact info: %s", e.message)
            self.error = "Failed to load contact information"
            return None
        data = dict(data or {})
        data["whatsapp_url"] = whatsapp_url(data.get("whatsapp"))
        return data

    async def legal_pages(self) -> list[dict]:
        try:
            data = await self.backend.list_legal_pages()
        except APIError as e:
            logger.error("Failed to load legal pages: %s", e.message)
            return list(LEGAL_PAGES)
        return (data or {}).get("pages") or list(LEGAL_PAGES)

    async def legal_page(self, slug: str) -> dict:
        """Page content, or a placeholder page when the backend can't serve it."""
        try:
            data = await self.backend.get_legal_page(slug)
        except APIError as e:
            logger.error("Failed to load legal page: %s", e.message)
            title = next((p["title"] for p in LEGAL_PAGES if p["slug"] == slug), "Legal Page")
            return {"slug": slug, "title": title, "content": FALLBACK_LEGAL_CONTENT}
        return data or {}

    async def config(self) -> dict | None:
        try:
            return await self.backend.get_api_config()
        except APIError as e:
            logger.error("Failed to load API config: %s", e.message)
            self.error = "Failed to load configuration"
            return None
