"""Console — one backend plus every view model built on it."""

import logging

from client.base import PersuasionBackend
from conversation import ConversationController
from live_session import LiveSessionDriver
from views.audiences import AudienceManager
from views.auth import AuthState, TokenStore
from views.businesses import BusinessManager
from views.credits import CreditPricingView
from views.info import InfoView
from views.sessions import SessionManager

logger = logging.getLogger(__name__)


class Console:
    """Holds the view models for one console process.

    Every view receives ``backend`` explicitly; swapping the backend means
    building a new Console.
    """

    def __init__(self, backend: PersuasionBackend, token_store: TokenStore | None = None, **driver_options):
        self.backend = backend
        self.auth = AuthState(backend, token_store)
        self.businesses = BusinessManager(backend)
        self.audiences = AudienceManager(backend)
        self.sessions = SessionManager(backend)
        self.credits = CreditPricingView(backend)
        self.info = InfoView(backend)
        self.conversation = ConversationController(backend)
        self.live: LiveSessionDriver | None = None
        # Forwarded to every LiveSessionDriver (delays, rng, sleep)
        self._driver_options = driver_options

    async def start_live(self, business_type_id: str, audience_id: str, objective: str) -> LiveSessionDriver | None:
        """Start a live session in the background, replacing any previous one.

        Returns None when the business or audience is unknown.
        """
        business = self.businesses.find(business_type_id)
        if business is None:
            await self.businesses.load()
            business = self.businesses.find(business_type_id)
        audience = self.audiences.find(audience_id)
        if audience is None:
            await self.audiences.load()
            audience = self.audiences.find(audience_id)
        if business is None or audience is None:
            return None

        if self.live is not None:
            await self.live.close()
        self.live = LiveSessionDriver(business, audience, **self._driver_options)
        self.live.start_background(objective)
        return self.live

    async def close(self) -> None:
        if self.live is not None:
            await self.live.close()
        await self.conversation.close()
        await self.backend.close()
        logger.info("Console closed (%s)", self.backend.backend_name)
