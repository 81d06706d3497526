import logging

from client.base import PersuasionBackend
from client.errors import APIError
from schemas import Audience
from views.forms import AudienceForm, ManualAudienceForm
from views.listing import AudienceListView

logger = logging.getLogger(__name__)


def audiences_from(data: dict | None) -> list[Audience]:
    data = data or {}
    rows = data.get("target_audiences") or data.get("audiences") or []
    return [Audience.from_api(row) for row in rows]


class AudienceManager:
    """Target audience list plus structured and free-text creation."""

    def __init__(self, backend: PersuasionBackend, page_size: int | None = None):
        self.backend = backend
        self.list = AudienceListView(page_size=page_size)
        self.loading = False
        self.error: str | None = None

    @property
    def audiences(self) -> list[Audience]:
        return self.list.items

    def find(self, audience_id: str) -> Audience | None:
        return next((a for a in self.audiences if a.audience_id == audience_id), None)

    async def load(self) -> list[Audience]:
        try:
            data = await self.backend.list_audiences()
        except APIError as e:
            logger.error("Failed to load audiences: %s", e.message)
            self.error = f"Failed to load audiences: {e.message}"
            return self.audiences
        self.error = None
        self.list.set_items(audiences_from(data))
        return self.audiences

    async def _create(self, action: str, call) -> Audience | None:
        self.loading = True
        try:
            data = await call
        except APIError as e:
            logger.error("Failed to create %s: %s", action, e.message)
            self.error = f"Failed to create {action}: {e.message}"
            return None
        finally:
            self.loading = False

        self.error = None
        await self.load()
        created = (data or {}).get("target_audience")
        return Audience.from_api(created) if created else None

    async def create(self, form: AudienceForm) -> Audience | None:
        return await self._create("audience", self.backend.create_audience(form.model_dump()))

    async def create_manual(self, form: ManualAudienceForm) -> Audience | None:
        return await self._create(
            "manual audience",
            self.backend.create_manual_audience(form.manual_description, name=form.name),
        )
