import logging

from client.base import PersuasionBackend
from client.errors import APIError
from schemas import Business
from views.forms import BusinessForm
from views.listing import BusinessListView

logger = logging.getLogger(__name__)


def businesses_from(data: dict | None) -> list[Business]:
    data = data or {}
    rows = data.get("business_types") or data.get("businesses") or []
    return [Business.from_api(row) for row in rows]


class BusinessManager:
    """Business type list plus the create form."""

    def __init__(self, backend: PersuasionBackend, page_size: int | None = None):
        self.backend = backend
        self.list = BusinessListView(page_size=page_size)
        self.loading = False
        self.error: str | None = None

    @property
    def businesses(self) -> list[Business]:
        return self.list.items

    def find(self, business_type_id: str) -> Business | None:
        return next((b for b in self.businesses if b.business_type_id == business_type_id), None)

    async def load(self) -> list[Business]:
        try:
            data = await self.backend.list_businesses()
        except APIError as e:
            logger.error("Failed to load businesses: %s", e.message)
            self.error = f"Failed to load businesses: {e.message}"
            return self.businesses
        self.error = None
        self.list.set_items(businesses_from(data))
        return self.businesses

    async def create(self, form: BusinessForm) -> Business | None:
        self.loading = True
        try:
            data = await self.backend.create_business(form.model_dump())
        except APIError as e:
            logger.error("Failed to create business: %s", e.message)
            self.error = f"Failed to create business: {e.message}"
            return None
        finally:
            self.loading = False

        self.error = None
        await self.load()
        created = (data or {}).get("business_type")
        return Business.from_api(created) if created else None
