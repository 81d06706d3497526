"""Credit packages, balance and the (simulated) PayPal purchase flow."""

import asyncio
import logging
from typing import Callable

from client.base import PersuasionBackend
from client.errors import APIError
from config import settings
from schemas import CreditPackage

logger = logging.getLogger(__name__)

PACKAGE_BADGES = {
    "professional": "Most Popular",
    "enterprise": "Best Value",
}


def format_credits(amount) -> str:
    return f"${float(amount or 0):.2f} Credits"


class CreditPricingView:
    def __init__(
        self,
        backend: PersuasionBackend,
        sleep: Callable = asyncio.sleep,
        redirect_delay: float | None = None,
    ):
        self.backend = backend
        self._sleep = sleep
        self.redirect_delay = settings.purchase_redirect_delay if redirect_delay is None else redirect_delay
        self.packages: list[CreditPackage] = []
        self.balance: float = 0
        self.purchasing: str | None = None
        self.loading = False
        self.error: str | None = None

    async def load(self) -> None:
        self.loading = True
        try:
            packages, balance = await asyncio.gather(
                self.backend.get_credit_packages(),
                self.backend.get_credit_balance(),
            )
        except APIError as e:
            logger.error("Failed to load credit data: %s", e.message)
            self.error = "Failed to load credit information"
            return
        finally:
            self.loading = False
        self.packages = [CreditPackage.from_api(p) for p in (packages or {}).get("packages") or []]
        self.balance = (balance or {}).get("credit_balance") or 0

    async def purchase(self, package_id: str) -> bool:
        """Initiate a purchase; when the backend hands back a PayPal URL, wait out
        the simulated redirect, complete the transaction and reload."""
        self.purchasing = package_id
        self.error = None
        try:
            try:
                response = await self.backend.initiate_purchase(package_id)
            except APIError as e:
                logger.error("Purchase failed: %s", e.message)
                self.error = e.message or "Purchase failed"
                return False

            response = response or {}
            if not response.get("paypal_url"):
                return False

            await self._sleep(self.redirect_delay)
            try:
                await self.backend.complete_purchase(response.get("transaction_id"))
            except APIError as e:
                logger.error("Failed to complete purchase: %s", e.message)
                self.error = "Failed to complete purchase"
                return False
            logger.info("Purchase of %s completed", package_id)
            await self.load()
            return True
        finally:
            self.purchasing = None

    def snapshot(self) -> dict:
        return {
            "balance": self.balance,
            "balance_display": format_credits(self.balance),
            "packages": [
                {**p.to_dict(), "badge": PACKAGE_BADGES.get(p.id)}
                for p in self.packages
            ],
            "purchasing": self.purchasing,
            "loading": self.loading,
            "error": self.error,
        }
