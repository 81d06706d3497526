"""Errors raised by backend clients."""

FALLBACK_MESSAGE = "API request failed"


class APIError(Exception):
    """A backend call failed.

    ``message`` is the server-provided ``message`` field when there was one,
    otherwise ``FALLBACK_MESSAGE``.
    """

    def __init__(self, message: str = FALLBACK_MESSAGE, status_code: int | None = None, payload=None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload

    @classmethod
    def from_response(cls, status_code: int, payload) -> "APIError":
        message = None
        if isinstance(payload, dict):
            message = payload.get("message")
        if not message:
            message = FALLBACK_MESSAGE
        if status_code == 402:
            return PaymentRequiredError(message, status_code=status_code, payload=payload)
        return cls(message, status_code=status_code, payload=payload)


class PaymentRequiredError(APIError):
    """HTTP 402 from the conversation tiers: the selected tier must be paid for."""

    @property
    def price(self) -> float | None:
        if isinstance(self.payload, dict):
            return self.payload.get("price")
        return None

    @property
    def tier_name(self) -> str | None:
        if isinstance(self.payload, dict):
            return self.payload.get("tier_name")
        return None
