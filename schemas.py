"""Plain records exchanged with the backend and held in view state."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional


SESSION_STATES = ("stopped", "running", "paused", "completed")


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp from the backend; None when absent or malformed."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    try:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Business:
    business_type_id: str
    name: str
    description: str = ""
    industry_category: str = ""
    is_custom: bool = False
    created_at: Optional[datetime] = None
    total_sessions: int = 0
    total_audiences: int = 0
    active_sessions: int = 0

    @classmethod
    def from_api(cls, data: dict) -> "Business":
        return cls(
            business_type_id=str(data.get("business_type_id") or data.get("id") or ""),
            name=data.get("name") or "",
            description=data.get("description") or "",
            industry_category=data.get("industry_category") or "",
            is_custom=bool(data.get("is_custom", False)),
            created_at=parse_timestamp(data.get("created_at")),
            total_sessions=int(data.get("total_sessions") or 0),
            total_audiences=int(data.get("total_audiences") or 0),
            active_sessions=int(data.get("active_sessions") or 0),
        )

    @property
    def has_active_sessions(self) -> bool:
        return self.active_sessions > 0

    def to_dict(self) -> dict:
        return {
            "business_type_id": self.business_type_id,
            "name": self.name,
            "description": self.description,
            "industry_category": self.industry_category,
            "is_custom": self.is_custom,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "total_sessions": self.total_sessions,
            "total_audiences": self.total_audiences,
            "active_sessions": self.active_sessions,
        }


@dataclass
class Audience:
    audience_id: str
    name: str
    description: str = ""
    manual_description: str = ""
    is_custom: bool = False
    created_at: Optional[datetime] = None

    @classmethod
    def from_api(cls, data: dict) -> "Audience":
        return cls(
            audience_id=str(data.get("audience_id") or data.get("id") or ""),
            name=data.get("name") or "",
            description=data.get("description") or "",
            manual_description=data.get("manual_description") or "",
            is_custom=bool(data.get("is_custom", False)),
            created_at=parse_timestamp(data.get("created_at")),
        )

    @property
    def display_description(self) -> str:
        """Free-text description wins over the structured one."""
        return self.manual_description or self.description

    def to_dict(self) -> dict:
        return {
            "audience_id": self.audience_id,
            "name": self.name,
            "description": self.description,
            "manual_description": self.manual_description,
            "is_custom": self.is_custom,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


@dataclass
class Message:
    """One entry in a live session transcript."""

    id: int
    type: str  # system / ai / error
    content: str
    agent_type: Optional[str] = None
    provider: Optional[str] = None
    timestamp: datetime = field(default_factory=_utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "type": self.type,
            "agent_type": self.agent_type,
            "content": self.content,
            "provider": self.provider,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass
class Session:
    session_id: str
    business_type_id: str = ""
    audience_id: str = ""
    mission_objective: str = ""
    ai_responses: Optional[dict] = None
    credits_consumed: float = 0
    status: str = "stopped"
    created_at: Optional[datetime] = None

    @classmethod
    def from_api(cls, data: dict) -> "Session":
        status = data.get("status") or "stopped"
        if status not in SESSION_STATES:
            status = "stopped"
        return cls(
            session_id=str(data.get("session_id") or data.get("id") or ""),
            business_type_id=str(data.get("business_type_id") or ""),
            audience_id=str(data.get("audience_id") or ""),
            mission_objective=data.get("mission_objective") or "",
            ai_responses=data.get("ai_responses"),
            credits_consumed=data.get("credits_consumed") or 0,
            status=status,
            created_at=parse_timestamp(data.get("created_at")),
        )

    def to_dict(self) -> dict:
        return {
            "session_id": self.session_id,
            "business_type_id": self.business_type_id,
            "audience_id": self.audience_id,
            "mission_objective": self.mission_objective,
            "ai_responses": self.ai_responses,
            "credits_consumed": self.credits_consumed,
            "status": self.status,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


@dataclass
class CreditPackage:
    id: str
    name: str
    credits: int
    price: float
    price_per_credit: float
    description: str = ""

    @classmethod
    def from_api(cls, data: dict) -> "CreditPackage":
        credits = int(data.get("credits") or 0)
        price = float(data.get("price") or 0.0)
        per_credit = data.get("price_per_credit")
        if per_credit is None:
            per_credit = round(price / credits, 2) if credits else 0.0
        return cls(
            id=str(data.get("id") or ""),
            name=data.get("name") or "",
            credits=credits,
            price=price,
            price_per_credit=float(per_credit),
            description=data.get("description") or "",
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "credits": self.credits,
            "price": self.price,
            "price_per_credit": self.price_per_credit,
            "description": self.description,
        }


@dataclass
class User:
    user_id: str
    email: str
    credit_balance: float = 0
    created_at: Optional[datetime] = None

    @classmethod
    def from_api(cls, data: dict) -> "User":
        return cls(
            user_id=str(data.get("user_id") or data.get("id") or ""),
            email=data.get("email") or "",
            credit_balance=data.get("credit_balance") or 0,
            created_at=parse_timestamp(data.get("created_at")),
        )

    def to_dict(self) -> dict:
        return {
            "user_id": self.user_id,
            "email": self.email,
            "credit_balance": self.credit_balance,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
