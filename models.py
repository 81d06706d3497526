"""SQLAlchemy models — the tables behind the mock backend."""

from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Float,
    Integer,
    String,
    Text,
    JSON,
)
from sqlalchemy.orm import DeclarativeBase


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def isoformat(value: datetime | None) -> str | None:
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat()


class Base(DeclarativeBase):
    pass


class MockUser(Base):
    """Registered accounts. Passwords are stored as given: this is a demo stand-in."""

    __tablename__ = "users"

    user_id = Column(String(64), primary_key=True)
    email = Column(String(256), nullable=False, unique=True, index=True)
    password = Column(String(256), nullable=False)
    credit_balance = Column(Float, default=0.0, nullable=False)
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    def to_api(self) -> dict:
        return {
            "user_id": self.user_id,
            "email": self.email,
            "credit_balance": self.credit_balance,
            "created_at": isoformat(self.created_at),
        }


class BusinessType(Base):
    """Predefined (user_id NULL) and user-created business types."""

    __tablename__ = "business_types"

    business_type_id = Column(String(64), primary_key=True)
    user_id = Column(String(64), nullable=True, index=True)
    name = Column(String(256), nullable=False)
    description = Column(Text, nullable=True)
    industry_category = Column(String(128), nullable=True)
    is_custom = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, nullable=True)

    def to_api(self) -> dict:
        return {
            "business_type_id": self.business_type_id,
            "user_id": self.user_id,
            "name": self.name,
            "description": self.description,
            "industry_category": self.industry_category,
            "is_custom": self.is_custom,
            "created_at": isoformat(self.created_at),
        }


class TargetAudience(Base):
    """Predefined (user_id NULL) and user-created audiences."""

    __tablename__ = "target_audiences"

    audience_id = Column(String(64), primary_key=True)
    user_id = Column(String(64), nullable=True, index=True)
    name = Column(String(256), nullable=False)
    description = Column(Text, nullable=True)
    manual_description = Column(Text, nullable=True)
    is_custom = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, nullable=True)

    def to_api(self) -> dict:
        return {
            "audience_id": self.audience_id,
            "user_id": self.user_id,
            "name": self.name,
            "description": self.description,
            "manual_description": self.manual_description,
            "is_custom": self.is_custom,
            "created_at": isoformat(self.created_at),
        }


class PersuasionSession(Base):
    """One run of the persona generator against a business + audience + objective."""

    __tablename__ = "persuasion_sessions"

    session_id = Column(String(64), primary_key=True)
    user_id = Column(String(64), nullable=False, index=True)
    business_type_id = Column(String(64), nullable=False)
    audience_id = Column(String(64), nullable=False)
    mission_objective = Column(Text, nullable=False)
    ai_responses = Column(JSON, nullable=True)  # {"logic_agent": "...", ...}
    credits_consumed = Column(Integer, default=0, nullable=False)
    status = Column(String(32), default="completed", nullable=False)
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    def to_api(self) -> dict:
        return {
            "session_id": self.session_id,
            "business_type_id": self.business_type_id,
            "audience_id": self.audience_id,
            "mission_objective": self.mission_objective,
            "ai_responses": self.ai_responses,
            "credits_consumed": self.credits_consumed,
            "status": self.status,
            "created_at": isoformat(self.created_at),
        }


class AIConversation(Base):
    """Dashboard debate state; messages are fabricated client-side."""

    __tablename__ = "ai_conversations"

    conversation_id = Column(String(64), primary_key=True)
    business_id = Column(String(64), nullable=False)
    tier = Column(String(32), nullable=True)
    state = Column(String(32), default="running", nullable=False)  # running / paused / stopped / completed
    total_messages = Column(Integer, default=0, nullable=False)
    current_round = Column(Integer, default=1, nullable=False)
    last_activity = Column(DateTime, default=_utcnow, nullable=False)

    def status_to_api(self) -> dict:
        return {
            "conversation_id": self.conversation_id,
            "state": self.state,
            "total_messages": self.total_messages,
            "current_round": self.current_round,
            "last_activity": isoformat(self.last_activity),
        }


class Purchase(Base):
    """Pending and executed credit purchases."""

    __tablename__ = "purchases"

    transaction_id = Column(String(64), primary_key=True)
    user_id = Column(String(64), nullable=False, index=True)
    package_id = Column(String(32), nullable=False)
    credits = Column(Integer, nullable=False)
    price = Column(Float, nullable=False)
    status = Column(String(32), default="pending", nullable=False)  # pending / completed
    created_at = Column(DateTime, default=_utcnow, nullable=False)
    completed_at = Column(DateTime, nullable=True)
