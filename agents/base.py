import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from schemas import Audience, Business


@dataclass
class AgentContext:
    """What every persona is asked to persuade about."""

    business: Business
    audience: Optional[Audience] = None
    objective: str = ""

    @property
    def business_context(self) -> str:
        return f"{self.business.name} ({self.business.industry_category})"

    @property
    def audience_context(self) -> str:
        return self.audience.display_description if self.audience else ""

    def template_fields(self) -> dict:
        return {
            "business": self.business.name,
            "category": self.business.industry_category,
            "business_context": self.business_context,
            "audience": self.audience.name if self.audience else "",
            "audience_context": self.audience_context,
            "audience_context_lower": self.audience_context.lower(),
            "objective": self.objective,
        }


class BaseAgent(ABC):
    def __init__(self, key: str, name: str, provider: str, description: str = ""):
        self.key = key
        self.name = name
        self.provider = provider
        self.description = description
        self.logger = logging.getLogger(f"agent.{key}")

    @abstractmethod
    def respond(self, context: AgentContext) -> str:
        """Return this agent's contribution for the given business/audience/objective."""
        ...

    def describe(self) -> dict:
        return {
            "key": self.key,
            "name": self.name,
            "provider": self.provider,
            "description": self.description,
        }
