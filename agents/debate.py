"""Debate agents for the conversation dashboard.

Until the backend streams real replies, the dashboard fabricates one message
per poll tick, rotating through these four agents.
"""

from agents.base import AgentContext, BaseAgent


class DebateAgent(BaseAgent):
    def __init__(self, key: str, name: str, model: str, role: str, api_service: str):
        super().__init__(key=key, name=name, provider=model, description=role)
        self.api_service = api_service

    @property
    def model(self) -> str:
        return self.provider

    def respond(self, context: AgentContext, message_number: int = 1) -> str:
        return (
            f"This is a simulated AI response about {context.business.name}. "
            f"Message {message_number} analyzing the business from the perspective of "
            f"{self.description.lower()}."
        )

    def describe(self) -> dict:
        info = super().describe()
        info["model"] = self.model
        info["api_service"] = self.api_service
        return info


DEBATE_AGENTS = [
    DebateAgent(
        "promoter", "Business Promoter", "GPT-4",
        "Advocate for the business with factual, compelling arguments", "openai",
    ),
    DebateAgent(
        "analyst", "Critical Analyst", "Claude-3",
        "Ask tough questions and challenge claims objectively", "anthropic",
    ),
    DebateAgent(
        "evaluator", "Neutral Evaluator", "Gemini Pro",
        "Provide balanced analysis and mediate discussions", "google",
    ),
    DebateAgent(
        "researcher", "Market Researcher", "Perplexity",
        "Provide real-time market data and competitive analysis", "perplexity",
    ),
]


def speaker_for(message_index: int) -> DebateAgent:
    """Agents take turns in a fixed rotation."""
    return DEBATE_AGENTS[message_index % len(DEBATE_AGENTS)]
