"""Persona agents, dashboard debate agents and the step runner that sequences them."""

from agents.base import AgentContext, BaseAgent
from agents.debate import DEBATE_AGENTS, DebateAgent, speaker_for
from agents.personas import AGENT_ORDER, RESPONSE_KEYS, TemplateAgent, build_personas, generate_all
from agents.steps import Step, StepRunner

__all__ = [
    "AgentContext",
    "BaseAgent",
    "DEBATE_AGENTS",
    "DebateAgent",
    "speaker_for",
    "AGENT_ORDER",
    "RESPONSE_KEYS",
    "TemplateAgent",
    "build_personas",
    "generate_all",
    "Step",
    "StepRunner",
]
