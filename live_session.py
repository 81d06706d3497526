"""Live session driver — the simulated five-agent persuasion run.

Given a mission objective, a business and an audience, the five personas
answer one after another. Each one shows a typing indicator for a random
2-5 s before its message is posted. Nothing runs concurrently: the agents are
steps on a StepRunner, so each one's completion can be awaited and the whole
run can be cancelled.
"""

import asyncio
import itertools
import logging
import random
import time
from datetime import datetime, timezone
from typing import Callable

from agents.base import AgentContext
from agents.personas import AGENT_ORDER, TemplateAgent, build_personas
from agents.steps import Step, StepRunner
from config import settings
from schemas import Audience, Business, Message

logger = logging.getLogger(__name__)

ERROR_MESSAGE = "Failed to start AI session. Please try again."


def format_duration(seconds: int) -> str:
    """``75 -> "1:15"``."""
    mins, secs = divmod(max(int(seconds), 0), 60)
    return f"{mins}:{secs:02d}"


class LiveSessionDriver:
    """State for one live chat: messages, typing indicators and running stats.

    States: ``idle`` → ``running`` (per agent: typing → posted) → ``idle``.
    """

    def __init__(
        self,
        business: Business,
        audience: Audience,
        personas: dict[str, TemplateAgent] | None = None,
        rng: random.Random | None = None,
        sleep: Callable = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
        min_delay: float | None = None,
        max_delay: float | None = None,
        gap: float | None = None,
        regenerate_delay: float | None = None,
    ):
        self.business = business
        self.audience = audience
        self.rng = rng or random.Random()
        self.personas = personas or build_personas(self.rng)
        self._sleep = sleep
        self._clock = clock
        self.min_delay = settings.agent_min_delay if min_delay is None else min_delay
        self.max_delay = settings.agent_max_delay if max_delay is None else max_delay
        self.gap = settings.agent_gap if gap is None else gap
        self.regenerate_delay = settings.regenerate_delay if regenerate_delay is None else regenerate_delay

        self.state = "idle"
        self.objective = ""
        self.messages: list[Message] = []
        self.typing: set[str] = set()
        self.credits_used = 0
        self.messages_count = 0
        self.started_at: float | None = None

        self._ids = itertools.count(1)
        self._runner = StepRunner()
        self._task: asyncio.Task | None = None
        self._cancel_pending = False
        self._listeners: list[Callable[["LiveSessionDriver"], None]] = []

    # ── Observation ──────────────────────────────────────

    def subscribe(self, listener: Callable[["LiveSessionDriver"], None]) -> Callable[[], None]:
        """Call ``listener(driver)`` after every state change. Returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception:
                logger.warning("Live session listener failed", exc_info=True)

    def handle(self, agent_type: str) -> asyncio.Future:
        """Future resolved with the agent's posted Message once its step completes."""
        return self._runner.handle(agent_type)

    @property
    def duration(self) -> int:
        if self.started_at is None:
            return 0
        return int(self._clock() - self.started_at)

    @property
    def is_running(self) -> bool:
        return self.state == "running"

    # ── Session run ──────────────────────────────────────

    def _context(self) -> AgentContext:
        return AgentContext(business=self.business, audience=self.audience, objective=self.objective)

    def _post(self, type_: str, content: str, agent_type: str | None = None, provider: str | None = None) -> Message:
        message = Message(
            id=next(self._ids),
            type=type_,
            content=content,
            agent_type=agent_type,
            provider=provider,
            timestamp=datetime.now(timezone.utc),
        )
        self.messages.append(message)
        self._notify()
        return message

    def _set_typing(self, agent_type: str, typing: bool) -> None:
        if typing:
            self.typing.add(agent_type)
        else:
            self.typing.discard(agent_type)
        self._notify()

    def _agent_step(self, agent_type: str, pause_first: bool) -> Step:
        agent = self.personas[agent_type]

        async def action() -> Message:
            if pause_first:
                await self._sleep(self.gap)
            self._set_typing(agent_type, True)
            try:
                delay = self.min_delay + self.rng.random() * (self.max_delay - self.min_delay)
                await self._sleep(delay)
            finally:
                self._set_typing(agent_type, False)

            content = agent.respond(self._context())
            message = self._post("ai", content, agent_type=agent_type, provider=agent.provider)
            self.credits_used += 1
            self.messages_count += 1
            agent.logger.debug("Posted message %d", message.id)
            self._notify()
            return message

        return Step(name=agent_type, action=action)

    async def start(self, objective: str) -> list[Message]:
        """Run the whole session; returns the transcript.

        A blank objective does nothing. Any failure appends one error message
        and halts the run.
        """
        if not objective or not objective.strip():
            self._cancel_pending = False
            return self.messages
        if self.is_running:
            raise RuntimeError("Session is already running")

        self.objective = objective
        self.state = "running"
        if self.started_at is None:
            self.started_at = self._clock()
        self.messages = []
        logger.info(
            "Live session started: business=%s audience=%s objective=%r",
            self.business.name, self.audience.name, objective,
        )
        self._post("system", f"Mission Started: {objective}")

        try:
            steps = [
                self._agent_step(agent_type, pause_first=i > 0)
                for i, agent_type in enumerate(AGENT_ORDER)
            ]
            if self._cancel_pending:
                logger.info("Live session cancelled before the first agent")
            else:
                await self._runner.run(steps)
                if self._runner.cancelled:
                    logger.info("Live session cancelled after %d messages", self.messages_count)
        except Exception as e:
            logger.error("Session error: %s", e)
            self._post("error", ERROR_MESSAGE)
        finally:
            self._cancel_pending = False
            self.typing.clear()
            self.state = "idle"
            self._notify()

        return self.messages

    def start_background(self, objective: str) -> asyncio.Task:
        """Start the run as a task on the current loop and return it."""
        self._task = asyncio.create_task(self.start(objective))
        return self._task

    def cancel(self) -> None:
        """Stop the run; the agent currently typing never posts.

        A cancel that arrives before the first agent step (a background run
        that has not been scheduled yet) is held until the run reaches it.
        """
        if self._runner.running:
            self._runner.cancel()
        elif self.is_running or (self._task is not None and not self._task.done()):
            self._cancel_pending = True

    async def close(self) -> None:
        """Cancel and wait for any background run to settle."""
        self.cancel()
        if self._task is not None:
            await asyncio.gather(self._task, return_exceptions=True)
            self._task = None
        self._listeners.clear()

    # ── Regeneration ─────────────────────────────────────

    async def regenerate(self, agent_type: str) -> Message | None:
        """Re-run one persona and replace its message content in place.

        Other messages, including their timestamps, are left as they are.
        Returns the updated message, or None when that agent has not posted yet.
        """
        if agent_type not in self.personas:
            raise ValueError(f"Unknown agent type: {agent_type}")

        self._set_typing(agent_type, True)
        try:
            await self._sleep(self.regenerate_delay)
        finally:
            self._set_typing(agent_type, False)

        content = self.personas[agent_type].respond(self._context())
        for message in self.messages:
            if message.type == "ai" and message.agent_type == agent_type:
                message.content = content
                message.timestamp = datetime.now(timezone.utc)
                self._notify()
                return message
        return None

    # ── View model ───────────────────────────────────────

    def snapshot(self) -> dict:
        return {
            "state": self.state,
            "objective": self.objective,
            "business": self.business.name,
            "audience": self.audience.name,
            "typing": [a for a in AGENT_ORDER if a in self.typing],
            "messages": [m.to_dict() for m in self.messages],
            "agents": {key: agent.describe() for key, agent in self.personas.items()},
            "stats": {
                "credits_used": self.credits_used,
                "messages_count": self.messages_count,
                "duration": self.duration,
                "duration_display": format_duration(self.duration),
            },
        }
