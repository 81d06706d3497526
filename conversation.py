"""Conversation controller — the dashboard's multi-agent debate.

The backend owns the conversation lifecycle (start/pause/resume/stop/reset);
the controller mirrors its state, runs the poll loop and keeps the transcript
and stats the dashboard renders.
"""

import asyncio
import itertools
import logging
from datetime import datetime, timezone
from typing import Callable

from agents.base import AgentContext
from agents.debate import DEBATE_AGENTS, speaker_for
from client.base import PersuasionBackend
from client.errors import APIError, PaymentRequiredError
from config import settings
from schemas import Business, Message, parse_timestamp

logger = logging.getLogger(__name__)

NO_BUSINESS_ERROR = "Please select a business first"

# Simulated seconds of debate per fabricated message
SECONDS_PER_MESSAGE = 5


def _empty_stats(current_round: int = 0) -> dict:
    return {"total_messages": 0, "current_round": current_round, "duration": 0}


class ConversationController:
    """State for one dashboard conversation.

    States: ``stopped`` → ``running`` ⇄ ``paused``; ``running`` → ``completed``
    once the message limit is reached; ``stop``/``reset`` return to ``stopped``.
    """

    def __init__(
        self,
        backend: PersuasionBackend,
        sleep: Callable = asyncio.sleep,
        poll_interval: float | None = None,
        message_limit: int | None = None,
    ):
        self.backend = backend
        self._sleep = sleep
        self.poll_interval = settings.poll_interval if poll_interval is None else poll_interval
        self.message_limit = settings.conversation_message_limit if message_limit is None else message_limit

        self.business: Business | None = None
        self.tier: str | None = None
        self.email: str | None = None
        self.conversation_id: str | None = None
        self.state = "stopped"
        self.messages: list[Message] = []
        self.stats = _empty_stats()
        self.error: str | None = None
        self.payment_required: dict | None = None

        self._ids = itertools.count(1)
        self._poll_task: asyncio.Task | None = None

    @property
    def is_polling(self) -> bool:
        return self._poll_task is not None and not self._poll_task.done()

    def select_business(self, business: Business, tier: str | None = None, email: str | None = None) -> None:
        self.business = business
        self.tier = tier
        self.email = email
        self.error = None

    # ── Lifecycle ────────────────────────────────────────

    async def start(self) -> None:
        """Start a new conversation. Does nothing while one is running or paused."""
        if self.business is None:
            self.error = NO_BUSINESS_ERROR
            return
        if self.conversation_id and self.state in ("running", "paused"):
            return

        self.error = None
        self.payment_required = None
        try:
            data = await self.backend.start_conversation(
                self.business.business_type_id, tier=self.tier, email=self.email
            )
        except APIError as e:
            if isinstance(e, PaymentRequiredError):
                self.payment_required = {"price": e.price, "tier_name": e.tier_name}
            self._fail("start", e)
            return

        self.conversation_id = str((data or {}).get("conversation_id") or "")
        self.messages = []
        self.stats = _empty_stats(current_round=1)
        self.state = "running"
        logger.info("Conversation %s started for %s", self.conversation_id, self.business.name)
        self._start_polling()

    async def pause(self) -> None:
        if not self.conversation_id:
            return
        try:
            await self.backend.pause_conversation(self.conversation_id)
        except APIError as e:
            self._fail("pause", e)
            return
        self.state = "paused"
        await self._stop_polling()

    async def resume(self) -> None:
        if not self.conversation_id:
            return
        try:
            await self.backend.resume_conversation(self.conversation_id)
        except APIError as e:
            self._fail("resume", e)
            return
        self.state = "running"
        self._start_polling()

    async def stop(self) -> None:
        if not self.conversation_id:
            return
        try:
            await self.backend.stop_conversation(self.conversation_id)
        except APIError as e:
            self._fail("stop", e)
            return
        await self._stop_polling()
        logger.info("Conversation %s stopped", self.conversation_id)
        self.state = "stopped"
        self.conversation_id = None

    async def reset(self) -> None:
        if not self.conversation_id:
            return
        try:
            await self.backend.reset_conversation(self.conversation_id)
        except APIError as e:
            self._fail("reset", e)
            return
        await self._stop_polling()
        self.messages = []
        self.stats = _empty_stats()
        self.state = "stopped"
        self.conversation_id = None

    async def sync(self) -> None:
        """Pull state and transcript from the backend."""
        if not self.conversation_id:
            return
        try:
            status, messages = await asyncio.gather(
                self.backend.get_conversation_status(self.conversation_id),
                self.backend.get_conversation_messages(self.conversation_id),
            )
        except APIError as e:
            self._fail("load", e)
            return

        status = status or {}
        if status.get("state"):
            self.state = status["state"]
        for key in ("total_messages", "current_round"):
            if status.get(key) is not None:
                self.stats[key] = int(status[key])

        remote = (messages or {}).get("messages") or []
        if remote:
            self.messages = [self._message_from_api(m) for m in remote]
        if self.state != "running":
            await self._stop_polling()

    async def close(self) -> None:
        await self._stop_polling()

    def _fail(self, action: str, error: APIError) -> None:
        self.error = f"Failed to {action} conversation: {error.message}"
        logger.error("Conversation %s failed: %s", action, error.message)

    # ── Polling ──────────────────────────────────────────

    def _start_polling(self) -> None:
        if self.is_polling:
            return
        self._poll_task = asyncio.create_task(self._poll_loop())

    async def _stop_polling(self) -> None:
        task = self._poll_task
        self._poll_task = None
        if task is None or task is asyncio.current_task():
            return
        task.cancel()
        await asyncio.gather(task, return_exceptions=True)

    async def _poll_loop(self) -> None:
        while self.state == "running":
            await self._sleep(self.poll_interval)
            try:
                self.tick()
            except Exception as e:
                logger.error("Conversation poll failed: %s", e)

    def tick(self) -> Message | None:
        """Fabricate the next debate message; returns None once the limit is reached."""
        if self.state != "running" or self.business is None:
            return None
        if len(self.messages) >= self.message_limit:
            self._complete()
            return None

        index = len(self.messages)
        agent = speaker_for(index)
        message = Message(
            id=next(self._ids),
            type="ai",
            content=agent.respond(AgentContext(business=self.business), message_number=index + 1),
            agent_type=agent.key,
            provider=agent.model,
            timestamp=datetime.now(timezone.utc),
        )
        self.messages.append(message)
        self.stats["total_messages"] += 1
        self.stats["current_round"] = self.stats["total_messages"] // len(DEBATE_AGENTS) + 1
        self.stats["duration"] += SECONDS_PER_MESSAGE

        if len(self.messages) >= self.message_limit:
            self._complete()
        return message

    def _complete(self) -> None:
        self.state = "completed"
        logger.info("Conversation %s completed after %d messages", self.conversation_id, len(self.messages))

    def _message_from_api(self, data: dict) -> Message:
        return Message(
            id=int(data.get("id") or next(self._ids)),
            type=data.get("type") or "ai",
            content=data.get("content") or "",
            agent_type=data.get("agent_type") or data.get("agent"),
            provider=data.get("provider") or data.get("model"),
            timestamp=parse_timestamp(data.get("timestamp")) or datetime.now(timezone.utc),
        )

    # ── View model ───────────────────────────────────────

    def snapshot(self) -> dict:
        return {
            "state": self.state,
            "conversation_id": self.conversation_id,
            "business": self.business.to_dict() if self.business else None,
            "tier": self.tier,
            "messages": [m.to_dict() for m in self.messages],
            "stats": dict(self.stats),
            "agents": [agent.describe() for agent in DEBATE_AGENTS],
            "error": self.error,
            "payment_required": self.payment_required,
        }
