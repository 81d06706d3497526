"""Sequential step runner with per-step completion handles.

Each step's outcome is observable through an ``asyncio.Future`` returned by
``handle(name)``. ``cancel()`` stops the run: the current step is cancelled,
later steps never start and every unresolved handle is cancelled.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

logger = logging.getLogger(__name__)


@dataclass
class Step:
    name: str
    action: Callable[[], Awaitable[Any]]


class StepRunner:
    def __init__(self):
        self._handles: dict[str, asyncio.Future] = {}
        self._current: asyncio.Task | None = None
        self._cancel_requested = False
        self.running = False
        self.cancelled = False

    def handle(self, name: str) -> asyncio.Future:
        """Future for the named step of the current (or last) run."""
        return self._handles[name]

    @property
    def step_names(self) -> list[str]:
        return list(self._handles)

    async def run(self, steps: list[Step]) -> list:
        """Run ``steps`` in order and return their results.

        The first failing step stops the run and its exception propagates.
        After ``cancel()`` the run returns the results gathered so far.
        """
        names = [s.name for s in steps]
        if len(set(names)) != len(names):
            raise ValueError(f"Duplicate step names: {names}")
        if self.running:
            raise RuntimeError("StepRunner is already running")

        loop = asyncio.get_running_loop()
        self._handles = {name: loop.create_future() for name in names}
        self._cancel_requested = False
        self.cancelled = False
        self.running = True
        results = []

        try:
            for step in steps:
                if self._cancel_requested:
                    break
                handle = self._handles[step.name]
                self._current = asyncio.ensure_future(step.action())
                try:
                    result = await self._current
                except asyncio.CancelledError:
                    handle.cancel()
                    if self._cancel_requested:
                        break
                    raise
                except Exception as e:
                    handle.set_exception(e)
                    handle.exception()  # retrieved here; the caller gets it re-raised
                    logger.debug("Step %s failed: %s", step.name, e)
                    raise
                handle.set_result(result)
                results.append(result)
        finally:
            self.running = False
            self._current = None
            for pending in self._handles.values():
                if not pending.done():
                    pending.cancel()

        self.cancelled = self._cancel_requested
        return results

    def cancel(self) -> None:
        if not self.running:
            return
        self._cancel_requested = True
        if self._current is not None and not self._current.done():
            self._current.cancel()
