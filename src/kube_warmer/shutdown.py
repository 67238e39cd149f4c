"""Shutdown controller -- signal to cancellation, then a hard deadline."""

from __future__ import annotations

import asyncio
import os
import signal
from collections.abc import Awaitable, Callable
from typing import Literal

import structlog

log = structlog.get_logger()

EXIT_FORCED = 1

SHUTDOWN_SIGNALS = (signal.SIGINT, signal.SIGTERM)

ShutdownState = Literal["listening", "cancelling", "force_exit"]


class ShutdownController:
    """Turns a termination signal into a one-shot cancellation with a bounded grace period.

    The first request sets :attr:`cancel_event` and arms a deadline. If the
    deadline elapses before :meth:`disarm` is called the process is terminated
    through ``exit`` with :data:`EXIT_FORCED`, whatever the warm loops are doing.
    ``sleep`` and ``exit`` are injectable so the forced path can be driven by a
    fake clock.
    """

    def __init__(
        self,
        grace_period: float,
        *,
        sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
        exit: Callable[[int], object] = os._exit,
    ) -> None:
        self._grace_period = grace_period
        self._sleep = sleep
        self._exit = exit
        self._state: ShutdownState = "listening"
        self._deadline: asyncio.Task[None] | None = None
        self.cancel_event = asyncio.Event()

    @property
    def state(self) -> ShutdownState:
        return self._state

    @property
    def deadline(self) -> asyncio.Task[None] | None:
        return self._deadline

    def install(self, loop: asyncio.AbstractEventLoop) -> None:
        """Register SIGINT/SIGTERM handlers on ``loop``."""
        for sig in SHUTDOWN_SIGNALS:
            loop.add_signal_handler(sig, self.request_shutdown, sig.name)

    def uninstall(self, loop: asyncio.AbstractEventLoop) -> None:
        for sig in SHUTDOWN_SIGNALS:
            loop.remove_signal_handler(sig)

    def request_shutdown(self, reason: str = "requested") -> None:
        """Cancel all warm loops and arm the grace-period deadline. Idempotent."""
        if self._state != "listening":
            log.info("shutdown_already_in_progress", reason=reason, state=self._state)
            return

        log.info("shutdown_requested", reason=reason, grace_period=self._grace_period)
        self._state = "cancelling"
        self.cancel_event.set()
        self._deadline = asyncio.get_running_loop().create_task(self._enforce_deadline(), name="shutdown-deadline")

    def disarm(self) -> None:
        """Stop the deadline once every loop has been joined."""
        if self._deadline is not None and not self._deadline.done():
            self._deadline.cancel()

    async def _enforce_deadline(self) -> None:
        await self._sleep(self._grace_period)
        self._state = "force_exit"
        log.error("grace_period_elapsed", grace_period=self._grace_period, exit_code=EXIT_FORCED)
        self._exit(EXIT_FORCED)
