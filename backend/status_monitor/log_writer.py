"""
Status Log Writer

Best-effort persistence of probe results. Writes run as detached
asyncio tasks: the response path never awaits them, and a failed write
is logged, never propagated.
"""

import asyncio
import logging
from collections import deque
from typing import Deque, Mapping, Set, Tuple

from .models import ProbeResult

logger = logging.getLogger(__name__)

# Number of recent write attempts kept for inspection
RECENT_ATTEMPTS = 100


class StatusLogWriter:
    """
    Dispatches save_status_log calls without blocking the caller.

    Usage:
        writer = StatusLogWriter(history_store)
        writer.submit(probe_results)   # returns immediately
        await writer.drain()           # tests / shutdown only
    """

    def __init__(self, store, max_attempts: int = RECENT_ATTEMPTS):
        self.store = store
        self._pending: Set[asyncio.Task] = set()
        # (service_name, status) of the most recent writes handed to the store
        self.attempts: Deque[Tuple[str, str]] = deque(maxlen=max_attempts)
        self.failures = 0

    @property
    def pending(self) -> int:
        return len(self._pending)

    def submit(self, probe_results: Mapping[str, ProbeResult]) -> None:
        """Schedule one write per probe result on the running loop."""
        for service_name, result in probe_results.items():
            task = asyncio.create_task(self._write(service_name, result))
            self._pending.add(task)
            task.add_done_callback(self._pending.discard)

    async def drain(self) -> None:
        """Wait for all in-flight writes to settle."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    async def _write(self, service_name: str, result: ProbeResult) -> None:
        self.attempts.append((service_name, result.status.value))
        try:
            await self.store.save_status_log(
                service_name,
                result.status.value,
                result.response_time,
                result.message,
            )
        except Exception as e:
            self.failures += 1
            logger.error(f"[StatusLogWriter] Failed to save status log for {service_name}: {e}")
