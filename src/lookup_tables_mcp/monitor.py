# Lookup Tables MCP Server
# File: monitor.py
# Version: v1

"""Poll a long-running server-side task until it reaches a terminal status."""

from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Awaitable, Callable, Union
from urllib.parse import quote

from .errors import InvalidArgumentError, LookupTablesError
from .models import TaskProgress
from .transport import Transport

logger = logging.getLogger(__name__)

# Delay between two polls of a task that has not finished yet.
POLL_INTERVAL_SECONDS = 0.1

ProgressCallback = Callable[[TaskProgress], Union[None, Awaitable[None]]]


def task_url(task_id: str) -> str:
    return f"general/Tasks({quote(task_id, safe='')})"


class TaskMonitor:
    """Reports every observed :class:`TaskProgress` snapshot to a callback.

    Polling stops after the first Completed, Failed or Cancelled snapshot.
    Whether Failed or Cancelled is an error is up to the caller. There is no
    iteration limit; cancel the awaiting task (or wrap it in
    ``asyncio.wait_for``) to stop early. The server-side task keeps running.
    """

    def __init__(self, transport: Transport, poll_interval: float = POLL_INTERVAL_SECONDS) -> None:
        self._transport = transport
        self.poll_interval = poll_interval

    async def poll(self, task_id: str) -> TaskProgress:
        """Fetch one snapshot of the task."""
        content = await self._transport.get_json(task_url(task_id))
        if not isinstance(content, dict):
            raise LookupTablesError(
                f"Unexpected task status response for '{task_id}': expected JSON object, "
                f"got {type(content).__name__}."
            )
        try:
            return TaskProgress.from_dict(content)
        except ValueError as exc:
            raise LookupTablesError(f"Invalid task status response for '{task_id}': {exc}") from exc

    async def monitor(self, task_id: str, progress_callback: ProgressCallback) -> TaskProgress:
        """Poll until terminal and return the final snapshot."""
        if task_id is None or not task_id.strip():
            raise InvalidArgumentError("task_id")

        while True:
            progress = await self.poll(task_id)
            logger.debug(
                "Task %s: %s (%d%%)", task_id, progress.status.value, progress.percent_complete
            )

            result = progress_callback(progress)
            if inspect.isawaitable(result):
                await result

            if progress.status.is_terminal:
                return progress

            await asyncio.sleep(self.poll_interval)
