"""Bookkeeping for in-flight requests so they can be aborted."""

import asyncio
import itertools
import logging
import time
from typing import Dict, Optional

logger = logging.getLogger(__name__)

ABORT_TIMEOUT = "timeout"
ABORT_CANCELLED = "cancelled"


class CancelHandle:
    """Abort handle for the task running one request."""

    def __init__(self, request_id: str, task: asyncio.Task):
        self.request_id = request_id
        self.task = task
        self.reason: Optional[str] = None

    def abort(self, reason: str) -> None:
        """Cancel the request task. The first reason wins; finished tasks are left alone."""
        if self.task.done():
            return
        if self.reason is None:
            self.reason = reason
        self.task.cancel()


class CancellationRegistry:
    """Maps request ids to their abort handles.

    Owned by a single executor. Everything runs on one event loop, so
    registration and removal never interleave mid-operation.
    """

    def __init__(self):
        self._handles: Dict[str, CancelHandle] = {}
        self._sequence = itertools.count(1)

    def new_request_id(self, method: str, path: str) -> str:
        issued_ms = int(time.time() * 1000)
        return f"{method.upper()}-{path}-{issued_ms}-{next(self._sequence)}"

    def register(self, request_id: str, task: asyncio.Task) -> CancelHandle:
        handle = CancelHandle(request_id, task)
        self._handles[request_id] = handle
        return handle

    def get(self, request_id: str) -> Optional[CancelHandle]:
        return self._handles.get(request_id)

    def discard(self, request_id: str) -> None:
        self._handles.pop(request_id, None)

    def cancel_all(self) -> int:
        """Abort every registered request and empty the registry.

        Returns:
            int: Number of handles that were aborted
        """
        handles = list(self._handles.values())
        self._handles.clear()
        for handle in handles:
            handle.abort(ABORT_CANCELLED)
        if handles:
            logger.info("Cancelled %d in-flight request(s)", len(handles))
        return len(handles)

    def __len__(self) -> int:
        return len(self._handles)

    def __contains__(self, request_id: object) -> bool:
        return request_id in self._handles
