"""
Synchronous entry point into the async services.

Streamlit scripts are synchronous, while storage and image editing are
coroutines. Every coroutine in a process runs on the same event loop:
the Gemini SDK's async client is bound to the loop it was first used on,
so a loop per call breaks every request after the first.
"""

import asyncio
import threading
from typing import Any, Awaitable, Optional

import structlog


logger = structlog.get_logger(__name__)


class AsyncRunner:
    """Owns one long-lived event loop and runs coroutines on it to completion."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop if loop is not None else asyncio.new_event_loop()
        self._lock = threading.Lock()

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        return self._loop

    @property
    def is_closed(self) -> bool:
        return self._loop.is_closed()

    def run(self, coro: Awaitable[Any]) -> Any:
        """
        Run a coroutine and return its result.

        Callers on other threads (one per Streamlit session) wait their turn.
        Not reentrant: must not be called from inside a coroutine.
        """
        with self._lock:
            asyncio.set_event_loop(self._loop)
            return self._loop.run_until_complete(coro)

    def close(self) -> None:
        with self._lock:
            if self._loop.is_closed():
                return
            self._loop.run_until_complete(self._loop.shutdown_asyncgens())
            self._loop.close()
        logger.debug("event_loop_closed")
