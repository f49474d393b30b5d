# src/pageglot/core/loop_runner.py
from __future__ import annotations

import asyncio
import logging
import threading
from typing import Any, Coroutine, Optional

logger = logging.getLogger(__name__)

_MAIN_LOOP: Optional[asyncio.AbstractEventLoop] = None
_THREAD: Optional[threading.Thread] = None
_START_LOCK = threading.Lock()


def ensure_background_loop() -> asyncio.AbstractEventLoop:
    """
    Starts the persistent asyncio event loop on a daemon thread.
    The server hands every pipeline coroutine to this loop, so request
    threads never create event loops of their own.
    """
    global _MAIN_LOOP, _THREAD
    with _START_LOCK:
        if _MAIN_LOOP is not None:
            return _MAIN_LOOP

        loop = asyncio.new_event_loop()

        def _run_loop(loop_: asyncio.AbstractEventLoop) -> None:
            asyncio.set_event_loop(loop_)
            loop_.run_forever()

        t = threading.Thread(target=_run_loop, args=(loop,), name="pageglot-loop", daemon=True)
        t.start()

        _MAIN_LOOP = loop
        _THREAD = t
        logger.debug("Background asyncio event loop is running.")
        return loop


def stop_background_loop(timeout: float = 5.0) -> None:
    """Stops the background loop and waits for its thread to finish."""
    global _MAIN_LOOP, _THREAD
    with _START_LOCK:
        loop, thread = _MAIN_LOOP, _THREAD
        _MAIN_LOOP, _THREAD = None, None

    if loop is None:
        return
    loop.call_soon_threadsafe(loop.stop)
    if thread is not None:
        thread.join(timeout)
    loop.close()


def run_on_main_loop(coro: Coroutine[Any, Any, Any], timeout: float | None = None) -> Any:
    """
    Executes a coroutine on the background loop and blocks for its result.
    Falls back to asyncio.run() when no background loop was started
    (tests, one-shot CLI commands).

    Args:
        coro: The coroutine to execute.
        timeout (float | None): Optional timeout in seconds to wait for the result.
    """
    if _MAIN_LOOP is not None:
        fut = asyncio.run_coroutine_threadsafe(coro, _MAIN_LOOP)
        return fut.result(timeout)

    return asyncio.run(coro)
