"""Hosts a :class:`ControlLoop` on a background thread for synchronous front ends."""

from __future__ import annotations

import asyncio
import logging
import threading
from typing import Any, Callable, Optional, TypeVar

from .engine import ControlLoop
from .state import EngineSnapshot

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")


class EngineRunner:
    """Runs the engine's event loop in a daemon thread.

    Every call from another thread is marshalled onto the loop with
    ``run_coroutine_threadsafe`` so the loop stays the only writer of the
    engine state.
    """

    def __init__(self, engine: ControlLoop, *, call_timeout: float = 5.0) -> None:
        self.engine = engine
        self.call_timeout = call_timeout
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._thread: Optional[threading.Thread] = None
        self._ready = threading.Event()

    @property
    def alive(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.alive:
            return
        self._ready.clear()
        self._thread = threading.Thread(target=self._run, name="neuroflex-engine", daemon=True)
        self._thread.start()
        if not self._ready.wait(timeout=self.call_timeout):
            raise RuntimeError("Engine loop failed to start")

    def _run(self) -> None:
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        self._loop = loop
        try:
            loop.run_until_complete(self.engine.start())
            self._ready.set()
            loop.run_forever()
        finally:
            loop.run_until_complete(loop.shutdown_asyncgens())
            loop.close()
            LOGGER.info("engine_thread_exited")

    def _submit(self, coro, timeout: Optional[float]) -> Any:
        if self._loop is None or not self.alive:
            coro.close()
            raise RuntimeError("Engine runner is not started")
        future = asyncio.run_coroutine_threadsafe(coro, self._loop)
        return future.result(timeout=timeout)

    def call(self, fn: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        """Run ``fn`` on the loop thread and return its result."""

        async def _invoke() -> T:
            return fn(*args, **kwargs)

        return self._submit(_invoke(), self.call_timeout)

    def snapshot(self) -> EngineSnapshot:
        return self.call(self.engine.snapshot)

    def plan(self) -> str:
        timeout = self.engine.config.narrator.timeout + self.call_timeout
        return self._submit(self.engine.request_plan(), timeout)

    def stop(self) -> None:
        thread, loop = self._thread, self._loop
        if thread is None or loop is None or not thread.is_alive():
            return
        self._submit(self.engine.stop(), self.call_timeout)
        loop.call_soon_threadsafe(loop.stop)
        thread.join(timeout=self.call_timeout)
        self._thread = None
        self._loop = None
