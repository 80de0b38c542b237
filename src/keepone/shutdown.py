"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

shutdown.py
Graceful shutdown hooks.

Cleanup actions are registered on a ShutdownHooks registry. When the process is
asked to terminate, every hook runs at the same time on its own thread with its
own time budget, and the process waits for all of them (or their budgets) before
exiting. Hooks must not depend on each other.
"""
import signal
import sys
import time
import logging
import threading
from dataclasses import dataclass
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)

DEFAULT_HOOK_TIMEOUT = 5.0  # seconds per hook


@dataclass
class ShutdownContext:
    """Passed to context hooks: when to give up, and a flag set once the budget is spent."""
    deadline: float
    cancelled: threading.Event

    def remaining(self) -> float:
        return max(0.0, self.deadline - time.monotonic())


@dataclass
class HookResult:
    name: str
    ok: bool
    timed_out: bool = False
    error: Optional[str] = None


class _Hook:
    def __init__(self, func: Callable, with_context: bool):
        self.func = func
        self.with_context = with_context
        self.name = getattr(func, "__name__", repr(func))
        self.error: Optional[BaseException] = None

    def execute(self, context: ShutdownContext) -> None:
        try:
            if self.with_context:
                self.func(context)
            else:
                self.func()
        except Exception as e:
            self.error = e


class ShutdownHooks:
    """
    Process-scoped registry of cleanup actions.
    Tests can build their own instance; nothing here is global.
    """

    def __init__(self):
        self._hooks: List[_Hook] = []
        self._lock = threading.Lock()
        self._invoked = False

    def __len__(self) -> int:
        return len(self._hooks)

    def add_hook(self, func: Callable[[], None]) -> None:
        """Registers a no-argument cleanup action."""
        with self._lock:
            self._hooks.append(_Hook(func, with_context=False))

    def add_context_hook(self, func: Callable[[ShutdownContext], None]) -> None:
        """
        Registers a cleanup action that receives a ShutdownContext.
        It should watch context.remaining() / context.cancelled and stop in time.
        """
        with self._lock:
            self._hooks.append(_Hook(func, with_context=True))

    def invoke_all(self, timeout: float = DEFAULT_HOOK_TIMEOUT) -> List[HookResult]:
        """
        Runs every hook concurrently and waits for each up to `timeout` seconds.
        Runs at most once per registry; later calls return an empty list.
        """
        with self._lock:
            if self._invoked:
                return []
            self._invoked = True
            hooks = list(self._hooks)

        logger.info(f"Running {len(hooks)} shutdown hook(s)")
        started = []
        for hook in hooks:
            context = ShutdownContext(deadline=time.monotonic() + timeout, cancelled=threading.Event())
            thread = threading.Thread(target=hook.execute, args=(context,),
                                      name=f"shutdown-{hook.name}", daemon=True)
            thread.start()
            started.append((hook, thread, context))

        results = []
        for hook, thread, context in started:
            thread.join(context.remaining())
            if thread.is_alive():
                context.cancelled.set()
                logger.warning(f"Shutdown hook {hook.name} did not finish within {timeout:.1f}s")
                results.append(HookResult(hook.name, ok=False, timed_out=True))
            elif hook.error is not None:
                logger.warning(f"Shutdown hook {hook.name} failed: {hook.error}")
                results.append(HookResult(hook.name, ok=False, error=str(hook.error)))
            else:
                results.append(HookResult(hook.name, ok=True))
        return results


def listen_for_signals(
    hooks: ShutdownHooks,
    timeout: float = DEFAULT_HOOK_TIMEOUT,
    exit_code: int = 130
) -> None:
    """
    On SIGINT or SIGTERM, run all hooks then exit.
    Must be called from the main thread.
    """
    def handler(signum, frame):
        name = signal.Signals(signum).name
        logger.info(f"Signal captured: {name}")
        hooks.invoke_all(timeout)
        sys.exit(exit_code)

    signal.signal(signal.SIGINT, handler)
    signal.signal(signal.SIGTERM, handler)
    logger.info("Listening for shutdown signals")
