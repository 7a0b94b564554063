"""
Error Sources

Routes every uncaught error in the process to a single handler:
- sys.excepthook (main thread, uncaught at top level)
- threading.excepthook (uncaught in worker threads)
- the asyncio loop exception handler (unretrieved task exceptions, callbacks)
- a protected scope around the host's startup routine
"""

import asyncio
import inspect
import sys
import threading
from typing import Any, Callable

from errorlog.common.logging_setup import get_service_logger

from .records import ErrorDetails

logger = get_service_logger("log_buffer.error_source")

ErrorHandler = Callable[[ErrorDetails], None]
ReportZone = Callable[[], Any]


class ErrorHooks:
    """
    Installs process-wide error hooks that forward to `handler`.

    Previous hooks are remembered and put back by uninstall(). Errors from
    worker threads are handed to the event loop thread before calling
    `handler`, so the handler always runs on the loop.
    """

    def __init__(self, handler: ErrorHandler):
        self.handler = handler
        self._loop: asyncio.AbstractEventLoop | None = None
        self._installed = False

        self._prev_excepthook = None
        self._prev_threading_hook = None
        self._prev_loop_handler = None

    @property
    def installed(self) -> bool:
        return self._installed

    def install(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        if self._installed:
            return

        self._loop = loop or asyncio.get_running_loop()

        self._prev_excepthook = sys.excepthook
        self._prev_threading_hook = threading.excepthook
        self._prev_loop_handler = self._loop.get_exception_handler()

        sys.excepthook = self._excepthook
        threading.excepthook = self._threading_hook
        self._loop.set_exception_handler(self._loop_handler)

        self._installed = True
        logger.debug("Error hooks installed")

    def uninstall(self) -> None:
        if not self._installed:
            return

        if sys.excepthook == self._excepthook:
            sys.excepthook = self._prev_excepthook
        if threading.excepthook == self._threading_hook:
            threading.excepthook = self._prev_threading_hook
        if self._loop is not None and not self._loop.is_closed():
            self._loop.set_exception_handler(self._prev_loop_handler)

        self._installed = False
        logger.debug("Error hooks removed")

    def _excepthook(self, exc_type, exc_value, exc_tb) -> None:
        self.handler(ErrorDetails.from_exception(exc_value, exc_tb))

    def _threading_hook(self, args: threading.ExceptHookArgs) -> None:
        if args.exc_value is None:
            details = ErrorDetails(message=f"{args.exc_type.__name__} in thread {args.thread}")
        else:
            details = ErrorDetails.from_exception(args.exc_value, args.exc_traceback)

        loop = self._loop
        if loop is not None and loop.is_running() and not loop.is_closed():
            loop.call_soon_threadsafe(self.handler, details)
        else:
            self.handler(details)

    def _loop_handler(self, loop: asyncio.AbstractEventLoop, context: dict) -> None:
        exc = context.get("exception")
        message = context.get("message")
        if exc is not None:
            details = ErrorDetails(exception=exc, stack=exc.__traceback__, message=message)
        else:
            details = ErrorDetails(message=message or "Unhandled event loop error")
        self.handler(details)


def run_protected(zone: ReportZone, on_error: ErrorHandler) -> asyncio.Task | None:
    """
    Run the host's startup routine, reporting anything it raises.

    A coroutine function runs as its own task (returned so callers can keep
    a reference); a plain function runs immediately and returns None.
    """
    try:
        result = zone()
    except Exception as e:
        on_error(ErrorDetails.from_exception(e))
        return None

    if not inspect.isawaitable(result):
        return None

    async def _guarded() -> None:
        try:
            await result
        except asyncio.CancelledError:
            raise
        except Exception as e:
            on_error(ErrorDetails.from_exception(e))

    return asyncio.ensure_future(_guarded())
