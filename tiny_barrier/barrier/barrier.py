"""Completion barrier converging fan-out callbacks on a single outcome."""
import asyncio
import logging
from typing import Any, Callable, List, Optional, Tuple

from tiny_barrier.barrier.errors import (
    BarrierConfigError,
    BarrierTaskError,
    OvercompletionError,
    RepeatedSuccessError,
)

logger = logging.getLogger(__name__)

ErrorHandler = Callable[..., None]
SuccessHandler = Callable[..., None]


class Barrier:
    """
    Count expected completions and fire a terminal callback once all report.
    Params:
      expected: number of completions to wait for (adjustable later). Should
        be non-negative; it is stored as given and not validated.
      loop: event loop used for deferred dispatch; defaults to the loop running
        when done() is first called.
      on_add: called with the delta whenever the expected count changes.
      on_done: called once per processed completion.

    The error handler runs once per reported error. The success handler runs
    at most once, and never after an error was reported.
    """

    def __init__(
        self,
        expected: int = 0,
        *,
        loop: Optional[asyncio.AbstractEventLoop] = None,
        on_add: Optional[Callable[[int], None]] = None,
        on_done: Optional[Callable[[], None]] = None,
    ) -> None:
        self._expected = expected
        self.errors: List[Any] = []
        self.processed = 0
        self.loop = loop
        self._on_add = on_add
        self._on_done = on_done
        self._error_handler: Optional[ErrorHandler] = None
        self._success_handler: Optional[SuccessHandler] = None
        self._success_fired = False
        self._waiters: List[asyncio.Future] = []
        self._notify_add(expected)

    # -- counter -----------------------------------------------------------

    @property
    def expected(self) -> int:
        return self._expected

    @expected.setter
    def expected(self, value: int) -> None:
        self.set_expected(value)

    @property
    def success_fired(self) -> bool:
        return self._success_fired

    def get_expected(self) -> int:
        return self._expected

    def set_expected(self, value: int) -> "Barrier":
        delta = value - self._expected
        self._expected = value
        self._notify_add(delta)
        return self

    def increment(self, delta: int = 1) -> "Barrier":
        """Expect more completions, e.g. when work is discovered mid-flight."""
        self._expected += delta
        self._notify_add(delta)
        return self

    def decrement(self, delta: int = 1) -> "Barrier":
        self._expected -= delta
        self._notify_add(-delta)
        return self

    def _notify_add(self, delta: int) -> None:
        if delta and self._on_add:
            self._on_add(delta)

    # -- error channel -----------------------------------------------------

    def on_error(self, handler: ErrorHandler) -> "Barrier":
        """Set the error handler. It is called for EVERY error, so side effects
        like sending a response must be guarded by the handler itself."""
        self._error_handler = handler
        return self

    def raise_error(self, err: Any, *extra: Any) -> "Barrier":
        """Record an error and pass it to the error handler right away."""
        if not err:
            return self
        self.errors.append(err)
        try:
            if self._error_handler is None:
                raise BarrierConfigError("Error handler is not defined.")
            self._error_handler(err, *extra)
        finally:
            self._resolve_waiters(err)
        return self

    # -- success channel ---------------------------------------------------

    def on_success(self, handler: SuccessHandler) -> "Barrier":
        self._success_handler = handler
        return self

    def trigger_success(self, *extra: Any) -> "Barrier":
        """
        Fire the success handler once.
        A second call is reported as RepeatedSuccessError; a call after an
        error was reported does nothing.
        """
        if self._success_fired:
            logger.warning("Success triggered again on barrier %#x", id(self))
            return self.raise_error(RepeatedSuccessError())
        if self.errors:
            logger.debug("Success vetoed by %d error(s)", len(self.errors))
            return self
        if self._success_handler is None:
            raise BarrierConfigError("Success handler is not defined.")
        self._success_fired = True
        try:
            self._success_handler(*extra)
        finally:
            self._resolve_waiters(None)
        return self

    # -- completion hook ---------------------------------------------------

    def done(self, err: Any = None, *extra: Any) -> "Barrier":
        """
        Report one finished task, with an error as first argument on failure.

        Processing is deferred to the next loop iteration, so a task calling
        back synchronously cannot finish the barrier before the caller has
        registered the rest of its work in the same pass:

            if a == 1:
                barrier.increment()
                maybe_sync_task(barrier.done)  # may call back right away
            if b == 1:
                barrier.increment()
                maybe_sync_task(barrier.done)
        """
        self._check_handlers()
        loop = self._get_loop()
        logger.debug("Completion scheduled (expected=%d, error=%r)", self._expected, err)
        loop.call_soon(self._dispatch, err, extra)
        return self

    def done_threadsafe(self, err: Any = None, *extra: Any) -> "Barrier":
        """Thread-safe variant of done(); hands the completion to the barrier's loop."""
        self._check_handlers()
        if self.loop is None:
            raise BarrierConfigError("done_threadsafe requires the barrier loop to be known.")
        self.loop.call_soon_threadsafe(self._dispatch, err, extra)
        return self

    def _check_handlers(self) -> None:
        if self._error_handler is None or self._success_handler is None:
            raise BarrierConfigError('Either "error" or "success" handler is not defined.')

    def _get_loop(self) -> asyncio.AbstractEventLoop:
        if self.loop is None:
            try:
                self.loop = asyncio.get_running_loop()
            except RuntimeError:
                raise BarrierConfigError("Barrier.done requires a running event loop.") from None
        return self.loop

    def _dispatch(self, err: Any, extra: Tuple[Any, ...]) -> None:
        self.processed += 1
        if self._on_done:
            self._on_done()

        # A failed task taints the barrier instead of counting as done.
        if err:
            self.raise_error(err, *extra)
            return

        self._expected -= 1
        if self._expected == 0:
            self.trigger_success(*extra)
        elif self._expected < 0:
            logger.warning("Barrier %#x overcompleted (expected=%d)", id(self), self._expected)
            self.raise_error(OvercompletionError(self._expected))

    # -- awaiting ----------------------------------------------------------

    async def wait(self) -> None:
        """
        Wait for the outcome: return after success, raise the first error.
        Non-exception error values and StopIteration are raised as BarrierTaskError.
        """
        if self._success_fired:
            return
        if self.errors:
            raise _as_exception(self.errors[0])
        future = asyncio.get_running_loop().create_future()
        self._waiters.append(future)
        await future

    def _resolve_waiters(self, err: Any) -> None:
        waiters, self._waiters = self._waiters, []
        for future in waiters:
            if future.done():
                continue
            if err is None:
                future.set_result(None)
            else:
                future.set_exception(_as_exception(err))


def _as_exception(err: Any) -> BaseException:
    # Futures refuse StopIteration, and raising it from a coroutine turns it
    # into RuntimeError.
    if isinstance(err, BaseException) and not isinstance(err, (StopIteration, StopAsyncIteration)):
        return err
    return BarrierTaskError(err)
