"""
Completion arbiter
A handler can finish three ways: by raising or returning, by calling the
callback it was given, or by returning an awaitable. Whichever signal is
allowed to fire first decides the one Outcome for the invocation.

Whether the return value is awaitable is latched right after the call
returns. Callback signals that arrive while the call is still running are
held until then, and are dropped for awaitable-based invocations.
"""
import asyncio
import concurrent.futures
import inspect
import logging
import threading
from typing import Any, List, Optional, Tuple

from .context import InvocationContext
from .exceptions import InvocationTimeout
from .outcome import Outcome, OutcomeCell
from .registry import BoundHandler

logger = logging.getLogger(__name__)


def is_awaitable(value) -> bool:
    return inspect.isawaitable(value) or isinstance(value, concurrent.futures.Future)


async def _await(awaitable):
    return await awaitable


class CompletionArbiter:
    """Turns one handler call into exactly one Outcome"""

    def __init__(self, bound: BoundHandler, event: Any, context: InvocationContext):
        self.bound = bound
        self.event = event
        self.context = context
        self.cell = OutcomeCell()

        self._latch = threading.Lock()
        self._classified = False
        self._awaitable = False
        self._early_signals: List[Tuple[Any, Any]] = []

    @property
    def outcome(self) -> Outcome:
        return self.cell.outcome

    def callback(self, error=None, result=None):
        """Node-style completion callback handed to the handler: callback(error, result)"""
        with self._latch:
            if not self._classified:
                self._early_signals.append((error, result))
                return
            if self._awaitable:
                logger.debug(f"Ignoring callback for {self.bound.function_name}: invocation returned an awaitable")
                return
        self._settle_callback(error, result)

    def _settle_callback(self, error, result):
        if error is not None:
            resolved = self.cell.fail(error)
        else:
            resolved = self.cell.succeed(result)
        if not resolved:
            logger.debug(f"Ignoring repeated completion for {self.bound.function_name} RequestId: {self.context.aws_request_id}")

    def run(self, wait_timeout: Optional[float] = None) -> Outcome:
        """Call the handler and block until an outcome is decided"""
        args = (self.event, self.context)
        if self.bound.accepts_callback:
            args += (self.callback,)

        try:
            result = self.bound.handler(*args)
        except (Exception, SystemExit) as e:
            self.cell.fail(e)
            return self.cell.outcome

        awaitable = is_awaitable(result)
        with self._latch:
            self._classified = True
            self._awaitable = awaitable
            early, self._early_signals = self._early_signals, []

            if awaitable:
                if early:
                    logger.debug(f"Ignoring {len(early)} callback(s) for {self.bound.function_name}: invocation returned an awaitable")
            elif early:
                for error, value in early:
                    self._settle_callback(error, value)
            elif not self.bound.accepts_callback:
                self.cell.succeed(result)

        if awaitable:
            self._settle_awaitable(result)

        if not self.cell.wait(wait_timeout):
            logger.warning(f"{self.bound.function_name} RequestId: {self.context.aws_request_id} still running after {wait_timeout}s, giving up")
            self.cell.fail(InvocationTimeout(self.bound.function_name, wait_timeout))
        return self.cell.outcome

    def _settle_awaitable(self, awaitable):
        if isinstance(awaitable, concurrent.futures.Future):
            awaitable.add_done_callback(self._future_done)
            return

        # driven on its own loop and thread so a hung coroutine is never cancelled
        thread = threading.Thread(
            target=self._drive,
            args=(awaitable,),
            name=f"invoke-{self.bound.function_name}-{self.context.aws_request_id}",
            daemon=True,
        )
        thread.start()

    def _drive(self, awaitable):
        try:
            value = asyncio.run(_await(awaitable))
        except (Exception, asyncio.CancelledError, SystemExit) as e:
            self.cell.fail(e)
        else:
            self.cell.succeed(value)

    def _future_done(self, future: concurrent.futures.Future):
        if future.cancelled():
            self.cell.fail(concurrent.futures.CancelledError())
            return
        error = future.exception()
        if error is not None:
            self.cell.fail(error)
        else:
            self.cell.succeed(future.result())


def invoke(bound: BoundHandler, event: Any, context: InvocationContext,
           wait_timeout: Optional[float] = None) -> Outcome:
    """Run one invocation and log how it ended"""
    function_name = bound.function_name
    log = bound.logger

    log.info(f"Invoking {function_name}", extra={'params': event})
    outcome = CompletionArbiter(bound, event, context).run(wait_timeout)

    if outcome.ok:
        log.info(f"Successfully invoked {function_name}", extra={'params': event, 'response': outcome.value})
    else:
        log.error(f"Error invoking {function_name}", extra={'params': event, 'error': outcome.error})
    return outcome
