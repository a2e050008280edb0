"""
Exactly-once delivery of asynchronous results.

Every asynchronous operation returns a concurrent.futures.Future and may also
take on_success / on_failure callbacks. A Completion ties the two together:
the first succeed() or fail() resolves the future and schedules the matching
callback on the caller's executor; any later call is ignored.
"""

import logging
import threading
from concurrent.futures import Executor, Future
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)

SuccessCallback = Callable[[Any], None]
FailureCallback = Callable[[BaseException], None]


class ImmediateExecutor(Executor):
    """Runs submitted callables synchronously in the submitting thread."""

    def submit(self, fn, /, *args, **kwargs):
        future: Future = Future()
        try:
            result = fn(*args, **kwargs)
        except BaseException as e:
            future.set_exception(e)
        else:
            future.set_result(result)
        return future


class Completion:
    """
    One-shot result holder.

    Attributes:
        future: Future resolved with the result or the error
    """

    def __init__(
        self,
        on_success: Optional[SuccessCallback] = None,
        on_failure: Optional[FailureCallback] = None,
        callback_executor: Optional[Executor] = None,
    ):
        """
        Initialize completion.

        Args:
            on_success: Called with the result
            on_failure: Called with the error
            callback_executor: Where callbacks run (default: completing thread)
        """
        self.future: Future = Future()
        self._on_success = on_success
        self._on_failure = on_failure
        self._callback_executor = callback_executor
        self._lock = threading.Lock()
        self._done = False

    @property
    def done(self) -> bool:
        return self._done

    def _claim(self) -> bool:
        with self._lock:
            if self._done:
                return False
            self._done = True
            return True

    def succeed(self, value: Any) -> bool:
        """
        Deliver a result.

        Returns:
            True if delivered, False if the completion had already fired
        """
        if not self._claim():
            logger.warning("Completion already delivered, ignoring result")
            return False
        self.future.set_result(value)
        self._dispatch(self._on_success, value)
        return True

    def fail(self, error: BaseException) -> bool:
        """
        Deliver an error.

        Returns:
            True if delivered, False if the completion had already fired
        """
        if not self._claim():
            logger.warning(f"Completion already delivered, ignoring error: {error}")
            return False
        self.future.set_exception(error)
        self._dispatch(self._on_failure, error)
        return True

    def _dispatch(self, callback: Optional[Callable[[Any], None]], value: Any) -> None:
        if callback is None:
            return
        if self._callback_executor is None:
            callback(value)
        else:
            self._callback_executor.submit(callback, value)
