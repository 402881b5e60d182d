from typing import (
    Any,
    Callable,
    Optional,
    List,
)

from .exceptions import InvalidStateError

_PENDING = "PENDING"
_FINISHED = "FINISHED"


class SyncFuture:
    """A value that a data loader will provide once its batch is dispatched.

    Callbacks run synchronously, in registration order, as soon as the
    future is finished.
    """

    _state = _PENDING
    _result: Optional[Any] = None
    _exception: Optional[Exception] = None
    _callbacks: List[Callable]

    def __init__(self):
        self._callbacks = []

    def __repr__(self) -> str:
        return f"<SyncFuture {self._state}>"

    def done(self) -> bool:
        return self._state != _PENDING

    def result(self):
        self._assert_state(_FINISHED)
        if self._exception is not None:
            raise self._exception
        return self._result

    def exception(self) -> Optional[Exception]:
        self._assert_state(_FINISHED)
        return self._exception

    def add_done_callback(self, fn: Callable) -> None:
        self._assert_state(_PENDING)
        self._callbacks.append(fn)

    def set_result(self, result: Any) -> None:
        if self is result:
            raise TypeError("Cannot resolve future with itself.")

        # adopt the state of another future
        if isinstance(result, SyncFuture):
            if result.done():
                self._adopt(result)
            else:
                result.add_done_callback(lambda _: self._adopt(result))
            return

        self._assert_state(_PENDING)
        self._result = result
        self._finish()

    def set_exception(self, exception: Exception) -> None:
        self._assert_state(_PENDING)
        if isinstance(exception, type):
            exception = exception()
        self._exception = exception
        self._finish()

    def then(self, on_complete: Callable) -> "SyncFuture":
        chained = SyncFuture()

        def call_and_resolve(_: Any) -> None:
            try:
                chained.set_result(on_complete(self.result()))
            except Exception as e:
                chained.set_exception(e)

        if self.done():
            call_and_resolve(None)
        else:
            self.add_done_callback(call_and_resolve)

        return chained

    def _adopt(self, other: "SyncFuture") -> None:
        error = other.exception()
        if error is not None:
            self.set_exception(error)
        else:
            self.set_result(other.result())

    def _assert_state(self, state: str) -> None:
        if self._state != state:
            raise InvalidStateError(f"Future is not {state}")

    def _finish(self):
        self._state = _FINISHED
        callbacks = self._callbacks
        if not callbacks:
            return
        self._callbacks = []
        for callback in callbacks:
            callback(self._result)
