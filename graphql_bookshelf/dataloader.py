import contextvars
from typing import Callable, Dict, Hashable, List, Optional, Sequence, Tuple

from graphql.pyutils import is_collection

from .sync_future import SyncFuture

BatchLoadFn = Callable[[List[Hashable]], Sequence]

_batch_dispatcher: contextvars.ContextVar[
    Optional["BatchDispatcher"]
] = contextvars.ContextVar("batch_dispatcher", default=None)


class BatchDispatcher:
    """
    Collects the dispatch callbacks of every data loader used while an
    operation executes and runs them once resolution can go no further.
    Running a callback may queue new ones (a loader used by a field of a
    loaded object); they run in the same pass.
    """

    _callbacks: List[Callable[[], None]]

    def __init__(self) -> None:
        self._token: Optional[contextvars.Token] = None
        self._callbacks = []

    def __enter__(self) -> "BatchDispatcher":
        self._token = _batch_dispatcher.set(self)
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        try:
            if exc_type is None:
                self.run_all_callbacks()
        finally:
            assert self._token is not None
            _batch_dispatcher.reset(self._token)

    def add_callback(self, callback: Callable[[], None]) -> None:
        self._callbacks.append(callback)

    def run_all_callbacks(self) -> None:
        callbacks = self._callbacks
        while callbacks:
            callbacks.pop(0)()


def current_dispatcher() -> Optional[BatchDispatcher]:
    """The dispatcher of the operation being executed, if any."""
    return _batch_dispatcher.get()


class SyncDataLoader:
    def __init__(self, batch_load_fn: BatchLoadFn):
        self._batch_load_fn = batch_load_fn
        self._cache: Dict[Hashable, SyncFuture] = {}
        self._queue: List[Tuple[Hashable, SyncFuture]] = []

    def load(self, key: Hashable) -> SyncFuture:
        try:
            return self._cache[key]
        except KeyError:
            if not self._queue:
                dispatcher = current_dispatcher()
                if dispatcher is None:
                    raise RuntimeError(
                        "SyncDataLoader.load called outside of a DeferredExecutionContext"
                    )
                dispatcher.add_callback(self.dispatch_queue)
            future = SyncFuture()
            self._queue.append((key, future))
            self._cache[key] = future
            return future

    def load_many(self, keys: Sequence[Hashable]) -> List[SyncFuture]:
        return [self.load(key) for key in keys]

    def clear(self, key: Hashable) -> None:
        self._cache.pop(key, None)

    def clear_all(self) -> None:
        self._cache.clear()

    def dispatch_queue(self) -> None:
        queue = self._queue
        if not queue:
            return
        self._queue = []

        keys = [key for key, _ in queue]
        try:
            values = self._batch_load_fn(keys)
            if not is_collection(values) or len(keys) != len(values):
                raise ValueError(
                    "The batch load function must return a list with one value per key"
                    f" (got {len(keys)} keys)"
                )
        except Exception as error:
            self._fail(queue, error)
            return

        for (key, future), value in zip(queue, values):
            if isinstance(value, Exception):
                future.set_exception(value)
            else:
                future.set_result(value)

    def _fail(self, queue: List[Tuple[Hashable, SyncFuture]], error: Exception):
        for key, future in queue:
            self.clear(key)
            if not future.done():
                future.set_exception(error)
