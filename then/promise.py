import logging
from threading import Event, Lock, local
from functools import partial
from collections import deque
from enum import IntEnum

from .error import PromiseRejected, PromiseTimeout
from .util import producer_arity


LOGGER = logging.getLogger(__name__)


class PromiseState(IntEnum):
    RESOLVED = 0
    REJECTED = 1
    PENDING = 2


class PromiseType(IntEnum):
    IMMEDIATE = 0
    LAZY = 1


class ChainRoot:
    """Start trigger of the first promise of a chain.

    One instance is shared by every promise derived from that first
    promise. Arming it runs the first producer once.
    """

    def __init__(self, start):
        self._start = start
        self._lock = Lock()
        self.armed = False

    def arm(self):
        with self._lock:
            if self.armed:
                return False
            self.armed = True
        self._start()
        return True


_DRAIN = local()


def run_callbacks(tasks):
    """Run ``tasks`` in order on the current thread.

    Tasks queued while a drain is already running on this thread are
    appended to it and run by the outermost call, so settling a long
    chain does not grow the stack.
    """
    queue = getattr(_DRAIN, 'queue', None)
    if queue is not None:
        queue.extend(tasks)
        return
    queue = _DRAIN.queue = deque(tasks)
    try:
        while queue:
            queue.popleft()()
    finally:
        _DRAIN.queue = None


class Deferred:
    def __init__(self, cls):
        self.resolve = None
        self.reject = None
        self.progress = None
        self.promise = cls(self._capture, PromiseType.IMMEDIATE, progress=True)

    def _capture(self, resolve, reject, progress):
        self.resolve = resolve
        self.reject = reject
        self.progress = progress


class Promise:
    """Eventual result of an asynchronous operation.

    ``run`` is the producer: it is called with ``(resolve, reject)``, or
    with ``(resolve, reject, progress)`` when it accepts three positional
    arguments, and must eventually call exactly one of ``resolve`` and
    ``reject``. Extra calls are ignored. ``progress`` may be called any
    number of times.

    A lazy promise runs its producer the first time it is observed
    through ``then``, ``on_error``, ``finally_``, ``progress`` or
    ``wait``. Observing any promise derived from it starts it as well,
    and the producer never runs more than once.
    """

    def __init__(self, run, ptype=PromiseType.LAZY, timeout=None,
                 progress=None):
        self._state = PromiseState.PENDING
        self._value = None
        self._error = None
        self._progress = None
        self._on_resolve = []
        self._on_reject = []
        self._on_settle = []
        self._on_progress = []
        self._lock = Lock()
        self._event = Event()
        self._timeout = timeout
        self._run = run
        if progress is None:
            progress = producer_arity(run) > 2
        self._run_progress = progress
        self._started = False
        self._root = None
        if ptype == PromiseType.IMMEDIATE:
            self.start()

    def __repr__(self):
        return '<%s 0x%x %s>' % (
            type(self).__name__, id(self), self._state.name.lower()
        )

    @property
    def state(self):
        return self._state

    @property
    def value(self):
        return self._value

    @property
    def error(self):
        return self._error

    @property
    def last_progress(self):
        return self._progress

    @property
    def started(self):
        return self._started

    @property
    def pending(self):
        return self._state == PromiseState.PENDING

    @property
    def resolved(self):
        return self._state == PromiseState.RESOLVED

    @property
    def rejected(self):
        return self._state == PromiseState.REJECTED

    def _settle(self, state, value):
        with self._lock:
            if self._state != PromiseState.PENDING:
                LOGGER.debug('%r: %s(%r) ignored',
                             self, state.name.lower(), value)
                return False
            self._state = state
            if state == PromiseState.RESOLVED:
                self._value = value
                callbacks = self._on_resolve
            else:
                self._error = value
                callbacks = self._on_reject
            on_settle = self._on_settle
            self._on_resolve = []
            self._on_reject = []
            self._on_settle = []
        LOGGER.debug('%r: %r', self, value)
        tasks = [partial(callback, value) for callback in callbacks]
        tasks.extend(on_settle)
        tasks.append(self._event.set)
        run_callbacks(tasks)
        return True

    def _resolve(self, value=None):
        return self._settle(PromiseState.RESOLVED, value)

    def _reject(self, error):
        return self._settle(PromiseState.REJECTED, error)

    def _report_progress(self, value):
        with self._lock:
            self._progress = value
            callbacks = list(self._on_progress)
        run_callbacks([partial(callback, value) for callback in callbacks])

    def _subscribe(self, on_resolve=None, on_reject=None,
                   on_settle=None, on_progress=None):
        with self._lock:
            if on_progress is not None:
                self._on_progress.append(on_progress)
            state = self._state
            if state == PromiseState.PENDING:
                if on_resolve is not None:
                    self._on_resolve.append(on_resolve)
                if on_reject is not None:
                    self._on_reject.append(on_reject)
                if on_settle is not None:
                    self._on_settle.append(on_settle)
                return
        if state == PromiseState.RESOLVED:
            if on_resolve is not None:
                on_resolve(self._value)
        elif on_reject is not None:
            on_reject(self._error)
        if on_settle is not None:
            on_settle()

    def start(self):
        with self._lock:
            if self._started:
                return self
            self._started = True
        LOGGER.debug('%r: start', self)
        try:
            if self._run_progress:
                self._run(self._resolve, self._reject, self._report_progress)
            else:
                self._run(self._resolve, self._reject)
        except Exception as ex:
            LOGGER.debug('%r: producer raised %r', self, ex)
            self._reject(ex)
        return self

    def _chain_root(self):
        with self._lock:
            if self._root is None:
                self._root = ChainRoot(self.start)
            return self._root

    def arm(self):
        """Run the first producer of the chain and this promise's own
        producer, each at most once.
        """
        self._chain_root().arm()
        return self.start()

    def _link(self, run):
        ret = Promise(run, progress=True)
        ret._root = self._chain_root()
        return ret.start()

    @staticmethod
    def _adopt(value, resolve, reject, progress):
        if isinstance(value, Promise):
            value.arm()._subscribe(resolve, reject, on_progress=progress)
        else:
            resolve(value)

    @staticmethod
    def _apply(func, args, resolve, reject):
        try:
            value = func(*args)
        except Exception as ex:
            LOGGER.debug('%r raised %r', func, ex)
            reject(ex)
        else:
            resolve(value)

    def register_then(self, on_resolve):
        """Child resolving with ``on_resolve(value)``.

        A promise returned by ``on_resolve`` is flattened. ``on_resolve``
        may also be a promise, whose outcome becomes the child's once
        this promise resolves. Rejections pass through unchanged.

        The ``register_*`` methods link the child without arming the
        chain; ``arm`` or ``wait`` on any link runs it.
        """
        if isinstance(on_resolve, Promise):
            promise = on_resolve
            on_resolve = lambda _: promise

        def run(resolve, reject, progress):
            def adopt(value):
                self._adopt(value, resolve, reject, progress)
            self._subscribe(
                lambda value: self._apply(on_resolve, (value,), adopt, reject),
                reject,
                on_progress=progress
            )

        return self._link(run)

    def register_on_error(self, on_reject):
        """Child resolving with ``None`` once this promise settles.

        ``on_reject`` is only called if this promise is rejected.
        """
        def run(resolve, reject, progress):
            self._subscribe(
                lambda _: resolve(None),
                lambda error: self._apply(
                    on_reject, (error,), lambda _: resolve(None), reject
                ),
                on_progress=progress
            )

        return self._link(run)

    def register_finally(self, on_settle):
        """Child resolving with ``on_settle()``, called after every
        other callback of this promise whichever way it settles.
        """
        def run(resolve, reject, progress):
            self._subscribe(
                on_settle=lambda: self._apply(on_settle, (), resolve, reject),
                on_progress=progress
            )

        return self._link(run)

    def register_progress(self, on_progress):
        def run(resolve, reject, progress):
            self._subscribe(
                lambda _: resolve(None),
                reject,
                on_progress=lambda value: self._apply(
                    on_progress, (value,), lambda _: progress(value), reject
                )
            )

        return self._link(run)

    def then(self, on_resolve):
        return self.arm().register_then(on_resolve)

    def on_error(self, on_reject):
        return self.arm().register_on_error(on_reject)

    def finally_(self, on_settle):
        return self.arm().register_finally(on_settle)

    def progress(self, on_progress):
        return self.arm().register_progress(on_progress)

    def wait(self, timeout=-1):
        if timeout is not None and timeout < 0:
            timeout = self._timeout
        self.arm()
        if self._state != PromiseState.PENDING:
            return True
        return self._event.wait(timeout)

    def result(self, timeout=-1):
        if not self.wait(timeout):
            raise PromiseTimeout()
        if self._state == PromiseState.RESOLVED:
            return self._value
        if isinstance(self._error, BaseException):
            raise self._error
        raise PromiseRejected(self._error)

    @classmethod
    def resolve(cls, value):
        return cls(
            lambda resolve, reject: resolve(value),
            PromiseType.IMMEDIATE
        )

    @classmethod
    def reject(cls, error):
        return cls(
            lambda resolve, reject: reject(error),
            PromiseType.IMMEDIATE
        )

    @classmethod
    def wrap(cls, func, *args, ptype=PromiseType.LAZY, **kwargs):
        return cls(
            lambda resolve, reject: resolve(func(*args, **kwargs)),
            ptype
        )

    @classmethod
    def defer(cls):
        return Deferred(cls)
