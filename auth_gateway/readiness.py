"""
Readiness gate for the auth endpoint: seeds the OIDC client registry once per process.

Concurrent first requests share one seeding task instead of each starting their own.
Success is terminal. A StoreError lets the next request try again; a ConfigurationError
is kept and re-raised, since the same configuration will fail the same way.
"""
import asyncio
import enum
import logging
import threading

from auth_gateway.client_config import ClientConfigSource
from auth_gateway.errors import GateConcurrencyViolation, SeedError, StoreError
from auth_gateway.seed import seed_clients
from auth_gateway.store import ClientRegistryStore

logger = logging.getLogger(__name__)


class ReadinessState(str, enum.Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    READY = "ready"
    FAILED = "failed"
    # Integration disabled: behaves as permanently ready, never seeds
    INACTIVE = "inactive"


_PASS_STATES = (ReadinessState.READY, ReadinessState.INACTIVE)


class ReadinessGate:
    """
    Single-flight gate in front of the auth handler.

    All state transitions go through _begin (no await between check and set) and _finish
    (the seeding task's done-callback). The task is awaited through asyncio.shield, so a
    cancelled request never cancels a seeding run other requests are waiting on.

    The gate serves a single event loop: the in-flight handle is an asyncio.Task bound to the
    loop that started it. A caller from another loop while a run is in flight gets
    GateConcurrencyViolation instead of a hang. The lock only keeps _begin and _finish atomic.
    """

    def __init__(
        self,
        source: ClientConfigSource,
        store: ClientRegistryStore,
        *,
        enabled: bool = True,
    ):
        self._source = source
        self._store = store
        self._lock = threading.Lock()
        self._state = ReadinessState.NOT_STARTED if enabled else ReadinessState.INACTIVE
        self._task: asyncio.Task | None = None
        self._error: BaseException | None = None
        self._running = 0
        self._waiters = 0
        self.attempts = 0

    @property
    def state(self) -> ReadinessState:
        return self._state

    @property
    def last_error(self) -> BaseException | None:
        return self._error

    @property
    def waiters(self) -> int:
        """Callers currently waiting on the in-flight seeding run."""
        return self._waiters

    @property
    def is_ready(self) -> bool:
        return self._state in _PASS_STATES

    async def ensure_ready(self) -> None:
        """
        Return once the client registry is seeded. Raises the attempt's SeedError if seeding failed,
        or GateConcurrencyViolation if the single-flight contract is broken.
        """
        if self._state in _PASS_STATES:
            return
        with self._lock:
            task = self._begin()
        if task is None:
            return
        self._waiters += 1
        try:
            await asyncio.shield(task)
        finally:
            self._waiters -= 1

    def _begin(self) -> asyncio.Task | None:
        """Return the task to wait on, starting one if none is in flight. Caller holds the lock."""
        if self._state in _PASS_STATES:
            return None
        if self._state is ReadinessState.IN_PROGRESS:
            if self._task.get_loop() is not asyncio.get_running_loop():
                raise GateConcurrencyViolation("client registry seeding is in flight on another event loop")
            return self._task
        if self._state is ReadinessState.FAILED and not getattr(self._error, "retryable", True):
            raise self._error
        task = asyncio.get_running_loop().create_task(self._seed())
        task.add_done_callback(self._finish)
        self._task = task
        self._state = ReadinessState.IN_PROGRESS
        self.attempts += 1
        logger.debug("Client registry seeding started (attempt %d)", self.attempts)
        return task

    async def _seed(self) -> None:
        if self._running:
            raise GateConcurrencyViolation("client registry seeding started while another run is active")
        self._running += 1
        try:
            await seed_clients(self._source, self._store)
        finally:
            self._running -= 1

    def _finish(self, task: asyncio.Task) -> None:
        with self._lock:
            self._task = None
            if task.cancelled():
                # Only happens when the loop is torn down mid-seed
                self._state = ReadinessState.FAILED
                self._error = StoreError("Client registry seeding was cancelled")
                logger.warning("Client registry seeding cancelled; next request will retry")
                return
            error = task.exception()
            if error is None:
                self._state = ReadinessState.READY
                self._error = None
                logger.info("OIDC client registry ready")
                return
            self._state = ReadinessState.FAILED
            self._error = error
        if isinstance(error, SeedError):
            logger.error(
                "OIDC client seeding failed (%s): %s",
                "will retry on next request" if error.retryable else "not retrying",
                error,
            )
        else:
            logger.error("OIDC client seeding failed unexpectedly: %r", error)
