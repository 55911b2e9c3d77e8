"""
Backend selection and the one-way fallback to the volatile store.

The selector starts out routing to the durable backend while the startup
connection attempt is in flight. If that attempt fails or times out, routing
switches to the volatile backend for the rest of the process lifetime. A
connection that comes back later only clears the diagnostic error; records
written while volatile are never migrated and traffic is never promoted back.
"""
from __future__ import annotations

import enum
import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, Optional

from sqlalchemy import event, text
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import ArgumentError

from gigbook.db.create_tables import create_all

from .base import RecordStore

logger = logging.getLogger(__name__)

DEFAULT_HANDLE = "Demo User"
_TLS_SSLMODES = {"require", "verify-ca", "verify-full"}
_TRUTHY = {"1", "true", "yes", "on", "required"}


class Backend(str, enum.Enum):
    DURABLE = "durable"
    VOLATILE = "volatile"


class ConnectionState(enum.IntEnum):
    DISCONNECTED = 0
    CONNECTED = 1
    CONNECTING = 2
    DISCONNECTING = 3

    @property
    def label(self) -> str:
        return self.name.lower()


@dataclass(frozen=True)
class HealthReport:
    connection_code: int
    connection_state: str
    last_error: Optional[str]
    secure: bool
    memory: bool


def is_secure_endpoint(url: str) -> bool:
    """True when the connection string asks for an encrypted, managed endpoint."""
    try:
        query = make_url(url).query
    except ArgumentError:
        return False

    def _first(key: str) -> str:
        value = query.get(key)
        if isinstance(value, tuple):
            value = value[0] if value else ""
        return str(value or "").strip().lower()

    if _first("sslmode") in _TLS_SSLMODES or _first("ssl_mode") in _TLS_SSLMODES:
        return True
    return _first("ssl") in _TRUTHY or _first("tls") in _TRUTHY


def warn_on_plaintext_endpoint(url: str) -> None:
    try:
        parsed = make_url(url)
    except ArgumentError:
        return
    if parsed.get_backend_name() != "sqlite" and parsed.host and not is_secure_endpoint(url):
        logger.warning(
            "DATABASE_URL points at %s without a TLS parameter. Managed databases usually "
            "require sslmode=require (or ssl=true).",
            parsed.host,
        )


def database_probe(engine: Engine) -> Callable[[], None]:
    """Startup check: open a connection, run a trivial query, create missing tables."""

    def probe() -> None:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        create_all(engine)

    return probe


class BackendSelector:
    """Owns the process-wide routing decision.

    The routing flag is written in exactly one place, the completion of the
    startup connection attempt. Request paths only read ``store``.
    """

    def __init__(
        self,
        durable: RecordStore,
        volatile: RecordStore,
        *,
        probe: Callable[[], None],
        default_owner: str = "user1",
        secure_endpoint: bool = False,
        connect_timeout: float = 15.0,
        on_close: Optional[Callable[[], None]] = None,
    ) -> None:
        self.durable = durable
        self.volatile = volatile
        self.default_owner = default_owner
        self.secure_endpoint = secure_endpoint
        self.connect_timeout = connect_timeout
        self._probe = probe
        self._on_close = on_close
        self._store: RecordStore = durable
        self._backend = Backend.DURABLE
        self._connection = ConnectionState.DISCONNECTED
        self._last_error: Optional[str] = None
        self._lock = threading.Lock()
        self._settled = threading.Event()
        self._attempt: Optional[Future] = None

    # -------------------------- reads --------------------------
    @property
    def store(self) -> RecordStore:
        return self._store

    @property
    def backend(self) -> Backend:
        return self._backend

    @property
    def settled(self) -> bool:
        return self._settled.is_set()

    def diagnostics(self) -> HealthReport:
        return HealthReport(
            connection_code=int(self._connection),
            connection_state=self._connection.label,
            last_error=self._last_error,
            secure=self.secure_endpoint,
            memory=self._backend is Backend.VOLATILE,
        )

    # -------------------------- connection lifecycle --------------------------
    def start(self) -> Future:
        """Kick off the startup connection attempt without blocking."""
        if self._attempt is not None:
            return self._attempt
        self._connection = ConnectionState.CONNECTING
        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="gigbook-connect")
        future = executor.submit(self._probe)
        executor.shutdown(wait=False)
        timer = threading.Timer(self.connect_timeout, self._on_timeout)
        timer.daemon = True
        timer.start()

        def _done(fut: Future) -> None:
            timer.cancel()
            self._resolve(fut.exception())

        future.add_done_callback(_done)
        self._attempt = future
        return future

    def connect(self) -> Backend:
        """Run the startup attempt and wait until it has been resolved."""
        self.start()
        self._settled.wait()
        return self._backend

    def _on_timeout(self) -> None:
        self._resolve(TimeoutError(f"database connection timed out after {self.connect_timeout:g}s"))

    def _resolve(self, error: Optional[BaseException]) -> None:
        with self._lock:
            if self._settled.is_set():
                return
            if error is None:
                self._connection = ConnectionState.CONNECTED
                self._last_error = None
                logger.info("Connected to durable database")
            else:
                self._fall_back(error)
            self._settled.set()

    def _fall_back(self, error: BaseException) -> None:
        self._last_error = str(error) or error.__class__.__name__
        self._connection = ConnectionState.DISCONNECTED
        logger.error("Database connection error: %s", self._last_error)
        self._store = self.volatile
        self._backend = Backend.VOLATILE
        logger.warning("Falling back to in-memory store. Data will not persist.")
        self.volatile.users.ensure(self.default_owner, handle=DEFAULT_HANDLE)

    def on_connected(self) -> None:
        """A durable connection was opened. Diagnostics only; routing is unchanged."""
        self._last_error = None
        self._connection = ConnectionState.CONNECTED
        if self._backend is Backend.VOLATILE:
            logger.info("Durable database reachable again; requests stay on the in-memory store")

    def on_error(self, error: BaseException) -> None:
        self._last_error = str(error) or error.__class__.__name__

    def close(self) -> None:
        self._connection = ConnectionState.DISCONNECTING
        try:
            if self._on_close is not None:
                self._on_close()
        finally:
            self._connection = ConnectionState.DISCONNECTED
            logger.info("Durable database connection closed")


def watch_engine(selector: BackendSelector, engine: Engine) -> None:
    """Feed SQLAlchemy connection events into the selector's diagnostics."""

    @event.listens_for(engine, "connect")
    def _connected(dbapi_connection, connection_record):  # noqa: ANN001
        selector.on_connected()

    @event.listens_for(engine, "handle_error")
    def _errored(context):  # noqa: ANN001
        # Statement failures (constraints, bad SQL) are not connection errors.
        if context.is_disconnect or context.connection is None:
            selector.on_error(context.original_exception)
