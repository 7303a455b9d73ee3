"""
TravelMemory Backend — MongoDB Connection Management
=====================================================

What:  The Storage Connector: one long-lived AsyncMongoClient per process,
       its connection status, and a subscription surface for lifecycle events.
How:   `connect()` pings the server and records the outcome. A pymongo
       ServerHeartbeatListener keeps the status current after startup, so a
       dropped server is reported even when no request touches the database.
Who:   Built by the application factory (main.create_app) and handed to route
       dependencies through `app.state.connector`.
When:  Client constructed with the app; `connect()` scheduled as a background
       task during lifespan startup so it never delays the HTTP listener.

Status transitions:
    connecting ──ping ok──────────▶ connected ──heartbeat failed──▶ error
        │                               ▲                            │
        └──ping failed──▶ error ────────┴──────heartbeat ok──────────┘

Subscribers are notified once per transition, not once per heartbeat.
Heartbeats are tracked per server address: a drop is reported only when the
last reachable member fails, so a replica set with one member down stays
connected.
"""

import logging
from enum import Enum
from typing import Any, Callable, List, Optional, Set, Tuple

from pymongo import AsyncMongoClient
from pymongo.asynchronous.database import AsyncDatabase
from pymongo.errors import PyMongoError
from pymongo.monitoring import (
    ServerHeartbeatFailedEvent,
    ServerHeartbeatListener,
    ServerHeartbeatStartedEvent,
    ServerHeartbeatSucceededEvent,
)

from travel_memory.exceptions import StorageConnectError

logger = logging.getLogger(__name__)

# Used when the connection string carries no database path
DEFAULT_DATABASE_NAME = "TravelMemory-Mern"

ConnectCallback = Callable[[], None]
ErrorCallback = Callable[[StorageConnectError], None]
Address = Tuple[str, int]


class ConnectionStatus(str, Enum):
    """Lifecycle state of the single database connection."""

    CONNECTING = "connecting"
    CONNECTED = "connected"
    ERROR = "error"


class _HeartbeatListener(ServerHeartbeatListener):
    """Forwards driver heartbeat outcomes to the owning connector."""

    def __init__(self, connector: "MongoConnector"):
        self._connector = connector

    def started(self, event: ServerHeartbeatStartedEvent) -> None:
        pass

    def succeeded(self, event: ServerHeartbeatSucceededEvent) -> None:
        self._connector._on_heartbeat_succeeded(event.connection_id)

    def failed(self, event: ServerHeartbeatFailedEvent) -> None:
        self._connector._on_heartbeat_failed(event.connection_id, event.reply)


class MongoConnector:
    """
    Owns the process-wide MongoDB client and tracks its connection status.

    Attributes:
        uri:        Connection string the client was built with
        client:     The live AsyncMongoClient (lazy, usable before connect())
        status:     ConnectionStatus
        last_error: Most recent StorageConnectError, or None

    Subscribers registered with on_connect()/on_error() are plain callables.
    An exception raised by one subscriber is logged and does not stop the
    others from being called.
    """

    def __init__(
        self,
        uri: str,
        server_selection_timeout_ms: Optional[int] = None,
        **client_kwargs: Any,
    ):
        self.uri = uri
        self.status = ConnectionStatus.CONNECTING
        self.last_error: Optional[StorageConnectError] = None
        self._connect_callbacks: List[ConnectCallback] = []
        self._error_callbacks: List[ErrorCallback] = []
        # Members whose latest heartbeat succeeded
        self._reachable: Set[Address] = set()

        if server_selection_timeout_ms is not None:
            client_kwargs.setdefault("serverSelectionTimeoutMS", server_selection_timeout_ms)
        self.client: AsyncMongoClient = AsyncMongoClient(
            uri,
            event_listeners=[_HeartbeatListener(self)],
            **client_kwargs,
        )

    # ── Exposed state ─────────────────────────────────────────────────────

    @property
    def database(self) -> AsyncDatabase:
        """Database named in the connection string, else DEFAULT_DATABASE_NAME."""
        return self.client.get_default_database(default=DEFAULT_DATABASE_NAME)

    @property
    def is_ready(self) -> bool:
        return self.status is ConnectionStatus.CONNECTED

    # ── Subscriptions ─────────────────────────────────────────────────────

    def on_connect(self, callback: ConnectCallback) -> None:
        """Call `callback()` every time the connection becomes available."""
        self._connect_callbacks.append(callback)

    def on_error(self, callback: ErrorCallback) -> None:
        """Call `callback(error)` every time the connection is lost or fails."""
        self._error_callbacks.append(callback)

    # ── Lifecycle ─────────────────────────────────────────────────────────

    async def connect(self) -> bool:
        """
        Initiate the connection and report the outcome to subscribers.

        Never raises for connection failures and never retries: a failure is
        recorded as status ERROR and delivered to on_error subscribers.

        Returns:
            True when the server answered the ping, False otherwise.
        """
        self.status = ConnectionStatus.CONNECTING
        logger.debug("Connecting to MongoDB (%s)", self.uri)
        try:
            await self.client.admin.command("ping")
        except PyMongoError as e:
            self._mark_error(e)
            return False
        self._mark_connected()
        return True

    async def close(self) -> None:
        """Close every pooled connection held by the client."""
        await self.client.close()

    # ── State transitions ─────────────────────────────────────────────────

    def _mark_connected(self) -> None:
        if self.status is ConnectionStatus.CONNECTED:
            return
        self.status = ConnectionStatus.CONNECTED
        self.last_error = None
        for callback in list(self._connect_callbacks):
            self._notify(callback)

    def _mark_error(self, cause: Optional[BaseException]) -> None:
        if self.status is ConnectionStatus.ERROR:
            return
        self.status = ConnectionStatus.ERROR
        error = StorageConnectError(self.uri, cause)
        self.last_error = error
        for callback in list(self._error_callbacks):
            self._notify(callback, error)

    def _on_heartbeat_succeeded(self, address: Address) -> None:
        self._reachable.add(address)
        # Only recoveries are reported here; the first success belongs to connect()
        if self.status is ConnectionStatus.ERROR:
            self._mark_connected()

    def _on_heartbeat_failed(self, address: Address, cause: Optional[BaseException]) -> None:
        self._reachable.discard(address)
        # One member of a replica set going down is not an outage
        if self.status is ConnectionStatus.CONNECTED and not self._reachable:
            self._mark_error(cause)

    @staticmethod
    def _notify(callback: Callable[..., None], *args: Any) -> None:
        try:
            callback(*args)
        except Exception:
            logger.exception("Connection status subscriber %r failed", callback)
