"""
HotelSphere Integration — Realtime Listener
=============================================
Websocket client for the hosted replica's change feed (Supabase
Realtime, Phoenix channel protocol v1). Every `postgres_changes`
frame becomes one RealtimeChannel.deliver() call.

    connect  wss://{host}/realtime/v1/websocket?apikey={key}&vsn=1.0.0
    send     phx_join on topic realtime:{schema}, one filter per table
    loop     recv → deliver; heartbeat every `heartbeat_interval` seconds

Failure mapping:
    handshake / socket error / abnormal close → ReplicaUnavailableError
    join refused, channel error or close      → RealtimeJoinError
A clean server close ends listen() normally. There is no reconnect
loop here; the caller decides whether to listen again and should run
bootstrap() first, since changes missed while offline are not replayed.
"""

from __future__ import annotations

import json
import logging
import threading
import time
from typing import Any, Callable, Iterable, Optional
from urllib.parse import urlencode, urlsplit

from websockets.exceptions import ConnectionClosedOK, WebSocketException
from websockets.sync.client import connect as ws_connect

from core.primitives.hotel import ALL_TABLES
from integration.adapters import ReplicaConfig, ReplicaUnavailableError
from integration.realtime import RealtimeChannel
from integration.realtime.errors import RealtimeJoinError

logger = logging.getLogger("hotelsphere.realtime")

PROTOCOL_VERSION = "1.0.0"
HEARTBEAT_TOPIC = "phoenix"
DEFAULT_HEARTBEAT_INTERVAL = 25.0


def realtime_url(config: ReplicaConfig) -> str:
    parts = urlsplit(config.url)
    scheme = "wss" if parts.scheme == "https" else "ws"
    query = urlencode({"apikey": config.api_key, "vsn": PROTOCOL_VERSION})
    base = parts.path.rstrip("/")
    return f"{scheme}://{parts.netloc}{base}/realtime/v1/websocket?{query}"


class RealtimeListener:
    """
    Blocking change-feed consumer.

    `connect` defaults to websockets' sync client and must return a
    context manager with send(str) and recv(timeout) -> str.
    `clock` is a monotonic seconds source for heartbeat scheduling.
    """

    def __init__(
        self,
        config: ReplicaConfig,
        channel: RealtimeChannel,
        *,
        schema: str = "public",
        tables: Iterable[str] = ALL_TABLES,
        heartbeat_interval: float = DEFAULT_HEARTBEAT_INTERVAL,
        connect: Optional[Callable[..., Any]] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if not config.enabled:
            raise ValueError("RealtimeListener requires a replica url.")
        if heartbeat_interval <= 0:
            raise ValueError("heartbeat_interval must be positive.")
        self._config = config
        self._channel = channel
        self._schema = schema
        self._tables = tuple(tables)
        self._heartbeat_interval = heartbeat_interval
        self._connect = connect or ws_connect
        self._clock = clock
        self._ref = 0
        self._stopped = threading.Event()

    @property
    def url(self) -> str:
        return realtime_url(self._config)

    @property
    def topic(self) -> str:
        return f"realtime:{self._schema}"

    def stop(self) -> None:
        """Ask listen() to return after the frame in hand."""
        self._stopped.set()

    # ── protocol messages ────────────────────────────────────

    def _next_ref(self) -> str:
        self._ref += 1
        return str(self._ref)

    def join_message(self) -> dict:
        ref = self._next_ref()
        return {
            "topic": self.topic,
            "event": "phx_join",
            "payload": {
                "config": {
                    "broadcast": {"self": False},
                    "presence": {"key": ""},
                    "postgres_changes": [
                        {"event": "*", "schema": self._schema, "table": table}
                        for table in self._tables
                    ],
                },
                "access_token": self._config.api_key,
            },
            "ref": ref,
            "join_ref": ref,
        }

    def heartbeat_message(self) -> dict:
        return {
            "topic": HEARTBEAT_TOPIC,
            "event": "heartbeat",
            "payload": {},
            "ref": self._next_ref(),
        }

    def handle_frame(self, raw: Any) -> Optional[dict]:
        """
        Process one server frame.

        Returns the channel's delivery summary for a change frame, None
        for anything else. Unparseable frames are logged and skipped.

        Raises RealtimeJoinError when the server refuses or drops the
        subscription.
        """
        try:
            frame = json.loads(raw)
        except (TypeError, ValueError):
            logger.warning(f"Skipped unparseable realtime frame: {raw!r:.200}")
            return None
        if not isinstance(frame, dict):
            logger.warning(f"Skipped realtime frame that is not an object: {raw!r:.200}")
            return None

        event = frame.get("event")
        payload = frame.get("payload") or {}

        if event == "postgres_changes":
            data = payload.get("data") or {}
            return self._channel.deliver({
                "table": data.get("table"),
                "type": data.get("type"),
                "record": data.get("record"),
                "old_record": data.get("old_record"),
            })

        if frame.get("topic") != self.topic:
            return None
        if event == "phx_reply" and payload.get("status") != "ok":
            raise RealtimeJoinError(self.topic, str(payload.get("response")))
        if event in ("phx_error", "phx_close"):
            raise RealtimeJoinError(self.topic, f"server sent {event}")
        if event == "system" and payload.get("status") == "error":
            raise RealtimeJoinError(self.topic, str(payload.get("message")))
        if event == "phx_reply":
            logger.info(f"Realtime subscription '{self.topic}' joined")
        return None

    # ── loop ─────────────────────────────────────────────────

    def listen(self, max_messages: Optional[int] = None) -> int:
        """
        Block and deliver changes until the server closes the socket,
        stop() is called, or `max_messages` change frames were delivered.

        Returns the number of change frames delivered.
        """
        self._stopped.clear()
        delivered = 0
        try:
            with self._connect(self.url, open_timeout=self._config.timeout) as socket:
                socket.send(json.dumps(self.join_message()))
                next_beat = self._clock() + self._heartbeat_interval

                while not self._stopped.is_set():
                    if max_messages is not None and delivered >= max_messages:
                        break
                    try:
                        raw = socket.recv(timeout=max(0.0, next_beat - self._clock()))
                    except TimeoutError:
                        raw = None

                    if self._clock() >= next_beat:
                        socket.send(json.dumps(self.heartbeat_message()))
                        next_beat = self._clock() + self._heartbeat_interval

                    if raw is not None and self.handle_frame(raw) is not None:
                        delivered += 1
        except ConnectionClosedOK:
            logger.info("Realtime feed closed by the replica")
        except (WebSocketException, OSError) as exc:
            raise ReplicaUnavailableError(
                f"Realtime feed lost: {exc}", system_id=self._config.system_id,
            ) from exc

        logger.info(f"Realtime listener stopped after {delivered} change(s)")
        return delivered
