"""
Tests — Realtime Listener
===========================
Phoenix join, change-frame delivery, heartbeats and failure mapping,
over a scripted socket in place of the websocket client.
"""

from __future__ import annotations

import json

import pytest
from websockets.exceptions import ConnectionClosedError, ConnectionClosedOK

from integration.adapters import ReplicaConfig, ReplicaUnavailableError
from integration.realtime import ChangeType, RealtimeChannel
from integration.realtime.client import RealtimeListener, realtime_url
from integration.realtime.errors import RealtimeJoinError

CONFIG = ReplicaConfig(url="https://demo.supabase.co", api_key="anon-key", timeout=2)
TOPIC = "realtime:public"


class ScriptedSocket:
    """
    Plays back frames from recv(); a callable frame is invoked instead
    (it may raise). When the script runs out the server closes cleanly.
    """

    def __init__(self, *frames, closing=None):
        self.frames = list(frames)
        self.sent = []
        self.closing = closing or ConnectionClosedOK(None, None)

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        return False

    def send(self, data):
        self.sent.append(json.loads(data))

    def recv(self, timeout=None):
        if not self.frames:
            raise self.closing
        frame = self.frames.pop(0)
        if callable(frame):
            return frame()
        return frame


class Connector:
    def __init__(self, socket):
        self.socket = socket
        self.urls = []
        self.options = []

    def __call__(self, url, **options):
        self.urls.append(url)
        self.options.append(options)
        return self.socket


class Recorder:
    def __init__(self):
        self.events = []

    def __call__(self, event):
        self.events.append(event)


def change(table, change_type, record=None, old_record=None):
    return json.dumps({
        "topic": TOPIC,
        "event": "postgres_changes",
        "payload": {"data": {
            "schema": "public", "table": table, "type": change_type,
            "commit_timestamp": "2024-01-02T10:00:00Z",
            "record": record, "old_record": old_record,
        }, "ids": [1]},
        "ref": None,
    })


def reply(status="ok", response=None):
    return json.dumps({
        "topic": TOPIC, "event": "phx_reply", "ref": "1",
        "payload": {"status": status, "response": response or {}},
    })


def _listener(socket, channel=None, **kwargs):
    return RealtimeListener(CONFIG, channel or RealtimeChannel(),
                            connect=Connector(socket), **kwargs)


# ══════════════════════════════════════════════════════════════
# PROTOCOL
# ══════════════════════════════════════════════════════════════


class TestProtocol:
    def test_url_targets_realtime_endpoint(self):
        assert realtime_url(CONFIG) == (
            "wss://demo.supabase.co/realtime/v1/websocket?apikey=anon-key&vsn=1.0.0"
        )

    def test_plain_http_uses_ws(self):
        config = ReplicaConfig(url="http://localhost:54321", api_key="k")
        assert realtime_url(config).startswith("ws://localhost:54321/realtime/v1/")

    def test_join_subscribes_every_table(self):
        socket = ScriptedSocket(reply())
        _listener(socket).listen()

        join = socket.sent[0]
        assert join["topic"] == TOPIC
        assert join["event"] == "phx_join"
        assert join["payload"]["access_token"] == "anon-key"
        assert [f["table"] for f in join["payload"]["config"]["postgres_changes"]] == [
            "rooms", "guests", "bookings", "transactions", "groups", "settings",
        ]

    def test_connect_uses_replica_timeout(self):
        connector = Connector(ScriptedSocket())
        RealtimeListener(CONFIG, RealtimeChannel(), connect=connector).listen()
        assert connector.options == [{"open_timeout": 2}]

    def test_requires_url(self):
        with pytest.raises(ValueError):
            RealtimeListener(ReplicaConfig(), RealtimeChannel())


# ══════════════════════════════════════════════════════════════
# DELIVERY
# ══════════════════════════════════════════════════════════════


class TestDelivery:
    def test_change_frames_reach_handlers(self):
        channel = RealtimeChannel()
        rooms, guests = Recorder(), Recorder()
        channel.subscribe("rooms", rooms)
        channel.subscribe("guests", guests)
        socket = ScriptedSocket(
            reply(),
            change("rooms", "UPDATE", record={"id": "101", "status": "DIRTY"}),
            change("guests", "DELETE", old_record={"id": "G1"}),
        )

        delivered = _listener(socket, channel).listen()

        assert delivered == 2
        assert rooms.events[0].new == {"id": "101", "status": "DIRTY"}
        assert guests.events[0].change_type == ChangeType.DELETE
        assert guests.events[0].record_id == "G1"

    def test_unparseable_frame_skipped(self):
        channel = RealtimeChannel()
        rooms = Recorder()
        channel.subscribe("rooms", rooms)
        socket = ScriptedSocket("not json", "[1, 2]",
                                change("rooms", "INSERT", record={"id": "102"}))

        assert _listener(socket, channel).listen() == 1
        assert [e.record_id for e in rooms.events] == ["102"]

    def test_max_messages_stops_early(self):
        socket = ScriptedSocket(
            change("rooms", "INSERT", record={"id": "101"}),
            change("rooms", "INSERT", record={"id": "102"}),
        )
        assert _listener(socket).listen(max_messages=1) == 1
        assert len(socket.frames) == 1

    def test_stop_from_handler(self):
        channel = RealtimeChannel()
        socket = ScriptedSocket(
            change("rooms", "INSERT", record={"id": "101"}),
            change("rooms", "INSERT", record={"id": "102"}),
        )
        listener = _listener(socket, channel)
        channel.subscribe("rooms", lambda event: listener.stop())

        assert listener.listen() == 1


# ══════════════════════════════════════════════════════════════
# HEARTBEAT
# ══════════════════════════════════════════════════════════════


class TestHeartbeat:
    def test_heartbeat_sent_when_interval_elapses(self):
        now = [0.0]

        def idle():
            now[0] += 30
            raise TimeoutError

        socket = ScriptedSocket(idle, change("rooms", "INSERT", record={"id": "101"}))
        _listener(socket, heartbeat_interval=25, clock=lambda: now[0]).listen()

        beat = socket.sent[1]
        assert beat["topic"] == "phoenix"
        assert beat["event"] == "heartbeat"
        assert beat["ref"] == "2"

    def test_no_heartbeat_before_interval(self):
        socket = ScriptedSocket(change("rooms", "INSERT", record={"id": "101"}))
        _listener(socket, heartbeat_interval=25, clock=lambda: 0.0).listen()
        assert [m["event"] for m in socket.sent] == ["phx_join"]

    def test_interval_must_be_positive(self):
        with pytest.raises(ValueError):
            _listener(ScriptedSocket(), heartbeat_interval=0)


# ══════════════════════════════════════════════════════════════
# FAILURES
# ══════════════════════════════════════════════════════════════


class TestFailures:
    def test_refused_join(self):
        socket = ScriptedSocket(reply("error", {"reason": "invalid access token"}))
        with pytest.raises(RealtimeJoinError) as exc:
            _listener(socket).listen()
        assert "invalid access token" in str(exc.value)

    def test_channel_error(self):
        socket = ScriptedSocket(json.dumps(
            {"topic": TOPIC, "event": "phx_error", "payload": {}, "ref": None},
        ))
        with pytest.raises(RealtimeJoinError):
            _listener(socket).listen()

    def test_subscription_system_error(self):
        socket = ScriptedSocket(json.dumps({
            "topic": TOPIC, "event": "system", "ref": None,
            "payload": {"status": "error", "message": "publication missing"},
        }))
        with pytest.raises(RealtimeJoinError):
            _listener(socket).listen()

    def test_other_topics_ignored(self):
        socket = ScriptedSocket(json.dumps(
            {"topic": "phoenix", "event": "phx_reply", "ref": "2",
             "payload": {"status": "ok", "response": {}}},
        ))
        assert _listener(socket).listen() == 0

    def test_abnormal_close_is_unavailable(self):
        socket = ScriptedSocket(closing=ConnectionClosedError(None, None))
        with pytest.raises(ReplicaUnavailableError):
            _listener(socket).listen()

    def test_connect_failure_is_unavailable(self):
        def refuse(url, **options):
            raise ConnectionRefusedError("connection refused")

        listener = RealtimeListener(CONFIG, RealtimeChannel(), connect=refuse)
        with pytest.raises(ReplicaUnavailableError):
            listener.listen()
