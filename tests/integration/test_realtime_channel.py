"""
Tests — Realtime Change Feed
===============================
Message parsing, table routing, handler isolation.
"""

from __future__ import annotations

import pytest

from integration.adapters import IntegrationError, ValidationError
from integration.realtime import ChangeEvent, ChangeType, RealtimeChannel
from integration.realtime.errors import DuplicateHandlerError, UnknownChannelTableError


# ══════════════════════════════════════════════════════════════
# CHANGE EVENT
# ══════════════════════════════════════════════════════════════


class TestChangeEvent:
    def test_parses_supabase_shape(self):
        event = ChangeEvent.from_message({
            "table": "rooms", "eventType": "UPDATE",
            "new": {"id": "101", "status": "DIRTY"}, "old": {"id": "101"},
        })
        assert event.change_type == ChangeType.UPDATE
        assert event.record_id == "101"

    def test_parses_alternate_spelling(self):
        event = ChangeEvent.from_message({
            "table": "guests", "type": "delete", "old_record": {"id": "G1"},
        })
        assert event.change_type == ChangeType.DELETE
        assert event.record_id == "G1"

    def test_unknown_type_rejected(self):
        with pytest.raises(ValidationError):
            ChangeEvent.from_message({"table": "rooms", "eventType": "TRUNCATE"})

    def test_delete_without_old_rejected(self):
        with pytest.raises(ValidationError):
            ChangeEvent.from_message({"table": "rooms", "eventType": "DELETE"})

    def test_insert_without_new_rejected(self):
        with pytest.raises(ValueError):
            ChangeEvent(table="rooms", change_type=ChangeType.INSERT)

    def test_non_dict_rejected(self):
        with pytest.raises(ValidationError):
            ChangeEvent.from_message(["rooms"])


# ══════════════════════════════════════════════════════════════
# CHANNEL
# ══════════════════════════════════════════════════════════════


class Recorder:
    def __init__(self):
        self.events = []

    def __call__(self, event):
        self.events.append(event)


def _insert(table="rooms", record_id="101"):
    return {"table": table, "eventType": "INSERT", "new": {"id": record_id}}


class TestSubscription:
    def test_unknown_table_rejected(self):
        with pytest.raises(UnknownChannelTableError):
            RealtimeChannel().subscribe("invoices", Recorder())

    def test_duplicate_handler_rejected(self):
        channel = RealtimeChannel()
        handler = Recorder()
        channel.subscribe("rooms", handler)
        with pytest.raises(DuplicateHandlerError):
            channel.subscribe("rooms", handler)

    def test_non_callable_rejected(self):
        with pytest.raises(IntegrationError):
            RealtimeChannel().subscribe("rooms", "not a handler")

    def test_unsubscribe_all(self):
        channel = RealtimeChannel()
        channel.subscribe("rooms", Recorder())
        channel.unsubscribe_all()
        assert not channel.is_subscribed("rooms")


class TestDelivery:
    def test_routes_by_table(self):
        channel = RealtimeChannel()
        rooms, guests = Recorder(), Recorder()
        channel.subscribe("rooms", rooms)
        channel.subscribe("guests", guests)

        result = channel.deliver(_insert("rooms"))

        assert result["handlers_notified"] == 1
        assert [e.record_id for e in rooms.events] == ["101"]
        assert guests.events == []

    def test_failing_handler_does_not_block_others(self):
        channel = RealtimeChannel()
        after = Recorder()

        def broken(event):
            raise RuntimeError("handler bug")

        channel.subscribe("rooms", broken)
        channel.subscribe("rooms", after)

        result = channel.deliver(_insert())

        assert result["handlers_failed"] == 1
        assert result["handlers_notified"] == 1
        assert result["failures"][0]["error_type"] == "RuntimeError"
        assert len(after.events) == 1

    def test_malformed_message_dropped_without_raising(self):
        channel = RealtimeChannel()
        handler = Recorder()
        channel.subscribe("rooms", handler)

        result = channel.deliver({"table": "rooms", "eventType": "?"})

        assert result["rejected"]
        assert handler.events == []

    def test_no_handlers(self):
        result = RealtimeChannel().deliver(_insert("groups"))
        assert result["table"] == "groups"
        assert result["handlers_notified"] == 0
