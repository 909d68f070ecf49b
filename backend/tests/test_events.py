"""
Tests for the per-instance EventBus.
"""

import logging

from gantt.events import EventBus
from gantt.services.store import TaskStore


class TestEventBus:

    def test_listeners_run_in_registration_order(self):
        bus = EventBus()
        calls = []
        bus.on("ping", lambda data: calls.append(("first", data)))
        bus.on("ping", lambda data: calls.append(("second", data)))

        bus.emit("ping", 1)

        assert calls == [("first", 1), ("second", 1)]

    def test_emit_without_listeners(self):
        EventBus().emit("nothing")

    def test_off_removes_only_that_listener(self):
        bus = EventBus()
        calls = []

        def first(data):
            calls.append("first")

        def second(data):
            calls.append("second")

        bus.on("ping", first)
        bus.on("ping", second)
        bus.off("ping", first)
        bus.off("ping", first)
        bus.off("unknown", first)

        bus.emit("ping")

        assert calls == ["second"]
        assert bus.listeners("ping") == [second]

    def test_failing_listener_does_not_stop_dispatch(self, caplog):
        bus = EventBus()
        calls = []

        def broken(data):
            raise RuntimeError("boom")

        bus.on("ping", broken)
        bus.on("ping", calls.append)

        with caplog.at_level(logging.ERROR, logger="gantt.events"):
            bus.emit("ping", "payload")

        assert calls == ["payload"]
        assert "Error in event listener for ping" in caplog.text

    def test_listener_may_unsubscribe_while_called(self):
        bus = EventBus()
        calls = []

        def once(data):
            calls.append(data)
            bus.off("ping", once)

        bus.on("ping", once)
        bus.emit("ping", 1)
        bus.emit("ping", 2)

        assert calls == [1]

    def test_clear(self):
        bus = EventBus()
        bus.on("ping", print)

        bus.clear()

        assert bus.listeners("ping") == []


class TestInstanceIsolation:

    def test_stores_do_not_share_listeners(self):
        first, second = TaskStore(), TaskStore()
        seen = []
        first.on("taskAdded", seen.append)

        second.add_task({"name": "Other", "start_date": "2024-01-01", "end_date": "2024-01-02"})

        assert seen == []

    def test_failing_store_listener_does_not_block_mutation(self, store):
        store.on("taskAdded", lambda task: 1 / 0)

        task = store.add_task({"name": "A", "start_date": "2024-01-01", "end_date": "2024-01-02"})

        assert store.get_task(task.id) is task
