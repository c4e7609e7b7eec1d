"""Tests for the agent message bus."""

import threading

from cropwatch.amb import Message, MessageBus, MessageType, Topics


def make_message(topic=Topics.SYSTEM, payload=None, message_type=MessageType.SYSTEM):
    return Message(type=message_type, topic=topic, payload=payload or {}, source="test")


class TestMessageBus:
    def test_delivers_in_subscription_order(self):
        bus = MessageBus()
        seen = []
        bus.subscribe(Topics.ALERTS, lambda m: seen.append(("a", m.payload["n"])))
        bus.subscribe(Topics.ALERTS, lambda m: seen.append(("b", m.payload["n"])))
        bus.publish(make_message(Topics.ALERTS, {"n": 1}))
        assert seen == [("a", 1), ("b", 1)]

    def test_topics_are_isolated(self):
        bus = MessageBus()
        seen = []
        bus.subscribe(Topics.CLAIMS, seen.append)
        bus.publish(make_message(Topics.ALERTS))
        assert seen == []

    def test_failing_subscriber_does_not_block_others(self):
        bus = MessageBus()
        seen = []

        def broken(message):
            raise RuntimeError("handler failed")

        bus.subscribe(Topics.SYSTEM, broken)
        bus.subscribe(Topics.SYSTEM, seen.append)
        bus.publish(make_message())
        assert len(seen) == 1

    def test_handler_can_publish(self):
        bus = MessageBus()
        seen = []

        def relay(message):
            bus.publish(make_message(Topics.ALERTS, {"from": message.message_id}))

        bus.subscribe(Topics.NDVI, relay)
        bus.subscribe(Topics.ALERTS, seen.append)
        original = make_message(Topics.NDVI)
        bus.publish(original)
        assert seen[0].payload["from"] == original.message_id

    def test_queue_subscription(self):
        bus = MessageBus()
        queue = bus.subscribe_queue(Topics.CLAIMS, "auditor")
        assert bus.subscribe_queue(Topics.CLAIMS, "auditor") is queue
        bus.publish(make_message(Topics.CLAIMS, {"claim_id": "c-1"}, MessageType.CLAIM))
        assert queue.get_nowait().payload["claim_id"] == "c-1"
        assert queue.empty()

    def test_history(self):
        bus = MessageBus(max_history=3)
        for n in range(5):
            bus.publish(make_message(Topics.NDVI if n % 2 else Topics.SYSTEM, {"n": n}))
        assert [m.payload["n"] for m in bus.get_history()] == [2, 3, 4]
        assert [m.payload["n"] for m in bus.get_history(Topics.NDVI)] == [3]
        assert [m.payload["n"] for m in bus.get_history(limit=1)] == [4]

        bus.clear()
        assert bus.get_history() == []

    def test_message_to_dict(self):
        message = make_message(Topics.ALERTS, {"farm_id": 2}, MessageType.ALERT)
        data = message.to_dict()
        assert data["type"] == "alert"
        assert data["topic"] == "crop.alerts"
        assert data["payload"] == {"farm_id": 2}
        assert data["timestamp"].endswith("+00:00")

    def test_concurrent_publish(self):
        bus = MessageBus()
        seen = []
        lock = threading.Lock()

        def record(message):
            with lock:
                seen.append(message.payload["n"])

        bus.subscribe(Topics.NDVI, record)
        threads = [
            threading.Thread(target=bus.publish, args=(make_message(Topics.NDVI, {"n": n}),))
            for n in range(20)
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert sorted(seen) == list(range(20))
