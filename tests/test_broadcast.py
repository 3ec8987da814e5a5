"""
Tests for broadcast fan-out and the WebSocket event bus.
"""
import asyncio
import json

import pytest

from core import BroadcastResult, Event, broadcast_to_clients
from server.event_bus import ObserverClosedError, WebSocketEventBus, WebSocketObserver


class ListObserver:
    def __init__(self) -> None:
        self.received: list[str] = []

    def send(self, data: str) -> None:
        self.received.append(data)


class BrokenObserver:
    def send(self, data: str) -> None:
        raise ConnectionError("gone")


class FakeWebSocket:
    def __init__(self, fail: bool = False) -> None:
        self.sent: list[str] = []
        self.fail = fail

    async def send_text(self, data: str) -> None:
        if self.fail:
            raise RuntimeError("closed")
        self.sent.append(data)


class TestBroadcastToClients:
    """Test delivering one event to many observers."""

    def test_all_observers_receive_same_payload(self):
        first, second = ListObserver(), ListObserver()
        clients = {first, second}

        result = broadcast_to_clients(clients, {"type": "agent_deleted", "agentId": "a1"})

        assert result == BroadcastResult(sent=2, failed=0)
        assert first.received == second.received == [json.dumps({"type": "agent_deleted", "agentId": "a1"})]

    def test_failed_observer_removed(self):
        good, bad = ListObserver(), BrokenObserver()
        clients = {good, bad}

        result = broadcast_to_clients(clients, {"type": "agent_updated"})

        assert result == BroadcastResult(sent=1, failed=1)
        assert clients == {good}
        assert len(good.received) == 1

    def test_failures_isolated_across_observers(self):
        first, second, third, fourth = ListObserver(), BrokenObserver(), ListObserver(), BrokenObserver()
        clients = {first, second, third, fourth}

        result = broadcast_to_clients(clients, {"type": "agent_updated", "agent": {"id": "a1"}})

        assert result == BroadcastResult(sent=2, failed=2)
        assert clients == {first, third}
        assert first.received == third.received == [json.dumps({"type": "agent_updated", "agent": {"id": "a1"}})]

    def test_no_observers(self):
        assert broadcast_to_clients(set(), {"type": "x"}) == BroadcastResult(sent=0, failed=0)


class TestWebSocketObserver:
    """Test the queued per-connection writer."""

    @pytest.mark.asyncio
    async def test_writer_delivers_in_order(self):
        websocket = FakeWebSocket()
        observer = WebSocketObserver(websocket, queue_size=10)
        observer.start()

        observer.send("one")
        observer.send("two")
        await asyncio.sleep(0.01)
        await observer.close()

        assert websocket.sent == ["one", "two"]

    def test_full_queue_raises(self):
        observer = WebSocketObserver(FakeWebSocket(), queue_size=1)
        observer.send("one")

        with pytest.raises(asyncio.QueueFull):
            observer.send("two")

    @pytest.mark.asyncio
    async def test_closed_observer_raises(self):
        observer = WebSocketObserver(FakeWebSocket())
        await observer.close()

        with pytest.raises(ObserverClosedError):
            observer.send("late")

    @pytest.mark.asyncio
    async def test_send_failure_closes_observer(self):
        observer = WebSocketObserver(FakeWebSocket(fail=True))
        observer.start()
        observer.send("one")
        await asyncio.sleep(0.01)

        assert observer.closed is True
        await observer.close()


class TestWebSocketEventBus:
    """Test publishing through the event bus."""

    @pytest.mark.asyncio
    async def test_publish_sends_wire_envelope(self):
        bus = WebSocketEventBus()
        observer = WebSocketObserver(FakeWebSocket())
        bus.attach(observer)

        await bus.publish(Event(type="agent_deleted", properties={"agentId": "a1"}))

        assert observer.queue.get_nowait() == json.dumps({"type": "agent_deleted", "agentId": "a1"})

    @pytest.mark.asyncio
    async def test_slow_observer_dropped_without_blocking_others(self):
        bus = WebSocketEventBus()
        slow = WebSocketObserver(FakeWebSocket(), queue_size=1)
        fast = WebSocketObserver(FakeWebSocket(), queue_size=10)
        bus.attach(slow)
        bus.attach(fast)

        await bus.publish(Event(type="agent_updated", properties={}))
        await bus.publish(Event(type="agent_updated", properties={}))

        assert bus.observers == {fast}
        assert fast.queue.qsize() == 2

    def test_detach(self):
        bus = WebSocketEventBus()
        observer = WebSocketObserver(FakeWebSocket())
        bus.attach(observer)
        bus.detach(observer)
        bus.detach(observer)
        assert bus.observers == set()
