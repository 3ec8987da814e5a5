"""
Broadcast fan-out to connected observers.

An event is serialized once and handed to every registered observer. An
observer whose send raises is dropped from the registry and counted as
failed; delivery to the remaining observers continues.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, MutableSet, Protocol

logger = logging.getLogger(__name__)


class Observer(Protocol):
    """A connected client that accepts serialized events."""

    def send(self, data: str) -> None:
        ...


@dataclass(frozen=True)
class BroadcastResult:
    sent: int
    failed: int


def broadcast_to_clients(clients: MutableSet[Observer], event: dict[str, Any]) -> BroadcastResult:
    """
    Deliver one event to every observer in ``clients``.

    Args:
        clients: Registered observers; failed observers are removed in place
        event: Broadcast envelope with a ``type`` key

    Returns:
        Counts of observers that accepted and rejected the event
    """
    data = json.dumps(event)
    sent = 0
    dropped: list[Observer] = []

    for client in list(clients):
        try:
            client.send(data)
            sent += 1
        except Exception as e:
            logger.warning("Dropping observer after failed send of %s: %s", event.get("type"), e)
            dropped.append(client)

    for client in dropped:
        clients.discard(client)

    return BroadcastResult(sent=sent, failed=len(dropped))
