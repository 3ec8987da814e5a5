"""
WebSocket endpoint.

Each connection is an observer of agent events and a command channel. On
connect the client receives an init snapshot, then every broadcast event
and a response for each command it sends.
"""

import asyncio
import json
import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from config import get_config

from ..event_bus import ObserverClosedError, WebSocketObserver, get_event_bus
from ..handlers import handle_message
from ..protocol import create_init_message, format_response
from ..state import get_agent_service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket) -> None:
    service = get_agent_service()
    event_bus = get_event_bus()

    await websocket.accept()
    observer = WebSocketObserver(websocket, get_config().observer_queue_size)
    observer.start()
    observer.send(json.dumps(create_init_message(
        service.list_agents(), service.get_available_models(), service.base_path
    )))
    event_bus.attach(observer)
    logger.info("WebSocket client connected")

    try:
        while True:
            raw = await websocket.receive_text()
            response = await handle_message(service, raw)
            if response is not None:
                observer.send(format_response(response))
    except WebSocketDisconnect:
        logger.info("WebSocket client disconnected")
    except (ObserverClosedError, asyncio.QueueFull) as e:
        logger.warning("Closing WebSocket client: %s", e)
    finally:
        event_bus.detach(observer)
        await observer.close()
