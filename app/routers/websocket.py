from fastapi import APIRouter, WebSocket, WebSocketDisconnect, Depends
import asyncio
import json
import logging
from datetime import datetime

from ..models.database_models import WaterSourceState
from ..services.water_source_state import WaterSourceStateHolder
from .water_sources import get_state_holder

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/ws", tags=["websocket"])


def state_message(state: WaterSourceState) -> str:
    return json.dumps({
        "type": "state",
        "data": state.model_dump(),
        "timestamp": datetime.now().isoformat()
    })


async def send_error(websocket: WebSocket, message: str):
    await websocket.send_text(json.dumps({
        "type": "error",
        "message": message,
        "timestamp": datetime.now().isoformat()
    }))


async def handle_state_message(websocket: WebSocket, holder: WaterSourceStateHolder, message):
    """Handle one decoded client message"""
    if not isinstance(message, dict):
        await send_error(websocket, "Message must be a JSON object")
        return

    message_type = message.get('type')
    if message_type == 'ping':
        await websocket.send_text(json.dumps({
            "type": "pong",
            "timestamp": datetime.now().isoformat()
        }))
    elif message_type == 'refresh':
        holder.refresh()
    else:
        await send_error(websocket, f"Unknown message type: {message_type}")


async def _forward_states(websocket: WebSocket, queue: asyncio.Queue):
    while True:
        state = await queue.get()
        await websocket.send_text(state_message(state))


# WebSocket endpoint streaming every state change
@router.websocket("/state")
async def websocket_state(
    websocket: WebSocket,
    holder: WaterSourceStateHolder = Depends(get_state_holder)
):
    """Sends the current state on connect, then one message per transition"""
    await websocket.accept()
    queue: asyncio.Queue = asyncio.Queue()
    unsubscribe = holder.subscribe(queue.put_nowait)
    queue.put_nowait(holder.state)
    sender = asyncio.create_task(_forward_states(websocket, queue))
    logger.info("State WebSocket connected")

    try:
        while True:
            data = await websocket.receive_text()
            try:
                message = json.loads(data)
            except json.JSONDecodeError:
                await send_error(websocket, "Invalid JSON format")
                continue

            try:
                await handle_state_message(websocket, holder, message)
            except Exception as e:
                logger.error(f"Error handling WebSocket message: {str(e)}")
                await send_error(websocket, "Failed to process message")
    except WebSocketDisconnect:
        logger.info("State WebSocket disconnected")
    finally:
        unsubscribe()
        sender.cancel()
