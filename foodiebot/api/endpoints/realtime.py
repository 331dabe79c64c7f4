# foodiebot/api/endpoints/realtime.py
from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect

from foodiebot.api.endpoints.admin import bot_status
from foodiebot.core.runtime import BotRuntime, get_runtime

router = APIRouter()


@router.websocket("/ws/admin")
async def admin_socket(websocket: WebSocket, runtime: BotRuntime = Depends(get_runtime)):
    broadcaster = runtime.broadcaster
    await broadcaster.connect(websocket)
    try:
        await broadcaster.send(websocket, "bot_status", bot_status(runtime))
        # Dashboards only listen; incoming frames are just keep-alives
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        pass
    finally:
        broadcaster.disconnect(websocket)
