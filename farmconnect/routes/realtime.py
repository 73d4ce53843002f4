import logging

from fastapi import APIRouter, Depends, Query, WebSocket, WebSocketDisconnect, status
from fastapi.concurrency import run_in_threadpool
from sqlmodel import Session

from farmconnect.database import get_session
from farmconnect.notifications.realtime import manager
from farmconnect.utils.token import resolve_user

router = APIRouter()
logger = logging.getLogger(__name__)


@router.websocket("/ws")
async def realtime_channel(
    websocket: WebSocket,
    token: str = Query(...),
    session: Session = Depends(get_session),
):
    """
    Push channel. After connecting, a client joins the room named after its
    own user id: ``{"event": "join", "room": "<user id>"}``.
    """
    user = await run_in_threadpool(resolve_user, session, token)
    user_id = user.id if user else None
    # no db work past the handshake; give the connection back
    session.close()

    if user_id is None:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await websocket.accept()

    try:
        while True:
            try:
                frame = await websocket.receive_json()
            except ValueError:
                await websocket.send_json(
                    {"event": "error", "data": {"message": "Frames must be JSON"}}
                )
                continue

            event = frame.get("event") if isinstance(frame, dict) else None
            room = str(frame.get("room", "")) if isinstance(frame, dict) else ""

            if event == "join":
                if room != str(user_id):
                    await websocket.send_json(
                        {"event": "error", "data": {"message": "You can only join your own room"}}
                    )
                    continue
                manager.join(room, websocket)
                await websocket.send_json({"event": "joined", "room": room})

            elif event == "leave":
                manager.leave(room, websocket)
                await websocket.send_json({"event": "left", "room": room})

            else:
                await websocket.send_json(
                    {"event": "error", "data": {"message": f"Unknown event: {event}"}}
                )

    except WebSocketDisconnect:
        logger.debug(f"Socket of user {user_id} disconnected")
    finally:
        manager.disconnect(websocket)
