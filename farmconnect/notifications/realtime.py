import asyncio
import logging
from collections import defaultdict
from typing import Dict, Iterable, Set, Tuple

from fastapi import WebSocket
from fastapi.encoders import jsonable_encoder

logger = logging.getLogger(__name__)


class ConnectionManager:
    """Websocket rooms keyed by user id.

    A socket joins the room named after its own user id; every push for that
    user goes to all sockets in the room (one per open tab or device).
    """

    def __init__(self):
        self.rooms: Dict[str, Set[WebSocket]] = defaultdict(set)

    def join(self, room, websocket: WebSocket):
        self.rooms[str(room)].add(websocket)
        logger.debug(f"Socket joined room {room}")

    def leave(self, room, websocket: WebSocket):
        sockets = self.rooms.get(str(room))
        if not sockets:
            return
        sockets.discard(websocket)
        if not sockets:
            del self.rooms[str(room)]

    def disconnect(self, websocket: WebSocket):
        for room in list(self.rooms):
            self.leave(room, websocket)

    def room_size(self, room) -> int:
        return len(self.rooms.get(str(room), ()))

    async def emit(self, room, event: str, data: dict) -> int:
        """Send one event to every socket in ``room``. Returns how many got it."""
        frame = jsonable_encoder({"event": event, "data": data})
        delivered = 0

        for websocket in list(self.rooms.get(str(room), ())):
            try:
                await websocket.send_json(frame)
                delivered += 1
            except Exception:
                logger.warning(f"Push of {event} to room {room} failed, dropping socket")
                self.leave(room, websocket)

        return delivered

    async def emit_many(self, event: str, pushes: Iterable[Tuple[int, dict]]):
        pushes = list(pushes)
        results = await asyncio.gather(
            *(self.emit(room, event, data) for room, data in pushes),
            return_exceptions=True,
        )
        for (room, _), result in zip(pushes, results):
            if isinstance(result, BaseException):
                logger.error(f"Push of {event} to room {room} failed: {result}")


manager = ConnectionManager()
