import asyncio
import logging
import uuid
from collections import defaultdict
from typing import Any, Dict, Optional, Set

logger = logging.getLogger(__name__)


class Connection:
    def __init__(self, connection_id: str, ws=None):
        self.id = connection_id
        self.ws = ws
        self.outbox: asyncio.Queue = asyncio.Queue()
        self.rooms: Set[str] = set()
        self.alive = True


class CollabManager:
    """
    Live connections and the broadcast groups they belong to.

    ``send`` and ``broadcast`` only enqueue; ``pump`` writes a connection's
    queue to its socket in order. Room state can therefore be read and
    changed without awaiting between the read and the write.
    """

    def __init__(self):
        self.connections: Dict[str, Connection] = {}
        self.rooms: Dict[str, Set[str]] = defaultdict(set)

    def __len__(self) -> int:
        return len(self.connections)

    def connect(self, ws=None, connection_id: Optional[str] = None) -> Connection:
        conn = Connection(connection_id or uuid.uuid4().hex, ws)
        self.connections[conn.id] = conn
        return conn

    def disconnect(self, connection_id: str) -> None:
        conn = self.connections.pop(connection_id, None)
        if conn is None:
            return
        for room_id in list(conn.rooms):
            self.leave(room_id, connection_id)
        conn.alive = False
        conn.outbox.put_nowait(None)

    def is_connected(self, connection_id: str) -> bool:
        conn = self.connections.get(connection_id)
        return bool(conn and conn.alive)

    def join(self, room_id: str, connection_id: str) -> None:
        conn = self.connections.get(connection_id)
        if conn is None:
            return
        self.rooms[room_id].add(connection_id)
        conn.rooms.add(room_id)

    def leave(self, room_id: str, connection_id: str) -> None:
        members = self.rooms.get(room_id)
        if members is not None:
            members.discard(connection_id)
            if not members:
                del self.rooms[room_id]
        conn = self.connections.get(connection_id)
        if conn is not None:
            conn.rooms.discard(room_id)

    def members(self, room_id: str) -> Set[str]:
        return set(self.rooms.get(room_id, ()))

    def send(self, connection_id: str, event, payload: Optional[Dict[str, Any]] = None) -> bool:
        """Queue one message for a connection. Unknown or closed targets are dropped."""
        conn = self.connections.get(connection_id)
        if conn is None or not conn.alive:
            logger.debug("dropping %s for unreachable connection %s", _name(event), connection_id)
            return False
        message: Dict[str, Any] = {"type": _name(event)}
        if payload is not None:
            message["payload"] = payload
        conn.outbox.put_nowait(message)
        return True

    def broadcast(self, room_id: str, event, payload: Optional[Dict[str, Any]] = None,
                  skip: Optional[str] = None) -> int:
        sent = 0
        for connection_id in self.members(room_id):
            if connection_id == skip:
                continue
            if self.send(connection_id, event, payload):
                sent += 1
        return sent

    async def pump(self, conn: Connection) -> None:
        """Write queued messages to the socket until the connection goes away."""
        while True:
            message = await conn.outbox.get()
            if message is None:
                return
            try:
                await conn.ws.send_json(message)
            except Exception as e:
                logger.info("write to %s failed, marking dead: %s", conn.id, e)
                conn.alive = False
                return


def _name(event) -> str:
    return getattr(event, "value", event)
