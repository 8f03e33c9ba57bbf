import logging
from typing import Dict, List, Optional

from codesync.schemas import Participant

logger = logging.getLogger(__name__)


class ConnectionRegistry:
    """
    Admitted participants keyed by connection id.

    Insertion order is preserved, so ``list_by_room`` returns participants in
    the order they were admitted and the admin is found first. Not thread
    safe; every call is made from the event loop.
    """

    def __init__(self):
        self._participants: Dict[str, Participant] = {}

    def __len__(self) -> int:
        return len(self._participants)

    def __contains__(self, connection_id: str) -> bool:
        return connection_id in self._participants

    def add(self, participant: Participant) -> None:
        self._participants[participant.socketId] = participant

    def remove(self, connection_id: str) -> Optional[Participant]:
        return self._participants.pop(connection_id, None)

    def list_by_room(self, room_id: str) -> List[Participant]:
        return [p for p in self._participants.values() if p.roomId == room_id]

    def find(self, connection_id: str) -> Optional[Participant]:
        participant = self._participants.get(connection_id)
        if participant is None:
            logger.debug("no participant for connection %s", connection_id)
        return participant

    def update(self, connection_id: str, **changes) -> Optional[Participant]:
        """Patch presence/typing/cursor/file fields; no-op if the participant is gone."""
        participant = self._participants.get(connection_id)
        if participant is None:
            return None
        for name, value in changes.items():
            setattr(participant, name, value)
        return participant

    def room_of(self, connection_id: str) -> Optional[str]:
        participant = self.find(connection_id)
        return participant.roomId if participant else None

    def admin_of(self, room_id: str) -> Optional[Participant]:
        for participant in self.list_by_room(room_id):
            if participant.isAdmin:
                return participant
        return None

    def is_admin(self, connection_id: str, room_id: str) -> bool:
        participant = self._participants.get(connection_id)
        return bool(participant and participant.roomId == room_id and participant.isAdmin)

    def username_taken(self, room_id: str, username: str) -> bool:
        return any(p.username == username for p in self.list_by_room(room_id))
