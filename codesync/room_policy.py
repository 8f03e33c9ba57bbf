import logging
from typing import Dict, Iterable, Optional

from codesync.schemas import RoomPolicy, Task

logger = logging.getLogger(__name__)


class RoomPolicyStore:
    """Per-room collaboration flag and task set, alive while the room is occupied."""

    def __init__(self):
        self._policies: Dict[str, RoomPolicy] = {}

    def __contains__(self, room_id: str) -> bool:
        return room_id in self._policies

    def __len__(self) -> int:
        return len(self._policies)

    def create(self, room_id: str, is_collaborative: Optional[bool] = None,
               tasks: Optional[Iterable[Task]] = None) -> RoomPolicy:
        if room_id in self._policies:
            logger.warning("overwriting policy for occupied room %s", room_id)
        policy = RoomPolicy(
            roomId=room_id,
            isCollaborative=True if is_collaborative is None else is_collaborative,
            tasks=tuple(tasks) if tasks is not None else None,
        )
        self._policies[room_id] = policy
        logger.info("room %s created (collaborative=%s, tasks=%d)",
                    room_id, policy.isCollaborative, len(policy.tasks or ()))
        return policy

    def get(self, room_id: str) -> Optional[RoomPolicy]:
        return self._policies.get(room_id)

    # A room without a stored policy behaves as collaborative with no tasks.
    def is_collaborative(self, room_id: str) -> bool:
        policy = self._policies.get(room_id)
        return policy.isCollaborative if policy else True

    def tasks(self, room_id: str) -> Optional[tuple]:
        policy = self._policies.get(room_id)
        return policy.tasks if policy else None

    def delete_if_empty(self, room_id: str, occupancy: int) -> bool:
        if occupancy > 0 or room_id not in self._policies:
            return False
        del self._policies[room_id]
        logger.info("room %s is empty, policy dropped", room_id)
        return True
