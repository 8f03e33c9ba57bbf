"""
Room admission.

The first participant to join an empty room opens it: they become its
admin and their join request fixes the room's collaboration mode and task
set. Everyone after that waits in a pending queue until the admin accepts
or rejects them. Pending requests have no timeout; they go away on a
decision, when the requester disconnects, or when their room empties.
"""
import logging
from typing import Any, Dict, List, Optional

from codesync.collab_manager import CollabManager
from codesync.events import SocketEvent
from codesync.registry import ConnectionRegistry
from codesync.room_policy import RoomPolicyStore
from codesync.schemas import AdmissionResponse, JoinRequest, Participant, PendingJoinRequest

logger = logging.getLogger(__name__)


class AdmissionController:
    def __init__(self, hub: CollabManager, registry: ConnectionRegistry, policies: RoomPolicyStore):
        self.hub = hub
        self.registry = registry
        self.policies = policies
        self._pending: Dict[str, PendingJoinRequest] = {}

    def pending(self, connection_id: str) -> Optional[PendingJoinRequest]:
        return self._pending.get(connection_id)

    def pending_for_room(self, room_id: str) -> List[PendingJoinRequest]:
        return [p for p in self._pending.values() if p.roomId == room_id]

    # ---------- join ----------

    def request_join(self, connection_id: str, request: JoinRequest) -> None:
        if connection_id in self.registry or connection_id in self._pending:
            logger.debug("ignoring repeated join request from %s", connection_id)
            return

        room_id = request.roomId
        if self.registry.username_taken(room_id, request.username):
            self.hub.send(connection_id, SocketEvent.USERNAME_EXISTS)
            return

        if not self.registry.list_by_room(room_id):
            self._open_room(connection_id, request)
        else:
            self._enqueue(connection_id, request)

    def _open_room(self, connection_id: str, request: JoinRequest) -> None:
        policy = self.policies.create(request.roomId, request.isCollaborative, request.tasks)
        participant = Participant(
            username=request.username,
            roomId=request.roomId,
            socketId=connection_id,
            isAdmin=True,
            isCollaborative=policy.isCollaborative,
        )
        self.registry.add(participant)
        self.hub.join(request.roomId, connection_id)
        logger.info("%s opened room %s as admin", request.username, request.roomId)
        self.hub.send(connection_id, SocketEvent.JOIN_ACCEPTED, self._acceptance(participant))

    def _enqueue(self, connection_id: str, request: JoinRequest) -> None:
        self._pending[connection_id] = PendingJoinRequest(
            socketId=connection_id, username=request.username, roomId=request.roomId
        )
        self.hub.send(connection_id, SocketEvent.WAITING_FOR_ADMISSION)

        admin = self.registry.admin_of(request.roomId)
        if admin is None:
            # stays pending until it is abandoned or the room empties
            logger.info("no admin connected in room %s, %s left waiting",
                        request.roomId, request.username)
            return
        self.hub.send(admin.socketId, SocketEvent.ADMISSION_REQUEST, {
            "username": request.username,
            "socketId": connection_id,
        })

    # ---------- decision ----------

    def decide(self, decider_id: str, response: AdmissionResponse) -> None:
        pending = self._pending.get(response.socketId)
        if pending is None:
            return
        if not self.registry.is_admin(decider_id, pending.roomId):
            logger.debug("ignoring admission decision from non-admin %s", decider_id)
            return

        del self._pending[pending.socketId]
        if response.accepted:
            self._admit(pending)
        else:
            logger.info("%s rejected from room %s", pending.username, pending.roomId)
            self.hub.send(pending.socketId, SocketEvent.USER_REJECTED)

    def _admit(self, pending: PendingJoinRequest) -> None:
        if not self.hub.is_connected(pending.socketId):
            logger.debug("admitted requester %s already gone", pending.socketId)
            return
        if self.registry.username_taken(pending.roomId, pending.username):
            self.hub.send(pending.socketId, SocketEvent.USERNAME_EXISTS)
            return

        participant = Participant(
            username=pending.username,
            roomId=pending.roomId,
            socketId=pending.socketId,
            isAdmin=False,
            isCollaborative=self.policies.is_collaborative(pending.roomId),
        )
        self.registry.add(participant)
        self.hub.join(pending.roomId, pending.socketId)
        logger.info("%s admitted to room %s", pending.username, pending.roomId)

        user = participant.model_dump(mode="json")
        self.hub.broadcast(pending.roomId, SocketEvent.USER_JOINED, {"user": user}, skip=pending.socketId)
        self.hub.send(pending.socketId, SocketEvent.JOIN_ACCEPTED, self._acceptance(participant))
        self.hub.send(pending.socketId, SocketEvent.USER_JOINED, {"user": user})

    def _acceptance(self, participant: Participant) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "user": participant.model_dump(mode="json"),
            "users": [p.model_dump(mode="json") for p in self.registry.list_by_room(participant.roomId)],
        }
        tasks = self.policies.tasks(participant.roomId)
        if tasks is not None:
            payload["tasks"] = [t.model_dump(mode="json") for t in tasks]
        return payload

    # ---------- leave ----------

    def release(self, connection_id: str) -> None:
        """Forget a closed connection, whether pending or admitted."""
        if self._pending.pop(connection_id, None) is not None:
            logger.debug("pending join request from %s abandoned", connection_id)
            return

        participant = self.registry.find(connection_id)
        if participant is None:
            return
        room_id = participant.roomId
        self.hub.broadcast(room_id, SocketEvent.USER_DISCONNECTED,
                           {"user": participant.model_dump(mode="json")}, skip=connection_id)
        self.registry.remove(connection_id)
        self.hub.leave(room_id, connection_id)
        logger.info("%s left room %s", participant.username, room_id)

        if self.policies.delete_if_empty(room_id, len(self.registry.list_by_room(room_id))):
            self._reject_room(room_id)

    def _reject_room(self, room_id: str) -> None:
        for pending in self.pending_for_room(room_id):
            del self._pending[pending.socketId]
            self.hub.send(pending.socketId, SocketEvent.USER_REJECTED)
