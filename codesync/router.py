"""
Inbound event dispatch.

Every frame a client sends is ``{"type": <event>, "payload": {...}}``. The
router looks up the handler for the event and fans the result out through
the hub: to one target, or to the sender's room minus the sender. Handlers
return early when the sender (or target) is no longer registered; that is
the normal outcome of a disconnect race, not an error.
"""
import logging
from functools import partial
from typing import Any, Callable, Dict, Optional

from pydantic import ValidationError

from codesync.admission import AdmissionController
from codesync.collab_manager import CollabManager
from codesync.events import FILE_TREE_EVENTS, TOGGLE_EVENTS, SocketEvent
from codesync.registry import ConnectionRegistry
from codesync.room_policy import RoomPolicyStore
from codesync.schemas import AdmissionResponse, JoinRequest, PresenceStatus
from codesync.signaling import SignalingRelay

logger = logging.getLogger(__name__)

Handler = Callable[[str, Dict[str, Any]], None]


class EventRouter:
    def __init__(self, hub: CollabManager, registry: Optional[ConnectionRegistry] = None,
                 policies: Optional[RoomPolicyStore] = None):
        self.hub = hub
        self.registry = registry if registry is not None else ConnectionRegistry()
        self.policies = policies if policies is not None else RoomPolicyStore()
        self.admission = AdmissionController(hub, self.registry, self.policies)
        self.relay = SignalingRelay(hub, self.registry)

        self._handlers: Dict[SocketEvent, Handler] = {
            SocketEvent.JOIN_REQUEST: self._on_join_request,
            SocketEvent.ADMISSION_RESPONSE: self._on_admission_response,
            SocketEvent.SYNC_FILE_STRUCTURE: self._on_sync_file_structure,
            SocketEvent.USER_OFFLINE: partial(self._on_presence, SocketEvent.USER_OFFLINE),
            SocketEvent.USER_ONLINE: partial(self._on_presence, SocketEvent.USER_ONLINE),
            SocketEvent.SEND_MESSAGE: self._on_send_message,
            SocketEvent.TYPING_START: self._on_typing_start,
            SocketEvent.TYPING_PAUSE: self._on_typing_pause,
            SocketEvent.REQUEST_DRAWING: self._on_request_drawing,
            SocketEvent.SYNC_DRAWING: self._on_sync_drawing,
            SocketEvent.DRAWING_UPDATE: self._on_drawing_update,
            SocketEvent.MEDIA_JOIN: self.relay.join,
            SocketEvent.MEDIA_OFFER: self.relay.offer,
            SocketEvent.MEDIA_ANSWER: self.relay.answer,
            SocketEvent.MEDIA_ICE: self.relay.ice,
            SocketEvent.MEDIA_LEAVE: self.relay.leave,
        }
        for event in FILE_TREE_EVENTS:
            self._handlers[event] = partial(self._on_file_tree_event, event)
        for event in TOGGLE_EVENTS:
            self._handlers[event] = partial(self.relay.toggle, event)

    def dispatch(self, connection_id: str, message: Any) -> None:
        if not isinstance(message, dict):
            logger.warning("dropping non-object frame from %s", connection_id)
            return
        try:
            event = SocketEvent(message.get("type"))
        except ValueError:
            logger.warning("unknown event %r from %s", message.get("type"), connection_id)
            return
        handler = self._handlers.get(event)
        payload = message.get("payload")
        if payload is None:
            payload = {}
        if handler is None or not isinstance(payload, dict):
            logger.warning("dropping %s frame from %s", event.value, connection_id)
            return

        try:
            handler(connection_id, payload)
        except ValidationError as e:
            logger.warning("invalid %s payload from %s: %s", event.value, connection_id, e)
        except Exception:
            logger.exception("handler for %s failed (connection %s)", event.value, connection_id)

    def disconnect(self, connection_id: str) -> None:
        self.admission.release(connection_id)

    # ---------- admission ----------

    def _on_join_request(self, sender: str, payload: Dict[str, Any]) -> None:
        self.admission.request_join(sender, JoinRequest.model_validate(payload))

    def _on_admission_response(self, sender: str, payload: Dict[str, Any]) -> None:
        self.admission.decide(sender, AdmissionResponse.model_validate(payload))

    # ---------- files ----------

    def _on_file_tree_event(self, event: SocketEvent, sender: str, payload: Dict[str, Any]) -> None:
        room_id = self.registry.room_of(sender)
        if room_id is None:
            return
        if not self.policies.is_collaborative(room_id):
            logger.debug("%s from %s kept local (room %s is not collaborative)",
                         event.value, sender, room_id)
            return
        self.hub.broadcast(room_id, event, payload, skip=sender)

    def _on_sync_file_structure(self, sender: str, payload: Dict[str, Any]) -> None:
        target = payload.get("socketId")
        if not target:
            return
        self.hub.send(target, SocketEvent.SYNC_FILE_STRUCTURE, {
            "fileStructure": payload.get("fileStructure"),
            "openFiles": payload.get("openFiles"),
            "activeFile": payload.get("activeFile"),
        })

    # ---------- presence ----------

    def _on_presence(self, event: SocketEvent, sender: str, payload: Dict[str, Any]) -> None:
        target = payload.get("socketId")
        if not target:
            return
        status = PresenceStatus.OFFLINE if event is SocketEvent.USER_OFFLINE else PresenceStatus.ONLINE
        self.registry.update(target, status=status)
        room_id = self.registry.room_of(target)
        if room_id is None:
            return
        self.hub.broadcast(room_id, event, {"socketId": target}, skip=sender)

    def _on_typing_start(self, sender: str, payload: Dict[str, Any]) -> None:
        changes: Dict[str, Any] = {"typing": True}
        cursor = payload.get("cursorPosition")
        if isinstance(cursor, int) and not isinstance(cursor, bool):
            changes["cursorPosition"] = cursor
        if "currentFile" in payload:
            changes["currentFile"] = payload["currentFile"]
        participant = self.registry.update(sender, **changes)
        if participant is None:
            return
        self.hub.broadcast(participant.roomId, SocketEvent.TYPING_START,
                           {"user": participant.model_dump(mode="json")}, skip=sender)

    def _on_typing_pause(self, sender: str, payload: Dict[str, Any]) -> None:
        participant = self.registry.update(sender, typing=False)
        if participant is None:
            return
        self.hub.broadcast(participant.roomId, SocketEvent.TYPING_PAUSE,
                           {"user": participant.model_dump(mode="json")}, skip=sender)

    # ---------- chat ----------

    def _on_send_message(self, sender: str, payload: Dict[str, Any]) -> None:
        room_id = self.registry.room_of(sender)
        if room_id is None:
            return
        self.hub.broadcast(room_id, SocketEvent.RECEIVE_MESSAGE,
                           {"message": payload.get("message")}, skip=sender)

    # ---------- drawing ----------

    def _on_request_drawing(self, sender: str, payload: Dict[str, Any]) -> None:
        room_id = self.registry.room_of(sender)
        if room_id is None:
            return
        self.hub.broadcast(room_id, SocketEvent.REQUEST_DRAWING, {"socketId": sender}, skip=sender)

    def _on_sync_drawing(self, sender: str, payload: Dict[str, Any]) -> None:
        target = payload.get("socketId")
        if not target or target == sender:
            return
        self.hub.send(target, SocketEvent.SYNC_DRAWING, {"drawingData": payload.get("drawingData")})

    def _on_drawing_update(self, sender: str, payload: Dict[str, Any]) -> None:
        room_id = self.registry.room_of(sender)
        if room_id is None:
            return
        self.hub.broadcast(room_id, SocketEvent.DRAWING_UPDATE,
                           {"snapshot": payload.get("snapshot")}, skip=sender)
