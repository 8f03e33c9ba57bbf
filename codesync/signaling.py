"""
WebRTC signalling pass-through.

Offers, answers and ICE candidates go to one target connection, stamped
with the sender's id. Join, leave and media toggles go to the rest of the
sender's room. Payload bodies are never inspected.
"""
import logging
from typing import Any, Dict

from codesync.collab_manager import CollabManager
from codesync.events import SocketEvent
from codesync.registry import ConnectionRegistry

logger = logging.getLogger(__name__)


class SignalingRelay:
    def __init__(self, hub: CollabManager, registry: ConnectionRegistry):
        self.hub = hub
        self.registry = registry

    def join(self, sender: str, payload: Dict[str, Any]) -> None:
        participant = self.registry.find(sender)
        if participant is None:
            return
        self.hub.broadcast(participant.roomId, SocketEvent.MEDIA_JOIN, {
            "socketId": sender,
            "username": participant.username,
        }, skip=sender)

    def leave(self, sender: str, payload: Dict[str, Any]) -> None:
        room_id = self.registry.room_of(sender)
        if room_id is None:
            return
        self.hub.broadcast(room_id, SocketEvent.MEDIA_LEAVE, {"socketId": sender}, skip=sender)

    def offer(self, sender: str, payload: Dict[str, Any]) -> None:
        self._forward(SocketEvent.MEDIA_OFFER, "offer", sender, payload)

    def answer(self, sender: str, payload: Dict[str, Any]) -> None:
        self._forward(SocketEvent.MEDIA_ANSWER, "answer", sender, payload)

    def ice(self, sender: str, payload: Dict[str, Any]) -> None:
        self._forward(SocketEvent.MEDIA_ICE, "candidate", sender, payload)

    def toggle(self, event: SocketEvent, sender: str, payload: Dict[str, Any]) -> None:
        room_id = self.registry.room_of(sender)
        if room_id is None:
            return
        self.hub.broadcast(room_id, event, {
            "socketId": sender,
            "enabled": payload.get("enabled"),
        }, skip=sender)

    def _forward(self, event: SocketEvent, field: str, sender: str, payload: Dict[str, Any]) -> None:
        target = payload.get("targetSocketId")
        if not target:
            logger.debug("%s from %s has no target", event.value, sender)
            return
        self.hub.send(target, event, {"from": sender, field: payload.get(field)})
