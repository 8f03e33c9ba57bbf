"""Shared fixtures: an in-memory hub and router with no sockets attached."""

import pytest

from codesync.collab_manager import CollabManager
from codesync.router import EventRouter


@pytest.fixture
def hub():
    return CollabManager()


@pytest.fixture
def router(hub):
    return EventRouter(hub)


@pytest.fixture
def drain(hub):
    """Return (and clear) every message queued for a connection."""

    def _drain(connection_id):
        conn = hub.connections[connection_id]
        messages = []
        while not conn.outbox.empty():
            message = conn.outbox.get_nowait()
            if message is not None:
                messages.append(message)
        return messages

    return _drain


@pytest.fixture
def send(router):
    def _send(connection_id, event, payload=None):
        frame = {"type": event}
        if payload is not None:
            frame["payload"] = payload
        router.dispatch(connection_id, frame)

    return _send


@pytest.fixture
def join(hub, send):
    """Open a connection named after the user and send a join request for it."""

    def _join(room_id, username, connection_id=None, **extra):
        conn = hub.connect(connection_id=connection_id or username)
        send(conn.id, "join-request", {"roomId": room_id, "username": username, **extra})
        return conn.id

    return _join


@pytest.fixture
def room(join, send, drain):
    """Room R with alice (admin) and bob admitted, all queues drained."""

    def _room(room_id="R", **extra):
        alice = join(room_id, "alice", **extra)
        bob = join(room_id, "bob")
        send(alice, "admission-response", {"socketId": bob, "username": "bob", "accepted": True})
        drain(alice)
        drain(bob)
        return alice, bob

    return _room
