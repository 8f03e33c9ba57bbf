import pytest

from codesync.schemas import PresenceStatus


FILE_EVENTS = [
    ("directory-created", {"parentDirId": "root", "newDirectory": {"id": "d1", "name": "src"}}),
    ("directory-updated", {"dirId": "d1", "children": []}),
    ("directory-renamed", {"dirId": "d1", "newName": "lib"}),
    ("directory-deleted", {"dirId": "d1"}),
    ("file-created", {"parentDirId": "root", "newFile": {"id": "f1", "name": "a.py"}}),
    ("file-updated", {"fileId": "f1", "newContent": "print(1)"}),
    ("file-renamed", {"fileId": "f1", "newName": "b.py"}),
    ("file-deleted", {"fileId": "f1"}),
]


@pytest.mark.parametrize("event,payload", FILE_EVENTS)
def test_file_tree_events_reach_peers_in_collaborative_room(room, send, drain, event, payload):
    alice, bob = room()

    send(alice, event, payload)

    assert drain(bob) == [{"type": event, "payload": payload}]
    assert drain(alice) == []


@pytest.mark.parametrize("event,payload", FILE_EVENTS)
def test_file_tree_events_stay_local_in_non_collaborative_room(room, send, drain, event, payload):
    alice, bob = room(isCollaborative=False)

    send(alice, event, payload)

    assert drain(bob) == []


def test_chat_is_relayed_even_when_not_collaborative(room, send, drain):
    alice, bob = room(isCollaborative=False)

    send(alice, "file-updated", {"fileId": "f1", "newContent": "x = 1"})
    send(alice, "send-message", {"message": {"text": "hi", "username": "alice"}})

    assert drain(bob) == [
        {"type": "receive-message", "payload": {"message": {"text": "hi", "username": "alice"}}}
    ]


def test_events_do_not_cross_rooms(room, join, send, drain):
    alice, bob = room()
    xavier = join("OTHER", "xavier")
    drain(xavier)

    send(alice, "send-message", {"message": "hello R"})

    assert drain(xavier) == []
    assert len(drain(bob)) == 1


def test_stale_sender_is_ignored(router, hub, send, drain):
    ghost = hub.connect(connection_id="ghost").id

    send(ghost, "file-created", {"parentDirId": "root"})
    send(ghost, "send-message", {"message": "boo"})
    send(ghost, "typing-start", {"cursorPosition": 1})
    send(ghost, "drawing-update", {"snapshot": {}})

    assert drain(ghost) == []


def test_typing_start_updates_and_broadcasts_snapshot(router, room, send, drain):
    alice, bob = room()

    send(alice, "typing-start", {"cursorPosition": 42, "currentFile": "f1"})

    [typing] = drain(bob)
    assert typing["type"] == "typing-start"
    assert typing["payload"]["user"]["typing"] is True
    assert typing["payload"]["user"]["cursorPosition"] == 42
    assert typing["payload"]["user"]["currentFile"] == "f1"
    assert router.registry.find(alice).cursorPosition == 42

    send(alice, "typing-pause")

    [paused] = drain(bob)
    assert paused["type"] == "typing-pause"
    assert paused["payload"]["user"]["typing"] is False
    assert paused["payload"]["user"]["cursorPosition"] == 42


def test_presence_updates_target_and_notifies_its_room(router, room, send, drain):
    alice, bob = room()

    send(alice, "offline", {"socketId": bob})

    assert router.registry.find(bob).status == PresenceStatus.OFFLINE
    assert drain(bob) == [{"type": "offline", "payload": {"socketId": bob}}]
    assert drain(alice) == []

    send(bob, "online", {"socketId": bob})

    assert router.registry.find(bob).status == PresenceStatus.ONLINE
    assert drain(alice) == [{"type": "online", "payload": {"socketId": bob}}]


def test_sync_file_structure_goes_to_one_target(room, join, send, drain):
    alice, bob = room()
    structure = {"fileStructure": {"id": "root"}, "openFiles": [], "activeFile": None}

    send(alice, "sync-file-structure", {**structure, "socketId": bob})

    assert drain(bob) == [{"type": "sync-file-structure", "payload": structure}]
    assert drain(alice) == []


def test_drawing_request_update_and_sync(room, send, drain):
    alice, bob = room()

    send(bob, "request-drawing")
    assert drain(alice) == [{"type": "request-drawing", "payload": {"socketId": bob}}]

    send(alice, "sync-drawing", {"drawingData": {"shapes": [1]}, "socketId": bob})
    assert drain(bob) == [{"type": "sync-drawing", "payload": {"drawingData": {"shapes": [1]}}}]

    send(alice, "sync-drawing", {"drawingData": {}, "socketId": alice})
    assert drain(alice) == []

    send(alice, "drawing-update", {"snapshot": {"v": 2}})
    assert drain(bob) == [{"type": "drawing-update", "payload": {"snapshot": {"v": 2}}}]


def test_malformed_frames_are_dropped(router, room, drain):
    alice, bob = room()

    router.dispatch(alice, ["not", "an", "object"])
    router.dispatch(alice, {"type": "no-such-event"})
    router.dispatch(alice, {"type": "send-message", "payload": "text"})
    router.dispatch(alice, {"payload": {}})

    assert drain(bob) == []


def test_handler_failure_does_not_escape(router, room, drain, monkeypatch):
    alice, bob = room()

    def boom(connection_id):
        raise RuntimeError("boom")

    monkeypatch.setattr(router.registry, "room_of", boom)
    router.dispatch(alice, {"type": "send-message", "payload": {"message": "x"}})

    assert drain(bob) == []
