from codesync.room_policy import RoomPolicyStore
from codesync.schemas import Task


def test_create_defaults_to_collaborative():
    store = RoomPolicyStore()
    policy = store.create("R")

    assert policy.isCollaborative is True
    assert policy.tasks is None
    assert store.get("R") == policy


def test_missing_policy_behaves_collaborative():
    store = RoomPolicyStore()

    assert store.get("nowhere") is None
    assert store.is_collaborative("nowhere") is True
    assert store.tasks("nowhere") is None


def test_tasks_are_kept_in_order():
    store = RoomPolicyStore()
    tasks = [Task(id="t1", title="Sum"), Task(id="t2", title="Reverse")]
    store.create("R", is_collaborative=False, tasks=tasks)

    assert store.is_collaborative("R") is False
    assert [t.id for t in store.tasks("R")] == ["t1", "t2"]


def test_delete_if_empty_only_when_unoccupied():
    store = RoomPolicyStore()
    store.create("R")

    assert store.delete_if_empty("R", 1) is False
    assert "R" in store
    assert store.delete_if_empty("R", 0) is True
    assert store.get("R") is None
    assert store.delete_if_empty("R", 0) is False


def test_empty_task_list_is_kept_distinct_from_none():
    store = RoomPolicyStore()
    store.create("R", tasks=[])

    assert store.tasks("R") == ()
