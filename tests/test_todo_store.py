"""Tests for TodoStore: aiosqlite CRUD and change listeners."""

from datetime import UTC, datetime, timedelta

import pytest

from taskflow.todos.store import TodoStore

DUE = datetime(2026, 10, 20, 17, 0, tzinfo=UTC)


# -- add_todo / get_todo -------------------------------------------------------


async def test_add_and_get_todo(store: TodoStore) -> None:
    todo = await store.add_todo(
        "  Write report  ", priority="high", category="work", due_date=DUE
    )

    fetched = await store.get_todo(todo.id)
    assert fetched is not None
    assert fetched.title == "Write report"
    assert fetched.priority == "high"
    assert fetched.category == "work"
    assert fetched.due_date == DUE
    assert fetched.completed is False


async def test_add_todo_defaults(store: TodoStore) -> None:
    todo = await store.add_todo("Buy milk")
    assert todo.priority == "medium"
    assert todo.category == "personal"
    assert todo.due_date is None
    assert todo.subtasks == []


async def test_add_todo_with_subtasks(store: TodoStore) -> None:
    todo = await store.add_todo("Trip", subtasks=["Book hotel", "Pack"])
    fetched = await store.get_todo(todo.id)
    assert [s.title for s in fetched.subtasks] == ["Book hotel", "Pack"]


async def test_add_todo_rejects_blank_title(store: TodoStore) -> None:
    with pytest.raises(ValueError, match="must not be empty"):
        await store.add_todo("   ")


async def test_add_todo_rejects_unknown_priority(store: TodoStore) -> None:
    with pytest.raises(ValueError, match="Unknown priority"):
        await store.add_todo("x", priority="urgent")


async def test_add_todo_rejects_unknown_category(store: TodoStore) -> None:
    with pytest.raises(ValueError, match="Unknown category"):
        await store.add_todo("x", category="hobby")


async def test_get_todo_not_found(store: TodoStore) -> None:
    assert await store.get_todo("nonexistent") is None


# -- list_todos / counts -------------------------------------------------------


async def test_list_todos_newest_first(store: TodoStore) -> None:
    first = await store.add_todo("First")
    second = await store.add_todo("Second")

    todos = await store.list_todos()
    assert [t.id for t in todos] == [second.id, first.id]


async def test_counts(store: TodoStore) -> None:
    a = await store.add_todo("A")
    await store.add_todo("B")
    await store.toggle_todo(a.id)

    assert await store.counts() == (1, 1)


# -- resolve_id ----------------------------------------------------------------


async def test_resolve_id_by_prefix(store: TodoStore) -> None:
    todo = await store.add_todo("A")
    assert await store.resolve_id(todo.id[:6]) == todo.id


async def test_resolve_id_not_found(store: TodoStore) -> None:
    await store.add_todo("A")
    with pytest.raises(KeyError):
        await store.resolve_id("zzzz")


@pytest.mark.parametrize("prefix", ["%", "_", "_%"])
async def test_resolve_id_treats_wildcards_literally(store: TodoStore, prefix: str) -> None:
    await store.add_todo("A")
    with pytest.raises(KeyError):
        await store.resolve_id(prefix)


async def test_resolve_id_empty(store: TodoStore) -> None:
    with pytest.raises(ValueError):
        await store.resolve_id(" ")


# -- update / toggle / delete --------------------------------------------------


async def test_toggle_todo(store: TodoStore) -> None:
    todo = await store.add_todo("A")

    toggled = await store.toggle_todo(todo.id)
    assert toggled.completed is True
    toggled = await store.toggle_todo(todo.id)
    assert toggled.completed is False


async def test_toggle_missing_todo_raises(store: TodoStore) -> None:
    with pytest.raises(KeyError, match="not found"):
        await store.toggle_todo("missing")


async def test_update_todo_fields(store: TodoStore) -> None:
    todo = await store.add_todo("A", due_date=DUE)

    updated = await store.update_todo(
        todo.id, title="B", priority="low", due_date=DUE + timedelta(days=1)
    )
    assert updated.title == "B"
    assert updated.priority == "low"

    fetched = await store.get_todo(todo.id)
    assert fetched.due_date == DUE + timedelta(days=1)
    assert fetched.created_at == todo.created_at


async def test_update_todo_clears_due_date(store: TodoStore) -> None:
    todo = await store.add_todo("A", due_date=DUE)
    await store.update_todo(todo.id, due_date=None)
    assert (await store.get_todo(todo.id)).due_date is None


async def test_update_todo_rejects_fixed_fields(store: TodoStore) -> None:
    todo = await store.add_todo("A")
    with pytest.raises(ValueError, match="Cannot update"):
        await store.update_todo(todo.id, id="other")


async def test_delete_todo(store: TodoStore) -> None:
    todo = await store.add_todo("A")
    assert await store.delete_todo(todo.id) is True
    assert await store.get_todo(todo.id) is None


async def test_delete_nonexistent(store: TodoStore) -> None:
    assert await store.delete_todo("nope") is False


async def test_clear_completed(store: TodoStore) -> None:
    a = await store.add_todo("A")
    b = await store.add_todo("B")
    keep = await store.add_todo("C")
    await store.toggle_todo(a.id)
    await store.toggle_todo(b.id)

    assert await store.clear_completed() == 2
    assert [t.id for t in await store.list_todos()] == [keep.id]


# -- Subtasks ------------------------------------------------------------------


async def test_subtask_lifecycle(store: TodoStore) -> None:
    todo = await store.add_todo("Trip")
    subtask = await store.add_subtask(todo.id, "Pack")

    toggled = await store.toggle_subtask(todo.id, subtask.id)
    assert toggled.completed is True
    fetched = await store.get_todo(todo.id)
    assert fetched.subtask_progress == (1, 1)

    assert await store.delete_subtask(todo.id, subtask.id) is True
    assert (await store.get_todo(todo.id)).subtasks == []


async def test_toggle_missing_subtask_raises(store: TodoStore) -> None:
    todo = await store.add_todo("Trip")
    with pytest.raises(KeyError, match="Subtask"):
        await store.toggle_subtask(todo.id, "nope")


async def test_delete_missing_subtask(store: TodoStore) -> None:
    todo = await store.add_todo("Trip")
    assert await store.delete_subtask(todo.id, "nope") is False


# -- Listeners -----------------------------------------------------------------


async def test_listener_receives_list_after_each_mutation(store: TodoStore) -> None:
    seen: list[list[str]] = []
    store.subscribe(lambda todos: seen.append([t.title for t in todos]))

    todo = await store.add_todo("A")
    await store.update_todo(todo.id, title="B")
    await store.toggle_todo(todo.id)
    await store.delete_todo(todo.id)

    assert seen == [["A"], ["B"], ["B"], []]


async def test_no_publish_when_nothing_changed(store: TodoStore) -> None:
    seen = []
    store.subscribe(seen.append)

    await store.delete_todo("nope")
    await store.clear_completed()

    assert seen == []


async def test_failing_listener_is_isolated(store: TodoStore) -> None:
    seen = []

    def _broken(todos):
        raise RuntimeError("listener bug")

    store.subscribe(_broken)
    store.subscribe(seen.append)

    todo = await store.add_todo("A")
    assert todo.title == "A"
    assert len(seen) == 1


async def test_unsubscribe(store: TodoStore) -> None:
    seen = []
    store.subscribe(seen.append)
    store.unsubscribe(seen.append)

    await store.add_todo("A")
    assert seen == []


# -- Singleton -----------------------------------------------------------------


def test_singleton() -> None:
    assert TodoStore.get() is TodoStore.get()
