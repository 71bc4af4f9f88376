from deskpet import keys
from deskpet.todos import TodoManager


def test_add_and_share(todos, shared_store, widget_center):
    token = widget_center.reload_token()
    todo = todos.add_todo("Water the plants")

    stored = shared_store.get(keys.SHARED_TODOS)
    assert stored[0]["text"] == "Water the plants"
    assert stored[0]["isCompleted"] is False
    assert stored[0]["id"] == todo.id
    assert widget_center.reload_token() == token + 1


def test_blank_text_is_ignored(todos, shared_store):
    assert todos.add_todo("   ") is None
    assert shared_store.get(keys.SHARED_TODOS) is None


def test_toggle_and_delete(todos):
    first = todos.add_todo("one")
    second = todos.add_todo("two")

    assert todos.toggle_todo(first.id).is_completed is True
    assert todos.toggle_todo("missing") is None

    todos.delete_todo(first.id)
    assert todos.todos == [second]


def test_delete_by_offsets(todos):
    for text in ["a", "b", "c", "d"]:
        todos.add_todo(text)
    todos.delete_todos([0, 2])
    assert [t.text for t in todos.todos] == ["b", "d"]


def test_lookup_by_position_or_prefix(todos):
    todo = todos.add_todo("find me")
    assert todos.get_todo("1") is todo
    assert todos.get_todo(todo.id[:6]) is todo
    assert todos.get_todo("9") is None


def test_list_is_shared_between_processes(todos, shared_store, widget_center):
    todos.add_todo("from the app")
    other = TodoManager(shared_store, widget_center)
    assert [t.text for t in other.todos] == ["from the app"]


def test_unreadable_list_starts_empty(shared_store, widget_center):
    shared_store.set(keys.SHARED_TODOS, [{"no": "id"}])
    assert TodoManager(shared_store, widget_center).todos == []
