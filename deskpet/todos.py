"""Todo list operations"""

import logging
from typing import Iterable, List, Optional

from .database import SharedStore, store as default_store
from .models import TodoItem
from .widget import WidgetCenter
from . import keys

logger = logging.getLogger(__name__)


class TodoManager:
    """Manages the todo list shared with the widget"""

    def __init__(self, store: Optional[SharedStore] = None, widget_center: Optional[WidgetCenter] = None):
        self.store = store or default_store
        self.widget_center = widget_center or WidgetCenter(self.store)
        self.todos: List[TodoItem] = []
        self._load_todos()

    def add_todo(self, text: str) -> Optional[TodoItem]:
        """
        Add a todo

        Args:
            text: Todo text; blank text is ignored

        Returns:
            Created TodoItem, or None when the text was blank
        """
        if not text.strip():
            return None

        todo = TodoItem(text=text)
        self.todos.append(todo)
        self._save_and_sync()
        return todo

    def delete_todos(self, offsets: Iterable[int]):
        """Delete todos by list position"""
        doomed = set(offsets)
        self.todos = [todo for idx, todo in enumerate(self.todos) if idx not in doomed]
        self._save_and_sync()

    def delete_todo(self, todo_id: str):
        """Delete a todo by id"""
        self.todos = [todo for todo in self.todos if todo.id != todo_id]
        self._save_and_sync()
        logger.info("Deleted todo %s", todo_id)

    def toggle_todo(self, todo_id: str) -> Optional[TodoItem]:
        """Flip a todo's completion; unknown ids are ignored"""
        for todo in self.todos:
            if todo.id == todo_id:
                todo.is_completed = not todo.is_completed
                self._save_and_sync()
                return todo
        return None

    def get_todo(self, ref: str) -> Optional[TodoItem]:
        """Find a todo by 1-based list position or id prefix"""
        try:
            idx = int(ref)
            if 1 <= idx <= len(self.todos):
                return self.todos[idx - 1]
        except ValueError:
            pass

        matches = [todo for todo in self.todos if todo.id.startswith(ref)]
        return matches[0] if len(matches) == 1 else None

    def reload(self):
        """Re-read the list (another process may have changed it)"""
        self._load_todos()

    def _save_and_sync(self):
        self.store.set(keys.SHARED_TODOS, [todo.to_dict() for todo in self.todos])
        self.widget_center.reload_all_timelines()

    def _load_todos(self):
        raw = self.store.get(keys.SHARED_TODOS, [])
        try:
            self.todos = [TodoItem.from_dict(item) for item in raw]
        except (KeyError, TypeError, ValueError):
            logger.warning("Shared todos are unreadable, starting with an empty list")
            self.todos = []


# Global todo manager instance
todo_manager = TodoManager()
