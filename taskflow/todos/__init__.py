"""Todo list: models, persistence, and list views."""

from taskflow.todos.filters import categories_on, filter_todos, todos_by_date
from taskflow.todos.models import CATEGORIES, PRIORITIES, Subtask, Todo
from taskflow.todos.store import TodoStore

__all__ = [
    "CATEGORIES",
    "PRIORITIES",
    "Subtask",
    "Todo",
    "TodoStore",
    "categories_on",
    "filter_todos",
    "todos_by_date",
]
