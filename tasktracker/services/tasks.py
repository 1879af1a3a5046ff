import threading
from typing import Optional

from loguru import logger

from tasktracker.errors import NotFound
from tasktracker.store import TASKS

# never taken from client input
PROTECTED_FIELDS = ("id", "createdAt", "userId")


class TaskRepository:
    """Owns the task collection. Every operation is scoped to an owner."""

    def __init__(self, store, counters):
        self._store = store
        self._counters = counters
        self._lock = threading.Lock()
        self._tasks = store.load(TASKS, [])

    def list(self, owner_id: int, query: Optional[str] = None) -> list:
        needle = query.lower() if query else None
        with self._lock:
            return [
                dict(t)
                for t in self._tasks
                if t["userId"] == owner_id
                and (needle is None or needle in str(t.get("name", "")).lower())
            ]

    def create(self, owner_id: int, fields: dict) -> dict:
        extra = {k: v for k, v in fields.items() if k not in PROTECTED_FIELDS}
        with self._lock:
            task = {"id": self._counters.next_task_id(), "userId": owner_id}
            task.update(extra)
            self._tasks.append(task)
            self._store.save(TASKS, self._tasks)

        logger.info(f"task id={task['id']} created by user id={owner_id}")
        return dict(task)

    def update(self, owner_id: int, task_id: int, patch: dict) -> dict:
        with self._lock:
            task = self._find_owned(owner_id, task_id)
            for key, value in patch.items():
                # only fields the record already has
                if key in PROTECTED_FIELDS or key not in task:
                    continue
                task[key] = value
            self._store.save(TASKS, self._tasks)
            return dict(task)

    def delete(self, owner_id: int, task_id: int) -> None:
        with self._lock:
            task = self._find_owned(owner_id, task_id)
            self._tasks = [t for t in self._tasks if t is not task]
            self._store.save(TASKS, self._tasks)
        logger.info(f"task id={task_id} deleted by user id={owner_id}")

    def _find_owned(self, owner_id: int, task_id: int) -> dict:
        for task in self._tasks:
            # a task owned by someone else is reported exactly like a missing one
            if task["id"] == task_id and task["userId"] == owner_id:
                return task
        raise NotFound()
