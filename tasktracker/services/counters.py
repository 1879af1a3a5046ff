import threading

from loguru import logger

from tasktracker.store import LAST_IDS


class IdCounters:
    """Process-wide monotonic id counters persisted as ``lastIDs``.

    Callers allocate from inside their own collection lock and persist the
    collection afterwards, so a crash in between skips an id instead of
    reusing one.
    """

    def __init__(self, store):
        self._store = store
        self._lock = threading.Lock()
        raw = store.load(LAST_IDS, {})
        self.last_task_id = int(raw.get("lastTaskId", 0))
        self.last_user_id = int(raw.get("lastUserId", 0))

    def snapshot(self) -> dict:
        return {"lastTaskId": self.last_task_id, "lastUserId": self.last_user_id}

    def next_task_id(self) -> int:
        with self._lock:
            self.last_task_id += 1
            self._store.save(LAST_IDS, self.snapshot())
            return self.last_task_id

    def next_user_id(self) -> int:
        with self._lock:
            self.last_user_id += 1
            self._store.save(LAST_IDS, self.snapshot())
            logger.debug(f"allocated user id {self.last_user_id}")
            return self.last_user_id
