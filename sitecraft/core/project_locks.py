"""Per-project mutual exclusion for revision and rollback.

Revision and rollback both move a project's current pointer. Holding
``project_lock(project_id)`` for the whole workflow makes them serialize
on the same project, so a rollback issued while a revision is generating
waits and then applies on top of the new version instead of being silently
overwritten by it. Different projects never contend.

The lock is in-process. Credit and pointer writes are single conditional
UPDATE statements, so multiple workers stay consistent without it; they
just fall back to last-writer-wins ordering across processes.
"""

import threading
from contextlib import contextmanager
from typing import Iterator

from .logging_config import project_id_var

# {project_id: [lock, holders_and_waiters]}
_locks: dict[str, list] = {}
_registry_lock = threading.Lock()


@contextmanager
def project_lock(project_id: str) -> Iterator[None]:
    """Block until no other revision/rollback holds *project_id*."""
    with _registry_lock:
        entry = _locks.get(project_id)
        if entry is None:
            entry = [threading.Lock(), 0]
            _locks[project_id] = entry
        entry[1] += 1
    lock = entry[0]

    lock.acquire()
    token = project_id_var.set(project_id)
    try:
        yield
    finally:
        project_id_var.reset(token)
        lock.release()
        with _registry_lock:
            entry[1] -= 1
            if entry[1] == 0:
                _locks.pop(project_id, None)


def active_lock_count() -> int:
    """Number of projects with a holder or waiter. Used by tests."""
    with _registry_lock:
        return len(_locks)
