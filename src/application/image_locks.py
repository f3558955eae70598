"""
Image Locks - one re-entrant lock per image id
"""
from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from threading import Lock, RLock


class ImageLocks:
    """Serializes the check-then-create sequence of version requests per image"""

    def __init__(self) -> None:
        self._guard = Lock()
        self._locks: dict[str, RLock] = {}

    def get(self, image_id: str) -> RLock:
        with self._guard:
            lock = self._locks.get(image_id)
            if lock is None:
                lock = self._locks[image_id] = RLock()
            return lock

    @contextmanager
    def hold(self, image_id: str) -> Iterator[None]:
        with self.get(image_id):
            yield

    def discard(self, image_id: str) -> None:
        with self._guard:
            self._locks.pop(image_id, None)

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)


_DEFAULT_LOCKS = ImageLocks()


def default_image_locks() -> ImageLocks:
    """Process wide registry shared by every use case that does not bring its own."""
    return _DEFAULT_LOCKS
