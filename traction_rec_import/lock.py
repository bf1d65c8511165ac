"""
Cross-process mutual exclusion for the import pipeline.

The lock is a single key in the ``import_lock`` cache alias. Acquisition uses
``cache.add``, which only writes when the key is absent, so it is an atomic
test-and-set against whatever store backs the alias. Deployed settings point
the alias at a database cache so every scheduled process sees the same key.

There is no expiry: a lock left behind by a crashed process stays held until
an operator clears it with ``manage.py tr_reset_lock``.
"""

import os
import socket
from contextlib import contextmanager
from logging import getLogger

from django.core.cache import caches
from django.utils import timezone

from .config import IMPORT_LOCK_CACHE_ALIAS, IMPORT_LOCK_KEY

logger = getLogger(__name__)


def holder_identity():
    return "%s:%s" % (socket.gethostname(), os.getpid())


class ImportLock:
    def __init__(self, lock_id=IMPORT_LOCK_KEY, cache_alias=IMPORT_LOCK_CACHE_ALIAS):
        self.lock_id = lock_id
        self.cache_alias = cache_alias

    def __repr__(self):
        return "ImportLock(lock_id=%s, cache_alias=%s)" % (
            self.lock_id,
            self.cache_alias,
        )

    @property
    def cache(self):
        return caches[self.cache_alias]

    def acquire(self):
        """
        Try to take the lock without waiting.

        Returns True if the key was absent and is now held by this process,
        False if anyone already holds it.
        """
        value = {"holder": holder_identity(), "acquired": timezone.now().isoformat()}
        # cache.add does nothing and returns False if the key already exists
        acquired = self.cache.add(self.lock_id, value, timeout=None)
        if acquired:
            logger.debug("Acquired %s as %s", self, value["holder"])
        else:
            logger.debug("%s is already held by %s", self, self.holder())
        return acquired

    def release(self):
        """
        Clear the lock whoever holds it. Safe to call when it is not held.
        """
        self.cache.delete(self.lock_id)
        logger.debug("Released %s", self)

    def holder(self):
        """
        Return the stored ``{"holder", "acquired"}`` value, or None when free.
        """
        return self.cache.get(self.lock_id)

    def is_locked(self):
        return self.holder() is not None


@contextmanager
def import_lock(lock=None):
    """
    Hold ``lock`` (a new ``ImportLock`` by default) for the duration of the
    block.

    Yields True if the lock was acquired here and False otherwise. The lock is
    released on every exit from the block, including exceptions, but only when
    it was acquired by this call.

    Usage:
        with import_lock() as acquired:
            if acquired:
                ...
    """
    if lock is None:
        lock = ImportLock()
    acquired = False
    try:
        acquired = lock.acquire()
        yield acquired
    finally:
        if acquired:
            lock.release()
