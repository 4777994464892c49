"""Per-rep transaction-scoped advisory locks.

Every planner write for a rep runs under this lock so that generation,
manual edits and day moves on the same rep are serialised. The lock is
released automatically at the end of the enclosing transaction.
"""
from __future__ import annotations

import hashlib
import logging

from django.db import connection

logger = logging.getLogger("callplan")


def rep_lock_key(rep_id) -> int:
    raw = f"planner:{rep_id}"
    hex_digest = hashlib.md5(raw.encode()).hexdigest()[:8]
    return int(hex_digest, 16) % (2**31)


def acquire_rep_lock(rep_id, *, wait: bool = True) -> bool:
    """Take the rep's advisory lock; must be called inside ``transaction.atomic()``.

    With ``wait=False`` returns False instead of blocking when another
    transaction holds the lock. On non-PostgreSQL backends (sqlite in tests)
    this is a no-op that always succeeds.
    """
    if connection.vendor != "postgresql":
        return True

    key = rep_lock_key(rep_id)
    with connection.cursor() as cursor:
        if wait:
            cursor.execute("SELECT pg_advisory_xact_lock(%s)", [key])
            return True
        cursor.execute("SELECT pg_try_advisory_xact_lock(%s)", [key])
        row = cursor.fetchone()

    acquired = bool(row and row[0])
    if not acquired:
        logger.debug("Planner lock busy for rep=%s", rep_id)
    return acquired
