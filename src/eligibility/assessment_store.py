"""
In-memory store of completed assessments.

Entries expire after a fixed TTL and the store never holds more than
max_entries results; the oldest entry is evicted first. Nothing
survives a restart.
"""

import logging
import random
import string
import time
from collections import OrderedDict
from typing import Any, Callable, Dict, Optional, Tuple

from src.config import settings
from src.eligibility.eligibility_models import AssessmentResult

logger = logging.getLogger(__name__)

_ID_ALPHABET = string.digits + string.ascii_lowercase


def generate_assessment_id() -> str:
    """assessment_<epoch ms>_<9 base36 chars>"""
    suffix = "".join(random.choices(_ID_ALPHABET, k=9))
    return f"assessment_{int(time.time() * 1000)}_{suffix}"


class AssessmentStore:
    """TTL-expiring, size-bounded cache of assessment results"""

    def __init__(
        self,
        ttl_seconds: int = settings.ASSESSMENT_TTL_SECONDS,
        max_entries: int = settings.ASSESSMENT_MAX_ENTRIES,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Args:
            ttl_seconds: Lifetime of an entry after it is stored
            max_entries: Upper bound on stored results
            clock: Monotonic time source, replaceable in tests
        """
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        # assessment_id -> (expires_at, result), oldest first
        self._entries: "OrderedDict[str, Tuple[float, AssessmentResult]]" = OrderedDict()
        self.evicted = 0
        self.expired = 0

    def put(self, result: AssessmentResult) -> str:
        self.purge_expired()

        self._entries[result.id] = (self._clock() + self.ttl_seconds, result)
        self._entries.move_to_end(result.id)

        while len(self._entries) > self.max_entries:
            oldest_id, _ = self._entries.popitem(last=False)
            self.evicted += 1
            logger.info(f"[ASSESSMENT STORE] Evicted oldest assessment {oldest_id}")

        return result.id

    def get(self, assessment_id: str) -> Optional[AssessmentResult]:
        entry = self._entries.get(assessment_id)
        if entry is None:
            return None

        expires_at, result = entry
        if self._clock() >= expires_at:
            del self._entries[assessment_id]
            self.expired += 1
            logger.info(f"[ASSESSMENT STORE] Assessment {assessment_id} expired")
            return None
        return result

    def purge_expired(self) -> int:
        now = self._clock()
        stale = [key for key, (expires_at, _) in self._entries.items() if now >= expires_at]
        for key in stale:
            del self._entries[key]
        self.expired += len(stale)
        return len(stale)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, assessment_id: str) -> bool:
        return self.get(assessment_id) is not None

    def clear(self) -> None:
        self._entries.clear()

    def get_store_stats(self) -> Dict[str, Any]:
        return {
            "stored": len(self._entries),
            "max_entries": self.max_entries,
            "ttl_seconds": self.ttl_seconds,
            "evicted": self.evicted,
            "expired": self.expired,
        }


# Global store instance
_assessment_store: AssessmentStore = AssessmentStore()


def get_assessment_store() -> AssessmentStore:
    return _assessment_store
