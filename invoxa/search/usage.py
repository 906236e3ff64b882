"""Bounded, per-session log of suggestion acceptance."""

import hashlib
import json
import logging
import threading
from abc import ABC, abstractmethod
from collections import Counter, OrderedDict, deque
from pathlib import Path
from typing import Iterable, Iterator

from pydantic import TypeAdapter, ValidationError

from .models import SearchSuggestion, UsageRecord, UsageSummary

logger = logging.getLogger(__name__)

USAGE_STORAGE_KEY = "search-suggestion-usage"
DEFAULT_CAPACITY = 100
DEFAULT_MAX_SESSIONS = 1000
DEFAULT_SESSION = "default"

_records_adapter = TypeAdapter(list[UsageRecord])


class BoundedUsageLog:
    """Append-only log that drops its oldest entries past ``capacity``."""

    def __init__(self, capacity: int = DEFAULT_CAPACITY, records: Iterable[UsageRecord] = ()):
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self._records: deque[UsageRecord] = deque(records, maxlen=capacity)

    @property
    def capacity(self) -> int:
        return self._records.maxlen

    def append(self, record: UsageRecord) -> None:
        self._records.append(record)

    def records(self) -> list[UsageRecord]:
        """Snapshot of the log, oldest first."""
        return list(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[UsageRecord]:
        return iter(self.records())


class UsageStore(ABC):
    """Persistence boundary for usage logs."""

    @abstractmethod
    def load(self, session_id: str) -> list[UsageRecord]:
        """Return the stored records for a session, oldest first."""
        pass

    @abstractmethod
    def save(self, session_id: str, records: list[UsageRecord]) -> None:
        """Replace the stored records for a session."""
        pass


class MemoryUsageStore(UsageStore):
    """Process-local store, one list per session.

    At most ``max_sessions`` logs are kept; the least recently written
    session is dropped first.
    """

    def __init__(self, max_sessions: int = DEFAULT_MAX_SESSIONS):
        if max_sessions < 1:
            raise ValueError("max_sessions must be at least 1")
        self.max_sessions = max_sessions
        self._data: OrderedDict[str, list[UsageRecord]] = OrderedDict()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._data)

    def load(self, session_id: str) -> list[UsageRecord]:
        with self._lock:
            return list(self._data.get(session_id, []))

    def save(self, session_id: str, records: list[UsageRecord]) -> None:
        with self._lock:
            self._data[session_id] = list(records)
            self._data.move_to_end(session_id)
            while len(self._data) > self.max_sessions:
                evicted, _ = self._data.popitem(last=False)
                logger.debug(f"Evicted usage log for session {evicted}")


class JsonFileUsageStore(UsageStore):
    """Stores each session's log as a JSON array in its own file.

    File names carry a SHA-256 digest of the session id, so distinct ids
    never share a file. Read-modify-write is not atomic; one writer per
    session is assumed.
    """

    def __init__(self, directory: Path | str):
        self.directory = Path(directory)

    def path_for(self, session_id: str) -> Path:
        digest = hashlib.sha256(session_id.encode("utf-8")).hexdigest()
        return self.directory / f"{USAGE_STORAGE_KEY}-{digest}.json"

    def load(self, session_id: str) -> list[UsageRecord]:
        path = self.path_for(session_id)
        if not path.exists():
            return []
        try:
            return _records_adapter.validate_json(path.read_bytes())
        except (OSError, ValidationError) as e:
            logger.warning(f"Discarding unreadable usage log {path}: {e}")
            return []

    def save(self, session_id: str, records: list[UsageRecord]) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        payload = _records_adapter.dump_python(records, mode="json")
        self.path_for(session_id).write_text(json.dumps(payload), encoding="utf-8")


class UsageTracker:
    """Records whether users accepted suggestions.

    The log is analytics only; nothing in the ranking reads it back.
    """

    def __init__(self, store: UsageStore | None = None, capacity: int = DEFAULT_CAPACITY):
        self.store = store or MemoryUsageStore()
        self.capacity = capacity

    def _log(self, session_id: str) -> BoundedUsageLog:
        return BoundedUsageLog(self.capacity, self.store.load(session_id))

    def track(
        self,
        suggestion: SearchSuggestion,
        was_used: bool,
        session_id: str = DEFAULT_SESSION,
    ) -> UsageRecord:
        """Append a usage record and persist the session log.

        Storage failures are logged and otherwise ignored.
        """
        record = UsageRecord(suggestion=suggestion, was_used=was_used)
        log = self._log(session_id)
        log.append(record)

        try:
            self.store.save(session_id, log.records())
        except OSError as e:
            logger.error(f"Failed to persist usage log for session {session_id}: {e}")

        logger.debug(
            f"Tracked {suggestion.type.value} suggestion "
            f"({'used' if was_used else 'dismissed'}) for session {session_id}"
        )
        return record

    def history(self, session_id: str = DEFAULT_SESSION) -> list[UsageRecord]:
        """Stored records for a session, oldest first."""
        return self._log(session_id).records()

    def summarize(self, session_id: str = DEFAULT_SESSION) -> UsageSummary:
        """Aggregate acceptance counts for a session."""
        records = self.history(session_id)
        accepted = [r for r in records if r.was_used]
        by_type = Counter(r.suggestion.type.value for r in accepted)
        return UsageSummary(
            total=len(records),
            accepted=len(accepted),
            rejected=len(records) - len(accepted),
            accepted_by_type=dict(by_type),
        )
