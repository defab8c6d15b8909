"""
Case store contract and in-memory implementation.

Stores push the full current snapshot to every subscriber on registration and
after each change; subscribers replace their working set on each call.
"""

import uuid
from datetime import datetime
from typing import Callable, Dict, List, Optional

from loguru import logger

from .errors import CaseNotFoundError
from .models import ATTR_NAMES, FLAG_FIELDS, TEXT_FIELDS, WIRE_NAMES, ProfessorOfDay, Surgery

SnapshotCallback = Callable[[list], None]

# Never patched by callers
_PROTECTED = {"id", "created_at", "updated_at"}
# A record always has these
_NOT_NULL = {"date", "patient_name", "operation", *FLAG_FIELDS}


class Subscription:
    """Disposal handle; releasing more than once is a no-op."""

    def __init__(self, release: Callable[[], None]):
        self._release = release
        self.active = True

    def unsubscribe(self) -> None:
        if not self.active:
            return
        self.active = False
        self._release()

    __call__ = unsubscribe

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.unsubscribe()


class SnapshotPublisher:
    def __init__(self):
        self._subscribers: Dict[int, SnapshotCallback] = {}
        self._next_token = 0

    def snapshot(self) -> list:
        raise NotImplementedError

    def subscribe(self, on_snapshot: SnapshotCallback) -> Subscription:
        token = self._next_token
        self._next_token += 1
        self._subscribers[token] = on_snapshot
        on_snapshot(self.snapshot())
        return Subscription(lambda: self._subscribers.pop(token, None))

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def _publish(self) -> None:
        if not self._subscribers:
            return
        snap = self.snapshot()
        for callback in list(self._subscribers.values()):
            # the write has already landed
            try:
                callback(list(snap))
            except Exception:
                logger.exception("Snapshot subscriber {!r} failed", callback)


def clean_patch(patch: Dict) -> Dict:
    """
    Accept wire or attribute keys; drop identity/timestamps and unknown keys.
    None leaves required fields and flags unchanged and blanks optional text.
    """
    out = {}
    for key, value in patch.items():
        attr = ATTR_NAMES.get(key, key)
        if attr not in WIRE_NAMES or attr in _PROTECTED:
            continue
        if value is None:
            if attr in _NOT_NULL:
                continue
            if attr in TEXT_FIELDS:
                value = ""
        elif attr in FLAG_FIELDS:
            value = bool(value)
        out[attr] = value
    return out


class CaseStore(SnapshotPublisher):
    """add / update / delete / subscribe. Writes raise on failure; no retry."""

    def add(self, case: Surgery) -> str:
        raise NotImplementedError

    def update(self, case_id: str, patch: Dict) -> None:
        raise NotImplementedError

    def delete(self, case_id: str) -> None:
        raise NotImplementedError

    def get(self, case_id: str) -> Surgery:
        for c in self.snapshot():
            if c.id == case_id:
                return c
        raise CaseNotFoundError(case_id)


class InMemoryCaseStore(CaseStore):
    def __init__(self, clock: Callable[[], datetime] = datetime.now):
        super().__init__()
        self._cases: Dict[str, Surgery] = {}
        self._clock = clock

    def snapshot(self) -> List[Surgery]:
        return list(self._cases.values())

    def add(self, case: Surgery) -> str:
        now = self._clock()
        case_id = uuid.uuid4().hex
        self._cases[case_id] = case.with_changes(id=case_id, created_at=now, updated_at=now)
        logger.debug("added case {} on {}", case_id, case.date)
        self._publish()
        return case_id

    def update(self, case_id: str, patch: Dict) -> None:
        if case_id not in self._cases:
            raise CaseNotFoundError(case_id)
        changes = clean_patch(patch)
        changes["updated_at"] = self._clock()
        self._cases[case_id] = self._cases[case_id].with_changes(**changes)
        self._publish()

    def delete(self, case_id: str) -> None:
        if self._cases.pop(case_id, None) is None:
            raise CaseNotFoundError(case_id)
        self._publish()


class ProfessorStore(SnapshotPublisher):
    """At most one professor per day; an empty name clears the day."""

    def set(self, day: str, name: Optional[str]) -> None:
        raise NotImplementedError

    def get(self, day: str) -> Optional[str]:
        for rec in self.snapshot():
            if rec.date == day:
                return rec.professor_name
        return None


class InMemoryProfessorStore(ProfessorStore):
    def __init__(self):
        super().__init__()
        self._by_day: Dict[str, str] = {}

    def snapshot(self) -> List[ProfessorOfDay]:
        return [ProfessorOfDay(d, n) for d, n in sorted(self._by_day.items())]

    def set(self, day: str, name: Optional[str]) -> None:
        name = (name or "").strip()
        if name:
            self._by_day[day] = name
        else:
            self._by_day.pop(day, None)
        self._publish()


class CaseBoard:
    """
    Holds the latest snapshot from a store. Views are recomputed from it on
    demand; nothing is patched incrementally.
    """

    def __init__(self, store: CaseStore):
        self.cases: List[Surgery] = []
        self.snapshots_received = 0
        self._subscription = store.subscribe(self._on_snapshot)

    def _on_snapshot(self, cases: list) -> None:
        self.cases = list(cases)
        self.snapshots_received += 1

    def close(self) -> None:
        self._subscription.unsubscribe()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
