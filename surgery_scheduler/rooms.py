"""
Room assignment layer: case id -> room number (1..3).

The mapping lives outside the case store, in an injected key-value backend.
Every mutation is written through before returning. Unreadable persisted
state is treated as an empty mapping.
"""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

from loguru import logger

from .errors import InvalidRoomError
from .models import ROOMS


# ---------------------------------------------------------------------------
# Key-value backends: get / set / delete / items
# ---------------------------------------------------------------------------
class MemoryKeyValue:
    def __init__(self, initial: Optional[Dict[str, object]] = None):
        self._data = dict(initial or {})

    def get(self, key: str):
        return self._data.get(key)

    def set(self, key: str, value) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def items(self) -> List[Tuple[str, object]]:
        return list(self._data.items())


class JsonFileKeyValue:
    """Whole mapping kept in one JSON object file, rewritten atomically on each change."""

    def __init__(self, path):
        self.path = Path(path)
        self._data = self._load()

    def _load(self) -> Dict[str, object]:
        if not self.path.exists():
            return {}
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning("Room store {} unreadable, starting empty: {}", self.path, e)
            return {}
        if not isinstance(raw, dict):
            logger.warning("Room store {} is not a JSON object, starting empty", self.path)
            return {}
        return raw

    def _flush(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(json.dumps(self._data, ensure_ascii=False, sort_keys=True), encoding="utf-8")
        os.replace(tmp, self.path)

    def get(self, key: str):
        return self._data.get(key)

    def set(self, key: str, value) -> None:
        self._data[key] = value
        self._flush()

    def delete(self, key: str) -> None:
        if key in self._data:
            del self._data[key]
            self._flush()

    def items(self) -> List[Tuple[str, object]]:
        return list(self._data.items())


# ---------------------------------------------------------------------------
# Assignment store
# ---------------------------------------------------------------------------
def _as_room(value) -> Optional[int]:
    try:
        room = int(value)
    except (TypeError, ValueError):
        return None
    return room if room in ROOMS else None


def _check_room(room) -> int:
    if isinstance(room, bool) or _as_room(room) is None or int(room) != room:
        raise InvalidRoomError(room)
    return int(room)


@dataclass
class RoomPartition:
    rooms: Dict[int, List[str]] = field(default_factory=lambda: {r: [] for r in ROOMS})
    unassigned: List[str] = field(default_factory=list)

    def as_dict(self) -> Dict[str, List[str]]:
        out = {f"room_{r}": list(ids) for r, ids in self.rooms.items()}
        out["unassigned"] = list(self.unassigned)
        return out


def partition_by_room(case_ids: Iterable[str], mapping: Dict[str, int]) -> RoomPartition:
    """
    Split the given cases into room 1/2/3/unassigned buckets.
    Every input id lands in exactly one bucket; mapping entries for ids not
    in case_ids are ignored.
    """
    part = RoomPartition()
    seen = set()
    for cid in case_ids:
        if cid in seen:
            continue
        seen.add(cid)
        room = _as_room(mapping.get(cid))
        if room is None:
            part.unassigned.append(cid)
        else:
            part.rooms[room].append(cid)
    return part


class RoomAssignmentStore:
    def __init__(self, kv):
        self.kv = kv
        self._mapping: Dict[str, int] = {}
        for key, value in kv.items():
            room = _as_room(value)
            if room is None:
                logger.warning("Ignoring invalid room entry {!r} -> {!r}", key, value)
                continue
            self._mapping[str(key)] = room

    def mapping(self) -> Dict[str, int]:
        return dict(self._mapping)

    def room_of(self, case_id: str) -> Optional[int]:
        return self._mapping.get(case_id)

    def toggle(self, case_id: str, room: int) -> Optional[int]:
        """Assign to room, or unassign if already there. Returns the resulting room."""
        room = _check_room(room)
        if self._mapping.get(case_id) == room:
            self.unassign(case_id)
            return None
        self.kv.set(case_id, room)
        self._mapping[case_id] = room
        logger.debug("case {} -> room {}", case_id, room)
        return room

    def unassign(self, case_id: str) -> None:
        if case_id in self._mapping:
            self.kv.delete(case_id)
            del self._mapping[case_id]
            logger.debug("case {} unassigned", case_id)

    def partition(self, case_ids: Iterable[str]) -> RoomPartition:
        return partition_by_room(case_ids, self._mapping)

    def prune(self, known_case_ids: Iterable[str]) -> int:
        """Drop entries for cases that no longer exist anywhere. Never called implicitly."""
        known = set(known_case_ids)
        stale = [cid for cid in self._mapping if cid not in known]
        for cid in stale:
            self.unassign(cid)
        return len(stale)
