"""
SQLAlchemy-backed stores. Each write runs in its own session and commits
before returning; failures roll back and propagate.
"""

import json
import uuid
from contextlib import contextmanager
from datetime import datetime
from typing import Dict, List, Optional, Tuple

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError

from .errors import CaseNotFoundError, StoreError
from .models import ProfessorOfDay, Surgery, TEXT_FIELDS, WIRE_NAMES
from .rooms import JsonFileKeyValue, RoomAssignmentStore
from .store import CaseStore, ProfessorStore, clean_patch
from .tables import KeyValueRow, ProfessorOfDayRow, SurgeryRow

_ROW_FIELDS = list(WIRE_NAMES)


def row_to_surgery(row: SurgeryRow) -> Surgery:
    data = {name: getattr(row, name) for name in _ROW_FIELDS}
    for name in TEXT_FIELDS:
        if data[name] is None:
            data[name] = ""
    return Surgery(**data)


@contextmanager
def _write(session_factory):
    db = session_factory()
    try:
        yield db
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Store write failed: {}", e)
        raise StoreError(str(e)) from e
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


class SqlCaseStore(CaseStore):
    def __init__(self, session_factory):
        super().__init__()
        self.session_factory = session_factory

    def snapshot(self) -> List[Surgery]:
        db = self.session_factory()
        try:
            rows = db.query(SurgeryRow).order_by(SurgeryRow.created_at, SurgeryRow.id).all()
            return [row_to_surgery(r) for r in rows]
        finally:
            db.close()

    def add(self, case: Surgery) -> str:
        now = datetime.now()
        case_id = uuid.uuid4().hex
        data = case.to_dict(wire=False)
        data.update(id=case_id, created_at=now, updated_at=now)
        with _write(self.session_factory) as db:
            db.add(SurgeryRow(**data))
        self._publish()
        return case_id

    def update(self, case_id: str, patch: Dict) -> None:
        with _write(self.session_factory) as db:
            row = db.query(SurgeryRow).filter(SurgeryRow.id == case_id).first()
            if not row:
                raise CaseNotFoundError(case_id)
            for k, v in clean_patch(patch).items():
                setattr(row, k, v)
            row.updated_at = datetime.now()
        self._publish()

    def delete(self, case_id: str) -> None:
        with _write(self.session_factory) as db:
            row = db.query(SurgeryRow).filter(SurgeryRow.id == case_id).first()
            if not row:
                raise CaseNotFoundError(case_id)
            db.delete(row)
        self._publish()

    def get(self, case_id: str) -> Surgery:
        db = self.session_factory()
        try:
            row = db.query(SurgeryRow).filter(SurgeryRow.id == case_id).first()
            if not row:
                raise CaseNotFoundError(case_id)
            return row_to_surgery(row)
        finally:
            db.close()


class SqlProfessorStore(ProfessorStore):
    def __init__(self, session_factory):
        super().__init__()
        self.session_factory = session_factory

    def snapshot(self) -> List[ProfessorOfDay]:
        db = self.session_factory()
        try:
            rows = db.query(ProfessorOfDayRow).order_by(ProfessorOfDayRow.date).all()
            return [ProfessorOfDay(r.date, r.professor_name) for r in rows]
        finally:
            db.close()

    def set(self, day: str, name: Optional[str]) -> None:
        name = (name or "").strip()
        with _write(self.session_factory) as db:
            row = db.query(ProfessorOfDayRow).filter(ProfessorOfDayRow.date == day).first()
            if not name:
                if row:
                    db.delete(row)
            elif row:
                row.professor_name = name
            else:
                db.add(ProfessorOfDayRow(date=day, professor_name=name))
        self._publish()


class SqlKeyValue:
    """Key-value backend in the kv_entries table; values stored as JSON."""

    def __init__(self, session_factory, namespace: str = "rooms"):
        self.session_factory = session_factory
        self.namespace = namespace

    def _query(self, db, key=None):
        q = db.query(KeyValueRow).filter(KeyValueRow.namespace == self.namespace)
        if key is not None:
            q = q.filter(KeyValueRow.key == key)
        return q

    def get(self, key: str):
        db = self.session_factory()
        try:
            row = self._query(db, key).first()
            return json.loads(row.value) if row else None
        except ValueError:
            return None
        finally:
            db.close()

    def set(self, key: str, value) -> None:
        with _write(self.session_factory) as db:
            row = self._query(db, key).first()
            if row:
                row.value = json.dumps(value)
            else:
                db.add(KeyValueRow(namespace=self.namespace, key=key, value=json.dumps(value)))

    def delete(self, key: str) -> None:
        with _write(self.session_factory) as db:
            self._query(db, key).delete()

    def items(self) -> List[Tuple[str, object]]:
        db = self.session_factory()
        try:
            out = []
            for row in self._query(db).all():
                try:
                    out.append((row.key, json.loads(row.value)))
                except ValueError:
                    logger.warning("Skipping unreadable {} entry {!r}", self.namespace, row.key)
            return out
        except SQLAlchemyError as e:
            logger.warning("Could not read {} entries, starting empty: {}", self.namespace, e)
            return []
        finally:
            db.close()


def open_room_store(session_factory, path: Optional[str] = None) -> RoomAssignmentStore:
    """JSON file when a path is configured, else the kv_entries table."""
    if path:
        return RoomAssignmentStore(JsonFileKeyValue(path))
    return RoomAssignmentStore(SqlKeyValue(session_factory, namespace="rooms"))
