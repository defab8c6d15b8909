"""Process-wide store instances shared by the routers."""
from functools import lru_cache

from surgery_scheduler.config import get_settings
from surgery_scheduler.database import SessionLocal, get_engine
from surgery_scheduler.rooms import RoomAssignmentStore
from surgery_scheduler.sql_store import SqlCaseStore, SqlProfessorStore, open_room_store


@lru_cache
def get_case_store() -> SqlCaseStore:
    get_engine()
    return SqlCaseStore(SessionLocal)


@lru_cache
def get_professor_store() -> SqlProfessorStore:
    get_engine()
    return SqlProfessorStore(SessionLocal)


@lru_cache
def get_room_store() -> RoomAssignmentStore:
    get_engine()
    return open_room_store(SessionLocal, get_settings().room_store_path)
