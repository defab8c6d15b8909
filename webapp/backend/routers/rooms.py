from fastapi import APIRouter, Depends

from deps import get_case_store, get_room_store
from schemas import ToggleRoomRequest, ToggleRoomResponse

router = APIRouter()


@router.get("/", response_model=dict)
def list_assignments(rooms=Depends(get_room_store)):
    return rooms.mapping()


@router.post("/toggle", response_model=ToggleRoomResponse)
def toggle_room(data: ToggleRoomRequest, store=Depends(get_case_store), rooms=Depends(get_room_store)):
    """Assign a case to a room; toggling the same room again unassigns it."""
    store.get(data.case_id)  # 404 for unknown cases
    room = rooms.toggle(data.case_id, data.room)
    return ToggleRoomResponse(case_id=data.case_id, room=room)


@router.delete("/{case_id}")
def unassign_room(case_id: str, rooms=Depends(get_room_store)):
    rooms.unassign(case_id)
    return {"ok": True}


@router.post("/prune")
def prune_rooms(store=Depends(get_case_store), rooms=Depends(get_room_store)):
    """Drop assignments whose case no longer exists."""
    removed = rooms.prune(c.id for c in store.snapshot())
    return {"ok": True, "removed": removed}
