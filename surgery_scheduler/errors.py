"""Exception taxonomy for the case scheduler."""


class SchedulerError(Exception):
    """Base class for all scheduler errors."""


class StoreError(SchedulerError):
    """A case store write or read failed."""


class CaseNotFoundError(StoreError, KeyError):
    def __init__(self, case_id: str):
        super().__init__(case_id)
        self.case_id = case_id

    def __str__(self) -> str:
        return f"Case not found: {self.case_id}"


class InvalidRoomError(SchedulerError, ValueError):
    def __init__(self, room):
        super().__init__(room)
        self.room = room

    def __str__(self) -> str:
        return f"Room must be 1, 2 or 3 (got {self.room!r})"


class ImportFormatError(SchedulerError):
    """The uploaded workbook could not be read."""
