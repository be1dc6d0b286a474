"""
Wizard state kept per participant.

A session holds exactly one of the variants below. Variants are frozen:
a step produces a new variant (``dataclasses.replace``) and the handler
assigns it to ``session.state``. Nothing is written back to the store
until the middleware commits, so a failed handler leaves the previous
state intact.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

# Registration steps
REG_ROLE = "role"
REG_LETTER = "letter"
REG_GRADE = "grade"
REG_CONFIRM = "confirm"

# Date parts, shared by the edit wizard and the date picker
STEP_DAY = "day"
STEP_MONTH = "month"
STEP_YEAR = "year"

# Edit wizard steps after the date is fixed
EDIT_ACTION = "action"
EDIT_SUBJECT = "subject"
EDIT_CONTENT = "content"
EDIT_DELETE = "delete"


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class Registering:
    step: str = REG_ROLE
    role: Optional[str] = None
    letter: Optional[str] = None
    grade: Optional[int] = None

    @property
    def class_id(self) -> str:
        return f"{self.letter}{self.grade}" if self.letter and self.grade else ""


@dataclass(frozen=True)
class Editing:
    step: str = STEP_DAY
    day: Optional[int] = None
    month: Optional[int] = None
    year: Optional[int] = None
    subject: Optional[str] = None
    subjects: tuple[str, ...] = ()

    @property
    def date_iso(self) -> str:
        if self.day is None or self.month is None or self.year is None:
            return ""
        return f"{self.year:04d}-{self.month:02d}-{self.day:02d}"


@dataclass(frozen=True)
class PickingDate:
    step: str = STEP_DAY
    day: Optional[int] = None
    month: Optional[int] = None
    year: Optional[int] = None


@dataclass(frozen=True)
class UploadingSchedule:
    class_id: str


WizardState = Union[Idle, Registering, Editing, PickingDate, UploadingSchedule]

IDLE = Idle()


class Session:
    def __init__(self, state: WizardState = IDLE):
        self.state: WizardState = state

    @property
    def is_idle(self) -> bool:
        return isinstance(self.state, Idle)

    def reset(self) -> None:
        self.state = IDLE

    def __repr__(self) -> str:
        return f"Session({self.state!r})"
