"""
Step transitions of the conversation wizards.

Every function takes the current (frozen) wizard state plus the input of
one step and returns the next state. Bad input raises ValueError with an
E_* code and leaves the caller's state untouched:

    E_STALE_STEP     the input belongs to another wizard or step
    E_BAD_CHOICE     a structured choice outside the offered values
    E_INVALID_DATE   day/month/year do not form a calendar date
    E_EMPTY_SUBJECT  blank subject name
    E_EMPTY_CONTENT  message with neither text nor media
    E_NOTHING_TO_DELETE  no subjects at the chosen date
"""
from __future__ import annotations
from dataclasses import replace
from datetime import date
from typing import Iterable, Optional, Union
from homework_bot.domain.session import (
    EDIT_ACTION, EDIT_CONTENT, EDIT_DELETE, EDIT_SUBJECT,
    REG_CONFIRM, REG_GRADE, REG_LETTER, REG_ROLE,
    STEP_DAY, STEP_MONTH, STEP_YEAR,
    Editing, PickingDate, Registering, WizardState,
)
from homework_bot.services.homework_service import NO_DESCRIPTION, normalize_subject

PICK_DONE = "done"

ROLE_CHOICES = ("user", "admin")

ACTION_ADD = "add"
ACTION_DELETE = "del"
ACTION_CHANGE_DATE = "date"

def _expect(state: WizardState, kind, *steps: str):
    if not isinstance(state, kind) or (steps and state.step not in steps):
        raise ValueError("E_STALE_STEP")

def compose_date(day: Optional[int], month: Optional[int], year: Optional[int]) -> date:
    if day is None or month is None or year is None:
        raise ValueError("E_STALE_STEP")
    try:
        return date(year, month, day)
    except ValueError:
        raise ValueError("E_INVALID_DATE")

# ──────────────────────────────────────────────────────────────────────────────
# Registration
# ──────────────────────────────────────────────────────────────────────────────

def start_registration() -> Registering:
    return Registering()

def reg_choose_role(state: WizardState, role: str) -> Registering:
    _expect(state, Registering, REG_ROLE)
    if role not in ROLE_CHOICES:
        raise ValueError("E_BAD_CHOICE")
    return replace(state, step=REG_LETTER, role=role)

def reg_choose_letter(state: WizardState, letter: str, letters: Iterable[str]) -> Registering:
    _expect(state, Registering, REG_LETTER)
    if letter not in tuple(letters):
        raise ValueError("E_BAD_CHOICE")
    return replace(state, step=REG_GRADE, letter=letter)

def reg_choose_grade(state: WizardState, grade: int, grades: Iterable[int]) -> Registering:
    _expect(state, Registering, REG_GRADE)
    if grade not in tuple(grades):
        raise ValueError("E_BAD_CHOICE")
    return replace(state, step=REG_CONFIRM, grade=grade)

def reg_confirm(state: WizardState) -> Registering:
    """Checks the answers are complete; the caller persists and resets."""
    _expect(state, Registering, REG_CONFIRM)
    if not state.role or not state.class_id:
        raise ValueError("E_STALE_STEP")
    return state

# ──────────────────────────────────────────────────────────────────────────────
# Date parts (edit wizard and date picker)
# ──────────────────────────────────────────────────────────────────────────────

DatePickingState = Union[Editing, PickingDate]

def pick_date_part(state: WizardState, part: str, value: int, years: Iterable[int]) -> DatePickingState:
    if not isinstance(state, (Editing, PickingDate)) or state.step != part:
        raise ValueError("E_STALE_STEP")
    if part == STEP_DAY:
        if not 1 <= value <= 31:
            raise ValueError("E_BAD_CHOICE")
        return replace(state, day=value, step=STEP_MONTH)
    if part == STEP_MONTH:
        if not 1 <= value <= 12:
            raise ValueError("E_BAD_CHOICE")
        return replace(state, month=value, step=STEP_YEAR)
    if part == STEP_YEAR:
        if value not in tuple(years):
            raise ValueError("E_BAD_CHOICE")
        compose_date(state.day, state.month, value)
        next_step = EDIT_ACTION if isinstance(state, Editing) else PICK_DONE
        return replace(state, year=value, step=next_step)
    raise ValueError("E_BAD_CHOICE")

def picked_date(state: WizardState) -> date:
    if isinstance(state, PickingDate):
        _expect(state, PickingDate, PICK_DONE)
    else:
        _expect(state, Editing, EDIT_ACTION, EDIT_SUBJECT, EDIT_CONTENT, EDIT_DELETE)
    return compose_date(state.day, state.month, state.year)

# ──────────────────────────────────────────────────────────────────────────────
# Homework edit
# ──────────────────────────────────────────────────────────────────────────────

def edit_action(state: WizardState, action: str, subjects: list[str]) -> Editing:
    _expect(state, Editing, EDIT_ACTION)
    if action == ACTION_ADD:
        return replace(state, step=EDIT_SUBJECT, subject=None)
    if action == ACTION_DELETE:
        if not subjects:
            raise ValueError("E_NOTHING_TO_DELETE")
        return replace(state, step=EDIT_DELETE, subjects=tuple(subjects))
    if action == ACTION_CHANGE_DATE:
        return Editing()
    raise ValueError("E_BAD_CHOICE")

def edit_back_to_date(state: WizardState) -> Editing:
    _expect(state, Editing, EDIT_ACTION, EDIT_SUBJECT, EDIT_CONTENT, EDIT_DELETE)
    return replace(state, step=EDIT_ACTION, subject=None, subjects=())

def edit_subject(state: WizardState, text: Optional[str]) -> Editing:
    _expect(state, Editing, EDIT_SUBJECT)
    return replace(state, step=EDIT_CONTENT, subject=normalize_subject(text or ""))

def edit_content(state: WizardState, text: Optional[str], caption: Optional[str],
                 has_media: bool) -> tuple[str, str, Editing]:
    """Returns (subject, content, next_state); the caller writes it."""
    _expect(state, Editing, EDIT_CONTENT)
    content = (text or "").strip() or (caption or "").strip()
    if not content:
        if not has_media:
            raise ValueError("E_EMPTY_CONTENT")
        content = NO_DESCRIPTION
    return state.subject, content, replace(state, step=EDIT_ACTION, subject=None)

def edit_pick_delete(state: WizardState, index: int) -> tuple[str, Editing]:
    _expect(state, Editing, EDIT_DELETE)
    if not 0 <= index < len(state.subjects):
        raise ValueError("E_BAD_CHOICE")
    return state.subjects[index], replace(state, step=EDIT_ACTION, subjects=())
