import sys, pathlib
from datetime import date
import pytest
sys.path.append(str(pathlib.Path(__file__).resolve().parents[1]))
from homework_bot.domain.session import (
    EDIT_ACTION, EDIT_CONTENT, EDIT_DELETE, EDIT_SUBJECT, REG_CONFIRM, STEP_DAY, STEP_MONTH, STEP_YEAR,
    IDLE, Editing, PickingDate, Registering,
)
from homework_bot.services import wizards as w
from homework_bot.services.homework_service import NO_DESCRIPTION

LETTERS = tuple("АБВГ")
GRADES = tuple(range(5, 12))
YEARS = (2023, 2024, 2025)


def _code(excinfo) -> str:
    return str(excinfo.value)


def test_registration_happy_path():
    s = w.start_registration()
    s = w.reg_choose_role(s, "admin")
    s = w.reg_choose_letter(s, "Б", LETTERS)
    s = w.reg_choose_grade(s, 9, GRADES)
    assert s.step == REG_CONFIRM
    assert w.reg_confirm(s).class_id == "Б9"
    assert s.role == "admin"


def test_registration_rejects_out_of_order_input():
    with pytest.raises(ValueError) as e:
        w.reg_choose_letter(Registering(), "А", LETTERS)
    assert _code(e) == "E_STALE_STEP"
    with pytest.raises(ValueError) as e:
        w.reg_choose_role(IDLE, "user")
    assert _code(e) == "E_STALE_STEP"
    with pytest.raises(ValueError) as e:
        w.reg_confirm(Editing())
    assert _code(e) == "E_STALE_STEP"


def test_registration_rejects_values_outside_choices():
    s = w.reg_choose_role(Registering(), "user")
    with pytest.raises(ValueError) as e:
        w.reg_choose_letter(s, "Я", LETTERS)
    assert _code(e) == "E_BAD_CHOICE"
    s = w.reg_choose_letter(s, "А", LETTERS)
    with pytest.raises(ValueError) as e:
        w.reg_choose_grade(s, 12, GRADES)
    assert _code(e) == "E_BAD_CHOICE"
    with pytest.raises(ValueError) as e:
        w.reg_choose_role(Registering(), "owner")
    assert _code(e) == "E_BAD_CHOICE"


def test_date_parts_reject_non_existent_date():
    s = w.pick_date_part(PickingDate(), STEP_DAY, 29, YEARS)
    s = w.pick_date_part(s, STEP_MONTH, 2, YEARS)
    assert s.step == STEP_YEAR
    with pytest.raises(ValueError) as e:
        w.pick_date_part(s, STEP_YEAR, 2023, YEARS)
    assert _code(e) == "E_INVALID_DATE"
    # the state is untouched, another year can still be chosen
    done = w.pick_date_part(s, STEP_YEAR, 2024, YEARS)
    assert done.step == w.PICK_DONE
    assert w.picked_date(done) == date(2024, 2, 29)


def test_date_parts_validate_ranges_and_order():
    with pytest.raises(ValueError) as e:
        w.pick_date_part(PickingDate(), STEP_DAY, 32, YEARS)
    assert _code(e) == "E_BAD_CHOICE"
    with pytest.raises(ValueError) as e:
        w.pick_date_part(PickingDate(), STEP_MONTH, 3, YEARS)
    assert _code(e) == "E_STALE_STEP"
    s = PickingDate(step=STEP_YEAR, day=1, month=1)
    with pytest.raises(ValueError) as e:
        w.pick_date_part(s, STEP_YEAR, 1999, YEARS)
    assert _code(e) == "E_BAD_CHOICE"


def test_edit_date_leads_to_action_step():
    s = w.pick_date_part(Editing(), STEP_DAY, 1, YEARS)
    s = w.pick_date_part(s, STEP_MONTH, 6, YEARS)
    s = w.pick_date_part(s, STEP_YEAR, 2025, YEARS)
    assert s.step == EDIT_ACTION
    assert s.date_iso == "2025-06-01"


def _at_action() -> Editing:
    return Editing(step=EDIT_ACTION, day=1, month=6, year=2025)


def test_edit_add_flow():
    s = w.edit_action(_at_action(), w.ACTION_ADD, [])
    assert s.step == EDIT_SUBJECT
    s = w.edit_subject(s, "  алГЕБРА ")
    assert s.step == EDIT_CONTENT and s.subject == "Алгебра"
    subject, content, nxt = w.edit_content(s, "стр. 10-15", None, False)
    assert (subject, content) == ("Алгебра", "стр. 10-15")
    assert nxt.step == EDIT_ACTION and nxt.date_iso == "2025-06-01"


def test_edit_subject_must_not_be_blank():
    s = w.edit_action(_at_action(), w.ACTION_ADD, [])
    with pytest.raises(ValueError) as e:
        w.edit_subject(s, "   ")
    assert _code(e) == "E_EMPTY_SUBJECT"


def test_edit_content_from_caption_or_media():
    s = Editing(step=EDIT_CONTENT, day=1, month=6, year=2025, subject="Физика")
    assert w.edit_content(s, None, " №5 ", True)[1] == "№5"
    assert w.edit_content(s, None, None, True)[1] == NO_DESCRIPTION
    with pytest.raises(ValueError) as e:
        w.edit_content(s, "  ", None, False)
    assert _code(e) == "E_EMPTY_CONTENT"


def test_edit_delete_flow():
    with pytest.raises(ValueError) as e:
        w.edit_action(_at_action(), w.ACTION_DELETE, [])
    assert _code(e) == "E_NOTHING_TO_DELETE"
    s = w.edit_action(_at_action(), w.ACTION_DELETE, ["Алгебра", "Физика"])
    assert s.step == EDIT_DELETE
    with pytest.raises(ValueError) as e:
        w.edit_pick_delete(s, 5)
    assert _code(e) == "E_BAD_CHOICE"
    subject, nxt = w.edit_pick_delete(s, 1)
    assert subject == "Физика"
    assert nxt.step == EDIT_ACTION and nxt.subjects == ()


def test_edit_change_date_and_back():
    assert w.edit_action(_at_action(), w.ACTION_CHANGE_DATE, []) == Editing()
    s = Editing(step=EDIT_SUBJECT, day=1, month=6, year=2025)
    back = w.edit_back_to_date(s)
    assert back.step == EDIT_ACTION and back.date_iso == "2025-06-01"
    with pytest.raises(ValueError) as e:
        w.edit_back_to_date(Editing())
    assert _code(e) == "E_STALE_STEP"
