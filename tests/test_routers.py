import sys, pathlib
import asyncio
from datetime import date
sys.path.append(str(pathlib.Path(__file__).resolve().parents[1]))
from homework_bot.bot.routers import commands, date_picker, views
from homework_bot.bot.routers.approval import admin_decide, admin_request
from homework_bot.bot.routers.common import delete_profile
from homework_bot.bot.routers.homework_edit import EDIT_HELP_TEXT, edit_delete, edit_free_input, edit_help
from homework_bot.bot.routers.keyboard import kb_toggle
from homework_bot.bot.routers.quick import quick_access
from homework_bot.bot.routers.registration import reg_ok, reg_step, register_entry
from homework_bot.bot.routers.schedule import schedule_upload_receive
from homework_bot.bot.ui import DENIED_TEXT, STALE_TEXT
from homework_bot.config import Config
from homework_bot.domain.roles import Role
from homework_bot.domain.session import (
    EDIT_ACTION, EDIT_CONTENT, EDIT_DELETE, EDIT_SUBJECT, REG_CONFIRM, STEP_YEAR,
    Editing, PickingDate, Registering, Session, UploadingSchedule,
)
from homework_bot.repositories.homework_repo import HomeworkRepo
from homework_bot.repositories.users_repo import UsersRepo
from homework_bot.services.approval_service import ApprovalService
from homework_bot.services.homework_service import HomeworkService
from homework_bot.services.keyboard_service import CATALOG, KeyboardService
from homework_bot.services.session_store import SessionStore
from homework_bot.services.users_service import UsersService
from fakes import FakeBot, FakeCallback, FakeMessage, FakePhotoSize


def _config(admins=()) -> Config:
    return Config(
        bot_token="x", admin_chat_ids=tuple(admins), data_dir="./data", log_level="INFO", log_dir="",
        class_letters=tuple("АБВГ"), class_grade_min=5, class_grade_max=11,
        session_idle_timeout=3600, session_sweep_interval=300, port=5000, health_enabled=False,
    )


def _services(tmp_path):
    data_dir = str(tmp_path / "data")
    return UsersService(UsersRepo(data_dir)), HomeworkService(HomeworkRepo(data_dir))


def _make_admin(users: UsersService, user_id: int, class_id: str):
    users.register(user_id, class_id)
    users.set_role(user_id, Role.PENDING_ADMIN)
    return users.set_role(user_id, Role.ADMIN)


class NoReads:
    """Homework service that must not be touched."""
    def for_date(self, *args):
        raise AssertionError("homework read before date validation")


def test_admin_adds_homework_and_only_own_class_sees_it(tmp_path, monkeypatch):
    users, homework = _services(tmp_path)
    admin = _make_admin(users, 1, "Б9")
    users.register(2, "Б9")
    users.register(3, "А9")

    session = Session(Editing(step=EDIT_SUBJECT, day=1, month=6, year=2025))
    asyncio.run(edit_free_input(FakeMessage(1, text="алгебра"), user=admin, session=session, homework=homework))
    assert session.state.step == EDIT_CONTENT and session.state.subject == "Алгебра"
    msg = FakeMessage(1, text="стр. 10-15")
    asyncio.run(edit_free_input(msg, user=admin, session=session, homework=homework))
    assert session.state.step == EDIT_ACTION
    assert "ДЗ сохранено" in msg.answers[0]

    monkeypatch.setattr(views, "today", lambda: date(2025, 6, 1))
    b9 = FakeMessage(2, text="/day")
    asyncio.run(views.show_day(b9, user=users.get(2), users=users, homework=homework))
    assert b9.answers[0].count("Алгебра") == 1
    assert "стр. 10-15" in b9.answers[0]
    assert users.get(2).stats.homework_views == 1

    a9 = FakeMessage(3, text="/day")
    asyncio.run(views.show_day(a9, user=users.get(3), users=users, homework=homework))
    assert "Алгебра" not in a9.answers[0]
    assert "заданий нет" in a9.answers[0]


def test_leftover_edit_session_is_dropped_for_non_admin(tmp_path):
    users, homework = _services(tmp_path)
    users.register(1, "Б9")
    session = Session(Editing(step=EDIT_CONTENT, day=1, month=6, year=2025, subject="Алгебра"))
    msg = FakeMessage(1, text="стр. 10-15")
    asyncio.run(edit_free_input(msg, user=users.get(1), session=session, homework=homework))
    assert session.is_idle
    assert homework.date_map("Б9") == {}
    assert msg.answers == []


def test_privileged_commands_rechecked_live(tmp_path):
    users, homework = _services(tmp_path)
    users.register(1, "Б9")
    session = Session(Editing(step=EDIT_ACTION, day=1, month=6, year=2025))
    data = dict(user=users.get(1), users=users, homework=homework, session=session, config=_config())

    edit = FakeMessage(1, text="/edit")
    asyncio.run(commands.keyword_command(edit, **data))
    assert edit.answers == [DENIED_TEXT]
    assert session.is_idle

    stats = FakeMessage(1, text="/stats")
    asyncio.run(commands.keyword_command(stats, **data))
    assert stats.answers == [DENIED_TEXT]


def test_unrelated_text_gets_no_reply(tmp_path):
    users, homework = _services(tmp_path)
    msg = FakeMessage(1, text="привет всем")
    asyncio.run(commands.keyword_command(msg, user=None, users=users, homework=homework, session=Session()))
    assert msg.answers == []


def test_quick_label_opens_view(tmp_path, monkeypatch):
    users, homework = _services(tmp_path)
    users.register(1, "Б9")
    homework.add_task("Б9", "2025-06-02", "Физика", "§12")
    monkeypatch.setattr(views, "today", lambda: date(2025, 6, 1))
    msg = FakeMessage(1, text="📅 Завтра")
    asyncio.run(quick_access(msg, user=users.get(1), users=users, homework=homework, session=Session()))
    assert "Физика" in msg.answers[0]


def test_unregistered_view_prompts_registration(tmp_path):
    users, homework = _services(tmp_path)
    msg = FakeMessage(1, text="/week")
    asyncio.run(views.show_week(msg, user=None, users=users, homework=homework))
    assert "не зарегистрированы" in msg.answers[0]


def test_date_picker_rejects_invalid_date_before_reading(tmp_path, monkeypatch):
    users, homework = _services(tmp_path)
    users.register(1, "Б9")
    monkeypatch.setattr(date_picker, "today", lambda: date(2023, 5, 1))
    state = PickingDate(step=STEP_YEAR, day=29, month=2)
    session = Session(state)

    cb = FakeCallback("pick:year:2023", user_id=1)
    asyncio.run(date_picker.pick_part(cb, user=users.get(1), session=session, users=users, homework=NoReads()))
    assert session.state == state
    assert "не существует" in cb.message.edits[0]

    homework.add_task("Б9", "2024-02-29", "Химия", "опыт")
    cb = FakeCallback("pick:year:2024", user_id=1)
    asyncio.run(date_picker.pick_part(cb, user=users.get(1), session=session, users=users, homework=homework))
    assert session.is_idle
    assert "Химия" in cb.message.edits[0]


def test_stale_registration_button(tmp_path):
    cb = FakeCallback("reg:letter:Б", user_id=1)
    session = Session()
    asyncio.run(reg_step(cb, user=None, session=session, config=_config()))
    assert cb.message.edits == [STALE_TEXT]
    assert session.is_idle


def test_registration_confirm_as_admin_without_moderators(tmp_path):
    users, _ = _services(tmp_path)
    session = Session(Registering(step=REG_CONFIRM, role="admin", letter="Б", grade=9))
    cb = FakeCallback("reg:ok", user_id=7)
    asyncio.run(reg_ok(cb, user=None, session=session, config=_config(), users=users,
                       approval=ApprovalService(users, ()), bot=FakeBot()))
    saved = users.get(7)
    assert saved.class_id == "Б9" and saved.role == Role.USER
    assert session.is_idle
    assert "Регистрация завершена" in cb.message.edits[0]
    assert "Не удалось отправить запрос" in cb.message.edits[0]
    assert cb.message.answers  # quick-access keyboard

    again = FakeMessage(7, text="/reg")
    asyncio.run(register_entry(again, user=saved, session=Session(), config=_config()))
    assert "уже зарегистрированы" in again.answers[0]


def test_admin_request_and_approval_buttons(tmp_path):
    users, _ = _services(tmp_path)
    users.register(7, "Б9", chat_id=7)
    approval = ApprovalService(users, (10, 20))
    bot = FakeBot(failing=(10,))

    cb = FakeCallback("adm:request", user_id=7)
    asyncio.run(admin_request(cb, user=users.get(7), approval=approval, bot=bot))
    assert users.get_role(7) == Role.PENDING_ADMIN
    assert [chat for chat, _ in bot.sent] == [20]

    outsider = FakeCallback("adm:approve:7", user_id=99)
    asyncio.run(admin_decide(outsider, approval=approval, bot=bot))
    assert outsider.alerts[-1][1] is True
    assert users.get_role(7) == Role.PENDING_ADMIN

    moderator = FakeCallback("adm:approve:7", user_id=20)
    asyncio.run(admin_decide(moderator, approval=approval, bot=bot))
    assert users.is_admin(7)
    assert bot.sent[-1][0] == 7
    assert "выданы" in moderator.message.edits[0]


def test_schedule_upload_needs_photo(tmp_path):
    users, homework = _services(tmp_path)
    admin = _make_admin(users, 1, "Б9")
    session = Session(UploadingSchedule(class_id="Б9"))

    text = FakeMessage(1, text="вот расписание")
    asyncio.run(schedule_upload_receive(text, user=admin, session=session, homework=homework))
    assert isinstance(session.state, UploadingSchedule)
    assert "фото" in text.answers[0]

    photo = FakeMessage(1, photo=[FakePhotoSize("small"), FakePhotoSize("big")])
    asyncio.run(schedule_upload_receive(photo, user=admin, session=session, homework=homework))
    assert session.is_idle
    assert homework.schedule_image("Б9") == "big"

    users.register(2, "Б9")
    student = FakeMessage(2, text="📖 Расписание")
    asyncio.run(views.show_schedule(student, user=users.get(2), homework=homework))
    assert student.photos[0][0] == "big"


def test_keyboard_toggle_button(tmp_path):
    users, _ = _services(tmp_path)
    users.register(1, "Б9")
    keyboards = KeyboardService(users)
    cb = FakeCallback("kb:t:0", user_id=1)
    asyncio.run(kb_toggle(cb, user=users.get(1), keyboards=keyboards))
    assert users.get(1).custom_keyboard == [CATALOG[0]]

    bad = FakeCallback(f"kb:t:{len(CATALOG)}", user_id=1)
    asyncio.run(kb_toggle(bad, user=users.get(1), keyboards=keyboards))
    assert bad.alerts[-1][1] is True


def test_profile_delete_drops_session(tmp_path):
    users, _ = _services(tmp_path)
    users.register(1, "Б9")
    store = SessionStore()
    store.commit(1, Session(PickingDate()))
    session = store.get(1)
    cb = FakeCallback("profile:delete:ok", user_id=1)
    asyncio.run(delete_profile(cb, user=users.get(1), users=users, session=session, sessions=store))
    assert users.get(1) is None
    assert session.is_idle
    assert len(store) == 0
    assert "Профиль удалён" in cb.message.edits[0]


def test_admin_request_nobody_reached(tmp_path):
    users, _ = _services(tmp_path)
    users.register(7, "Б9", chat_id=7)
    approval = ApprovalService(users, (10, 20))

    cb = FakeCallback("adm:request", user_id=7)
    asyncio.run(admin_request(cb, user=users.get(7), approval=approval, bot=FakeBot(failing=(10, 20))))
    assert users.get_role(7) == Role.USER
    assert "доставить" in cb.alerts[-1][0]
    assert cb.message.edits == []

    retry = FakeCallback("adm:request", user_id=7)
    bot = FakeBot()
    asyncio.run(admin_request(retry, user=users.get(7), approval=approval, bot=bot))
    assert users.get_role(7) == Role.PENDING_ADMIN
    assert [chat for chat, _ in bot.sent] == [10, 20]
    assert "Запрос отправлен" in retry.message.edits[0]


def test_registration_as_admin_with_unreachable_moderators(tmp_path):
    users, _ = _services(tmp_path)
    session = Session(Registering(step=REG_CONFIRM, role="admin", letter="А", grade=7))
    cb = FakeCallback("reg:ok", user_id=8)
    asyncio.run(reg_ok(cb, user=None, session=session, config=_config((10,)), users=users,
                       approval=ApprovalService(users, (10,)), bot=FakeBot(failing=(10,))))
    assert users.get_role(8) == Role.USER
    assert "Стать админом" in cb.message.edits[0]


def test_delete_subject_reports_storage_failure(tmp_path):
    users, homework = _services(tmp_path)
    admin = _make_admin(users, 1, "Б9")
    homework.add_task("Б9", "2025-06-01", "Алгебра", "стр. 10-15")
    state = Editing(step=EDIT_DELETE, day=1, month=6, year=2025, subjects=("Алгебра",))
    session = Session(state)

    def broken(**conds):
        raise OSError("read-only file system")

    homework.repo.homework.delete = broken
    cb = FakeCallback("edit:del:0", user_id=1)
    asyncio.run(edit_delete(cb, user=admin, session=session, homework=homework))
    assert "Ошибка хранилища" in cb.alerts[-1][0]
    assert session.state == state
    assert cb.message.edits == []


def test_delete_subject_already_gone(tmp_path):
    users, homework = _services(tmp_path)
    admin = _make_admin(users, 1, "Б9")
    session = Session(Editing(step=EDIT_DELETE, day=1, month=6, year=2025, subjects=("Алгебра",)))
    cb = FakeCallback("edit:del:0", user_id=1)
    asyncio.run(edit_delete(cb, user=admin, session=session, homework=homework))
    assert "уже был удалён" in cb.message.edits[0]
    assert session.state.step == EDIT_ACTION


def test_date_picker_reaches_past_school_years(tmp_path, monkeypatch):
    users, homework = _services(tmp_path)
    users.register(1, "Б9")
    homework.add_task("Б9", "2021-09-01", "История", "введение")
    monkeypatch.setattr(date_picker, "today", lambda: date(2025, 10, 1))
    assert 2021 in date_picker.picker_years() and 2026 in date_picker.picker_years()

    session = Session(PickingDate(step=STEP_YEAR, day=1, month=9))
    cb = FakeCallback("pick:year:2021", user_id=1)
    asyncio.run(date_picker.pick_part(cb, user=users.get(1), session=session, users=users, homework=homework))
    assert "введение" in cb.message.edits[0]


def test_edit_panel_help(tmp_path):
    users, _ = _services(tmp_path)
    admin = _make_admin(users, 1, "Б9")
    cb = FakeCallback("edit:help", user_id=1)
    asyncio.run(edit_help(cb, user=admin, session=Session()))
    assert cb.message.edits == [EDIT_HELP_TEXT]

    users.register(2, "Б9")
    student = FakeCallback("edit:help", user_id=2)
    asyncio.run(edit_help(student, user=users.get(2), session=Session()))
    assert student.message.edits == []
    assert student.alerts[-1][1] is True
