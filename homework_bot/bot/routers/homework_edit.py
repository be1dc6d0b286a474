from __future__ import annotations
import logging
from typing import Optional
from aiogram import Router, F
from aiogram.types import CallbackQuery, Message
from homework_bot.bot.filters import InWizard
from homework_bot.bot.keyboards.common import (
    day_kb, edit_action_kb, edit_back_kb, edit_delete_kb, edit_help_kb, edit_panel_kb, edit_saved_kb,
    main_menu_kb, month_kb, year_kb,
)
from homework_bot.bot.ui import Event, require_admin, respond, stale
from homework_bot.domain.models import User
from homework_bot.domain.session import (
    EDIT_CONTENT, EDIT_DELETE, EDIT_SUBJECT, STEP_DAY, STEP_MONTH, STEP_YEAR, Editing, Session,
)
from homework_bot.services.homework_service import HomeworkService
from homework_bot.services.wizards import (
    edit_action, edit_back_to_date, edit_content, edit_pick_delete,
    edit_subject, pick_date_part,
)
from homework_bot.utils.formatting import esc, format_date, subject_icon
from homework_bot.utils.time import today

router = Router(name="homework_edit")
log = logging.getLogger(__name__)

PREFIX = "edit"

def edit_years() -> tuple[int, ...]:
    y = today().year
    return (y, y + 1)

def _date_prompt(state: Editing) -> tuple[str, object]:
    if state.step == STEP_DAY:
        return "✏️ <b>Редактирование ДЗ</b>\n\nШаг 1 из 3: выберите <b>день</b>:", day_kb(PREFIX)
    if state.step == STEP_MONTH:
        return (f"✏️ <b>Редактирование ДЗ</b>\n\nДень: <b>{state.day}</b>\n"
                "Шаг 2 из 3: выберите <b>месяц</b>:", month_kb(PREFIX))
    return (f"✏️ <b>Редактирование ДЗ</b>\n\nДата: <b>{state.day:02d}.{state.month:02d}</b>\n"
            "Шаг 3 из 3: выберите <b>год</b>:", year_kb(PREFIX, edit_years()))

def _date_view(user: User, state: Editing, homework: HomeworkService, notice: str = "") -> tuple[str, object]:
    entries = homework.for_date(user.class_id, state.date_iso)
    lines = []
    if notice:
        lines += [notice, ""]
    lines += [f"📅 <b>{format_date(state.date_iso)}.{state.year}</b>", f"🏫 Класс: <b>{esc(user.class_id)}</b>", ""]
    if entries:
        for subject, task in entries.items():
            lines.append(f"{subject_icon(subject)} <b>{esc(subject)}</b>: {esc(task)}")
    else:
        lines.append("<i>На эту дату заданий пока нет.</i>")
    lines += ["", "Что сделать?"]
    return "\n".join(lines), edit_action_kb(bool(entries))

async def _deny(event: Event, session: Session, user: Optional[User]) -> bool:
    """Admin check against the freshly loaded user; a lost role drops the wizard."""
    if user is not None and user.is_admin:
        return False
    if isinstance(session.state, Editing):
        session.reset()
    await require_admin(event, user)
    return True

async def edit_entry(event: Event, user: Optional[User], session: Session, **_):
    if await _deny(event, session, user):
        return
    await respond(event,
                  "✏️ <b>Панель редактирования ДЗ</b>\n\n"
                  "Выберите дату, чтобы изменить домашнее задание вашего класса.\n"
                  "Вы сможете:\n• Добавить новое задание\n• Удалить существующее\n\n"
                  "⚠️ Все изменения применяются мгновенно.",
                  reply_markup=edit_panel_kb())

@router.callback_query(F.data == "edit:start")
async def edit_start_cb(cb: CallbackQuery, **data):
    await edit_entry(cb, **data)

EDIT_HELP_TEXT = (
    "ℹ️ <b>Об этой панели</b>\n\n"
    "1️⃣ Выберите дату: день, месяц и год.\n"
    "2️⃣ Посмотрите задания на эту дату.\n"
    "3️⃣ Добавьте предмет: сначала название, затем задание текстом, фото или файлом.\n"
    "4️⃣ Или удалите предмет из списка.\n\n"
    "Повторная запись того же предмета заменяет задание. "
    "Изменения сразу видят все ученики вашего класса."
)

@router.callback_query(F.data == "edit:help")
async def edit_help(cb: CallbackQuery, user: Optional[User], session: Session):
    if await _deny(cb, session, user):
        return
    await respond(cb, EDIT_HELP_TEXT, reply_markup=edit_help_kb())

@router.callback_query(F.data.in_({"edit:go", "edit:redo"}))
async def edit_go(cb: CallbackQuery, user: Optional[User], session: Session):
    if await _deny(cb, session, user):
        return
    if cb.data == "edit:redo" and not isinstance(session.state, Editing):
        await stale(cb, "edit:start")
        return
    session.state = Editing()
    text, kb = _date_prompt(session.state)
    await respond(cb, text, reply_markup=kb)

@router.callback_query(F.data.regexp(r"^edit:(day|month|year):\d+$"))
async def edit_date_part(cb: CallbackQuery, user: Optional[User], session: Session, homework: HomeworkService):
    if await _deny(cb, session, user):
        return
    _, part, raw = cb.data.split(":")
    try:
        state = pick_date_part(session.state, part, int(raw), edit_years())
    except ValueError as e:
        code = str(e)
        if code == "E_STALE_STEP":
            await stale(cb, "edit:start")
        elif code == "E_INVALID_DATE":
            await respond(cb, f"❌ <b>Дата {session.state.day:02d}.{session.state.month:02d}.{raw} не существует.</b>\n"
                              "Выберите другой год или измените дату.",
                          reply_markup=year_kb(PREFIX, edit_years(), change_date=True))
        else:
            await cb.answer("Некорректный выбор", show_alert=True)
        return
    session.state = state
    if part == STEP_YEAR:
        text, kb = _date_view(user, state, homework)
    else:
        text, kb = _date_prompt(state)
    await respond(cb, text, reply_markup=kb)

@router.callback_query(F.data.startswith("edit:act:"))
async def edit_act(cb: CallbackQuery, user: Optional[User], session: Session, homework: HomeworkService):
    if await _deny(cb, session, user):
        return
    action = cb.data.split(":")[-1]
    subjects = []
    if isinstance(session.state, Editing) and session.state.date_iso:
        subjects = homework.subjects_on(user.class_id, session.state.date_iso)
    try:
        state = edit_action(session.state, action, subjects)
    except ValueError as e:
        code = str(e)
        if code == "E_STALE_STEP":
            await stale(cb, "edit:start")
        elif code == "E_NOTHING_TO_DELETE":
            await cb.answer("На эту дату нечего удалять", show_alert=True)
        else:
            await cb.answer("Некорректный выбор", show_alert=True)
        return
    session.state = state
    if state.step == EDIT_SUBJECT:
        await respond(cb, f"✏️ <b>Дата: {state.day:02d}.{state.month:02d}.{state.year}</b>\n\n"
                          "Отправьте название предмета текстом.\n💡 <i>Например: Алгебра, Физика, История</i>",
                      reply_markup=edit_back_kb())
    elif state.step == EDIT_DELETE:
        await respond(cb, "🗑 <b>Какой предмет удалить?</b>", reply_markup=edit_delete_kb(state.subjects))
    else:
        text, kb = _date_prompt(state)
        await respond(cb, text, reply_markup=kb)

@router.callback_query(F.data == "edit:back")
async def edit_back(cb: CallbackQuery, user: Optional[User], session: Session, homework: HomeworkService):
    if await _deny(cb, session, user):
        return
    try:
        state = edit_back_to_date(session.state)
    except ValueError:
        await stale(cb, "edit:start")
        return
    session.state = state
    text, kb = _date_view(user, state, homework)
    await respond(cb, text, reply_markup=kb)

@router.callback_query(F.data.regexp(r"^edit:del:\d+$"))
async def edit_delete(cb: CallbackQuery, user: Optional[User], session: Session, homework: HomeworkService):
    if await _deny(cb, session, user):
        return
    try:
        subject, state = edit_pick_delete(session.state, int(cb.data.split(":")[-1]))
    except ValueError as e:
        if str(e) == "E_STALE_STEP":
            await stale(cb, "edit:start")
        else:
            await cb.answer("Некорректный выбор", show_alert=True)
        return
    removed = homework.delete_task(user.class_id, state.date_iso, subject)
    if removed is None:
        await cb.answer("⚠️ Ошибка хранилища: предмет не удалён. Попробуйте ещё раз.", show_alert=True)
        return
    if removed:
        notice = f"🗑 Предмет <b>{esc(subject)}</b> удалён."
    else:
        notice = f"ℹ️ Предмет <b>{esc(subject)}</b> уже был удалён."
    session.state = state
    text, kb = _date_view(user, state, homework, notice)
    await respond(cb, text, reply_markup=kb)

@router.callback_query(F.data == "edit:cancel")
async def edit_cancel(cb: CallbackQuery, user: Optional[User], session: Session):
    if isinstance(session.state, Editing):
        session.reset()
    await respond(cb, "🏠 <b>Главное меню</b>", reply_markup=main_menu_kb(user))

# ──────────────────────────────────────────────────────────────────────────────
# Free-input steps
# ──────────────────────────────────────────────────────────────────────────────

@router.message(InWizard(Editing, EDIT_SUBJECT, EDIT_CONTENT))
async def edit_free_input(message: Message, user: Optional[User], session: Session, homework: HomeworkService):
    if user is None or not user.is_admin:
        # role revoked mid-wizard: drop it without prompting
        session.reset()
        return
    state = session.state
    if state.step == EDIT_SUBJECT:
        if not message.text:
            await message.answer("❌ Отправьте название предмета текстом.\n<i>Например: Алгебра, Физика, История</i>",
                                 reply_markup=edit_back_kb())
            return
        try:
            session.state = edit_subject(state, message.text)
        except ValueError:
            await message.answer("❌ Название предмета не может быть пустым.", reply_markup=edit_back_kb())
            return
        subject = session.state.subject
        await message.answer(f"{subject_icon(subject)} <b>Предмет: {esc(subject)}</b>\n\n"
                             "📝 Теперь отправьте домашнее задание:\n"
                             "• Можно текст\n• Можно фото с подписью\n• Можно файл с описанием",
                             reply_markup=edit_back_kb())
        return

    has_media = bool(message.photo or message.document or message.video or message.audio or message.voice)
    try:
        subject, content, next_state = edit_content(state, message.text, message.caption, has_media)
    except ValueError:
        await message.answer("❌ Отправьте задание текстом, фото или файлом.", reply_markup=edit_back_kb())
        return
    if not homework.add_task(user.class_id, state.date_iso, subject, content):
        await message.answer("⚠️ Не удалось сохранить ДЗ. Попробуйте отправить ещё раз.", reply_markup=edit_back_kb())
        return
    session.state = next_state
    await message.answer(f"✅ <b>ДЗ сохранено!</b>\n\n"
                         f"{subject_icon(subject)} <b>{esc(subject)}</b>\n"
                         f"📅 Дата: {state.day:02d}.{state.month:02d}.{state.year}\n"
                         f"🏫 Класс: {esc(user.class_id)}\n\n"
                         f"📋 Задание:\n<i>{esc(content)}</i>",
                         reply_markup=edit_saved_kb())
