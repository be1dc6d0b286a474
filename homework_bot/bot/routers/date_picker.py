from __future__ import annotations
from datetime import date
from typing import Optional
from aiogram import Router, F
from aiogram.types import CallbackQuery
from homework_bot.bot.keyboards.common import day_kb, main_menu_kb, month_kb, picked_day_kb, year_kb
from homework_bot.bot.ui import Event, require_user, respond, stale
from homework_bot.domain.models import User
from homework_bot.domain.session import STEP_DAY, STEP_MONTH, STEP_YEAR, PickingDate, Session
from homework_bot.services.homework_service import HomeworkService
from homework_bot.services.homework_views import render_day, render_from
from homework_bot.services.users_service import UsersService
from homework_bot.services.wizards import pick_date_part, picked_date
from homework_bot.utils.time import today

router = Router(name="date_picker")

PREFIX = "pick"

# homework never expires, so past school years stay reachable
YEARS_BACK = 5

def picker_years() -> tuple[int, ...]:
    y = today().year
    return tuple(range(y - YEARS_BACK, y + 2))

def _prompt(state: PickingDate) -> tuple[str, object]:
    if state.step == STEP_DAY:
        return "🔍 <b>Выбор даты</b>\n\nШаг 1 из 3: выберите <b>день</b>:", day_kb(PREFIX)
    if state.step == STEP_MONTH:
        return f"🔍 <b>Выбор даты</b>\n\nДень: <b>{state.day}</b>\nШаг 2 из 3: выберите <b>месяц</b>:", month_kb(PREFIX)
    return (f"🔍 <b>Выбор даты</b>\n\nДата: <b>{state.day:02d}.{state.month:02d}</b>\n"
            "Шаг 3 из 3: выберите <b>год</b>:", year_kb(PREFIX, picker_years()))

async def pick_entry(event: Event, user: Optional[User], session: Session, **_):
    if not await require_user(event, user):
        return
    session.state = PickingDate()
    text, kb = _prompt(session.state)
    await respond(event, text, reply_markup=kb)

@router.callback_query(F.data == "pick:start")
async def pick_start_cb(cb: CallbackQuery, **data):
    await pick_entry(cb, **data)

@router.callback_query(F.data.regexp(r"^pick:(day|month|year):\d+$"))
async def pick_part(cb: CallbackQuery, user: Optional[User], session: Session,
                    users: UsersService, homework: HomeworkService):
    if not await require_user(cb, user):
        session.reset()
        return
    _, part, raw = cb.data.split(":")
    try:
        state = pick_date_part(session.state, part, int(raw), picker_years())
    except ValueError as e:
        code = str(e)
        if code == "E_STALE_STEP":
            await stale(cb, "pick:start")
        elif code == "E_INVALID_DATE":
            await respond(cb, f"❌ <b>Дата {session.state.day:02d}.{session.state.month:02d}.{raw} не существует.</b>\n"
                              "Выберите другой год или начните заново.",
                          reply_markup=year_kb(PREFIX, picker_years(), change_date=True))
        else:
            await cb.answer("Некорректный выбор", show_alert=True)
        return

    if part != STEP_YEAR:
        session.state = state
        text, kb = _prompt(state)
        await respond(cb, text, reply_markup=kb)
        return

    chosen = picked_date(state)
    session.reset()
    date_iso = chosen.isoformat()
    entries = homework.for_date(user.class_id, date_iso)
    users.touch_view(user.id)
    await respond(cb, render_day(user.class_id, date_iso, entries, "🔍 ДЗ"), reply_markup=picked_day_kb(date_iso))

@router.callback_query(F.data == "pick:redo")
async def pick_redo(cb: CallbackQuery, user: Optional[User], session: Session):
    if not isinstance(session.state, PickingDate):
        await stale(cb, "pick:start")
        return
    await pick_entry(cb, user=user, session=session)

@router.callback_query(F.data.startswith("pick:from:"))
async def pick_from(cb: CallbackQuery, user: Optional[User], users: UsersService, homework: HomeworkService):
    if not await require_user(cb, user):
        return
    raw = cb.data.split(":", 2)[2]
    try:
        start = date.fromisoformat(raw)
    except ValueError:
        await cb.answer("Некорректная дата", show_alert=True)
        return
    items = homework.from_date(user.class_id, start.isoformat())
    users.touch_view(user.id)
    await respond(cb, render_from(user.class_id, start.isoformat(), items), reply_markup=picked_day_kb(start.isoformat()))

@router.callback_query(F.data == "pick:cancel")
async def pick_cancel(cb: CallbackQuery, user: Optional[User], session: Session):
    if isinstance(session.state, PickingDate):
        session.reset()
    await respond(cb, "🏠 <b>Главное меню</b>", reply_markup=main_menu_kb(user))
