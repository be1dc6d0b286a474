from __future__ import annotations
import logging
from typing import Optional
from aiogram import Router, F
from aiogram.types import CallbackQuery
from homework_bot.bot.keyboards.common import schedule_kb, view_nav_kb
from homework_bot.bot.ui import Event, is_callback, require_user, respond
from homework_bot.domain.models import User
from homework_bot.services.homework_service import HomeworkService
from homework_bot.services.homework_views import render_day, render_week, week_dates
from homework_bot.services.users_service import UsersService
from homework_bot.utils.formatting import esc
from homework_bot.utils.time import shift_iso, today

router = Router(name="views")
log = logging.getLogger(__name__)

async def _show_day(event: Event, user: Optional[User], users: UsersService, homework: HomeworkService,
                    offset: int, title: str, empty: str, nav) -> None:
    if not await require_user(event, user):
        return
    date_iso = shift_iso(today(), offset)
    entries = homework.for_date(user.class_id, date_iso)
    users.touch_view(user.id)
    await respond(event, render_day(user.class_id, date_iso, entries, title, empty), reply_markup=nav)

async def _show_week(event: Event, user: Optional[User], users: UsersService, homework: HomeworkService,
                     offset: int, title: str, empty: str, nav) -> None:
    if not await require_user(event, user):
        return
    dates = week_dates(today(), offset)
    hw = homework.for_dates(user.class_id, dates)
    users.touch_view(user.id)
    await respond(event, render_week(user.class_id, dates, hw, title, empty), reply_markup=nav)

async def show_day(event: Event, user: Optional[User], users: UsersService, homework: HomeworkService, **_):
    await _show_day(event, user, users, homework, 0, "📆 ДЗ на сегодня",
                    "🎉 <i>На сегодня заданий нет!</i>", view_nav_kb("view:next_day", "📅 Завтра"))

async def show_next_day(event: Event, user: Optional[User], users: UsersService, homework: HomeworkService, **_):
    await _show_day(event, user, users, homework, 1, "📅 ДЗ на завтра",
                    "🎉 <i>На завтра заданий нет!</i>", view_nav_kb("view:day", "📆 Сегодня"))

async def show_week(event: Event, user: Optional[User], users: UsersService, homework: HomeworkService, **_):
    await _show_week(event, user, users, homework, 0, "📆 ДЗ на неделю",
                     "🎉 <i>На эту неделю заданий нет!</i>", view_nav_kb("view:next_week", "⏭️ Следующая неделя"))

async def show_next_week(event: Event, user: Optional[User], users: UsersService, homework: HomeworkService, **_):
    await _show_week(event, user, users, homework, 7, "⏭️ ДЗ на следующую неделю",
                     "🎉 <i>На следующую неделю заданий нет!</i>", view_nav_kb("view:week", "📆 Эта неделя"))

async def show_schedule(event: Event, user: Optional[User], homework: HomeworkService, **_):
    if not await require_user(event, user):
        return
    photo_id = homework.schedule_image(user.class_id)
    header = f"📖 <b>Расписание уроков</b>\n🏫 Класс: <b>{esc(user.class_id)}</b>"
    if not photo_id:
        await respond(event, header + "\n\n❌ <i>Расписание ещё не загружено.</i>",
                      reply_markup=schedule_kb(user.is_admin, has_photo=False))
        return
    target = event.message if is_callback(event) else event
    if is_callback(event):
        await event.answer()
    await target.answer_photo(photo_id, caption=header, reply_markup=schedule_kb(user.is_admin, has_photo=True))

_CALLBACKS = {
    "view:day": show_day,
    "view:next_day": show_next_day,
    "view:week": show_week,
    "view:next_week": show_next_week,
    "view:schedule": show_schedule,
}

@router.callback_query(F.data.in_(_CALLBACKS))
async def view_callback(cb: CallbackQuery, **data):
    await _CALLBACKS[cb.data](cb, **data)
