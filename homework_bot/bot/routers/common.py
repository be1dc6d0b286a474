from __future__ import annotations
import logging
from typing import Optional
from aiogram import Router, F
from aiogram.types import CallbackQuery, ReplyKeyboardRemove
from homework_bot.bot.keyboards.common import (
    confirm_delete_kb, main_menu_kb, profile_kb, register_prompt_kb, start_kb, to_menu_kb,
)
from homework_bot.bot.ui import Event, require_admin, require_user, respond
from homework_bot.domain.models import User
from homework_bot.domain.roles import Role
from homework_bot.domain.session import Session
from homework_bot.services.session_store import SessionStore
from homework_bot.services.users_service import UsersService
from homework_bot.utils.formatting import esc, format_long_date
from homework_bot.utils.time import parse_iso, today

router = Router(name="common")
log = logging.getLogger(__name__)

ROLE_TEXT = {
    Role.ADMIN: "🎓 Администратор",
    Role.PENDING_ADMIN: "⏳ Ожидает подтверждения",
    Role.USER: "🎒 Ученик",
}

HELP_TEXT = (
    "❓ <b>Помощь и команды</b>\n\n"
    "📚 <b>Основные команды:</b>\n"
    "• /start — Начать работу с ботом\n"
    "• /reg — Зарегистрироваться\n"
    "• /menu — Главное меню\n"
    "• /me — Мой профиль\n"
    "• /help — Эта справка\n\n"
    "📆 <b>Просмотр ДЗ:</b>\n"
    "• /day — ДЗ на сегодня\n"
    "• /next_day — ДЗ на завтра\n"
    "• /week — ДЗ на неделю\n"
    "• /next_week — ДЗ на следующую неделю\n\n"
    "🎓 <b>Для админов:</b>\n"
    "• /edit — Редактировать ДЗ\n"
    "• /stats — Статистика класса\n\n"
    "<i>Используйте кнопки клавиатуры для быстрого доступа!</i>"
)

def _first_name(event: Event) -> str:
    return (event.from_user.first_name if event.from_user else "") or "друг"

async def show_start(event: Event, user: Optional[User], **_):
    name = esc(_first_name(event))
    if user:
        text = (f"👋 <b>С возвращением, {name}!</b>\n\n"
                f"🎓 Ваш класс: <b>{esc(user.class_id)}</b>\n"
                f"📚 Роль: {ROLE_TEXT[user.role]}\n\n"
                "<i>Выберите действие ниже или используйте клавиатуру для быстрого доступа к ДЗ.</i>")
    else:
        text = (f"👋 <b>Добро пожаловать, {name}!</b>\n\n"
                "📚 Я — <b>бот для домашних заданий</b>, который поможет тебе:\n"
                "✅ Смотреть ДЗ на сегодня и завтра\n"
                "✅ Просматривать задания на неделю вперёд\n"
                "✅ Получать расписание уроков\n\n"
                "🚀 <b>Для начала работы зарегистрируйся!</b>")
    await respond(event, text, reply_markup=start_kb(registered=user is not None))

async def show_help(event: Event, **_):
    await respond(event, HELP_TEXT, reply_markup=to_menu_kb())

async def show_menu(event: Event, user: Optional[User], **_):
    if user:
        text = (f"🏠 <b>Главное меню</b>\n\n👋 Привет, <b>{esc(user.first_name) or 'друг'}</b>!\n"
                f"🏫 Класс: <b>{esc(user.class_id)}</b>\n\n<i>Выберите действие:</i>")
    else:
        text = "🏠 <b>Главное меню</b>\n\n<i>Вы не зарегистрированы. Зарегистрируйтесь для доступа ко всем функциям.</i>"
    await respond(event, text, reply_markup=main_menu_kb(user))

async def show_profile(event: Event, user: Optional[User], **_):
    if not await require_user(event, user):
        return
    registered = parse_iso(user.registered_at)
    last_active = parse_iso(user.stats.last_active)
    handle = f"@{esc(user.username)}" if user.username else "не указан"
    text = (f"{'👑' if user.is_admin else '📚'} <b>Ваш профиль</b>\n\n"
            f"👤 <b>Имя:</b> {esc(user.full_name) or 'Не указано'}\n"
            f"💬 <b>Юзернейм:</b> {handle}\n"
            f"🎭 <b>Роль:</b> {ROLE_TEXT[user.role]}\n"
            f"🏫 <b>Класс:</b> {esc(user.class_id)}\n\n"
            "📊 <b>Статистика:</b>\n"
            f"├ 📖 Просмотров ДЗ: {user.stats.homework_views}\n"
            f"└ 🕐 Последняя активность: {last_active.strftime('%d.%m.%Y') if last_active else '—'}\n\n"
            f"📅 <b>Дата регистрации:</b> {format_long_date(registered.date()) if registered else '—'}")
    await respond(event, text, reply_markup=profile_kb(user))

async def show_stats(event: Event, user: Optional[User], users: UsersService, **_):
    if not await require_admin(event, user):
        return
    stats = users.class_stats(user.class_id, today())
    await respond(event,
                  f"📊 <b>Статистика класса {esc(user.class_id)}</b>\n\n"
                  f"👥 Всего пользователей: <b>{stats['total']}</b>\n"
                  f"👑 Админов: <b>{stats['admins']}</b>\n"
                  f"🟢 Активны сегодня: <b>{stats['active_today']}</b>",
                  reply_markup=to_menu_kb())

_CALLBACKS = {
    "start": show_start,
    "help": show_help,
    "menu": show_menu,
    "profile": show_profile,
    "stats": show_stats,
}

@router.callback_query(F.data.in_(_CALLBACKS))
async def common_callback(cb: CallbackQuery, **data):
    await _CALLBACKS[cb.data](cb, **data)

@router.callback_query(F.data == "profile:notify")
async def toggle_notifications(cb: CallbackQuery, user: Optional[User], users: UsersService):
    if not await require_user(cb, user):
        return
    updated = users.toggle_notifications(user.id)
    if updated is None:
        await cb.answer("⚠️ Не удалось сохранить настройку", show_alert=True)
        return
    await show_profile(cb, updated)

@router.callback_query(F.data == "profile:delete")
async def delete_profile_confirm(cb: CallbackQuery, user: Optional[User]):
    if not await require_user(cb, user):
        return
    await respond(cb, "🗑️ <b>Удалить профиль?</b>\n\nВсе ваши настройки будут удалены. "
                      "Зарегистрироваться можно будет заново.", reply_markup=confirm_delete_kb())

@router.callback_query(F.data == "profile:delete:ok")
async def delete_profile(cb: CallbackQuery, user: Optional[User], users: UsersService,
                         session: Session, sessions: SessionStore):
    if user is None:
        await respond(cb, "Профиль уже удалён.", reply_markup=register_prompt_kb())
        return
    if not users.delete(user.id):
        await cb.answer("⚠️ Не удалось удалить профиль", show_alert=True)
        return
    session.reset()
    sessions.evict(cb.from_user.id)
    await respond(cb, "✅ Профиль удалён.", reply_markup=register_prompt_kb())
    if cb.message:
        await cb.message.answer("⌨️ Клавиатура отключена.", reply_markup=ReplyKeyboardRemove())
