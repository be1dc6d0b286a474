from __future__ import annotations
import logging
from typing import Optional, Union
from aiogram.exceptions import TelegramBadRequest
from aiogram.types import CallbackQuery, Message
from homework_bot.bot.keyboards.common import register_prompt_kb, stale_kb
from homework_bot.domain.models import User

log = logging.getLogger(__name__)

Event = Union[Message, CallbackQuery]

STALE_TEXT = "⌛ <b>Сессия устарела.</b>\nНачните заново."
DENIED_TEXT = "🚫 <b>Доступ запрещён</b>\nЭта функция доступна только администраторам класса."

def is_callback(event: Event) -> bool:
    return hasattr(event, "data") and hasattr(event, "message")

async def respond(event: Event, text: str, reply_markup=None) -> None:
    """Edit the message behind a button, or answer a plain message."""
    if not is_callback(event):
        await event.answer(text, reply_markup=reply_markup)
        return
    await event.answer()
    msg = event.message
    if msg is None:
        return
    if getattr(msg, "text", None):
        try:
            await msg.edit_text(text, reply_markup=reply_markup)
            return
        except TelegramBadRequest as e:
            if "not modified" in str(e):
                return
            log.debug("edit_text failed, sending new message: %s", e)
    await msg.answer(text, reply_markup=reply_markup)

async def alert(event: Event, text: str) -> None:
    if is_callback(event):
        await event.answer(text, show_alert=True)
    else:
        await event.answer(text)

async def require_user(event: Event, user: Optional[User]) -> bool:
    if user is not None:
        return True
    await respond(event, "🚫 <b>Вы не зарегистрированы</b>\nИспользуйте кнопку ниже для регистрации.",
                  reply_markup=register_prompt_kb())
    return False

async def require_admin(event: Event, user: Optional[User]) -> bool:
    if user is not None and user.is_admin:
        return True
    if is_callback(event):
        await event.answer("🚫 Только для администраторов класса", show_alert=True)
    else:
        await event.answer(DENIED_TEXT)
    return False

async def stale(event: Event, entry_callback: str) -> None:
    await respond(event, STALE_TEXT, reply_markup=stale_kb(entry_callback))
