from __future__ import annotations
from typing import Optional
from aiogram import Router, F
from aiogram.types import CallbackQuery
from homework_bot.bot.keyboards.common import keyboard_config_kb, reply_keyboard
from homework_bot.bot.ui import Event, is_callback, require_user, respond
from homework_bot.domain.models import User
from homework_bot.services.keyboard_service import CATALOG, KeyboardService

router = Router(name="keyboard")

CONFIG_TEXT = ("⚙️ <b>Настройка клавиатуры</b>\n\n"
               "Выберите кнопки, которые хотите видеть на клавиатуре.\n"
               "Отмеченные ✅ будут отображаться.")

async def show_keyboard_config(event: Event, user: Optional[User], **_):
    if not await require_user(event, user):
        return
    await respond(event, CONFIG_TEXT, reply_markup=keyboard_config_kb(user.custom_keyboard))

@router.callback_query(F.data == "kb:config")
async def kb_config(cb: CallbackQuery, **data):
    await show_keyboard_config(cb, **data)

@router.callback_query(F.data.regexp(r"^kb:t:\d+$"))
async def kb_toggle(cb: CallbackQuery, user: Optional[User], keyboards: KeyboardService):
    if not await require_user(cb, user):
        return
    idx = int(cb.data.split(":")[-1])
    if not 0 <= idx < len(CATALOG):
        await cb.answer("Неизвестная кнопка", show_alert=True)
        return
    updated = keyboards.toggle(user.id, CATALOG[idx])
    if updated is None:
        await cb.answer("⚠️ Не удалось сохранить настройку", show_alert=True)
        return
    await respond(cb, CONFIG_TEXT, reply_markup=keyboard_config_kb(updated.custom_keyboard))

async def _send_layout(event: Event, labels: list[str], text: str) -> None:
    target = event.message if is_callback(event) else event
    if is_callback(event):
        await event.answer()
    # a reply keyboard can only arrive with a new message
    await target.answer(text, reply_markup=reply_keyboard(labels))

@router.callback_query(F.data == "kb:save")
async def kb_save(cb: CallbackQuery, user: Optional[User], keyboards: KeyboardService):
    await _send_layout(cb, keyboards.layout(user), "💾 <b>Клавиатура обновлена!</b>")

@router.callback_query(F.data == "kb:reset")
async def kb_reset(cb: CallbackQuery, user: Optional[User], keyboards: KeyboardService):
    if not await require_user(cb, user):
        return
    updated = keyboards.reset(user.id)
    if updated is None:
        await cb.answer("⚠️ Не удалось сбросить клавиатуру", show_alert=True)
        return
    await _send_layout(cb, keyboards.layout(updated), "♻️ <b>Клавиатура сброшена по умолчанию.</b>")
