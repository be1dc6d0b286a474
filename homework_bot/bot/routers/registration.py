from __future__ import annotations
import logging
from typing import Any, Optional
from aiogram import Router, F
from aiogram.types import CallbackQuery
from homework_bot.bot.keyboards.common import (
    already_registered_kb, approval_kb, reg_confirm_kb, reg_grade_kb, reg_letter_kb, reg_role_kb,
    reply_keyboard, start_kb,
)
from homework_bot.bot.ui import Event, respond, stale
from homework_bot.config import Config
from homework_bot.domain.models import DEFAULT_KEYBOARD, User
from homework_bot.domain.session import REG_CONFIRM, REG_GRADE, REG_LETTER, Registering, Session
from homework_bot.services.approval_service import ApprovalService
from homework_bot.services.users_service import UsersService
from homework_bot.services.wizards import (
    reg_choose_grade, reg_choose_letter, reg_choose_role, reg_confirm, start_registration,
)
from homework_bot.utils.formatting import esc

router = Router(name="registration")
log = logging.getLogger(__name__)

ROLE_TITLES = {"user": "🎒 Ученик", "admin": "🎓 Админ (после подтверждения)"}

def _role_text(user: User) -> str:
    return {"admin": "🎓 Админ", "pending_admin": "⏳ Ожидает подтверждения"}.get(user.role.value, "🎒 Ученик")

def _prompt(state: Registering, config: Config, display_name: str) -> tuple[str, object]:
    if state.step == REG_LETTER:
        return ("📋 <b>Регистрация</b>\n\nШаг 2 из 4: выберите <b>букву класса</b>:",
                reg_letter_kb(config.class_letters))
    if state.step == REG_GRADE:
        return (f"📋 <b>Регистрация</b>\n\nБуква: <b>{esc(state.letter)}</b>\n"
                "Шаг 3 из 4: выберите <b>номер класса</b>:", reg_grade_kb(config.class_grades))
    if state.step == REG_CONFIRM:
        return ("📋 <b>Регистрация</b>\n\nШаг 4 из 4: проверьте данные\n\n"
                f"👤 Имя: <b>{esc(display_name) or '—'}</b>\n"
                f"🎭 Роль: {ROLE_TITLES.get(state.role, state.role)}\n"
                f"🏫 Класс: <b>{esc(state.class_id)}</b>", reg_confirm_kb())
    return ("📋 <b>Регистрация</b>\n\nШаг 1 из 4: кто вы?\n\n"
            "<i>Права администратора выдаются после подтверждения.</i>", reg_role_kb())

def _display_name(event: Event) -> str:
    u = event.from_user
    return " ".join(p for p in (u.first_name, u.last_name) if p) if u else ""

async def register_entry(event: Event, user: Optional[User], session: Session, config: Config, **_):
    if user is not None:
        if isinstance(session.state, Registering):
            session.reset()
        await respond(event, "✅ <b>Вы уже зарегистрированы!</b>\n\n"
                             f"🏫 Ваш класс: <b>{esc(user.class_id)}</b>\n🎭 Роль: {_role_text(user)}",
                      reply_markup=already_registered_kb())
        return
    session.state = start_registration()
    text, kb = _prompt(session.state, config, _display_name(event))
    await respond(event, text, reply_markup=kb)

@router.callback_query(F.data.in_({"reg:start", "reg:restart"}))
async def reg_start_cb(cb: CallbackQuery, **data):
    await register_entry(cb, **data)

@router.callback_query(F.data.regexp(r"^reg:(role|letter|grade):.+$"))
async def reg_step(cb: CallbackQuery, user: Optional[User], session: Session, config: Config):
    if user is not None:
        await register_entry(cb, user=user, session=session, config=config)
        return
    _, step, value = cb.data.split(":", 2)
    try:
        if step == "role":
            state = reg_choose_role(session.state, value)
        elif step == "letter":
            state = reg_choose_letter(session.state, value, config.class_letters)
        else:
            state = reg_choose_grade(session.state, int(value) if value.isdigit() else -1, config.class_grades)
    except ValueError as e:
        if str(e) == "E_STALE_STEP":
            await stale(cb, "reg:start")
        else:
            await cb.answer("Некорректный выбор", show_alert=True)
        return
    session.state = state
    text, kb = _prompt(state, config, _display_name(cb))
    await respond(cb, text, reply_markup=kb)

@router.callback_query(F.data == "reg:ok")
async def reg_ok(cb: CallbackQuery, user: Optional[User], session: Session, config: Config,
                 users: UsersService, approval: ApprovalService, bot: Any):
    if user is not None:
        await register_entry(cb, user=user, session=session, config=config)
        return
    try:
        state = reg_confirm(session.state)
    except ValueError:
        await stale(cb, "reg:start")
        return

    u = cb.from_user
    saved, created = users.register(
        u.id, state.class_id,
        first_name=u.first_name or "", last_name=u.last_name or "", username=u.username or "",
        chat_id=cb.message.chat.id if cb.message else None,
    )
    if saved is None:
        await cb.answer("⚠️ Не удалось сохранить регистрацию, попробуйте ещё раз", show_alert=True)
        return
    session.reset()
    if not created:
        await register_entry(cb, user=saved, session=session, config=config)
        return

    lines = ["🎉 <b>Регистрация завершена!</b>", "", f"🏫 Класс: <b>{esc(saved.class_id)}</b>"]
    if state.role == "admin":
        try:
            await approval.request(bot, saved.id, reply_markup=approval_kb(saved.id))
            lines.append("⏳ Запрос на права администратора отправлен. Мы сообщим о решении.")
        except (ValueError, IOError) as e:
            log.warning("Admin request on registration failed for user=%s: %s", saved.id, e)
            lines.append("⚠️ Не удалось отправить запрос на права администратора. "
                         "Повторите позже: 👤 Профиль → 🎓 Стать админом.")
    await respond(cb, "\n".join(lines), reply_markup=start_kb(registered=True))
    if cb.message:
        await cb.message.answer("⌨️ Клавиатура быстрого доступа включена.", reply_markup=reply_keyboard(list(DEFAULT_KEYBOARD)))

@router.callback_query(F.data == "reg:cancel")
async def reg_cancel(cb: CallbackQuery, user: Optional[User], session: Session):
    if isinstance(session.state, Registering):
        session.reset()
    await respond(cb, "Регистрация отменена.", reply_markup=start_kb(registered=user is not None))
