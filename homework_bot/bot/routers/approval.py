from __future__ import annotations
import logging
from typing import Any, Optional
from aiogram import Router, F
from aiogram.types import CallbackQuery
from homework_bot.bot.keyboards.common import approval_kb, to_menu_kb
from homework_bot.bot.ui import require_user, respond
from homework_bot.domain.models import User
from homework_bot.services.approval_service import ApprovalService
from homework_bot.utils.formatting import esc

router = Router(name="admin_approval")
log = logging.getLogger(__name__)

REQUEST_ERRORS = {
    "E_ALREADY_ADMIN": "Вы уже администратор.",
    "E_ALREADY_PENDING": "Запрос уже отправлен, ожидайте решения.",
    "E_NO_RECIPIENTS": "Сейчас некому подтвердить запрос. Обратитесь к учителю.",
    "E_NOT_FOUND": "Сначала зарегистрируйтесь.",
}

IO_ERRORS = {
    "E_NOT_DELIVERED": "⚠️ Не удалось доставить запрос модераторам. Попробуйте ещё раз позже.",
}

DECIDE_ERRORS = {
    "E_FORBIDDEN": "Только для модераторов.",
    "E_NOT_FOUND": "Пользователь не найден (возможно, удалил профиль).",
    "E_NOT_PENDING": "Запрос уже рассмотрен.",
}

@router.callback_query(F.data == "adm:request")
async def admin_request(cb: CallbackQuery, user: Optional[User], approval: ApprovalService, bot: Any):
    if not await require_user(cb, user):
        return
    try:
        await approval.request(bot, user.id, reply_markup=approval_kb(user.id))
    except ValueError as e:
        await cb.answer(REQUEST_ERRORS.get(str(e), "Не удалось отправить запрос."), show_alert=True)
        return
    except IOError as e:
        await cb.answer(IO_ERRORS.get(str(e), "⚠️ Не удалось сохранить запрос, попробуйте позже."), show_alert=True)
        return
    await respond(cb, "⏳ <b>Запрос отправлен</b>\n\nМодераторы получили ваш запрос на права администратора. "
                      "Мы сообщим о решении.", reply_markup=to_menu_kb())

@router.callback_query(F.data.regexp(r"^adm:(approve|reject):\d+$"))
async def admin_decide(cb: CallbackQuery, approval: ApprovalService, bot: Any):
    _, verdict, requester_id = cb.data.split(":")
    approve = verdict == "approve"
    try:
        updated = approval.decide(cb.from_user.id, requester_id, approve)
    except ValueError as e:
        await cb.answer(DECIDE_ERRORS.get(str(e), "Некорректные данные."), show_alert=True)
        return
    except IOError:
        await cb.answer("⚠️ Не удалось сохранить решение.", show_alert=True)
        return
    await approval.notify_requester(bot, updated, approve)
    who = esc(updated.full_name) or esc(updated.id)
    text = (f"✅ Права администратора выданы: {who} ({esc(updated.class_id)})" if approve
            else f"❌ Запрос отклонён: {who} ({esc(updated.class_id)})")
    await respond(cb, text)
