from __future__ import annotations
from typing import Optional
from aiogram import Router, F
from aiogram.types import CallbackQuery, Message
from homework_bot.bot.filters import InWizard
from homework_bot.bot.keyboards.common import main_menu_kb, schedule_saved_kb, schedule_upload_kb
from homework_bot.bot.ui import require_admin, respond
from homework_bot.domain.models import User
from homework_bot.domain.session import Session, UploadingSchedule
from homework_bot.services.homework_service import HomeworkService

router = Router(name="schedule_upload")

@router.callback_query(F.data == "sched:upload")
async def schedule_upload_start(cb: CallbackQuery, user: Optional[User], session: Session):
    if not await require_admin(cb, user):
        return
    session.state = UploadingSchedule(class_id=user.class_id)
    await respond(cb, "📤 <b>Загрузка расписания</b>\n\n📷 Отправьте фото расписания.\n"
                      "💡 <i>Совет: сожмите изображение для быстрой загрузки.</i>",
                  reply_markup=schedule_upload_kb())

@router.callback_query(F.data == "sched:cancel")
async def schedule_upload_cancel(cb: CallbackQuery, user: Optional[User], session: Session):
    if isinstance(session.state, UploadingSchedule):
        session.reset()
    await respond(cb, "🏠 <b>Главное меню</b>", reply_markup=main_menu_kb(user))

@router.message(InWizard(UploadingSchedule))
async def schedule_upload_receive(message: Message, user: Optional[User], session: Session, homework: HomeworkService):
    if user is None or not user.is_admin:
        session.reset()
        return
    if not message.photo:
        await message.answer("❌ Отправьте именно фото (не файл и не текст).\n"
                             "<i>Совет: сожмите изображение перед отправкой для быстрой загрузки</i>",
                             reply_markup=schedule_upload_kb())
        return
    photo_id = message.photo[-1].file_id
    if not homework.set_schedule(session.state.class_id, photo_id):
        await message.answer("⚠️ Не удалось сохранить расписание. Попробуйте ещё раз.", reply_markup=schedule_upload_kb())
        return
    session.reset()
    await message.answer("✅ <b>Расписание успешно обновлено!</b>\n\n"
                         "📅 Теперь ученики вашего класса смогут его просматривать.",
                         reply_markup=schedule_saved_kb())
