from __future__ import annotations
from aiogram import Router, F
from aiogram.types import Message
from homework_bot.bot.routers.commands import dispatch
from homework_bot.services.commands import QUICK_LABELS, quick_command

router = Router(name="quick_access")

@router.message(F.text.in_(QUICK_LABELS))
async def quick_access(message: Message, **data):
    await dispatch(quick_command(message.text), message, data)
