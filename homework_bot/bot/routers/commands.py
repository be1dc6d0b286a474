from __future__ import annotations
import logging
from aiogram import Router, F
from aiogram.types import Message
from homework_bot.bot.routers.common import show_help, show_menu, show_profile, show_start, show_stats
from homework_bot.bot.routers.date_picker import pick_entry
from homework_bot.bot.routers.homework_edit import edit_entry
from homework_bot.bot.routers.keyboard import show_keyboard_config
from homework_bot.bot.routers.registration import register_entry
from homework_bot.bot.routers.views import show_day, show_next_day, show_next_week, show_schedule, show_week
from homework_bot.services import commands as cmd

router = Router(name="commands")
log = logging.getLogger(__name__)

# command token -> handler(event, **data); built once at import
ACTIONS = {
    cmd.DAY: show_day,
    cmd.NEXT_DAY: show_next_day,
    cmd.WEEK: show_week,
    cmd.NEXT_WEEK: show_next_week,
    cmd.PICK_DATE: pick_entry,
    cmd.SCHEDULE: show_schedule,
    cmd.PROFILE: show_profile,
    cmd.CONFIGURE: show_keyboard_config,
    cmd.MENU: show_menu,
    cmd.START: show_start,
    cmd.REGISTER: register_entry,
    cmd.HELP: show_help,
    cmd.EDIT: edit_entry,
    cmd.STATS: show_stats,
}

async def dispatch(command: str, message: Message, data: dict) -> None:
    log.debug("Dispatch %s for user=%s", command, message.from_user.id if message.from_user else None)
    await ACTIONS[command](message, **data)

@router.message(F.text | F.caption)
async def keyword_command(message: Message, **data):
    command = cmd.classify(message.text or message.caption)
    if command is None:
        # not every message is a command
        return
    await dispatch(command, message, data)
