from __future__ import annotations
import asyncio, logging, os
from aiogram import Bot, Dispatcher
from aiogram.client.default import DefaultBotProperties
from aiogram.enums import ParseMode

from homework_bot.config import load_config
from homework_bot.health import start_health_server
from homework_bot.logger import setup_logging

# Repositories / services
from homework_bot.repositories.homework_repo import HomeworkRepo
from homework_bot.repositories.users_repo import UsersRepo
from homework_bot.services.approval_service import ApprovalService
from homework_bot.services.homework_service import HomeworkService
from homework_bot.services.keyboard_service import KeyboardService
from homework_bot.services.session_store import SessionStore, run_sweeper
from homework_bot.services.users_service import UsersService

# Middlewares
from homework_bot.bot.middlewares.session_middleware import SessionMiddleware
from homework_bot.bot.middlewares.role_middleware import RoleMiddleware

# Routers
from homework_bot.bot.routers import router as root_router

async def main() -> None:
    cfg = load_config()
    setup_logging(cfg.log_level, cfg.log_dir)
    log = logging.getLogger("main")
    os.makedirs(cfg.data_dir, exist_ok=True)

    bot = Bot(token=cfg.bot_token, default=DefaultBotProperties(parse_mode=ParseMode.HTML))
    dp = Dispatcher()

    users = UsersService(UsersRepo(cfg.data_dir))
    homework = HomeworkService(HomeworkRepo(cfg.data_dir))
    keyboards = KeyboardService(users)
    approval = ApprovalService(users, cfg.admin_chat_ids)
    sessions = SessionStore(idle_timeout=cfg.session_idle_timeout)
    if not cfg.admin_chat_ids:
        log.warning("ADMIN_CHAT_IDS is empty: admin requests cannot be approved")

    # Outer, so wizard filters see the session: first Session, then Role
    dp.message.outer_middleware(SessionMiddleware(sessions))
    dp.callback_query.outer_middleware(SessionMiddleware(sessions))

    dp.message.outer_middleware(RoleMiddleware(users))
    dp.callback_query.outer_middleware(RoleMiddleware(users))

    # DI
    dp["users"] = users
    dp["homework"] = homework
    dp["keyboards"] = keyboards
    dp["approval"] = approval
    dp["config"] = cfg

    dp.include_router(root_router)

    sweeper = None
    if cfg.session_sweep_interval > 0 and cfg.session_idle_timeout > 0:
        sweeper = asyncio.create_task(run_sweeper(sessions, cfg.session_sweep_interval))
    health = await start_health_server(cfg.port) if cfg.health_enabled else None

    me = await bot.get_me()
    log.info("Starting bot as @%s id=%s", me.username, me.id)
    try:
        await dp.start_polling(bot, polling_timeout=60, allowed_updates=["message", "callback_query"])
    finally:
        if sweeper:
            sweeper.cancel()
        if health:
            await health.cleanup()
        await bot.session.close()
        log.info("Bot stopped")

if __name__ == "__main__":
    try:
        asyncio.run(main())
    except (KeyboardInterrupt, SystemExit):
        pass
