from typing import Callable, Dict, Any, Awaitable
from aiogram import BaseMiddleware
from aiogram.types import TelegramObject
from homework_bot.services.users_service import UsersService


class RoleMiddleware(BaseMiddleware):
    """Loads the caller's user record on every event, so role checks are never stale."""
    def __init__(self, users: UsersService):
        super().__init__()
        self.users = users

    async def __call__(
        self,
        handler: Callable[[TelegramObject, Dict[str, Any]], Awaitable[Any]],
        event: TelegramObject,
        data: Dict[str, Any]
    ) -> Any:
        tg_id = None
        if hasattr(event, "from_user") and event.from_user:
            tg_id = event.from_user.id

        user = self.users.get(tg_id) if tg_id is not None else None
        data["user"] = user
        data["role"] = user.role if user else None
        return await handler(event, data)
