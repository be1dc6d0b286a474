from __future__ import annotations
import logging
from typing import Any, Awaitable, Callable, Dict
from aiogram import BaseMiddleware
from aiogram.types import TelegramObject
from homework_bot.services.session_store import SessionStore

log = logging.getLogger(__name__)

class SessionMiddleware(BaseMiddleware):
    """
    Attaches ``session`` to handler data and commits it afterwards.

    Registered as an outer middleware so wizard filters can see the
    session. One participant's events are processed one at a time. When
    the handler raises, the commit is skipped and the previous state stays.
    """
    def __init__(self, store: SessionStore):
        super().__init__()
        self.store = store

    async def __call__(
        self,
        handler: Callable[[TelegramObject, Dict[str, Any]], Awaitable[Any]],
        event: TelegramObject,
        data: Dict[str, Any]
    ) -> Any:
        from_user = getattr(event, "from_user", None)
        participant_id = getattr(from_user, "id", None)
        if participant_id is None:
            return await handler(event, data)

        async with self.store.hold(participant_id):
            session = self.store.get(participant_id)
            data["session"] = session
            data["sessions"] = self.store
            try:
                result = await handler(event, data)
            except Exception:
                log.warning("Handler failed, session not committed: participant=%s state=%r",
                            participant_id, session.state)
                raise
            self.store.commit(participant_id, session)
            return result
