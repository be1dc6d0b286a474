from __future__ import annotations
import logging
from typing import Any, Optional
from homework_bot.domain.models import User
from homework_bot.domain.roles import Role
from homework_bot.services.users_service import UsersService
from homework_bot.utils.formatting import esc

log = logging.getLogger(__name__)

class ApprovalService:
    """
    Moderated admin promotion. Requests fan out to every configured
    recipient; each delivery is independent of the others.
    """
    def __init__(self, users: UsersService, recipients: tuple[int, ...]):
        self.users = users
        self.recipients = tuple(recipients)

    def is_recipient(self, tg_id: int) -> bool:
        return tg_id in self.recipients

    @staticmethod
    def compose_notice(user: User) -> str:
        handle = f"@{esc(user.username)}" if user.username else "не указан"
        name = esc(user.full_name) or "—"
        return (
            "🎓 <b>Запрос на права администратора</b>\n\n"
            f"👤 {name}\n"
            f"💬 {handle}\n"
            f"🆔 <code>{esc(user.id)}</code>\n"
            f"🏫 Класс: <b>{esc(user.class_id)}</b>"
        )

    async def request(self, bot: Any, user_id, reply_markup=None) -> int:
        """
        Move the user to pending_admin and notify the recipients.
        Returns how many recipients were reached; when none were, the role is
        rolled back and IOError("E_NOT_DELIVERED") is raised.
        """
        user = self.users.get(user_id)
        if not user:
            raise ValueError("E_NOT_FOUND")
        if user.role == Role.ADMIN:
            raise ValueError("E_ALREADY_ADMIN")
        if user.role == Role.PENDING_ADMIN:
            raise ValueError("E_ALREADY_PENDING")
        if not self.recipients:
            log.warning("Admin request from user=%s but ADMIN_CHAT_IDS is empty", user.id)
            raise ValueError("E_NO_RECIPIENTS")
        if not self.users.set_role(user.id, Role.PENDING_ADMIN):
            raise IOError("E_STORAGE_IO")

        text = self.compose_notice(user)
        delivered = 0
        for chat_id in self.recipients:
            try:
                await bot.send_message(chat_id, text, reply_markup=reply_markup)
                delivered += 1
            except Exception:
                log.exception("Failed to deliver admin request user=%s to chat=%s", user.id, chat_id)
        log.info("Admin request user=%s delivered to %d/%d", user.id, delivered, len(self.recipients))
        if not delivered:
            # nobody can decide it: leave the user free to ask again
            self.users.set_role(user.id, Role.USER)
            raise IOError("E_NOT_DELIVERED")
        return delivered

    def decide(self, decider_id: int, requester_id, approve: bool) -> User:
        if not self.is_recipient(decider_id):
            raise ValueError("E_FORBIDDEN")
        user = self.users.get(requester_id)
        if not user:
            raise ValueError("E_NOT_FOUND")
        if user.role != Role.PENDING_ADMIN:
            raise ValueError("E_NOT_PENDING")
        updated = self.users.set_role(user.id, Role.ADMIN if approve else Role.USER)
        if not updated:
            raise IOError("E_STORAGE_IO")
        log.info("Admin request user=%s %s by %s", user.id, "approved" if approve else "rejected", decider_id)
        return updated

    async def notify_requester(self, bot: Any, user: User, approved: bool) -> Optional[bool]:
        chat_id = user.chat_id or int(user.id)
        text = ("✅ <b>Вам выданы права администратора!</b>\nОткройте меню, чтобы редактировать ДЗ."
                if approved else "❌ Запрос на права администратора отклонён.")
        try:
            await bot.send_message(chat_id, text)
            return True
        except Exception:
            log.exception("Failed to notify requester user=%s", user.id)
            return False
