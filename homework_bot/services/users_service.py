from __future__ import annotations
import logging
from datetime import date
from typing import Optional
from homework_bot.domain.models import User, UserStats
from homework_bot.domain.roles import Role, can_transition
from homework_bot.repositories.users_repo import UsersRepo
from homework_bot.utils.time import now_iso, parse_iso

log = logging.getLogger(__name__)

class UsersService:
    def __init__(self, repo: UsersRepo):
        self.repo = repo

    # ── Queries ────────────────────────────────────────────────────────────────
    def get(self, user_id) -> Optional[User]:
        return self.repo.find_by_id(str(user_id))

    def get_role(self, user_id) -> Optional[Role]:
        user = self.get(user_id)
        return user.role if user else None

    def is_admin(self, user_id) -> bool:
        return self.get_role(user_id) == Role.ADMIN

    def class_stats(self, class_id: str, today: date) -> dict:
        users = self.repo.find_by_class(class_id)
        active_today = 0
        for u in users:
            last = parse_iso(u.stats.last_active)
            if last is not None and last.astimezone().date() == today:
                active_today += 1
        return {
            "total": len(users),
            "admins": sum(1 for u in users if u.role == Role.ADMIN),
            "active_today": active_today,
        }

    # ── Mutations ─────────────────────────────────────────────────────────────
    def register(self, user_id, class_id: str, first_name: str = "", last_name: str = "",
                 username: str = "", chat_id: int | None = None) -> tuple[Optional[User], bool]:
        """
        Create the user record. Returns (user, created); an existing record
        is returned untouched with created=False, a failed write as (None, False).
        """
        existing = self.get(user_id)
        if existing:
            return existing, False
        now = now_iso()
        user = User(
            id=str(user_id),
            class_id=class_id,
            role=Role.USER,
            first_name=first_name or "",
            last_name=last_name or "",
            username=username or "",
            registered_at=now,
            notifications_enabled=True,
            custom_keyboard=[],
            chat_id=chat_id,
            stats=UserStats(homework_views=0, last_active=now),
        )
        saved = self.repo.upsert(user)
        if saved:
            log.info("Registered user=%s class=%s", user.id, class_id)
        return saved, saved is not None

    def set_role(self, user_id, target: Role) -> Optional[User]:
        user = self.get(user_id)
        if not user:
            return None
        if user.role == target:
            return user
        if not can_transition(user.role, target):
            raise ValueError("E_ROLE_TRANSITION")
        user.role = target
        saved = self.repo.upsert(user)
        if saved:
            log.info("Role change user=%s -> %s", user.id, target.value)
        return saved

    def set_keyboard(self, user_id, labels: list[str]) -> Optional[User]:
        user = self.get(user_id)
        if not user:
            return None
        user.custom_keyboard = list(labels)
        return self.repo.upsert(user)

    def toggle_notifications(self, user_id) -> Optional[User]:
        user = self.get(user_id)
        if not user:
            return None
        user.notifications_enabled = not user.notifications_enabled
        return self.repo.upsert(user)

    def touch_view(self, user_id) -> None:
        """Count a homework view. Failures are logged, never raised."""
        try:
            user = self.get(user_id)
            if not user:
                return
            user.stats.homework_views += 1
            user.stats.last_active = now_iso()
            self.repo.upsert(user)
        except Exception:
            log.exception("Failed to update view stats for user=%s", user_id)

    def delete(self, user_id) -> bool:
        ok = self.repo.delete_by_id(str(user_id))
        if ok:
            log.info("Deleted user=%s", user_id)
        return ok
