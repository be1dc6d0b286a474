from __future__ import annotations
from typing import Optional
from homework_bot.domain.models import DEFAULT_KEYBOARD, User
from homework_bot.services.commands import QUICK_LABELS
from homework_bot.services.users_service import UsersService

CATALOG: list[str] = list(QUICK_LABELS)

def toggled(current: list[str], label: str) -> list[str]:
    """Present -> removed, absent -> appended. Order of the rest is kept."""
    if label in current:
        return [x for x in current if x != label]
    return list(current) + [label]

class KeyboardService:
    def __init__(self, users: UsersService):
        self.users = users

    def toggle(self, user_id, label: str) -> Optional[User]:
        if label not in CATALOG:
            raise ValueError("E_UNKNOWN_BUTTON")
        user = self.users.get(user_id)
        if not user:
            return None
        return self.users.set_keyboard(user_id, toggled(user.custom_keyboard, label))

    def reset(self, user_id) -> Optional[User]:
        return self.users.set_keyboard(user_id, list(DEFAULT_KEYBOARD))

    def layout(self, user: Optional[User]) -> list[str]:
        if user is None:
            return list(DEFAULT_KEYBOARD)
        return [x for x in user.keyboard if x in CATALOG] or list(DEFAULT_KEYBOARD)
