from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Optional

from homework_bot.domain.roles import Role

DEFAULT_KEYBOARD = ["📆 Сегодня", "📅 Завтра", "⚙️ Настройка", "🏠 Меню"]

@dataclass
class UserStats:
    homework_views: int = 0
    last_active: str = ""

@dataclass
class User:
    id: str
    class_id: str
    role: Role = Role.USER
    first_name: str = ""
    last_name: str = ""
    username: str = ""
    registered_at: str = ""
    notifications_enabled: bool = True
    custom_keyboard: list[str] = field(default_factory=list)
    chat_id: Optional[int] = None
    stats: UserStats = field(default_factory=UserStats)

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    @property
    def full_name(self) -> str:
        return " ".join(p for p in (self.first_name, self.last_name) if p).strip()

    @property
    def keyboard(self) -> list[str]:
        """Quick-access layout actually shown to the user."""
        return list(self.custom_keyboard) or list(DEFAULT_KEYBOARD)

    def to_row(self) -> dict:
        return {
            "id": self.id,
            "username": self.username,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "class_id": self.class_id,
            "role": self.role.value,
            "registered_at": self.registered_at,
            "custom_keyboard": json.dumps(self.custom_keyboard, ensure_ascii=False),
            "chat_id": "" if self.chat_id is None else str(self.chat_id),
            "notifications_enabled": "1" if self.notifications_enabled else "0",
            "homework_views": str(self.stats.homework_views),
            "last_active": self.stats.last_active,
        }

    @classmethod
    def from_row(cls, row: dict) -> "User":
        try:
            keyboard = json.loads(row.get("custom_keyboard") or "[]")
        except ValueError:
            keyboard = []
        chat_id = str(row.get("chat_id") or "").strip()
        views = str(row.get("homework_views") or "0").strip()
        return cls(
            id=str(row["id"]),
            class_id=str(row.get("class_id") or ""),
            role=Role.parse(row.get("role")),
            first_name=str(row.get("first_name") or ""),
            last_name=str(row.get("last_name") or ""),
            username=str(row.get("username") or ""),
            registered_at=str(row.get("registered_at") or ""),
            notifications_enabled=str(row.get("notifications_enabled", "1")) != "0",
            custom_keyboard=[str(x) for x in keyboard if isinstance(x, str)],
            chat_id=int(chat_id) if chat_id.lstrip("-").isdigit() else None,
            stats=UserStats(
                homework_views=int(views) if views.isdigit() else 0,
                last_active=str(row.get("last_active") or ""),
            ),
        )
