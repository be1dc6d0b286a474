from __future__ import annotations
import logging
import os
from typing import Optional
from homework_bot.domain.models import User
from homework_bot.repositories.csv_repo import CsvTable

log = logging.getLogger(__name__)

USERS_COLUMNS = [
    "id", "username", "first_name", "last_name", "class_id", "role",
    "registered_at", "custom_keyboard", "chat_id", "notifications_enabled",
    "homework_views", "last_active",
]

class UsersRepo:
    """
    users.csv access. Storage errors are logged and turned into safe
    defaults on reads (None / []) and a falsy result on writes.
    """
    def __init__(self, data_dir: str):
        self.table = CsvTable(os.path.join(data_dir, "users.csv"), USERS_COLUMNS)

    def find_by_id(self, user_id) -> Optional[User]:
        try:
            df = self.table.find(id=str(user_id))
        except Exception:
            log.exception("users: read failed for id=%s", user_id)
            return None
        return User.from_row(df.iloc[0].to_dict()) if len(df) else None

    def upsert(self, user: User) -> Optional[User]:
        try:
            self.table.upsert(["id"], user.to_row())
        except Exception:
            log.exception("users: write failed for id=%s", user.id)
            return None
        return user

    def delete_by_id(self, user_id) -> bool:
        try:
            return self.table.delete(id=str(user_id)) > 0
        except Exception:
            log.exception("users: delete failed for id=%s", user_id)
            return False

    def find_by_class(self, class_id: str) -> list[User]:
        try:
            df = self.table.find(class_id=class_id)
        except Exception:
            log.exception("users: read failed for class=%s", class_id)
            return []
        return [User.from_row(r) for r in df.to_dict("records")]
