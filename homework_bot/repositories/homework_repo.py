from __future__ import annotations
import logging
import os
from typing import Optional
from homework_bot.repositories.csv_repo import CsvTable
from homework_bot.utils.time import now_iso

log = logging.getLogger(__name__)

HOMEWORK_COLUMNS = ["class_id", "date", "subject", "task", "updated_at"]
SCHEDULE_COLUMNS = ["class_id", "photo_id", "updated_at"]

# {"2025-06-01": {"Алгебра": "стр. 10-15"}}
DateMap = dict[str, dict[str, str]]

class HomeworkRepo:
    """
    Homework is stored one row per (class, date, subject): a date with no
    subjects has no rows, and writing one subject never touches another.
    """
    def __init__(self, data_dir: str):
        self.homework = CsvTable(os.path.join(data_dir, "homework.csv"), HOMEWORK_COLUMNS)
        self.schedules = CsvTable(os.path.join(data_dir, "schedules.csv"), SCHEDULE_COLUMNS)

    def get_date_map(self, class_id: str) -> DateMap:
        try:
            df = self.homework.find(class_id=class_id)
        except Exception:
            log.exception("homework: read failed for class=%s", class_id)
            return {}
        result: DateMap = {}
        for r in df.to_dict("records"):
            result.setdefault(r["date"], {})[r["subject"]] = r["task"]
        return result

    def get_schedule_image(self, class_id: str) -> Optional[str]:
        try:
            df = self.schedules.find(class_id=class_id)
        except Exception:
            log.exception("schedules: read failed for class=%s", class_id)
            return None
        if not len(df):
            return None
        return df.iloc[0]["photo_id"] or None

    def get_by_class(self, class_id: str) -> tuple[DateMap, Optional[str]]:
        return self.get_date_map(class_id), self.get_schedule_image(class_id)

    def upsert_date_map(self, class_id: str, date_map: DateMap) -> bool:
        """Merge subjects into the class record; subjects not mentioned are kept."""
        now = now_iso()
        rows = [
            {"class_id": class_id, "date": d, "subject": s, "task": t, "updated_at": now}
            for d, subjects in date_map.items() for s, t in subjects.items()
        ]
        try:
            self.homework.upsert_many(["class_id", "date", "subject"], rows)
        except Exception:
            log.exception("homework: write failed for class=%s", class_id)
            return False
        return True

    def delete_subject(self, class_id: str, date_iso: str, subject: str) -> Optional[bool]:
        """True if removed, False if there was nothing to remove, None on storage failure."""
        try:
            return self.homework.delete(class_id=class_id, date=date_iso, subject=subject) > 0
        except Exception:
            log.exception("homework: delete failed for class=%s date=%s", class_id, date_iso)
            return None

    def set_schedule_image(self, class_id: str, photo_id: str) -> bool:
        try:
            self.schedules.upsert(["class_id"], {"class_id": class_id, "photo_id": photo_id, "updated_at": now_iso()})
        except Exception:
            log.exception("schedules: write failed for class=%s", class_id)
            return False
        return True
