from __future__ import annotations
import logging
from typing import Optional
from homework_bot.repositories.homework_repo import DateMap, HomeworkRepo

log = logging.getLogger(__name__)

NO_DESCRIPTION = "📎 Домашнее задание (файл/фото без описания)"

def normalize_subject(name: str) -> str:
    """'  алГЕБРА ' -> 'Алгебра'"""
    s = (name or "").strip()
    if not s:
        raise ValueError("E_EMPTY_SUBJECT")
    return s[:1].upper() + s[1:].lower()

class HomeworkService:
    def __init__(self, repo: HomeworkRepo):
        self.repo = repo

    # ── Reads (degrade to empty on storage failure) ───────────────────────────
    def date_map(self, class_id: str) -> DateMap:
        return self.repo.get_date_map(class_id)

    def for_date(self, class_id: str, date_iso: str) -> dict[str, str]:
        return dict(self.date_map(class_id).get(date_iso) or {})

    def for_dates(self, class_id: str, dates: list[str]) -> DateMap:
        hw = self.date_map(class_id)
        return {d: hw[d] for d in dates if hw.get(d)}

    def from_date(self, class_id: str, start_iso: str) -> list[tuple[str, dict[str, str]]]:
        hw = self.date_map(class_id)
        return [(d, hw[d]) for d in sorted(hw) if d >= start_iso and hw[d]]

    def subjects_on(self, class_id: str, date_iso: str) -> list[str]:
        return sorted(self.for_date(class_id, date_iso))

    def schedule_image(self, class_id: str) -> Optional[str]:
        return self.repo.get_schedule_image(class_id)

    # ── Writes (False means nothing was stored) ───────────────────────────────
    def add_task(self, class_id: str, date_iso: str, subject: str, task: str) -> bool:
        subject = normalize_subject(subject)
        ok = self.repo.upsert_date_map(class_id, {date_iso: {subject: task}})
        if ok:
            log.info("Homework set class=%s date=%s subject=%s", class_id, date_iso, subject)
        return ok

    def delete_task(self, class_id: str, date_iso: str, subject: str) -> Optional[bool]:
        """None means the storage failed, False that the subject was already gone."""
        ok = self.repo.delete_subject(class_id, date_iso, subject)
        if ok:
            log.info("Homework removed class=%s date=%s subject=%s", class_id, date_iso, subject)
        return ok

    def set_schedule(self, class_id: str, photo_id: str) -> bool:
        ok = self.repo.set_schedule_image(class_id, photo_id)
        if ok:
            log.info("Schedule updated class=%s", class_id)
        return ok
