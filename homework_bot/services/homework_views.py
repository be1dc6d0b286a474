"""Read-side rendering of homework. Pure functions, HTML markup."""
from __future__ import annotations
from datetime import date
from homework_bot.utils.formatting import esc, format_date, subject_icon, truncate
from homework_bot.utils.time import shift_iso

PREVIEW_LENGTH = 50

def week_dates(today: date, offset: int = 0, days: int = 7) -> list[str]:
    return [shift_iso(today, offset + i) for i in range(days)]

def render_day(class_id: str, date_iso: str, entries: dict[str, str], title: str,
               empty_text: str = "🎉 <i>На этот день заданий нет!</i>") -> str:
    lines = [f"<b>{title} ({format_date(date_iso)})</b>", f"🏫 Класс: <b>{esc(class_id)}</b>", ""]
    if not entries:
        lines.append(empty_text)
        return "\n".join(lines)
    for subject, task in entries.items():
        lines.append(f"{subject_icon(subject)} <b>{esc(subject)}</b>")
        lines.append(f"<i>{esc(task)}</i>")
        lines.append("")
    return "\n".join(lines).rstrip()

def render_week(class_id: str, dates: list[str], homework: dict[str, dict[str, str]], title: str,
                empty_text: str = "🎉 <i>На эту неделю заданий нет!</i>") -> str:
    lines = [f"<b>{title}</b>", f"🏫 Класс: <b>{esc(class_id)}</b>", ""]
    has_any = False
    for d in dates:
        day = homework.get(d)
        if not day:
            continue
        has_any = True
        lines.append(f"📅 <b>{format_date(d)}</b>")
        for subject, task in day.items():
            lines.append(f"  {subject_icon(subject)} {esc(subject)}: <i>{esc(truncate(task, PREVIEW_LENGTH))}</i>")
        lines.append("")
    if not has_any:
        lines.append(empty_text)
    return "\n".join(lines).rstrip()

def render_from(class_id: str, start_iso: str, items: list[tuple[str, dict[str, str]]]) -> str:
    lines = [f"📥 <b>Всё ДЗ начиная с {format_date(start_iso)}</b>", f"🏫 Класс: <b>{esc(class_id)}</b>", ""]
    if not items:
        lines.append("🎉 <i>Начиная с этой даты заданий нет!</i>")
        return "\n".join(lines)
    for d, subjects in items:
        lines.append(f"📅 <b>{format_date(d)}</b>")
        for subject, task in subjects.items():
            lines.append(f"{subject_icon(subject)} <b>{esc(subject)}</b>: {esc(task)}")
        lines.append("")
    return "\n".join(lines).rstrip()
