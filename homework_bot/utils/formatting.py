from __future__ import annotations
import html
from datetime import date

SUBJECT_ICONS = {
    "Алгебра": "📐",
    "Геометрия": "📏",
    "Математика": "🔢",
    "Русский": "📝",
    "Литература": "📖",
    "Английский": "🇬🇧",
    "История": "🏛️",
    "Обществознание": "👥",
    "География": "🌍",
    "Биология": "🧬",
    "Физика": "⚡",
    "Химия": "🧪",
    "Информатика": "💻",
    "Физкультура": "🏃",
    "ОБЖ": "🛡️",
    "Музыка": "🎵",
    "ИЗО": "🎨",
    "Технология": "🔧",
}

WEEKDAYS = ["Понедельник", "Вторник", "Среда", "Четверг", "Пятница", "Суббота", "Воскресенье"]

MONTHS = ["января", "февраля", "марта", "апреля", "мая", "июня",
          "июля", "августа", "сентября", "октября", "ноября", "декабря"]

def subject_icon(subject: str) -> str:
    low = subject.lower()
    for key, icon in SUBJECT_ICONS.items():
        if key.lower() in low:
            return icon
    return "📘"

def format_date(date_iso: str) -> str:
    """'2025-06-01' -> 'Воскресенье, 01.06'"""
    d = date.fromisoformat(date_iso)
    return f"{WEEKDAYS[d.weekday()]}, {d.day:02d}.{d.month:02d}"

def format_long_date(d: date) -> str:
    return f"{d.day} {MONTHS[d.month - 1]} {d.year}"

def truncate(text: str, max_length: int = 50) -> str:
    if len(text) <= max_length:
        return text
    return text[:max_length - 1] + "..."

def esc(v) -> str:
    return html.escape(str(v or ""))
