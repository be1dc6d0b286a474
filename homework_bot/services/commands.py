"""
Text command classification.

Quick-access labels are matched by exact equality. Everything else is
stripped, upper-cased and looked up in KEYWORDS by substring containment:
the first command owning a keyword that occurs anywhere in the text wins.
"""
from __future__ import annotations
from typing import Optional

DAY = "day"
NEXT_DAY = "next_day"
WEEK = "week"
NEXT_WEEK = "next_week"
PICK_DATE = "pick_date"
SCHEDULE = "schedule"
PROFILE = "profile"
CONFIGURE = "configure"
MENU = "menu"
START = "start"
REGISTER = "register"
HELP = "help"
EDIT = "edit"
STATS = "stats"

PRIVILEGED = frozenset({EDIT, STATS})

QUICK_LABELS: dict[str, str] = {
    "📆 Сегодня": DAY,
    "📅 Завтра": NEXT_DAY,
    "📆 Неделя": WEEK,
    "⏭️ Другая неделя": NEXT_WEEK,
    "🔍 Выбор дня": PICK_DATE,
    "📥 Всё ДЗ": PICK_DATE,
    "📖 Расписание": SCHEDULE,
    "👤 Профиль": PROFILE,
    "⚙️ Настройка": CONFIGURE,
    "🏠 Меню": MENU,
}

# Order matters: "ДРУГАЯ НЕДЕЛЯ" contains "НЕДЕЛЯ", views are checked before
# the generic commands.
KEYWORDS: list[tuple[str, tuple[str, ...]]] = [
    (DAY, ("/DAY", "СЕГОДНЯ")),
    (NEXT_DAY, ("/NEXT_DAY", "ЗАВТРА")),
    (NEXT_WEEK, ("/NEXT_WEEK", "ДРУГАЯ НЕДЕЛЯ")),
    (WEEK, ("/WEEK", "/WEEKEND", "НЕДЕЛЯ")),
    (EDIT, ("/EDIT", "РЕДАКТИРОВАТЬ", "EDIT")),
    (STATS, ("/STATS", "СТАТИСТИКА")),
    (START, ("/START", "НАЧАТЬ", "СТАРТ", "В НАЧАЛО", "ДОБРО ПОЖАЛОВАТЬ")),
    (REGISTER, ("/REG", "ЗАРЕГИСТРИРОВАТЬСЯ", "РЕГИСТРАЦИЯ", "РЕГ")),
    (MENU, ("/MENU", "МЕНЮ", "ГЛАВНОЕ МЕНЮ", "В МЕНЮ")),
    (HELP, ("/HELP", "ПОМОЩЬ", "СПРАВКА", "КОМАНДЫ")),
    (PROFILE, ("/ME", "/PROFILE", "ПРОФИЛЬ")),
]

def normalize_text(text: Optional[str]) -> str:
    return (text or "").strip().upper()

def quick_command(text: Optional[str]) -> Optional[str]:
    if text is None:
        return None
    return QUICK_LABELS.get(text.strip())

def classify(text: Optional[str]) -> Optional[str]:
    norm = normalize_text(text)
    if not norm:
        return None
    for command, keywords in KEYWORDS:
        if any(k in norm for k in keywords):
            return command
    return None
