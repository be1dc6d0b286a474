from __future__ import annotations
from aiogram.types import InlineKeyboardButton, InlineKeyboardMarkup, ReplyKeyboardMarkup
from aiogram.utils.keyboard import InlineKeyboardBuilder, ReplyKeyboardBuilder
from homework_bot.domain.models import User
from homework_bot.services.keyboard_service import CATALOG

MONTH_NAMES = ["Янв", "Фев", "Мар", "Апр", "Май", "Июн", "Июл", "Авг", "Сен", "Окт", "Ноя", "Дек"]

def _menu_row(kb: InlineKeyboardBuilder) -> None:
    kb.button(text="🏠 В меню", callback_data="menu")

def to_menu_kb() -> InlineKeyboardMarkup:
    kb = InlineKeyboardBuilder()
    _menu_row(kb)
    return kb.as_markup()

def register_prompt_kb() -> InlineKeyboardMarkup:
    kb = InlineKeyboardBuilder()
    kb.button(text="📝 Зарегистрироваться", callback_data="reg:start")
    return kb.as_markup()

def start_kb(registered: bool) -> InlineKeyboardMarkup:
    kb = InlineKeyboardBuilder()
    if registered:
        kb.button(text="📆 Сегодня", callback_data="view:day")
        kb.button(text="📅 Завтра", callback_data="view:next_day")
        kb.button(text="🏠 Главное меню", callback_data="menu")
        kb.button(text="👤 Мой профиль", callback_data="profile")
        kb.adjust(2, 1, 1)
    else:
        kb.button(text="📝 Зарегистрироваться", callback_data="reg:start")
        kb.button(text="❓ Как это работает?", callback_data="help")
        kb.adjust(1)
    return kb.as_markup()

def main_menu_kb(user: User | None) -> InlineKeyboardMarkup:
    kb = InlineKeyboardBuilder()
    kb.button(text="📆 Сегодня", callback_data="view:day")
    kb.button(text="📅 Завтра", callback_data="view:next_day")
    kb.button(text="📆 Неделя", callback_data="view:week")
    kb.button(text="⏭️ Другая неделя", callback_data="view:next_week")
    kb.button(text="📖 Расписание уроков", callback_data="view:schedule")
    kb.button(text="🔍 Выбор дня", callback_data="pick:start")
    sizes = [2, 2, 1, 1]
    if user and user.is_admin:
        kb.button(text="📤 Загрузить расписание", callback_data="sched:upload")
        kb.button(text="✏️ Редактировать ДЗ", callback_data="edit:start")
        kb.button(text="📊 Статистика", callback_data="stats")
        sizes += [2, 1]
    kb.button(text="👤 Профиль", callback_data="profile")
    kb.button(text="⚙️ Настройка", callback_data="kb:config")
    kb.button(text="⌨️ Открыть клавиатуру", callback_data="kb:save")
    sizes += [2, 1]
    if not user:
        kb.button(text="📝 Зарегистрироваться", callback_data="reg:start")
        sizes.append(1)
    kb.adjust(*sizes)
    return kb.as_markup()

def view_nav_kb(callback_data: str, text: str) -> InlineKeyboardMarkup:
    kb = InlineKeyboardBuilder()
    kb.button(text=text, callback_data=callback_data)
    _menu_row(kb)
    kb.adjust(1)
    return kb.as_markup()

def stale_kb(entry_callback: str) -> InlineKeyboardMarkup:
    kb = InlineKeyboardBuilder()
    kb.button(text="🔄 Начать заново", callback_data=entry_callback)
    _menu_row(kb)
    kb.adjust(1)
    return kb.as_markup()

# ── Registration ─────────────────────────────────────────────────────────────

def reg_role_kb() -> InlineKeyboardMarkup:
    kb = InlineKeyboardBuilder()
    kb.button(text="🎒 Ученик", callback_data="reg:role:user")
    kb.button(text="🎓 Админ класса", callback_data="reg:role:admin")
    kb.button(text="❌ Отмена", callback_data="reg:cancel")
    kb.adjust(2, 1)
    return kb.as_markup()

def reg_letter_kb(letters) -> InlineKeyboardMarkup:
    kb = InlineKeyboardBuilder()
    for letter in letters:
        kb.button(text=letter, callback_data=f"reg:letter:{letter}")
    kb.adjust(4)
    kb.row(InlineKeyboardButton(text="❌ Отмена", callback_data="reg:cancel"))
    return kb.as_markup()

def reg_grade_kb(grades) -> InlineKeyboardMarkup:
    kb = InlineKeyboardBuilder()
    for g in grades:
        kb.button(text=str(g), callback_data=f"reg:grade:{g}")
    kb.adjust(4)
    kb.row(InlineKeyboardButton(text="❌ Отмена", callback_data="reg:cancel"))
    return kb.as_markup()

def reg_confirm_kb() -> InlineKeyboardMarkup:
    kb = InlineKeyboardBuilder()
    kb.button(text="✅ Подтвердить", callback_data="reg:ok")
    kb.button(text="🔄 Заново", callback_data="reg:restart")
    kb.button(text="❌ Отмена", callback_data="reg:cancel")
    kb.adjust(1)
    return kb.as_markup()

def already_registered_kb() -> InlineKeyboardMarkup:
    kb = InlineKeyboardBuilder()
    kb.button(text="🏠 В главное меню", callback_data="menu")
    kb.button(text="👤 Мой профиль", callback_data="profile")
    kb.button(text="🔄 Перерегистрироваться", callback_data="profile:delete")
    kb.adjust(1)
    return kb.as_markup()

# ── Date parts ───────────────────────────────────────────────────────────────

def day_kb(prefix: str) -> InlineKeyboardMarkup:
    kb = InlineKeyboardBuilder()
    for d in range(1, 32):
        kb.button(text=str(d), callback_data=f"{prefix}:day:{d}")
    kb.adjust(7)
    kb.row(InlineKeyboardButton(text="❌ Отмена", callback_data=f"{prefix}:cancel"))
    return kb.as_markup()

def month_kb(prefix: str) -> InlineKeyboardMarkup:
    kb = InlineKeyboardBuilder()
    for i, name in enumerate(MONTH_NAMES, start=1):
        kb.button(text=name, callback_data=f"{prefix}:month:{i}")
    kb.adjust(4)
    kb.row(InlineKeyboardButton(text="❌ Отмена", callback_data=f"{prefix}:cancel"))
    return kb.as_markup()

def year_kb(prefix: str, years, change_date: bool = False) -> InlineKeyboardMarkup:
    kb = InlineKeyboardBuilder()
    years = tuple(years)
    for y in years:
        kb.button(text=str(y), callback_data=f"{prefix}:year:{y}")
    kb.adjust(min(len(years), 4) or 1)
    if change_date:
        kb.row(InlineKeyboardButton(text="📅 Изменить дату", callback_data=f"{prefix}:redo"))
    kb.row(InlineKeyboardButton(text="❌ Отмена", callback_data=f"{prefix}:cancel"))
    return kb.as_markup()

# ── Homework edit ────────────────────────────────────────────────────────────

def edit_panel_kb() -> InlineKeyboardMarkup:
    kb = InlineKeyboardBuilder()
    kb.button(text="▶️ Продолжить", callback_data="edit:go")
    kb.button(text="ℹ️ Об этой панели", callback_data="edit:help")
    _menu_row(kb)
    kb.adjust(1, 2)
    return kb.as_markup()

def edit_action_kb(has_subjects: bool) -> InlineKeyboardMarkup:
    kb = InlineKeyboardBuilder()
    kb.button(text="➕ Добавить предмет", callback_data="edit:act:add")
    if has_subjects:
        kb.button(text="➖ Удалить предмет", callback_data="edit:act:del")
    kb.button(text="📅 Изменить дату", callback_data="edit:act:date")
    _menu_row(kb)
    kb.adjust(1)
    return kb.as_markup()

def edit_help_kb() -> InlineKeyboardMarkup:
    kb = InlineKeyboardBuilder()
    kb.button(text="▶️ Продолжить", callback_data="edit:go")
    kb.button(text="↩️ Назад", callback_data="edit:start")
    kb.adjust(2)
    return kb.as_markup()

def edit_back_kb() -> InlineKeyboardMarkup:
    kb = InlineKeyboardBuilder()
    kb.button(text="↩️ Отмена", callback_data="edit:back")
    return kb.as_markup()

def edit_delete_kb(subjects) -> InlineKeyboardMarkup:
    kb = InlineKeyboardBuilder()
    for i, s in enumerate(subjects):
        kb.button(text=f"🗑 {s}", callback_data=f"edit:del:{i}")
    kb.button(text="↩️ Назад", callback_data="edit:back")
    kb.adjust(1)
    return kb.as_markup()

def edit_saved_kb() -> InlineKeyboardMarkup:
    kb = InlineKeyboardBuilder()
    kb.button(text="➕ Добавить ещё предмет", callback_data="edit:act:add")
    kb.button(text="📋 ДЗ на эту дату", callback_data="edit:back")
    _menu_row(kb)
    kb.adjust(1)
    return kb.as_markup()

# ── Date picker ──────────────────────────────────────────────────────────────

def picked_day_kb(date_iso: str) -> InlineKeyboardMarkup:
    kb = InlineKeyboardBuilder()
    kb.button(text="📥 Всё ДЗ с этой даты", callback_data=f"pick:from:{date_iso}")
    kb.button(text="🔍 Другая дата", callback_data="pick:start")
    _menu_row(kb)
    kb.adjust(1)
    return kb.as_markup()

# ── Schedule ─────────────────────────────────────────────────────────────────

def schedule_kb(is_admin: bool, has_photo: bool) -> InlineKeyboardMarkup:
    kb = InlineKeyboardBuilder()
    if is_admin:
        kb.button(text="📤 Обновить расписание" if has_photo else "📤 Загрузить расписание",
                  callback_data="sched:upload")
    _menu_row(kb)
    kb.adjust(1)
    return kb.as_markup()

def schedule_upload_kb() -> InlineKeyboardMarkup:
    kb = InlineKeyboardBuilder()
    kb.button(text="❌ Отмена", callback_data="sched:cancel")
    return kb.as_markup()

def schedule_saved_kb() -> InlineKeyboardMarkup:
    kb = InlineKeyboardBuilder()
    kb.button(text="👁️ Посмотреть расписание", callback_data="view:schedule")
    _menu_row(kb)
    kb.adjust(1)
    return kb.as_markup()

# ── Quick-access keyboard ────────────────────────────────────────────────────

def keyboard_config_kb(current: list[str]) -> InlineKeyboardMarkup:
    kb = InlineKeyboardBuilder()
    for i, label in enumerate(CATALOG):
        mark = "✅" if label in current else "⬜"
        kb.button(text=f"{mark} {label}", callback_data=f"kb:t:{i}")
    kb.button(text="💾 Сохранить", callback_data="kb:save")
    kb.button(text="♻️ По умолчанию", callback_data="kb:reset")
    _menu_row(kb)
    kb.adjust(1)
    return kb.as_markup()

def reply_keyboard(labels: list[str]) -> ReplyKeyboardMarkup:
    kb = ReplyKeyboardBuilder()
    for label in labels:
        kb.button(text=label)
    kb.adjust(2)
    return kb.as_markup(resize_keyboard=True, one_time_keyboard=False)

# ── Profile & approval ───────────────────────────────────────────────────────

def profile_kb(user: User) -> InlineKeyboardMarkup:
    kb = InlineKeyboardBuilder()
    state = "✅ Вкл" if user.notifications_enabled else "❌ Выкл"
    kb.button(text=f"🔔 Уведомления: {state}", callback_data="profile:notify")
    if not user.is_admin:
        kb.button(text="🎓 Стать админом", callback_data="adm:request")
    kb.button(text="⚙️ Настроить клавиатуру", callback_data="kb:config")
    _menu_row(kb)
    kb.button(text="🗑️ Удалить профиль", callback_data="profile:delete")
    kb.adjust(1)
    return kb.as_markup()

def confirm_delete_kb() -> InlineKeyboardMarkup:
    kb = InlineKeyboardBuilder()
    kb.button(text="🗑️ Да, удалить", callback_data="profile:delete:ok")
    kb.button(text="↩️ Нет", callback_data="profile")
    kb.adjust(1)
    return kb.as_markup()

def approval_kb(user_id) -> InlineKeyboardMarkup:
    kb = InlineKeyboardBuilder()
    kb.button(text="✅ Одобрить", callback_data=f"adm:approve:{user_id}")
    kb.button(text="❌ Отклонить", callback_data=f"adm:reject:{user_id}")
    return kb.as_markup()
