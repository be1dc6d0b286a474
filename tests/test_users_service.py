import sys, pathlib
from datetime import date
import pytest
sys.path.append(str(pathlib.Path(__file__).resolve().parents[1]))
from homework_bot.domain.models import DEFAULT_KEYBOARD
from homework_bot.domain.roles import Role
from homework_bot.repositories.users_repo import UsersRepo
from homework_bot.services.keyboard_service import CATALOG, KeyboardService, toggled
from homework_bot.services.users_service import UsersService


def _users(tmp_path) -> UsersService:
    return UsersService(UsersRepo(str(tmp_path / "data")))


def test_register_once(tmp_path):
    users = _users(tmp_path)
    u, created = users.register(100, "Б9", first_name="Анна", username="anna", chat_id=100)
    assert created and u.role == Role.USER
    again, created = users.register(100, "А5", first_name="Другое")
    assert not created
    assert again.class_id == "Б9" and again.registered_at == u.registered_at
    assert users.get("100").first_name == "Анна"
    assert users.get(100).chat_id == 100


def test_role_transitions(tmp_path):
    users = _users(tmp_path)
    users.register(1, "Б9")
    with pytest.raises(ValueError) as e:
        users.set_role(1, Role.ADMIN)
    assert str(e.value) == "E_ROLE_TRANSITION"

    assert users.set_role(1, Role.PENDING_ADMIN).role == Role.PENDING_ADMIN
    assert users.set_role(1, Role.ADMIN).role == Role.ADMIN
    assert users.is_admin(1)
    # same role is a no-op
    assert users.set_role(1, Role.ADMIN).role == Role.ADMIN
    with pytest.raises(ValueError):
        users.set_role(1, Role.USER)
    assert users.set_role(999, Role.PENDING_ADMIN) is None


def test_touch_view_and_stats(tmp_path):
    users = _users(tmp_path)
    users.register(1, "Б9")
    users.register(2, "Б9")
    users.register(3, "А9")
    users.touch_view(1)
    users.touch_view(1)
    users.touch_view(404)
    assert users.get(1).stats.homework_views == 2
    stats = users.class_stats("Б9", date.today())
    assert stats["total"] == 2 and stats["admins"] == 0
    assert stats["active_today"] == 2


def test_notifications_and_delete(tmp_path):
    users = _users(tmp_path)
    users.register(1, "Б9")
    assert users.toggle_notifications(1).notifications_enabled is False
    assert users.get(1).notifications_enabled is False
    assert users.delete(1)
    assert users.get(1) is None
    assert not users.delete(1)


def test_toggle_is_an_involution():
    current = ["📆 Сегодня", "🏠 Меню"]
    assert toggled(current, "📖 Расписание") == ["📆 Сегодня", "🏠 Меню", "📖 Расписание"]
    assert toggled(toggled(current, "📖 Расписание"), "📖 Расписание") == current
    assert toggled(current, "📆 Сегодня") == ["🏠 Меню"]


def test_keyboard_service_persists_layout(tmp_path):
    users = _users(tmp_path)
    keyboards = KeyboardService(users)
    users.register(1, "Б9")
    u = users.get(1)
    assert keyboards.layout(u) == DEFAULT_KEYBOARD

    keyboards.toggle(1, "📖 Расписание")
    keyboards.toggle(1, "📖 Расписание")
    assert users.get(1).custom_keyboard == []

    keyboards.toggle(1, "👤 Профиль")
    assert keyboards.layout(users.get(1)) == ["👤 Профиль"]
    assert keyboards.reset(1).custom_keyboard == DEFAULT_KEYBOARD

    with pytest.raises(ValueError) as e:
        keyboards.toggle(1, "🚀 Ракета")
    assert str(e.value) == "E_UNKNOWN_BUTTON"
    assert keyboards.toggle(404, CATALOG[0]) is None


def test_layout_drops_labels_no_longer_offered(tmp_path):
    users = _users(tmp_path)
    users.register(1, "Б9")
    users.set_keyboard(1, ["старая кнопка"])
    assert KeyboardService(users).layout(users.get(1)) == DEFAULT_KEYBOARD
    assert KeyboardService(users).layout(None) == DEFAULT_KEYBOARD
