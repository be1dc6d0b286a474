import sys, pathlib
import asyncio
import pytest
sys.path.append(str(pathlib.Path(__file__).resolve().parents[1]))
from homework_bot.config import load_config
from homework_bot.health import build_app, handle_root

ENV_KEYS = ("ADMIN_CHAT_IDS", "OWNER_TG_ID", "ADMIN_TG_ID", "CLASS_LETTERS", "CLASS_GRADE_MIN",
            "CLASS_GRADE_MAX", "SESSION_IDLE_TIMEOUT", "HEALTH_ENABLED", "PORT")


@pytest.fixture
def env(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("BOT_TOKEN", "123:abc")
    monkeypatch.setenv("DATA_DIR", str(tmp_path / "data"))
    return monkeypatch


def test_defaults(env, tmp_path):
    cfg = load_config()
    assert cfg.class_letters == ("А", "Б", "В", "Г")
    assert cfg.class_grades == (5, 6, 7, 8, 9, 10, 11)
    assert cfg.session_idle_timeout == 3600
    assert cfg.port == 5000 and cfg.health_enabled
    assert cfg.admin_chat_ids == ()
    assert (tmp_path / "data").is_dir()


def test_overrides(env):
    env.setenv("ADMIN_CHAT_IDS", "101, 202 junk -303")
    env.setenv("CLASS_LETTERS", "а,б")
    env.setenv("CLASS_GRADE_MIN", "4")
    env.setenv("HEALTH_ENABLED", "no")
    cfg = load_config()
    assert cfg.admin_chat_ids == (101, 202, -303)
    assert cfg.class_letters == ("А", "Б")
    assert cfg.class_grades[0] == 4
    assert cfg.health_enabled is False


def test_invalid_values(env):
    env.setenv("CLASS_GRADE_MIN", "12")
    with pytest.raises(RuntimeError):
        load_config()
    env.setenv("CLASS_GRADE_MIN", "five")
    with pytest.raises(RuntimeError):
        load_config()
    env.delenv("CLASS_GRADE_MIN")
    env.setenv("BOT_TOKEN", " ")
    with pytest.raises(RuntimeError):
        load_config()


def test_health_endpoint():
    resp = asyncio.run(handle_root(None))
    assert resp.status == 200 and resp.text == "running"
    assert any(r.method == "GET" for r in build_app().router.routes())
