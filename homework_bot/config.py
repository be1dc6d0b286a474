from __future__ import annotations

import os
from dataclasses import dataclass

@dataclass(frozen=True)
class Config:
    bot_token: str
    admin_chat_ids: tuple[int, ...]
    data_dir: str
    log_level: str
    log_dir: str
    class_letters: tuple[str, ...]
    class_grade_min: int
    class_grade_max: int
    session_idle_timeout: int
    session_sweep_interval: int
    port: int
    health_enabled: bool

    @property
    def class_grades(self) -> tuple[int, ...]:
        return tuple(range(self.class_grade_min, self.class_grade_max + 1))

def _read_admin_chat_ids() -> tuple[int, ...]:
    """
    ADMIN_CHAT_IDS is a comma/space separated list of Telegram ids.
    Falls back to OWNER_TG_ID / ADMIN_TG_ID for single-admin setups.
    Non-digit garbage is ignored.
    """
    raw = os.getenv("ADMIN_CHAT_IDS") or os.getenv("OWNER_TG_ID") or os.getenv("ADMIN_TG_ID") or ""
    ids: list[int] = []
    for part in raw.replace(",", " ").split():
        s = part.strip().strip('\'"')
        if s.lstrip("-").isdigit():
            ids.append(int(s))
    return tuple(ids)

def _read_int(key: str, default: int) -> int:
    raw = (os.getenv(key) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise RuntimeError(f"{key} must be an integer, got {raw!r}")

def _read_bool(key: str, default: bool) -> bool:
    raw = (os.getenv(key) or "").strip().lower()
    if not raw:
        return default
    return raw in ("1", "true", "yes", "on")

def load_config() -> Config:
    from dotenv import load_dotenv
    load_dotenv()

    token = (os.getenv("BOT_TOKEN") or "").strip()
    if not token:
        raise RuntimeError("BOT_TOKEN is not set in environment")

    data_dir = os.getenv("DATA_DIR", "./data")
    log_level = (os.getenv("LOG_LEVEL", "INFO") or "INFO").upper()
    letters_raw = (os.getenv("CLASS_LETTERS") or "АБВГ").replace(",", "").replace(" ", "")
    grade_min = _read_int("CLASS_GRADE_MIN", 5)
    grade_max = _read_int("CLASS_GRADE_MAX", 11)
    if grade_min > grade_max:
        raise RuntimeError("CLASS_GRADE_MIN must not exceed CLASS_GRADE_MAX")

    os.makedirs(data_dir, exist_ok=True)

    return Config(
        bot_token=token,
        admin_chat_ids=_read_admin_chat_ids(),
        data_dir=data_dir,
        log_level=log_level,
        log_dir=os.getenv("LOG_DIR", "logs"),
        class_letters=tuple(letters_raw.upper()),
        class_grade_min=grade_min,
        class_grade_max=grade_max,
        session_idle_timeout=_read_int("SESSION_IDLE_TIMEOUT", 3600),
        session_sweep_interval=_read_int("SESSION_SWEEP_INTERVAL", 300),
        port=_read_int("PORT", 5000),
        health_enabled=_read_bool("HEALTH_ENABLED", True),
    )
