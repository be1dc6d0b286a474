from datetime import date, datetime, timedelta, timezone

def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()

def today() -> date:
    return date.today()

def parse_iso(s: str) -> datetime | None:
    if not s:
        return None
    try:
        return datetime.fromisoformat(s)
    except ValueError:
        return None

def shift_iso(day: date, days: int) -> str:
    return (day + timedelta(days=days)).isoformat()
