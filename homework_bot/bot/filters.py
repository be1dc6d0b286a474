from __future__ import annotations
from typing import Any, Optional
from aiogram.filters import Filter
from aiogram.types import TelegramObject
from homework_bot.domain.session import Session

class InWizard(Filter):
    """Passes when the session holds the given wizard variant (and, optionally, one of the steps)."""
    def __init__(self, kind: type, *steps: str):
        self.kind = kind
        self.steps = steps

    async def __call__(self, event: TelegramObject, session: Optional[Session] = None, **kwargs: Any) -> bool:
        if session is None or not isinstance(session.state, self.kind):
            return False
        return not self.steps or getattr(session.state, "step", None) in self.steps
