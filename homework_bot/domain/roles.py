from enum import Enum

class Role(str, Enum):
    USER = "user"
    PENDING_ADMIN = "pending_admin"
    ADMIN = "admin"

    @classmethod
    def parse(cls, value) -> "Role":
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.USER

# Moderated promotion only: a user asks, a configured recipient decides.
TRANSITIONS: dict[Role, frozenset[Role]] = {
    Role.USER: frozenset({Role.PENDING_ADMIN}),
    Role.PENDING_ADMIN: frozenset({Role.ADMIN, Role.USER}),
    Role.ADMIN: frozenset(),
}

def can_transition(current: Role, target: Role) -> bool:
    return target in TRANSITIONS.get(current, frozenset())
