from dataclasses import dataclass


@dataclass(frozen=True)
class SessionIdentity:
    user_id: str  # Firebase UID
    email: str | None = None
    display_name: str | None = None
