from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class Profile:
    id: str
    full_name: str | None = None
    role: str | None = None  # "host" | "guest"
    bio: str | None = None
    age: int | None = None
    interests: Tuple[str, ...] = ()
    linkedin_url: str | None = None
    avatar_url: str | None = None

    def display_name(self, fallback: str = "Cherry user") -> str:
        name = (self.full_name or "").strip()
        return name or fallback
