from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Viewer:
    """Identity of the caller a view is derived for.

    Passed explicitly into every use case instead of being looked up from a
    global session.
    """

    user_id: str | None = None
    is_authenticated: bool = False

    @staticmethod
    def anonymous() -> "Viewer":
        return Viewer()

    @staticmethod
    def of(user_id: str) -> "Viewer":
        return Viewer(user_id=user_id, is_authenticated=True)
