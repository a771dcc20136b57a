from abc import ABC, abstractmethod

from cherry.domain.entities.viewer import Viewer


class AuthPort(ABC):
    @abstractmethod
    def resolve(self, access_token: str | None) -> Viewer:
        """Return the viewer for a session token, or an anonymous viewer."""
        raise NotImplementedError
