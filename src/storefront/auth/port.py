"""Authentication gate port.

The storefront does not store credentials itself. It only asks "who is
logged in right now?" before letting a customer enter checkout. The cart
stays usable while logged out.
"""

from abc import ABC, abstractmethod

from pydantic import BaseModel, ConfigDict


class UserIdentity(BaseModel):
    model_config = ConfigDict(frozen=True)

    user_id: str
    name: str = ""
    email: str = ""
    token: str | None = None


class AuthGate(ABC):
    @abstractmethod
    def current_user(self) -> UserIdentity | None:
        """Return the authenticated user, or None when nobody is logged in."""
        ...

    def is_authenticated(self) -> bool:
        return self.current_user() is not None
