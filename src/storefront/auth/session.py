"""In-process session auth gate.

Holds whoever logged in last. The login/logout calls are made by the
authentication screens outside this package.
"""

import structlog

from storefront.auth.port import AuthGate, UserIdentity

logger = structlog.get_logger(__name__)


class SessionAuthGate(AuthGate):
    def __init__(self, user: UserIdentity | None = None) -> None:
        self._user = user

    def current_user(self) -> UserIdentity | None:
        return self._user

    def login(self, user: UserIdentity) -> None:
        self._user = user
        logger.info("User logged in", user_id=user.user_id)

    def logout(self) -> None:
        if self._user is not None:
            logger.info("User logged out", user_id=self._user.user_id)
        self._user = None
