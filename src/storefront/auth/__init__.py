"""Auth gate factory.

Provides get_auth_gate() / set_auth_gate() so the presentation layer and
tests can share or replace the session gate.
"""

from storefront.auth.port import AuthGate, UserIdentity
from storefront.auth.session import SessionAuthGate

_current_gate: AuthGate | None = None


def get_auth_gate() -> AuthGate:
    """Return the current auth gate. Defaults to an empty SessionAuthGate."""
    global _current_gate
    if _current_gate is None:
        _current_gate = SessionAuthGate()
    return _current_gate


def set_auth_gate(gate: AuthGate) -> None:
    """Override the active auth gate (useful for tests)."""
    global _current_gate
    _current_gate = gate


def reset_auth_gate() -> None:
    """Reset to default gate."""
    global _current_gate
    _current_gate = None


__all__ = ["AuthGate", "SessionAuthGate", "UserIdentity", "get_auth_gate", "reset_auth_gate", "set_auth_gate"]
