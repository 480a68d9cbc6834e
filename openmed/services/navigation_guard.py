"""Route guard for the web client.

The client asks before rendering a page; the answer is either "go ahead" or
a path to redirect to. Checks run in a fixed order and the first one that
fails decides the redirect.
"""
from dataclasses import dataclass
from typing import Optional

from ..core.security import UserRole

PUBLIC_PAGES = frozenset({"/login", "/about", "/signup"})
ADMIN_PAGES = frozenset({"/users"})
PATIENT_PAGES = frozenset({"/appointments"})
DOCTOR_PAGES = frozenset({
    "/appointments",
    "/appointments/edit",
    "/appointments/ok",
})

LOGIN_PATH = "/login"

@dataclass(frozen=True)
class SessionState:
    is_authenticated: bool = False
    is_doctor: bool = False
    is_patient: bool = False
    is_admin: bool = False

    @classmethod
    def anonymous(cls) -> "SessionState":
        return cls()

    @classmethod
    def for_role(cls, role: Optional[UserRole]) -> "SessionState":
        if role is None:
            return cls.anonymous()
        role = UserRole(role)
        return cls(
            is_authenticated=True,
            is_doctor=role == UserRole.DOCTOR,
            is_patient=role == UserRole.PATIENT,
            is_admin=role == UserRole.ADMIN,
        )

@dataclass(frozen=True)
class NavigationDecision:
    redirect: Optional[str] = None

    @property
    def allowed(self) -> bool:
        return self.redirect is None

ALLOW = NavigationDecision()

def evaluate_navigation(
    to_path: str, from_path: str, session: SessionState
) -> NavigationDecision:
    """Decide whether navigating from ``from_path`` to ``to_path`` may proceed."""
    if to_path not in PUBLIC_PAGES and not session.is_authenticated:
        return NavigationDecision(redirect=LOGIN_PATH)

    if to_path in ADMIN_PAGES and not session.is_admin:
        return NavigationDecision(redirect=from_path)

    if to_path in PATIENT_PAGES and not session.is_patient:
        return NavigationDecision(redirect=from_path)

    if to_path in DOCTOR_PAGES and not session.is_doctor:
        return NavigationDecision(redirect=from_path)

    return ALLOW
