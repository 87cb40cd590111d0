from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from asciimmo_client.session import Session


class AuthPanel(StrEnum):
    LOGGED_IN = "logged_in"
    LOGIN = "login"
    REGISTER = "register"


@dataclass(frozen=True)
class AuthView:
    panel: AuthPanel
    username: str | None = None


def auth_view(session: Session | None, *, show_register: bool = False) -> AuthView:
    """Which auth panel is visible.

    A session always wins; otherwise ``show_register`` picks between the two
    forms.
    """

    if session is not None:
        return AuthView(panel=AuthPanel.LOGGED_IN, username=session.username)
    if show_register:
        return AuthView(panel=AuthPanel.REGISTER)
    return AuthView(panel=AuthPanel.LOGIN)
