from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import timedelta
from pathlib import Path
from typing import Any
from urllib.parse import urlencode

from fastapi import APIRouter, Form, HTTPException, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates
from starlette.responses import Response

from asciimmo_client.actions import (
    Actions,
    LoginRequest,
    RegisterRequest,
    StatusMessage,
    WorldRequest,
    WorldResult,
    build_actions,
)
from asciimmo_client.views import auth_view

BASE_DIR = Path(__file__).resolve().parent
TEMPLATES_DIR = BASE_DIR / "templates"
STATIC_DIR = BASE_DIR / "static"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))

router = APIRouter(prefix="/ui", tags=["ui"])

# Defaults of the World Service itself.
DEFAULT_WORLD_FORM = {"seed": "12345", "width": "80", "height": "24"}


class CookieStore:
    """Session entries kept in the browser's cookies.

    Reads come from the incoming request; writes and deletes are queued and
    applied to whichever response is eventually returned. Expiry is enforced
    by the browser through ``max_age``.
    """

    def __init__(self, cookies: Mapping[str, str]) -> None:
        self._cookies = dict(cookies)
        self._pending: list[tuple[str, str | None, int | None]] = []

    def get(self, name: str) -> str | None:
        return self._cookies.get(name) or None

    def set_many(self, values: Mapping[str, str], ttl: timedelta) -> None:
        max_age = int(ttl.total_seconds())
        for name, value in values.items():
            self._cookies[name] = value
            self._pending.append((name, value, max_age))

    def delete_many(self, names: Iterable[str]) -> None:
        for name in names:
            self._cookies.pop(name, None)
            self._pending.append((name, None, None))

    def apply(self, response: Response) -> Response:
        for name, value, max_age in self._pending:
            if value is None:
                response.delete_cookie(name, path="/")
            else:
                response.set_cookie(
                    name,
                    value,
                    max_age=max_age,
                    path="/",
                    httponly=True,
                    samesite="lax",
                )
        self._pending.clear()
        return response


def _actions_for(request: Request) -> tuple[Actions, CookieStore]:
    state = request.app.state
    http = getattr(state, "http", None)
    config = getattr(state, "client_config", None)
    if http is None or config is None:
        raise HTTPException(status_code=500, detail="Client not initialized")

    store = CookieStore(request.cookies)
    actions = build_actions(
        config=config,
        store=store,
        http=http,
        fallback_path=state.fallback_path,
    )
    return actions, store


def _flash_from_request(request: Request) -> dict[str, Any] | None:
    msg = request.query_params.get("msg")
    if not msg:
        return None
    kind = request.query_params.get("kind") or ""
    return {"message": msg, "kind": kind}


def _redirect(status: StatusMessage, *, view: str | None = None) -> RedirectResponse:
    params: dict[str, str] = {}
    if view:
        params["view"] = view
    if status.text:
        params["msg"] = status.text
        params["kind"] = "bad" if status.is_error else "ok"
    url = "/ui"
    if params:
        url = f"{url}?{urlencode(params)}"
    return RedirectResponse(url=url, status_code=302)


def _render_home(
    request: Request,
    actions: Actions,
    *,
    flash: dict[str, Any] | None,
    world_form: dict[str, str] | None = None,
    world: WorldResult | None = None,
    status_code: int = 200,
) -> HTMLResponse:
    show_register = (request.query_params.get("view") or "").strip().lower() == "register"
    view = auth_view(actions.sessions.current_session(), show_register=show_register)
    return templates.TemplateResponse(
        request,
        "index.html",
        {
            "title": "World Generator",
            "flash": flash,
            "view": view,
            "world_form": world_form or DEFAULT_WORLD_FORM,
            "world": world,
        },
        status_code=status_code,
    )


@router.get("", response_class=HTMLResponse)
async def ui_home(request: Request) -> HTMLResponse:
    actions, _ = _actions_for(request)
    return _render_home(request, actions, flash=_flash_from_request(request))


@router.post("/register")
async def ui_register(
    request: Request,
    username: str = Form(default=""),
    email: str = Form(default=""),
    password: str = Form(default=""),
) -> RedirectResponse:
    actions, store = _actions_for(request)
    status = await actions.register(
        RegisterRequest(username=username.strip(), email=email.strip(), password=password)
    )
    # Accounts need email confirmation, so success returns to the login form.
    resp = _redirect(status, view="register" if status.is_error else None)
    store.apply(resp)
    return resp


@router.post("/login")
async def ui_login(
    request: Request,
    username: str = Form(default=""),
    password: str = Form(default=""),
) -> RedirectResponse:
    actions, store = _actions_for(request)
    status = await actions.login(LoginRequest(username=username.strip(), password=password))
    resp = _redirect(status)
    store.apply(resp)
    return resp


@router.post("/logout")
async def ui_logout(request: Request) -> RedirectResponse:
    actions, store = _actions_for(request)
    status = actions.logout()
    resp = _redirect(status)
    store.apply(resp)
    return resp


@router.get("/confirm")
async def ui_confirm(request: Request, token: str = "") -> RedirectResponse:
    actions, _ = _actions_for(request)
    status = await actions.confirm_email(token.strip())
    return _redirect(status)


@router.post("/world", response_class=HTMLResponse)
async def ui_world(
    request: Request,
    seed: str = Form(default=""),
    width: str = Form(default=""),
    height: str = Form(default=""),
) -> HTMLResponse:
    actions, _ = _actions_for(request)
    form = {"seed": seed, "width": width, "height": height}
    result = await actions.generate_world(WorldRequest(**form))
    return _render_home(request, actions, flash=None, world_form=form, world=result)


@router.post("/world/fallback", response_class=HTMLResponse)
async def ui_world_fallback(request: Request) -> HTMLResponse:
    actions, _ = _actions_for(request)
    result = actions.load_fallback()
    return _render_home(request, actions, flash=None, world=result)
