from __future__ import annotations

import argparse
import asyncio
import getpass
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

import httpx

from asciimmo_client.actions import (
    Actions,
    LoginRequest,
    RegisterRequest,
    StatusMessage,
    WorldRequest,
    WorldResult,
    build_actions,
)
from asciimmo_client.config import ClientConfig, load_client_config, resolve_fallback_path
from asciimmo_client.home import ClientPaths, ensure_client_layout, resolve_client_home
from asciimmo_client.services import build_http_client
from asciimmo_client.storage import FileStore


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="asciimmo-client", description="Terminal client for the world generator"
    )
    p.add_argument("--home", help="ASCIIMMO_HOME path (defaults to the environment/user dir)")
    sub = p.add_subparsers(dest="command", required=True)

    reg = sub.add_parser("register", help="Create an account (confirm it by email)")
    reg.add_argument("username")
    reg.add_argument("email")
    reg.add_argument("--password", help="Prompted for when omitted")

    login = sub.add_parser("login", help="Log in and store the session")
    login.add_argument("username")
    login.add_argument("--password", help="Prompted for when omitted")

    sub.add_parser("logout", help="Forget the stored session")
    sub.add_parser("whoami", help="Show the logged-in user")

    confirm = sub.add_parser("confirm", help="Confirm an email address")
    confirm.add_argument("token")

    world = sub.add_parser("world", help="Fetch a generated map")
    world.add_argument("--seed", default="12345")
    world.add_argument("--width", default="80")
    world.add_argument("--height", default="24")
    world.add_argument(
        "--save", action="store_true", help="Also write the map to the fallback world.txt"
    )

    sub.add_parser("fallback", help="Print the locally saved world.txt")
    return p


def _configure_logging(paths: ClientPaths, config: ClientConfig) -> None:
    handler = RotatingFileHandler(
        paths.logs_dir / "client.log",
        maxBytes=config.logging.max_size_mb * 1024 * 1024,
        backupCount=config.logging.backup_count,
        encoding="utf-8",
    )
    handler.setFormatter(
        logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    )
    root = logging.getLogger()
    root.setLevel(logging.INFO)
    if not any(isinstance(h, RotatingFileHandler) for h in root.handlers):
        root.addHandler(handler)


def _report(status: StatusMessage | WorldResult) -> int:
    text = status.text if isinstance(status, StatusMessage) else status.map_text
    print(text)
    return 1 if status.is_error else 0


def _password(args: argparse.Namespace) -> str:
    if args.password is not None:
        return args.password
    return getpass.getpass("Password: ")


async def _dispatch(args: argparse.Namespace, actions: Actions) -> int:
    match args.command:
        case "register":
            req = RegisterRequest(
                username=args.username, email=args.email, password=_password(args)
            )
            return _report(await actions.register(req))
        case "login":
            req = LoginRequest(username=args.username, password=_password(args))
            return _report(await actions.login(req))
        case "logout":
            return _report(actions.logout())
        case "whoami":
            session = actions.sessions.current_session()
            if session is None:
                print("Not logged in")
                return 1
            print(session.username)
            return 0
        case "confirm":
            return _report(await actions.confirm_email(args.token))
        case "world":
            result = await actions.generate_world(
                WorldRequest(seed=args.seed, width=args.width, height=args.height)
            )
            if args.save and not result.is_error:
                path = actions.world.fallback_path
                path.parent.mkdir(parents=True, exist_ok=True)
                path.write_text(result.map_text, encoding="utf-8")
            return _report(result)
        case "fallback":
            return _report(actions.load_fallback())
    raise ValueError(f"Unknown command: {args.command}")


async def _run(
    args: argparse.Namespace,
    paths: ClientPaths,
    config: ClientConfig,
    transport: httpx.AsyncBaseTransport | None,
) -> int:
    async with build_http_client(config, transport=transport) as http:
        actions = build_actions(
            config=config,
            store=FileStore(paths.session_path),
            http=http,
            fallback_path=resolve_fallback_path(paths, config),
        )
        return await _dispatch(args, actions)


def main(
    argv: list[str] | None = None, *, transport: httpx.AsyncBaseTransport | None = None
) -> int:
    args = _build_parser().parse_args(argv)

    home = Path(args.home).expanduser().resolve() if args.home else resolve_client_home()
    paths = ensure_client_layout(home)
    config = load_client_config(paths)
    _configure_logging(paths, config)

    return asyncio.run(_run(args, paths, config, transport))


if __name__ == "__main__":
    raise SystemExit(main())
