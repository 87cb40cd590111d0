from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler

import uvicorn

from asciimmo_client.app import create_app
from asciimmo_client.config import load_client_config
from asciimmo_client.home import ensure_client_layout, resolve_client_home


def main() -> None:
    home = resolve_client_home()
    paths = ensure_client_layout(home)

    # Configure logging
    log_file = paths.logs_dir / "client.log"
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[
            RotatingFileHandler(log_file, maxBytes=10 * 1024 * 1024, backupCount=5),
            logging.StreamHandler(),
        ],
    )

    config = load_client_config(paths)

    host = os.environ.get("ASCIIMMO_BIND") or config.ui.bind_host

    env_port = os.environ.get("ASCIIMMO_PORT")
    port = int(env_port) if env_port else config.ui.port

    uvicorn.run(create_app(), host=host, port=port)


if __name__ == "__main__":
    main()
