from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List

import uvicorn

from restapi.config import LISTEN_TYPES, Settings, check_port, load_settings
from restapi.core.domain.user import User, UserStorage
from restapi.core.errors import AppError, ConfigError
from restapi.infrastructure.db import connection as db
from restapi.infrastructure.db.user_repository import MongoUserStorage
from restapi.infrastructure.security import passwords
from restapi.main import create_app

logger = logging.getLogger("restapi")

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
SOCKET_NAME = "app.sock"


def configure_logging(settings: Settings) -> None:
    level = logging.DEBUG if settings.is_debug else settings.log_level
    logging.basicConfig(level=level, format=LOG_FORMAT, force=True)


def listen_target(settings: Settings, executable: str | None = None) -> Dict[str, Any]:
    """Return the uvicorn bind arguments for the configured listen mode."""
    if settings.listen.type == "sock":
        app_dir = Path(executable or sys.argv[0]).resolve().parent
        return {"uds": str(app_dir / SOCKET_NAME)}
    return {"host": settings.listen.bind_ip, "port": settings.listen.port}


def seed_demo_user(storage: UserStorage) -> str:
    user = User(
        username="demo",
        email="demo@example.com",
        password_hash=passwords.hash_password("12345"),
    )
    user_id = storage.create(user)
    logger.info("Demo user created", extra={"user_id": user_id})
    return user_id


def _parse_args(argv: List[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Users REST API")
    parser.add_argument("--listen-type", choices=LISTEN_TYPES, help="Override LISTEN_TYPE.")
    parser.add_argument("--host", help="Override LISTEN_BIND_IP.")
    parser.add_argument("--port", type=int, help="Override LISTEN_PORT.")
    return parser.parse_args(argv)


def main(argv: List[str] | None = None) -> int:
    args = _parse_args(argv)
    try:
        settings = load_settings()
        if args.listen_type is not None:
            settings.listen.type = args.listen_type
        if args.host is not None:
            settings.listen.bind_ip = args.host
        if args.port is not None:
            settings.listen.port = check_port(args.port, "--port")
    except ConfigError as exc:
        logging.basicConfig(format=LOG_FORMAT)
        logger.critical("Invalid configuration: %s", exc)
        return 1

    configure_logging(settings)

    try:
        client = db.connect(settings)
    except AppError as exc:
        logger.critical("Database unavailable: %s", exc.developer_message)
        return 1

    try:
        storage = MongoUserStorage(
            db.get_collection(client, settings.mongodb),
            logger=logging.getLogger("user_storage"),
        )
        if settings.seed_demo_user:
            seed_demo_user(storage)

        target = listen_target(settings)
        logger.info("Starting server", extra={"listen": target})
        uvicorn.run(
            create_app(settings, storage=storage),
            timeout_keep_alive=int(settings.request_timeout_seconds),
            log_config=None,
            **target,
        )
    except AppError as exc:
        logger.critical("Startup failed: %s", exc.developer_message)
        return 1
    finally:
        client.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
