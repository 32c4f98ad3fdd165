import os
from dataclasses import dataclass, field
from typing import Mapping, Optional

from restapi.core.errors import ConfigError

LISTEN_TYPES = ("port", "sock")
LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")
_TRUTHY = {"1", "true", "yes", "on"}


@dataclass
class ListenSettings:
    type: str = "port"
    bind_ip: str = "127.0.0.1"
    port: int = 8080


@dataclass
class MongoSettings:
    host: str = "localhost"
    port: int = 27017
    username: str = ""
    password: str = ""
    database: str = "users-service"
    auth_db: str = "admin"
    collection: str = "users"


@dataclass
class Settings:
    is_debug: bool = False
    log_level: str = "INFO"
    request_timeout_seconds: float = 15.0
    seed_demo_user: bool = False
    listen: ListenSettings = field(default_factory=ListenSettings)
    mongodb: MongoSettings = field(default_factory=MongoSettings)


def _flag(env: Mapping[str, str], name: str, default: bool = False) -> bool:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in _TRUTHY


def _port(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name) or str(default)
    try:
        value = int(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from exc
    return check_port(value, name)


def check_port(value: int, name: str = "port") -> int:
    if not 1 <= value <= 65535:
        raise ConfigError(f"{name} must be between 1 and 65535, got {value}")
    return value


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Build settings from environment variables.
    Raises ConfigError for values that cannot be used to start the service.
    """
    env = os.environ if environ is None else environ

    listen_type = (env.get("LISTEN_TYPE") or "port").strip().lower()
    if listen_type not in LISTEN_TYPES:
        raise ConfigError(
            f"LISTEN_TYPE must be one of {', '.join(LISTEN_TYPES)}, got {listen_type!r}"
        )

    raw_timeout = env.get("REQUEST_TIMEOUT_SECONDS") or "15"
    try:
        timeout = float(raw_timeout)
    except ValueError as exc:
        raise ConfigError(
            f"REQUEST_TIMEOUT_SECONDS must be a number, got {raw_timeout!r}"
        ) from exc
    if timeout <= 0:
        raise ConfigError("REQUEST_TIMEOUT_SECONDS must be positive")

    mongodb = MongoSettings(
        host=env.get("MONGODB_HOST", "localhost"),
        port=_port(env, "MONGODB_PORT", 27017),
        username=env.get("MONGODB_USERNAME", ""),
        password=env.get("MONGODB_PASSWORD", ""),
        database=env.get("MONGODB_DATABASE", "users-service"),
        auth_db=env.get("MONGODB_AUTH_DB", "admin"),
        collection=env.get("MONGODB_COLLECTION", "users"),
    )
    if not mongodb.database or not mongodb.collection:
        raise ConfigError("MONGODB_DATABASE and MONGODB_COLLECTION cannot be empty")

    log_level = (env.get("LOG_LEVEL") or "INFO").strip().upper()
    if log_level not in LOG_LEVELS:
        raise ConfigError(f"LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}")

    return Settings(
        is_debug=_flag(env, "IS_DEBUG"),
        log_level=log_level,
        request_timeout_seconds=timeout,
        seed_demo_user=_flag(env, "SEED_DEMO_USER"),
        listen=ListenSettings(
            type=listen_type,
            bind_ip=env.get("LISTEN_BIND_IP", "127.0.0.1"),
            port=_port(env, "LISTEN_PORT", 8080),
        ),
        mongodb=mongodb,
    )
