import logging
from urllib.parse import quote_plus

from pymongo import MongoClient
from pymongo.collection import Collection
from pymongo.errors import PyMongoError

from restapi.config import MongoSettings, Settings
from restapi.core.errors import PersistenceError

logger = logging.getLogger("db")


def build_uri(cfg: MongoSettings) -> str:
    # Credentials are only sent when both halves are configured.
    if cfg.username and cfg.password:
        return "mongodb://{}:{}@{}:{}/?authSource={}".format(
            quote_plus(cfg.username),
            quote_plus(cfg.password),
            cfg.host,
            cfg.port,
            quote_plus(cfg.auth_db),
        )
    return f"mongodb://{cfg.host}:{cfg.port}"


def connect(settings: Settings) -> MongoClient:
    """
    Open the shared client and ping the server so a bad address or bad
    credentials fail at startup instead of on the first request.
    """
    cfg = settings.mongodb
    timeout_ms = int(settings.request_timeout_seconds * 1000)
    client: MongoClient = MongoClient(
        build_uri(cfg),
        timeoutMS=timeout_ms,
        serverSelectionTimeoutMS=timeout_ms,
        retryWrites=False,
        retryReads=False,
    )
    try:
        client.admin.command("ping")
    except PyMongoError as exc:
        client.close()
        raise PersistenceError(
            f"failed to connect to mongodb at {cfg.host}:{cfg.port}: {exc}"
        ) from exc
    logger.info(
        "Connected to MongoDB",
        extra={"host": cfg.host, "port": cfg.port, "database": cfg.database},
    )
    return client


def get_collection(client: MongoClient, cfg: MongoSettings) -> Collection:
    return client[cfg.database][cfg.collection]
