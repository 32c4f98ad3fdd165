import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from restapi import __version__
from restapi.config import Settings, load_settings
from restapi.core.domain.user import UserStorage
from restapi.infrastructure.db import connection as db
from restapi.infrastructure.db.user_repository import MongoUserStorage
from restapi.interfaces.api.errors import register_error_handlers
from restapi.interfaces.api.routers import users

logger = logging.getLogger("app")


def create_app(
    settings: Optional[Settings] = None, storage: Optional[UserStorage] = None
) -> FastAPI:
    """
    Build the API. When `storage` is given it is used as-is and the caller
    owns its lifecycle; otherwise the lifespan opens a MongoDB client from
    `settings` (or the environment) and closes it on shutdown.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        client = None
        if app.state.user_storage is None:
            cfg = app.state.settings or load_settings()
            client = db.connect(cfg)
            app.state.user_storage = MongoUserStorage(
                db.get_collection(client, cfg.mongodb),
                logger=logging.getLogger("user_storage"),
            )
        try:
            yield
        finally:
            if client is not None:
                client.close()
                app.state.user_storage = None

    app = FastAPI(title="Users API", version=__version__, lifespan=lifespan)
    app.state.settings = settings
    app.state.user_storage = storage

    register_error_handlers(app)

    @app.get("/health")
    def health() -> dict:
        return {"status": "ok"}

    app.include_router(users.router)
    return app


app = create_app()
