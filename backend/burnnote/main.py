# burnnote/main.py

import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from burnnote import __version__
from burnnote.api import messages
from burnnote.config import Settings
from burnnote.core.circuit_breaker import build_limiter
from burnnote.core.message import MessageService
from burnnote.core.store import MessageStore
from burnnote.infra.postgres import SqlMessageStore, build_engine, init_db
from burnnote.utils.logger import setup_logger

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    service: Optional[MessageService] = None,
) -> FastAPI:
    settings = settings or Settings.from_env()
    setup_logger(settings.log_level)

    if service is None:
        engine = build_engine(settings.database_url)
        init_db(engine)
        store: MessageStore = SqlMessageStore(engine)
        service = MessageService(store, settings)

    app = FastAPI(
        title="BurnNote Backend",
        version=__version__,
        description="One-time, self-expiring encrypted messages",
    )

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Rate limiting
    limiter = build_limiter(settings)
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    app.state.settings = settings
    app.state.message_service = service

    # Register routers
    app.include_router(messages.build_router(limiter), tags=["Messages"])

    @app.get("/health")
    def health_check():
        return {"status": "ok"}

    logger.info("BurnNote %s ready (delete_after_read=%s)", __version__, settings.delete_after_read)
    return app


def run():
    import uvicorn

    uvicorn.run(create_app(), host="0.0.0.0", port=8000)


if __name__ == "__main__":
    run()
