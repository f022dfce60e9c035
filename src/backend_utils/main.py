import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from backend_utils.middleware import RateLimit, RequestLogging
from backend_utils.routers import get_routers
from backend_utils.shared import (
    AppConfig,
    Logger,
    Settings,
    is_config_set,
    load_config,
    set_config,
)
from backend_utils.utils import install_validation_handlers

logger = Logger(__name__, level=logging.DEBUG).get_logger()


# ================================================================================
#       FastAPI Setup
# ================================================================================
def create_app(
    settings: Settings | None = None,
    app_config: AppConfig | None = None,
) -> FastAPI:
    settings = settings if settings is not None else load_config()
    app_config = app_config if app_config is not None else settings.security

    if app_config is not None and not is_config_set():
        set_config(app_config)
    elif app_config is None:
        logger.warning("No security configuration given; encryption is disabled")

    app = FastAPI(title=settings.general.title)

    for router in get_routers():
        app.include_router(router)

    install_validation_handlers(app)

    origins = ["*"]

    # Middleware added last runs first: log, then rate limit
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(
        RateLimit,
        timeout_period_s=settings.network.rate_limit.timeout_period,
        max_per_second=settings.network.rate_limit.requests_per_second,
        development_token=app_config.development_token if app_config else None,
    )
    app.add_middleware(RequestLogging)

    return app


# ================================================================================
#       Command Line
# ================================================================================
def welcome(settings: Settings):
    # Log server banner
    for line in settings.general.title.split("\n"):
        logger.info(line)

    logger.info("Starting server on %s:%s", settings.network.host, settings.network.port)


def main(argv=None):
    settings = load_config()

    # Same logger as the module one, now also writing to the log directory
    Logger(__name__, log_dir=settings.paths.logs, level=settings.logging.level)
    welcome(settings)

    import uvicorn

    uvicorn.run(
        "backend_utils.main:create_app",
        factory=True,
        host=settings.network.host,
        port=settings.network.port,
        reload=settings.network.reload,
        log_level=settings.logging.level,
    )


if __name__ == "__main__":
    main()
