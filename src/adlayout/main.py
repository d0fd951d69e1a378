"""FastAPI application entry point."""

from fastapi import FastAPI

from .config import AppConfig, load_config
from .dependencies import include_routers, lifespan
from .logging import configure_logging
from .repositories.interfaces import LayoutStore


def create_app(config: AppConfig | None = None, store: LayoutStore | None = None) -> FastAPI:
    """Build FastAPI instance with configured dependencies."""
    configure_logging()
    cfg = config or load_config()
    app = FastAPI(title="Ad Layout Builder", lifespan=lifespan)
    include_routers(app, cfg, store=store)
    return app


app = create_app()
