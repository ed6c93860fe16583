from fastapi import FastAPI

from backend.core.logging import init_logging
from backend.apps.search.api import router as search_router
from backend.apps.search.registry import init_registry


def create_app() -> FastAPI:
    init_logging()
    init_registry()

    app = FastAPI(title="0Admin-NEXT Search")

    # Routers
    app.include_router(search_router)

    return app


# ASGI app instance
app = create_app()
