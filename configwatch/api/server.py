from fastapi import FastAPI

from configwatch.api.routers import create_namespaces_router, create_systems_router


def create_app(container) -> FastAPI:
    """Build the status API on top of the container's config client."""
    config_client = container.config_client()
    app = FastAPI(title="configwatch")
    app.include_router(create_systems_router(container.config(), config_client))
    app.include_router(create_namespaces_router(config_client))
    return app
