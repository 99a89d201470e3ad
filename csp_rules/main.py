"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI

from csp_rules.core.config import configure_logging, get_settings
from csp_rules.core.database import init_sqlmodel_tables
from csp_rules.lifecycle import router as lifecycle_router
from csp_rules.persistence import SqlDocumentStore
from csp_rules.rules.templates import TemplateLoader, install_templates

logger = logging.getLogger("csp.api")


def install_package_templates() -> int:
    """Install the rule templates shipped in the templates directory."""
    settings = get_settings()
    templates_dir = Path(settings.templates_dir)
    if not templates_dir.exists():
        logger.warning(f"Templates directory not found: {templates_dir}")
        return 0

    templates = TemplateLoader(templates_dir).load_directory()
    if not templates:
        return 0
    installed = install_templates(SqlDocumentStore(), templates, per_page=settings.find_page_size)
    return len(installed)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    settings = get_settings()
    configure_logging(settings.log_level)
    logger.info(f"Starting {settings.app_name}...")

    init_sqlmodel_tables()
    count = install_package_templates()
    logger.info(f"Rule templates installed: {count}")

    yield

    logger.info("Shutting down...")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Generates and reconciles CSP rules for package policies",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.include_router(lifecycle_router)  # /csp

    @app.get("/")
    async def root():
        """Root endpoint."""
        return {
            "name": settings.app_name,
            "version": "0.1.0",
            "endpoints": {
                "lifecycle": "/csp/lifecycle/package-policies - Package policy events",
                "status": "/csp/status - CSP package installation check",
                "rules": "/csp/rules - Rules of a package policy",
            },
        }

    @app.get("/health")
    async def health():
        """Health check endpoint."""
        return {"status": "healthy"}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
