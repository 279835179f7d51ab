"""Entry point for the Laylapet chat API."""

from dotenv import load_dotenv
load_dotenv()  # Load .env into environment variables

import structlog
import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse

from laylapet import __version__
from laylapet.api.middleware import RequestLoggingMiddleware
from laylapet.api.routes.chat import router as chat_router
from laylapet.config.settings import settings
from laylapet.logging import configure_production_logging

configure_production_logging()

logger = structlog.get_logger()


def create_app() -> FastAPI:
    """Build the FastAPI application."""
    app = FastAPI(title="Laylapet AI API", version=__version__)

    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(chat_router)

    @app.get("/health")
    async def health_check():
        """Health check endpoint for container orchestration."""
        return {"status": "healthy"}

    @app.get("/", response_class=HTMLResponse)
    async def status_page():
        """Human-readable server status."""
        status = "✅ Bağlı" if settings.shopify_token else "❌ Token Eksik"
        return f"""
    <div style="font-family: sans-serif; text-align: center; padding: 50px;">
      <h1>🐾 Laylapet AI API</h1>
      <p>Durum: {status}</p>
      <p>Endpoint: <code>POST /api/chat</code></p>
    </div>
    """

    return app


app = create_app()


def main():
    """Run the API server."""
    logger.info(
        "Starting server",
        host=settings.api_host,
        port=settings.api_port,
        environment=settings.environment,
        shopify_configured=bool(settings.shopify_token),
        openai_configured=bool(settings.openai_api_key),
    )
    uvicorn.run(app, host=settings.api_host, port=settings.api_port, log_level="info")


if __name__ == "__main__":
    main()
