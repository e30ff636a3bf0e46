"""
FastAPI application entrypoint for the Mailjet Slack relay.

- Primary: `python main.py -f config.json -p 3000` loads the account
  configuration, then serves on <Mailjet domain>:<port>.
- Alternative: expose create_app() factory for Uvicorn (--factory); the
  configuration file then comes from $CONFIG_FILE (default config.json).

Startup launches the Mailjet parse route registration in the background;
the server accepts requests whether or not registration succeeds.
"""

import argparse
import asyncio
import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path

import httpx
from fastapi import FastAPI

from config import (
    DEFAULT_CONFIG_FILE,
    DEFAULT_PORT,
    ConfigError,
    RelayConfig,
    Settings,
    get_settings,
    load_relay_config,
)
from providers.dispatch import DispatchClient
from providers.mailjet import MailjetClient
from relay.registrar import RouteRegistrar, start_route_registration
from utils.logging import RequestIdMiddleware, configure_logging

# Configure logging at import time
configure_logging()

logger = logging.getLogger(__name__)


def public_base_url(relay_config: RelayConfig, settings: Settings) -> str:
    """Base URL Mailjet uses to reach this service."""
    if settings.public_base_url:
        return settings.public_base_url.rstrip("/")
    return f"http://{relay_config.mailjet.domain}:{settings.port}"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Async context manager for application lifespan events.

    Startup:
    - Create the shared outbound HTTP client
    - Launch the one-shot parse route registration task
    Shutdown:
    - Cancel registration if still running and wait for it to unwind
    - Close the HTTP client
    """
    settings: Settings = app.state.settings
    relay_config: RelayConfig = app.state.relay_config

    http_client = httpx.AsyncClient(
        timeout=httpx.Timeout(settings.outbound_timeout_seconds),
        transport=app.state.http_transport,
    )
    app.state.http_client = http_client
    app.state.dispatch_client = DispatchClient(http_client)

    registrar = RouteRegistrar(
        MailjetClient(http_client, relay_config.mailjet, settings.mailjet_api_url),
        strict_lookup=settings.strict_route_lookup,
    )
    base_url = public_base_url(relay_config, settings)
    task = start_route_registration(
        registrar,
        relay_config.mailjet.email,
        base_url,
        timeout=settings.route_registration_timeout_seconds,
    )
    app.state.route_registration = task

    if settings.await_route_registration:
        outcome = await task
        logger.info("Parse route registration finished", extra={"outcome": outcome.value})

    logger.info(f"Server started: {base_url}", extra={"env": settings.app_env})

    yield  # Application is running

    logger.info("Shutting down Mailjet Slack relay")
    if not task.done():
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            logger.info("Parse route registration cancelled")
    await http_client.aclose()


def create_app(
    relay_config: RelayConfig | None = None,
    settings: Settings | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """
    Application factory for FastAPI.

    Args:
        relay_config: Mailjet/Slack credentials (if None, read from settings.config_file)
        settings: Process settings (if None, uses get_settings())
        transport: Optional httpx transport for the outbound client

    Returns:
        FastAPI: Configured application instance

    Raises:
        ConfigError: If relay_config is None and the configuration file is unusable
    """
    settings = settings or get_settings()
    if relay_config is None:
        relay_config = load_relay_config(settings.config_file)

    app = FastAPI(
        title="Mailjet Slack Relay",
        description="Forwards Mailjet inbound emails to a Slack incoming webhook",
        version="0.1.0",
        lifespan=lifespan,
        docs_url="/docs" if settings.is_dev else None,
        redoc_url=None,
    )

    # Read-only after startup; shared by every request and the registrar
    app.state.settings = settings
    app.state.relay_config = relay_config
    app.state.http_transport = transport

    # --- Middleware ---
    app.add_middleware(RequestIdMiddleware)

    # --- Routes ---
    from api.webhooks import router as webhooks_router

    app.include_router(webhooks_router)

    @app.get("/health", tags=["System"])
    async def health_check():
        """Health check endpoint, including parse route registration state."""
        task = getattr(app.state, "route_registration", None)
        if task is None or not task.done():
            registration = "pending"
        elif task.cancelled():
            registration = "cancelled"
        elif task.exception() is not None:
            registration = "failed"
        else:
            registration = task.result().value
        return {"status": "healthy", "env": settings.app_env, "route_registration": registration}

    return app


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Relay Mailjet inbound emails to Slack")
    parser.add_argument(
        "-f",
        dest="config_file",
        default=DEFAULT_CONFIG_FILE,
        help="configuration file",
    )
    parser.add_argument(
        "-p",
        dest="port",
        type=int,
        default=DEFAULT_PORT,
        help="port of the server",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    """Command-line entry point; exits with status 1 if the config file is unusable."""
    import uvicorn

    args = parse_args(argv)
    settings = get_settings().model_copy(
        update={"config_file": Path(args.config_file), "port": args.port}
    )

    try:
        relay_config = load_relay_config(settings.config_file)
    except ConfigError as e:
        logger.critical(str(e))
        sys.exit(1)

    logger.info(f"Read config {settings.config_file}: {relay_config!r}")

    app = create_app(relay_config=relay_config, settings=settings)
    uvicorn.run(
        app,
        host=relay_config.mailjet.domain or "0.0.0.0",
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
