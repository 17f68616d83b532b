"""Main entry point - runs the faucet API."""

import asyncio
import logging

import uvicorn

from multifaucet.api.app import create_app
from multifaucet.config import get_settings

logger = logging.getLogger(__name__)


async def serve() -> None:
    """Run the FastAPI server until interrupted."""
    settings = get_settings()

    # Configure logging
    log_level = logging.DEBUG if settings.debug else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    logger.info("Starting multifaucet...")
    logger.info(f"Environment: {settings.environment}")
    if not settings.ethereum_wallet_id or not settings.solana_wallet_id:
        logger.warning("Faucet wallet ids not fully configured - transfers will fail")

    config = uvicorn.Config(
        create_app(settings),
        host=settings.api_host,
        port=settings.api_port,
        log_level="debug" if settings.debug else "info",
    )
    server = uvicorn.Server(config)
    logger.info(f"Starting API server on {settings.api_host}:{settings.api_port}")
    await server.serve()


def main():
    """Main entry point."""
    try:
        asyncio.run(serve())
    except KeyboardInterrupt:
        logger.info("Keyboard interrupt received")


if __name__ == "__main__":
    main()
