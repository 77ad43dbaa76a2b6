"""
Catalog server entry point.
Serves the cached product list over HTTP.
"""

import asyncio

import uvicorn
from loguru import logger

from catalog.api import create_app
from catalog.settings import global_settings
from catalog.utils import setup_logging


async def main() -> None:
    setup_logging()
    logger.info("Starting catalog server...")

    app = create_app()
    config = uvicorn.Config(
        app,
        host=global_settings.server_host,
        port=global_settings.server_port,
        log_level=global_settings.log_level.lower(),
    )
    server = uvicorn.Server(config)

    try:
        logger.info(
            f"Listening on {global_settings.server_host}:{global_settings.server_port}"
        )
        await server.serve()
    except KeyboardInterrupt:
        logger.info("Received interrupt signal, shutting down...")
    finally:
        logger.info("Catalog server stopped")


if __name__ == "__main__":
    asyncio.run(main())
