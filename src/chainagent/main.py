"""Main entry point - serves the MCP tools over SSE."""

import asyncio
import logging
import signal
import sys

import uvicorn

from chainagent.config import get_settings
from chainagent.errors import DerivationError
from chainagent.tools.server import build_toolkit, create_server

logger = logging.getLogger(__name__)


class Application:
    """Runs the MCP server until a shutdown signal arrives."""

    def __init__(self):
        self.settings = get_settings()
        self.toolkit = None
        self.server = None
        self._shutdown_event = asyncio.Event()

    def configure_logging(self):
        # Logs go to stderr, away from any protocol stream
        log_level = logging.DEBUG if self.settings.debug else logging.INFO
        logging.basicConfig(
            level=log_level,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            stream=sys.stderr,
        )

    async def start(self):
        """Start the server and wait for shutdown."""
        self.configure_logging()

        logger.info("Starting chainagent...")
        logger.info(f"Settings: {self.settings.get_safe_dict()}")

        # Key derivation failures are fatal
        self.toolkit = build_toolkit(self.settings)
        self.server = create_server(self.settings, toolkit=self.toolkit)

        task = asyncio.create_task(self._run_server())

        # Stop on signal, or when the server exits by itself
        shutdown = asyncio.create_task(self._shutdown_event.wait())
        await asyncio.wait({task, shutdown}, return_when=asyncio.FIRST_COMPLETED)

        task.cancel()
        shutdown.cancel()
        await asyncio.gather(task, shutdown, return_exceptions=True)

        await self._cleanup()

    async def _run_server(self):
        """Run the SSE app with uvicorn."""
        try:
            app = self.server.sse_app()
            config = uvicorn.Config(
                app,
                host=self.settings.mcp_server_address,
                port=self.settings.mcp_server_port,
                log_level="debug" if self.settings.debug else "info",
            )
            server = uvicorn.Server(config)
            logger.info(f"Serving MCP over SSE on http://{self.settings.bind_address}/sse")
            await server.serve()
        except asyncio.CancelledError:
            logger.info("MCP server cancelled")
        except Exception as e:
            logger.error(f"MCP server error: {e}")
            raise

    async def _cleanup(self):
        """Cleanup resources."""
        logger.info("Cleaning up...")

        if self.toolkit:
            await self.toolkit.close()

        logger.info("Cleanup complete")

    def shutdown(self):
        """Signal shutdown."""
        logger.info("Shutdown requested")
        self._shutdown_event.set()


def main():
    """Main entry point."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)

    app = Application()

    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, app.shutdown)

    try:
        loop.run_until_complete(app.start())
    except DerivationError as e:
        logger.critical(f"Cannot derive signing accounts: {e}")
        sys.exit(1)
    except KeyboardInterrupt:
        logger.info("Keyboard interrupt received")
    finally:
        loop.close()


if __name__ == "__main__":
    main()
