"""
main.py — Single entry point.

Validates configuration, builds the LLM provider, search backend and
analysis pipeline once, then serves the HTTP API until SIGINT/SIGTERM.
"""
import asyncio
import logging
import signal
import sys

import config

_handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
if config.LOG_FILE:
    _handlers.append(logging.FileHandler(config.LOG_FILE, encoding="utf-8"))

logging.basicConfig(
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    level=getattr(logging, config.LOG_LEVEL, logging.INFO),
    handlers=_handlers,
)
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)
logging.getLogger("openai").setLevel(logging.WARNING)
logging.getLogger("aiohttp.access").setLevel(logging.WARNING)

logger = logging.getLogger(__name__)


async def run() -> None:
    from analysis import build_orchestrator, build_pipeline
    from providers.manager import build_provider
    from server import start_server
    from web_search import build_backend

    provider = build_provider()
    try:
        backend = build_backend()
        logger.info("Search backend: %s", backend.name)
    except RuntimeError as exc:
        logger.critical("FATAL: %s", exc)
        raise

    pipeline = build_pipeline(provider, build_orchestrator(backend))
    runner = await start_server(pipeline)

    stop_event = asyncio.Event()

    def _stop(*_):
        logger.info("Shutdown signal received.")
        stop_event.set()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, _stop)
        except (NotImplementedError, RuntimeError):
            # Windows doesn't support add_signal_handler for all signals
            pass

    try:
        await stop_event.wait()
    finally:
        logger.info("Shutting down…")
        await runner.cleanup()
        logger.info("Goodbye.")


def main() -> None:
    missing = config.missing_required_settings()
    if missing:
        for name in missing:
            logger.critical("Missing required environment variable: %s", name)
        sys.exit(1)
    try:
        asyncio.run(run())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
