import logging
import os

from rich.console import Console
from rich.logging import RichHandler

DATE_FORMAT = "[%Y-%m-%d %H:%M:%S]"

# logger name -> (level normally, level under DEBUG)
THIRD_PARTY_LEVELS = {
    "twitchio": (logging.INFO, logging.DEBUG),
    "twitchio.http": (logging.WARNING, logging.DEBUG),
    "twitchio.websockets": (logging.WARNING, logging.DEBUG),
    "httpx": (logging.WARNING, logging.INFO),
    "uvicorn.access": (logging.WARNING, logging.WARNING),
    "asyncio": (logging.ERROR, logging.ERROR),
}


def _rich_handler() -> RichHandler:
    handler = RichHandler(
        console=Console(force_terminal=True, width=120),
        show_time=True,
        show_level=True,
        show_path=False,
        markup=True,
        rich_tracebacks=True,
        tracebacks_show_locals=False,
        tracebacks_width=120,
    )
    handler.setFormatter(logging.Formatter(fmt="%(message)s", datefmt=DATE_FORMAT))
    return handler


def setup_logging(log_level: str | None = None) -> None:
    """Configure the root logger; safe to call again once settings are known."""
    log_level = (log_level or os.getenv("LOG_LEVEL", "INFO")).upper()
    level = getattr(logging, log_level, logging.INFO)
    logger = logging.getLogger("Bot")

    try:
        # force=True: uvicorn may configure the root logger first
        logging.basicConfig(
            level=level,
            format="%(message)s",
            datefmt=DATE_FORMAT,
            handlers=[_rich_handler()],
            force=True,
        )
        logger.debug("[bold green]✓[/bold green] Rich logging enabled", extra={"markup": True})
    except Exception as e:
        logging.basicConfig(
            level=level,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
            force=True,
        )
        logger.warning(f"Failed to setup Rich logging: {e}, using standard logging")

    debug = level == logging.DEBUG
    for name, (normal, verbose) in THIRD_PARTY_LEVELS.items():
        logging.getLogger(name).setLevel(verbose if debug else normal)
