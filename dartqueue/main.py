import logging
import sys

import uvicorn
from dotenv import load_dotenv

from dartqueue.api.app import build_runtime, create_app
from dartqueue.core.config import PROJECT_DIR, validate_env_vars
from dartqueue.core.logging import setup_logging

LOGGER: logging.Logger = logging.getLogger("Bot")


def main() -> None:
    load_dotenv(dotenv_path=PROJECT_DIR / ".env")
    setup_logging()

    try:
        settings = validate_env_vars()
    except ValueError:
        LOGGER.critical("Missing or invalid configuration, see the errors above")
        sys.exit(1)

    setup_logging(settings.log_level)

    runtime = build_runtime(settings)
    app = create_app(runtime=runtime)
    port = runtime.repos.config.load().port

    LOGGER.info(f"Listening on http://{settings.host}:{port}")
    uvicorn.run(app, host=settings.host, port=port, log_config=None)


if __name__ == "__main__":
    main()
