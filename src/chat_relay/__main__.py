import sys

import uvicorn
from dotenv import load_dotenv
from loguru import logger

from chat_relay.api import create_app
from chat_relay.app_config import load_json_config, parse_app_config, resolve_credentials
from chat_relay.bootstrap import bootstrap_runtime
from chat_relay.logging_config import setup_logging


def main() -> None:
    load_dotenv()

    try:
        app_config = parse_app_config(load_json_config())
        log_descriptions = setup_logging(level=app_config.log_level, consumers=app_config.log_consumers)
    except ValueError as ex:
        logger.error(f"Invalid configuration: {ex}")
        sys.exit(1)

    credentials = resolve_credentials(app_config.provider_name)
    runtime = bootstrap_runtime(app_config, credentials)

    logger.info(f"Logging: {', '.join(log_descriptions)}")
    logger.info(f"History store: {runtime.memory_store.path}")
    logger.info(f"Server running on port {app_config.port}")
    logger.info(f"Debug: http://localhost:{app_config.port}/api/debug")

    try:
        uvicorn.run(
            create_app(runtime),
            host=app_config.host,
            port=app_config.port,
            log_config=None,
        )
    finally:
        runtime.close()


if __name__ == "__main__":
    main()
