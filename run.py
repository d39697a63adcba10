import logging
import os

import uvicorn

from configwatch.api.server import create_app
from configwatch.container import Container
from configwatch.exceptions import RegistrationError
from configwatch.services.listeners import LoggingChangeListener

logger = logging.getLogger(__name__)


def _configure_logging():
    level_name = (os.getenv("CONFIGWATCH_LOG_LEVEL", "INFO") or "INFO").strip().upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format="%(asctime)s %(levelname)s [%(threadName)s] %(name)s: %(message)s",
    )


def register_watchers(client, namespaces, listener=None):
    """Register one logging listener on every namespace; returns the namespaces registered."""
    listener = listener or LoggingChangeListener()
    registered = []
    for namespace in namespaces:
        try:
            client.add_listener(namespace, listener)
            registered.append(namespace)
            logger.info("Watching namespace %s", namespace)
        except RegistrationError as e:
            logger.warning("Could not watch namespace %s: %s", namespace, e)
    return registered


def main(container: Container = None):
    _configure_logging()
    container = container or Container()
    env = container.config()
    client = container.config_client()

    namespaces = env.get("CONFIGWATCH_WATCH_NAMESPACES") or [env.get("CONFIGWATCH_NAMESPACE", "application")]
    register_watchers(client, namespaces)

    app = create_app(container)
    port = int(env.get("CONFIGWATCH_API_PORT") or 8000)
    logger.info("Status API listening on 0.0.0.0:%s", port)
    try:
        uvicorn.run(app, host="0.0.0.0", port=port)
    finally:
        logger.info("Shutting down")
        client.close(timeout=5)


if __name__ == '__main__':
    main()
