"""
Saltbox Entry Point.

The saltbox console command embeds Gunicorn to run the Flask API
(api.app.create_app) as a production WSGI application:

1. Configures root logging (rotating file + stdout)
2. Loads config.yml (see config.load_config)
3. Builds the key-value store named in the storage section
4. Creates the Flask app and serves it through Gunicorn

Example:
    $ poetry run saltbox
    $ poetry run saltbox --debug
"""

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(config: Dict[str, Any], debug: bool = False) -> None:
    """Configure the root logger from the logging section of the configuration.

    Adds a 10MB rotating file handler (3 backups) when a log file is
    configured, and always a stdout handler.
    """
    logging_config = config.get("logging", {}) or {}
    if debug:
        log_level = logging.DEBUG
    else:
        log_level = getattr(logging, str(logging_config.get("level", "INFO")).upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Clear any existing handlers to avoid duplicates (e.g., from gunicorn)
    root_logger.handlers.clear()

    formatter = logging.Formatter(LOG_FORMAT)

    log_file = logging_config.get("file")
    if log_file:
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=10 * 1024 * 1024,  # 10MB
            backupCount=3
        )
        file_handler.setLevel(log_level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)


def main(debug: bool = False, config_path: Optional[str] = None) -> None:
    """Main entry point for the saltbox console command.

    Args:
        debug: Enable DEBUG logging and disable the worker timeout.
               Can be set via --debug flag or SALTBOX_DEBUG environment variable.
        config_path: Optional explicit path to config.yml
    """
    from gunicorn.app.base import BaseApplication
    from api.app import create_app
    from config import load_config, is_debug_enabled
    from storage import create_store

    if not debug:
        debug = is_debug_enabled() or "--debug" in sys.argv[1:]

    config = load_config(config_path)
    configure_logging(config, debug)

    if debug:
        logger.info("Debug mode enabled: verbose logging and worker timeout disabled")

    store = create_store(config)
    app = create_app(config=config, store=store)

    server_config = config.get("server", {}) or {}
    gunicorn_config_path = os.path.join(os.path.dirname(__file__), "..", "api", "gunicorn_config.py")

    class StandaloneApplication(BaseApplication):
        """Custom Gunicorn application for embedding within the saltbox entry point."""

        def __init__(self, app, options=None):
            self.options = options or {}
            self.application = app
            super().__init__()

        def load_config(self):
            config_file = self.options.get("config")
            if config_file:
                with open(config_file, "r") as f:
                    config_code = f.read()
                config_namespace = {}
                exec(config_code, config_namespace)
                for key, value in config_namespace.items():
                    if key in self.cfg.settings and value is not None:
                        self.cfg.set(key.lower(), value)

            if self.options.get("bind"):
                self.cfg.set("bind", self.options["bind"])
            if self.options.get("workers"):
                self.cfg.set("workers", int(self.options["workers"]))
            if self.options.get("debug"):
                self.cfg.set("timeout", 0)
                self.cfg.set("loglevel", "debug")

        def load(self):
            return self.application

    options = {
        "config": gunicorn_config_path,
        "debug": debug,
        "bind": server_config.get("bind"),
        "workers": server_config.get("workers"),
    }
    logger.info(f"Starting Saltbox API on {options['bind'] or 'default bind'}")
    StandaloneApplication(app, options).run()


# Allow running as a script for development/testing
if __name__ == "__main__":
    main()
