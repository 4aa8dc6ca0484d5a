"""
Logging Configuration Module

Thread-safe logging setup for the ranking engine. Scoring runs in a worker
pool, so records go through a queue and are written by a single listener.
"""

import logging
import logging.handlers
import sys
from queue import Queue
from typing import Iterable, Optional

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s"

NOISY_LOGGERS = ("werkzeug", "urllib3", "asyncio")


class ThreadSafeLoggingConfig:
    """Queue-based logging configuration."""

    def __init__(self):
        self._log_listener: Optional[logging.handlers.QueueListener] = None
        self._log_queue: Optional[Queue] = None
        self._queue_handler: Optional[logging.handlers.QueueHandler] = None

    def setup_logging(self, debug: bool = False, noisy_loggers: Iterable[str] = NOISY_LOGGERS) -> None:
        """
        Route all log records through a QueueHandler drained by one listener.

        Args:
            debug: Whether to enable debug logging
            noisy_loggers: Third-party loggers capped at WARNING unless debugging
        """
        self.stop()
        self._log_queue = Queue()
        queue_handler = logging.handlers.QueueHandler(self._log_queue)
        self._queue_handler = queue_handler

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(logging.Formatter(LOG_FORMAT))

        self._log_listener = logging.handlers.QueueListener(
            self._log_queue, console_handler, respect_handler_level=True
        )
        self._log_listener.start()

        root_logger = logging.getLogger()
        root_logger.handlers.clear()
        root_logger.addHandler(queue_handler)
        root_logger.setLevel(logging.DEBUG if debug else logging.INFO)

        if not debug:
            for name in noisy_loggers:
                logging.getLogger(name).setLevel(logging.WARNING)

    def stop(self) -> None:
        """Stop the logging listener and cleanup."""
        if self._queue_handler:
            logging.getLogger().removeHandler(self._queue_handler)
            self._queue_handler = None
        if self._log_listener:
            self._log_listener.stop()
            self._log_listener = None
        self._log_queue = None

    @property
    def running(self) -> bool:
        return self._log_listener is not None


# Global logging configuration instance
logging_config = ThreadSafeLoggingConfig()


def setup_logging(debug: bool = False) -> None:
    """Setup thread-safe logging configuration."""
    logging_config.setup_logging(debug)


def stop_logging() -> None:
    """Stop the logging listener and cleanup."""
    logging_config.stop()


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
