"""
Logging Configuration Module

Queue-based logging for the gate service. Request threads only enqueue log
records; a single listener thread writes them, so lines from concurrent
requests never interleave. Chatty HTTP and LLM SDK loggers are quieted.
"""

import logging
import logging.handlers
import sys
from queue import Queue
from typing import Optional

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s"

# Loggers that log every HTTP round trip to the store or the LLM provider
NOISY_LOGGERS = (
    "urllib3",
    "requests",
    "httpx",
    "httpcore",
    "anthropic",
    "openai",
    "langchain_core",
    "langchain_anthropic",
    "langchain_openai",
    "langchain_deepseek",
)


class QueueLoggingConfig:
    """Thread-safe logging configuration with queue-based logging."""

    def __init__(self):
        self._log_listener: Optional[logging.handlers.QueueListener] = None
        self._log_queue: Optional[Queue] = None

    @property
    def is_running(self) -> bool:
        return self._log_listener is not None

    def setup_logging(self, debug: bool = False) -> None:
        """
        Route all logging through a queue and a single writer thread.

        Args:
            debug: Whether to enable debug logging and keep library loggers verbose
        """
        if self.is_running:
            self.stop()

        self._log_queue = Queue()

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(logging.Formatter(LOG_FORMAT))

        self._log_listener = logging.handlers.QueueListener(
            self._log_queue, console_handler, respect_handler_level=True
        )
        self._log_listener.start()

        root_logger = logging.getLogger()
        root_logger.handlers.clear()
        root_logger.addHandler(logging.handlers.QueueHandler(self._log_queue))
        root_logger.setLevel(logging.DEBUG if debug else logging.INFO)

        if not debug:
            self._silence_noisy_libraries()

    def _silence_noisy_libraries(self) -> None:
        """Raise library loggers to WARNING; HTTP transport loggers to CRITICAL."""
        for name in NOISY_LOGGERS:
            logger = logging.getLogger(name)
            if name in ("httpx", "httpcore"):
                logger.setLevel(logging.CRITICAL)
            else:
                logger.setLevel(logging.WARNING)

    def stop(self) -> None:
        """Stop the logging listener and cleanup."""
        if self._log_listener:
            self._log_listener.stop()
            self._log_listener = None
        self._log_queue = None


# Global logging configuration instance
logging_config = QueueLoggingConfig()


def setup_logging(debug: bool = False) -> None:
    """
    Setup thread-safe logging configuration.

    Args:
        debug: Whether to enable debug logging
    """
    logging_config.setup_logging(debug)


def stop_logging() -> None:
    """Stop the logging listener and cleanup."""
    logging_config.stop()
