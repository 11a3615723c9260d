import os
import sys
import threading

import logfire
from loguru import logger


class SingletonLogger:
    _instance = None
    _lock = threading.Lock()

    def __new__(cls):
        if not cls._instance:
            with cls._lock:
                if not cls._instance:
                    cls._instance = super(SingletonLogger, cls).__new__(cls)
                    cls._instance._init_logger()
        return cls._instance

    def _init_logger(self):
        logger.remove()  # Remove default console handler
        logfire.configure(
            token=os.getenv("LOGFIRE_TOKEN"),
            send_to_logfire="if-token-present",
            service_name="terra-guard-api",
            service_version="1.0.0",
            environment=os.getenv("ENVIRONMENT", "development"),
        )
        logger.configure(handlers=[logfire.loguru_handler()])
        logger.add(
            sys.stderr,
            level=os.getenv("LOG_LEVEL", "INFO"),
            format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
            backtrace=True,
        )
        self.logger = logger

    def get_logger(self):
        return self.logger
