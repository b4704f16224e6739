import logging
import json
import os
from pathlib import Path
import threading


ROOT_LOGGER_NAME = "backoffice"


class SingletonLogger:
    """
    Singleton logger that configures the handler tree only once per process.

    Child loggers (``backoffice.workflow``, ``backoffice.routes.orders`` ...)
    propagate to the configured root so every module shares the same handlers.
    """
    _instance = None
    _lock = threading.Lock()
    _root = None
    _initialized = False

    def __new__(cls):
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super(SingletonLogger, cls).__new__(cls)
        return cls._instance

    def __init__(self):
        if not self._initialized:
            with self._lock:
                if not self._initialized:
                    self._root = None
                    self._initialized = True

    def get_logger(self, name: str = ROOT_LOGGER_NAME) -> logging.Logger:
        """
        Get a logger attached to the singleton handler tree.

        Args:
            name (str): Dotted logger name, rooted at "backoffice"

        Returns:
            logging.Logger: Configured logger instance
        """
        if self._root is None:
            with self._lock:
                if self._root is None:
                    self._root = self._create_logger()
        if name == ROOT_LOGGER_NAME:
            return self._root
        if not name.startswith(ROOT_LOGGER_NAME + "."):
            name = f"{ROOT_LOGGER_NAME}.{name}"
        return logging.getLogger(name)

    def _create_logger(self) -> logging.Logger:
        """
        Create the root application logger with file and console handlers.

        File handlers are skipped when LOG_TO_FILE is false (the test suite
        and read-only containers set it).
        """
        logger = logging.getLogger(ROOT_LOGGER_NAME)
        logger.setLevel(logging.DEBUG)
        logger.propagate = False

        # Clear any existing handlers
        logger.handlers.clear()

        formatter = JsonFormatter({
            "timestamp": "asctime",
            "level": "levelname",
            "logger": "name",
            "module": "module",
            "function": "funcName",
            "line": "lineno",
            "message": "message"
        })

        log_to_file = os.environ.get("LOG_TO_FILE", "True").lower() in ("true", "1", "yes", "on")
        if log_to_file:
            logs_dir = Path(os.environ.get("LOG_DIR", "logs"))
            logs_dir.mkdir(parents=True, exist_ok=True)

            file_handler = logging.FileHandler(logs_dir / "backoffice.log", mode="a", encoding="utf-8")
            file_handler.setLevel(logging.INFO)
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)

            error_file_handler = logging.FileHandler(logs_dir / "errors.log", mode="a", encoding="utf-8")
            error_file_handler.setLevel(logging.ERROR)
            error_file_handler.setFormatter(formatter)
            logger.addHandler(error_file_handler)

        console_handler = logging.StreamHandler()
        console_level = os.environ.get("LOG_LEVEL", "DEBUG").upper()
        console_handler.setLevel(getattr(logging, console_level, logging.DEBUG))
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

        return logger


class JsonFormatter(logging.Formatter):
    """
    Formatter that outputs JSON strings after parsing the LogRecord.

    @param dict fmt_dict: Key: logging format attribute pairs. Defaults to {"message": "message"}.
    @param str time_format: time.strftime() format string. Default: "%Y-%m-%dT%H:%M:%S"
    @param str msec_format: Microsecond formatting. Appended at the end. Default: "%s.%03dZ"
    """
    def __init__(self, fmt_dict: dict = None, time_format: str = "%Y-%m-%dT%H:%M:%S", msec_format: str = "%s.%03dZ"):
        super().__init__()
        self.fmt_dict = fmt_dict if fmt_dict is not None else {"message": "message"}
        self.default_time_format = time_format
        self.default_msec_format = msec_format
        self.datefmt = None

    def usesTime(self) -> bool:
        return "asctime" in self.fmt_dict.values()

    def formatMessage(self, record) -> dict:
        """
        Return a dictionary of the relevant LogRecord attributes instead of a string.
        KeyError is raised if an unknown attribute is provided in the fmt_dict.
        """
        return {fmt_key: record.__dict__[fmt_val] for fmt_key, fmt_val in self.fmt_dict.items()}

    def format(self, record) -> str:
        record.message = record.getMessage()

        if self.usesTime():
            record.asctime = self.formatTime(record, self.datefmt)

        message_dict = self.formatMessage(record)

        if record.exc_info:
            # Cache the traceback text, it is constant for the record
            if not record.exc_text:
                record.exc_text = self.formatException(record.exc_info)

        if record.exc_text:
            message_dict["exc_info"] = record.exc_text

        if record.stack_info:
            message_dict["stack_info"] = self.formatStack(record.stack_info)

        return json.dumps(message_dict, default=str)


def get_logger(name: str = ROOT_LOGGER_NAME) -> logging.Logger:
    """
    Get a logger from the singleton handler tree.

    Args:
        name (str): Logger name, e.g. "backoffice.workflow"

    Returns:
        logging.Logger: Logger that writes through the shared handlers
    """
    return SingletonLogger().get_logger(name)
