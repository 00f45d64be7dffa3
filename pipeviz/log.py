import logging
from enum import Enum
from typing import Optional


class LogLevel(Enum):
    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARNING = logging.WARNING
    ERROR = logging.ERROR
    CRITICAL = logging.CRITICAL


LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


class LogConfig:
    """Where the ``pipeviz`` logger writes and how verbosely."""
    DEFAULT_LOG_FILE = "pipeviz.log"

    def __init__(self,
                 log_file: str = DEFAULT_LOG_FILE,
                 log_level: LogLevel = LogLevel.INFO,
                 console_level: LogLevel = LogLevel.WARNING,
                 file_level: LogLevel = LogLevel.DEBUG,
                 enable_console_output: bool = True,
                 enable_file_output: bool = False):
        self.log_file = log_file
        self.log_level = log_level
        self.console_level = console_level
        self.file_level = file_level
        self.enable_console_output = enable_console_output
        self.enable_file_output = enable_file_output


def _handler(handler: logging.Handler, level: LogLevel) -> logging.Handler:
    handler.setLevel(level.value)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    return handler


def setup_logging(config: Optional[LogConfig] = None) -> logging.Logger:
    config = config or LogConfig()
    logger = logging.getLogger("pipeviz")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    handlers = []
    if config.enable_console_output:
        handlers.append(_handler(logging.StreamHandler(), config.console_level))
    if config.enable_file_output:
        handlers.append(_handler(logging.FileHandler(config.log_file, mode='a', encoding='utf-8'),
                                 config.file_level))
    # the most verbose handler decides what reaches the handlers
    logger.setLevel(min([config.log_level.value] + [h.level for h in handlers]))
    for handler in handlers:
        logger.addHandler(handler)

    logger.info("Logging system initialized.")
    if config.enable_file_output:
        logger.info(f"Log outputting to file: {config.log_file} (level: {config.file_level.name})")
    if config.enable_console_output:
        logger.info(f"Log outputting to console (level: {config.console_level.name})")
    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    return logging.getLogger(name)
