import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from colorama import Fore, Style, init

init(autoreset=True)


class ColoredFormatter(logging.Formatter):
    """Custom formatter with color support for console output."""
    COLORS = {
        'DEBUG': Fore.WHITE + Style.DIM,
        'INFO': Fore.CYAN,
        'WARNING': Fore.YELLOW,
        'ERROR': Fore.RED,
        'CRITICAL': Fore.RED + Style.BRIGHT,
    }
    RESET = Style.RESET_ALL

    def format(self, record):
        record = logging.makeLogRecord(record.__dict__)
        if record.levelname in self.COLORS:
            record.levelname = f"{self.COLORS[record.levelname]}{record.levelname}{self.RESET}"
        return super().format(record)


class LoggingConfigurator:
    """Configures package-wide logging from the 'logging' config section."""

    FORMAT = '[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s'
    DATEFMT = '%Y-%m-%d %H:%M:%S'

    def __init__(self, config: dict, logger_name: str = 'crossvalidation'):
        self.config = config.get('logging', {})
        self.log_level = getattr(logging, self.config.get('level', 'INFO').upper())
        self.log_dir = Path(self.config.get('log_dir', 'logs'))
        self.logger_name = logger_name

    def setup(self) -> logging.Logger:
        """Attach console and file handlers to the package logger."""
        logger = logging.getLogger(self.logger_name)
        logger.setLevel(self.log_level)
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()

        if self.config.get('log_to_console', True):
            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.setLevel(self.log_level)

            if self.config.get('colorful_console', True):
                formatter = ColoredFormatter(self.FORMAT, datefmt=self.DATEFMT)
            else:
                formatter = logging.Formatter(self.FORMAT, datefmt=self.DATEFMT)

            console_handler.setFormatter(formatter)
            logger.addHandler(console_handler)

        if self.config.get('log_to_file', False):
            self._add_file_handler(logger, "crossvalidation.log")

        return logger

    def _add_file_handler(self, logger: logging.Logger, filename: str):
        self.log_dir.mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(
            self.log_dir / filename,
            maxBytes=10*1024*1024,
            backupCount=5,
            encoding='utf-8'
        )
        handler.setLevel(logging.DEBUG)
        formatter = logging.Formatter('[%(asctime)s] [%(levelname)s] [%(name)s] [%(funcName)s] %(message)s')
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    def get_logger(self, name: str) -> logging.Logger:
        return logging.getLogger(f"{self.logger_name}.{name}")
