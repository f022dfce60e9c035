import logging
import re
import sys
from datetime import datetime
from os import PathLike
from pathlib import Path

from colorama import Fore, Style, init


class ColorFormatter(logging.Formatter):
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.color_map = {
            logging.DEBUG: Fore.CYAN,
            logging.INFO: Fore.GREEN,
            logging.WARNING: Fore.YELLOW,
            logging.ERROR: Fore.RED,
            logging.CRITICAL: Fore.MAGENTA,
        }

    def format(self, record):
        color = self.color_map.get(record.levelno, Fore.WHITE)
        message = super().format(record)
        return f"{color}{message}{Style.RESET_ALL}"


class Logger:
    def __init__(
        self,
        name: str,
        log_dir: str | PathLike | None = None,
        level: int = logging.INFO,
    ):
        # Initialize colorama
        init()

        self.logger = logging.getLogger(name)
        self.logger.setLevel(level)

        has_console = any(
            isinstance(h, logging.StreamHandler)
            and not isinstance(h, logging.FileHandler)
            for h in self.logger.handlers
        )
        has_file = any(isinstance(h, logging.FileHandler) for h in self.logger.handlers)

        format_string_console = (
            f"{Style.BRIGHT}%(levelname)-10s "
            + f"{Style.DIM}%(name)-20s "
            + "%(module)s.%(funcName)-30s "
            + f"{Style.RESET_ALL}%(message)s"
        )

        # Loggers are process-wide; each handler is attached once per name
        if not has_console:
            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.setFormatter(ColorFormatter(format_string_console))
            self.logger.addHandler(console_handler)

        if log_dir is not None and not has_file:
            Path(log_dir).mkdir(parents=True, exist_ok=True)
            format_string_file = re.sub(
                r"\x1b\[[0-9;]*m", "", "%(asctime)s - " + format_string_console
            )
            file_handler = logging.FileHandler(
                Path(log_dir) / f"{datetime.now().strftime('%Y-%m-%d')}.log"
            )
            file_handler.setFormatter(logging.Formatter(format_string_file))
            self.logger.addHandler(file_handler)

    def get_logger(self):
        return self.logger
