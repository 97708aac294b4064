import logging
import os
import re
import sys
from logging.handlers import RotatingFileHandler

from colorama import Fore, Style
from colorama import init as colorama_init

from .config import IGDB_CLIENT_SECRET, LOG_LEVEL

BEARER_REGEX = re.compile(r"(Bearer\s+)[A-Za-z0-9._-]+")
ACCESS_TOKEN_REGEX = re.compile(r"(['\"]?access_token['\"]?\s*[:=]\s*['\"]?)[A-Za-z0-9._-]+")


class SensitiveDataFilter(logging.Filter):
    """Filter to mask the client secret and access tokens in logs."""

    def filter(self, record):
        def mask(text):
            if isinstance(text, str):
                if IGDB_CLIENT_SECRET and IGDB_CLIENT_SECRET in text:
                    text = text.replace(IGDB_CLIENT_SECRET, "***CLIENT_SECRET***")
                text = BEARER_REGEX.sub(r"\1***TOKEN***", text)
                text = ACCESS_TOKEN_REGEX.sub(r"\1***TOKEN***", text)
            return text

        record.msg = mask(record.msg)

        if record.args:
            if isinstance(record.args, tuple):
                record.args = tuple(mask(arg) for arg in record.args)
            elif isinstance(record.args, dict):
                record.args = {k: mask(v) for k, v in record.args.items()}

        return True


class ConsoleNoiseFilter(logging.Filter):
    """Keeps per-request debug chatter from the HTTP and DB libraries off the console."""

    def filter(self, record):
        if record.levelno < logging.WARNING and record.name.startswith(("aiohttp", "sqlalchemy", "aiosqlite")):
            return False
        return True


def setup_logging(log_dir: str = "logs"):
    force_color = os.getenv("FORCE_COLOR", "").lower() in ("1", "true")
    colorama_init(autoreset=True, strip=False if force_color else None)

    root = logging.getLogger()
    for handler in root.handlers[:]:
        root.removeHandler(handler)

    for f in root.filters[:]:
        if isinstance(f, SensitiveDataFilter):
            root.removeFilter(f)
    sensitive = SensitiveDataFilter()
    root.addFilter(sensitive)

    root.setLevel(logging.DEBUG)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(LOG_LEVEL)
    console_handler.setFormatter(
        logging.Formatter(
            f"{Fore.CYAN}%(asctime)s{Style.RESET_ALL} | "
            f"{Fore.GREEN}%(levelname)s{Style.RESET_ALL}: "
            f"{Fore.YELLOW}%(name)s{Style.RESET_ALL} - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    console_handler.addFilter(ConsoleNoiseFilter())
    # Root logger filters do not see records propagated from child loggers
    console_handler.addFilter(sensitive)
    root.addHandler(console_handler)

    os.makedirs(log_dir, exist_ok=True)
    file_handler = RotatingFileHandler(
        os.path.join(log_dir, "catalog.log"), maxBytes=5 * 1024 * 1024, backupCount=5, encoding="utf-8"
    )
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(
        logging.Formatter("%(asctime)s | %(levelname)s: %(name)s - %(message)s", datefmt="%Y-%m-%d %H:%M:%S")
    )
    file_handler.addFilter(sensitive)
    root.addHandler(file_handler)


def get_logger(name: str):
    return logging.getLogger(name)
