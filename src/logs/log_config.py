# src/logs/log_config.py
# logging configuration


###### IMPORT TOOLS ######
# global imports
import os
import logging
from logging.handlers import RotatingFileHandler

# local imports
from src.config import get_settings


# file-logger
os.makedirs(get_settings().LOG_DIR, exist_ok=True)
file_handler = RotatingFileHandler(
    get_settings().LOG_FILE,
    maxBytes=5 * 1024 * 1024,
    backupCount=5,
    encoding="utf-8",
)
file_handler.setFormatter(
    logging.Formatter("%(asctime)s | %(levelname)s | %(name)s | %(message)s")
)

# console-logger
console_handler = logging.StreamHandler()
console_handler.setFormatter(
    logging.Formatter("%(levelname)s | %(name)s | %(message)s")
)
console_handler.setLevel(logging.WARNING)

# root-logger
logging.basicConfig(
    level=logging.DEBUG if get_settings().DEBUG else logging.INFO,
    handlers=[console_handler, file_handler],
)

# module logger
logger = logging.getLogger("app")
logging.getLogger("asyncio").setLevel(logging.WARNING)
logging.getLogger("faker").setLevel(logging.WARNING)
