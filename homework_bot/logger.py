import logging, os
from logging.handlers import RotatingFileHandler

FORMAT = '%(asctime)s | %(levelname)s | %(name)s | %(message)s'
DATEFMT = '%Y-%m-%d %H:%M:%S'

# third-party loggers that drown the bot's own lines
QUIET = {
    "aiogram.event": logging.INFO,
    "aiohttp.access": logging.WARNING,
    "filelock": logging.WARNING,
}

def setup_logging(level: str = "INFO", log_dir: str = "logs") -> None:
    """Console always; rotating bot.log under log_dir unless log_dir is empty."""
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        handlers.append(RotatingFileHandler(os.path.join(log_dir, "bot.log"),
                                            maxBytes=2_000_000, backupCount=3, encoding="utf-8"))
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=FORMAT,
        datefmt=DATEFMT,
        handlers=handlers,
    )
    for name, lvl in QUIET.items():
        logging.getLogger(name).setLevel(lvl)
