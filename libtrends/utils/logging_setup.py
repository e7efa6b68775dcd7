import os
import logging
import logging.handlers
from datetime import datetime

_FORMAT = "%(asctime)s %(levelname)s %(name)s - %(message)s"


def _ensure_dir(path: str):
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)


def _timestamped_rotation(log_file: str, fh: logging.handlers.RotatingFileHandler) -> None:
    # Rolled files become "<base>.<timestamp><ext>" instead of "<file>.1"
    def namer(default_name: str) -> str:
        base, ext = os.path.splitext(log_file)
        ts = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
        return f"{base}.{ts}{ext}"

    def rotator(source: str, dest: str):
        ts_path = namer(dest)
        if os.path.exists(ts_path):
            os.remove(ts_path)
        os.replace(source, ts_path)

    fh.namer = namer
    fh.rotator = rotator


def configure_logging_from_env(logger_name: str) -> logging.Logger:
    """Return a named logger wired to console (and optionally a rotating file).

    Settings come from LOG_LEVEL, LOG_TO_FILE, LOG_FILE, LOG_ROTATE
    ("size" or "time"), LOG_MAX_BYTES, LOG_BACKUP_COUNT, LOG_WHEN and
    LOG_INTERVAL. Calling it twice for the same name does not stack handlers.
    """
    log_to_file = os.getenv("LOG_TO_FILE", "false").lower() == "true"
    log_file = os.getenv("LOG_FILE", "logs/libtrends.log")
    log_level = getattr(logging, os.getenv("LOG_LEVEL", "INFO").upper(), logging.INFO)
    rotate_mode = os.getenv("LOG_ROTATE", "size").lower()
    max_bytes = int(os.getenv("LOG_MAX_BYTES", "1048576"))
    backup_count = int(os.getenv("LOG_BACKUP_COUNT", "10"))
    when = os.getenv("LOG_WHEN", "midnight")
    interval = int(os.getenv("LOG_INTERVAL", "1"))

    logger = logging.getLogger(logger_name)
    logger.setLevel(log_level)
    logger.propagate = False
    if logger.handlers:
        return logger

    formatter = logging.Formatter(_FORMAT)

    ch = logging.StreamHandler()
    ch.setLevel(log_level)
    ch.setFormatter(formatter)
    logger.addHandler(ch)

    if log_to_file:
        _ensure_dir(log_file)
        if rotate_mode == "time":
            fh = logging.handlers.TimedRotatingFileHandler(
                log_file, when=when, interval=interval, backupCount=backup_count, encoding="utf-8"
            )
            fh.suffix = "%Y-%m-%d_%H-%M-%S"
        else:
            fh = logging.handlers.RotatingFileHandler(
                log_file, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
            )
            _timestamped_rotation(log_file, fh)

        fh.setLevel(log_level)
        fh.setFormatter(formatter)
        logger.addHandler(fh)

    return logger
