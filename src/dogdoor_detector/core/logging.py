import logging
import sys
import os
from dogdoor_detector.detection.config import runtime_config, RuntimeConfig

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

# Libraries that log every Bot API request at INFO
CHATTY_LOGGERS = ("httpx", "telegram")


def resolve_level(name: str) -> int:
    level = logging.getLevelName(name.upper())
    return level if isinstance(level, int) else logging.INFO


def setup_logging(config: RuntimeConfig = runtime_config) -> logging.Logger:
    """Configure the root logger for the detector.

    Logs always go to stdout, which the Termux session or service runner
    captures. A log file is added only when config.log_to_file is set.
    """
    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    level = resolve_level(config.log_level)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Remove any existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if config.log_to_file:
        os.makedirs(config.log_dir, exist_ok=True)
        handlers.append(logging.FileHandler(config.log_file))

    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)

    for name in CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    root_logger.debug(f"Logging configured: level={logging.getLevelName(level)} {config.log_to_file=}")
    return root_logger
