import logging
import os
from logging.handlers import RotatingFileHandler

import yaml

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))

CONFIG_ENV_VAR = "CRICKET_SCORING_CONFIG"

DEFAULTS = {
    "default_format": "T20",
    "logging": {
        "level": "INFO",
        "file": os.path.join("logs", "scoring.log"),
        "max_bytes": 10 * 1024 * 1024,
        "backup_count": 5,
    },
}

_config_cache = None


def config_path():
    return os.environ.get(CONFIG_ENV_VAR) or os.path.join(PROJECT_ROOT, "config", "config.yaml")


def load_config(reload=False):
    """Read config.yaml once, layered over DEFAULTS."""
    global _config_cache
    if _config_cache is not None and not reload:
        return _config_cache

    path = config_path()
    data = {}
    if os.path.exists(path):
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    else:
        logging.getLogger(__name__).warning(f"{path} not found, using default configuration")

    config = dict(DEFAULTS)
    config.update({k: v for k, v in data.items() if k != "logging"})
    config["logging"] = {**DEFAULTS["logging"], **(data.get("logging") or {})}
    _config_cache = config
    return config


def setup_logging(config=None):
    """Log to a rotating file and the terminal."""
    config = config or load_config()
    settings = config["logging"]
    level = getattr(logging, str(settings["level"]).upper(), logging.INFO)

    log_path = settings["file"]
    if not os.path.isabs(log_path):
        log_path = os.path.join(PROJECT_ROOT, log_path)
    os.makedirs(os.path.dirname(log_path), exist_ok=True)

    # Clear existing handlers to avoid duplicates
    for handler in logging.root.handlers[:]:
        logging.root.removeHandler(handler)

    file_handler = RotatingFileHandler(
        log_path,
        maxBytes=int(settings["max_bytes"]),
        backupCount=int(settings["backup_count"]),
        encoding="utf-8",
    )
    console_handler = logging.StreamHandler()

    formatter = logging.Formatter("%(asctime)s - %(levelname)s - %(message)s")
    for handler in (file_handler, console_handler):
        handler.setLevel(level)
        handler.setFormatter(formatter)

    logging.basicConfig(level=level, handlers=[file_handler, console_handler])
    return logging.getLogger("cricket_scoring")
