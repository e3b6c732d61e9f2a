import logging
import os
import platform
import sys
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Final

import yaml


def get_app_data_dir() -> Path:
    """Get the platform-appropriate directory for application data."""

    system = platform.system()
    home = Path.home()

    if system == "Darwin":  # macOS
        app_dir = home / "Library" / "Application Support" / "deckshare"
    elif system == "Windows":
        appdata = os.environ.get("APPDATA")
        if appdata:
            app_dir = Path(appdata) / "deckshare"
        else:
            app_dir = home / "AppData" / "Roaming" / "deckshare"
    else:  # Linux and other Unix-like systems
        # Follow XDG Base Directory Specification

        xdg_data_home = os.environ.get("XDG_DATA_HOME")
        if xdg_data_home:
            app_dir = Path(xdg_data_home) / "deckshare"
        else:
            app_dir = home / ".local" / "share" / "deckshare"

    app_dir.mkdir(parents=True, exist_ok=True)
    return app_dir


APP_DATA_DIR = get_app_data_dir()
DB_PATH = APP_DATA_DIR / "deckshare.db"
DB_CONNECTION_STRING = os.environ.get(
    "DECKSHARE_DATABASE_URL", f"sqlite:///{DB_PATH}"
)
CONFIG_PATH = Path(os.environ.get("DECKSHARE_CONFIG", APP_DATA_DIR / "config.yaml"))


def setup_logger() -> logging.Logger:
    logger = logging.getLogger("deckshare")
    logger.setLevel(logging.DEBUG)

    c_handler = logging.StreamHandler(sys.stdout)
    log_file = APP_DATA_DIR / "deckshare.log"
    f_handler = logging.FileHandler(log_file)
    c_handler.setLevel(logging.INFO)
    f_handler.setLevel(logging.DEBUG)

    log_format = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )
    c_handler.setFormatter(log_format)
    f_handler.setFormatter(log_format)

    logger.addHandler(c_handler)
    logger.addHandler(f_handler)

    return logger


LOGGER: Final[logging.Logger] = setup_logger()


@dataclass
class Settings:
    """Site-wide settings read from the YAML config file."""

    site_url: str = "http://localhost:8000"
    email_sender_address: str = "noreply@deckshare.local"
    mail_relay_url: str | None = None
    mail_timeout: int = 10
    page_size: int = 30

    def decklist_url(self, decklist_id: int, name_canonical: str) -> str:
        return f"{self.site_url.rstrip('/')}/decklist/view/{decklist_id}/{name_canonical}"

    @property
    def profile_url(self) -> str:
        return f"{self.site_url.rstrip('/')}/user/profile_edit"


def load_settings(path: Path | None = None) -> Settings:
    """
    Load settings from a YAML file.
    A missing file yields the defaults; unknown keys are ignored.
    """
    config_path = path or CONFIG_PATH
    if not config_path.exists():
        return Settings()

    with open(config_path) as f:
        raw = yaml.safe_load(f) or {}

    known = {f.name for f in fields(Settings)}
    ignored = set(raw) - known
    if ignored:
        LOGGER.warning(f"Ignoring unknown settings in {config_path}: {sorted(ignored)}")
    return Settings(**{key: value for key, value in raw.items() if key in known})


SETTINGS: Final[Settings] = load_settings()
