"""
Local configuration stored in ~/.gatorconfig.json.
"""
import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = ".gatorconfig.json"


def get_config_file_path() -> Path:
    return Path.home() / CONFIG_FILE_NAME


@dataclass
class Config:
    db_url: str = ""
    current_user_name: str = ""

    @property
    def database_url(self) -> str:
        """Connection string, with DATABASE_URL taking precedence."""
        return os.getenv("DATABASE_URL") or self.db_url

    def set_user(self, username: str) -> None:
        """Switch the current user and persist the whole config."""
        self.current_user_name = username
        write(self)


def read() -> Config:
    """Read the config file.

    Raises:
        FileNotFoundError: If the config file has not been created
        ValueError: If the file is not a JSON object
    """
    path = get_config_file_path()
    with open(path, encoding="utf-8") as f:
        data = json.load(f)

    if not isinstance(data, dict):
        raise ValueError(f"{path} must contain a JSON object")

    return Config(
        db_url=data.get("db_url", ""),
        current_user_name=data.get("current_user_name", ""),
    )


def write(cfg: Config) -> None:
    path = get_config_file_path()
    payload = json.dumps({"db_url": cfg.db_url, "current_user_name": cfg.current_user_name})

    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
    with os.fdopen(fd, "w", encoding="utf-8") as f:
        f.write(payload)

    logger.info(f"Wrote config to {path}")
