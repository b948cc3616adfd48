import os
from pathlib import Path
from typing import Dict, Optional

from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, Field

from notion_errors import ConfigError

from logging import getLogger
logger = getLogger(__name__)


class Settings(BaseModel):
    """Values read once at startup and handed to both components."""
    openai_api_key: str = Field(..., description="Bearer token for the chat completion service")
    notion_api_key: str = Field(..., description="Notion integration token")
    notion_page_id: str = Field(..., description="Page whose child blocks are used as context")
    log_level: str = Field("WARNING", description="Root logging level")

    model_config = {"frozen": True}


# Setting name -> environment variables checked in order.
ENV_VARS: Dict[str, tuple] = {
    "openai_api_key": ("OPENAI_API_KEY",),
    "notion_api_key": ("NOTION_API_KEY", "NOTION_TOKEN"),
    "notion_page_id": ("NOTION_PAGE_ID",),
}

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _first_set(names: tuple) -> Optional[str]:
    for name in names:
        value = (os.getenv(name) or "").strip()
        if value:
            return value
    return None


def load_settings(env_file: Optional[str] = None) -> Settings:
    """Load the ``.env`` file into the environment and build ``Settings``.

    Args:
        env_file: Explicit path to a dotenv file. When ``None`` the nearest
            ``.env`` found from the working directory upwards is used.

    Raises:
        ConfigError: No env file can be found, or a required
            variable is unset or blank.
    """
    if env_file is not None:
        if not Path(env_file).is_file():
            raise ConfigError(f"Error loading env file: {env_file} not found")
        load_dotenv(env_file)
    else:
        found = find_dotenv(usecwd=True)
        if not found:
            raise ConfigError("Error loading .env file: none found from the working directory")
        logger.debug("Loading settings from %s", found)
        load_dotenv(found)

    values: Dict[str, str] = {}
    missing = []
    for field, names in ENV_VARS.items():
        value = _first_set(names)
        if value is None:
            missing.append(names[0])
        else:
            values[field] = value
    if missing:
        raise ConfigError(f"Missing required environment variables: {', '.join(missing)}")

    log_level = (os.getenv("LOG_LEVEL") or "WARNING").strip().upper()
    if log_level not in LOG_LEVELS:
        raise ConfigError(f"Invalid LOG_LEVEL {log_level!r}, expected one of {', '.join(LOG_LEVELS)}")
    return Settings(log_level=log_level, **values)
