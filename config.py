"""Runtime configuration from environment variables and an optional .env file."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

PROJECT_DIR = Path(__file__).parent
DEFAULT_SITES_FILE = PROJECT_DIR / "data" / "sites.yaml"
DEFAULT_API_TIMEOUT = 15


@dataclass
class AppConfig:
    """Configuration values shared by the CLI and the web app."""

    sites_file: Path = DEFAULT_SITES_FILE
    templates_file: Optional[Path] = None
    api_mode: str = "MOCK"  # MOCK = local YAML file, REMOTE = HTTP backend
    api_base_url: str = ""
    api_timeout: float = DEFAULT_API_TIMEOUT
    log_level: str = "INFO"
    secret_key: str = "dev-secret-key-change-in-prod"


def load_config(env_file: Optional[Path] = None) -> AppConfig:
    """Read configuration, loading a .env file from the project dir if present."""
    env_path = env_file or PROJECT_DIR / ".env"
    if env_path.exists():
        load_dotenv(env_path)

    templates = os.getenv("GUARD_TEMPLATES_FILE")
    return AppConfig(
        sites_file=Path(os.getenv("GUARD_SITES_FILE", str(DEFAULT_SITES_FILE))),
        templates_file=Path(templates) if templates else None,
        api_mode=os.getenv("GUARD_API_MODE", "MOCK").upper(),
        api_base_url=os.getenv("GUARD_API_BASE_URL", ""),
        api_timeout=float(os.getenv("GUARD_API_TIMEOUT", DEFAULT_API_TIMEOUT)),
        log_level=os.getenv("GUARD_LOG_LEVEL", "INFO").upper(),
        secret_key=os.getenv("SECRET_KEY", "dev-secret-key-change-in-prod"),
    )


def setup_logging(level: str = "INFO") -> None:
    """Console logging for the CLI and the web app."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
