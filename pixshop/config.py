from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Load .env if present to populate environment variables
load_dotenv()  # searches for .env in CWD/parents

DEFAULT_MODEL = "gemini-2.5-flash-image-preview"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def get_api_key() -> Optional[str]:
    for name in ("GEMINI_API_KEY", "API_KEY"):
        key = os.getenv(name)
        if key:
            return key
    # Optional: read from ~/.config/gemini/api_key
    cfg_path = Path.home() / ".config" / "gemini" / "api_key"
    try:
        if cfg_path.exists():
            return cfg_path.read_text().strip() or None
    except OSError:
        return None
    return None


@dataclass(frozen=True)
class Settings:
    api_key: Optional[str]
    model: str = DEFAULT_MODEL
    log_level: str = "INFO"


def load_settings() -> Settings:
    return Settings(
        api_key=get_api_key(),
        model=os.getenv("GEMINI_IMAGE_EDIT_MODEL", "").strip() or DEFAULT_MODEL,
        log_level=os.getenv("PIXSHOP_LOG_LEVEL", "INFO").upper(),
    )


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)
