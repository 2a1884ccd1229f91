"""Process configuration read from ``STACKSFINDER_*`` environment variables.

Settings are built once and handed to every component explicitly; nothing in
``core`` reads the environment.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, HttpUrl, ValidationError

from .core.errors import ErrorKind, StacksFinderError

DEFAULT_API_URL = "https://stacksfinder.com"
DEFAULT_DATA_DIR = os.path.expanduser("~/.stacksfinder")

_TRUE_VALUES = {"1", "true", "yes", "on"}


class Settings(BaseModel):
    api_url: HttpUrl = Field(DEFAULT_API_URL, validate_default=True)
    api_key: Optional[str] = None
    debug: bool = False
    timeout_seconds: float = Field(15.0, gt=0)
    data_dir: Path = Path(DEFAULT_DATA_DIR)

    @property
    def base_url(self) -> str:
        return str(self.api_url).rstrip("/")

    @property
    def has_api_key(self) -> bool:
        return bool(self.api_key)

    @classmethod
    def from_env(cls, environ: Optional[dict[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ
        values: dict = {
            "api_url": env.get("STACKSFINDER_API_URL") or DEFAULT_API_URL,
            "api_key": env.get("STACKSFINDER_API_KEY") or None,
            "debug": env.get("STACKSFINDER_MCP_DEBUG", "").strip().lower() in _TRUE_VALUES,
            "data_dir": Path(os.path.expanduser(env.get("STACKSFINDER_DATA_DIR") or DEFAULT_DATA_DIR)),
        }
        if env.get("STACKSFINDER_TIMEOUT_SECONDS"):
            values["timeout_seconds"] = env["STACKSFINDER_TIMEOUT_SECONDS"]
        try:
            return cls.model_validate(values)
        except ValidationError as exc:
            problems = "; ".join(f"{'.'.join(str(p) for p in e['loc'])}: {e['msg']}" for e in exc.errors())
            raise StacksFinderError(ErrorKind.CONFIG_ERROR, f"Invalid configuration: {problems}") from exc


_settings: Optional[Settings] = None


def load_settings() -> Settings:
    """Settings for this process, read from the environment on first use."""
    global _settings
    if _settings is None:
        _settings = Settings.from_env()
    return _settings


def reset_settings() -> None:
    """Forget the cached settings so the next ``load_settings`` re-reads the environment."""
    global _settings
    _settings = None
