# core/config.py

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from core.errors import ConfigurationError

DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"


def _float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}.")


def _int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}.")


@dataclass
class Settings:
    gemini_api_key: Optional[str] = None
    gemini_model: str = "gemini-1.5-flash"
    gemini_base_url: str = DEFAULT_BASE_URL
    temperature: float = 0.7
    top_k: int = 40
    top_p: float = 0.95
    max_output_tokens: int = 8192
    request_timeout: float = 60.0
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, dotenv: bool = True) -> "Settings":
        """Read settings from the process environment (and `.env` if present)."""
        if dotenv:
            load_dotenv()
        return cls(
            gemini_api_key=os.getenv("GEMINI_API_KEY"),
            gemini_model=os.getenv("GEMINI_MODEL", cls.gemini_model),
            gemini_base_url=os.getenv("GEMINI_BASE_URL", DEFAULT_BASE_URL),
            temperature=_float("GEMINI_TEMPERATURE", cls.temperature),
            top_k=_int("GEMINI_TOP_K", cls.top_k),
            top_p=_float("GEMINI_TOP_P", cls.top_p),
            max_output_tokens=_int("GEMINI_MAX_OUTPUT_TOKENS", cls.max_output_tokens),
            request_timeout=_float("GEMINI_TIMEOUT", cls.request_timeout),
            log_level=os.getenv("LOG_LEVEL", cls.log_level).upper(),
        )

    def require_api_key(self) -> str:
        key = (self.gemini_api_key or "").strip()
        if not key:
            raise ConfigurationError("Environment variable GEMINI_API_KEY is missing.")
        return key
