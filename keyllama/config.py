"""
Runtime configuration, read from the environment (and .env if present).
"""

import os
from dataclasses import dataclass, field
from typing import List, Optional
from dotenv import load_dotenv

from .services.ai_orchestrator.llm_client import DEFAULT_MODEL, DEFAULT_BASE_URL

load_dotenv()


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class Settings:
    """Service settings. Build with Settings.from_env() in production."""
    api_key: Optional[str] = None
    model: str = DEFAULT_MODEL
    base_url: str = DEFAULT_BASE_URL
    prompt: str = "fairness"  # "fairness" or "human_likelihood"
    log_level: str = "INFO"
    analyze_on_shutdown: bool = True
    cors_origins: List[str] = field(default_factory=lambda: ["*"])

    @classmethod
    def from_env(cls) -> "Settings":
        origins = os.getenv("KEYLLAMA_CORS_ORIGINS", "*")
        return cls(
            api_key=os.getenv("GEMINI_API_KEY"),
            model=os.getenv("KEYLLAMA_MODEL", DEFAULT_MODEL),
            base_url=os.getenv("KEYLLAMA_BASE_URL", DEFAULT_BASE_URL),
            prompt=os.getenv("KEYLLAMA_PROMPT", "fairness"),
            log_level=os.getenv("KEYLLAMA_LOG_LEVEL", "INFO").upper(),
            analyze_on_shutdown=_env_flag("KEYLLAMA_ANALYZE_ON_SHUTDOWN", True),
            cors_origins=[o.strip() for o in origins.split(",") if o.strip()],
        )
