"""
Environment-driven settings.

Values come from the process environment, with a local .env file loaded
first (python-dotenv). Settings are read once and cached; tests call
get_settings.cache_clear() after patching the environment.

  ESG_VERIFICATION_MODE     simulated | http | none      (default simulated)
  ESG_VERIFICATION_URL      endpoint for the HTTP feed
  ESG_VERIFICATION_TIMEOUT  seconds                      (default 10)
  ESG_SIMULATION_SEED       integer seed for the simulated feed
  ESG_TOTAL_METRICS         data-completeness denominator (default 47)
  ESG_MAX_CONCURRENCY       batch concurrency            (default 4)
  ESG_LOG_LEVEL             logging level                (default INFO)
"""

import logging
import os
import random
from functools import lru_cache
from typing import Literal, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

from tools.verification_feed import (
    HttpVerificationFeed,
    SimulatedVerificationFeed,
    VerificationFeed,
)

load_dotenv()

logger = logging.getLogger("esg_engine")

VerificationMode = Literal["simulated", "http", "none"]


class Settings(BaseModel):
    verification_mode: VerificationMode = "simulated"
    verification_url: Optional[str] = None
    verification_timeout: float = Field(default=10.0, gt=0)
    simulation_seed: Optional[int] = None
    total_metrics: int = Field(default=47, gt=0)
    max_concurrency: int = Field(default=4, ge=1)
    log_level: str = "INFO"


def _env(name: str) -> Optional[str]:
    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    return value.strip()


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Read ESG_* variables once. Invalid values raise pydantic.ValidationError."""
    raw = {
        "verification_mode": (_env("ESG_VERIFICATION_MODE") or "simulated").lower(),
        "verification_url": _env("ESG_VERIFICATION_URL"),
        "verification_timeout": _env("ESG_VERIFICATION_TIMEOUT"),
        "simulation_seed": _env("ESG_SIMULATION_SEED"),
        "total_metrics": _env("ESG_TOTAL_METRICS"),
        "max_concurrency": _env("ESG_MAX_CONCURRENCY"),
        "log_level": (_env("ESG_LOG_LEVEL") or "INFO").upper(),
    }
    return Settings(**{k: v for k, v in raw.items() if v is not None})


def configure_logging(settings: Optional[Settings] = None) -> None:
    settings = settings or get_settings()
    logging.basicConfig(level=getattr(logging, settings.log_level, logging.INFO))


def build_feed(settings: Optional[Settings] = None) -> Optional[VerificationFeed]:
    """Construct the configured verification feed (None in "none" mode)."""
    settings = settings or get_settings()

    if settings.verification_mode == "none":
        return None

    if settings.verification_mode == "http":
        if not settings.verification_url:
            logger.warning("ESG_VERIFICATION_MODE=http but ESG_VERIFICATION_URL is not set, verification disabled")
            return None
        return HttpVerificationFeed(settings.verification_url, timeout=settings.verification_timeout)

    logger.info("Using SIMULATED verification feed (seed=%s)", settings.simulation_seed)
    return SimulatedVerificationFeed(rng=random.Random(settings.simulation_seed))
