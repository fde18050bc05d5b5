"""Application configuration using environment variables."""
import os
import random
from functools import lru_cache
from typing import Optional
from dotenv import load_dotenv

load_dotenv()


def _optional_int(name: str) -> Optional[int]:
    value = os.getenv(name, "")
    return int(value) if value else None


class Settings:
    """Application settings loaded from environment variables."""

    # Server
    HOST: str = os.getenv("HOST", "127.0.0.1")
    PORT: int = int(os.getenv("PORT", "8000"))
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

    # Reference data; empty means the bundled default library
    LIBRARY_PATH: str = os.getenv("LIBRARY_PATH", "")

    # Encounter generation
    ENCOUNTER_TRIES: int = int(os.getenv("ENCOUNTER_TRIES", "100"))
    ENCOUNTER_LEVELS_BELOW: int = int(os.getenv("ENCOUNTER_LEVELS_BELOW", "4"))
    ENCOUNTER_LEVELS_ABOVE: int = int(os.getenv("ENCOUNTER_LEVELS_ABOVE", "5"))
    DECK_SIZE: int = int(os.getenv("DECK_SIZE", "50"))

    # Map generation
    MAP_FAILURE_LIMIT: int = int(os.getenv("MAP_FAILURE_LIMIT", "100"))

    # Fixed seed for reproducible output; unset means fresh randomness per request
    RANDOM_SEED: Optional[int] = _optional_int("RANDOM_SEED")


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def make_rng(seed: Optional[int] = None) -> random.Random:
    """Generator for one request: the given seed, else RANDOM_SEED, else fresh entropy."""
    if seed is None:
        seed = get_settings().RANDOM_SEED
    return random.Random(seed)

