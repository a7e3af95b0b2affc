"""Game service configuration via environment variables."""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings

from game.logic.catalog import DEFAULT_FOOTBALLERS_PATH, DEFAULT_QUESTIONS_PATH


class GameServiceSettings(BaseSettings):
    model_config = {"env_prefix": "GAME_"}

    log_dir: str | None = Field(default="backend/logs/game", min_length=1)
    room_ttl_seconds: int = Field(default=3600, ge=60)  # 1 hour default, min 60s
    max_rooms: int = Field(default=1000, ge=1)
    footballers_path: Path = DEFAULT_FOOTBALLERS_PATH
    questions_path: Path = DEFAULT_QUESTIONS_PATH
    # fixed seed makes pool draws and AI choices reproducible
    seed: int | None = None
