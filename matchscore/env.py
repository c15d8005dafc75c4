import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


def load_env() -> None:
    """Load .env from project root if present."""
    env_path = Path.cwd() / ".env"
    if not env_path.exists():
        return
    load_dotenv(dotenv_path=env_path)


@dataclass(frozen=True)
class Settings:
    db_path: Path
    log_level: str
    log_dir: Path
    api_url: Optional[str]
    api_key: Optional[str]


def get_settings() -> Settings:
    return Settings(
        db_path=Path(os.getenv("MATCHSCORE_DB", "data/matchscore.db")),
        log_level=os.getenv("MATCHSCORE_LOG_LEVEL", "INFO"),
        log_dir=Path(os.getenv("MATCHSCORE_LOG_DIR", "logs")),
        api_url=os.getenv("MATCHSCORE_API_URL") or None,
        api_key=os.getenv("MATCHSCORE_API_KEY") or None,
    )
