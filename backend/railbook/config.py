"""Runtime settings read from the environment (and backend/.env)."""
import os
from datetime import datetime
from pathlib import Path
from typing import Optional
from zoneinfo import ZoneInfo

from pydantic import BaseModel, Field

BACKEND_DIR = Path(__file__).resolve().parent.parent
DEFAULT_DB_PATH = BACKEND_DIR / "data" / "db.json"
DEFAULT_ORIGINS = "http://localhost:3000,http://127.0.0.1:3000"


class Settings(BaseModel):
    db_path: Path = DEFAULT_DB_PATH
    admin_id: str = "A123456789"
    admin_token: Optional[str] = None  # guards /download; unset disables it
    timezone: str = "Asia/Taipei"
    frontend_origins: list[str] = Field(default_factory=lambda: DEFAULT_ORIGINS.split(","))

    def now(self) -> datetime:
        return datetime.now(ZoneInfo(self.timezone))


def load_settings() -> Settings:
    """Build Settings from environment variables, falling back to defaults."""
    raw_origins = os.getenv("FRONTEND_ORIGINS", DEFAULT_ORIGINS)
    return Settings(
        db_path=Path(os.getenv("RAILBOOK_DB_PATH", str(DEFAULT_DB_PATH))),
        admin_id=os.getenv("ADMIN_ID", "A123456789"),
        admin_token=os.getenv("ADMIN_TOKEN") or None,
        timezone=os.getenv("RAILBOOK_TIMEZONE", "Asia/Taipei"),
        frontend_origins=[o.strip() for o in raw_origins.split(",") if o.strip()],
    )
