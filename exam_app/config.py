"""Runtime settings read from the environment (and an optional .env file)."""

from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path

from dotenv import load_dotenv

from exam_app.constants.exam_constants import ACCESS_TOKEN_MINUTES
from exam_app.constants.network_constants import DEFAULT_API_URL, DEFAULT_HOST, DEFAULT_PORT

load_dotenv()

BASE_DIR = Path(__file__).resolve().parent
DEFAULT_SEED_FILE = BASE_DIR / "data" / "sample_exam.txt"
# Development fallback only; set EXAM_PORTAL_SECRET_KEY in any shared deployment.
_DEV_SECRET_KEY = "exam-portal-dev-secret"


@dataclass(slots=True, frozen=True)
class Settings:
    """Values the server and client read at start-up."""

    secret_key: str
    host: str
    port: int
    api_url: str
    token_minutes: int
    seed_file: Path | None


def load_settings() -> Settings:
    seed_value = os.getenv("EXAM_PORTAL_SEED_FILE")
    seed_file = Path(seed_value) if seed_value else DEFAULT_SEED_FILE
    return Settings(
        secret_key=os.getenv("EXAM_PORTAL_SECRET_KEY", _DEV_SECRET_KEY),
        host=os.getenv("EXAM_PORTAL_HOST", DEFAULT_HOST),
        port=int(os.getenv("EXAM_PORTAL_PORT", str(DEFAULT_PORT))),
        api_url=os.getenv("EXAM_PORTAL_API_URL", DEFAULT_API_URL),
        token_minutes=int(os.getenv("EXAM_PORTAL_TOKEN_MINUTES", str(ACCESS_TOKEN_MINUTES))),
        seed_file=seed_file if seed_file.exists() else None,
    )
