"""Settings loaded from environment variables (+ optional .env)."""

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "TASKBOARD"

BASE_DIR = Path(__file__).parent.parent


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _first_env(*names: str, default: str | None = None) -> str | None:
    for n in names:
        v = os.getenv(n)
        if v is not None and v.strip() != "":
            return v.strip()
    return default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path | None) -> Path | None:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str
    log_file: Path | None

    # ---- Store ----
    supabase_url: str | None
    supabase_key: str | None
    tasks_table: str
    sqlite_path: Path
    request_timeout: float

    # ---- Server ----
    host: str
    port: int
    reload: bool

    @property
    def use_supabase(self) -> bool:
        return bool(self.supabase_url and self.supabase_key)

    @staticmethod
    def from_env() -> "Settings":
        return Settings(
            app_name=_env(_k("APP_NAME"), "Taskboard"),
            log_level=_env(_k("LOG_LEVEL"), "INFO").upper(),
            log_file=_env_path(_k("LOG_FILE"), None),
            supabase_url=_first_env(_k("SUPABASE_URL"), "SUPABASE_URL"),
            supabase_key=_first_env(_k("SUPABASE_KEY"), "SUPABASE_KEY", "SUPABASE_ANON_KEY"),
            tasks_table=_env(_k("TASKS_TABLE"), "tasks"),
            sqlite_path=_env_path(_k("SQLITE_PATH"), BASE_DIR / "tasks.db"),
            request_timeout=_env_float(_k("REQUEST_TIMEOUT"), 10.0),
            host=_env(_k("HOST"), "0.0.0.0"),
            port=_env_int(_k("PORT"), 8000),
            reload=_env_bool(_k("RELOAD"), False),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    load_dotenv(override=False)
    return Settings.from_env()
