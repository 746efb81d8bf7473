import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import load_dotenv

from kasirku.store import MemoryStore, RestStore

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@dataclass(frozen=True)
class Settings:
    store_url: str = ""            # empty -> in-memory demo store
    store_key: str = ""
    user_id: str = "demo-user"
    branch_id: Optional[str] = None
    storage_path: str = "data/local_storage.json"
    timeout: float = 10.0
    log_level: str = "INFO"
    month_locale: str = "id"


def load_settings(env: Optional[Mapping[str, str]] = None) -> Settings:
    """Read KASIRKU_* variables, from a .env file too when env is not given."""
    if env is None:
        load_dotenv()
        env = os.environ

    defaults = Settings()
    try:
        timeout = float(env.get("KASIRKU_TIMEOUT", defaults.timeout))
    except ValueError:
        raise ValueError(f"KASIRKU_TIMEOUT must be a number, got {env.get('KASIRKU_TIMEOUT')!r}")

    return Settings(
        store_url=env.get("KASIRKU_STORE_URL", defaults.store_url).strip(),
        store_key=env.get("KASIRKU_STORE_KEY", defaults.store_key).strip(),
        user_id=env.get("KASIRKU_USER_ID", defaults.user_id).strip() or defaults.user_id,
        branch_id=env.get("KASIRKU_BRANCH_ID", "").strip() or None,
        storage_path=env.get("KASIRKU_STORAGE_PATH", defaults.storage_path),
        timeout=timeout,
        log_level=env.get("KASIRKU_LOG_LEVEL", defaults.log_level).upper(),
        month_locale=env.get("KASIRKU_MONTH_LOCALE", defaults.month_locale).lower(),
    )


def make_store(settings: Settings):
    if settings.store_url:
        return RestStore(settings.store_url, settings.store_key, timeout=settings.timeout)
    logging.getLogger("kasirku.config").warning("KASIRKU_STORE_URL not set, using the in-memory store")
    return MemoryStore()


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=getattr(logging, level, logging.INFO), format=LOG_FORMAT)
