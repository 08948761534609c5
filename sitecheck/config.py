import os
from dotenv import load_dotenv

load_dotenv()


def _optional_float(name: str) -> float | None:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return None
    return float(raw)


class Settings:
    THREADS: int = int(os.getenv("SITECHECK_THREADS", 50))
    TIMEOUT_S: float = float(os.getenv("SITECHECK_TIMEOUT_S", "5"))
    RETRIES: int = int(os.getenv("SITECHECK_RETRIES", 1))
    PERIOD_S: float | None = _optional_float("SITECHECK_PERIOD_S")
    LOG_LEVEL: str = os.getenv("SITECHECK_LOG_LEVEL", "INFO")
    MAX_RECENT: int = int(os.getenv("SITECHECK_MAX_RECENT", 500))


settings = Settings()
