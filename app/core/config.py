# app/core/config.py
import os
from dotenv import load_dotenv

load_dotenv()

class Settings:
    FIREBASE_PROJECT_ID: str = os.getenv("FIREBASE_PROJECT_ID", "kitui-water-finder")
    FIREBASE_SERVICE_ACCOUNT_PATH: str = os.getenv(
        "FIREBASE_SERVICE_ACCOUNT_PATH",
        "firebase-service-account.json",
    )

    # Firestore collections (camelCase names are what the mobile app wrote)
    WATER_SOURCES_COLLECTION: str = os.getenv("WATER_SOURCES_COLLECTION", "waterSources")
    REPORTS_COLLECTION: str = os.getenv("REPORTS_COLLECTION", "reports")

    # Upper bound for a single Firestore call, in seconds. 0 disables it and a
    # call that never returns leaves the loading/submitting flag set.
    REQUEST_TIMEOUT_SECONDS: float = float(os.getenv("REQUEST_TIMEOUT_SECONDS", "0"))

    # Timezone for rendering lastUpdated (default UTC+3, East Africa Time)
    TZ_OFFSET: int = int(os.getenv("TZ_OFFSET", "3"))

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()


settings = Settings()


def request_timeout() -> float | None:
    """Configured per-call timeout, or None when disabled."""
    if settings.REQUEST_TIMEOUT_SECONDS > 0:
        return settings.REQUEST_TIMEOUT_SECONDS
    return None
