"""
Firebase Admin SDK bootstrap. The default app is the only state; nothing is
cached here.
"""

import firebase_admin
from firebase_admin import credentials
import logging
import os

from .config import settings

logger = logging.getLogger(__name__)


def _default_app():
    try:
        return firebase_admin.get_app()
    except ValueError:
        return None


def is_firebase_available() -> bool:
    return _default_app() is not None


def initialize_firebase() -> bool:
    """
    Create the default Firebase app from the service account file.
    Returns True when an app exists afterwards.
    """
    if is_firebase_available():
        return True

    service_account_path = settings.FIREBASE_SERVICE_ACCOUNT_PATH
    if not os.path.exists(service_account_path):
        logger.warning(
            f"Firebase service account file not found at {service_account_path}; "
            "water sources cannot be loaded until it is provided"
        )
        return False

    try:
        firebase_admin.initialize_app(
            credentials.Certificate(service_account_path),
            {'projectId': settings.FIREBASE_PROJECT_ID},
        )
    except (ValueError, OSError) as e:
        logger.error(f"❌ Firebase initialization failed: {e}")
        return False

    logger.info(f"✅ Firebase initialized for project {settings.FIREBASE_PROJECT_ID}")
    return True


def get_firebase_status() -> dict:
    app = _default_app()
    return {
        "available": app is not None,
        "app_name": app.name if app else None,
        "project_id": settings.FIREBASE_PROJECT_ID,
    }
