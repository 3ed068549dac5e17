from firebase_admin import firestore

from ..core.exceptions import FirebaseUnavailableError
from ..core.firebase_init import initialize_firebase, is_firebase_available


def get_firestore_client():
    """Return the Firestore client, initializing the Admin SDK on first use."""
    if not is_firebase_available() and not initialize_firebase():
        raise FirebaseUnavailableError(
            "Firebase is not initialized. Check FIREBASE_SERVICE_ACCOUNT_PATH."
        )
    return firestore.client()
