import logging

import firebase_admin
from firebase_admin import credentials, firestore

logger = logging.getLogger(__name__)


def _credential_from_config(config):
    path = config.get("FIREBASE_SERVICE_ACCOUNT")
    if path:
        return credentials.Certificate(path)

    project_id = config.get("FIREBASE_PROJECT_ID")
    private_key = config.get("FIREBASE_PRIVATE_KEY")
    client_email = config.get("FIREBASE_CLIENT_EMAIL")
    if not (project_id and private_key and client_email):
        raise RuntimeError(
            "Missing Firebase credentials. Set FIREBASE_SERVICE_ACCOUNT, or FIREBASE_PROJECT_ID, "
            "FIREBASE_PRIVATE_KEY and FIREBASE_CLIENT_EMAIL."
        )
    # Env vars carry the PEM key with literal \n sequences
    return credentials.Certificate({
        "type": "service_account",
        "project_id": project_id,
        "private_key": private_key.replace("\\n", "\n"),
        "client_email": client_email,
        "token_uri": "https://oauth2.googleapis.com/token",
    })


def init_firebase(config):
    if not firebase_admin._apps:
        firebase_admin.initialize_app(_credential_from_config(config))
        logger.info("Firebase Admin SDK initialized")
    return firestore.client()
