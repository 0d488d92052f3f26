from __future__ import annotations

import logging
from functools import lru_cache

import firebase_admin
from firebase_admin import credentials, firestore

from salon_connect.core.config import settings

logger = logging.getLogger(__name__)


@lru_cache
def get_firestore_client(credentials_file: str | None = None):
    path = credentials_file or settings.FIREBASE_CREDENTIALS_FILE
    if not path:
        raise ValueError("FIREBASE_CREDENTIALS_FILE is required for Firestore access")
    try:
        app = firebase_admin.get_app()
    except ValueError:
        app = firebase_admin.initialize_app(credentials.Certificate(path))
        logger.info("Firebase Admin initialized")
    return firestore.client(app)
