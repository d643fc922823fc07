"""
core/firebase.py -- One-time Firebase Admin SDK initialization.

The Admin SDK keeps a registry of named apps; initialize_app() raises if the
default app already exists. init_firebase() is idempotent so the API lifespan
can call it on every startup (including test reloads).

Credentials:
  FIREBASE_CREDENTIALS set   -> service-account JSON file.
  FIREBASE_CREDENTIALS empty -> Application Default Credentials.
"""

import logging

import firebase_admin
from firebase_admin import credentials

from core.config import Settings

logger = logging.getLogger("intrevue.firebase")


def init_firebase(settings: Settings) -> firebase_admin.App:
    """Return the default Firebase app, creating it on first call."""
    try:
        return firebase_admin.get_app()
    except ValueError:
        pass

    if settings.firebase_credentials:
        cred = credentials.Certificate(settings.firebase_credentials)
    else:
        cred = credentials.ApplicationDefault()

    options = {"projectId": settings.firebase_project_id} if settings.firebase_project_id else None
    app = firebase_admin.initialize_app(cred, options)
    logger.info("Firebase initialized (project=%s)", settings.firebase_project_id or "<default>")
    return app
