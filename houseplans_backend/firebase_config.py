import logging
import os

import firebase_admin
from django.conf import settings
from django.core.exceptions import ImproperlyConfigured
from firebase_admin import credentials, storage

logger = logging.getLogger(__name__)


def get_bucket():
    """
    Returns the Cloud Storage bucket uploads are written to, initializing
    the Firebase Admin SDK on first use.
    """
    if not settings.FIREBASE_STORAGE_BUCKET:
        raise ImproperlyConfigured("FIREBASE_STORAGE_BUCKET environment variable not set.")

    if not firebase_admin._apps:
        cred_path = os.getenv("GOOGLE_APPLICATION_CREDENTIALS")
        if not cred_path:
            raise ImproperlyConfigured("GOOGLE_APPLICATION_CREDENTIALS environment variable not set.")
        cred = credentials.Certificate(cred_path)
        firebase_admin.initialize_app(cred, {"storageBucket": settings.FIREBASE_STORAGE_BUCKET})
        logger.info("Firebase initialized successfully.")

    return storage.bucket()


def upload_blob(key, fileobj, content_type=None):
    """
    Streams a file object to the bucket under `key` and returns its public URL.
    """
    blob = get_bucket().blob(key)
    blob.upload_from_file(fileobj, content_type=content_type)
    blob.make_public()
    return blob.public_url
