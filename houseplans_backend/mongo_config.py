import logging

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured
from pymongo import MongoClient

logger = logging.getLogger(__name__)

client = None
db = None

# Fields looked up as identities; sparse so legacy rows without them still load.
UNIQUE_FIELDS = [
    ("users", "email"),
    ("orders", "orderId"),
    ("products", "productNo"),
    ("professionalplans", "productNo"),
    ("blogposts", "slug"),
]


def ensure_indexes(database):
    for name, field in UNIQUE_FIELDS:
        database[name].create_index(field, unique=True, sparse=True)


def get_db():
    """
    Returns the application database, connecting on first use.
    """
    global client, db
    if db is None:
        if not settings.MONGO_URI or not settings.MONGO_DB_NAME:
            raise ImproperlyConfigured("MONGO_URI and MONGO_DB_NAME must be set in the environment.")
        client = MongoClient(settings.MONGO_URI, tz_aware=True)
        db = client[settings.MONGO_DB_NAME]
        ensure_indexes(db)
        logger.info("MongoDB connected successfully.")
    return db


def collection(name):
    return get_db()[name]
