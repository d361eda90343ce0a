import logging
import re

from houseplans_backend.documents import insert
from houseplans_backend.mongo_config import collection

logger = logging.getLogger(__name__)


def exact_name(name):
    return {"$regex": f"^{re.escape(name.strip())}$", "$options": "i"}


def find_or_create(collection_name, name):
    """
    Records `name` in a lookup collection unless it is already there under
    any capitalisation. Returns True when a new entry was created.
    """
    if not name or not str(name).strip():
        return False
    name = str(name).strip()
    if collection(collection_name).find_one({"name": exact_name(name)}):
        return False
    insert(collection_name, {"name": name})
    logger.info(f"Added '{name}' to {collection_name}")
    return True
