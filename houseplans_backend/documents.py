from datetime import datetime, timezone

from pymongo import ReturnDocument

from .mongo_config import collection


def utcnow():
    return datetime.now(timezone.utc)


def new_document(fields):
    now = utcnow()
    doc = {k: v for k, v in fields.items() if v is not None}
    doc["createdAt"] = now
    doc["updatedAt"] = now
    return doc


def insert(collection_name, fields):
    doc = new_document(fields)
    result = collection(collection_name).insert_one(doc)
    doc["_id"] = result.inserted_id
    return doc


def update_fields(collection_name, doc_id, changes, unset=None):
    """
    Applies `changes` to one document and returns the updated document
    (None when it no longer exists).
    """
    update = {"$set": {**changes, "updatedAt": utcnow()}}
    if unset:
        update["$unset"] = {field: "" for field in unset}
    return collection(collection_name).find_one_and_update(
        {"_id": doc_id}, update, return_document=ReturnDocument.AFTER
    )


def expand_refs(docs, field, collection_name, projection):
    """
    Replaces the ObjectId stored in `field` on each document with the
    referenced document restricted to `projection`.
    """
    ids = {doc.get(field) for doc in docs if doc.get(field) is not None}
    if not ids:
        return docs
    found = {d["_id"]: d for d in collection(collection_name).find({"_id": {"$in": list(ids)}}, projection)}
    for doc in docs:
        ref = doc.get(field)
        if ref is not None:
            doc[field] = found.get(ref)
    return docs


def as_utc(value):
    """Datetimes read back without tz_aware are naive UTC."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
