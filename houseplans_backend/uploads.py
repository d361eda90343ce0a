import logging
import os
import time

from django.conf import settings

from . import firebase_config
from .http import ValidationError, form_data

logger = logging.getLogger(__name__)


def generate_key(fieldname, filename):
    _, ext = os.path.splitext(filename or "")
    return f"{int(time.time() * 1000)}_{fieldname}{ext.lower()}"


def store_uploads(request, fields):
    """
    Streams the multipart files named in `fields` ({fieldname: max_count}) to
    object storage and returns {fieldname: [url, ...]} for the fields present.
    """
    _, uploads = form_data(request)
    stored = {}
    for fieldname, max_count in fields.items():
        files = uploads.getlist(fieldname)
        if not files:
            continue
        if len(files) > max_count:
            raise ValidationError(f"Too many files for '{fieldname}' (max {max_count}).")
        for upload in files:
            if upload.size > settings.UPLOAD_MAX_FILE_SIZE:
                raise ValidationError(f"File '{upload.name}' is too large. Max size is 5MB.")

        urls = []
        for upload in files:
            key = generate_key(fieldname, upload.name)
            url = firebase_config.upload_blob(key, upload, content_type=upload.content_type)
            logger.info(f"Uploaded '{upload.name}' as {key}")
            urls.append(url)
        stored[fieldname] = urls
    return stored


def first(stored, fieldname):
    urls = stored.get(fieldname)
    return urls[0] if urls else None
