import logging
from datetime import timedelta

import jwt
from django.conf import settings
from django.contrib.auth.hashers import check_password, make_password

from houseplans_backend.documents import utcnow
from houseplans_backend.http import ValidationError
from houseplans_backend.mongo_config import collection

from .models import ROLE_FIELD_LABELS, ROLE_FIELDS, USERS, ApprovalStatus, Role

logger = logging.getLogger(__name__)


def generate_token(user_id):
    payload = {
        "id": str(user_id),
        "iat": utcnow(),
        "exp": utcnow() + timedelta(days=settings.JWT_EXPIRES_DAYS),
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm="HS256")


def decode_token(token):
    """Raises jwt.InvalidTokenError (incl. expiry) for anything unusable."""
    return jwt.decode(token, settings.JWT_SECRET, algorithms=["HS256"])


def hash_password(raw_password):
    return make_password(raw_password)


def password_matches(user, raw_password):
    return bool(user.get("password")) and check_password(raw_password, user["password"])


def validate_role_fields(role, data):
    """
    Checks the fields each role has to provide at sign-up and returns the
    role-specific part of the user document.
    """
    if role not in Role.values:
        raise ValidationError("Invalid role specified")

    required = ROLE_FIELDS[role]
    missing = [f for f in required if not data.get(f)]
    if missing:
        labels = [ROLE_FIELD_LABELS[f] for f in required]
        raise ValidationError(f"{', '.join(labels)} {'is' if len(labels) == 1 else 'are'} required for {role}")

    fields = {f: data[f] for f in required}
    if role in (Role.USER, Role.ADMIN):
        fields.update(isApproved=True, status=ApprovalStatus.APPROVED.value)
    else:
        fields.update(isApproved=False, status=ApprovalStatus.PENDING.value)
    return fields


def ensure_email_available(email, user_id=None):
    """Rejects an email already held by another account."""
    query = {"email": email}
    if user_id is not None:
        query["_id"] = {"$ne": user_id}
    if collection(USERS).find_one(query):
        raise ValidationError("User with this email already exists")
