import functools
import logging

import jwt
from bson import ObjectId
from bson.errors import InvalidId

from houseplans_backend.http import NotAuthenticated
from houseplans_backend.mongo_config import collection

from .models import USERS, WITHOUT_PASSWORD
from .services import decode_token

logger = logging.getLogger(__name__)


def _bearer_token(request):
    header = request.headers.get("Authorization", "")
    if not header.startswith("Bearer"):
        return None
    parts = header.split(" ")
    return parts[1] if len(parts) > 1 and parts[1] else None


def _load_account(token):
    """Raises jwt.InvalidTokenError or InvalidId for unusable tokens."""
    decoded = decode_token(token)
    user_id = ObjectId(str(decoded.get("id")))
    return collection(USERS).find_one({"_id": user_id}, WITHOUT_PASSWORD)


def protect(policy=None):
    """
    Requires a valid bearer token; the acting user (without password) is put
    on ``request.account``. When a policy is given it must allow that user.
    """

    def decorator(view):
        @functools.wraps(view)
        def wrapper(request, *args, **kwargs):
            token = _bearer_token(request)
            if not token:
                raise NotAuthenticated("Not authorized, no token")
            try:
                account = _load_account(token)
            except (jwt.InvalidTokenError, InvalidId) as e:
                logger.warning(f"TOKEN ERROR: {e}")
                raise NotAuthenticated("Not authorized, token failed")
            if account is None:
                raise NotAuthenticated("User not found for this token")
            request.account = account
            if policy is not None:
                policy.check(account)
            return view(request, *args, **kwargs)

        return wrapper

    return decorator


def soft_protect(view):
    """Loads the acting user when a usable token is present, never rejects."""

    @functools.wraps(view)
    def wrapper(request, *args, **kwargs):
        request.account = None
        token = _bearer_token(request)
        if token:
            try:
                request.account = _load_account(token)
            except (jwt.InvalidTokenError, InvalidId) as e:
                logger.info(f"Ignoring unusable token: {e}")
        return view(request, *args, **kwargs)

    return wrapper
