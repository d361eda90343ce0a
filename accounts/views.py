import logging

from pymongo import DESCENDING

from houseplans_backend.documents import insert, update_fields
from houseplans_backend.http import (
    NotAuthenticated,
    NotFound,
    PermissionDenied,
    ValidationError,
    json_response,
    page_count,
    pagination,
    parse_object_id,
    read_payload,
    to_bool,
)
from houseplans_backend.mongo_config import collection
from houseplans_backend.uploads import first, store_uploads

from .authentication import protect
from .models import MODERATED_ROLES, UPLOAD_FIELDS, UPLOAD_TARGETS, USERS, WITHOUT_PASSWORD, ApprovalStatus, Role, display_name
from .permissions import ADMIN, is_admin
from .services import (
    ensure_email_available,
    generate_token,
    hash_password,
    password_matches,
    validate_role_fields,
)

logger = logging.getLogger(__name__)

ROLE_UPDATABLE_FIELDS = {
    Role.USER.value: ["name"],
    Role.ADMIN.value: ["name"],
    Role.PROFESSIONAL.value: ["name", "profession", "city", "experience"],
    Role.SELLER.value: ["businessName", "address", "city", "materialType"],
    Role.CONTRACTOR.value: ["name", "companyName", "address", "city", "experience", "profession"],
}

PROFILE_FIELDS = [
    "email", "phone", "role", "isApproved", "status", "businessName", "companyName", "profession",
    "experience", "address", "city", "materialType", "photoUrl", "shopImageUrl", "businessCertificationUrl",
]


def _uploaded_urls(request):
    stored = store_uploads(request, UPLOAD_FIELDS)
    return {target: first(stored, field) for field, target in UPLOAD_TARGETS.items() if stored.get(field)}


def _create_user(request, force_approved=False):
    data = read_payload(request)
    email, password, phone, role = (data.get(k) for k in ("email", "password", "phone", "role"))
    if not email or not password or not phone or not role:
        raise ValidationError("Please provide all required fields: email, password, phone, and role")

    ensure_email_available(email)

    user_data = {"email": email, "password": hash_password(password), "phone": phone, "role": role}
    user_data.update(validate_role_fields(role, data))
    if force_approved:
        user_data.update(isApproved=True, status=ApprovalStatus.APPROVED.value)
    user_data.update(_uploaded_urls(request))

    user = insert(USERS, user_data)
    logger.info(f"Registered {role} account {user['_id']}")
    return user


def register_user(request):
    user = _create_user(request)
    return json_response({
        "_id": user["_id"],
        "email": user["email"],
        "role": user["role"],
        "name": display_name(user),
        "isApproved": user["isApproved"],
        "status": user["status"],
        "token": generate_token(user["_id"]),
    }, status=201)


@protect(ADMIN)
def create_user_by_admin(request):
    user = _create_user(request, force_approved=True)
    return json_response({
        "_id": user["_id"],
        "email": user["email"],
        "role": user["role"],
        "name": display_name(user),
    }, status=201)


def login_user(request):
    data = read_payload(request)
    email, password = data.get("email"), data.get("password")
    if not email or not password:
        raise ValidationError("Please provide email and password")

    user = collection(USERS).find_one({"email": email})
    if not user or not password_matches(user, password):
        raise NotAuthenticated("Invalid email or password")

    if user["role"] in MODERATED_ROLES and not user.get("isApproved"):
        raise PermissionDenied(
            f'Your account is currently in "{user.get("status")}" state. Please wait for admin approval.'
        )

    return json_response({
        "_id": user["_id"],
        "email": user["email"],
        "role": user["role"],
        "name": display_name(user),
        "isApproved": user.get("isApproved"),
        "status": user.get("status"),
        "profession": user.get("profession"),
        "businessName": user.get("businessName"),
        "companyName": user.get("companyName"),
        "experience": user.get("experience"),
        "city": user.get("city"),
        "photoUrl": user.get("photoUrl"),
        "token": generate_token(user["_id"]),
    })


@protect()
def get_profile(request):
    return json_response(request.account)


@protect(ADMIN)
def list_users(request):
    role = request.GET.get("role")
    status = request.GET.get("status")
    page, limit = pagination(request.GET, default_size=10)

    query = {"role": {"$ne": Role.ADMIN.value}}
    if role and role != "all":
        query["role"] = role
    if status and status != "all":
        query["status"] = status

    skip = (page - 1) * limit
    users = list(
        collection(USERS).find(query, WITHOUT_PASSWORD).sort("createdAt", DESCENDING).skip(skip).limit(limit)
    )
    total = collection(USERS).count_documents(query)
    return json_response({
        "users": users,
        "pagination": {
            "currentPage": page,
            "totalPages": page_count(total, limit),
            "totalUsers": total,
            "hasNextPage": skip + len(users) < total,
            "hasPrevPage": page > 1,
        },
    })


@protect(ADMIN)
def user_stats(request):
    breakdown = list(collection(USERS).aggregate([
        {"$match": {"role": {"$ne": Role.ADMIN.value}}},
        {"$group": {
            "_id": "$role",
            "count": {"$sum": 1},
            "approved": {"$sum": {"$cond": [{"$eq": ["$isApproved", True]}, 1, 0]}},
            "pending": {"$sum": {"$cond": [{"$eq": ["$status", ApprovalStatus.PENDING.value]}, 1, 0]}},
        }},
    ]))
    total = collection(USERS).count_documents({"role": {"$ne": Role.ADMIN.value}})
    return json_response({"totalUsers": total, "breakdown": breakdown})


@protect(ADMIN)
def get_user(request, user_id):
    oid = parse_object_id(user_id, "Invalid user ID format")
    user = collection(USERS).find_one({"_id": oid}, WITHOUT_PASSWORD)
    if not user:
        raise NotFound("User not found")
    return json_response(user)


@protect()
def update_user(request, user_id):
    oid = parse_object_id(user_id, "Invalid user ID format")
    user = collection(USERS).find_one({"_id": oid})
    if not user:
        raise NotFound("User not found")

    acting = request.account
    if not is_admin(acting) and user["_id"] != acting["_id"]:
        raise PermissionDenied("Not authorized to update this user's profile.")

    data = read_payload(request)
    changes = {}
    for field in ("email", "phone"):
        if data.get(field):
            changes[field] = data[field]
    if "email" in changes:
        ensure_email_available(changes["email"], oid)

    if data.get("password"):
        if len(data["password"]) < 6:
            raise ValidationError("Password must be at least 6 characters long")
        changes["password"] = hash_password(data["password"])

    changes.update(_uploaded_urls(request))

    for field in ROLE_UPDATABLE_FIELDS.get(user["role"], []):
        if data.get(field):
            changes[field] = data[field]

    if is_admin(acting):
        if data.get("status"):
            changes["status"] = data["status"]
            changes["isApproved"] = data["status"] == ApprovalStatus.APPROVED.value
        if data.get("isApproved") is not None:
            approved = to_bool(data["isApproved"])
            changes["isApproved"] = approved
            changes["status"] = ApprovalStatus.APPROVED.value if approved else ApprovalStatus.PENDING.value

    updated = update_fields(USERS, oid, changes)
    body = {"_id": updated["_id"], "name": display_name(updated)}
    body.update({field: updated.get(field) for field in PROFILE_FIELDS})
    body["token"] = generate_token(updated["_id"])
    return json_response(body)


@protect(ADMIN)
def delete_user(request, user_id):
    oid = parse_object_id(user_id, "Invalid user ID format")
    user = collection(USERS).find_one({"_id": oid})
    if not user:
        raise NotFound("User not found")
    if user["role"] == Role.ADMIN.value:
        raise ValidationError("Cannot delete an admin user")

    collection(USERS).delete_one({"_id": oid})
    logger.info(f"Deleted user {oid} ({user['role']})")
    return json_response({
        "message": "User removed successfully",
        "deletedUser": {"_id": user["_id"], "name": display_name(user), "email": user["email"], "role": user["role"]},
    })


def seller_public_profile(request, seller_id):
    oid = parse_object_id(seller_id, "Seller not found")
    seller = collection(USERS).find_one(
        {"_id": oid}, {"name": 1, "businessName": 1, "shopImageUrl": 1, "city": 1, "role": 1}
    )
    if not seller or seller.get("role") != Role.SELLER.value:
        raise NotFound("Seller not found")
    return json_response(seller)
