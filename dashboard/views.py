import logging

from pymongo import DESCENDING

from accounts.authentication import protect
from accounts.models import USERS, WITHOUT_PASSWORD, Role
from accounts.permissions import ADMIN
from accounts.services import ensure_email_available
from catalog.models import PRODUCTS, PROFESSIONAL_PLANS, PlanStatus
from houseplans_backend.documents import expand_refs, update_fields
from houseplans_backend.http import (
    NotFound,
    ValidationError,
    json_response,
    lookup_object_id,
    message_response,
    read_payload,
    to_bool,
)
from houseplans_backend.mongo_config import collection
from orders.views import mark_paid_by_admin, remove_order

from . import services

logger = logging.getLogger(__name__)


@protect(ADMIN)
def summary(request):
    return json_response(services.dashboard_summary())


@protect(ADMIN)
def list_users(request):
    return json_response(list(collection(USERS).find({}, WITHOUT_PASSWORD).sort("createdAt", DESCENDING)))


def _get_user(user_id):
    user = collection(USERS).find_one({"_id": lookup_object_id(user_id, "User not found")}, WITHOUT_PASSWORD)
    if not user:
        raise NotFound("User not found")
    return user


@protect(ADMIN)
def update_user(request, user_id):
    user = _get_user(user_id)
    data = read_payload(request)
    changes = {f: data[f] for f in ("name", "email", "role", "status") if data.get(f)}
    if "role" in changes and changes["role"] not in Role.values:
        raise ValidationError("Invalid role specified")
    if "email" in changes:
        ensure_email_available(changes["email"], user["_id"])
    if data.get("isApproved") is not None:
        changes["isApproved"] = to_bool(data["isApproved"])
    updated = update_fields(USERS, user["_id"], changes)
    updated.pop("password", None)
    logger.info(f"Admin {request.account['_id']} updated user {user['_id']}")
    return json_response(updated)


@protect(ADMIN)
def delete_user(request, user_id):
    user = _get_user(user_id)
    if user.get("role") == Role.ADMIN.value:
        raise ValidationError("Cannot delete admin user")
    collection(USERS).delete_one({"_id": user["_id"]})
    logger.info(f"Admin {request.account['_id']} deleted user {user['_id']}")
    return message_response("User removed")


@protect(ADMIN)
def delete_order(request, order_id):
    remove_order(order_id)
    return message_response("Order removed")


@protect(ADMIN)
def pay_order(request, order_id):
    return json_response(mark_paid_by_admin(request.account, order_id))


@protect(ADMIN)
def list_products(request):
    products = list(collection(PRODUCTS).find({}).sort("createdAt", DESCENDING))
    expand_refs(products, "user", USERS, {"name": 1})
    return json_response(products)


@protect(ADMIN)
def list_professional_plans(request):
    plans = list(collection(PROFESSIONAL_PLANS).find({}).sort("createdAt", DESCENDING))
    expand_refs(plans, "user", USERS, {"name": 1})
    return json_response(plans)


def _get_plan(plan_id):
    plan = collection(PROFESSIONAL_PLANS).find_one({"_id": lookup_object_id(plan_id, "Plan not found")})
    if not plan:
        raise NotFound("Plan not found")
    return plan


@protect(ADMIN)
def update_plan_status(request, plan_id):
    plan = _get_plan(plan_id)
    status = read_payload(request).get("status")
    if status not in PlanStatus.values:
        raise ValidationError("Invalid status provided.")
    logger.info(f"Plan {plan['_id']} moved to {status}")
    return json_response(update_fields(PROFESSIONAL_PLANS, plan["_id"], {"status": status}))


@protect(ADMIN)
def delete_professional_plan(request, plan_id):
    plan = _get_plan(plan_id)
    collection(PROFESSIONAL_PLANS).delete_one({"_id": plan["_id"]})
    return message_response("Plan removed")


@protect(ADMIN)
def requests_and_inquiries(request):
    return json_response(services.requests_and_inquiries())


@protect(ADMIN)
def reports_data(request):
    return json_response(services.reports_data())


@protect(ADMIN)
def notification_counts(request):
    return json_response(services.notification_counts())
