import logging

from pymongo import DESCENDING

from accounts.authentication import protect
from accounts.models import USERS
from accounts.permissions import PROFESSIONAL, owns
from houseplans_backend.documents import expand_refs, insert, update_fields
from houseplans_backend.http import (
    NotFound,
    PermissionDenied,
    ValidationError,
    json_response,
    lookup_object_id,
    message_response,
    read_payload,
    split_csv,
    to_bool,
)
from houseplans_backend.mongo_config import collection
from houseplans_backend.uploads import first, store_uploads

from .models import (
    PLAN_EDITABLE_FIELDS,
    PLAN_NUMERIC_FIELDS,
    PLAN_UPLOADS,
    PROFESSIONAL_PLANS,
    PlanStatus,
    plan_files,
)
from .services import add_review, build_seo, numeric_fields

logger = logging.getLogger(__name__)

APPROVED_PROFESSIONAL = PROFESSIONAL.with_denial("Access Denied. Only approved professionals can create plans.")

REQUIRED_PLAN_FIELDS = ["name", "description", "price", "category", "plotSize", "plotArea", "country", "planType", "city", "productNo"]

SEO_FIELDS = {"seoTitle": "title", "seoDescription": "description", "seoKeywords": "keywords", "seoAltText": "altText"}

AUTHOR = {"name": 1, "profession": 1}


def _get_plan(plan_id):
    plan = collection(PROFESSIONAL_PLANS).find_one({"_id": lookup_object_id(plan_id, "Plan not found")})
    if not plan:
        raise NotFound("Plan not found")
    return plan


def _owned_plan(request, plan_id, action):
    plan = _get_plan(plan_id)
    if not owns(request.account, plan.get("user")):
        raise PermissionDenied(f"Not authorized to {action} this plan")
    return plan


def list_approved_plans(request):
    plans = list(
        collection(PROFESSIONAL_PLANS).find({"status": PlanStatus.APPROVED.value}).sort("createdAt", DESCENDING)
    )
    expand_refs(plans, "user", USERS, AUTHOR)
    return json_response(plans)


@protect(PROFESSIONAL)
def list_my_plans(request):
    plans = list(collection(PROFESSIONAL_PLANS).find({"user": request.account["_id"]}).sort("createdAt", DESCENDING))
    return json_response(plans)


def get_plan(request, plan_id):
    plan = _get_plan(plan_id)
    expand_refs([plan], "user", USERS, AUTHOR)
    return json_response(plan)


@protect(APPROVED_PROFESSIONAL)
def create_plan(request):
    data = read_payload(request)
    if not data.get("name") and data.get("planName"):
        data["name"] = data["planName"]
    if any(not data.get(f) for f in REQUIRED_PLAN_FIELDS):
        raise ValidationError("Please fill all required fields")

    if collection(PROFESSIONAL_PLANS).find_one({"productNo": data["productNo"]}):
        raise ValidationError("A plan with this Product Number already exists.")
    if not request.FILES.get("mainImage") or not request.FILES.get("planFile"):
        raise ValidationError("Main image and at least one plan file are required")

    stored = store_uploads(request, PLAN_UPLOADS)

    plan = {field: data.get(field) for field in PLAN_EDITABLE_FIELDS}
    plan.update(numeric_fields(data, PLAN_NUMERIC_FIELDS + ["taxRate"]))
    plan.update({
        "user": request.account["_id"],
        "name": data["name"],
        "planName": data["name"],
        "category": split_csv(data["category"]),
        "country": split_csv(data["country"]),
        "city": split_csv(data["city"]),
        "propertyType": data.get("propertyType"),
        "isSale": to_bool(data.get("isSale")),
        "crossSellProducts": split_csv(data.get("crossSellProducts")),
        "upSellProducts": split_csv(data.get("upSellProducts")),
        "seo": build_seo(data, data["name"], data.get("description")),
        "status": PlanStatus.PENDING_REVIEW.value,
        "mainImage": first(stored, "mainImage"),
        "planFile": stored.get("planFile", []),
        "galleryImages": stored.get("galleryImages", []),
        "headerImage": first(stored, "headerImage"),
        "reviews": [],
        "rating": 0,
        "numReviews": 0,
    })
    created = insert(PROFESSIONAL_PLANS, plan)
    logger.info(f"Plan {created['_id']} submitted for review by {request.account['_id']}")
    return json_response(created, status=201)


@protect(PROFESSIONAL)
def update_plan(request, plan_id):
    plan = _owned_plan(request, plan_id, "update")
    data = read_payload(request)

    product_no = data.get("productNo")
    if product_no and product_no != plan.get("productNo"):
        if collection(PROFESSIONAL_PLANS).find_one({"productNo": product_no}):
            raise ValidationError("Another plan with this Product Number already exists.")

    changes = {f: data[f] for f in PLAN_EDITABLE_FIELDS if data.get(f) not in (None, "")}
    changes.update(numeric_fields(data, PLAN_NUMERIC_FIELDS + ["taxRate"]))
    if data.get("name"):
        changes["name"] = changes["planName"] = data["name"]
    if data.get("category"):
        changes["category"] = split_csv(data["category"])
    if data.get("isSale") is not None:
        changes["isSale"] = to_bool(data["isSale"])
    for field in ("crossSellProducts", "upSellProducts"):
        if data.get(field) is not None:
            changes[field] = split_csv(data[field])

    seo = dict(plan.get("seo") or {})
    for field, key in SEO_FIELDS.items():
        if data.get(field) is not None:
            seo[key] = data[field]
    changes["seo"] = seo

    stored = store_uploads(request, PLAN_UPLOADS)
    if stored.get("mainImage"):
        changes["mainImage"] = first(stored, "mainImage")
    if stored.get("headerImage"):
        changes["headerImage"] = first(stored, "headerImage")
    if stored.get("galleryImages"):
        changes["galleryImages"] = stored["galleryImages"]
    if stored.get("planFile"):
        changes["planFile"] = plan_files(plan) + stored["planFile"]

    return json_response(update_fields(PROFESSIONAL_PLANS, plan["_id"], changes))


@protect(PROFESSIONAL)
def delete_plan(request, plan_id):
    plan = _owned_plan(request, plan_id, "delete")
    collection(PROFESSIONAL_PLANS).delete_one({"_id": plan["_id"]})
    logger.info(f"Plan {plan['_id']} deleted by {request.account['_id']}")
    return message_response("Plan removed successfully")


@protect()
def create_plan_review(request, plan_id):
    oid = lookup_object_id(plan_id, "Plan not found")
    add_review(PROFESSIONAL_PLANS, oid, request.account, read_payload(request), "Plan")
    return message_response("Review added successfully", status=201)
