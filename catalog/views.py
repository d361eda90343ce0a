import logging
import uuid

from pymongo import DESCENDING

from accounts.authentication import protect
from accounts.models import USERS
from accounts.permissions import ADMIN, PROFESSIONAL, is_admin, owns
from houseplans_backend.documents import expand_refs, insert, update_fields
from houseplans_backend.http import (
    NotAuthenticated,
    NotFound,
    ValidationError,
    json_response,
    lookup_object_id,
    message_response,
    page_count,
    read_payload,
    split_csv,
    to_bool,
    to_float,
    to_int,
)
from houseplans_backend.mongo_config import collection
from houseplans_backend.uploads import first, store_uploads

from .models import (
    PRODUCT_EDITABLE_FIELDS,
    PRODUCT_NUMERIC_FIELDS,
    PRODUCT_UPLOADS,
    PRODUCTS,
    ProductStatus,
    plan_files,
    product_name,
)
from .queries import build_product_filter, fetch_page, icontains
from .services import add_review, build_seo, numeric_fields

logger = logging.getLogger(__name__)

PROFESSIONAL_OR_ADMIN = PROFESSIONAL | ADMIN

REQUIRED_PRODUCT_FIELDS = ["name", "price", "category", "plotSize", "plotArea", "country", "planType"]


def _get_product(product_id):
    product = collection(PRODUCTS).find_one({"_id": lookup_object_id(product_id, "Product not found")})
    if not product:
        raise NotFound("Product not found")
    return product


def _listing(request, public):
    query = build_product_filter(request.GET, public=public)
    products, page, size, count = fetch_page(collection(PRODUCTS), query, request.GET)
    expand_refs(products, "user", USERS, {"name": 1, "profession": 1})
    return json_response({"products": products, "page": page, "pages": page_count(count, size), "count": count})


def list_products(request):
    return _listing(request, public=True)


@protect(ADMIN)
def list_admin_products(request):
    return _listing(request, public=False)


@protect(PROFESSIONAL_OR_ADMIN)
def list_my_products(request):
    products = list(collection(PRODUCTS).find({"user": request.account["_id"]}).sort("createdAt", DESCENDING))
    return json_response(products)


def get_product(request, product_id):
    return json_response(_get_product(product_id))


@protect(PROFESSIONAL_OR_ADMIN)
def create_product(request):
    data = read_payload(request)
    if any(not data.get(f) for f in REQUIRED_PRODUCT_FIELDS):
        raise ValidationError("Please fill all required fields")
    if not request.FILES.get("mainImage") or not request.FILES.get("planFile"):
        raise ValidationError("Main image and plan file are required")

    if data.get("productNo") and collection(PRODUCTS).find_one({"productNo": data["productNo"]}):
        raise ValidationError("A product with this Product Number already exists.")

    stored = store_uploads(request, PRODUCT_UPLOADS)
    account = request.account

    product = {
        "user": account["_id"],
        "name": data["name"],
        "productNo": data.get("productNo") or f"P-{uuid.uuid4().hex[:8].upper()}",
        "description": data.get("description"),
        "plotSize": data["plotSize"],
        "plotArea": to_float(data["plotArea"]),
        "rooms": to_int(data.get("rooms"), 0),
        "bathrooms": data.get("bathrooms"),
        "kitchen": data.get("kitchen"),
        "floors": data.get("floors"),
        "direction": data.get("direction"),
        "city": data.get("city"),
        "country": split_csv(data["country"]),
        "planType": data["planType"],
        "propertyType": data.get("propertyType"),
        "price": to_float(data["price"]),
        "salePrice": to_float(data.get("salePrice"), 0),
        "isSale": to_bool(data.get("isSale")),
        "taxRate": to_float(data.get("taxRate"), 0),
        "category": split_csv(data["category"]),
        "youtubeLink": data.get("youtubeLink"),
        "seo": build_seo(data, data["name"], data.get("description")),
        "status": ProductStatus.PUBLISHED.value if is_admin(account) else ProductStatus.PENDING_REVIEW.value,
        "mainImage": first(stored, "mainImage"),
        "planFile": stored.get("planFile", []),
        "galleryImages": stored.get("galleryImages", []),
        "headerImage": first(stored, "headerImage"),
        "reviews": [],
        "rating": 0,
        "numReviews": 0,
    }
    created = insert(PRODUCTS, product)
    logger.info(f"Product {created['_id']} created by {account['_id']} as {created['status']}")
    return json_response(created, status=201)


@protect(PROFESSIONAL_OR_ADMIN)
def update_product(request, product_id):
    product = _get_product(product_id)
    account = request.account
    if not owns(account, product.get("user")) and not is_admin(account):
        raise NotAuthenticated("Not authorized to update this product")

    data = read_payload(request)
    changes = {f: data[f] for f in PRODUCT_EDITABLE_FIELDS if data.get(f) not in (None, "")}
    changes.update(numeric_fields(data, PRODUCT_NUMERIC_FIELDS))
    for field in ("category", "country"):
        if data.get(field):
            changes[field] = split_csv(data[field])
    if data.get("isSale") is not None:
        changes["isSale"] = to_bool(data["isSale"])
    if data.get("status") and is_admin(account):
        changes["status"] = data["status"]

    stored = store_uploads(request, PRODUCT_UPLOADS)
    if stored.get("mainImage"):
        changes["mainImage"] = first(stored, "mainImage")
    if stored.get("headerImage"):
        changes["headerImage"] = first(stored, "headerImage")
    if stored.get("planFile"):
        changes["planFile"] = stored["planFile"]
    if stored.get("galleryImages"):
        changes["galleryImages"] = stored["galleryImages"]

    return json_response(update_fields(PRODUCTS, product["_id"], changes))


@protect(PROFESSIONAL_OR_ADMIN)
def delete_product(request, product_id):
    product = _get_product(product_id)
    account = request.account
    if not owns(account, product.get("user")) and not is_admin(account):
        raise NotAuthenticated("Not authorized to delete this product")
    collection(PRODUCTS).delete_one({"_id": product["_id"]})
    logger.info(f"Product {product['_id']} deleted by {account['_id']}")
    return message_response("Product removed successfully")


@protect()
def create_product_review(request, product_id):
    oid = lookup_object_id(product_id, "Product not found")
    add_review(PRODUCTS, oid, request.account, read_payload(request), "Product")
    return message_response("Review added successfully", status=201)


def _media_item(doc):
    images = doc.get("Images")
    first_image = images.split(",")[0].strip() if isinstance(images, str) and images else None
    files = plan_files(doc)
    plan_file = files[0] if files else (doc.get("Download 1 URL") or first_image)
    return {
        "_id": doc["_id"],
        "name": product_name(doc),
        "productNo": doc.get("productNo") or doc.get("SKU") or "N/A",
        "planType": doc.get("planType") or "N/A",
        "mainImage": doc.get("mainImage") or first_image,
        "planFile": [plan_file] if plan_file else [],
    }


@protect(ADMIN)
def list_media_products(request):
    term = request.GET.get("searchTerm", "")
    query = {"$or": [{f: icontains(term)} for f in ("name", "Name", "productNo", "SKU")]} if term else {}
    projection = {
        "name": 1, "Name": 1, "productNo": 1, "SKU": 1, "mainImage": 1, "Images": 1,
        "planFile": 1, "planType": 1, "Download 1 URL": 1, "createdAt": 1,
    }
    docs, page, size, count = fetch_page(
        collection(PRODUCTS), query, request.GET, projection, page_param="pageNumber", default_size=20
    )
    return json_response({
        "products": [_media_item(d) for d in docs],
        "page": page,
        "pages": page_count(count, size),
        "count": count,
    })
