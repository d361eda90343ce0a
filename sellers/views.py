import logging

from pymongo import ASCENDING, DESCENDING

from accounts.authentication import protect
from accounts.models import USERS
from accounts.permissions import SELLER, owns
from houseplans_backend.documents import expand_refs, insert, update_fields
from houseplans_backend.http import (
    NotAuthenticated,
    NotFound,
    ValidationError,
    json_response,
    lookup_object_id,
    message_response,
    page_count,
    pagination,
    read_payload,
    to_float,
    to_int,
)
from houseplans_backend.mongo_config import collection
from houseplans_backend.uploads import first, store_uploads

from .models import BRANDS, CATEGORIES, REQUIRED_FIELDS, SELLER_PRODUCT_UPLOADS, SELLER_PRODUCTS, SELLER_PROFILE
from .services import exact_name, find_or_create

logger = logging.getLogger(__name__)


def _owned_product(request, product_id, action):
    product = collection(SELLER_PRODUCTS).find_one({"_id": lookup_object_id(product_id, "Product not found")})
    if not product:
        raise NotFound("Product not found")
    if not owns(request.account, product.get("seller")):
        raise NotAuthenticated(f"You are not authorized to {action} this product.")
    return product


@protect(SELLER)
def create_seller_product(request):
    data = read_payload(request)
    if any(not data.get(f) for f in REQUIRED_FIELDS) or data.get("countInStock") in (None, ""):
        raise ValidationError("Please fill all required fields, including city")
    if not request.FILES.get("image"):
        raise ValidationError("Main product image is required.")

    stored = store_uploads(request, SELLER_PRODUCT_UPLOADS)
    find_or_create(BRANDS, data["brand"])
    find_or_create(CATEGORIES, data["category"])

    product = insert(SELLER_PRODUCTS, {
        "seller": request.account["_id"],
        "name": data["name"].strip(),
        "description": data.get("description"),
        "brand": data["brand"],
        "category": data["category"],
        "price": to_float(data["price"]),
        "salePrice": to_float(data.get("salePrice"), 0),
        "countInStock": to_int(data["countInStock"], 0),
        "image": first(stored, "image"),
        "images": stored.get("images", []),
        "city": data["city"],
        "status": "Approved",
        "isApproved": True,
    })
    logger.info(f"Seller product {product['_id']} created by {request.account['_id']}")
    return json_response(product, status=201)


@protect(SELLER)
def list_my_seller_products(request):
    products = collection(SELLER_PRODUCTS).find({"seller": request.account["_id"]}).sort("createdAt", DESCENDING)
    return json_response(list(products))


@protect()
def update_seller_product(request, product_id):
    product = _owned_product(request, product_id, "update")
    data = read_payload(request)

    find_or_create(BRANDS, data.get("brand"))
    find_or_create(CATEGORIES, data.get("category"))

    changes = {f: data[f] for f in ("name", "description", "brand", "category", "city") if data.get(f)}
    for field in ("price", "salePrice"):
        if data.get(field) not in (None, ""):
            changes[field] = to_float(data[field])
    if data.get("countInStock") not in (None, ""):
        changes["countInStock"] = to_int(data["countInStock"], product.get("countInStock", 0))

    stored = store_uploads(request, SELLER_PRODUCT_UPLOADS)
    if stored.get("image"):
        changes["image"] = first(stored, "image")
    if stored.get("images"):
        changes["images"] = stored["images"]
    changes.update(status="Approved", isApproved=True)

    return json_response(update_fields(SELLER_PRODUCTS, product["_id"], changes))


@protect()
def delete_seller_product(request, product_id):
    product = _owned_product(request, product_id, "delete")
    collection(SELLER_PRODUCTS).delete_one({"_id": product["_id"]})
    logger.info(f"Seller product {product['_id']} deleted by {request.account['_id']}")
    return message_response("Product removed successfully.")


@protect(SELLER)
def list_brands(request):
    return json_response(list(collection(BRANDS).find({}).sort("name", ASCENDING)))


@protect(SELLER)
def list_categories(request):
    return json_response(list(collection(CATEGORIES).find({}).sort("name", ASCENDING)))


def list_public_seller_products(request):
    page, limit = pagination(request.GET)

    query = {"isApproved": True}
    city = request.GET.get("city")
    if city and city.strip():
        query["city"] = exact_name(city)

    coll = collection(SELLER_PRODUCTS)
    count = coll.count_documents(query)
    products = list(coll.find(query).sort("createdAt", DESCENDING).skip(limit * (page - 1)).limit(limit))
    expand_refs(products, "seller", USERS, SELLER_PROFILE)
    return json_response({
        "products": products,
        "page": page,
        "pages": page_count(count, limit),
        "totalProducts": count,
    })
