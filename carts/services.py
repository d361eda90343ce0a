from bson import ObjectId
from pymongo import ReturnDocument

from catalog.models import PRODUCTS, PROFESSIONAL_PLANS, effective_price, product_name
from houseplans_backend.documents import update_fields, utcnow
from houseplans_backend.mongo_config import collection

from .models import CART_PRODUCT_FIELDS


def get_or_create(collection_name, user_id):
    """Every user owns exactly one cart and one wishlist, created on first use."""
    now = utcnow()
    return collection(collection_name).find_one_and_update(
        {"user": user_id},
        {"$setOnInsert": {"items": [], "createdAt": now, "updatedAt": now}},
        upsert=True,
        return_document=ReturnDocument.AFTER,
    )


def save_items(collection_name, doc, items):
    return update_fields(collection_name, doc["_id"], {"items": items})


def without_item(items, product_id):
    return [item for item in items if str(item.get("productId")) != str(product_id)]


def cart_line(product, quantity, size=None):
    return {
        "productId": product["_id"],
        "name": product_name(product),
        "quantity": quantity,
        "price": effective_price(product),
        "salePrice": product.get("salePrice"),
        "isSale": bool(product.get("isSale")),
        "taxRate": product.get("taxRate", 0),
        "discountPercentage": product.get("discountPercentage", 0),
        "image": product.get("mainImage"),
        "size": size or product.get("plotSize"),
    }


def with_products(cart):
    """Returns the cart with each line's ``productId`` expanded to the product summary."""
    ids = [item["productId"] for item in cart.get("items", [])]
    found = {p["_id"]: p for p in collection(PRODUCTS).find({"_id": {"$in": ids}}, CART_PRODUCT_FIELDS)}
    items = [{**item, "productId": found.get(item["productId"], item["productId"])} for item in cart.get("items", [])]
    return {**cart, "items": items}


def wishlist_item(product_id):
    """
    Looks the id up as a catalog product, then as a professional plan.
    Returns None when it is neither.
    """
    if not ObjectId.is_valid(str(product_id)):
        return None
    for collection_name in (PRODUCTS, PROFESSIONAL_PLANS):
        doc = collection(collection_name).find_one({"_id": ObjectId(str(product_id))})
        if doc:
            return {
                "productId": doc["_id"],
                "name": product_name(doc),
                "price": doc.get("price"),
                "salePrice": doc.get("salePrice"),
                "image": doc.get("mainImage") or doc.get("image"),
                "size": doc.get("plotSize"),
            }
    return None
